"""OpenAI-backed collaborators: flavor text (vision) and card art (images)."""

import base64
import binascii
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from .image_utils import bytes_to_data_url
from .utils import ImageGenerationFailed, get_logger

LOGGER = get_logger(__name__)


def clean_flavor_text(text: str) -> str:
    """Strip whitespace and wrapping quotes the model likes to add."""
    text = text.strip()
    for quote in ('"', "“", "'"):
        closing = "”" if quote == "“" else quote
        if len(text) >= 2 and text.startswith(quote) and text.endswith(closing):
            text = text[1:-1].strip()
    return text


def _extract_text_from_responses(response: Any) -> str:
    """Extract the text blob from a Responses API response."""
    try:
        text = None
        for item in response.output:
            if item.type == "message":
                for content in item.content:
                    if content.type == "output_text":
                        text = content.text
                        break
            if text is not None:
                break
    except Exception as exc:
        raise RuntimeError("Unexpected response structure from OpenAI Responses API.") from exc

    if not text:
        raise RuntimeError("Model returned no text.")
    return text


def _extract_text_from_chat(response: Any) -> str:
    """Extract the text blob from a Chat Completions response."""
    try:
        content = response.choices[0].message.content
        if isinstance(content, list):
            # Multi-part message; concatenate any text parts
            content = "".join(part.get("text", "") for part in content if isinstance(part, dict))
    except Exception as exc:
        raise RuntimeError("Unexpected response structure from OpenAI Chat API.") from exc

    if not content:
        raise RuntimeError("Model returned no text.")
    return content


def _responses_input_to_messages(request_input: Any) -> Any:
    messages = []
    for item in request_input:
        contents = []
        for content in item["content"]:
            if content["type"] == "input_text":
                contents.append({"type": "text", "text": content["text"]})
            elif content["type"] == "input_image":
                contents.append({"type": "image_url", "image_url": {"url": content["image_url"]}})
        messages.append({"role": item["role"], "content": contents})
    return messages


async def _create_response_with_fallback(client: AsyncOpenAI, request_kwargs: Dict[str, Any]) -> str:
    """Attempt a Responses API call, falling back to Chat Completions when unsupported."""

    responses = getattr(client, "responses", None)
    if responses is not None:
        try:
            response = await responses.create(**request_kwargs)
            return _extract_text_from_responses(response)
        except (TypeError, AttributeError) as exc:
            LOGGER.debug("Responses API unavailable (%s); using chat completions", exc)

    chat_kwargs: Dict[str, Any] = {
        "model": request_kwargs["model"],
        "messages": _responses_input_to_messages(request_kwargs["input"]),
    }
    if "max_output_tokens" in request_kwargs:
        chat_kwargs["max_tokens"] = request_kwargs["max_output_tokens"]

    response = await client.chat.completions.create(**chat_kwargs)
    return _extract_text_from_chat(response)


class FlavorTextGenerator:
    """Ask a vision model for one or two sentences of flavor text."""

    def __init__(self, client: AsyncOpenAI, model: str, prompt: str, max_output_tokens: int = 200) -> None:
        self.client = client
        self.model = model
        self.prompt = prompt
        self.max_output_tokens = max_output_tokens

    async def generate(self, image_bytes: bytes, mime_type: str) -> Optional[str]:
        """Return flavor text for the image, or ``None`` if the model is unavailable."""

        request_kwargs: Dict[str, Any] = {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_image", "image_url": bytes_to_data_url(image_bytes, mime_type)},
                        {"type": "input_text", "text": self.prompt},
                    ],
                },
            ],
            "max_output_tokens": self.max_output_tokens,
        }

        try:
            text = await _create_response_with_fallback(self.client, request_kwargs)
        except Exception as exc:  # API failures degrade to the fallback text
            LOGGER.warning("Flavor text generation failed: %s", exc)
            return None

        cleaned = clean_flavor_text(text)
        return cleaned or None


class ImageGenerator:
    """Generate a single PNG for a prompt with the OpenAI Images API."""

    def __init__(self, client: AsyncOpenAI, model: str, size: str) -> None:
        self.client = client
        self.model = model
        self.size = size

    async def generate(self, prompt: str) -> bytes:
        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=self.size,
                response_format="b64_json",
            )
        except Exception as exc:
            raise ImageGenerationFailed(f"image generation request failed: {exc}") from exc

        data = getattr(response, "data", None) or []
        payload = getattr(data[0], "b64_json", None) if data else None
        if not payload:
            # Usually a content policy rejection.
            raise ImageGenerationFailed("image generation returned no image data")

        try:
            return base64.b64decode(payload)
        except (binascii.Error, ValueError) as exc:
            raise ImageGenerationFailed("image generation returned invalid base64 data") from exc
