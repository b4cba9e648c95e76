"""Where card art comes from: a local folder or the image generation API."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .cards import image_filename_for
from .client import ImageGenerator
from .config import PipelineConfig
from .image_utils import list_images
from .utils import ImageGenerationFailed, ensure_directory, get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CardInput:
    """One card to produce.

    ``filename`` is the stem used for the image file. Local inputs carry
    ``image_path``; generated inputs carry the ``prompt`` for the art.
    """

    card_name: str
    filename: str
    image_path: Optional[Path] = None
    prompt: Optional[str] = None


class ImageSource(Protocol):
    async def acquire(self, card: CardInput) -> Path:
        """Return a path to the card art or raise ImageGenerationFailed."""
        ...


def scan_image_directory(directory: Path, limit: int) -> List[CardInput]:
    """Turn every supported image in ``directory`` into a card named after its stem."""

    return [
        CardInput(card_name=path.stem, filename=path.stem, image_path=path)
        for path in list_images(directory, limit)
    ]


def generated_inputs(names: Sequence[str], config: PipelineConfig) -> List[CardInput]:
    return [
        CardInput(card_name=name, filename=image_filename_for(name), prompt=config.image_prompt(name))
        for name in names
    ]


def custom_prompt_inputs(prompts: Sequence[str], count: int) -> List[CardInput]:
    inputs = []
    for index, prompt in enumerate(prompts[:count], start=1):
        name = f"custom_{index}"
        inputs.append(CardInput(card_name=name, filename=name, prompt=prompt))
    return inputs


class LocalImageSource:
    async def acquire(self, card: CardInput) -> Path:
        if card.image_path is None or not card.image_path.is_file():
            raise ImageGenerationFailed(f"image file for {card.card_name} not found")
        return card.image_path


class GeneratedImageSource:
    """Generate art for a card, save it as PNG and return the saved path."""

    def __init__(
        self,
        generator: ImageGenerator,
        image_dir: Path,
        pause_seconds: float = 0.0,
        sleep=asyncio.sleep,
    ) -> None:
        self.generator = generator
        self.image_dir = image_dir
        self.pause_seconds = pause_seconds
        self._sleep = sleep

    async def acquire(self, card: CardInput) -> Path:
        if not card.prompt:
            raise ImageGenerationFailed(f"no prompt for {card.card_name}")

        LOGGER.info("Generating image for %s", card.card_name)
        LOGGER.debug("Prompt: %s", card.prompt)
        payload = await self.generator.generate(card.prompt)

        try:
            image_path = ensure_directory(self.image_dir) / f"{card.filename}.png"
            await asyncio.to_thread(image_path.write_bytes, payload)
        except OSError as exc:
            raise ImageGenerationFailed(f"could not save image for {card.card_name}: {exc}") from exc
        LOGGER.info("Image saved: %s", image_path.name)

        if self.pause_seconds:
            # Brief pause before palette extraction.
            await self._sleep(self.pause_seconds)
        return image_path
