"""Sequential card pipeline.

Per card: image -> palette -> flavor text -> theme -> card data -> metadata.
Cards are processed strictly one after another with a fixed delay between
them; external APIs are rate limited and must never see parallel requests.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

import httpx

from .cards import build_card_data
from .client import ImageGenerator
from .config import PipelineConfig
from .image_utils import art_filename, mime_type_for
from .metadata import build_metadata
from .monsters import fetch_monster_names, pick_monster_names
from .models import PipelineResult
from .palette import PaletteExtractor
from .sources import CardInput, ImageSource
from .theme import build_theme
from .utils import ImageGenerationFailed, NoCardsGenerated, PipelineError, ensure_directory, get_logger

LOGGER = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class FlavorTextSource(Protocol):
    async def generate(self, image_bytes: bytes, mime_type: str) -> Optional[str]:
        ...


class CardPipeline:
    def __init__(
        self,
        config: PipelineConfig,
        image_source: ImageSource,
        palette_extractor: PaletteExtractor,
        flavor_text: FlavorTextSource,
        delay_seconds: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.image_source = image_source
        self.palette_extractor = palette_extractor
        self.flavor_text = flavor_text
        self.delay_seconds = config.delay_seconds if delay_seconds is None else delay_seconds
        self._sleep = sleep
        self.running = True

    def stop(self) -> None:
        """Finish the card in flight, then stop."""
        if self.running:
            LOGGER.warning("Stop requested; finishing the current card")
        self.running = False

    async def _read_image(self, image_path: Path) -> bytes:
        try:
            return await asyncio.to_thread(image_path.read_bytes)
        except OSError as exc:
            raise ImageGenerationFailed(f"could not read {image_path.name}: {exc}") from exc

    async def process_card(self, card: CardInput) -> Optional[PipelineResult]:
        """Produce every record for one card, or ``None`` if the card had to be skipped."""

        try:
            image_path = await self.image_source.acquire(card)

            LOGGER.info("Extracting color palette for %s", card.card_name)
            palette = await self.palette_extractor.extract(image_path)

            LOGGER.info("Generating flavor text for %s", card.card_name)
            image_bytes = await self._read_image(image_path)
            flavor = await self.flavor_text.generate(image_bytes, mime_type_for(image_path))
            if flavor is None:
                LOGGER.warning("Using default flavor text for %s", card.card_name)
            else:
                LOGGER.info("Flavor text: %s", flavor)
        except PipelineError as error:
            LOGGER.warning("Skipping %s: %s", card.card_name, error)
            return None

        theme = build_theme(palette, card.card_name)
        card_data = build_card_data(card.card_name, image_path.name, flavor, self.config)
        result = PipelineResult(
            card_name=card.card_name,
            filename=card.filename,
            image_path=image_path,
            theme=theme,
            card_data=card_data,
            metadata_1of1=build_metadata(card_data, True, self.config),
            metadata_common=build_metadata(card_data, False, self.config),
        )
        LOGGER.info("Card complete: %s", card_data.name)
        return result

    async def run(self, cards: Sequence[CardInput]) -> List[PipelineResult]:
        """Process ``cards`` in order and return the successful results.

        Raises:
            NoCardsGenerated: if nothing succeeded and the run was not stopped
        """

        results: List[PipelineResult] = []
        total = len(cards)
        batch_size = self.config.batch_size

        for index, card in enumerate(cards, start=1):
            if not self.running:
                break

            LOGGER.info("Card %d/%d: %s", index, total, card.card_name)
            result = await self.process_card(card)
            if result is not None:
                results.append(result)

            LOGGER.info("[%d/%d] Progress: %d%%", index, total, round(index / total * 100))
            if index % batch_size == 0 or index == total:
                LOGGER.info(
                    "Batch %d done: %d/%d cards succeeded so far",
                    (index - 1) // batch_size + 1,
                    len(results),
                    index,
                )

            if index < total and self.running:
                LOGGER.info("Waiting %.1fs before next card", self.delay_seconds)
                await self._sleep(self.delay_seconds)

        if not results and self.running:
            raise NoCardsGenerated("No cards were successfully generated")
        return results


class ArtLoop:
    """Free-running art generator: random monster, one image, repeat until stopped."""

    def __init__(self, config: PipelineConfig, generator: ImageGenerator, sleep: Sleep = asyncio.sleep) -> None:
        self.config = config
        self.generator = generator
        self._sleep = sleep
        self._names: List[str] = []
        self.running = True

    def stop(self) -> None:
        if self.running:
            LOGGER.warning("Caught interrupt signal. Shutting down gracefully...")
        self.running = False

    async def run_once(self, http: httpx.AsyncClient) -> Optional[Path]:
        """Generate and save one image. Returns the saved path, or ``None`` on failure."""

        try:
            if not self._names:
                self._names = await fetch_monster_names(http, self.config.monster_api_url)
            name = pick_monster_names(self._names, 1)[0]
            LOGGER.info("Selected random monster: %s", name)
            payload = await self.generator.generate(self.config.image_prompt(name))

            image_dir = ensure_directory(self.config.generated_image_dir)
            image_path = image_dir / art_filename(name)
            await asyncio.to_thread(image_path.write_bytes, payload)
        except (httpx.HTTPError, OSError, ValueError, KeyError, ImageGenerationFailed) as exc:
            LOGGER.warning("Skipping this cycle: %s", exc)
            return None

        LOGGER.info("Saved image to %s", image_path)
        return image_path

    async def run(self, http: httpx.AsyncClient) -> int:
        saved = 0
        while self.running:
            if await self.run_once(http) is not None:
                saved += 1
            if self.running:
                await self._sleep(self.config.art_loop_pause_seconds)
        return saved
