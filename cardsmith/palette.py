"""Palette extraction.

The pipeline only depends on the :class:`PaletteExtractor` protocol. The
default :class:`VibrantPaletteExtractor` quantizes the image with Pillow and
scores every quantized color against six lightness/saturation targets, the
same way vibrant-style extractors pick their named swatches.
"""
from __future__ import annotations

import asyncio
import colorsys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from PIL import Image, UnidentifiedImageError

from .models import Palette
from .utils import PaletteExtractionFailed, get_logger

LOGGER = get_logger(__name__)


class PaletteExtractor(Protocol):
    async def extract(self, image_path: Path) -> Palette:
        """Return the palette for ``image_path`` or raise PaletteExtractionFailed."""
        ...


@dataclass(frozen=True)
class SwatchTarget:
    name: str
    target_luma: float
    min_luma: float
    max_luma: float
    target_saturation: float
    min_saturation: float
    max_saturation: float


# Picked in this order; a color claimed by one target is not reused.
SWATCH_TARGETS: Tuple[SwatchTarget, ...] = (
    SwatchTarget("vibrant", 0.5, 0.3, 0.7, 1.0, 0.35, 1.0),
    SwatchTarget("light_vibrant", 0.74, 0.55, 1.0, 1.0, 0.35, 1.0),
    SwatchTarget("dark_vibrant", 0.26, 0.0, 0.45, 1.0, 0.35, 1.0),
    SwatchTarget("muted", 0.5, 0.3, 0.7, 0.3, 0.0, 0.4),
    SwatchTarget("light_muted", 0.74, 0.55, 1.0, 0.3, 0.0, 0.4),
    SwatchTarget("dark_muted", 0.26, 0.0, 0.45, 0.3, 0.0, 0.4),
)

WEIGHT_SATURATION = 3.0
WEIGHT_LUMA = 6.5
WEIGHT_POPULATION = 0.5


@dataclass
class Swatch:
    rgb: Tuple[int, int, int]
    population: int

    @property
    def hls(self) -> Tuple[float, float, float]:
        r, g, b = self.rgb
        return colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)

    @property
    def hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*self.rgb)


def _quantized_swatches(image_path: Path, max_colors: int, sample_size: int) -> List[Swatch]:
    with Image.open(image_path) as img:
        img = img.convert("RGB")
        img.thumbnail((sample_size, sample_size), Image.LANCZOS)
        quantized = img.quantize(colors=max_colors, method=Image.Quantize.MEDIANCUT)

    palette = quantized.getpalette() or []
    swatches: List[Swatch] = []
    for count, index in quantized.getcolors(maxcolors=max_colors) or []:
        r, g, b = palette[index * 3 : index * 3 + 3]
        swatches.append(Swatch(rgb=(r, g, b), population=count))
    return swatches


def _score(swatch: Swatch, target: SwatchTarget, max_population: int) -> float:
    _, luma, saturation = swatch.hls
    saturation_score = 1.0 - abs(saturation - target.target_saturation)
    luma_score = 1.0 - abs(luma - target.target_luma)
    population_score = swatch.population / max_population if max_population else 0.0
    total = WEIGHT_SATURATION + WEIGHT_LUMA + WEIGHT_POPULATION
    return (
        saturation_score * WEIGHT_SATURATION
        + luma_score * WEIGHT_LUMA
        + population_score * WEIGHT_POPULATION
    ) / total


def select_swatches(swatches: List[Swatch]) -> Dict[str, Optional[str]]:
    """Assign quantized colors to the six named targets."""

    max_population = max((s.population for s in swatches), default=0)
    used: set[Tuple[int, int, int]] = set()
    selected: Dict[str, Optional[str]] = {}

    for target in SWATCH_TARGETS:
        best: Optional[Swatch] = None
        best_score = -1.0
        for swatch in swatches:
            if swatch.rgb in used:
                continue
            _, luma, saturation = swatch.hls
            if not (target.min_luma <= luma <= target.max_luma):
                continue
            if not (target.min_saturation <= saturation <= target.max_saturation):
                continue
            score = _score(swatch, target, max_population)
            if score > best_score:
                best, best_score = swatch, score
        if best is not None:
            used.add(best.rgb)
        selected[target.name] = best.hex if best else None

    return selected


class VibrantPaletteExtractor:
    """Pillow-based extractor returning the six vibrant/muted swatches."""

    def __init__(self, max_colors: int = 64, sample_size: int = 128) -> None:
        self.max_colors = max_colors
        self.sample_size = sample_size

    def extract_sync(self, image_path: Path) -> Palette:
        try:
            swatches = _quantized_swatches(image_path, self.max_colors, self.sample_size)
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError) as exc:
            raise PaletteExtractionFailed(f"could not read colors from {image_path.name}: {exc}") from exc

        if not swatches:
            raise PaletteExtractionFailed(f"no colors found in {image_path.name}")

        palette = Palette(**select_swatches(swatches))
        LOGGER.debug("Palette for %s: %s", image_path.name, palette.model_dump(by_alias=True))
        return palette

    async def extract(self, image_path: Path) -> Palette:
        return await asyncio.to_thread(self.extract_sync, image_path)
