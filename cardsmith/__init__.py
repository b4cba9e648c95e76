"""Trading card asset generation: palettes, themes, card data and metadata."""

from .models import (
    CardData,
    CardMetadata,
    CardStats,
    CardTheme,
    ManaCostItem,
    MetadataAttribute,
    Palette,
    PipelineResult,
    ThemeColors,
)
from .colors import best_text_color, format_label, hex_to_rgba
from .config import CollectionInfo, DefaultStats, PipelineConfig, load_config
from .theme import build_theme
from .cards import build_card_data, display_name, slugify, theme_key
from .metadata import build_metadata
from .palette import PaletteExtractor, VibrantPaletteExtractor
from .client import FlavorTextGenerator, ImageGenerator
from .sources import CardInput, GeneratedImageSource, LocalImageSource, scan_image_directory
from .pipeline import ArtLoop, CardPipeline
from .writer import OutputWriter
from .utils import ImageGenerationFailed, NoCardsGenerated, PaletteExtractionFailed, PipelineError
from .cli import main

__all__ = [
    "CardData",
    "CardMetadata",
    "CardStats",
    "CardTheme",
    "ManaCostItem",
    "MetadataAttribute",
    "Palette",
    "PipelineResult",
    "ThemeColors",
    "best_text_color",
    "format_label",
    "hex_to_rgba",
    "CollectionInfo",
    "DefaultStats",
    "PipelineConfig",
    "load_config",
    "build_theme",
    "build_card_data",
    "display_name",
    "slugify",
    "theme_key",
    "build_metadata",
    "PaletteExtractor",
    "VibrantPaletteExtractor",
    "FlavorTextGenerator",
    "ImageGenerator",
    "CardInput",
    "GeneratedImageSource",
    "LocalImageSource",
    "scan_image_directory",
    "ArtLoop",
    "CardPipeline",
    "OutputWriter",
    "ImageGenerationFailed",
    "NoCardsGenerated",
    "PaletteExtractionFailed",
    "PipelineError",
    "main",
]
