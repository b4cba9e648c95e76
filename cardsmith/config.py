"""Static configuration for a card generation run.

A single :class:`PipelineConfig` is built at startup (defaults, optionally
overlaid with a JSON file and CLI flags) and handed to every component.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .prompts import DEFAULT_CUSTOM_PROMPTS, FLAVOR_TEXT_PROMPT, IMAGE_PROMPT_TEMPLATE

ASPECT_RATIO_SIZES: Dict[str, str] = {
    "1:1": "1024x1024",
    "16:9": "1792x1024",
    "4:3": "1792x1024",
    "9:16": "1024x1792",
    "3:4": "1024x1792",
}

SUPPORTED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


class DefaultStats(BaseModel):
    """Stat values stamped onto every generated card."""

    model_config = ConfigDict(frozen=True)

    level: str = "1"
    attack: str = "3"
    defense: str = "3"
    hp: str = "5"
    mana_cost: str = "2"
    terrain: str = "?"


class CollectionInfo(BaseModel):
    """Collection-wide strings used in card data and metadata."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://howlonghasitben.github.io/surf-works"
    external_url: str = "https://howlonghasitben.github.io/surf-works"
    image_base_path: str = "/images/card-images"
    artist: str = "SURF FINANCE STUDIOS"
    collection: str = "Waves Collection"
    subtitle: str = "⟨Generated⟩"
    card_type: str = "Creature — Generated"
    rarity: str = "1/1"


class PipelineConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_dir: Path = Path("input_dir")
    output_dir: Path = Path("generated-cards")
    image_output_dir: Optional[Path] = None
    module_format: str = "js"

    image_model: str = "dall-e-3"
    text_model: str = "gpt-4o-mini"
    image_aspect_ratio: str = "16:9"

    delay_seconds: float = Field(default=4.0, ge=0)
    image_delay_seconds: float = Field(default=5.0, ge=0)
    palette_pause_seconds: float = Field(default=1.0, ge=0)
    art_loop_pause_seconds: float = Field(default=2.0, ge=0)

    batch_size: int = Field(default=20, ge=1)
    max_images: int = Field(default=300, ge=1)
    number_of_cards: int = Field(default=10, ge=1)

    monster_api_url: str = "https://www.dnd5eapi.co/api/monsters"
    image_prompt_template: str = IMAGE_PROMPT_TEMPLATE
    flavor_text_prompt: str = FLAVOR_TEXT_PROMPT
    fallback_flavor_template: str = "The legendary {name} rises to challenge all who dare."
    custom_prompts: List[str] = Field(default_factory=lambda: list(DEFAULT_CUSTOM_PROMPTS))

    defaults: DefaultStats = Field(default_factory=DefaultStats)
    collection: CollectionInfo = Field(default_factory=CollectionInfo)

    @field_validator("image_aspect_ratio")
    @classmethod
    def _check_aspect_ratio(cls, value: str) -> str:
        if value not in ASPECT_RATIO_SIZES:
            raise ValueError(
                f"unsupported aspect ratio {value!r}; choose one of {', '.join(ASPECT_RATIO_SIZES)}"
            )
        return value

    @field_validator("module_format")
    @classmethod
    def _check_module_format(cls, value: str) -> str:
        if value not in ("js", "json"):
            raise ValueError("module_format must be 'js' or 'json'")
        return value

    @property
    def image_size(self) -> str:
        return ASPECT_RATIO_SIZES[self.image_aspect_ratio]

    @property
    def generated_image_dir(self) -> Path:
        return self.image_output_dir or self.output_dir / "generated-images"

    def image_prompt(self, name: str) -> str:
        return self.image_prompt_template.format(name=name)

    def fallback_flavor_text(self, display_name: str) -> str:
        return self.fallback_flavor_template.format(name=display_name)


def load_config(path: Optional[Path] = None) -> PipelineConfig:
    """Build the run configuration, reading overrides from a JSON file if given."""

    if path is None:
        return PipelineConfig()
    with path.open("r", encoding="utf8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")
    return PipelineConfig.model_validate(data)
