import re
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_pascal

SLUG_PATTERN = re.compile(r"^[a-z0-9]*$")
MANA_COST_TYPES = ("hp", "mana", "terrain")
THEME_REGIONS = (
    "background",
    "header",
    "imageArea",
    "typeSection",
    "flavorText",
    "bottomSection",
    "stat",
    "rarity",
)


class _CamelModel(BaseModel):
    """Frozen model serialized with camelCase keys for the card frontend."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ThemeColors(_CamelModel):
    """The six palette colors with every fallback applied."""

    vibrant: str
    dark_vibrant: str
    light_vibrant: str
    muted: str
    dark_muted: str
    light_muted: str


SWATCH_DEFAULTS: Dict[str, str] = {
    "vibrant": "#808080",
    "dark_vibrant": "#404040",
    "light_vibrant": "#c0c0c0",
    "muted": "#808080",
    "dark_muted": "#404040",
    "light_muted": "#c0c0c0",
}


class Palette(BaseModel):
    """Swatches extracted from an image. Any of them may be missing.

    Field aliases follow the swatch names used by vibrant-style extractors
    (``Vibrant``, ``DarkVibrant``, ...).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_pascal,
    )

    vibrant: Optional[str] = None
    dark_vibrant: Optional[str] = None
    light_vibrant: Optional[str] = None
    muted: Optional[str] = None
    dark_muted: Optional[str] = None
    light_muted: Optional[str] = None

    def resolve(self) -> ThemeColors:
        values = {
            name: getattr(self, name) or default for name, default in SWATCH_DEFAULTS.items()
        }
        return ThemeColors(**values)


class CardTheme(_CamelModel):
    name: str
    colors: ThemeColors
    theme: Dict[str, Dict[str, str]]

    @field_validator("theme")
    @classmethod
    def _all_regions_present(cls, value: Dict[str, Dict[str, str]]) -> Dict[str, Dict[str, str]]:
        missing = [region for region in THEME_REGIONS if region not in value]
        if missing:
            raise ValueError(f"theme is missing regions: {', '.join(missing)}")
        return value


class ManaCostItem(_CamelModel):
    type: str
    value: str
    color: str
    text_color: str


class CardStats(_CamelModel):
    attack: str
    defense: str


class CardData(_CamelModel):
    """Canonical record for one generated card."""

    id: str
    name: str
    subtitle: str
    level: str
    theme: str
    mana_cost: List[ManaCostItem]
    image: str
    type: str
    stats: Optional[CardStats] = None
    flavor_text: str
    artist: str
    rarity: str

    @field_validator("id")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if not SLUG_PATTERN.match(value):
            raise ValueError(f"card id must be lowercase alphanumeric, got {value!r}")
        return value

    @field_validator("mana_cost")
    @classmethod
    def _check_mana_cost(cls, value: List[ManaCostItem]) -> List[ManaCostItem]:
        if tuple(item.type for item in value) != MANA_COST_TYPES:
            raise ValueError("manaCost must contain exactly hp, mana and terrain, in that order")
        return value


class MetadataAttribute(BaseModel):
    model_config = ConfigDict(frozen=True)

    trait_type: str
    value: str


class CardMetadata(BaseModel):
    """Marketplace metadata document for one rarity variant of a card."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    image: str
    animation_url: str
    external_url: str
    attributes: List[MetadataAttribute] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json")


class PipelineResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    card_name: str
    filename: str
    image_path: Path
    theme: CardTheme
    card_data: CardData
    metadata_1of1: CardMetadata
    metadata_common: CardMetadata
