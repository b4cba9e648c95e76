"""Turn a card name plus generated assets into a :class:`CardData` record."""

import re
from typing import List, Optional

from .config import PipelineConfig
from .models import CardData, CardStats, ManaCostItem

_NAME_SEPARATORS = re.compile(r"[-_\s]")
_NON_SLUG = re.compile(r"[^a-z0-9]")

# Presentation constants for the three cost orbs; not derived from the theme.
MANA_ORB_COLORS = {
    "hp": "radial-gradient(circle, #dc143c, #8b0000)",
    "mana": "radial-gradient(circle, #4169e1, #0000cd)",
    "terrain": "radial-gradient(circle, #32cd32, #228b22)",
}
MANA_TEXT_COLOR = "#ffffff"


def _name_tokens(name: str) -> List[str]:
    return [token for token in _NAME_SEPARATORS.split(name) if token]


def slugify(name: str) -> str:
    """Lowercase ``name`` and drop everything that is not ``a-z`` or ``0-9``."""
    return _NON_SLUG.sub("", name.lower())


def display_name(name: str) -> str:
    """``ancient-red_dragon`` -> ``Ancient Red Dragon``."""
    return " ".join(token[0].upper() + token[1:] for token in _name_tokens(name))


def theme_key(name: str) -> str:
    """``Ancient Red Dragon`` -> ``ancientRedDragon``."""
    tokens = _name_tokens(name)
    if not tokens:
        return ""
    head, *rest = tokens
    return head.lower() + "".join(token[0].upper() + token[1:].lower() for token in rest)


def image_filename_for(name: str) -> str:
    """Filename stem for a generated image: non-alphanumerics become underscores."""
    return re.sub(r"[^a-z0-9]", "_", name.lower())


def _mana_cost(config: PipelineConfig) -> List[ManaCostItem]:
    stats = config.defaults
    values = {"hp": stats.hp, "mana": stats.mana_cost, "terrain": stats.terrain}
    return [
        ManaCostItem(
            type=cost_type,
            value=values[cost_type],
            color=MANA_ORB_COLORS[cost_type],
            text_color=MANA_TEXT_COLOR,
        )
        for cost_type in ("hp", "mana", "terrain")
    ]


def build_card_data(
    name: str,
    image_filename: str,
    flavor_text: Optional[str],
    config: PipelineConfig,
) -> CardData:
    """Build the canonical card record.

    ``image_filename`` is the file name (with extension) of the card art; it
    is published under the collection's image base path. A missing or empty
    ``flavor_text`` is replaced by the configured fallback sentence.
    """

    shown_name = display_name(name)
    collection = config.collection
    return CardData(
        id=slugify(name),
        name=shown_name,
        subtitle=collection.subtitle,
        level=config.defaults.level,
        theme=theme_key(name),
        mana_cost=_mana_cost(config),
        image=f"{collection.image_base_path}/{image_filename}",
        type=collection.card_type,
        stats=CardStats(attack=config.defaults.attack, defense=config.defaults.defense),
        flavor_text=flavor_text or config.fallback_flavor_text(shown_name),
        artist=collection.artist,
        rarity=collection.rarity,
    )
