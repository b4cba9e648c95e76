"""Marketplace metadata for the 1/1 and common editions of a card."""

from typing import List

from .colors import format_label
from .config import PipelineConfig
from .models import CardData, CardMetadata, MetadataAttribute


def _attribute(trait_type: str, value: str) -> MetadataAttribute:
    return MetadataAttribute(trait_type=trait_type, value=value)


def build_attributes(card: CardData, rarity: str, collection: str) -> List[MetadataAttribute]:
    # Consumers read these positionally, so the order must not change.
    attributes = [_attribute("Rarity", rarity), _attribute("Level", card.level)]
    if card.stats is not None:
        attributes.append(_attribute("Attack", card.stats.attack))
        attributes.append(_attribute("Defense", card.stats.defense))
    attributes.extend(
        [
            _attribute("Theme", format_label(card.theme)),
            _attribute("Type", card.type),
            _attribute("Artist", card.artist),
            _attribute("Collection", collection),
        ]
    )
    if len(card.mana_cost) == 3:
        hp, mana, terrain = card.mana_cost
        attributes.extend(
            [
                _attribute("Health Points", hp.value),
                _attribute("Mana Cost", mana.value),
                _attribute("Terrain", terrain.value),
            ]
        )
    return attributes


def build_metadata(card: CardData, is_1of1: bool, config: PipelineConfig) -> CardMetadata:
    info = config.collection
    rarity = "1/1" if is_1of1 else "Common"
    edition = "1/1 Legendary" if is_1of1 else "Common"
    show_rarity = "true" if is_1of1 else "false"

    return CardMetadata(
        name=f"{card.name} {card.subtitle}".strip(),
        description=f"{edition} Card from the {info.collection}. {card.flavor_text}",
        image=f"{info.base_url}{card.image}",
        animation_url=f"{info.base_url}/card.html?id={card.id}&showRarity={show_rarity}",
        external_url=info.external_url,
        attributes=build_attributes(card, rarity, info.collection),
    )
