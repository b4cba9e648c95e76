import json
from pathlib import Path

from cardsmith.cards import build_card_data
from cardsmith.metadata import build_metadata
from cardsmith.models import Palette, PipelineResult
from cardsmith.theme import build_theme
from cardsmith.writer import OutputWriter


def _result(name: str, image: str, config) -> PipelineResult:
    card = build_card_data(name, image, f"{name} roars.", config)
    return PipelineResult(
        card_name=name,
        filename=Path(image).stem,
        image_path=Path(image),
        theme=build_theme(Palette(Vibrant="#aa2200"), name),
        card_data=card,
        metadata_1of1=build_metadata(card, True, config),
        metadata_common=build_metadata(card, False, config),
    )


def _module_json(path: Path, export_name: str):
    text = path.read_text(encoding="utf8")
    prefix = f"export const {export_name} = "
    body = text.split(prefix, 1)[1].rstrip().rstrip(";")
    return json.loads(body)


def test_write_all_produces_every_file(tmp_path, config):
    results = [_result("Ancient Red Dragon", "ancient_red_dragon.png", config), _result("owl-bear", "owl-bear.jpg", config)]
    writer = OutputWriter(tmp_path / "out")

    writer.write_all(results)

    themes = _module_json(tmp_path / "out" / "generatedThemes.js", "GENERATED_THEMES")
    assert list(themes) == ["ancientRedDragon", "owlBear"]
    assert set(themes["owlBear"]) >= {"background", "header", "rarity"}

    cards = _module_json(tmp_path / "out" / "generatedCardData.js", "GENERATED_CARDS")
    assert [card["id"] for card in cards] == ["ancientreddragon", "owlbear"]
    assert cards[0]["manaCost"][0]["type"] == "hp"

    flavor = json.loads((tmp_path / "out" / "flavorTexts.json").read_text(encoding="utf8"))
    assert flavor == {
        "ancient_red_dragon.png": "Ancient Red Dragon roars.",
        "owl-bear.jpg": "owl-bear roars.",
    }

    metadata_dir = tmp_path / "out" / "metadata"
    assert sorted(p.name for p in metadata_dir.iterdir()) == [
        "ancientreddragon-1of1.json",
        "ancientreddragon-common.json",
        "owlbear-1of1.json",
        "owlbear-common.json",
    ]
    common = json.loads((metadata_dir / "owlbear-common.json").read_text(encoding="utf8"))
    assert common["attributes"][0] == {"trait_type": "Rarity", "value": "Common"}
    assert common["name"] == "Owl Bear ⟨Generated⟩"


def test_json_module_format(tmp_path, config):
    writer = OutputWriter(tmp_path / "out", module_format="json")

    writer.write_card_data([_result("Imp", "imp.png", config)])

    cards = json.loads((tmp_path / "out" / "generatedCardData.json").read_text(encoding="utf8"))
    assert cards[0]["name"] == "Imp"
    assert not (tmp_path / "out" / "generatedCardData.js").exists()
