import asyncio
from pathlib import Path

import pytest

from cardsmith.models import Palette
from cardsmith.pipeline import CardPipeline
from cardsmith.sources import CardInput, GeneratedImageSource, LocalImageSource, scan_image_directory
from cardsmith.utils import ImageGenerationFailed, NoCardsGenerated, PaletteExtractionFailed


class FakePalettes:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def extract(self, image_path: Path) -> Palette:
        self.calls.append(image_path.name)
        if image_path.stem in self.failing:
            raise PaletteExtractionFailed(f"cannot read {image_path.name}")
        return Palette(Vibrant="#ff0000")


class FakeFlavor:
    def __init__(self, text="It hungers."):
        self.text = text
        self.calls = []

    async def generate(self, image_bytes, mime_type):
        self.calls.append(mime_type)
        return self.text


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _inputs(tmp_path, make_image, *names):
    for name in names:
        make_image(f"input_dir/{name}.png", (200, 30, 30))
    return scan_image_directory(tmp_path / "input_dir", 100)


def test_full_run_builds_every_record(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "ancient-red-dragon")
    pipeline = CardPipeline(config, LocalImageSource(), FakePalettes(), FakeFlavor())

    results = asyncio.run(pipeline.run(cards))

    assert len(results) == 1
    result = results[0]
    assert result.card_name == "ancient-red-dragon"
    assert result.card_data.id == "ancientreddragon"
    assert result.card_data.name == "Ancient Red Dragon"
    assert result.card_data.theme == "ancientRedDragon"
    assert result.card_data.image == "/images/card-images/ancient-red-dragon.png"
    assert result.card_data.flavor_text == "It hungers."
    assert result.theme.colors.dark_vibrant == "#404040"
    assert result.theme.theme["header"]["color"] == "#ffffff"
    assert result.metadata_1of1.attributes[0].value == "1/1"
    assert result.metadata_common.attributes[0].value == "Common"


def test_flavor_failure_uses_fallback_and_keeps_card(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "mind_flayer")
    pipeline = CardPipeline(config, LocalImageSource(), FakePalettes(), FakeFlavor(text=None))

    results = asyncio.run(pipeline.run(cards))

    assert len(results) == 1
    assert results[0].card_data.flavor_text == "The legendary Mind Flayer rises to challenge all who dare."


def test_palette_failure_skips_only_that_card(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "aboleth", "beholder", "cockatrice")
    palettes = FakePalettes(failing={"beholder"})
    pipeline = CardPipeline(config, LocalImageSource(), palettes, FakeFlavor())

    results = asyncio.run(pipeline.run(cards))

    assert [r.card_name for r in results] == ["aboleth", "cockatrice"]
    assert palettes.calls == ["aboleth.png", "beholder.png", "cockatrice.png"]


def test_zero_successes_raise(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "aboleth")
    pipeline = CardPipeline(config, LocalImageSource(), FakePalettes(failing={"aboleth"}), FakeFlavor())

    with pytest.raises(NoCardsGenerated):
        asyncio.run(pipeline.run(cards))


def test_missing_local_image_is_skipped(tmp_path, config):
    card = CardInput(card_name="ghost", filename="ghost", image_path=tmp_path / "ghost.png")
    pipeline = CardPipeline(config, LocalImageSource(), FakePalettes(), FakeFlavor())

    assert asyncio.run(pipeline.process_card(card)) is None


def test_fixed_delay_only_between_cards(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "a", "b", "c")
    sleep = RecordingSleep()
    pipeline = CardPipeline(
        config, LocalImageSource(), FakePalettes(failing={"b"}), FakeFlavor(), delay_seconds=4.0, sleep=sleep
    )

    asyncio.run(pipeline.run(cards))

    # Failures do not change the delay: no backoff.
    assert sleep.delays == [4.0, 4.0]


def test_stop_finishes_current_card_then_exits(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "a", "b", "c")

    class StopAfterFirst(FakeFlavor):
        async def generate(self, image_bytes, mime_type):
            pipeline.stop()
            return await super().generate(image_bytes, mime_type)

    sleep = RecordingSleep()
    pipeline = CardPipeline(config, LocalImageSource(), FakePalettes(), StopAfterFirst(), sleep=sleep)

    results = asyncio.run(pipeline.run(cards))

    assert [r.card_name for r in results] == ["a"]
    assert sleep.delays == []


def test_stopped_run_with_no_results_does_not_raise(tmp_path, make_image, config):
    cards = _inputs(tmp_path, make_image, "a")
    pipeline = CardPipeline(config, LocalImageSource(), FakePalettes(), FakeFlavor())
    pipeline.stop()

    assert asyncio.run(pipeline.run(cards)) == []


class FakeImageGenerator:
    def __init__(self, fail=False):
        self.fail = fail
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.fail:
            raise ImageGenerationFailed("policy violation")
        return b"png-bytes"


def test_generated_image_source_saves_png(tmp_path):
    sleep = RecordingSleep()
    generator = FakeImageGenerator()
    source = GeneratedImageSource(generator, tmp_path / "images", pause_seconds=1.0, sleep=sleep)
    card = CardInput(card_name="Adult Blue Dragon", filename="adult_blue_dragon", prompt="a blue dragon")

    path = asyncio.run(source.acquire(card))

    assert path == tmp_path / "images" / "adult_blue_dragon.png"
    assert path.read_bytes() == b"png-bytes"
    assert generator.prompts == ["a blue dragon"]
    assert sleep.delays == [1.0]


def test_image_generation_failure_skips_card(tmp_path, config):
    source = GeneratedImageSource(FakeImageGenerator(fail=True), tmp_path / "images")
    palettes = FakePalettes()
    pipeline = CardPipeline(config, source, palettes, FakeFlavor())
    card = CardInput(card_name="Kraken", filename="kraken", prompt="a kraken")

    assert asyncio.run(pipeline.process_card(card)) is None
    assert palettes.calls == []


def test_scan_image_directory_filters_sorts_and_limits(tmp_path, make_image):
    for name in ("b.PNG", "a.jpg", "c.webp", "d.gif", "e.jpeg"):
        make_image(f"input_dir/{name}", (10, 10, 10))
    (tmp_path / "input_dir" / "notes.txt").write_text("ignore me")

    cards = scan_image_directory(tmp_path / "input_dir", 4)

    assert [c.image_path.name for c in cards] == ["a.jpg", "b.PNG", "c.webp", "d.gif"]
    assert cards[1].card_name == "b"


def test_art_loop_saves_images_until_stopped(tmp_path, config):
    import httpx

    from cardsmith.pipeline import ArtLoop

    config = config.model_copy(update={"image_output_dir": tmp_path / "art"})
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"results": [{"name": "Young Red Dragon"}]}))
    generator = FakeImageGenerator()
    cycles = []

    async def sleep(seconds):
        cycles.append(seconds)
        if len(cycles) == 2:
            art_loop.stop()

    art_loop = ArtLoop(config, generator, sleep=sleep)

    async def run():
        async with httpx.AsyncClient(transport=transport) as http:
            return await art_loop.run(http)

    saved = asyncio.run(run())

    assert saved == 2
    files = sorted(p.name for p in (tmp_path / "art").iterdir())
    assert len(files) >= 1
    assert all(name.startswith("art_young_red_dragon_") and name.endswith(".png") for name in files)
    assert generator.prompts[0] == config.image_prompt("Young Red Dragon")


def test_art_loop_survives_generation_failures(tmp_path, config):
    import httpx

    from cardsmith.pipeline import ArtLoop

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"results": [{"name": "Imp"}]}))
    art_loop = ArtLoop(config, FakeImageGenerator(fail=True))

    async def run():
        async with httpx.AsyncClient(transport=transport) as http:
            return await art_loop.run_once(http)

    assert asyncio.run(run()) is None


def test_unwritable_image_dir_skips_only_that_card(tmp_path, config):
    blocked = tmp_path / "blocked"
    blocked.write_text("a file, not a directory")
    generator = FakeImageGenerator()
    sources = {
        "kraken": GeneratedImageSource(generator, blocked / "images"),
        "lich": GeneratedImageSource(generator, tmp_path / "images"),
    }

    class PerCardSource:
        async def acquire(self, card):
            return await sources[card.filename].acquire(card)

    cards = [
        CardInput(card_name="Kraken", filename="kraken", prompt="a kraken"),
        CardInput(card_name="Lich", filename="lich", prompt="a lich"),
    ]
    palettes = FakePalettes()
    pipeline = CardPipeline(config, PerCardSource(), palettes, FakeFlavor())

    results = asyncio.run(pipeline.run(cards))

    assert [r.card_name for r in results] == ["Lich"]
    assert palettes.calls == ["lich.png"]


def test_generated_image_save_error_is_image_failure(tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("a file, not a directory")
    source = GeneratedImageSource(FakeImageGenerator(), blocked)
    card = CardInput(card_name="Kraken", filename="kraken", prompt="a kraken")

    with pytest.raises(ImageGenerationFailed):
        asyncio.run(source.acquire(card))


def test_art_loop_keeps_running_when_save_fails(tmp_path, config):
    import httpx

    from cardsmith.pipeline import ArtLoop

    blocked = tmp_path / "blocked"
    blocked.write_text("a file, not a directory")
    config = config.model_copy(update={"image_output_dir": blocked})
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"results": [{"name": "Imp"}]}))
    generator = FakeImageGenerator()
    cycles = []

    async def sleep(seconds):
        cycles.append(seconds)
        if len(cycles) == 3:
            art_loop.stop()

    art_loop = ArtLoop(config, generator, sleep=sleep)

    async def run():
        async with httpx.AsyncClient(transport=transport) as http:
            return await art_loop.run(http)

    assert asyncio.run(run()) == 0
    assert len(generator.prompts) == 3


def test_art_loop_skips_malformed_monster_list(tmp_path, config):
    import httpx

    from cardsmith.pipeline import ArtLoop

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["Imp"]))
    generator = FakeImageGenerator()
    art_loop = ArtLoop(config, generator)

    async def run():
        async with httpx.AsyncClient(transport=transport) as http:
            return await art_loop.run_once(http)

    assert asyncio.run(run()) is None
    assert generator.prompts == []
