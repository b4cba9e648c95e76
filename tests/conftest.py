from pathlib import Path

import pytest
from PIL import Image

from cardsmith.config import PipelineConfig


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        input_dir=tmp_path / "input_dir",
        output_dir=tmp_path / "out",
        delay_seconds=0,
        image_delay_seconds=0,
        palette_pause_seconds=0,
        art_loop_pause_seconds=0,
    )


@pytest.fixture
def make_image(tmp_path: Path):
    """Write a small image split into colored vertical bands."""

    def _make(name: str, *colors: tuple[int, int, int], size: tuple[int, int] = (120, 80)) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGB", size, colors[0])
        band = size[0] // len(colors)
        for i, color in enumerate(colors):
            for x in range(i * band, size[0] if i == len(colors) - 1 else (i + 1) * band):
                for y in range(size[1]):
                    img.putpixel((x, y), color)
        img.save(path)
        return path

    return _make
