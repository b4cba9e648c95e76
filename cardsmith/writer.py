"""Persist a run's themes, card data, flavor texts and metadata."""
from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, List, Sequence

from .cards import theme_key
from .models import PipelineResult
from .utils import ensure_directory, get_logger, write_json

LOGGER = get_logger(__name__)

THEMES_EXPORT = "GENERATED_THEMES"
CARDS_EXPORT = "GENERATED_CARDS"


class OutputWriter:
    def __init__(self, output_dir: str | pathlib.Path, module_format: str = "js") -> None:
        self.output_dir = pathlib.Path(output_dir)
        self.module_format = module_format

    @property
    def metadata_dir(self) -> pathlib.Path:
        return self.output_dir / "metadata"

    def _write_module(self, stem: str, export_name: str, payload: Any) -> pathlib.Path:
        ensure_directory(self.output_dir)
        if self.module_format == "json":
            path = write_json(self.output_dir / f"{stem}.json", payload)
        else:
            path = self.output_dir / f"{stem}.js"
            body = json.dumps(payload, indent=2, ensure_ascii=False)
            with path.open("w", encoding="utf8") as handle:
                handle.write("// Auto-generated by cardsmith\n")
                handle.write(f"export const {export_name} = {body};\n")
        LOGGER.info("Wrote %s", path)
        return path

    def write_themes(self, results: Sequence[PipelineResult]) -> pathlib.Path:
        themes: Dict[str, Any] = {}
        for result in results:
            themes[theme_key(result.theme.name)] = result.theme.theme
        return self._write_module("generatedThemes", THEMES_EXPORT, themes)

    def write_card_data(self, results: Sequence[PipelineResult]) -> pathlib.Path:
        cards = [result.card_data.to_json_dict() for result in results]
        return self._write_module("generatedCardData", CARDS_EXPORT, cards)

    def write_flavor_texts(self, results: Sequence[PipelineResult]) -> pathlib.Path:
        flavor_texts = {
            pathlib.PurePosixPath(result.card_data.image).name: result.card_data.flavor_text
            for result in results
        }
        path = write_json(ensure_directory(self.output_dir) / "flavorTexts.json", flavor_texts)
        LOGGER.info("Wrote %s", path)
        return path

    def write_metadata(self, results: Sequence[PipelineResult]) -> List[pathlib.Path]:
        metadata_dir = ensure_directory(self.metadata_dir)
        paths = []
        for result in results:
            card_id = result.card_data.id
            paths.append(write_json(metadata_dir / f"{card_id}-1of1.json", result.metadata_1of1.to_json_dict()))
            paths.append(write_json(metadata_dir / f"{card_id}-common.json", result.metadata_common.to_json_dict()))
        LOGGER.info("Wrote %d metadata files in %s", len(paths), metadata_dir)
        return paths

    def write_all(self, results: Sequence[PipelineResult]) -> List[pathlib.Path]:
        paths = [
            self.write_themes(results),
            self.write_card_data(results),
            self.write_flavor_texts(results),
        ]
        paths.extend(self.write_metadata(results))
        return paths
