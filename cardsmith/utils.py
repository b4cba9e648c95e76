"""Shared helpers: logging, errors and filesystem utilities."""
from __future__ import annotations

import json
import logging
import os
import pathlib
from typing import Any, Optional

LOGGER_NAME = "cardsmith"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module level logger configured for the package."""
    logger_name = name or LOGGER_NAME
    logger = logging.getLogger(logger_name)
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logger


def set_verbose(enabled: bool) -> None:
    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if enabled else logging.INFO)


class PipelineError(RuntimeError):
    """Raised when a card cannot be produced."""


class ImageGenerationFailed(PipelineError):
    """The image source could not provide an image for a card."""


class PaletteExtractionFailed(PipelineError):
    """The palette extractor could not read colors from an image."""


class NoCardsGenerated(PipelineError):
    """A run finished without a single successful card."""


def ensure_directory(path: str | os.PathLike[str]) -> pathlib.Path:
    """Create *path* if it does not already exist and return it as Path."""
    directory = pathlib.Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def write_json(path: pathlib.Path, payload: Any) -> pathlib.Path:
    with path.open("w", encoding="utf8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.write("\n")
    return path
