#!/usr/bin/env python3
"""Command-line interface for trading card generation."""
from __future__ import annotations

import asyncio
import contextlib
import json
import os
import signal
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Sequence

import httpx
import typer
from dotenv import load_dotenv
from openai import AsyncOpenAI
from pydantic import ValidationError

from .client import FlavorTextGenerator, ImageGenerator
from .colors import hex_to_rgba
from .config import SUPPORTED_IMAGE_EXTENSIONS, PipelineConfig, load_config
from .image_utils import list_images
from .models import PipelineResult
from .monsters import fetch_monster_names, pick_monster_names
from .palette import VibrantPaletteExtractor
from .pipeline import ArtLoop, CardPipeline
from .sources import (
    CardInput,
    GeneratedImageSource,
    LocalImageSource,
    custom_prompt_inputs,
    generated_inputs,
    scan_image_directory,
)
from .utils import NoCardsGenerated, PaletteExtractionFailed, set_verbose
from .writer import OutputWriter

app = typer.Typer(help="Generate trading card themes, card data and NFT metadata from art.")


def _fail(message: str) -> typer.Exit:
    typer.echo(message)
    return typer.Exit(code=1)


def _with_overrides(config: PipelineConfig, **updates: Any) -> PipelineConfig:
    updates = {key: value for key, value in updates.items() if value is not None}
    if not updates:
        return config
    try:
        return PipelineConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as exc:
        raise typer.BadParameter(str(exc))


def _require_api_key() -> str:
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise _fail("OPENAI_API_KEY is not set. Add it to your environment or a .env file.")
    return api_key


def _make_openai_client(api_key: str) -> AsyncOpenAI:
    # No retries: the fixed inter-card delay is the only rate-limit policy.
    return AsyncOpenAI(api_key=api_key, max_retries=0)


def _check_input_dir(input_dir: Path) -> Path:
    resolved = input_dir.expanduser().resolve()
    if not resolved.is_dir():
        raise _fail(f'Input directory "{resolved}" does not exist.')
    return resolved


async def _run_until_stopped(run: Callable[[], Awaitable[Any]], stop: Callable[[], None]) -> Any:
    """Await ``run()`` with Ctrl+C mapped to ``stop`` instead of KeyboardInterrupt."""

    loop = asyncio.get_running_loop()
    installed = False
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, stop)
        installed = True
    try:
        return await run()
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


async def _run_pipeline(pipeline: CardPipeline, inputs: Sequence[CardInput], client: AsyncOpenAI) -> List[PipelineResult]:
    try:
        return await _run_until_stopped(lambda: pipeline.run(inputs), pipeline.stop)
    finally:
        await client.close()


def _finish(results: List[PipelineResult], config: PipelineConfig, dry_run: bool) -> None:
    if not results:
        typer.echo("Stopped before any card was completed; nothing written.")
        return

    if dry_run:
        payload = [result.card_data.to_json_dict() for result in results]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        typer.echo("Dry run enabled — files not written.")
        return

    writer = OutputWriter(config.output_dir, config.module_format)
    writer.write_all(results)
    typer.echo(f"\nGenerated {len(results)} complete cards in {config.output_dir}")
    typer.echo(f"  themes:    generatedThemes.{config.module_format}")
    typer.echo(f"  cards:     generatedCardData.{config.module_format}")
    typer.echo("  flavor:    flavorTexts.json")
    typer.echo(f"  metadata:  metadata/ ({len(results) * 2} files)")


def _execute(pipeline: CardPipeline, inputs: Sequence[CardInput], client: AsyncOpenAI, config: PipelineConfig, dry_run: bool) -> None:
    try:
        results = asyncio.run(_run_pipeline(pipeline, inputs, client))
    except NoCardsGenerated as exc:
        raise _fail(f"ERROR: {exc}")
    _finish(results, config, dry_run)


@app.callback()
def configure(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="JSON file overriding the default configuration."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", show_default=False),
) -> None:
    """Generate trading card themes, card data and NFT metadata from art."""

    set_verbose(verbose)
    try:
        ctx.obj = load_config(config_path)
    except (OSError, ValueError) as exc:
        raise _fail(f"Could not load config {config_path}: {exc}")


@app.command()
def build(
    ctx: typer.Context,
    input_dir: Optional[Path] = typer.Argument(None, help="Folder of card art (defaults to the configured input_dir)."),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", help="Directory for generated files."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of images to process."),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds to wait between cards."),
    model: Optional[str] = typer.Option(None, "--model", help="OpenAI model used for flavor text."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Process cards without writing files to disk.", show_default=False
    ),
) -> None:
    """Build cards from existing images in a folder."""

    config = _with_overrides(
        ctx.obj,
        input_dir=input_dir,
        output_dir=out_dir,
        max_images=limit,
        delay_seconds=delay,
        text_model=model,
    )

    api_key = _require_api_key()
    source_dir = _check_input_dir(config.input_dir)

    inputs = scan_image_directory(source_dir, config.max_images)
    if not inputs:
        raise _fail(
            f"No image files found in {source_dir}. Supported formats: {', '.join(SUPPORTED_IMAGE_EXTENSIONS)}"
        )

    typer.echo(f"Found {len(inputs)} images to process")
    typer.echo(f"Rate limit: {config.delay_seconds}s between cards (Ctrl+C stops after the current card)")

    client = _make_openai_client(api_key)
    pipeline = CardPipeline(
        config,
        LocalImageSource(),
        VibrantPaletteExtractor(),
        FlavorTextGenerator(client, config.text_model, config.flavor_text_prompt),
    )
    _execute(pipeline, inputs, client, config, dry_run)


async def _monster_inputs(config: PipelineConfig, count: int) -> List[CardInput]:
    async with httpx.AsyncClient(timeout=30.0) as http:
        names = await fetch_monster_names(http, config.monster_api_url)
    return generated_inputs(pick_monster_names(names, count), config)


@app.command()
def generate(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(None, "--count", help="Number of cards to generate."),
    mode: str = typer.Option("monsters", "--mode", help="Card subjects: 'monsters' or 'custom' prompts."),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", help="Directory for generated files."),
    aspect_ratio: Optional[str] = typer.Option(None, "--aspect-ratio", help="Image aspect ratio, e.g. 16:9."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Process cards without writing card files to disk.", show_default=False
    ),
) -> None:
    """Generate card art with the image API, then build full cards from it."""

    if mode not in ("monsters", "custom"):
        raise typer.BadParameter("mode must be 'monsters' or 'custom'", param_name="mode")

    config = _with_overrides(
        ctx.obj,
        number_of_cards=count,
        output_dir=out_dir,
        image_aspect_ratio=aspect_ratio,
    )
    api_key = _require_api_key()

    if mode == "custom":
        inputs = custom_prompt_inputs(config.custom_prompts, config.number_of_cards)
        if not inputs:
            raise _fail("No custom prompts configured.")
    else:
        typer.echo(f"Fetching {config.number_of_cards} monsters...")
        try:
            inputs = asyncio.run(_monster_inputs(config, config.number_of_cards))
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            raise _fail(f"Failed to fetch monster list: {exc}")

    delay = max(config.image_delay_seconds, config.delay_seconds)
    typer.echo(f"Generating {len(inputs)} complete cards ({delay}s between cards)")

    client = _make_openai_client(api_key)
    image_source = GeneratedImageSource(
        ImageGenerator(client, config.image_model, config.image_size),
        config.generated_image_dir,
        pause_seconds=config.palette_pause_seconds,
    )
    pipeline = CardPipeline(
        config,
        image_source,
        VibrantPaletteExtractor(),
        FlavorTextGenerator(client, config.text_model, config.flavor_text_prompt),
        delay_seconds=delay,
    )
    _execute(pipeline, inputs, client, config, dry_run)


async def _run_art_loop(art_loop: ArtLoop, client: AsyncOpenAI) -> int:
    try:
        async with httpx.AsyncClient(timeout=30.0) as http:
            return await _run_until_stopped(lambda: art_loop.run(http), art_loop.stop)
    finally:
        await client.close()


@app.command()
def art(
    ctx: typer.Context,
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", help="Directory for generated images."),
) -> None:
    """Keep generating monster art until interrupted with Ctrl+C."""

    config = _with_overrides(ctx.obj, image_output_dir=out_dir)
    api_key = _require_api_key()

    typer.echo("Generating monster art. Press Ctrl+C to stop.")
    client = _make_openai_client(api_key)
    art_loop = ArtLoop(config, ImageGenerator(client, config.image_model, config.image_size))
    saved = asyncio.run(_run_art_loop(art_loop, client))
    typer.echo(f"Generator has stopped after saving {saved} images. Goodbye!")


@app.command()
def palette(
    ctx: typer.Context,
    input_dir: Optional[Path] = typer.Argument(None, help="Folder of images to test."),
    limit: int = typer.Option(5, "--limit", help="Only test the first N images."),
) -> None:
    """Check palette extraction on local images without calling any API."""

    config: PipelineConfig = ctx.obj
    source_dir = _check_input_dir(input_dir or config.input_dir)
    images = list_images(source_dir, limit)
    if not images:
        raise _fail(
            f"No image files found in {source_dir}. Supported formats: {', '.join(SUPPORTED_IMAGE_EXTENSIONS)}"
        )

    extractor = VibrantPaletteExtractor()
    succeeded = 0
    for image_path in images:
        typer.echo(f"\nTesting: {image_path.name}")
        try:
            extracted = extractor.extract_sync(image_path)
        except PaletteExtractionFailed as exc:
            typer.echo(f"  ERROR: {exc}")
            continue

        for field_name, alias in (
            ("vibrant", "Vibrant"),
            ("dark_vibrant", "Dark Vibrant"),
            ("light_vibrant", "Light Vibrant"),
            ("muted", "Muted"),
            ("dark_muted", "Dark Muted"),
            ("light_muted", "Light Muted"),
        ):
            typer.echo(f"  {alias + ':':<15}{getattr(extracted, field_name) or 'N/A'}")

        colors = extracted.resolve()
        typer.echo("  Gradient preview:")
        typer.echo(f"    radial-gradient(circle at 20% 30%, {hex_to_rgba(colors.vibrant, 0.4)} 0%, transparent 50%),")
        typer.echo(f"    radial-gradient(circle at 80% 70%, {hex_to_rgba(colors.dark_vibrant, 0.5)} 0%, transparent 40%),")
        typer.echo(f"    radial-gradient(circle at 60% 10%, {hex_to_rgba(colors.light_vibrant, 0.3)} 0%, transparent 45%)")
        succeeded += 1

    typer.echo(f"\nResults: {succeeded}/{len(images)} images processed successfully")
    if succeeded != len(images):
        raise typer.Exit(code=1)


def main() -> None:
    load_dotenv()
    app()


if __name__ == "__main__":
    main()
