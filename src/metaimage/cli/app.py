"""Command line interface for Metaimage."""

from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from typing import Optional

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from metaimage import get_version
from metaimage.config import Config, load_config
from metaimage.core import (
    BuildSummary,
    InvalidImageFormatError,
    LoaderOptions,
    MetadataCategory,
    MetadataImageBuilder,
    discover_metadata_assets,
    generate_metadata_image_module,
)
from metaimage.logging import configure_logging, log_file_path

CATEGORY_CHOICES = [category.value for category in MetadataCategory]


def _load_environment(env_file: Optional[pathlib.Path]) -> None:
    """Load environment variables from .env files."""

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=True)
    else:
        load_dotenv(override=False)


def _prepare_logging(
    config: Config,
    override_path: Optional[pathlib.Path],
    override_level: Optional[str],
) -> tuple[logging.Logger, pathlib.Path]:
    """Configure logging based on configuration and overrides."""

    configured_path = override_path or config.logging.path
    configured_level = (override_level or config.logging.level).upper()
    logger = configure_logging(
        log_path=configured_path,
        level=configured_level,
        mirror_to_console=False,
    )
    log_file = log_file_path(logger)
    if log_file is None:  # pragma: no cover - configure_logging always adds a file handler
        log_file = pathlib.Path.cwd() / "metaimage.log"
    return logger, log_file


def _parse_category(value: str) -> MetadataCategory:
    try:
        return MetadataCategory(value)
    except ValueError as exc:
        raise typer.BadParameter(
            f"Unknown metadata type {value!r}; expected one of {', '.join(CATEGORY_CHOICES)}.",
            param_hint="--type",
        ) from exc


app = typer.Typer(
    name="metaimage",
    help="Generate metadata image route modules from icons and social images.",
    no_args_is_help=True,
    add_completion=False,
)

config_app = typer.Typer(help="Configuration utilities.", no_args_is_help=True)
app.add_typer(config_app, name="config")


def _version_callback(value: bool) -> None:
    """Print the package version and exit when requested."""

    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(
        None,
        "--config",
        metavar="PATH",
        help="Path to YAML configuration file (used exclusively).",
    ),
    env_file: Optional[pathlib.Path] = typer.Option(
        None,
        "--env-file",
        metavar="PATH",
        help="Load environment variables from .env-style file before execution.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        metavar="LEVEL",
        help="Override the configured log level (debug, info, warn, error).",
    ),
    log_path: Optional[pathlib.Path] = typer.Option(
        None,
        "--log-path",
        metavar="PATH",
        help="Override the base directory or file for log output.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show Metaimage version and exit.",
    ),
) -> None:
    """CLI root; loads configuration, logging, and shared context."""

    ctx.ensure_object(dict)
    _load_environment(env_file)

    try:
        config_obj = load_config(config)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    logger, log_file = _prepare_logging(config_obj, log_path, log_level)

    ctx.obj.update(
        {
            "config": config_obj,
            "config_path": config,
            "log_file": log_file,
            "logger": logger,
        }
    )


@app.command()
def generate(
    ctx: typer.Context,
    asset: pathlib.Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Image file or dynamic image source module.",
    ),
    type_: str = typer.Option(
        ...,
        "--type",
        metavar="TYPE",
        help=f"Metadata image type ({', '.join(CATEGORY_CHOICES)}).",
    ),
    segment: str = typer.Option(
        "/",
        "--segment",
        metavar="SEGMENT",
        help="Route segment the asset lives in, e.g. /blog/[slug].",
    ),
    page_ext: Optional[list[str]] = typer.Option(
        None,
        "--page-ext",
        metavar="EXT",
        help="Extension treated as a dynamic source. May be provided multiple times.",
    ),
    base_path: Optional[str] = typer.Option(
        None,
        "--base-path",
        metavar="PATH",
        help="URL prefix the application is mounted under.",
    ),
    output: Optional[pathlib.Path] = typer.Option(
        None,
        "--output",
        "-o",
        metavar="PATH",
        help="Write the generated module here instead of stdout.",
    ),
) -> None:
    """Generate the route module for a single metadata image."""

    config: Config = ctx.obj["config"]
    logger: logging.Logger = ctx.obj["logger"]
    category = _parse_category(type_)

    try:
        options = LoaderOptions(
            segment=segment,
            type=category,
            page_extensions=tuple(page_ext) if page_ext else tuple(config.loader.page_extensions),
            base_path=config.loader.base_path if base_path is None else base_path,
        )
        content = asset.read_bytes()
        source = asyncio.run(generate_metadata_image_module(asset, content, options))
    except InvalidImageFormatError as exc:
        logger.error("Invalid image %s: %s", asset, exc)
        typer.echo(f"Invalid image format for {asset}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except (OSError, SyntaxError, ValueError) as exc:
        logger.error("Unable to load %s: %s", asset, exc)
        typer.echo(f"Unable to load {asset}: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if output is None:
        typer.echo(source, nl=False)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(source, encoding="utf-8")
    except OSError as exc:
        typer.echo(f"Unable to write {output}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Wrote {output}", err=True)


@app.command()
def build(
    ctx: typer.Context,
    app_dir: pathlib.Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        help="Application directory to scan for metadata images.",
    ),
    output_dir: Optional[pathlib.Path] = typer.Option(
        None,
        "--output-dir",
        metavar="PATH",
        help="Directory receiving generated modules (default from configuration).",
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        min=1,
        max=256,
        help="Maximum number of assets generated at once.",
    ),
) -> None:
    """Discover every metadata image below APP_DIR and generate its route module."""

    config: Config = ctx.obj["config"]
    logger: logging.Logger = ctx.obj["logger"]

    destination = output_dir or config.build.output_dir
    if not destination.is_absolute():
        destination = pathlib.Path.cwd() / destination

    assets = discover_metadata_assets(app_dir, page_extensions=config.loader.page_extensions)
    if not assets:
        typer.echo(f"No metadata images found under {app_dir}.")
        return

    builder = MetadataImageBuilder(
        settings=config.loader,
        output_dir=destination,
        logger=logger,
        concurrency=concurrency or config.build.concurrency,
        root_context=app_dir.resolve(),
    )
    summary = asyncio.run(builder.run(assets))
    _render_summary(summary, app_dir.resolve())

    if summary.failed:
        typer.echo(f"{len(summary.failed)} asset(s) failed; see {ctx.obj['log_file']}.", err=True)
        raise typer.Exit(code=1)


def _render_summary(summary: BuildSummary, root: pathlib.Path) -> None:
    table = Table(title="Metadata images")
    table.add_column("Asset")
    table.add_column("Type")
    table.add_column("Kind")
    table.add_column("Result")

    for result in summary.results:
        asset = result.asset
        outcome = str(result.output_path) if result.ok else f"error: {result.error}"
        table.add_row(
            str(asset.path.relative_to(root)),
            asset.category.value,
            "dynamic" if asset.is_dynamic else "static",
            outcome,
        )
    Console().print(table)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    format: str = typer.Option(
        "yaml",
        "--format",
        help="Output format (yaml or json).",
    ),
    paths: bool = typer.Option(
        False,
        "--paths",
        help="List the configuration files that were merged.",
    ),
) -> None:
    """Show the effective configuration for this invocation."""

    config: Config = ctx.obj["config"]

    normalized_format = format.strip().lower()
    if normalized_format not in {"yaml", "json"}:
        raise typer.BadParameter("Format must be 'yaml' or 'json'.", param_hint="--format")

    if paths and config.loaded_from:
        typer.echo("Loaded configuration from:", err=True)
        for entry in config.loaded_from:
            typer.echo(f"- {entry}", err=True)

    data = config.model_dump()
    if normalized_format == "json":
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(yaml.safe_dump(data, sort_keys=False))
