"""Concurrent synthesis of every metadata image in an app directory."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from metaimage.config import LoaderSettings
from metaimage.core.discovery import DiscoveredAsset
from metaimage.core.loader import LoaderOptions, generate_metadata_image_module


@dataclass(slots=True)
class BuildResult:
    """Outcome for one asset."""

    asset: DiscoveredAsset
    output_path: Path | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class BuildSummary:
    results: list[BuildResult] = field(default_factory=list)

    @property
    def failed(self) -> list[BuildResult]:
        return [result for result in self.results if not result.ok]

    @property
    def succeeded(self) -> list[BuildResult]:
        return [result for result in self.results if result.ok]


def output_path_for(asset: DiscoveredAsset, output_dir: Path) -> Path:
    """Location of the generated module, mirroring the route segment."""

    relative = asset.segment.strip("/")
    directory = output_dir / relative if relative else output_dir
    return directory / f"{asset.path.stem}.{asset.path.suffix[1:]}.meta.py"


@dataclass(slots=True)
class MetadataImageBuilder:
    """Generate route modules for discovered assets, isolating per-asset failures."""

    settings: LoaderSettings
    output_dir: Path
    logger: logging.Logger
    concurrency: int = 8
    root_context: Path | None = None

    async def run(self, assets: Sequence[DiscoveredAsset]) -> BuildSummary:
        semaphore = asyncio.Semaphore(max(1, self.concurrency))

        async def _guarded(asset: DiscoveredAsset) -> BuildResult:
            async with semaphore:
                return await self._build_one(asset)

        outcomes = await asyncio.gather(
            *(_guarded(asset) for asset in assets), return_exceptions=True
        )

        summary = BuildSummary()
        for asset, outcome in zip(assets, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self.logger.error("Failed to generate route for %s: %s", asset.path, outcome)
                summary.results.append(BuildResult(asset=asset, error=outcome))
            else:
                summary.results.append(outcome)

        self.logger.info(
            "Generated %s route module(s), %s failed.",
            len(summary.succeeded),
            len(summary.failed),
        )
        return summary

    async def _build_one(self, asset: DiscoveredAsset) -> BuildResult:
        loop = asyncio.get_running_loop()
        content = await loop.run_in_executor(None, asset.path.read_bytes)
        options = LoaderOptions.from_settings(
            self.settings,
            segment=asset.segment,
            type=asset.category,
            root_context=self.root_context,
        )
        source = await generate_metadata_image_module(asset.path, content, options)

        destination = output_path_for(asset, self.output_dir)
        await loop.run_in_executor(None, _write_source, destination, source)
        self.logger.debug("Wrote %s", destination)
        return BuildResult(asset=asset, output_path=destination)


def _write_source(destination: Path, source: str) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(source, encoding="utf-8")
