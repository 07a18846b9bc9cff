"""Configuration loading for Metaimage."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
LOCAL_CONFIG_PATH = Path("config/local.yaml")


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    path: Path | None = None
    level: str = Field(default="info")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("Logging level must be a string.")
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warn", "warning", "error", "critical"}:
            raise ValueError(f"Unsupported logging level: {value!r}")
        return normalized


class LoaderSettings(BaseModel):
    """Defaults applied to every metadata image invocation."""

    model_config = ConfigDict(extra="forbid")

    page_extensions: list[str] = Field(default_factory=lambda: ["py"])
    base_path: str = ""

    @field_validator("page_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise TypeError("page_extensions must be a list of strings.")
        return [normalize_extension(item) for item in value]

    @field_validator("base_path", mode="before")
    @classmethod
    def _normalize_base_path(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise TypeError("base_path must be a string.")
        return normalize_base_path(value)


class BuildSettings(BaseModel):
    """Settings for the `build` command."""

    model_config = ConfigDict(extra="forbid")

    output_dir: Path = Path(".metaimage")
    concurrency: int = Field(default=8, ge=1)


class ConfigModel(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    loader: LoaderSettings = Field(default_factory=LoaderSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)


@dataclass(slots=True)
class Config:
    """Validated configuration with convenience helpers."""

    model: ConfigModel
    raw: Mapping[str, Any] = field(repr=False)
    loaded_from: tuple[str, ...] = field(default_factory=tuple, repr=False)

    @property
    def logging(self) -> LoggingSettings:
        """Return logging settings."""

        return self.model.logging

    @property
    def loader(self) -> LoaderSettings:
        return self.model.loader

    @property
    def build(self) -> BuildSettings:
        return self.model.build

    def model_dump(self) -> Mapping[str, Any]:
        """Expose the parsed configuration as a mapping."""

        return self.model.model_dump(mode="json")


def normalize_extension(value: Any) -> str:
    """Return an extension without its leading dot, lower-cased."""

    if not isinstance(value, str):
        raise TypeError("Extensions must be strings.")
    extension = value.strip().lstrip(".").lower()
    if not extension:
        raise ValueError("Extensions must not be empty.")
    return extension


def normalize_base_path(value: str) -> str:
    """Return ``""`` or a path with a leading and no trailing slash."""

    stripped = value.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def load_config(path: Path | None = None) -> Config:
    """Load configuration from defaults/local overrides, or from an explicit config document."""

    merged: dict[str, Any] = {}
    loaded_from: list[str] = []

    if path is not None:
        override_path = _resolve_path(path)
        if override_path is None or not override_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        merged = _merge_dicts(merged, _read_yaml(override_path))
        loaded_from.append(str(override_path))
    else:
        packaged_payload = _read_packaged_yaml("metaimage.config", "default.yaml")
        if packaged_payload is not None:
            merged = _merge_dicts(merged, packaged_payload)
            loaded_from.append("metaimage.config:default.yaml")

        for candidate_path in (DEFAULT_CONFIG_PATH, LOCAL_CONFIG_PATH):
            candidate = _resolve_path(candidate_path)
            bundled = _resolve_packaged_path(candidate_path)
            if candidate and candidate.exists():
                merged = _merge_dicts(merged, _read_yaml(candidate))
                loaded_from.append(str(candidate))
            elif bundled and bundled.exists():  # pragma: no cover - frozen builds only
                merged = _merge_dicts(merged, _read_yaml(bundled))
                loaded_from.append(str(bundled))

    try:
        model = ConfigModel.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    return Config(model=model, raw=merged, loaded_from=tuple(loaded_from))


def _resolve_path(path: Path) -> Path | None:
    """Resolve configuration paths relative to the current working directory."""

    if path is None:
        return None
    return path if path.is_absolute() else Path.cwd() / path


def _resolve_packaged_path(path: Path) -> Path | None:
    """Resolve paths embedded in packaged binaries (e.g., PyInstaller)."""

    base = getattr(sys, "_MEIPASS", None)
    if not base:
        return None
    return Path(base) / path


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file into a dictionary."""

    content = path.read_text(encoding="utf-8")
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must define a mapping at the top level.")
    return data


def _read_packaged_yaml(package: str, name: str) -> dict[str, Any] | None:
    """Read YAML embedded in a Python package via importlib.resources."""

    try:
        content = resources.files(package).joinpath(name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Packaged configuration {package}:{name} must define a mapping at the top level."
        )
    return data


def _merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two dictionaries, with override values taking precedence."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result
