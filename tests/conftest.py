"""Shared fixtures for Metaimage tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from .helpers import encode_image


@pytest.fixture
def png_bytes() -> Callable[[int, int], bytes]:
    return lambda width, height: encode_image(width, height, "PNG")


@pytest.fixture
def ico_bytes() -> bytes:
    return encode_image(32, 32, "ICO")
