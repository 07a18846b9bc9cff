"""End-to-end tests for static metadata images."""

from __future__ import annotations

from hashlib import sha256

import pytest

from metaimage.core import InvalidImageFormatError, LoaderOptions, generate_metadata_image_module

from .helpers import encode_image, load_generated


def _options(category: str, **overrides) -> LoaderOptions:
    return LoaderOptions(type=category, **overrides)


async def _generate(path, content, category, **overrides):
    path.write_bytes(content)
    source = await generate_metadata_image_module(path, content, _options(category, **overrides))
    return source, load_generated(source)["default"]


@pytest.mark.asyncio
async def test_icon_png_descriptor(tmp_path, png_bytes):
    content = png_bytes(32, 32)
    _, route = await _generate(tmp_path / "icon.png", content, "icon")

    digest = sha256(content).hexdigest()[:16]
    assert route({"params": {}}) == [
        {"type": "image/png", "sizes": "32x32", "url": f"/icon.png?{digest}"}
    ]


@pytest.mark.asyncio
async def test_open_graph_with_alt_text(tmp_path, png_bytes):
    (tmp_path / "opengraph-image.alt.txt").write_text("Cover", encoding="utf-8")
    content = png_bytes(1200, 630)
    _, route = await _generate(tmp_path / "opengraph-image.png", content, "openGraph")

    [descriptor] = route({"params": {}})
    digest = sha256(content).hexdigest()[:16]
    assert descriptor == {
        "type": "image/png",
        "width": 1200,
        "height": 630,
        "alt": "Cover",
        "url": f"/opengraph-image.png?{digest}",
    }
    assert "sizes" not in descriptor


@pytest.mark.asyncio
async def test_alt_text_is_kept_verbatim(tmp_path, png_bytes):
    (tmp_path / "twitter-image.alt.txt").write_bytes(b"  A card\r\nsecond line\n")
    _, route = await _generate(tmp_path / "twitter-image.png", png_bytes(800, 400), "twitter")

    [descriptor] = route({"params": {}})
    assert descriptor["alt"] == "  A card\r\nsecond line\n"
    assert (descriptor["width"], descriptor["height"]) == (800, 400)


@pytest.mark.asyncio
async def test_missing_alt_text_is_not_an_error(tmp_path, png_bytes):
    _, route = await _generate(tmp_path / "twitter-image.png", png_bytes(800, 400), "twitter")
    assert "alt" not in route({"params": {}})[0]


@pytest.mark.asyncio
async def test_alt_text_ignored_for_icons(tmp_path, png_bytes):
    (tmp_path / "icon.alt.txt").write_text("ignored", encoding="utf-8")
    _, route = await _generate(tmp_path / "icon.png", png_bytes(16, 16), "icon")
    assert "alt" not in route({"params": {}})[0]


@pytest.mark.asyncio
async def test_favicon_has_any_sizes_and_no_hash(tmp_path, ico_bytes):
    _, route = await _generate(tmp_path / "favicon.ico", ico_bytes, "favicon")

    assert route({"params": {}}) == [
        {"type": "image/x-icon", "sizes": "any", "url": "/favicon.ico"}
    ]


@pytest.mark.asyncio
async def test_same_bytes_hashed_for_other_categories(tmp_path, ico_bytes):
    _, route = await _generate(tmp_path / "icon.ico", ico_bytes, "icon")

    [descriptor] = route({"params": {}})
    assert descriptor["sizes"] == "any"
    assert descriptor["url"] == f"/icon.ico?{sha256(ico_bytes).hexdigest()[:16]}"


@pytest.mark.asyncio
async def test_jpg_uses_jpeg_mime_and_original_file_name(tmp_path):
    content = encode_image(180, 180, "JPEG")
    _, route = await _generate(tmp_path / "apple-icon.jpg", content, "appleIcon")

    [descriptor] = route({"params": {}})
    assert descriptor["type"] == "image/jpeg"
    assert descriptor["sizes"] == "180x180"
    assert descriptor["url"].startswith("/apple-icon.jpg?")


@pytest.mark.asyncio
async def test_unknown_extension_omits_type(tmp_path):
    content = encode_image(20, 10, "BMP")
    _, route = await _generate(tmp_path / "icon.bmp", content, "icon")

    [descriptor] = route({"params": {}})
    assert "type" not in descriptor
    assert descriptor["sizes"] == "20x10"


@pytest.mark.asyncio
async def test_segment_and_base_path_build_url(tmp_path, png_bytes):
    content = png_bytes(32, 32)
    _, route = await _generate(
        tmp_path / "icon.png",
        content,
        "icon",
        segment="/blog/[slug]",
        base_path="/docs/",
    )

    [descriptor] = route({"params": {"slug": "hello world"}})
    digest = sha256(content).hexdigest()[:16]
    assert descriptor["url"] == f"/docs/blog/hello%20world/icon.png?{digest}"


@pytest.mark.asyncio
async def test_generation_is_deterministic(tmp_path, png_bytes):
    content = png_bytes(64, 64)
    first, _ = await _generate(tmp_path / "icon.png", content, "icon")
    second, _ = await _generate(tmp_path / "icon.png", content, "icon")
    assert first == second


@pytest.mark.asyncio
async def test_corrupt_image_raises_format_error(tmp_path):
    path = tmp_path / "icon.png"
    path.write_bytes(b"\x89PNG broken")

    with pytest.raises(InvalidImageFormatError) as excinfo:
        await generate_metadata_image_module(path, path.read_bytes(), _options("icon"))
    assert excinfo.value.resource_path == path


@pytest.mark.asyncio
async def test_generated_source_embeds_values_as_literals(tmp_path, png_bytes):
    source, _ = await _generate(
        tmp_path / "icon.png", png_bytes(8, 8), "icon", segment='/a"); import os; ("'
    )
    namespace = load_generated(source)
    assert "os" not in namespace
    assert namespace["default"]({"params": {}})[0]["url"].startswith('/a"); import os; ("/icon.png')
