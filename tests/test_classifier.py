"""Tests for asset classification and naming."""

from __future__ import annotations

from hashlib import sha256
from pathlib import Path

import pytest

from metaimage.core.classifier import MetadataCategory, classify_asset
from metaimage.core.naming import content_digest, interpolate_name, resolve_naming


class TestClassifyAsset:
    def test_static_png(self):
        asset = classify_asset("/app/icon.png", category="icon", page_extensions=["py"])
        assert asset.file_name_base == "icon"
        assert asset.extension == "png"
        assert asset.category is MetadataCategory.ICON
        assert asset.is_dynamic is False

    def test_jpg_alias_is_folded(self):
        asset = classify_asset("/app/photo.jpg", category="openGraph", page_extensions=["py"])
        assert asset.extension == "jpeg"

    def test_page_extension_marks_dynamic(self):
        asset = classify_asset(
            "/app/opengraph-image.py", category=MetadataCategory.OPEN_GRAPH, page_extensions=[".py"]
        )
        assert asset.is_dynamic is True
        assert asset.file_name_base == "opengraph-image"

    def test_page_extension_match_ignores_case(self):
        asset = classify_asset("/app/icon.PY", category="icon", page_extensions=["py"])
        assert asset.is_dynamic is True
        assert asset.extension == "PY"

    def test_unknown_extension_is_accepted(self):
        asset = classify_asset("/app/icon.bmp", category="icon", page_extensions=["py"])
        assert asset.extension == "bmp"
        assert asset.is_dynamic is False

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            classify_asset("/app/icon.png", category="banner", page_extensions=[])

    @pytest.mark.parametrize(
        "category,numeric",
        [
            (MetadataCategory.OPEN_GRAPH, True),
            (MetadataCategory.TWITTER, True),
            (MetadataCategory.ICON, False),
            (MetadataCategory.APPLE_ICON, False),
            (MetadataCategory.FAVICON, False),
        ],
    )
    def test_numeric_sizes(self, category, numeric):
        assert category.numeric_sizes is numeric


class TestInterpolateName:
    def test_name_and_ext_keep_original_extension(self):
        assert interpolate_name("/app/photo.jpg", "[name].[ext]", b"x") == "photo.jpg"

    def test_contenthash_is_truncated_sha256(self):
        expected = sha256(b"payload").hexdigest()[:16]
        assert interpolate_name("/app/icon.png", "[contenthash]", b"payload") == expected

    def test_hash_length_modifier(self):
        assert len(interpolate_name("/a/icon.png", "[contenthash:8]", b"payload")) == 8
        assert interpolate_name("/a/icon.png", "[hash:4]", b"p") == content_digest(b"p", 4)

    def test_path_relative_to_context(self):
        name = interpolate_name("/app/blog/icon.png", "[path][name].[ext]", b"", context="/app")
        assert name == "blog/icon.png"

    def test_path_empty_without_context(self):
        assert interpolate_name("/app/blog/icon.png", "[path][name]", b"") == "icon"

    def test_unknown_placeholder_untouched(self):
        assert interpolate_name("/a/icon.png", "[query][name]", b"") == "[query]icon"


class TestResolveNaming:
    def test_static_icon(self):
        asset = classify_asset("/app/icon.png", category="icon", page_extensions=["py"])
        naming = resolve_naming(asset, b"bytes")
        digest = sha256(b"bytes").hexdigest()[:16]
        assert naming.content_hash == digest
        assert naming.hash_query == f"?{digest}"
        assert naming.interpolated_name == "icon.png"
        assert naming.path_segment == "icon.png"

    def test_favicon_never_hashed(self):
        asset = classify_asset("/app/favicon.ico", category="favicon", page_extensions=["py"])
        naming = resolve_naming(asset, b"bytes")
        assert naming.content_hash == ""
        assert naming.hash_query == ""
        assert naming.path_segment == "favicon.ico"

    def test_dynamic_uses_base_name_and_skips_hash(self):
        asset = classify_asset(
            "/app/opengraph-image.py", category="openGraph", page_extensions=["py"]
        )
        naming = resolve_naming(asset, b"def default(): ...")
        assert naming.path_segment == "opengraph-image"
        assert naming.hash_query == ""

    def test_is_deterministic(self):
        asset = classify_asset(Path("/app/icon.png"), category="icon", page_extensions=[])
        assert resolve_naming(asset, b"abc") == resolve_naming(asset, b"abc")
        assert resolve_naming(asset, b"abc") != resolve_naming(asset, b"abd")
