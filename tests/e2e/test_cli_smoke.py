"""End-to-end CLI smoke tests.

These exercise the typer application in-process:
- `generate` for a static icon (stdout and --output)
- `generate` failing on a corrupt image
- `build` over a small app directory
- `config show`
"""

from __future__ import annotations

import json
from hashlib import sha256
from pathlib import Path

import pytest
from typer.testing import CliRunner

from metaimage import get_version
from metaimage.cli.app import app

from ..helpers import encode_image, load_generated

pytestmark = pytest.mark.e2e

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == get_version()


def test_generate_static_icon_to_stdout(tmp_path):
    content = encode_image(48, 48)
    (tmp_path / "icon.png").write_bytes(content)

    result = runner.invoke(app, ["generate", "icon.png", "--type", "icon", "--segment", "/docs"])

    assert result.exit_code == 0, result.output
    route = load_generated(result.stdout)["default"]
    assert route({"params": {}}) == [
        {
            "type": "image/png",
            "sizes": "48x48",
            "url": f"/docs/icon.png?{sha256(content).hexdigest()[:16]}",
        }
    ]
    assert (tmp_path / "metaimage.log").exists()


def test_generate_dynamic_with_output_file(tmp_path):
    (tmp_path / "opengraph-image.py").write_text("alt = 'Hi'\n", encoding="utf-8")
    target = tmp_path / "generated" / "og.py"

    result = runner.invoke(
        app,
        [
            "generate",
            "opengraph-image.py",
            "--type",
            "openGraph",
            "--base-path",
            "/base",
            "--output",
            str(target),
        ],
    )

    assert result.exit_code == 0, result.output
    source = target.read_text(encoding="utf-8")
    assert "async def default(props)" in source
    assert "'/base'" in source


def test_generate_rejects_corrupt_image(tmp_path):
    (tmp_path / "icon.png").write_bytes(b"nope")

    result = runner.invoke(app, ["generate", "icon.png", "--type", "icon"])

    assert result.exit_code == 1
    assert "Invalid image format" in result.output


def test_generate_rejects_invalid_export_name(tmp_path):
    (tmp_path / "icon.py").write_text("__all__ = ['class']\n", encoding="utf-8")

    result = runner.invoke(app, ["generate", "icon.py", "--type", "icon"])

    assert result.exit_code == 1
    assert "Unable to load icon.py" in result.output


def test_generate_rejects_empty_page_extension(tmp_path):
    (tmp_path / "icon.png").write_bytes(encode_image(8, 8))

    result = runner.invoke(app, ["generate", "icon.png", "--type", "icon", "--page-ext", ""])

    assert result.exit_code == 1


def test_generate_rejects_unknown_type(tmp_path):
    (tmp_path / "icon.png").write_bytes(encode_image(8, 8))

    result = runner.invoke(app, ["generate", "icon.png", "--type", "banner"])

    assert result.exit_code == 2


def test_build_app_directory(tmp_path):
    app_dir = tmp_path / "app"
    (app_dir / "about").mkdir(parents=True)
    (app_dir / "favicon.ico").write_bytes(encode_image(16, 16, "ICO"))
    (app_dir / "about" / "icon.png").write_bytes(encode_image(32, 32))

    result = runner.invoke(app, ["build", str(app_dir), "--output-dir", "out"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "favicon.ico.meta.py").exists()
    icon_module = tmp_path / "out" / "about" / "icon.png.meta.py"
    [descriptor] = load_generated(icon_module.read_text(encoding="utf-8"))["default"]({"params": {}})
    assert descriptor["url"].startswith("/about/icon.png?")


def test_build_reports_failures(tmp_path):
    app_dir = tmp_path / "app"
    app_dir.mkdir()
    (app_dir / "icon.png").write_bytes(b"broken")

    result = runner.invoke(app, ["build", str(app_dir)])

    assert result.exit_code == 1
    assert not (tmp_path / ".metaimage" / "icon.png.meta.py").exists()


def test_build_with_no_assets(tmp_path):
    (tmp_path / "empty").mkdir()

    result = runner.invoke(app, ["build", "empty"])

    assert result.exit_code == 0
    assert "No metadata images found" in result.stdout


def test_config_show_json(tmp_path):
    config_path = tmp_path / "metaimage.yaml"
    config_path.write_text("loader:\n  base_path: /shop\n", encoding="utf-8")

    result = runner.invoke(app, ["--config", str(config_path), "config", "show", "--format", "json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["loader"]["base_path"] == "/shop"
    assert data["build"]["output_dir"] == ".metaimage"


def test_config_missing_file(tmp_path):
    result = runner.invoke(app, ["--config", str(Path("missing.yaml")), "config", "show"])
    assert result.exit_code == 2
