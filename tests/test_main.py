"""Tests for the fontsplit command line interface."""

import json
import time
from pathlib import Path

import pytest
import yaml
from fontTools.ttLib import TTFont
from PIL import Image

from fontsplit import font_subsetting
from fontsplit.__main__ import main


class TestSplitCommand:
    def test_split(
        self, collection_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        output_dir = tmp_path / "fonts"
        assert main(["split", str(collection_path), str(output_dir)]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 14
        assert lines[0] == f"{output_dir / 'ExampleSans-Thin.ttf'}\t100"
        assert len(list(output_dir.glob("*.ttf"))) == 14

    def test_split_with_text_subset(self, collection_path: Path, tmp_path: Path) -> None:
        output_dir = tmp_path / "fonts"
        argv = ["split", str(collection_path), str(output_dir), "--text", "A"]
        assert main(argv) == 0
        with TTFont(str(output_dir / "ExampleSans-Bold.ttf")) as font:
            assert set(font.getBestCmap()) == {0x41}

    def test_split_with_unicodes(self, collection_path: Path, tmp_path: Path) -> None:
        output_dir = tmp_path / "fonts"
        argv = [
            "split",
            str(collection_path),
            str(output_dir),
            "--unicodes",
            "U+0042",
            "--format",
            "woff2",
        ]
        assert main(argv) == 0
        with TTFont(str(output_dir / "ExampleSans-Bold.woff2")) as font:
            assert set(font.getBestCmap()) == {0x42}

    def test_split_existing_output(
        self, collection_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        output_dir = tmp_path / "fonts"
        assert main(["split", str(collection_path), str(output_dir)]) == 0
        assert main(["split", str(collection_path), str(output_dir)]) == 1
        assert "Error: Output file already exists" in capsys.readouterr().err
        argv = ["split", str(collection_path), str(output_dir), "--overwrite"]
        assert main(argv) == 0

    def test_split_missing_input(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["split", str(tmp_path / "missing.ttc")]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_split_timeout(
        self,
        collection_path: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def slow_serialize(font: TTFont, output_format: str) -> bytes:
            time.sleep(3)
            return b""

        monkeypatch.setattr(font_subsetting, "serialize_font", slow_serialize)
        # The flag wins over the environment, which would disable the timeout
        monkeypatch.setenv("FONTSPLIT_TIMEOUT", "0")
        argv = ["--timeout", "1", "split", str(collection_path), str(tmp_path / "out")]
        assert main(argv) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Font processing timed out after 1 seconds")

    def test_split_invalid_unicodes(
        self, collection_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        argv = ["split", str(collection_path), "--unicodes", "U+XYZ"]
        assert main(argv) == 1
        assert "Invalid Unicode range" in capsys.readouterr().err


class TestInfoCommand:
    def test_info_single_font(
        self, font_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["info", str(font_path)]) == 0
        assert capsys.readouterr().out == (
            "Family: Example Sans\nStyle: Bold\nWeight class: 700\n"
        )

    def test_info_collection(
        self, collection_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["info", str(collection_path)]) == 0
        out = capsys.readouterr().out
        assert out.count("Weight class:") == 14
        assert "[13] ExampleSans-BlackItalic" in out

    def test_info_index(
        self, collection_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["info", str(collection_path), "--index", "10"]) == 0
        assert capsys.readouterr().out == (
            "[10] ExampleSans-Bold\n"
            "Family: Example Sans\n"
            "Style: Bold\n"
            "Weight class: 700\n"
        )

    def test_info_index_out_of_range(
        self, collection_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["info", str(collection_path), "--index", "14"]) == 1
        assert "out of range" in capsys.readouterr().err

    def test_info_json(
        self, collection_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["info", str(collection_path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 14
        assert data[1]["style"] == "Thin Italic"
        assert data[1]["italic"] is True
        assert data[1]["css_weight"] == 100

    def test_info_warns_on_mismatch(
        self,
        make_font,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = tmp_path / "Bad.ttf"
        make_font(style="Bold", weight=400).save(str(path))
        assert main(["info", str(path)]) == 0
        assert "implies weight 700" in caplog.text


class TestManifestCommand:
    def test_manifest_stdout(
        self, collection_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        output_dir = tmp_path / "fonts"
        main(["split", str(collection_path), str(output_dir)])
        capsys.readouterr()

        fonts = [str(p) for p in sorted(output_dir.glob("*.ttf"))]
        assert main(["manifest", *fonts, "--family", "Brand"]) == 0
        manifest = yaml.safe_load(capsys.readouterr().out)

        [family] = manifest["flutter"]["fonts"]
        assert family["family"] == "Brand"
        assert len(family["fonts"]) == 14
        assert [f["weight"] for f in family["fonts"]] == [
            100, 100, 300, 300, 400, 400, 500, 500, 600, 600, 700, 700, 900, 900
        ]

    def test_manifest_output_file(self, font_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "fonts.json"
        argv = ["manifest", str(font_path), "--format", "json", "-o", str(output)]
        assert main(argv) == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["flutter"]["fonts"][0]["fonts"] == [
            {"asset": "fonts/ExampleSans-Bold.ttf", "weight": 700}
        ]

    def test_manifest_warns_for_collection(
        self, collection_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        assert main(["manifest", str(collection_path)]) == 0
        assert "split it before bundling" in caplog.text


class TestCheckCommand:
    def test_check(
        self, font_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        pubspec = tmp_path / "pubspec.yaml"
        pubspec.write_text(
            "flutter:\n"
            "  fonts:\n"
            "    - family: Example Sans\n"
            "      fonts:\n"
            f"        - asset: {font_path.name}\n"
            "          weight: 700\n"
        )
        assert main(["check", str(pubspec)]) == 0
        assert capsys.readouterr().out == "OK\n"

        pubspec.write_text(pubspec.read_text().replace("700", "500"))
        assert main(["check", str(pubspec)]) == 1
        assert "declared weight 500" in capsys.readouterr().out

    def test_check_invalid_weight(
        self, font_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        pubspec = tmp_path / "pubspec.yaml"
        pubspec.write_text(
            "flutter:\n"
            "  fonts:\n"
            "    - family: Example Sans\n"
            "      fonts:\n"
            f"        - asset: {font_path.name}\n"
            "          weight: bold\n"
        )
        assert main(["check", str(pubspec)]) == 1
        assert "must be an integer, got 'bold'" in capsys.readouterr().err


class TestSpecimenCommand:
    def test_svg(self, collection_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "specimen.svg"
        argv = ["specimen", str(collection_path), "-o", str(output), "--text", "AB"]
        assert main(argv) == 0
        assert output.read_text(encoding="utf-8").count("@font-face") == 14

    def test_png(self, font_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "specimen.png"
        argv = ["specimen", str(font_path), "-o", str(output), "--size", "16"]
        assert main(argv) == 0
        assert output.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_jpeg(self, font_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "specimen.jpg"
        assert main(["specimen", str(font_path), "-o", str(output)]) == 0
        with Image.open(output) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"

    def test_unsupported_extension(
        self, font_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        argv = ["specimen", str(font_path), "-o", str(tmp_path / "specimen.pdf")]
        assert main(argv) == 1
        assert "Unsupported specimen format" in capsys.readouterr().err


def test_missing_command() -> None:
    with pytest.raises(SystemExit):
        main([])
