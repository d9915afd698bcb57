import io
import logging
from pathlib import Path
from typing import Callable

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.ttLib import TTCollection, TTFont
from fontTools.ttLib.tables._g_l_y_f import Glyph

logger = logging.getLogger(__name__)

FAMILY = "Example Sans"

# (style name, usWeightClass, italic) for the 14-style test collection
STYLES: list[tuple[str, int, bool]] = [
    ("Thin", 100, False),
    ("Thin Italic", 100, True),
    ("Light", 300, False),
    ("Light Italic", 300, True),
    ("Regular", 400, False),
    ("Italic", 400, True),
    ("Medium", 500, False),
    ("Medium Italic", 500, True),
    ("SemiBold", 600, False),
    ("SemiBold Italic", 600, True),
    ("Bold", 700, False),
    ("Bold Italic", 700, True),
    ("Black", 900, False),
    ("Black Italic", 900, True),
]


def _rectangle(top: int) -> Glyph:
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, top))
    pen.lineTo((500, top))
    pen.lineTo((500, 0))
    pen.closePath()
    return pen.glyph()


def build_font(
    family: str = FAMILY,
    style: str = "Regular",
    weight: int = 400,
    italic: bool = False,
    postscript_name: str | None = None,
) -> TTFont:
    """Build a minimal TrueType font with glyphs for space, A and B."""
    if postscript_name is None:
        postscript_name = f"{family}-{style}".replace(" ", "")

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "space", "A", "B"])
    fb.setupCharacterMap({0x20: "space", 0x41: "A", 0x42: "B"})
    fb.setupGlyf(
        {
            ".notdef": _rectangle(700),
            "space": TTGlyphPen(None).glyph(),
            "A": _rectangle(700),
            "B": _rectangle(500),
        }
    )
    fb.setupMaxp()
    fb.setupHorizontalMetrics(
        {".notdef": (600, 100), "space": (300, 0), "A": (600, 100), "B": (600, 100)}
    )
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable(
        {
            "familyName": family,
            "styleName": style,
            "uniqueFontIdentifier": postscript_name,
            "fullName": f"{family} {style}",
            "psName": postscript_name,
            "version": "Version 1.000",
        }
    )
    fb.setupOS2(
        usWeightClass=weight,
        fsSelection=0x01 if italic else 0x40,
        sTypoAscender=800,
        sTypoDescender=-200,
        usWinAscent=800,
        usWinDescent=200,
    )
    fb.setupPost()

    # Round-trip through bytes so the font behaves like one read from disk
    buffer = io.BytesIO()
    fb.font.save(buffer)
    buffer.seek(0)
    return TTFont(buffer)


def build_collection(path: Path, fonts: list[TTFont]) -> Path:
    """Write fonts into a .ttc collection file."""
    collection = TTCollection()
    collection.fonts = fonts
    collection.save(str(path))
    return path


@pytest.fixture
def make_font() -> Callable[..., TTFont]:
    return build_font


@pytest.fixture
def font_path(tmp_path: Path) -> Path:
    """A standalone Bold font file."""
    path = tmp_path / "ExampleSans-Bold.ttf"
    build_font(style="Bold", weight=700).save(str(path))
    return path


@pytest.fixture
def collection_path(tmp_path: Path) -> Path:
    """A collection with the 14 styles in STYLES."""
    fonts = [build_font(style=s, weight=w, italic=i) for s, w, i in STYLES]
    return build_collection(tmp_path / "ExampleSans.ttc", fonts)


@pytest.fixture
def make_collection(tmp_path: Path) -> Callable[..., Path]:
    def _make(fonts: list[TTFont], name: str = "Custom.ttc") -> Path:
        return build_collection(tmp_path / name, fonts)

    return _make
