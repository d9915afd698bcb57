import base64
import dataclasses
import logging
import re

try:
    from typing import Self  # type: ignore
except ImportError:
    from typing_extensions import Self

from fontTools.ttLib import TTFont

logger = logging.getLogger(__name__)


# ==============================================================================
# Weight names
# ==============================================================================
# CSS / OS/2 weight class names, keyed by the multiple of 100 they denote.

WEIGHT_NAMES: dict[int, str] = {
    100: "Thin",
    200: "ExtraLight",
    300: "Light",
    400: "Regular",
    500: "Medium",
    600: "SemiBold",
    700: "Bold",
    800: "ExtraBold",
    900: "Black",
}

# Words found in style names and the CSS weight they imply.
WEIGHT_SUFFIXES: dict[str, int] = {
    "Hairline": 100,
    "Thin": 100,
    "ExtraLight": 200,
    "UltraLight": 200,
    "ExLight": 200,
    "Light": 300,
    "SemiLight": 300,
    "Book": 400,
    "Normal": 400,
    "Regular": 400,
    "Roman": 400,
    "Medium": 500,
    "SemiBold": 600,
    "DemiBold": 600,
    "DeBold": 600,
    "DB": 600,
    "Bold": 700,
    "B": 700,
    "ExtraBold": 800,
    "UltraBold": 800,
    "ExBold": 800,
    "EB": 800,
    "Black": 900,
    "Heavy": 900,
    "Ultra": 900,
    "UB": 900,
}

# Japanese weight notation (Hiragino, Morisawa)
JAPANESE_WEIGHT_SUFFIXES: dict[str, int] = {
    "W0": 100,
    "W1": 200,
    "W2": 200,
    "W3": 300,
    "W4": 400,
    "W5": 500,
    "W6": 600,
    "W7": 700,
    "W8": 800,
    "W9": 900,
}

# Words that may appear in a style name without implying a weight.
_STYLE_ONLY_WORDS = {"italic", "oblique", "slanted", "condensed", "expanded"}


def snap_weight(weight: float) -> int:
    """Snap an OS/2 weight class to a CSS weight.

    Values are clamped to [1, 1000], rounded to the nearest multiple of 100
    (exact halves round up), and clamped again to [100, 900].

    Example:
        >>> snap_weight(250)
        300
        >>> snap_weight(1000)
        900
    """
    value = min(max(1, weight), 1000)
    snapped = int((value + 50) // 100) * 100
    return min(max(100, snapped), 900)


def weight_from_style_name(style: str) -> int | None:
    """Infer the CSS weight implied by a style name.

    Spaces, hyphens and underscores are ignored, so "Extra Bold", "Extra-Bold"
    and "ExtraBold" are equivalent. Matching is case-insensitive. Style-only
    words such as "Italic" are stripped first, so "Bold Italic" gives 700 and a
    bare "Italic" gives 400.

    Args:
        style: Style (subfamily) name, e.g. "SemiBold Italic" or "W6".

    Returns:
        CSS weight (100-900), or None if no weight word is recognized.
    """
    words = [w for w in re.split(r"[\s_\-]+", style.strip()) if w]
    remaining = [w for w in words if w.lower() not in _STYLE_ONLY_WORDS]
    if words and not remaining:
        return 400

    compact = "".join(remaining)
    if not compact:
        return None

    if compact.upper() in JAPANESE_WEIGHT_SUFFIXES:
        return JAPANESE_WEIGHT_SUFFIXES[compact.upper()]

    # Abbreviations are only trusted when they make up the whole style name
    if compact in WEIGHT_SUFFIXES:
        return WEIGHT_SUFFIXES[compact]

    lowered = compact.lower()
    for key in sorted(WEIGHT_SUFFIXES, key=len, reverse=True):
        if len(key) <= 2:
            continue
        if lowered == key.lower():
            return WEIGHT_SUFFIXES[key]

    # Longest weight word contained in the name, e.g. "DisplayBold"
    for key in sorted(WEIGHT_SUFFIXES, key=len, reverse=True):
        if len(key) > 2 and key.lower() in lowered:
            return WEIGHT_SUFFIXES[key]

    return None


@dataclasses.dataclass
class FontInfo:
    """Font information read from the name, OS/2 and head tables.

    Attributes:
        postscript_name: PostScript name (name ID 6).
        full_name: Full font name (name ID 4).
        family: Family name, preferring the typographic family (ID 16).
        style: Style name, preferring the typographic subfamily (ID 17).
        weight: OS/2 usWeightClass. 400 is regular and 700 is bold.
        italic: Whether the font is flagged italic.
        file: Path the font was read from.
        index: Member index in a font collection, or None for a single font.
    """

    postscript_name: str
    full_name: str
    family: str
    style: str
    weight: int
    italic: bool = False
    file: str = ""
    index: int | None = None

    @property
    def css_weight(self) -> int:
        """Weight class snapped to a multiple of 100 in [100, 900]."""
        return snap_weight(self.weight)

    @property
    def weight_name(self) -> str:
        return WEIGHT_NAMES[self.css_weight]

    @property
    def bold(self) -> bool:
        return self.css_weight >= 700

    @property
    def style_weight(self) -> int | None:
        """Weight implied by the style name, if any."""
        return weight_from_style_name(self.style)

    def has_weight_mismatch(self) -> bool:
        """Check if the weight class disagrees with the style name.

        Returns False when the style name carries no recognizable weight.
        """
        implied = self.style_weight
        return implied is not None and implied != self.css_weight

    def to_font_face_css(self, data_uri: str, family: str | None = None) -> str:
        """Generate @font-face CSS rule for this font.

        Args:
            data_uri: Base64 data URI for the font file (e.g., 'data:font/ttf;base64,...').
            family: Family name to register the font under. Defaults to the
                font's own family name.

        Returns:
            CSS @font-face rule string.
        """
        font_style = "italic" if self.italic else "normal"

        return f"""@font-face {{
  font-family: '{family or self.family}';
  src: url({data_uri});
  font-weight: {self.css_weight};
  font-style: {font_style};
}}"""

    def to_dict(self) -> dict[str, str | int | bool | None]:
        """Convert FontInfo to a serializable dictionary."""
        data = dataclasses.asdict(self)
        data["css_weight"] = self.css_weight
        return data

    @classmethod
    def from_dict(cls, data: dict[str, str | int | bool | None]) -> Self:
        """Create FontInfo from a dictionary produced by to_dict()."""
        index = data.get("index")
        return cls(
            postscript_name=str(data["postscript_name"]),
            full_name=str(data["full_name"]),
            family=str(data["family"]),
            style=str(data["style"]),
            weight=int(data["weight"]),  # type: ignore[arg-type]
            italic=bool(data.get("italic", False)),
            file=str(data.get("file") or ""),
            index=None if index is None else int(index),  # type: ignore[arg-type]
        )

    @classmethod
    def from_ttfont(
        cls, font: TTFont, file: str = "", index: int | None = None
    ) -> Self:
        """Read metadata from an opened font.

        Args:
            font: fontTools TTFont, standalone or a collection member.
            file: Path the font was read from.
            index: Member index in a collection.

        Returns:
            FontInfo instance.
        """
        name_table = font["name"] if "name" in font else None

        def best(getter: str, name_id: int) -> str:
            if name_table is None:
                return ""
            value = getattr(name_table, getter)()
            if value is None:
                value = name_table.getDebugName(name_id)
            return value or ""

        postscript_name = (
            (name_table.getDebugName(6) or "") if name_table is not None else ""
        )

        if "OS/2" in font:
            os2 = font["OS/2"]
            weight = int(os2.usWeightClass)
            italic = bool(os2.fsSelection & 0x01)
        else:
            logger.debug(f"No OS/2 table in {file or postscript_name}, assuming 400")
            weight = 400
            italic = False

        if not italic and "head" in font:
            italic = bool(font["head"].macStyle & 0x02)

        return cls(
            postscript_name=postscript_name,
            full_name=best("getBestFullName", 4),
            family=best("getBestFamilyName", 1),
            style=best("getBestSubFamilyName", 2),
            weight=weight,
            italic=italic,
            file=file,
            index=index,
        )

    @classmethod
    def open(cls, path: str, index: int = 0) -> Self:
        """Read metadata from a font file.

        For a collection, ``index`` selects the member.

        Raises:
            FileNotFoundError: If the file does not exist.
            fontTools.ttLib.TTLibError: If the file is not a font.
        """
        collection = is_collection(path)
        with TTFont(path, fontNumber=index, lazy=True) as font:
            return cls.from_ttfont(
                font, file=str(path), index=index if collection else None
            )


def encode_font_data_uri(font_bytes: bytes, font_format: str) -> str:
    """Encode font bytes as a base64 data URI.

    Args:
        font_bytes: Font file data as bytes.
        font_format: Font format - "ttf", "otf", "woff" or "woff2".

    Returns:
        Data URI string (e.g., 'data:font/woff2;base64,...').

    Raises:
        ValueError: If font_format is unsupported.
    """
    mime_types = {
        "ttf": "font/ttf",
        "otf": "font/otf",
        "woff": "font/woff",
        "woff2": "font/woff2",
    }

    if font_format not in mime_types:
        raise ValueError(
            f"Unsupported font format: {font_format}. "
            f"Supported formats: {', '.join(mime_types.keys())}"
        )

    base64_data = base64.b64encode(font_bytes).decode("utf-8")
    return f"data:{mime_types[font_format]};base64,{base64_data}"


def is_collection(path: str) -> bool:
    """Check whether a file starts with the font collection tag ``ttcf``.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    with open(path, "rb") as f:
        return f.read(4) == b"ttcf"
