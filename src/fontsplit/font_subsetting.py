"""Font subsetting and serialization utilities for reducing split font sizes."""

import io
import logging
import re

from fontTools import subset
from fontTools.ttLib import TTFont

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("ttf", "otf", "woff", "woff2")

_RANGE_PATTERN = re.compile(
    r"^(?:u\+|0x)?([0-9a-f]{1,6})(?:-(?:u\+|0x)?([0-9a-f]{1,6}))?$", re.IGNORECASE
)


def _subset_options() -> subset.Options:
    # Split fonts must keep their name table intact; check and manifest
    # read family, style and weight back from it.
    options = subset.Options()
    options.drop_tables = []
    options.layout_features = ["*"]
    options.name_IDs = ["*"]
    options.name_languages = ["*"]
    options.name_legacy = True
    options.notdef_outline = True
    options.glyph_names = True
    return options


def subset_font(font: TTFont, unicode_codepoints: set[int]) -> TTFont:
    """Subset a font in place to include only specified Unicode codepoints.

    This function uses fontTools (pyftsubset) to strip every glyph not needed
    for the specified codepoints.

    Args:
        font: Font to subset. It is modified in place.
        unicode_codepoints: Set of Unicode codepoints (integers) to include.

    Returns:
        The same font object, for chaining.

    Example:
        >>> font = TTFont("NotoSansCJK-Bold.otf")
        >>> subset_font(font, {0x41, 0x42, 0x43, 0x3042})  # A, B, C, あ
    """
    if not unicode_codepoints:
        logger.warning(
            "No Unicode codepoints provided for subsetting, using all glyphs"
        )

    unicodes = sorted(unicode_codepoints)

    logger.debug(f"Subsetting font ({len(unicodes)} codepoint(s))")

    subsetter = subset.Subsetter(options=_subset_options())
    if unicodes:
        subsetter.populate(unicodes=unicodes)
    else:
        subsetter.populate(glyphs=font.getGlyphOrder())
    subsetter.subset(font)

    return font


def serialize_font(font: TTFont, output_format: str) -> bytes:
    """Serialize a font to bytes in the requested container format.

    Args:
        font: Font to serialize.
        output_format: "ttf", "otf", "woff" or "woff2". The first two only
            differ in file extension; the outlines are never converted.

    Returns:
        Font file as bytes.

    Raises:
        ValueError: If output_format is unsupported.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported font format: {output_format}. "
            f"Supported formats: {', '.join(OUTPUT_FORMATS)}"
        )

    font.flavor = output_format if output_format in ("woff", "woff2") else None

    with io.BytesIO() as output_buffer:
        font.save(output_buffer)
        font_bytes = output_buffer.getvalue()

    logger.debug(
        f"Serialized font as {output_format}: {len(font_bytes)} bytes "
        f"(~{len(font_bytes) / 1024:.1f} KB)"
    )
    return font_bytes


def parse_unicodes(ranges: str) -> set[int]:
    """Parse a list of Unicode codepoints and ranges.

    Accepts ``U+0041``, ``u+41``, ``0x41`` or bare hex ``41``, ranges joined
    by ``-``, separated by commas and/or whitespace.

    Example:
        >>> sorted(parse_unicodes("U+0041-0043, 0x30"))
        [48, 65, 66, 67]

    Raises:
        ValueError: On malformed input or reversed ranges.
    """
    codepoints: set[int] = set()
    for token in re.split(r"[,\s]+", ranges.strip()):
        if not token:
            continue
        match = _RANGE_PATTERN.match(token)
        if not match:
            raise ValueError(f"Invalid Unicode range: {token!r}")
        start = int(match.group(1), 16)
        end = int(match.group(2), 16) if match.group(2) else start
        if end < start:
            raise ValueError(f"Reversed Unicode range: {token!r}")
        if end > 0x10FFFF:
            raise ValueError(f"Codepoint out of range: {token!r}")
        codepoints.update(range(start, end + 1))
    return codepoints


def text_to_codepoints(text: str) -> set[int]:
    """Convert text to the set of codepoints it uses.

    Control characters (C0, DEL and C1) are dropped since they are never
    rendered and would only pull .notdef mappings into the subset.
    """
    return {
        ord(char)
        for char in text
        if ord(char) >= 32 and not (127 <= ord(char) <= 159)
    }
