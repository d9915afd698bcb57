"""Splitting font collections (.ttc/.otc) into individual font files."""

import io
import logging
import os
import re
from pathlib import Path
from typing import Iterable, Iterator

from fontTools.ttLib import TTCollection, TTFont

from fontsplit import font_subsetting
from fontsplit.font_info import FontInfo, is_collection
from fontsplit.resource_limits import ResourceLimits
from fontsplit.timeout_utils import with_timeout

logger = logging.getLogger(__name__)

SPLIT_FORMATS = ("auto",) + font_subsetting.OUTPUT_FORMATS

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def open_fonts(
    path: str | os.PathLike, limits: ResourceLimits | None = None
) -> Iterator[tuple[FontInfo, TTFont]]:
    """Iterate over the fonts in a collection or standalone font file.

    Args:
        path: Path to a .ttc/.otc collection or a single .ttf/.otf/.woff file.
        limits: Resource limits. Defaults to ResourceLimits.default().

    Yields:
        (FontInfo, TTFont) pairs in member order. FontInfo.index is None for
        standalone fonts.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a resource limit is exceeded.
        fontTools.ttLib.TTLibError: If the file is not a font.
    """
    path = str(path)
    limits = limits or ResourceLimits.default()
    limits.check_file_size(path)

    if not is_collection(path):
        logger.debug(f"{path} is a single font")
        with TTFont(path) as font:
            yield FontInfo.from_ttfont(font, file=path), font
        return

    with TTCollection(path) as collection:
        limits.check_font_count(len(collection.fonts))
        logger.debug(f"{path} is a collection of {len(collection.fonts)} font(s)")
        for index, font in enumerate(collection.fonts):
            yield FontInfo.from_ttfont(font, file=path, index=index), font


def read_font_infos(
    path: str | os.PathLike, limits: ResourceLimits | None = None
) -> list[FontInfo]:
    """Read metadata of every font in a collection or standalone font file."""
    return [info for info, _ in open_fonts(path, limits)]


def load_fonts(
    paths: Iterable[str | os.PathLike], limits: ResourceLimits | None = None
) -> list[tuple[FontInfo, TTFont]]:
    """Load every font from several files into memory.

    Unlike open_fonts(), the returned fonts stay usable after their source
    files are closed.
    """
    loaded = []
    for path in paths:
        for info, font in open_fonts(path, limits):
            buffer = io.BytesIO()
            font.save(buffer)
            buffer.seek(0)
            loaded.append((info, TTFont(buffer)))
    return loaded


def sanitize_filename(name: str) -> str:
    """Make a name record safe to use as a file stem.

    Characters outside ``[A-Za-z0-9._-]`` become ``-``, runs of ``-`` collapse
    and leading/trailing ``-`` are stripped.

    Example:
        >>> sanitize_filename("Example Sans Bold/Italic")
        'Example-Sans-Bold-Italic'
    """
    stem = _UNSAFE_CHARS.sub("-", name)
    stem = re.sub(r"-{2,}", "-", stem)
    return stem.strip("-")


def output_extension(font: TTFont, output_format: str = "auto") -> str:
    """Get the file extension for a split font.

    ``auto`` picks ``.otf`` for CFF/CFF2 outlines and ``.ttf`` otherwise.
    """
    if output_format == "auto":
        return ".otf" if ("CFF " in font or "CFF2" in font) else ".ttf"
    return f".{output_format}"


def output_stem(font: TTFont, info: FontInfo, name_id: int, fallback: str) -> str:
    """Get the output file stem from a name record of the font.

    Falls back to the PostScript name and then to ``fallback`` when the
    record is missing or sanitizes to an empty string.
    """
    candidates = []
    if "name" in font:
        candidates.append(font["name"].getDebugName(name_id))
    candidates.append(info.postscript_name)
    for candidate in candidates:
        if candidate:
            stem = sanitize_filename(candidate)
            if stem:
                return stem
    logger.warning(
        f"No usable name ID {name_id} in font #{info.index}, using {fallback}"
    )
    return fallback


def split_collection(
    input_path: str | os.PathLike,
    output_dir: str | os.PathLike = ".",
    name_id: int = 6,
    output_format: str = "auto",
    unicodes: set[int] | None = None,
    overwrite: bool = False,
    limits: ResourceLimits | None = None,
) -> list[tuple[FontInfo, Path]]:
    """Split a font collection into one file per font.

    Each font is saved under the value of its ``name_id`` name record
    (PostScript name by default). Standalone fonts are accepted and written
    as a single-font split.

    Args:
        input_path: Path to the collection.
        output_dir: Directory to write fonts to. Created if missing.
        name_id: Name record used for the output file name (4 = full name,
            6 = PostScript name).
        output_format: "auto", "ttf", "otf", "woff" or "woff2".
        unicodes: Optional codepoints to subset each font to.
        overwrite: Replace existing files instead of raising.
        limits: Resource limits. Defaults to ResourceLimits.default().

    Returns:
        List of (FontInfo, output path) in member order.

    Raises:
        ValueError: If output_format is unsupported or a limit is exceeded.
        FileExistsError: If an output file exists and overwrite is False.
        TimeoutError: If splitting exceeds the configured timeout.
    """
    if output_format not in SPLIT_FORMATS:
        raise ValueError(
            f"Unsupported output format: {output_format}. "
            f"Supported formats: {', '.join(SPLIT_FORMATS)}"
        )

    limits = limits or ResourceLimits.default()
    return with_timeout(
        _split,
        limits.timeout,
        str(input_path),
        Path(output_dir),
        name_id,
        output_format,
        unicodes,
        overwrite,
        limits,
    )


def _split(
    input_path: str,
    output_dir: Path,
    name_id: int,
    output_format: str,
    unicodes: set[int] | None,
    overwrite: bool,
    limits: ResourceLimits,
) -> list[tuple[FontInfo, Path]]:
    fallback_base = sanitize_filename(Path(input_path).stem) or "font"
    used_stems: set[str] = set()
    results: list[tuple[FontInfo, Path]] = []

    output_dir.mkdir(parents=True, exist_ok=True)

    for info, font in open_fonts(input_path, limits):
        index = info.index or 0
        stem = output_stem(font, info, name_id, f"{fallback_base}-{index}")
        if stem in used_stems:
            logger.warning(
                f"Duplicate output name '{stem}' for font #{index}, appending index"
            )
            stem = f"{stem}-{index}"
        used_stems.add(stem)

        path = output_dir / (stem + output_extension(font, output_format))
        if path.exists() and not overwrite:
            raise FileExistsError(
                f"Output file already exists: {path}. Use overwrite to replace it."
            )

        if unicodes is not None:
            font_subsetting.subset_font(font, unicodes)

        fmt = output_format
        if fmt == "auto":
            fmt = path.suffix.lstrip(".")
        path.write_bytes(font_subsetting.serialize_font(font, fmt))
        logger.info(f"Wrote {info.full_name or stem} ({info.weight}) to {path}")
        results.append((info, path))

    return results
