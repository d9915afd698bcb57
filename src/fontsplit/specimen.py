"""Specimen sheets showing every style of a split collection.

One line per font: a label with the style name and weight class, followed
by sample text set in that font.
"""

import io
import logging
from typing import Sequence

import svgwrite
from fontTools.ttLib import TTFont
from PIL import Image, ImageDraw, ImageFont

from fontsplit.collection import output_extension
from fontsplit.font_info import FontInfo, encode_font_data_uri
from fontsplit.font_subsetting import serialize_font
from fontsplit.image_utils import trim_image

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "The quick brown fox jumps over the lazy dog"

LABEL_FAMILY = "sans-serif"


def specimen_label(info: FontInfo) -> str:
    """Label shown next to a sample line, e.g. "Bold Italic (700)"."""
    name = info.style or info.full_name or info.postscript_name
    return f"{name} ({info.weight})"


def render_svg_specimen(
    fonts: Sequence[tuple[FontInfo, TTFont]],
    text: str | None = None,
    size: int = 32,
) -> str:
    """Render a specimen sheet as SVG with the fonts embedded.

    Each font is registered through an ``@font-face`` rule under its own
    alias, so fonts sharing a family, weight and style stay distinguishable.

    Args:
        fonts: (FontInfo, TTFont) pairs, e.g. from collection.open_fonts().
        text: Sample text. Defaults to a pangram.
        size: Font size of the sample text in pixels.

    Returns:
        SVG document as a string.
    """
    text = text or DEFAULT_TEXT
    label_size = max(size // 2, 8)
    line_height = int(size * 1.5)
    label_width = int(
        max((len(specimen_label(info)) for info, _ in fonts), default=0)
        * label_size
        * 0.6
    )
    width = label_width + int(len(text) * size * 0.6) + size * 2
    height = line_height * len(fonts) + size

    dwg = svgwrite.Drawing(size=(width, height), profile="full", debug=False)

    rules = []
    for index, (info, font) in enumerate(fonts):
        fmt = output_extension(font).lstrip(".")
        data_uri = encode_font_data_uri(serialize_font(font, fmt), fmt)
        rules.append(info.to_font_face_css(data_uri, family=f"specimen-{index}"))
    dwg.defs.add(dwg.style("\n".join(rules)))

    for index, (info, _) in enumerate(fonts):
        baseline = size + line_height * index
        dwg.add(
            dwg.text(
                specimen_label(info),
                insert=(size // 2, baseline),
                font_family=LABEL_FAMILY,
                font_size=label_size,
                fill="#666666",
            )
        )
        dwg.add(
            dwg.text(
                text,
                insert=(size // 2 + label_width + size, baseline),
                font_family=f"specimen-{index}",
                font_size=size,
                font_weight=info.css_weight,
                font_style="italic" if info.italic else "normal",
            )
        )

    logger.debug(f"Rendered SVG specimen with {len(fonts)} font(s)")
    return dwg.tostring()


def render_png_specimen(
    fonts: Sequence[tuple[FontInfo, TTFont]],
    text: str | None = None,
    size: int = 32,
    background: tuple[int, int, int, int] | None = (255, 255, 255, 255),
    mode: str = "RGBA",
) -> Image.Image:
    """Render a specimen sheet as an image.

    Args:
        fonts: (FontInfo, TTFont) pairs, e.g. from collection.open_fonts().
        text: Sample text. Defaults to a pangram.
        size: Font size of the sample text in pixels.
        background: Background color, or None for transparent.
        mode: "RGBA", or "RGB" for formats without alpha such as JPEG. RGB
            output is always flattened onto the background, white if None.

    Returns:
        PIL image with blank margins trimmed.
    """
    if mode not in ("RGBA", "RGB"):
        raise ValueError(f"Unsupported image mode: {mode}. Supported: RGBA, RGB")
    if mode == "RGB" and background is None:
        background = (255, 255, 255, 255)

    text = text or DEFAULT_TEXT
    padding = size // 2
    line_height = int(size * 1.5)
    label_font = ImageFont.load_default()

    scratch = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    lines = []
    for info, font in fonts:
        # FreeType reads sfnt data, so drop any woff flavor
        data = serialize_font(font, output_extension(font).lstrip("."))
        sample_font = ImageFont.truetype(io.BytesIO(data), size)
        label = specimen_label(info)
        label_bbox = scratch.textbbox((0, 0), label, font=label_font)
        text_bbox = scratch.textbbox((0, 0), text, font=sample_font)
        lines.append((label, label_bbox, sample_font, text_bbox))

    if not lines:
        return Image.new("RGBA", (1, 1), background or (0, 0, 0, 0)).convert(mode)

    label_width = max(label_bbox[2] for _, label_bbox, _, _ in lines)
    text_width = max(text_bbox[2] for _, _, _, text_bbox in lines)
    width = padding * 3 + label_width + text_width
    height = padding * 2 + line_height * len(lines)

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    for index, (label, _, sample_font, _) in enumerate(lines):
        top = padding + line_height * index
        draw.text(
            (padding, top + size // 3), label, font=label_font, fill=(102, 102, 102, 255)
        )
        draw.text(
            (padding * 2 + label_width, top), text, font=sample_font, fill=(0, 0, 0, 255)
        )

    image = trim_image(image, padding=padding)
    if background is not None:
        canvas = Image.new("RGBA", image.size, background)
        canvas.alpha_composite(image)
        image = canvas

    logger.debug(f"Rendered specimen {image.size} with {len(lines)} font(s)")
    return image.convert(mode)
