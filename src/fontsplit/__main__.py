"""Command line interface for fontsplit.

Usage:
    fontsplit split Fonts.ttc fonts/
    fontsplit info fonts/ExampleSans-Bold.ttf
    fontsplit manifest fonts/*.ttf --family "Example Sans"
    fontsplit check pubspec.yaml
    fontsplit specimen Fonts.ttc -o specimen.svg
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from fontsplit import collection, manifest, specimen
from fontsplit.font_info import FontInfo
from fontsplit.font_subsetting import parse_unicodes, text_to_codepoints
from fontsplit.resource_limits import ResourceLimits

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".webp": "WEBP"}

# Formats that cannot store an alpha channel
OPAQUE_FORMATS = {"JPEG"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="fontsplit",
        description="Split font collections and inspect font weight metadata.",
    )
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default="WARNING",
        help="Logging level, default WARNING",
    )
    parser.add_argument(
        "--timeout",
        metavar="SECONDS",
        type=int,
        default=None,
        help="Timeout for splitting. Default: $FONTSPLIT_TIMEOUT or 120",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    split = subparsers.add_parser(
        "split", help="Split a font collection into individual font files."
    )
    split.add_argument(
        "input", metavar="INPUT", type=str, help="Font collection (.ttc/.otc)"
    )
    split.add_argument(
        "output",
        metavar="PATH",
        type=str,
        nargs="?",
        default=".",
        help="Output directory. Default: current directory",
    )
    split.add_argument(
        "--name-id",
        metavar="ID",
        type=int,
        default=6,
        help="Name record used for file names (4 = full name, 6 = PostScript name). "
        "Default: 6",
    )
    split.add_argument(
        "--format",
        metavar="FORMAT",
        type=str,
        choices=collection.SPLIT_FORMATS,
        default="auto",
        help="Output format (auto, ttf, otf, woff, woff2). Default: auto",
    )
    split.add_argument(
        "--text",
        metavar="TEXT",
        type=str,
        default=None,
        help="Subset each font to the characters of TEXT.",
    )
    split.add_argument(
        "--unicodes",
        metavar="RANGES",
        type=str,
        default=None,
        help="Subset each font to codepoints, e.g. U+0020-007E,U+3000-30FF.",
    )
    split.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace existing output files.",
    )

    info = subparsers.add_parser("info", help="Print family, style and weight class.")
    info.add_argument("input", metavar="INPUT", type=str, help="Font or collection")
    info.add_argument(
        "--index",
        metavar="N",
        type=int,
        default=None,
        help="Only show the N-th font of a collection.",
    )
    info.add_argument("--json", action="store_true", help="Print JSON output.")

    generate = subparsers.add_parser(
        "manifest", help="Generate a pubspec.yaml fonts section."
    )
    generate.add_argument(
        "inputs", metavar="INPUT", type=str, nargs="+", help="Split font files"
    )
    generate.add_argument(
        "--family",
        metavar="NAME",
        type=str,
        default=None,
        help="Register all fonts under one family. Default: each font's family",
    )
    generate.add_argument(
        "--asset-prefix",
        metavar="PREFIX",
        type=str,
        default="fonts/",
        help="Prefix for asset paths. Default: fonts/",
    )
    generate.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    generate.add_argument(
        "-o", "--output", type=Path, help="Output file path (default: stdout)"
    )

    check = subparsers.add_parser(
        "check", help="Check declared weights in pubspec.yaml against the fonts."
    )
    check.add_argument("pubspec", metavar="PUBSPEC", type=str, help="pubspec.yaml")

    sheet = subparsers.add_parser("specimen", help="Render a specimen sheet.")
    sheet.add_argument(
        "inputs", metavar="INPUT", type=str, nargs="+", help="Fonts or collections"
    )
    sheet.add_argument(
        "-o",
        "--output",
        type=str,
        required=True,
        help="Output file (.svg, .png, .jpg or .webp)",
    )
    sheet.add_argument(
        "--text", metavar="TEXT", type=str, default=None, help="Sample text."
    )
    sheet.add_argument(
        "--size",
        metavar="PX",
        type=int,
        default=32,
        help="Sample text size in pixels. Default: 32",
    )

    return parser.parse_args(argv)


def _limits(args: argparse.Namespace) -> ResourceLimits:
    limits = ResourceLimits.default()
    if args.timeout is not None:
        limits.timeout = args.timeout
    return limits


def run_split(args: argparse.Namespace) -> int:
    unicodes = None
    if args.unicodes is not None or args.text is not None:
        unicodes = set()
        if args.unicodes:
            unicodes |= parse_unicodes(args.unicodes)
        if args.text:
            unicodes |= text_to_codepoints(args.text)

    results = collection.split_collection(
        args.input,
        args.output,
        name_id=args.name_id,
        output_format=args.format,
        unicodes=unicodes,
        overwrite=args.overwrite,
        limits=_limits(args),
    )
    for info, path in results:
        print(f"{path}\t{info.weight}")
    return 0


def _print_info(info: FontInfo) -> None:
    if info.index is not None:
        print(f"[{info.index}] {info.postscript_name}")
    print(f"Family: {info.family}")
    print(f"Style: {info.style}")
    print(f"Weight class: {info.weight}")


def run_info(args: argparse.Namespace) -> int:
    infos = collection.read_font_infos(args.input, _limits(args))
    if args.index is not None:
        if not 0 <= args.index < len(infos):
            raise ValueError(
                f"Font index {args.index} out of range, {args.input} has "
                f"{len(infos)} font(s)"
            )
        infos = [infos[args.index]]

    for info in infos:
        if info.has_weight_mismatch():
            logger.warning(
                f"{info.postscript_name}: style '{info.style}' implies weight "
                f"{info.style_weight}, but the weight class is {info.weight}"
            )

    if args.json:
        data = [info.to_dict() for info in infos]
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0

    for i, info in enumerate(infos):
        if i > 0:
            print()
        _print_info(info)
    return 0


def run_manifest(args: argparse.Namespace) -> int:
    fonts = []
    limits = _limits(args)
    for path in args.inputs:
        infos = collection.read_font_infos(path, limits)
        if len(infos) > 1 or infos[0].index is not None:
            logger.warning(f"{path} is a font collection; split it before bundling")
        fonts.extend((info, path) for info in infos)

    document = manifest.generate_manifest(
        fonts, family=args.family, asset_prefix=args.asset_prefix
    )
    output = manifest.dump_manifest(document, format=args.format)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        logger.info(f"Wrote manifest to {args.output}")
    else:
        sys.stdout.write(output)
    return 0


def run_check(args: argparse.Namespace) -> int:
    mismatches = manifest.check_manifest(args.pubspec)
    for mismatch in mismatches:
        print(mismatch)
    if mismatches:
        return 1
    print("OK")
    return 0


def run_specimen(args: argparse.Namespace) -> int:
    fonts = collection.load_fonts(args.inputs, _limits(args))
    ext = os.path.splitext(args.output)[1].lower()
    if ext == ".svg":
        svg = specimen.render_svg_specimen(fonts, text=args.text, size=args.size)
        Path(args.output).write_text(svg, encoding="utf-8")
    elif ext in IMAGE_FORMATS:
        image_format = IMAGE_FORMATS[ext]
        image = specimen.render_png_specimen(
            fonts,
            text=args.text,
            size=args.size,
            mode="RGB" if image_format in OPAQUE_FORMATS else "RGBA",
        )
        image.save(args.output, format=image_format)
    else:
        raise ValueError(
            f"Unsupported specimen format: {ext or args.output}. "
            f"Supported: .svg, {', '.join(IMAGE_FORMATS)}"
        )
    logger.info(f"Wrote specimen of {len(fonts)} font(s) to {args.output}")
    return 0


COMMANDS = {
    "split": run_split,
    "info": run_info,
    "manifest": run_manifest,
    "check": run_check,
    "specimen": run_specimen,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI tool.

    Returns:
        Exit code (0 for success, 1 for error or failed check).
    """
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), "WARNING"))
    try:
        return COMMANDS[args.command](args)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
