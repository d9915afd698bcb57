"""Flutter-style font manifests (the ``fonts:`` section of ``pubspec.yaml``).

The engine picks an asset by the weight class stored inside the font file,
not by the ``weight`` declared in the manifest. ``generate_manifest`` derives
the declared weights from the fonts themselves, and ``check_manifest`` reports
existing declarations that disagree with the fonts they point to.
"""

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

import yaml
from fontTools.ttLib import TTLibError

from fontsplit.font_info import FontInfo

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 400
DEFAULT_STYLE = "normal"


@dataclasses.dataclass
class WeightMismatch:
    """A manifest entry whose declaration disagrees with its font file.

    Attributes:
        family: Family name declared in the manifest.
        asset: Asset path as written in the manifest.
        declared_weight: Declared weight, or 400 when omitted.
        actual_weight: CSS weight read from the font, None if unreadable.
        declared_style: Declared style, or "normal" when omitted.
        actual_style: "italic" or "normal" from the font, None if unreadable.
        reason: "weight", "style" or "missing".
    """

    family: str
    asset: str
    declared_weight: int
    actual_weight: int | None
    declared_style: str
    actual_style: str | None
    reason: str

    def __str__(self) -> str:
        if self.reason == "missing":
            return f"{self.family}: {self.asset}: font file not found or unreadable"
        if self.reason == "style":
            return (
                f"{self.family}: {self.asset}: declared style "
                f"{self.declared_style}, font is {self.actual_style}"
            )
        return (
            f"{self.family}: {self.asset}: declared weight "
            f"{self.declared_weight}, font weight class is {self.actual_weight}"
        )


def generate_manifest(
    fonts: Iterable[tuple[FontInfo, str | os.PathLike]],
    family: str | None = None,
    asset_prefix: str = "fonts/",
) -> dict[str, Any]:
    """Generate a font manifest from split fonts.

    Args:
        fonts: (FontInfo, path) pairs, e.g. the result of split_collection().
        family: Family name for all fonts. If None, fonts are grouped by their
            own family name.
        asset_prefix: Prefix joined with each file name to form the asset path.

    Returns:
        Manifest dictionary of the form ``{"flutter": {"fonts": [...]}}``.
    """
    groups: dict[str, list[tuple[FontInfo, str]]] = {}
    seen: dict[str, str] = {}
    for info, path in fonts:
        filename = os.path.basename(path)
        if filename in seen and seen[filename] != str(path):
            logger.warning(
                f"Duplicate asset {asset_prefix}{filename} from {seen[filename]} "
                f"and {path}; rename one of the files"
            )
        seen.setdefault(filename, str(path))
        key = family or info.family or info.postscript_name
        groups.setdefault(key, []).append((info, filename))

    families = []
    for name, members in groups.items():
        members.sort(key=lambda member: (member[0].css_weight, member[0].italic))
        assets = []
        for info, filename in members:
            entry: dict[str, Any] = {"asset": f"{asset_prefix}{filename}"}
            if info.italic:
                entry["style"] = "italic"
            entry["weight"] = info.css_weight
            assets.append(entry)
        families.append({"family": name, "fonts": assets})
        logger.debug(f"Family '{name}': {len(assets)} asset(s)")

    return {"flutter": {"fonts": families}}


def dump_manifest(manifest: dict[str, Any], format: str = "yaml") -> str:
    """Serialize a manifest as YAML or JSON.

    Raises:
        ValueError: If format is unsupported.
    """
    if format == "yaml":
        return yaml.safe_dump(
            manifest, sort_keys=False, allow_unicode=True, default_flow_style=False
        )
    elif format == "json":
        return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"
    raise ValueError(f"Unsupported manifest format: {format}. Supported: yaml, json")


def load_manifest_fonts(pubspec_path: str | os.PathLike) -> list[dict[str, Any]]:
    """Load the ``flutter.fonts`` family list from a pubspec file.

    Returns an empty list when the file has no fonts section.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the fonts section is malformed.
    """
    with open(pubspec_path, encoding="utf-8") as f:
        document = yaml.safe_load(f) or {}

    flutter = document.get("flutter") if isinstance(document, dict) else None
    if not isinstance(flutter, dict) or not flutter.get("fonts"):
        logger.info(f"No flutter.fonts section in {pubspec_path}")
        return []

    families = flutter["fonts"]
    if not isinstance(families, list):
        raise ValueError(f"flutter.fonts in {pubspec_path} must be a list")
    for entry in families:
        if not isinstance(entry, dict) or "family" not in entry:
            raise ValueError(f"Font family entry without 'family' key: {entry!r}")
        assets = entry.get("fonts") or []
        if not isinstance(assets, list):
            raise ValueError(f"Fonts of family {entry['family']!r} must be a list")
        for asset in assets:
            _validate_asset(entry["family"], asset)
    return families


def _validate_asset(family: str, asset: Any) -> None:
    if not isinstance(asset, dict) or "asset" not in asset:
        raise ValueError(f"Font entry without 'asset' key in {family!r}: {asset!r}")
    weight = asset.get("weight", DEFAULT_WEIGHT)
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise ValueError(
            f"Font weight of {asset['asset']!r} in {family!r} must be an integer, "
            f"got {weight!r}"
        )


def check_manifest(pubspec_path: str | os.PathLike) -> list[WeightMismatch]:
    """Compare declared weights and styles against the fonts they point to.

    Asset paths are resolved relative to the directory of the pubspec file.

    Args:
        pubspec_path: Path to pubspec.yaml.

    Returns:
        List of mismatches, empty when every declaration agrees.
    """
    root = Path(pubspec_path).parent
    mismatches: list[WeightMismatch] = []

    for entry in load_manifest_fonts(pubspec_path):
        family = str(entry["family"])
        for asset in entry.get("fonts") or []:
            asset_path = str(asset["asset"])
            declared_weight = int(asset.get("weight", DEFAULT_WEIGHT))
            declared_style = str(asset.get("style", DEFAULT_STYLE))

            try:
                info = FontInfo.open(str(root / asset_path))
            except (OSError, TTLibError) as e:
                logger.warning(f"Cannot read {asset_path}: {e}")
                mismatches.append(
                    WeightMismatch(
                        family,
                        asset_path,
                        declared_weight,
                        None,
                        declared_style,
                        None,
                        "missing",
                    )
                )
                continue

            actual_style = "italic" if info.italic else "normal"
            if declared_weight != info.css_weight:
                mismatches.append(
                    WeightMismatch(
                        family,
                        asset_path,
                        declared_weight,
                        info.css_weight,
                        declared_style,
                        actual_style,
                        "weight",
                    )
                )
            if declared_style != actual_style:
                mismatches.append(
                    WeightMismatch(
                        family,
                        asset_path,
                        declared_weight,
                        info.css_weight,
                        declared_style,
                        actual_style,
                        "style",
                    )
                )

    logger.debug(f"Checked {pubspec_path}: {len(mismatches)} mismatch(es)")
    return mismatches
