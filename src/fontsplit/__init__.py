from logging import getLogger

from fontsplit.collection import (
    load_fonts,
    open_fonts,
    read_font_infos,
    split_collection,
)
from fontsplit.font_info import FontInfo, snap_weight, weight_from_style_name
from fontsplit.manifest import (
    WeightMismatch,
    check_manifest,
    dump_manifest,
    generate_manifest,
)
from fontsplit.resource_limits import ResourceLimits
from fontsplit.version import __version__ as __version__

logger = getLogger(__name__)

__all__ = [
    "FontInfo",
    "ResourceLimits",
    "WeightMismatch",
    "check_manifest",
    "dump_manifest",
    "generate_manifest",
    "load_fonts",
    "open_fonts",
    "read_font_infos",
    "snap_weight",
    "split_collection",
    "weight_from_style_name",
]
