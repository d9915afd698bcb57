"""Resource limits for untrusted font files.

Oversized or malformed collections are rejected before they are parsed so
that splitting cannot exhaust memory or CPU.
"""

import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

# 512MB. The largest CJK superfamily collections are a few hundred MB.
DEFAULT_MAX_FILE_SIZE = 536870912

# The TTC header stores numFonts as uint32; real collections hold far fewer.
DEFAULT_MAX_FONTS = 1024

DEFAULT_TIMEOUT = 120

ENV_VARS = {
    "max_file_size": "FONTSPLIT_MAX_FILE_SIZE",
    "max_fonts": "FONTSPLIT_MAX_FONTS",
    "timeout": "FONTSPLIT_TIMEOUT",
}


def _env_limit(name: str, default: int) -> int:
    """Read a non-negative integer limit from the environment."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(
            f"Environment variable {name}={raw!r} is not a valid integer"
        ) from e
    if value < 0:
        logger.warning(f"{name}={value} is negative, the limit is disabled")
        return 0
    return value


@dataclass
class ResourceLimits:
    """Limits applied when reading and splitting font collections.

    A value of 0 disables the corresponding limit. ``ResourceLimits.default()``
    reads overrides from ``FONTSPLIT_MAX_FILE_SIZE`` (bytes),
    ``FONTSPLIT_MAX_FONTS`` and ``FONTSPLIT_TIMEOUT`` (seconds).

    Example:
        >>> limits = ResourceLimits(max_file_size=50 * 1024 * 1024, max_fonts=32)
        >>> limits = ResourceLimits(timeout=0)  # No timeout
    """

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_fonts: int = DEFAULT_MAX_FONTS
    timeout: int = DEFAULT_TIMEOUT

    @classmethod
    def default(cls) -> "ResourceLimits":
        """Create limits from environment variables, falling back to defaults.

        Raises:
            ValueError: If a variable is set to something other than an integer.
        """
        values = {
            field.name: _env_limit(ENV_VARS[field.name], field.default)
            for field in fields(cls)
        }
        return cls(**values)

    @classmethod
    def unlimited(cls) -> "ResourceLimits":
        """Disable every limit. Only use this for trusted input files."""
        return cls(max_file_size=0, max_fonts=0, timeout=0)

    def is_file_size_limited(self) -> bool:
        return self.max_file_size > 0

    def is_font_count_limited(self) -> bool:
        return self.max_fonts > 0

    def is_timeout_enabled(self) -> bool:
        return self.timeout > 0

    def check_file_size(self, path: str) -> None:
        """Validate the size of an input file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file exceeds max_file_size.
        """
        size = os.path.getsize(path)
        if self.is_file_size_limited() and size > self.max_file_size:
            raise ValueError(
                f"Font file too large: {size} bytes (limit {self.max_file_size}). "
                f"To process: set {ENV_VARS['max_file_size']}={size} "
                "environment variable."
            )

    def check_font_count(self, count: int) -> None:
        """Validate the number of fonts in a collection.

        Raises:
            ValueError: If count exceeds max_fonts.
        """
        if self.is_font_count_limited() and count > self.max_fonts:
            raise ValueError(
                f"Font collection has {count} fonts (limit {self.max_fonts}). "
                f"To process: set {ENV_VARS['max_fonts']}={count} "
                "environment variable."
            )
