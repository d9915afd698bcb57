"""Image helpers for raster specimens."""

import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def trim_image(image: Image.Image, padding: int = 0) -> Image.Image:
    """Crop fully transparent margins from an RGBA image.

    Returns the image unchanged when every pixel is transparent.
    """
    alpha = np.asarray(image.convert("RGBA"))[:, :, 3]
    rows = np.flatnonzero(alpha.any(axis=1))
    cols = np.flatnonzero(alpha.any(axis=0))
    if rows.size == 0 or cols.size == 0:
        logger.debug("Image is fully transparent, skipping trim")
        return image

    left = max(int(cols[0]) - padding, 0)
    top = max(int(rows[0]) - padding, 0)
    right = min(int(cols[-1]) + 1 + padding, image.width)
    bottom = min(int(rows[-1]) + 1 + padding, image.height)
    return image.crop((left, top, right, bottom))

