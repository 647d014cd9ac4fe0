"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from pixelray.preview.export import save_png
    >>> renderer.render(num_ticks=100)
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pixelray.preview.display import process_image_for_display

if TYPE_CHECKING:
    from pixelray.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to uint8 for display/export.

    Channels map to ``round(clamp(c, 0, 1) * 255)`` after gamma correction,
    with halves rounding up as in the RGBA display frames.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (1.0 keeps linear values).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, gamma=gamma)
    return np.floor(processed * 255.0 + 0.5).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.floating],
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a top-row-first linear image as a PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value.
    """
    pil_image = PILImage.fromarray(image_to_uint8(image, gamma=gamma))
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save the renderer's current estimate as a PNG file.

    Args:
        renderer: The ProgressiveRenderer instance to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value.
    """
    save_png_from_array(renderer.get_image_numpy(), filepath, gamma=gamma)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
