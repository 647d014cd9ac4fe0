"""Matplotlib-based preview display for rendered images.

The renderer output is already in display range ([0, 1] per channel, no
light sources brighter than the sky), so the display pipeline is just an
optional gamma curve followed by a clamp.

Example:
    >>> from pixelray.preview.display import show_preview
    >>> renderer.render(num_ticks=50)
    >>> show_preview(renderer, gamma=2.2)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from pixelray.core.progressive import ProgressiveRenderer


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = 2.2,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. 1.0 leaves the image linear.

    Returns:
        Gamma corrected image clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    # Clamp first so negative values never reach the power
    result = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    if gamma != 1.0:
        result = np.power(result, 1.0 / gamma)
    return result


def process_image_for_display(
    image: npt.NDArray[np.floating],
    gamma: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Prepare a linear image for display or export.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (1.0 matches the interactive window).

    Returns:
        Processed image in [0, 1] range.
    """
    return np.clip(apply_gamma(image, gamma), 0.0, 1.0)


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (9, 6),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        gamma: Gamma correction value.
        title: Custom title (default shows tick and sample counts).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(renderer.get_image_numpy(), gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = (
            f"Render Preview - {renderer.tick_count} ticks, "
            f"{renderer.sample_count} samples"
        )
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
