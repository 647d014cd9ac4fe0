"""Preview module for output and visualization.

Components:
    display: Matplotlib-based static preview and gamma handling
    export: PNG export utilities (Pillow)
    interactive: Taichi GGUI window that drives the tick loop

Example:
    >>> from pixelray.preview import save_png, show_preview
    >>> renderer.render(num_ticks=100)
    >>> show_preview(renderer)
    >>> save_png(renderer, "output.png")
"""

from .display import apply_gamma, process_image_for_display, show_preview
from .export import compute_rmse, image_to_uint8, save_png, save_png_from_array
from .interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "show_preview",
    "apply_gamma",
    "process_image_for_display",
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
