"""Camera models for primary ray generation.

Components:
    thin_lens: Thin lens camera with depth of field (aperture 0 is a pinhole)
"""

from .thin_lens import CameraParams, ThinLensCamera

__all__ = ["CameraParams", "ThinLensCamera"]
