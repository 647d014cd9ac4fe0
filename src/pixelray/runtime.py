"""Taichi backend initialisation.

Every kernel in pixelray works in double precision, so Taichi must be started
with ``default_fp=ti.f64``. Metal and Vulkan have no f64 support, which leaves
CUDA and the CPU backend.
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)


def initialize_taichi(prefer_gpu: bool = True) -> str:
    """Initialize Taichi with the best available double precision backend.

    Tries CUDA first when ``prefer_gpu`` is set and falls back to CPU.

    Args:
        prefer_gpu: Whether to try the CUDA backend before the CPU.

    Returns:
        Name of the backend being used.
    """
    kwargs = {"default_fp": ti.f64}

    if prefer_gpu:
        try:
            ti.init(arch=ti.cuda, **kwargs)
            if ti.lang.impl.current_cfg().arch == ti.cuda:
                logger.info("Taichi initialised on CUDA")
                return "CUDA (GPU)"
            # ti.init quietly lands on CPU when CUDA is missing
            logger.info("CUDA unavailable, Taichi initialised on CPU")
            return "CPU"
        except RuntimeError as exc:
            logger.warning("CUDA initialisation failed: %s", exc)

    ti.init(arch=ti.cpu, **kwargs)
    logger.info("Taichi initialised on CPU")
    return "CPU"
