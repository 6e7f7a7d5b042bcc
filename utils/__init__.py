"""Shared utilities."""

from .logging_config import setup_logging, get_logger
from .metrics import compute_psnr, max_abs_error, Timer
from .test_images import generate_gradient, generate_colored_checkerboard, generate_constant

__all__ = [
    'setup_logging',
    'get_logger',
    'compute_psnr',
    'max_abs_error',
    'Timer',
    'generate_gradient',
    'generate_colored_checkerboard',
    'generate_constant',
]
