"""Metrics: PSNR, error bounds and runtime."""

import time
import numpy as np
from skimage.metrics import peak_signal_noise_ratio

from models.image import Image


def _pixel_pair(original: Image, reconstructed: Image):
    a = original.pixels()
    b = reconstructed.pixels()
    if a.shape != b.shape:
        raise ValueError(f"Cannot compare {original!r} with {reconstructed!r}")
    return a, b


def compute_psnr(original: Image, reconstructed: Image, data_range: float = None) -> float:
    """PSNR in dB over all channels. Identical images give infinity."""
    a, b = _pixel_pair(original, reconstructed)
    if data_range is None:
        data_range = 255 if original.dtype == np.uint8 else 1.0
    if np.array_equal(a, b):
        return float('inf')
    return float(peak_signal_noise_ratio(a, b, data_range=data_range))


def max_abs_error(original: Image, reconstructed: Image) -> float:
    """Largest per-sample absolute difference."""
    a, b = _pixel_pair(original, reconstructed)
    if a.size == 0:
        return 0.0
    return float(np.max(np.abs(a.astype(np.float64) - b.astype(np.float64))))


class Timer:
    """Simple timer for load/save runtime."""

    def __init__(self):
        self.load_time_ms = 0.0
        self.save_time_ms = 0.0

    def measure_load(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.load_time_ms = (time.perf_counter() - start) * 1000.0
        return result

    def measure_save(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.save_time_ms = (time.perf_counter() - start) * 1000.0
        return result
