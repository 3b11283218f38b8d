"""
PreviewLib - Reduced-resolution previews

This module provides preview sizing and resizing, the preview cache
and the performance monitor used by interactive workflows.
"""

from CS_Libs.PreviewLib.preview_scaler import PreviewSize, optimal_size, resize, scale_factor
from CS_Libs.PreviewLib.preview_cache import PreviewCache, image_digest
from CS_Libs.PreviewLib.performance_monitor import PerformanceMonitor

__all__ = [
    "PreviewSize",
    "optimal_size",
    "resize",
    "scale_factor",
    "PreviewCache",
    "image_digest",
    "PerformanceMonitor",
]
