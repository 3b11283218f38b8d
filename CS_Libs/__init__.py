"""
CS_Libs - Color Splash Library Modules

This package contains the color splash engine, organized into
specialized sub-packages:

- ColorLib: Color types, color space conversions, similarity and grayscale
- ImageEditingLib: Raster model, target masks, composition and selection areas
- PreviewLib: Preview sizing, preview cache and performance monitoring
- BackendLib: Interchangeable matching backends (python, numpy, cupy)

The ColorSplash facade in color_splash ties them together.
"""

__version__ = "0.1.0"

from CS_Libs.color_splash import ColorSplash, ColorSplashOptions, PreviewSession, SessionState, SplashConfig

__all__ = [
    "ColorSplash",
    "ColorSplashOptions",
    "PreviewSession",
    "SessionState",
    "SplashConfig",
]
