"""
Exception types raised by the Color Splash engine.

Each error also derives from the built-in exception callers would
expect for that situation (ValueError for bad input, RuntimeError for
bad state), so existing ``except ValueError`` handlers keep working.
"""


class ColorSplashError(Exception):
    """Base class for all Color Splash errors."""


class UnsupportedColorSpaceError(ColorSplashError, ValueError):
    pass


class UnsupportedGrayscaleMethodError(ColorSplashError, ValueError):
    pass


class UnsupportedAreaTypeError(ColorSplashError, ValueError):
    pass


class UnsupportedPreviewQualityError(ColorSplashError, ValueError):
    pass


class SelectionGeometryError(ColorSplashError, ValueError):
    """A selection area has too few points or an invalid feather radius."""


class InvalidToleranceError(ColorSplashError, ValueError):
    pass


class InvalidImageDataError(ColorSplashError, ValueError):
    pass


class PreviewStateError(ColorSplashError, RuntimeError):
    """An incremental preview was requested before an image was preloaded."""


class BackendUnavailableError(ColorSplashError, RuntimeError):
    pass
