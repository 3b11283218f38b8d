"""
Constants and configuration values for Color Splash.

This module centralizes all constant values, magic numbers, and
default settings used throughout the engine.
"""

# Default tolerance (HSV axes)
DEFAULT_HUE_TOLERANCE = 15.0
DEFAULT_SATURATION_TOLERANCE = 20.0
DEFAULT_LIGHTNESS_TOLERANCE = 25.0

# Preview defaults
DEFAULT_MAX_PREVIEW_SIZE = 500
DEFAULT_CACHE_CAPACITY = 20

# Performance monitor
PERFORMANCE_WINDOW_SIZE = 50
STATS_DECIMALS = 2

# Preview quality scale factors
LOW_QUALITY_SCALE = 0.125
MEDIUM_QUALITY_SCALE = 0.25
HIGH_QUALITY_SCALE = 0.5

# Realtime quality thresholds (total pixel count)
REALTIME_LARGE_PIXEL_COUNT = 2_000_000
REALTIME_MEDIUM_PIXEL_COUNT = 500_000

# Grayscale weights (ITU-R BT.601 luma)
LUMINANCE_WEIGHT_R = 0.299
LUMINANCE_WEIGHT_G = 0.587
LUMINANCE_WEIGHT_B = 0.114

# sRGB gamma decode
SRGB_GAMMA_THRESHOLD = 0.04045
SRGB_GAMMA_OFFSET = 0.055
SRGB_GAMMA_SCALE = 1.055
SRGB_GAMMA_EXPONENT = 2.4
SRGB_LINEAR_DIVISOR = 12.92

# Linear sRGB -> XYZ matrix (D65)
SRGB_TO_XYZ = (
    (0.4124564, 0.3575761, 0.1804375),
    (0.2126729, 0.7151522, 0.0721750),
    (0.0193339, 0.1191920, 0.9503041),
)

# D65 reference white
D65_WHITE_X = 0.95047
D65_WHITE_Y = 1.00000
D65_WHITE_Z = 1.08883

# CIE L*a*b* nonlinearity
LAB_EPSILON = 0.008856
LAB_KAPPA_SLOPE = 7.787
LAB_LINEAR_OFFSET = 16.0 / 116.0

# Hue circle
HUE_FULL_CIRCLE = 360.0

# Default outside color for selection cut-outs (transparent black)
DEFAULT_OUTSIDE_COLOR = (0, 0, 0, 0)

# Backend names
BACKEND_AUTO = "auto"
BACKEND_PYTHON = "python"
BACKEND_NUMPY = "numpy"
BACKEND_CUPY = "cupy"

# Sentinel used in cache keys for tolerance axes that were not supplied
UNSET_AXIS_TOKEN = "unset"
