"""
BackendLib - Interchangeable matching backends

Provides the MatchingBackend capability, the python/numpy/cupy
implementations and the registry used to pick one at runtime.
"""

from CS_Libs.BackendLib.matching_backend import (
    MatchingBackend,
    PythonMatchingBackend,
    NumpyMatchingBackend,
    CupyMatchingBackend,
)
from CS_Libs.BackendLib.backend_registry import (
    BackendRegistry,
    get_default_registry,
    get_available_backend,
    resolve_backend,
)

__all__ = [
    "MatchingBackend",
    "PythonMatchingBackend",
    "NumpyMatchingBackend",
    "CupyMatchingBackend",
    "BackendRegistry",
    "get_default_registry",
    "get_available_backend",
    "resolve_backend",
]
