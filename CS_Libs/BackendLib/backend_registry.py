"""
Matching Backend Registry.

This module provides a centralized registry of matching backend
factories, enabling registration, lookup and automatic selection of the
best backend available in the current environment.

Classes:
    BackendRegistry: Registry for matching backend factories

Functions:
    get_default_registry: Get the global default registry (singleton)
    get_available_backend: Name of the fastest usable backend
    resolve_backend: Instantiate a backend by name ("auto" allowed)
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from CS_Libs.BackendLib.matching_backend import (
    CupyMatchingBackend,
    MatchingBackend,
    NumpyMatchingBackend,
    PythonMatchingBackend,
)
from CS_Libs.constants import BACKEND_AUTO, BACKEND_CUPY, BACKEND_NUMPY, BACKEND_PYTHON
from CS_Libs.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], MatchingBackend]


class BackendRegistry:
    """
    Registry for matching backends.

    Example:
        >>> registry = BackendRegistry()
        >>> registry.register("numpy", NumpyMatchingBackend, tags=["cpu"])
        >>> backend = registry.get_backend("numpy")
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._factories: Dict[str, BackendFactory] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        name: str,
        factory: BackendFactory,
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a backend factory.

        Args:
            name: Unique backend name (e.g., "numpy")
            factory: Zero-argument callable returning a MatchingBackend
            description: Human-readable description
            tags: Optional tags (e.g., ["cpu"], ["gpu"])

        Raises:
            ValueError: If name is empty or factory is not callable
            RuntimeError: If name is already registered
        """
        name = str(name).strip().lower()

        if not name:
            raise ValueError("backend name cannot be empty")

        if not callable(factory):
            raise ValueError(f"factory must be callable, got {type(factory)}")

        if name in self._factories:
            raise RuntimeError(
                f"Backend '{name}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._factories[name] = factory
        self._metadata[name] = {
            "description": str(description),
            "tags": list(tags) if tags else [],
        }

        logger.debug(f"Registered matching backend: {name}")

    def unregister(self, name: str) -> bool:
        """
        Unregister a backend.

        Returns:
            True if unregistered, False if the name was not registered
        """
        name = str(name).strip().lower()

        if name in self._factories:
            del self._factories[name]
            del self._metadata[name]
            logger.debug(f"Unregistered matching backend: {name}")
            return True

        return False

    def get_backend(self, name: str) -> MatchingBackend:
        """
        Instantiate a registered backend.

        Raises:
            KeyError: If name is not registered
        """
        name = str(name).strip().lower()

        if name not in self._factories:
            available = ", ".join(self.list_backends())
            raise KeyError(
                f"No matching backend registered as '{name}'. "
                f"Available backends: {available}"
            )

        return self._factories[name]()

    def has_backend(self, name: str) -> bool:
        return str(name).strip().lower() in self._factories

    def list_backends(self) -> List[str]:
        """Sorted list of registered backend names."""
        return sorted(self._factories)

    def get_metadata(self, name: str) -> Dict[str, Any]:
        name = str(name).strip().lower()

        if name not in self._metadata:
            raise KeyError(f"No metadata for backend: {name}")

        return dict(self._metadata[name])

    def list_available(self) -> List[str]:
        """Registered backends that can run in this environment."""
        return [name for name in self.list_backends() if self.get_backend(name).is_available()]


# Global singleton registry
_default_registry: Optional[BackendRegistry] = None


def register_default_backends(registry: BackendRegistry) -> None:
    """Register the built-in python, numpy and cupy backends."""
    registry.register(
        BACKEND_PYTHON,
        PythonMatchingBackend,
        description="Per-pixel reference implementation",
        tags=["cpu", "reference"],
    )
    registry.register(
        BACKEND_NUMPY,
        NumpyMatchingBackend,
        description="Vectorized CPU implementation",
        tags=["cpu"],
    )
    registry.register(
        BACKEND_CUPY,
        CupyMatchingBackend,
        description="Vectorized GPU implementation (requires cupy)",
        tags=["gpu"],
    )


def get_default_registry() -> BackendRegistry:
    """Get the global registry, creating it with the built-in backends on first use."""
    global _default_registry

    if _default_registry is None:
        _default_registry = BackendRegistry()
        register_default_backends(_default_registry)

    return _default_registry


def get_available_backend(registry: Optional[BackendRegistry] = None) -> str:
    """
    Name of the best backend that can run here.

    Returns:
        'cupy' when a CUDA device is usable, otherwise 'numpy'
    """
    registry = registry or get_default_registry()
    if registry.has_backend(BACKEND_CUPY) and registry.get_backend(BACKEND_CUPY).is_available():
        return BACKEND_CUPY
    return BACKEND_NUMPY


def resolve_backend(name: str = BACKEND_AUTO, registry: Optional[BackendRegistry] = None) -> MatchingBackend:
    """
    Instantiate a backend by name.

    Args:
        name: Backend name, or 'auto' for the best available one
        registry: Registry to use (default: global registry)

    Raises:
        KeyError: If name is not registered
        BackendUnavailableError: If the named backend cannot run here
    """
    registry = registry or get_default_registry()
    if str(name).strip().lower() == BACKEND_AUTO:
        name = get_available_backend(registry)

    backend = registry.get_backend(name)
    if not backend.is_available():
        raise BackendUnavailableError(f"Matching backend '{name}' is not available")
    return backend
