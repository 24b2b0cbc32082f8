"""Specification ABC and resource type registration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .context import Context

_resource_registry: dict[str, type] = {}


def resource(name: str):
    """Register a Specification class as the decoder for an HCL resource type."""

    def decorator(cls):
        _resource_registry[name] = cls
        return cls

    return decorator


class Specification[P](ABC):
    """Desired state of one remote resource."""

    @abstractmethod
    def equals(self, ctx: Context[P]) -> bool:
        """Remote state matches desired state."""

    def exists(self, ctx: Context[P]) -> bool:
        """Resource exists (defaults to equals)."""
        return self.equals(ctx)

    @abstractmethod
    def apply(self, ctx: Context[P]) -> None:
        """Create or update the remote resource."""

    @abstractmethod
    def remove(self, ctx: Context[P]) -> None:
        """Delete the remote resource."""
