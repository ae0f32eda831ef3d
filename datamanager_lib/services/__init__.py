"""Services package: DI container and request-time resolution helpers."""
from .container import ServiceContainer

__all__ = [
    "ServiceContainer",
]
