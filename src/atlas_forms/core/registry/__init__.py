# src/atlas_forms/core/registry/__init__.py
"""Registries injetáveis de mappers, páginas e rotas."""

from .registry import (
    DuplicateRegistrationError,
    MapperRegistry,
    PageRegistry,
    Registries,
    Registry,
    RouteEntry,
    RouteRegistry,
    default_registries,
)

__all__ = [
    "DuplicateRegistrationError",
    "MapperRegistry",
    "PageRegistry",
    "Registries",
    "Registry",
    "RouteEntry",
    "RouteRegistry",
    "default_registries",
]
