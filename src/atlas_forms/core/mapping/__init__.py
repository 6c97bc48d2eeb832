# src/atlas_forms/core/mapping/__init__.py
"""Mapper bidirecional Entity ↔ DTO."""

from .mapper import (
    BuiltMapper,
    ComputedField,
    FieldMapping,
    Mapper,
    MapperBuilder,
    install_mappers,
)

__all__ = [
    "BuiltMapper",
    "ComputedField",
    "FieldMapping",
    "Mapper",
    "MapperBuilder",
    "install_mappers",
]
