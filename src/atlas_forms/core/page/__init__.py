# src/atlas_forms/core/page/__init__.py
"""Declaração de páginas (rota, título, formulários, modo)."""

from .page import DEFAULT_MODE, Page, PageConfig, install_pages

__all__ = ["DEFAULT_MODE", "Page", "PageConfig", "install_pages"]
