# src/atlas_forms/core/context/__init__.py
"""
Contextos em runtime.

- base          → `BaseContext`: identidade, event log, canal de erros, ciclo de vida
- form_context  → `FormContext`: fachada de avaliação de um formulário
- page_context  → `PageContext`: formulários de uma página sob modo e entity comuns
- scoped        → `ListItemContext` e `DialogContext`
"""

from .base import BaseContext
from .form_context import ActionEvent, ActionOutcome, FormContext
from .page_context import PageContext
from .scoped import DialogContext, DialogOptions, ListItemContext

__all__ = [
    "ActionEvent",
    "ActionOutcome",
    "BaseContext",
    "DialogContext",
    "DialogOptions",
    "FormContext",
    "ListItemContext",
    "PageContext",
]
