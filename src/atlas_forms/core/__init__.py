# src/atlas_forms/core/__init__.py
"""
Core do Atlas Forms.

O core reúne a implementação canônica do engine, independente de
qualquer camada de UI:
    - determinístico para a mesma configuração e a mesma sequência de mudanças
    - testável de forma isolada
    - orientado a configuração imutável e contextos explícitos

Princípios fundamentais:
    - Erros de forma falham no build; erros de avaliação viram dados
    - Estado e efeitos colaterais são sempre rastreáveis (event log)
    - Nenhum singleton é obrigatório: registries e settings são injetados
"""

from .config import FormSettings, default_settings, resolve_settings
from .context import (
    ActionEvent,
    ActionOutcome,
    BaseContext,
    DialogContext,
    DialogOptions,
    FormContext,
    ListItemContext,
    PageContext,
)
from .errors import FormErrorPayload
from .exceptions import (
    BuilderStateError,
    ConfigShapeError,
    ContextDestroyedError,
    DependencyResolutionError,
    FormsError,
    MappingInvariantViolation,
)
from .form import (
    DependencyCycleError,
    FormBuilder,
    FormConfig,
    ReloadRequest,
    UnknownDependencyError,
    ValidationRule,
    Validators,
    build_form_from_definition,
    evaluate_form,
    load_form,
)
from .mapping import BuiltMapper, Mapper, MapperBuilder, install_mappers
from .page import Page, PageConfig, install_pages
from .registry import DuplicateRegistrationError, Registries, default_registries

__all__ = [
    "ActionEvent",
    "ActionOutcome",
    "BaseContext",
    "BuilderStateError",
    "BuiltMapper",
    "ConfigShapeError",
    "ContextDestroyedError",
    "DependencyCycleError",
    "DependencyResolutionError",
    "DialogContext",
    "DialogOptions",
    "DuplicateRegistrationError",
    "FormBuilder",
    "FormConfig",
    "FormContext",
    "FormErrorPayload",
    "FormSettings",
    "FormsError",
    "ListItemContext",
    "Mapper",
    "MapperBuilder",
    "MappingInvariantViolation",
    "Page",
    "PageConfig",
    "PageContext",
    "Registries",
    "ReloadRequest",
    "UnknownDependencyError",
    "ValidationRule",
    "Validators",
    "build_form_from_definition",
    "default_registries",
    "default_settings",
    "evaluate_form",
    "install_mappers",
    "install_pages",
    "load_form",
    "resolve_settings",
]
