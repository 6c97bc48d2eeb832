# src/atlas_forms/core/form/__init__.py
"""
Formulários: configuração, avaliação e operações.

Componentes:
    - types            → nós imutáveis da árvore de configuração
    - builder          → builders fluentes com validação de forma no build
    - definition       → definições YAML/JSON conduzindo o FormBuilder
    - dependency_graph → validação e ordenação do grafo depends_on
    - visibility       → avaliador de visibilidade em dois eixos
    - validation       → regras, catálogo Validators e executores
    - dependencies     → resolvedor de dependências em runtime
    - lists            → engine de operações sobre campos-lista
    - evaluation       → snapshot avaliado para a camada de renderização
"""

from .builder import (
    ActionBuilder,
    FieldBuilder,
    FormBuilder,
    ListBuilder,
    RowBuilder,
    SectionBuilder,
    TabBuilder,
    TabsBuilder,
)
from .definition import (
    DefinitionError,
    DefinitionFileNotFoundError,
    DefinitionParseError,
    DefinitionValidationError,
    UnsupportedDefinitionFormatError,
    build_form_from_definition,
    load_form,
    load_form_definition,
)
from .dependencies import DependencyResolver, DependencyTriggerResult, ReloadRequest
from .dependency_graph import DependencyCycleError, UnknownDependencyError, plan_dependencies
from .evaluation import EvaluatedField, EvaluatedForm, EvaluatedList, EvaluatedSection, evaluate_form
from .lists import ListOperations
from .types import (
    ActionConfig,
    DependsOnConfig,
    DisplayMode,
    FieldConfig,
    FormConfig,
    ListConfig,
    NodeKind,
    RowConfig,
    SectionConfig,
    TabConfig,
    TabsConfig,
    VisibilityConfig,
)
from .validation import ValidationRule, Validators, create_rule, get_path_value
from .visibility import HiddenBy, VisibilityResult, evaluate_visibility

__all__ = [
    "ActionBuilder",
    "ActionConfig",
    "DefinitionError",
    "DefinitionFileNotFoundError",
    "DefinitionParseError",
    "DefinitionValidationError",
    "DependencyCycleError",
    "DependencyResolver",
    "DependencyTriggerResult",
    "DependsOnConfig",
    "DisplayMode",
    "EvaluatedField",
    "EvaluatedForm",
    "EvaluatedList",
    "EvaluatedSection",
    "FieldBuilder",
    "FieldConfig",
    "FormBuilder",
    "FormConfig",
    "HiddenBy",
    "ListBuilder",
    "ListConfig",
    "ListOperations",
    "NodeKind",
    "ReloadRequest",
    "RowBuilder",
    "RowConfig",
    "SectionBuilder",
    "SectionConfig",
    "TabBuilder",
    "TabConfig",
    "TabsBuilder",
    "TabsConfig",
    "UnknownDependencyError",
    "UnsupportedDefinitionFormatError",
    "ValidationRule",
    "Validators",
    "VisibilityConfig",
    "VisibilityResult",
    "build_form_from_definition",
    "create_rule",
    "evaluate_form",
    "evaluate_visibility",
    "get_path_value",
    "load_form",
    "load_form_definition",
    "plan_dependencies",
]
