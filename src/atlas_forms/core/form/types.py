# src/atlas_forms/core/form/types.py
"""
Tipos canônicos da árvore de configuração de formulários.

Este módulo define os nós imutáveis produzidos pelos builders e
consumidos pelos contextos: formulário, seções, linhas, campos, listas,
abas e ações.

Decisões arquiteturais:
    - Cada nó é uma variante etiquetada (`kind`) e não um dicionário aberto
    - Todos os nós são dataclasses congeladas; coleções são tuplas
    - Slots "valor ou função do contexto" são `Literal | Computed`
    - A forma é validada no build (builders), nunca na leitura

Invariantes:
    - A contenção é uma árvore (sem ciclos)
    - Um nó construído nunca muda
    - `FormConfig` expõe apenas leituras

Limites explícitos:
    - Não avalia visibilidade nem regras
    - Não conhece contextos em runtime
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

from atlas_forms.core.form.validation import ValidationRule
from atlas_forms.core.values import ValueSlot


class NodeKind(str, Enum):
    FORM = "form"
    SECTION = "section"
    ROW = "row"
    FIELD = "field"
    LIST = "list"
    TABS = "tabs"
    TAB = "tab"
    ACTION = "action"


class DisplayMode(str, Enum):
    ROWS = "rows"
    TABS = "tabs"
    TABLE = "table"
    CARDS = "cards"


@dataclass(frozen=True)
class VisibilityConfig:
    """Quatro predicados opcionais em dois eixos independentes.

    - condicional: `hide` / `visible` (ocultar limpa dados e pula validação)
    - acesso: `hide_by_access` / `visible_by_access` (preserva dados e valida)
    """

    hide: Optional[ValueSlot] = None
    visible: Optional[ValueSlot] = None
    hide_by_access: Optional[ValueSlot] = None
    visible_by_access: Optional[ValueSlot] = None
    reset_on_show: bool = False

    def is_empty(self) -> bool:
        return (
            self.hide is None
            and self.visible is None
            and self.hide_by_access is None
            and self.visible_by_access is None
        )


@dataclass(frozen=True)
class DependsOnConfig:
    sources: Tuple[str, ...]
    clear: bool = False
    reset: bool = False
    reload_api: Optional[str] = None
    reload_params: Optional[ValueSlot] = None
    handler: Optional[Callable[[Any, Any], Any]] = None
    debounce_ms: Optional[int] = None
    only_if_truthy: bool = False


@dataclass(frozen=True)
class FieldConfig:
    name: str
    component: Any = None
    label: Optional[ValueSlot] = None
    placeholder: Optional[ValueSlot] = None
    rules: Tuple[ValidationRule, ...] = ()
    props: Optional[ValueSlot] = None
    visibility: Optional[VisibilityConfig] = None
    disable: Optional[ValueSlot] = None
    read_only: Optional[ValueSlot] = None
    field_type: Optional[str] = None
    col_span: Optional[int] = None
    group_id: Optional[str] = None
    depends_on: Tuple[DependsOnConfig, ...] = ()
    kind: NodeKind = field(default=NodeKind.FIELD, init=False)


@dataclass(frozen=True)
class RowConfig:
    fields: Tuple[FieldConfig, ...] = ()
    layout: Tuple[int, ...] = ()
    columns: int = 12
    gap: Optional[int] = None
    visibility: Optional[VisibilityConfig] = None
    kind: NodeKind = field(default=NodeKind.ROW, init=False)


@dataclass(frozen=True)
class SectionConfig:
    id: str
    title: Optional[ValueSlot] = None
    rows: Tuple[RowConfig, ...] = ()
    collapsible: bool = False
    collapsed: bool = False
    visibility: Optional[VisibilityConfig] = None
    actions: Tuple[str, ...] = ()
    kind: NodeKind = field(default=NodeKind.SECTION, init=False)

    def iter_fields(self) -> Iterator[FieldConfig]:
        for row in self.rows:
            yield from row.fields


@dataclass(frozen=True)
class ListActionConfig:
    can_add: bool = True
    can_remove: bool = True
    can_reorder: bool = False
    confirm_remove: Optional[str] = None
    add_label: Optional[str] = None
    remove_label: Optional[str] = None
    position: str = "bottom"


ListDefaults = Union[Mapping[str, Any], Callable[[Any, int], Mapping[str, Any]], None]


@dataclass(frozen=True)
class ListConfig:
    name: str
    label: Optional[ValueSlot] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    defaults: ListDefaults = None
    display: DisplayMode = DisplayMode.ROWS
    rows: Tuple[RowConfig, ...] = ()
    rules: Tuple[ValidationRule, ...] = ()
    actions: ListActionConfig = ListActionConfig()
    tab_label: Optional[ValueSlot] = None
    table_columns: Tuple[str, ...] = ()
    visibility: Optional[VisibilityConfig] = None
    kind: NodeKind = field(default=NodeKind.LIST, init=False)

    def iter_item_fields(self) -> Iterator[FieldConfig]:
        for row in self.rows:
            yield from row.fields


@dataclass(frozen=True)
class TabConfig:
    id: str
    label: Optional[ValueSlot] = None
    sections: Tuple[SectionConfig, ...] = ()
    disabled: Optional[ValueSlot] = None
    badge: Optional[ValueSlot] = None
    visibility: Optional[VisibilityConfig] = None
    kind: NodeKind = field(default=NodeKind.TAB, init=False)


@dataclass(frozen=True)
class TabsConfig:
    id: str
    tabs: Tuple[TabConfig, ...] = ()
    position: str = "top"
    initial_tab: Optional[str] = None
    visibility: Optional[VisibilityConfig] = None
    kind: NodeKind = field(default=NodeKind.TABS, init=False)


@dataclass(frozen=True)
class ActionConfig:
    name: str
    label: Optional[ValueSlot] = None
    skip_validation: bool = False
    handler: Optional[Callable[[Any], Any]] = None
    before_execute: Optional[Callable[[Any], Any]] = None
    after_execute: Optional[Callable[[Any, Any], Any]] = None
    on_error: Optional[Callable[[BaseException, Any], Any]] = None
    kind: NodeKind = field(default=NodeKind.ACTION, init=False)


@dataclass(frozen=True)
class FormConfig:
    """Raiz imutável de um formulário construído."""

    id: str
    sections: Tuple[SectionConfig, ...] = ()
    lists: Tuple[ListConfig, ...] = ()
    tabs: Tuple[TabsConfig, ...] = ()
    actions: Tuple[ActionConfig, ...] = ()
    read_only: bool = False
    element_order: Tuple[Tuple[NodeKind, str], ...] = ()
    kind: NodeKind = field(default=NodeKind.FORM, init=False)

    # -----------------------------
    # Leituras
    # -----------------------------
    def all_sections(self) -> Tuple[SectionConfig, ...]:
        """Seções de topo seguidas das seções dentro de abas, em ordem de declaração."""
        nested = tuple(s for tabs in self.tabs for tab in tabs.tabs for s in tab.sections)
        return self.sections + nested

    def iter_fields(self) -> Iterator[Tuple[SectionConfig, RowConfig, FieldConfig]]:
        for section in self.all_sections():
            for row in section.rows:
                for f in row.fields:
                    yield section, row, f

    def field_map(self) -> Dict[str, FieldConfig]:
        return {f.name: f for _, _, f in self.iter_fields()}

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for _, _, f in self.iter_fields()) + tuple(lc.name for lc in self.lists)

    def get_field(self, name: str) -> FieldConfig:
        for _, _, f in self.iter_fields():
            if f.name == name:
                return f
        raise KeyError(name)

    def get_list(self, name: str) -> ListConfig:
        for lc in self.lists:
            if lc.name == name:
                return lc
        raise KeyError(name)

    def has_list(self, name: str) -> bool:
        return any(lc.name == name for lc in self.lists)

    def get_section(self, section_id: str) -> SectionConfig:
        for section in self.all_sections():
            if section.id == section_id:
                return section
        raise KeyError(section_id)

    def get_action(self, name: str) -> ActionConfig:
        for action in self.actions:
            if action.name == name:
                return action
        raise KeyError(name)

    def section_of(self, field_name: str) -> Optional[SectionConfig]:
        for section, _, f in self.iter_fields():
            if f.name == field_name:
                return section
        return None

    def row_of(self, field_name: str) -> Optional[RowConfig]:
        for _, row, f in self.iter_fields():
            if f.name == field_name:
                return row
        return None
