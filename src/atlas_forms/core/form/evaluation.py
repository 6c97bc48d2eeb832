# src/atlas_forms/core/form/evaluation.py
"""
Snapshot avaliado de um formulário.

Este módulo percorre a configuração de um formulário contra um contexto
em runtime e produz uma árvore imutável anotada, pronta para a camada de
renderização: cada nó carrega visibilidade resolvida, estado de
habilitação, rótulos e props resolvidos, opções, erros e pendências.

Decisões arquiteturais:
    - A avaliação é somente leitura: nunca muta o contexto
    - Slots computados são resolvidos uma única vez por snapshot
    - A ordem dos nós segue a ordem de declaração

Limites explícitos:
    - Não aplica efeitos de visibilidade (limpeza é responsabilidade do contexto)
    - Não conhece componentes além da referência opaca repassada
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from atlas_forms.core.form.types import (
    ActionConfig,
    DisplayMode,
    FieldConfig,
    ListConfig,
    RowConfig,
    SectionConfig,
    TabsConfig,
)
from atlas_forms.core.form.visibility import VisibilityResult, evaluate_visibility
from atlas_forms.core.values import resolve, thaw


@dataclass(frozen=True)
class EvaluatedField:
    name: str
    config: FieldConfig
    label: Any
    placeholder: Any
    props: Dict[str, Any]
    visibility: VisibilityResult
    disabled: bool
    read_only: bool
    value: Any
    errors: Tuple[str, ...]
    options: Any
    pending: bool
    depends_on: Tuple[str, ...]

    @property
    def is_visible(self) -> bool:
        return self.visibility.is_visible


@dataclass(frozen=True)
class EvaluatedRow:
    visibility: VisibilityResult
    fields: Tuple[EvaluatedField, ...]
    layout: Tuple[int, ...]
    columns: int


@dataclass(frozen=True)
class EvaluatedSection:
    id: str
    title: Any
    visibility: VisibilityResult
    collapsible: bool
    collapsed: bool
    rows: Tuple[EvaluatedRow, ...]
    actions: Tuple[str, ...]


@dataclass(frozen=True)
class EvaluatedList:
    name: str
    label: Any
    display: DisplayMode
    visibility: VisibilityResult
    count: int
    active_index: int
    errors: Tuple[str, ...]
    item_errors: Tuple[Dict[str, List[str]], ...]
    valid: bool
    can_add: bool
    can_remove: bool


@dataclass(frozen=True)
class EvaluatedTab:
    id: str
    label: Any
    badge: Any
    disabled: bool
    visibility: VisibilityResult
    sections: Tuple[EvaluatedSection, ...]


@dataclass(frozen=True)
class EvaluatedTabs:
    id: str
    position: str
    initial_tab: Optional[str]
    visibility: VisibilityResult
    tabs: Tuple[EvaluatedTab, ...]


@dataclass(frozen=True)
class EvaluatedAction:
    name: str
    label: Any
    skip_validation: bool


@dataclass(frozen=True)
class EvaluatedForm:
    form_id: str
    mode: str
    read_only: bool
    valid: bool
    dirty: bool
    pending: bool
    sections: Tuple[EvaluatedSection, ...]
    lists: Tuple[EvaluatedList, ...]
    tabs: Tuple[EvaluatedTabs, ...]
    actions: Tuple[EvaluatedAction, ...]

    def field(self, name: str) -> EvaluatedField:
        for section in self.all_sections():
            for row in section.rows:
                for f in row.fields:
                    if f.name == name:
                        return f
        raise KeyError(name)

    def all_sections(self) -> Tuple[EvaluatedSection, ...]:
        nested = tuple(s for tabs in self.tabs for tab in tabs.tabs for s in tab.sections)
        return self.sections + nested


def _evaluate_field(cfg: FieldConfig, ctx: Any) -> EvaluatedField:
    props = resolve(cfg.props, ctx, default={})
    return EvaluatedField(
        name=cfg.name,
        config=cfg,
        label=resolve(cfg.label, ctx),
        placeholder=resolve(cfg.placeholder, ctx),
        props=thaw(props) or {},
        visibility=ctx.evaluate_field_visibility(cfg.name),
        disabled=ctx.is_field_disabled(cfg.name),
        read_only=ctx.is_field_read_only(cfg.name),
        value=ctx.get_value(cfg.name),
        errors=tuple(ctx.get_field_errors(cfg.name)),
        options=ctx.get_field_options(cfg.name),
        pending=ctx.is_pending(cfg.name),
        depends_on=ctx.get_dependency_sources(cfg.name),
    )


def _evaluate_row(row: RowConfig, ctx: Any) -> EvaluatedRow:
    return EvaluatedRow(
        visibility=evaluate_visibility(row.visibility, ctx),
        fields=tuple(_evaluate_field(f, ctx) for f in row.fields),
        layout=row.layout,
        columns=row.columns,
    )


def _evaluate_section(section: SectionConfig, ctx: Any) -> EvaluatedSection:
    return EvaluatedSection(
        id=section.id,
        title=resolve(section.title, ctx),
        visibility=ctx.evaluate_section_visibility(section.id),
        collapsible=section.collapsible,
        collapsed=section.collapsed,
        rows=tuple(_evaluate_row(r, ctx) for r in section.rows),
        actions=section.actions,
    )


def _evaluate_list(lc: ListConfig, ctx: Any) -> EvaluatedList:
    ops = ctx.list(lc.name)
    count = ops.count()
    return EvaluatedList(
        name=lc.name,
        label=resolve(lc.label, ctx),
        display=lc.display,
        visibility=ctx.evaluate_field_visibility(lc.name),
        count=count,
        active_index=ops.get_active_index(),
        errors=tuple(ops.get_errors()),
        item_errors=tuple(ops.get_item_errors(i) for i in range(count)),
        valid=ops.is_valid() and all(ops.is_item_valid(i) for i in range(count)),
        can_add=lc.actions.can_add and (lc.max_items is None or count < lc.max_items),
        can_remove=lc.actions.can_remove and (lc.min_items is None or count > lc.min_items),
    )


def _evaluate_tabs(tabs: TabsConfig, ctx: Any) -> EvaluatedTabs:
    return EvaluatedTabs(
        id=tabs.id,
        position=tabs.position,
        initial_tab=tabs.initial_tab,
        visibility=evaluate_visibility(tabs.visibility, ctx),
        tabs=tuple(
            EvaluatedTab(
                id=tab.id,
                label=resolve(tab.label, ctx),
                badge=resolve(tab.badge, ctx),
                disabled=bool(resolve(tab.disabled, ctx, False)),
                visibility=evaluate_visibility(tab.visibility, ctx),
                sections=tuple(_evaluate_section(s, ctx) for s in tab.sections),
            )
            for tab in tabs.tabs
        ),
    )


def _evaluate_action(action: ActionConfig, ctx: Any) -> EvaluatedAction:
    return EvaluatedAction(
        name=action.name,
        label=resolve(action.label, ctx),
        skip_validation=action.skip_validation,
    )


def evaluate_form(ctx: Any) -> EvaluatedForm:
    """Avalia `ctx.config` contra o estado atual do contexto."""
    config = ctx.config
    return EvaluatedForm(
        form_id=config.id,
        mode=ctx.mode,
        read_only=ctx.is_read_only(),
        valid=ctx.is_valid(),
        dirty=ctx.is_dirty(),
        pending=ctx.is_pending(),
        sections=tuple(_evaluate_section(s, ctx) for s in config.sections),
        lists=tuple(_evaluate_list(lc, ctx) for lc in config.lists),
        tabs=tuple(_evaluate_tabs(t, ctx) for t in config.tabs),
        actions=tuple(_evaluate_action(a, ctx) for a in config.actions),
    )
