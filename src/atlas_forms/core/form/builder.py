# src/atlas_forms/core/form/builder.py
"""
Builders fluentes da árvore de configuração de formulários.

Este módulo define o `FormBuilder` e seus builders de escopo (seção,
linha, campo, lista, abas, aba e ação). Cada método devolve o próprio
builder ou um builder filho; o filho expõe `end()`, que materializa o
nó, o entrega ao pai e devolve o pai.

Responsabilidades do módulo:
    - Construção append-only da configuração
    - Validação de forma no momento do build (tipos, limites, unicidade)
    - Detecção de sequências inválidas de chamadas (`BuilderStateError`)
    - Planejamento estrutural das dependências entre campos
    - Produção de snapshots profundamente congelados

Decisões arquiteturais:
    - Um nó só é entregue ao pai quando seu escopo é encerrado
    - Falhas de forma deixam o escopo aberto: o build subsequente falha
    - `build()` pode ser chamado novamente e produz um novo snapshot
    - Slots "valor ou função" são normalizados via `to_value`

Invariantes:
    - `end()` chamado duas vezes levanta `BuilderStateError`
    - `end()` no builder raiz levanta `BuilderStateError`
    - Builder encerrado não aceita mutações
    - `build()` com escopos abertos levanta `BuilderStateError`
    - Uma falha em um builder filho não corrompe seus irmãos
    - Nomes de campo são únicos no formulário inteiro

Limites explícitos:
    - Não avalia visibilidade, regras ou dependências em runtime
    - Não registra formulários em registries

Este módulo existe para garantir construção explícita,
falha antecipada e snapshots imutáveis.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from atlas_forms.core.exceptions import BuilderStateError, ConfigShapeError
from atlas_forms.core.form.dependency_graph import plan_dependencies
from atlas_forms.core.form.types import (
    ActionConfig,
    DependsOnConfig,
    DisplayMode,
    FieldConfig,
    FormConfig,
    ListActionConfig,
    ListConfig,
    NodeKind,
    RowConfig,
    SectionConfig,
    TabConfig,
    TabsConfig,
    VisibilityConfig,
)
from atlas_forms.core.form.validation import ValidationRule
from atlas_forms.core.values import freeze, to_value


def _split_sources(sources: Union[str, Iterable[str]]) -> Tuple[str, ...]:
    if isinstance(sources, str):
        names = [s.strip() for s in sources.split(",")]
    else:
        names = [str(s).strip() for s in sources]
    return tuple(n for n in names if n)


def _require_name(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigShapeError(f"{what} must be a non-empty string", details={"value": repr(value)})
    return value


def _duplicates(names: Iterable[str]) -> List[str]:
    seen: Dict[str, int] = {}
    for n in names:
        seen[n] = seen.get(n, 0) + 1
    return sorted(n for n, count in seen.items() if count > 1)


# ---------------------------------------------------------------------------
# Infra de escopo
# ---------------------------------------------------------------------------

class _Scope:
    """Escopo filho: abre no construtor, fecha em `end()`."""

    def __init__(self, root: "FormBuilder", parent: Any, description: str) -> None:
        self._root = root
        self._parent = parent
        self._description = description
        self._closed = False
        self._open_children: List["_Scope"] = []
        parent._open_children.append(self)
        root._open_scopes.append(self)

    def _ensure_open(self) -> None:
        if self._closed:
            raise BuilderStateError(
                f"{self._description} já foi encerrado e não aceita mutações",
                details={"scope": self._description},
            )

    def _materialize(self) -> Any:  # pragma: no cover - abstrato
        raise NotImplementedError

    def end(self) -> Any:
        if self._closed:
            raise BuilderStateError(
                f"end() chamado duas vezes em {self._description}",
                details={"scope": self._description},
            )
        if self._open_children:
            raise BuilderStateError(
                f"{self._description} possui escopos filhos abertos",
                details={"open": [c._description for c in self._open_children]},
                hint="Chame end() em cada builder filho antes de encerrar o pai.",
            )
        node = self._materialize()
        self._parent._accept(node)
        self._closed = True
        self._parent._open_children.remove(self)
        self._root._open_scopes.remove(self)
        return self._parent


class _VisibilityMixin:
    """Predicados de visibilidade compartilhados por campos, linhas, seções, listas e abas."""

    _visibility: Dict[str, Any]
    _reset_on_show: bool

    def hide_by_condition(self, predicate: Any = True):
        self._ensure_open()
        self._visibility["hide"] = predicate
        return self

    def visible_by_condition(self, predicate: Any = True):
        self._ensure_open()
        self._visibility["visible"] = predicate
        return self

    def hide_by_access(self, predicate: Any = True):
        self._ensure_open()
        self._visibility["hide_by_access"] = predicate
        return self

    def visible_by_access(self, predicate: Any = True):
        self._ensure_open()
        self._visibility["visible_by_access"] = predicate
        return self

    def reset_on_show(self, flag: bool = True):
        self._ensure_open()
        self._reset_on_show = bool(flag)
        return self

    def _build_visibility(self) -> Optional[VisibilityConfig]:
        if not self._visibility and not self._reset_on_show:
            return None
        return VisibilityConfig(
            hide=to_value(self._visibility.get("hide")),
            visible=to_value(self._visibility.get("visible")),
            hide_by_access=to_value(self._visibility.get("hide_by_access")),
            visible_by_access=to_value(self._visibility.get("visible_by_access")),
            reset_on_show=self._reset_on_show,
        )


# ---------------------------------------------------------------------------
# Campo / linha / seção
# ---------------------------------------------------------------------------

class FieldBuilder(_VisibilityMixin, _Scope):
    def __init__(self, root: "FormBuilder", parent: "RowBuilder", name: str, component: Any = None) -> None:
        _require_name(name, "field name")
        super().__init__(root, parent, f"field '{name}'")
        self._name = name
        self._component = component
        self._label: Any = None
        self._placeholder: Any = None
        self._rules: List[ValidationRule] = []
        self._props: Any = None
        self._disable: Any = None
        self._read_only: Any = None
        self._field_type: Optional[str] = None
        self._col_span: Optional[int] = None
        self._group_id: Optional[str] = None
        self._depends_on: List[DependsOnConfig] = []
        self._visibility = {}
        self._reset_on_show = False

    def component(self, ref: Any) -> "FieldBuilder":
        self._ensure_open()
        self._component = ref
        return self

    def label(self, value: Any) -> "FieldBuilder":
        self._ensure_open()
        self._label = value
        return self

    def placeholder(self, value: Any) -> "FieldBuilder":
        self._ensure_open()
        self._placeholder = value
        return self

    def rules(self, *rules: ValidationRule) -> "FieldBuilder":
        self._ensure_open()
        for rule in rules:
            if not isinstance(rule, ValidationRule):
                raise ConfigShapeError(
                    f"Regra inválida em field '{self._name}': {type(rule).__name__}",
                    hint="Use Validators.* ou create_rule().",
                )
        self._rules.extend(rules)
        return self

    def props(self, value: Any) -> "FieldBuilder":
        self._ensure_open()
        self._props = value
        return self

    def disable(self, predicate: Any = True) -> "FieldBuilder":
        self._ensure_open()
        self._disable = predicate
        return self

    def read_only(self, predicate: Any = True) -> "FieldBuilder":
        self._ensure_open()
        self._read_only = predicate
        return self

    def field_type(self, value: str) -> "FieldBuilder":
        self._ensure_open()
        self._field_type = value
        return self

    def col_span(self, span: int) -> "FieldBuilder":
        self._ensure_open()
        if not isinstance(span, int) or span <= 0:
            raise ConfigShapeError(f"col_span inválido em field '{self._name}': {span!r}")
        self._col_span = span
        return self

    def group(self, group_id: str) -> "FieldBuilder":
        self._ensure_open()
        self._group_id = group_id
        return self

    def depends_on(
        self,
        sources: Union[str, Iterable[str]],
        *,
        clear: bool = False,
        reset: bool = False,
        reload_api: Optional[str] = None,
        reload_params: Any = None,
        handler: Optional[Callable[[Any, Any], Any]] = None,
        debounce_ms: Optional[int] = None,
        only_if_truthy: bool = False,
    ) -> "FieldBuilder":
        self._ensure_open()
        names = _split_sources(sources)
        if not names:
            raise ConfigShapeError(f"depends_on sem fontes em field '{self._name}'")
        if clear and reset:
            raise ConfigShapeError(
                f"depends_on em field '{self._name}' declara clear e reset ao mesmo tempo",
                details={"field": self._name, "sources": list(names)},
                hint="clear e reset são mutuamente exclusivos.",
            )
        if debounce_ms is not None and (not isinstance(debounce_ms, int) or debounce_ms < 0):
            raise ConfigShapeError(f"debounce_ms inválido em field '{self._name}': {debounce_ms!r}")
        self._depends_on.append(
            DependsOnConfig(
                sources=names,
                clear=clear,
                reset=reset,
                reload_api=reload_api,
                reload_params=to_value(reload_params),
                handler=handler,
                debounce_ms=debounce_ms,
                only_if_truthy=only_if_truthy,
            )
        )
        return self

    def _materialize(self) -> FieldConfig:
        return FieldConfig(
            name=self._name,
            component=self._component,
            label=to_value(self._label),
            placeholder=to_value(self._placeholder),
            rules=tuple(self._rules),
            props=to_value(self._props),
            visibility=self._build_visibility(),
            disable=to_value(self._disable),
            read_only=to_value(self._read_only),
            field_type=self._field_type,
            col_span=self._col_span,
            group_id=self._group_id,
            depends_on=tuple(self._depends_on),
        )


class RowBuilder(_VisibilityMixin, _Scope):
    def __init__(self, root: "FormBuilder", parent: Any) -> None:
        super().__init__(root, parent, f"row #{root._next_index('row')}")
        self._fields: List[FieldConfig] = []
        self._layout: Tuple[int, ...] = ()
        self._columns = 12
        self._gap: Optional[int] = None
        self._visibility = {}
        self._reset_on_show = False

    def add_field(self, name: str, component: Any = None) -> FieldBuilder:
        self._ensure_open()
        return FieldBuilder(self._root, self, name, component)

    def layout(self, *spans: int) -> "RowBuilder":
        self._ensure_open()
        if any(not isinstance(s, int) or s <= 0 for s in spans):
            raise ConfigShapeError(f"layout inválido em {self._description}: {spans!r}")
        self._layout = tuple(spans)
        return self

    def columns(self, count: int) -> "RowBuilder":
        self._ensure_open()
        if not isinstance(count, int) or count <= 0:
            raise ConfigShapeError(f"columns inválido em {self._description}: {count!r}")
        self._columns = count
        return self

    def gap(self, value: int) -> "RowBuilder":
        self._ensure_open()
        self._gap = value
        return self

    def _accept(self, node: FieldConfig) -> None:
        self._ensure_open()
        if any(f.name == node.name for f in self._fields):
            raise ConfigShapeError(
                f"Duplicate field name in row: {node.name}",
                details={"field": node.name},
            )
        self._fields.append(node)

    def _materialize(self) -> RowConfig:
        return RowConfig(
            fields=tuple(self._fields),
            layout=self._layout,
            columns=self._columns,
            gap=self._gap,
            visibility=self._build_visibility(),
        )


class SectionBuilder(_VisibilityMixin, _Scope):
    def __init__(self, root: "FormBuilder", parent: Any, title: Any = None, section_id: Optional[str] = None) -> None:
        if section_id is None:
            section_id = f"section-{root._next_index('section')}"
        _require_name(section_id, "section id")
        super().__init__(root, parent, f"section '{section_id}'")
        self._id = section_id
        self._title = title
        self._rows: List[RowConfig] = []
        self._collapsible = False
        self._collapsed = False
        self._actions: Tuple[str, ...] = ()
        self._visibility = {}
        self._reset_on_show = False

    def add_row(self) -> RowBuilder:
        self._ensure_open()
        return RowBuilder(self._root, self)

    def collapsible(self, collapsed: bool = False) -> "SectionBuilder":
        self._ensure_open()
        self._collapsible = True
        self._collapsed = bool(collapsed)
        return self

    def actions(self, *names: str) -> "SectionBuilder":
        self._ensure_open()
        self._actions = self._actions + tuple(names)
        return self

    def _accept(self, node: RowConfig) -> None:
        self._ensure_open()
        self._rows.append(node)

    def _materialize(self) -> SectionConfig:
        return SectionConfig(
            id=self._id,
            title=to_value(self._title),
            rows=tuple(self._rows),
            collapsible=self._collapsible,
            collapsed=self._collapsed,
            visibility=self._build_visibility(),
            actions=self._actions,
        )


# ---------------------------------------------------------------------------
# Lista
# ---------------------------------------------------------------------------

class ListBuilder(_VisibilityMixin, _Scope):
    def __init__(self, root: "FormBuilder", parent: "FormBuilder", name: str) -> None:
        _require_name(name, "list name")
        super().__init__(root, parent, f"list '{name}'")
        self._name = name
        self._label: Any = None
        self._min: Optional[int] = None
        self._max: Optional[int] = None
        self._defaults: Any = None
        self._display = DisplayMode.ROWS
        self._rows: List[RowConfig] = []
        self._rules: List[ValidationRule] = []
        self._actions = ListActionConfig()
        self._tab_label: Any = None
        self._table_columns: Tuple[str, ...] = ()
        self._visibility = {}
        self._reset_on_show = False

    def label(self, value: Any) -> "ListBuilder":
        self._ensure_open()
        self._label = value
        return self

    def min_items(self, count: int) -> "ListBuilder":
        self._ensure_open()
        self._min = count
        return self

    def max_items(self, count: int) -> "ListBuilder":
        self._ensure_open()
        self._max = count
        return self

    def defaults(self, value: Any) -> "ListBuilder":
        self._ensure_open()
        if value is not None and not callable(value) and not hasattr(value, "items"):
            raise ConfigShapeError(
                f"defaults de list '{self._name}' deve ser mapping ou função (ctx, index)",
                details={"type": type(value).__name__},
            )
        self._defaults = value
        return self

    def display(self, mode: Union[str, DisplayMode]) -> "ListBuilder":
        self._ensure_open()
        try:
            self._display = DisplayMode(mode)
        except ValueError:
            raise ConfigShapeError(
                f"display mode desconhecido em list '{self._name}': {mode!r}",
                details={"allowed": [m.value for m in DisplayMode]},
            ) from None
        return self

    def add_row(self) -> RowBuilder:
        self._ensure_open()
        return RowBuilder(self._root, self)

    def rules(self, *rules: ValidationRule) -> "ListBuilder":
        self._ensure_open()
        for rule in rules:
            if not isinstance(rule, ValidationRule):
                raise ConfigShapeError(f"Regra inválida em list '{self._name}': {type(rule).__name__}")
        self._rules.extend(rules)
        return self

    def actions(
        self,
        *,
        can_add: bool = True,
        can_remove: bool = True,
        can_reorder: bool = False,
        confirm_remove: Optional[str] = None,
        add_label: Optional[str] = None,
        remove_label: Optional[str] = None,
        position: str = "bottom",
    ) -> "ListBuilder":
        self._ensure_open()
        self._actions = ListActionConfig(
            can_add=can_add,
            can_remove=can_remove,
            can_reorder=can_reorder,
            confirm_remove=confirm_remove,
            add_label=add_label,
            remove_label=remove_label,
            position=position,
        )
        return self

    def tab_label(self, value: Any) -> "ListBuilder":
        self._ensure_open()
        self._tab_label = value
        return self

    def table_columns(self, *columns: str) -> "ListBuilder":
        self._ensure_open()
        self._table_columns = tuple(columns)
        return self

    def _accept(self, node: RowConfig) -> None:
        self._ensure_open()
        self._rows.append(node)

    def _materialize(self) -> ListConfig:
        for key, value in (("min_items", self._min), ("max_items", self._max)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ConfigShapeError(f"{key} inválido em list '{self._name}': {value!r}")
        if self._min is not None and self._max is not None and self._min > self._max:
            raise ConfigShapeError(
                f"list '{self._name}': min_items ({self._min}) > max_items ({self._max})",
                details={"min_items": self._min, "max_items": self._max},
            )

        item_fields = [f for row in self._rows for f in row.fields]
        dupes = _duplicates(f.name for f in item_fields)
        if dupes:
            raise ConfigShapeError(f"Duplicate item field names in list '{self._name}': {dupes}")
        nested = [f.name for f in item_fields if f.depends_on]
        if nested:
            raise ConfigShapeError(
                f"depends_on não é suportado em campos de item da list '{self._name}'",
                details={"fields": nested},
            )

        defaults = self._defaults if callable(self._defaults) or self._defaults is None else freeze(self._defaults)
        return ListConfig(
            name=self._name,
            label=to_value(self._label),
            min_items=self._min,
            max_items=self._max,
            defaults=defaults,
            display=self._display,
            rows=tuple(self._rows),
            rules=tuple(self._rules),
            actions=self._actions,
            tab_label=to_value(self._tab_label),
            table_columns=self._table_columns,
            visibility=self._build_visibility(),
        )


# ---------------------------------------------------------------------------
# Abas
# ---------------------------------------------------------------------------

class TabBuilder(_VisibilityMixin, _Scope):
    def __init__(self, root: "FormBuilder", parent: "TabsBuilder", tab_id: str, label: Any = None) -> None:
        _require_name(tab_id, "tab id")
        super().__init__(root, parent, f"tab '{tab_id}'")
        self._id = tab_id
        self._label = label
        self._sections: List[SectionConfig] = []
        self._disabled: Any = None
        self._badge: Any = None
        self._visibility = {}
        self._reset_on_show = False

    def label(self, value: Any) -> "TabBuilder":
        self._ensure_open()
        self._label = value
        return self

    def add_section(self, title: Any = None, *, section_id: Optional[str] = None) -> SectionBuilder:
        self._ensure_open()
        return SectionBuilder(self._root, self, title, section_id)

    def disabled(self, predicate: Any = True) -> "TabBuilder":
        self._ensure_open()
        self._disabled = predicate
        return self

    def badge(self, value: Any) -> "TabBuilder":
        self._ensure_open()
        self._badge = value
        return self

    def _accept(self, node: SectionConfig) -> None:
        self._ensure_open()
        self._sections.append(node)

    def _materialize(self) -> TabConfig:
        return TabConfig(
            id=self._id,
            label=to_value(self._label),
            sections=tuple(self._sections),
            disabled=to_value(self._disabled),
            badge=to_value(self._badge),
            visibility=self._build_visibility(),
        )


class TabsBuilder(_VisibilityMixin, _Scope):
    def __init__(self, root: "FormBuilder", parent: "FormBuilder", tabs_id: Optional[str] = None) -> None:
        if tabs_id is None:
            tabs_id = f"tabs-{root._next_index('tabs')}"
        _require_name(tabs_id, "tabs id")
        super().__init__(root, parent, f"tabs '{tabs_id}'")
        self._id = tabs_id
        self._tabs: List[TabConfig] = []
        self._position = "top"
        self._initial_tab: Optional[str] = None
        self._visibility = {}
        self._reset_on_show = False

    def add_tab(self, tab_id: str, label: Any = None) -> TabBuilder:
        self._ensure_open()
        return TabBuilder(self._root, self, tab_id, label)

    def position(self, value: str) -> "TabsBuilder":
        self._ensure_open()
        self._position = value
        return self

    def initial_tab(self, tab_id: str) -> "TabsBuilder":
        self._ensure_open()
        self._initial_tab = tab_id
        return self

    def _accept(self, node: TabConfig) -> None:
        self._ensure_open()
        if any(t.id == node.id for t in self._tabs):
            raise ConfigShapeError(f"Duplicate tab id in tabs '{self._id}': {node.id}")
        self._tabs.append(node)

    def _materialize(self) -> TabsConfig:
        ids = [t.id for t in self._tabs]
        if self._initial_tab is not None and self._initial_tab not in ids:
            raise ConfigShapeError(
                f"initial_tab '{self._initial_tab}' não existe em tabs '{self._id}'",
                details={"tabs": ids},
            )
        return TabsConfig(
            id=self._id,
            tabs=tuple(self._tabs),
            position=self._position,
            initial_tab=self._initial_tab,
            visibility=self._build_visibility(),
        )


# ---------------------------------------------------------------------------
# Ação
# ---------------------------------------------------------------------------

class ActionBuilder(_Scope):
    def __init__(self, root: "FormBuilder", parent: "FormBuilder", name: str) -> None:
        _require_name(name, "action name")
        super().__init__(root, parent, f"action '{name}'")
        self._name = name
        self._label: Any = None
        self._skip_validation = False
        self._handler: Optional[Callable] = None
        self._before: Optional[Callable] = None
        self._after: Optional[Callable] = None
        self._on_error: Optional[Callable] = None

    def label(self, value: Any) -> "ActionBuilder":
        self._ensure_open()
        self._label = value
        return self

    def skip_validation(self, flag: bool = True) -> "ActionBuilder":
        self._ensure_open()
        self._skip_validation = bool(flag)
        return self

    def handler(self, fn: Callable) -> "ActionBuilder":
        self._ensure_open()
        self._handler = fn
        return self

    def before_execute(self, fn: Callable) -> "ActionBuilder":
        self._ensure_open()
        self._before = fn
        return self

    def after_execute(self, fn: Callable) -> "ActionBuilder":
        self._ensure_open()
        self._after = fn
        return self

    def on_error(self, fn: Callable) -> "ActionBuilder":
        self._ensure_open()
        self._on_error = fn
        return self

    def _materialize(self) -> ActionConfig:
        return ActionConfig(
            name=self._name,
            label=to_value(self._label),
            skip_validation=self._skip_validation,
            handler=self._handler,
            before_execute=self._before,
            after_execute=self._after,
            on_error=self._on_error,
        )


# ---------------------------------------------------------------------------
# Raiz
# ---------------------------------------------------------------------------

class FormBuilder:
    """
    Builder raiz de um formulário.

    Exemplo:
        form = (
            FormBuilder("customer")
            .add_section("Dados")
                .add_row()
                    .add_field("first_name").rules(Validators.required()).end()
                    .add_field("last_name").rules(Validators.required()).end()
                .end()
            .end()
            .build()
        )
    """

    def __init__(self, form_id: str) -> None:
        self._id = _require_name(form_id, "form id")
        self._open_scopes: List[_Scope] = []
        self._open_children: List[_Scope] = []
        self._sections: List[SectionConfig] = []
        self._lists: List[ListConfig] = []
        self._tabs: List[TabsConfig] = []
        self._actions: List[ActionConfig] = []
        self._order: List[Tuple[NodeKind, str]] = []
        self._read_only = False
        self._counters: Dict[str, int] = {}

    def _next_index(self, kind: str) -> int:
        index = self._counters.get(kind, 0)
        self._counters[kind] = index + 1
        return index

    # -----------------------------
    # Escopos
    # -----------------------------
    def add_section(self, title: Any = None, *, section_id: Optional[str] = None) -> SectionBuilder:
        return SectionBuilder(self, self, title, section_id)

    def add_list(self, name: str) -> ListBuilder:
        return ListBuilder(self, self, name)

    def add_tabs(self, tabs_id: Optional[str] = None) -> TabsBuilder:
        return TabsBuilder(self, self, tabs_id)

    def add_action(self, name: str) -> ActionBuilder:
        return ActionBuilder(self, self, name)

    def read_only(self, flag: bool = True) -> "FormBuilder":
        self._read_only = bool(flag)
        return self

    def end(self) -> None:
        raise BuilderStateError(
            "end() chamado no builder raiz: nenhum escopo foi aberto",
            hint="Use build() para materializar o formulário.",
        )

    def _accept(self, node: Any) -> None:
        if node.kind is NodeKind.SECTION:
            self._sections.append(node)
            self._order.append((NodeKind.SECTION, node.id))
        elif node.kind is NodeKind.LIST:
            self._lists.append(node)
            self._order.append((NodeKind.LIST, node.name))
        elif node.kind is NodeKind.TABS:
            self._tabs.append(node)
            self._order.append((NodeKind.TABS, node.id))
        elif node.kind is NodeKind.ACTION:
            if any(a.name == node.name for a in self._actions):
                raise ConfigShapeError(f"Duplicate action name: {node.name}")
            self._actions.append(node)
        else:  # pragma: no cover - escopos só entregam os tipos acima
            raise BuilderStateError(f"Nó inesperado na raiz: {node.kind}")

    # -----------------------------
    # Build
    # -----------------------------
    def build(self) -> FormConfig:
        if self._open_scopes:
            raise BuilderStateError(
                "build() chamado com escopos abertos",
                details={"open": [s._description for s in self._open_scopes]},
                hint="Chame end() em cada builder filho antes de build().",
            )

        config = FormConfig(
            id=self._id,
            sections=tuple(self._sections),
            lists=tuple(self._lists),
            tabs=tuple(self._tabs),
            actions=tuple(self._actions),
            read_only=self._read_only,
            element_order=tuple(self._order),
        )

        dupes = _duplicates(config.field_names())
        if dupes:
            raise ConfigShapeError(
                f"Duplicate field names in form '{self._id}': {dupes}",
                details={"fields": dupes},
            )
        section_dupes = _duplicates(s.id for s in config.all_sections())
        if section_dupes:
            raise ConfigShapeError(f"Duplicate section ids in form '{self._id}': {section_dupes}")

        plan_dependencies(
            (f for _, _, f in config.iter_fields()),
            known_names=config.field_names(),
        )
        return config
