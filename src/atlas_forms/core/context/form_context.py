# src/atlas_forms/core/context/form_context.py
"""
Contexto de formulário em runtime.

Este módulo define o `FormContext`, a fachada única que liga uma
configuração de formulário imutável a uma instância de entity e a um
modo ("new", "edit", "view", ...).

O FormContext compõe:
    - leitura/escrita de valores com rastreamento de dirty e touched
    - validação por campo, por formulário e por ação (sync e async)
    - o avaliador de visibilidade (declarativo e imperativo)
    - o resolvedor de dependências, acionado a cada `set_value`
    - o engine de listas (`list(nome)`), com cache por contexto
    - contextos escopados de item de lista e de diálogo
    - execução de ações declaradas
    - snapshot avaliado para a camada de renderização

Decisões arquiteturais:
    - Cada mudança confirmada segue a ordem: commit → notificação →
      visibilidade (borda) → dependências
    - Ocultar por condição limpa valor, erros e touched; por acesso preserva
    - A ação de validação padrão é o modo do contexto (configurável)
    - Regras assíncronas sem loop em execução são resolvidas via `asyncio.run`
    - Falhas de regras, dependências e ações vão para o canal de erros

Invariantes:
    - A entity e os valores pertencem exclusivamente a este contexto
    - Leituras devolvem cópias; mutações passam pelas operações documentadas
    - Após `destroy()` toda mutação levanta `ContextDestroyedError`
    - `is_valid()` é falso enquanto houver trabalho assíncrono pendente

Limites explícitos:
    - Não renderiza nem conhece componentes (apenas os repassa)
    - Não executa I/O (apenas o `api_caller` injetado, via resolvedor)
    - Não persiste dados

Este módulo existe para garantir um ponto único, explícito e
rastreável de avaliação do formulário em runtime.
"""

from __future__ import annotations

import asyncio
import inspect
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from atlas_forms.core.config.settings import FormSettings
from atlas_forms.core.context.base import BaseContext
from atlas_forms.core.context.scoped import DialogContext, DialogOptions, ListItemContext
from atlas_forms.core.errors import action_execution_failed, validation_rule_error
from atlas_forms.core.form.dependencies import ApiCaller, DependencyResolver
from atlas_forms.core.form.evaluation import EvaluatedForm, evaluate_form
from atlas_forms.core.form.lists import ListOperations
from atlas_forms.core.form.types import FieldConfig, FormConfig, VisibilityConfig
from atlas_forms.core.form.validation import (
    RuleErrorCallback,
    ValidationRule,
    get_path_value,
    run_rules,
    settle_pending,
)
from atlas_forms.core.form.visibility import (
    HIDDEN_BY_ACCESS,
    HIDDEN_BY_CONDITION,
    VISIBLE,
    HiddenBy,
    VisibilityResult,
    combine_results,
    evaluate_visibility,
    transitions_to_clear,
)
from atlas_forms.core.registry.registry import Registries
from atlas_forms.core.values import resolve


PendingRule = Tuple[str, ValidationRule, Awaitable[Any]]


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


@dataclass(frozen=True)
class _Placement:
    """Cadeia de visibilidade de um campo de topo (abas → seção → linha → campo)."""

    outer: Tuple[Optional[VisibilityConfig], ...]
    section_id: Optional[str]
    section: Optional[VisibilityConfig]
    row: Optional[VisibilityConfig]
    own: Optional[VisibilityConfig]


@dataclass
class ActionEvent:
    """Evento entregue aos callbacks de uma ação em execução."""

    action: str
    ctx: "FormContext"
    form_data: Dict[str, Any]
    _prevented: bool = field(default=False, init=False, repr=False)

    def prevent_default(self) -> None:
        self._prevented = True

    @property
    def is_default_prevented(self) -> bool:
        return self._prevented


@dataclass(frozen=True)
class ActionOutcome:
    action: str
    executed: bool
    valid: bool = True
    prevented: bool = False
    result: Any = None
    error: Optional[BaseException] = None


class FormContext(BaseContext):
    def __init__(
        self,
        config: FormConfig,
        *,
        entity: Optional[Mapping[str, Any]] = None,
        mode: str = "new",
        registries: Optional[Registries] = None,
        settings: Optional[FormSettings] = None,
        api_caller: Optional[ApiCaller] = None,
        user: Any = None,
        context_id: Optional[str] = None,
    ) -> None:
        self.config = config
        super().__init__(context_id=context_id, settings=settings, registries=registries, user=user)

        self._mode = mode
        self._read_only = config.read_only
        self._entity: Dict[str, Any] = {}
        self._values: Dict[str, Any] = {}
        self._initial: Dict[str, Any] = {}
        self._errors: Dict[str, List[str]] = {}
        self._touched: Dict[str, bool] = {}
        self._submitting = False

        self._field_overrides: Dict[str, VisibilityResult] = {}
        self._section_overrides: Dict[str, VisibilityResult] = {}
        self._disabled: Dict[str, bool] = {}
        self._options: Dict[str, Any] = {}

        self._lists: Dict[str, ListOperations] = {}
        self._list_defaults: Dict[str, Any] = {}
        self._dialogs: List[DialogContext] = []
        self._validation_tasks: Set[asyncio.Task] = set()

        self._placements: Dict[str, _Placement] = {}
        self._section_chains: Dict[str, Tuple[Tuple[Optional[VisibilityConfig], ...], Optional[VisibilityConfig]]] = {}
        self._index_layout()

        self._field_rules: Dict[str, Tuple[ValidationRule, ...]] = {
            f.name: f.rules for _, _, f in config.iter_fields() if f.rules
        }

        self._resolver = DependencyResolver(
            api_caller=api_caller,
            default_debounce_ms=self.settings.default_debounce_ms,
        )
        self._resolver.register_from_config(config)

        self._load(entity)
        self._visibility_snapshot = self._visibility_state()

        self.log(
            level="info",
            message="form context created",
            mode=mode,
            settings_hash=self.settings.settings_hash,
        )

    def _event_base(self) -> Dict[str, Any]:
        return {"context_id": self.context_id, "form_id": self.config.id}

    def _index_layout(self) -> None:
        def _place(outer: Tuple[Optional[VisibilityConfig], ...], section: Any) -> None:
            self._section_chains[section.id] = (outer, section.visibility)
            for row in section.rows:
                for f in row.fields:
                    self._placements[f.name] = _Placement(
                        outer=outer,
                        section_id=section.id,
                        section=section.visibility,
                        row=row.visibility,
                        own=f.visibility,
                    )

        for section in self.config.sections:
            _place((), section)
        for tabs in self.config.tabs:
            for tab in tabs.tabs:
                for section in tab.sections:
                    _place((tabs.visibility, tab.visibility), section)

    def _load(self, entity: Optional[Mapping[str, Any]]) -> None:
        data = dict(entity or {})
        self._entity = deepcopy(data)
        self._values = deepcopy(data)
        self._initial = deepcopy(data)
        self._errors = {}
        self._touched = {}

    # -----------------------------
    # Identidade & modo
    # -----------------------------
    @property
    def form_id(self) -> str:
        return self.config.id

    @property
    def mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> None:
        self.ensure_active("set_mode")
        previous, self._mode = self._mode, mode
        self.log(level="info", message="mode changed", previous=previous, mode=mode)

    # -----------------------------
    # Entity
    # -----------------------------
    def get_entity(self) -> Dict[str, Any]:
        return deepcopy(self._entity)

    def set_entity(self, entity: Optional[Mapping[str, Any]]) -> None:
        self.ensure_active("set_entity")
        self._resolver.cancel_pending()
        self._load(entity)
        self._lists.clear()
        self._visibility_snapshot = self._visibility_state()
        self.log(level="info", message="entity loaded", fields=sorted(self._values))
        self._notify(None, self.get_form_data())

    # -----------------------------
    # Valores
    # -----------------------------
    def get_value(self, name: str) -> Any:
        if name in self._values:
            return self._values[name]
        if "." in name or "[" in name:
            return get_path_value(self._values, name)
        return None

    def _commit(self, name: str, value: Any) -> None:
        self._values[name] = value
        self._touched[name] = True
        self._notify(name, value)

    def set_value(self, name: str, value: Any) -> None:
        self.ensure_active("set_value")
        self._commit(name, value)
        self.refresh_visibility()
        self._resolver.trigger(name, value, self)

    def set_values(self, values: Mapping[str, Any]) -> None:
        """Confirma um lote de valores e só então resolve as dependências.

        Cada dependente resolve no máximo uma vez por lote.
        """
        self.ensure_active("set_values")
        for name, value in values.items():
            self._commit(name, value)
        self.refresh_visibility()
        self._resolver.trigger_many(dict(values), self)

    def get_form_data(self) -> Dict[str, Any]:
        return deepcopy(self._values)

    # -----------------------------
    # Estado de campo
    # -----------------------------
    def get_field_error(self, name: str) -> Optional[str]:
        errors = self._errors.get(name)
        return errors[0] if errors else None

    def get_field_errors(self, name: str) -> List[str]:
        return list(self._errors.get(name, []))

    def _add_error(self, key: str, message: str) -> None:
        bucket = self._errors.setdefault(key, [])
        if message not in bucket:
            bucket.append(message)

    def set_field_error(self, name: str, message: str) -> None:
        self.ensure_active("set_field_error")
        self._add_error(name, message)

    def clear_field_error(self, name: str) -> None:
        self.ensure_active("clear_field_error")
        self._drop_errors(name)

    def _drop_errors(self, name: str) -> None:
        prefix = f"{name}["
        for key in [k for k in self._errors if k == name or k.startswith(prefix)]:
            del self._errors[key]

    def is_field_dirty(self, name: str) -> bool:
        return self._values.get(name) != self._initial.get(name)

    def is_field_touched(self, name: str) -> bool:
        return self._touched.get(name, False)

    # -----------------------------
    # Estado do formulário
    # -----------------------------
    def is_dirty(self) -> bool:
        keys = set(self._values) | set(self._initial)
        return any(self._values.get(k) != self._initial.get(k) for k in keys)

    def is_touched(self) -> bool:
        return any(self._touched.values())

    def is_pending(self, name: Optional[str] = None) -> bool:
        if name is not None:
            return self._resolver.is_pending(name)
        return self._resolver.is_pending() or bool(self._validation_tasks)

    def is_valid(self) -> bool:
        return not self._errors and not self.is_pending()

    def is_submitting(self) -> bool:
        return self._submitting

    def set_submitting(self, flag: bool) -> None:
        self.ensure_active("set_submitting")
        self._submitting = bool(flag)

    def get_errors(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._errors.items()}

    # -----------------------------
    # Validação
    # -----------------------------
    def register_field_rules(self, name: str, rules: Sequence[ValidationRule]) -> None:
        self.ensure_active("register_field_rules")
        self._field_rules[name] = tuple(rules)

    def _resolve_action(self, action: Optional[str]) -> str:
        if action is not None:
            return action
        if self.settings.use_mode_as_action:
            return self._mode
        return self.settings.default_action

    def _rule_error_reporter(self, key: str) -> RuleErrorCallback:
        def _report(rule: ValidationRule, exc: BaseException) -> None:
            self.report_error(
                validation_rule_error(
                    field=key,
                    rule=rule.type,
                    exc_type=type(exc).__name__,
                    exc_message=str(exc),
                )
            )

        return _report

    def _validation_targets(self) -> List[str]:
        return list(self._field_rules) + [lc.name for lc in self.config.lists]

    def _run_key(self, key: str, rules: Sequence[ValidationRule], value: Any, ctx: Any, action: str) -> List[PendingRule]:
        errors, waits = run_rules(rules, value, ctx, action, on_rule_error=self._rule_error_reporter(key))
        for message in errors:
            self._add_error(key, message)
        return [(key, rule, awaitable) for rule, awaitable in waits]

    def _collect(self, name: str, action: str) -> List[PendingRule]:
        if self.evaluate_field_visibility(name).should_skip_validation:
            return []

        if not self.config.has_list(name):
            rules = self._field_rules.get(name, ())
            return self._run_key(name, rules, self.get_value(name), self, action) if rules else []

        lc = self.config.get_list(name)
        ops = self.list(name)
        pending: List[PendingRule] = []

        bounds = ops.bounds_error()
        if bounds is not None:
            self._add_error(name, bounds)
        if lc.rules:
            pending += self._run_key(name, lc.rules, ops.get_all(), self, action)

        item_fields = [f for f in lc.iter_item_fields() if f.rules]
        for index, item in enumerate(ops.get_all()):
            item_ctx = self.item_context(name, index)
            for f in item_fields:
                if evaluate_visibility(f.visibility, item_ctx).should_skip_validation:
                    continue
                key = f"{name}[{index}].{f.name}"
                pending += self._run_key(key, f.rules, item_ctx.get_value(f.name), item_ctx, action)
        return pending

    async def _settle(self, pending: Sequence[PendingRule]) -> None:
        grouped: Dict[str, List[Tuple[ValidationRule, Awaitable[Any]]]] = {}
        for key, rule, awaitable in pending:
            grouped.setdefault(key, []).append((rule, awaitable))
        for key, items in grouped.items():
            for message in await settle_pending(items, on_rule_error=self._rule_error_reporter(key)):
                self._add_error(key, message)

    def _finish(self, pending: Sequence[PendingRule]) -> bool:
        """Resolve regras assíncronas; devolve False se ficaram agendadas."""
        if not pending:
            return True
        if _running_loop() is None:
            asyncio.run(self._settle(pending))
            return True
        task = asyncio.ensure_future(self._settle(pending))
        self._validation_tasks.add(task)
        task.add_done_callback(self._validation_tasks.discard)
        return False

    def validate(self, action: Optional[str] = None) -> bool:
        """
        Valida todos os campos e listas para a ação informada.

        Sem `action`, usa o modo do contexto (ou `validation.default_action`
        quando `validation.use_mode_as_action` é falso). Campos ocultos por
        condição são ignorados; campos ocultos por acesso são validados.

        Com um loop asyncio em execução e regras assíncronas pendentes,
        devolve False e agenda a conclusão; use `validate_async` para aguardar.
        """
        self.ensure_active("validate")
        action = self._resolve_action(action)
        self._errors = {}
        pending: List[PendingRule] = []
        for name in self._validation_targets():
            pending += self._collect(name, action)
        settled = self._finish(pending)
        self.log(level="debug", message="form validated", action=action, errors=len(self._errors))
        return settled and not self._errors

    def validate_action(self, action: str) -> bool:
        return self.validate(action=action)

    def validate_field(self, name: str, action: Optional[str] = None) -> bool:
        self.ensure_active("validate_field")
        action = self._resolve_action(action)
        self._drop_errors(name)
        settled = self._finish(self._collect(name, action))
        has_errors = any(k == name or k.startswith(f"{name}[") for k in self._errors)
        return settled and not has_errors

    async def validate_async(self, action: Optional[str] = None) -> bool:
        self.ensure_active("validate_async")
        action = self._resolve_action(action)
        self._errors = {}
        pending: List[PendingRule] = []
        for name in self._validation_targets():
            pending += self._collect(name, action)
        await self._settle(pending)
        return not self._errors

    async def wait_pending(self) -> None:
        await self._resolver.wait_pending()
        while self._validation_tasks:
            await asyncio.gather(*list(self._validation_tasks), return_exceptions=True)

    # -----------------------------
    # Ações de formulário
    # -----------------------------
    def reset(self) -> None:
        self.ensure_active("reset")
        self._resolver.cancel_pending()
        self._values = deepcopy(self._initial)
        self._errors = {}
        self._touched = {}
        self._visibility_snapshot = self._visibility_state()
        self._notify(None, self.get_form_data())

    def reset_field(self, name: str) -> None:
        self.ensure_active("reset_field")
        value = deepcopy(self._initial.get(name))
        self._values[name] = value
        self._drop_errors(name)
        self._touched.pop(name, None)
        self._notify(name, value)

    def set_read_only(self, flag: bool) -> None:
        self.ensure_active("set_read_only")
        self._read_only = bool(flag)

    def is_read_only(self) -> bool:
        return self._read_only

    async def run_action(self, name: str) -> ActionOutcome:
        """
        Executa a ação declarada `name`.

        Ordem: validação (com a ação como nome, salvo `skip_validation`) →
        `before_execute` (pode chamar `prevent_default()`) → `handler` →
        `after_execute(resultado, evento)`. Falhas vão para `on_error` ou,
        na ausência dele, para o canal de erros.
        """
        self.ensure_active("run_action")
        action = self.config.get_action(name)
        self._submitting = True
        event = ActionEvent(action=name, ctx=self, form_data=self.get_form_data())
        try:
            if not action.skip_validation and not await self.validate_async(action=name):
                self.log(level="info", message="action blocked by validation", action=name)
                return ActionOutcome(action=name, executed=False, valid=False)

            if action.before_execute is not None:
                await _maybe_await(action.before_execute(event))
                if event.is_default_prevented:
                    return ActionOutcome(action=name, executed=False, prevented=True)

            result = None
            if action.handler is not None:
                result = await _maybe_await(action.handler(event))
            if action.after_execute is not None:
                await _maybe_await(action.after_execute(result, event))

            self.log(level="info", message="action executed", action=name)
            return ActionOutcome(action=name, executed=True, result=result)

        except Exception as exc:  # noqa: BLE001
            if action.on_error is not None:
                await _maybe_await(action.on_error(exc, event))
            else:
                self.report_error(
                    action_execution_failed(action=name, exc_type=type(exc).__name__, exc_message=str(exc))
                )
            return ActionOutcome(action=name, executed=False, error=exc)

        finally:
            self._submitting = False

    # -----------------------------
    # Visibilidade
    # -----------------------------
    def evaluate_section_visibility(self, section_id: str) -> VisibilityResult:
        outer, own = self._section_chains[section_id]
        chain = [evaluate_visibility(cfg, self) for cfg in outer]
        chain.append(self._section_overrides.get(section_id) or evaluate_visibility(own, self))
        return combine_results(chain)

    def evaluate_field_visibility(self, name: str) -> VisibilityResult:
        override = self._field_overrides.get(name)
        if self.config.has_list(name):
            return override or evaluate_visibility(self.config.get_list(name).visibility, self)

        placement = self._placements.get(name)
        if placement is None:
            return override or VISIBLE
        return combine_results(
            [
                self.evaluate_section_visibility(placement.section_id),
                evaluate_visibility(placement.row, self),
                override or evaluate_visibility(placement.own, self),
            ]
        )

    def evaluate_visibility(self, name: str) -> VisibilityResult:
        return self.evaluate_field_visibility(name)

    def _tracked_names(self) -> List[str]:
        return list(self._placements) + [lc.name for lc in self.config.lists]

    def _visibility_state(self) -> Dict[str, VisibilityResult]:
        return {name: self.evaluate_field_visibility(name) for name in self._tracked_names()}

    def _clear_hidden(self, name: str) -> None:
        self._values[name] = None
        self._drop_errors(name)
        self._touched.pop(name, None)
        self._notify(name, None)

    def refresh_visibility(self) -> List[str]:
        """
        Reavalia a visibilidade de todos os campos e aplica os efeitos de borda.

        Campos que acabaram de ficar ocultos por condição são limpos; campos
        com `reset_on_show` que acabaram de reaparecer voltam ao valor inicial.

        Returns:
            List[str]: Campos limpos nesta passada.
        """
        self.ensure_active("refresh_visibility")
        previous = self._visibility_snapshot
        current = {name: self.evaluate_field_visibility(name) for name in self._tracked_names()}

        cleared = transitions_to_clear(current, previous)
        for name in cleared:
            self._clear_hidden(name)

        for name, result in current.items():
            before = previous.get(name)
            if not result.is_visible or before is None or before.is_visible:
                continue
            placement = self._placements.get(name)
            own = placement.own if placement else None
            if own is not None and own.reset_on_show:
                self.reset_field(name)

        self._visibility_snapshot = current
        if cleared:
            self.log(level="debug", message="hidden fields cleared", fields=cleared)
        return cleared

    def show_field(self, name: str) -> None:
        self.ensure_active("show_field")
        self._field_overrides[name] = VISIBLE

    def hide_field_by_condition(self, name: str) -> None:
        self.ensure_active("hide_field_by_condition")
        already = self._field_overrides.get(name) is HIDDEN_BY_CONDITION
        self._field_overrides[name] = HIDDEN_BY_CONDITION
        if not already:
            self._clear_hidden(name)
        self._visibility_snapshot[name] = HIDDEN_BY_CONDITION

    def hide_field_by_access(self, name: str) -> None:
        self.ensure_active("hide_field_by_access")
        self._field_overrides[name] = HIDDEN_BY_ACCESS

    def is_field_hidden(self, name: str) -> bool:
        return not self.evaluate_field_visibility(name).is_visible

    def is_field_hidden_by_access(self, name: str) -> bool:
        return self.evaluate_field_visibility(name).hidden_by is HiddenBy.ACCESS

    def show_section(self, section_id: str) -> None:
        self.ensure_active("show_section")
        self.config.get_section(section_id)
        self._section_overrides[section_id] = VISIBLE

    def hide_section_by_condition(self, section_id: str) -> None:
        self.ensure_active("hide_section_by_condition")
        section = self.config.get_section(section_id)
        already = self._section_overrides.get(section_id) is HIDDEN_BY_CONDITION
        self._section_overrides[section_id] = HIDDEN_BY_CONDITION
        for f in section.iter_fields():
            if not already:
                self._clear_hidden(f.name)
            self._visibility_snapshot[f.name] = HIDDEN_BY_CONDITION

    def hide_section_by_access(self, section_id: str) -> None:
        self.ensure_active("hide_section_by_access")
        self.config.get_section(section_id)
        self._section_overrides[section_id] = HIDDEN_BY_ACCESS

    def is_section_hidden(self, section_id: str) -> bool:
        return not self.evaluate_section_visibility(section_id).is_visible

    def is_section_hidden_by_access(self, section_id: str) -> bool:
        return self.evaluate_section_visibility(section_id).hidden_by is HiddenBy.ACCESS

    # -----------------------------
    # Habilitação
    # -----------------------------
    def _field_config(self, name: str) -> Optional[FieldConfig]:
        try:
            return self.config.get_field(name)
        except KeyError:
            return None

    def enable_field(self, name: str) -> None:
        self.ensure_active("enable_field")
        self._disabled[name] = False

    def disable_field(self, name: str) -> None:
        self.ensure_active("disable_field")
        self._disabled[name] = True

    def is_field_disabled(self, name: str) -> bool:
        if name in self._disabled:
            return self._disabled[name]
        cfg = self._field_config(name)
        return bool(resolve(cfg.disable, self, False)) if cfg else False

    def is_field_read_only(self, name: str) -> bool:
        if self._read_only:
            return True
        cfg = self._field_config(name)
        return bool(resolve(cfg.read_only, self, False)) if cfg else False

    # -----------------------------
    # Opções
    # -----------------------------
    def get_field_options(self, name: str) -> Any:
        return self._options.get(name)

    def set_field_options(self, name: str, options: Any) -> None:
        self.ensure_active("set_field_options")
        self._options[name] = options
        self.log(level="debug", message="field options updated", field=name)

    # -----------------------------
    # Listas
    # -----------------------------
    def register_list_defaults(self, name: str, defaults: Any) -> None:
        self.ensure_active("register_list_defaults")
        self._list_defaults[name] = defaults
        if name in self._lists:
            self._lists[name].set_defaults(defaults)

    def list(self, name: str) -> ListOperations:
        ops = self._lists.get(name)
        if ops is None:
            config = self.config.get_list(name) if self.config.has_list(name) else None
            ops = ListOperations(
                self,
                name,
                config=config,
                defaults=self._list_defaults.get(name),
                min_policy=self.settings.min_policy,
                max_policy=self.settings.max_policy,
            )
            self._lists[name] = ops
        return ops

    # -----------------------------
    # Contextos escopados
    # -----------------------------
    def item_context(self, list_name: str, index: int) -> ListItemContext:
        return ListItemContext(self, list_name, index)

    def open_dialog(self, data: Any = None, options: Optional[DialogOptions] = None) -> DialogContext:
        self.ensure_active("open_dialog")
        dialog = DialogContext(self, data=data, options=options)
        self._dialogs = [d for d in self._dialogs if not d.is_destroyed]
        self._dialogs.append(dialog)
        return dialog

    # -----------------------------
    # Avaliação
    # -----------------------------
    def get_dependency_sources(self, name: str) -> Tuple[str, ...]:
        cfg = self._field_config(name)
        if cfg is None:
            return ()
        return tuple(s for dep in cfg.depends_on for s in dep.sources)

    def evaluate(self) -> EvaluatedForm:
        return evaluate_form(self)

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def _on_destroy(self) -> None:
        self._resolver.cancel_pending()
        for task in list(self._validation_tasks):
            task.cancel()
        self._validation_tasks.clear()
        for dialog in self._dialogs:
            dialog.destroy()
        self._dialogs.clear()
        self._lists.clear()


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
