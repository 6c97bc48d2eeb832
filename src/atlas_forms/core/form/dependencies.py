# src/atlas_forms/core/form/dependencies.py
"""
Resolvedor de dependências entre campos (runtime).

Este módulo define o `DependencyResolver`, responsável por reagir à
mudança confirmada de um campo-fonte aplicando, nos campos dependentes,
as ações declaradas em `depends_on`.

Ordem de execução por dependente:
    1. `clear` (alvo → None, erros limpos) ou `reset` (alvo → valor inicial)
    2. `reload_api` via `api_caller(ReloadRequest)` (assíncrono)
    3. `handler(novo_valor, ctx)` (síncrono ou assíncrono)

Responsabilidades do módulo:
    - Registrar dependentes por fonte, preservando a ordem de registro
    - Aplicar `only_if_truthy` e debounce por (dependente, fonte)
    - Garantir no máximo uma resolução por dependente em cada lote
    - Aplicar o guard de resposta obsoleta no reload
    - Converter falhas em registros no canal de erros do contexto

Decisões arquiteturais:
    - Modelo cooperativo (asyncio): sem threads
    - Com loop em execução, a parte assíncrona vira task do resolvedor;
      sem loop, cada resolução roda até o fim via `asyncio.run`
    - Debounce exige loop em execução; sem loop a resolução é imediata
    - Fetches em voo não são cancelados: o mais recente iniciado vence
    - Falhas nunca sobem para `set_value` nem bloqueiam irmãos

Invariantes:
    - Dependentes de uma fonte são processados na ordem de registro
    - Um trigger novo da mesma fonte cancela o timer de debounce pendente
    - Resultado de reload só é gravado se ainda for o mais recente

Limites explícitos:
    - Não executa I/O por conta própria (apenas o `api_caller` injetado)
    - Não valida o grafo (responsabilidade do planner de build)

Este módulo existe para garantir reações previsíveis, isoladas
e rastreáveis às mudanças de valor.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Tuple

from atlas_forms.core.errors import dependency_handler_failed, dependency_reload_failed
from atlas_forms.core.exceptions import DependencyResolutionError
from atlas_forms.core.form.types import DependsOnConfig, FormConfig
from atlas_forms.core.values import resolve, thaw


@dataclass(frozen=True)
class ReloadRequest:
    """Descritor entregue ao `api_caller` injetado."""

    api: str
    params: Dict[str, Any]
    field_name: str
    source_field: str


ApiCaller = Callable[[ReloadRequest], Awaitable[Any]]


@dataclass(frozen=True)
class DependencyEntry:
    field_name: str
    sources: Tuple[str, ...]
    config: DependsOnConfig
    index: int


@dataclass
class DependencyTriggerResult:
    """Resultado (mutável até `done`) de uma resolução."""

    field_name: str
    source_field: str
    value: Any
    cleared: bool = False
    reset: bool = False
    api_called: Optional[str] = None
    api_result: Any = None
    api_error: Optional[DependencyResolutionError] = None
    handler_error: Optional[DependencyResolutionError] = None
    stale: bool = False
    superseded: bool = False
    done: bool = False


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


@dataclass
class DependencyResolver:
    api_caller: Optional[ApiCaller] = None
    default_debounce_ms: int = 0

    _by_source: Dict[str, List[DependencyEntry]] = field(default_factory=dict, init=False, repr=False)
    _count: int = field(default=0, init=False, repr=False)
    _timers: Dict[Tuple[int, str], Tuple[asyncio.Task, DependencyTriggerResult]] = field(
        default_factory=dict, init=False, repr=False
    )
    _tasks: Set[asyncio.Task] = field(default_factory=set, init=False, repr=False)
    _reload_seq: Dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _pending: Dict[str, int] = field(default_factory=dict, init=False, repr=False)

    # -----------------------------
    # Registro
    # -----------------------------
    def register(self, field_name: str, config: DependsOnConfig) -> DependencyEntry:
        entry = DependencyEntry(
            field_name=field_name,
            sources=tuple(config.sources),
            config=config,
            index=self._count,
        )
        self._count += 1
        for source in entry.sources:
            self._by_source.setdefault(source, []).append(entry)
        return entry

    def register_from_config(self, config: FormConfig) -> None:
        for _, _, f in config.iter_fields():
            for dep in f.depends_on:
                self.register(f.name, dep)

    def dependents(self, source: str) -> List[DependencyEntry]:
        return list(self._by_source.get(source, []))

    def has_dependents(self, source: str) -> bool:
        return bool(self._by_source.get(source))

    def is_pending(self, field_name: Optional[str] = None) -> bool:
        if field_name is None:
            return bool(self._pending) or bool(self._timers)
        waiting = any(result.field_name == field_name for _, result in self._timers.values())
        return waiting or self._pending.get(field_name, 0) > 0

    # -----------------------------
    # Disparo
    # -----------------------------
    def trigger(self, source: str, value: Any, ctx: Any) -> List[DependencyTriggerResult]:
        return self.trigger_many({source: value}, ctx)

    def trigger_many(self, changes: Mapping[str, Any], ctx: Any) -> List[DependencyTriggerResult]:
        """Dispara os dependentes de um lote de mudanças já confirmadas.

        Cada campo alvo resolve no máximo uma vez por lote, mesmo quando
        várias de suas fontes (ou várias entradas `depends_on`) mudaram
        juntas. Vence a primeira entrada disparada, na ordem das mudanças
        e, para a mesma fonte, na ordem de registro. Entradas puladas por
        `only_if_truthy` não consomem o alvo.
        """
        seen: Set[str] = set()
        results: List[DependencyTriggerResult] = []

        for source, value in changes.items():
            for entry in self._by_source.get(source, []):
                if entry.field_name in seen:
                    continue

                cfg = entry.config
                if cfg.only_if_truthy and not value:
                    ctx.log(
                        level="debug",
                        message="dependency skipped (only_if_truthy)",
                        field=entry.field_name,
                        source=source,
                    )
                    continue

                seen.add(entry.field_name)
                result = DependencyTriggerResult(field_name=entry.field_name, source_field=source, value=value)
                results.append(result)
                delay = cfg.debounce_ms if cfg.debounce_ms is not None else self.default_debounce_ms
                loop = _running_loop()

                if delay > 0 and loop is not None:
                    self._schedule_debounced(entry, source, value, ctx, delay, result)
                else:
                    self._execute(entry, source, value, ctx, result, loop)

        return results

    def _schedule_debounced(
        self,
        entry: DependencyEntry,
        source: str,
        value: Any,
        ctx: Any,
        delay_ms: int,
        result: DependencyTriggerResult,
    ) -> None:
        key = (entry.index, source)
        previous = self._timers.pop(key, None)
        if previous is not None:
            task, old_result = previous
            task.cancel()
            old_result.superseded = True
            old_result.done = True

        async def _fire() -> None:
            await asyncio.sleep(delay_ms / 1000.0)
            current = self._timers.get(key)
            if current is not None and current[1] is result:
                del self._timers[key]
            self._apply_sync_actions(entry, ctx, result)
            self._mark_pending(entry.field_name)
            await self._run_async_actions(entry, source, value, ctx, result)

        task = asyncio.ensure_future(_fire())
        self._track(task)
        self._timers[key] = (task, result)

    def _execute(
        self,
        entry: DependencyEntry,
        source: str,
        value: Any,
        ctx: Any,
        result: DependencyTriggerResult,
        loop: Optional[asyncio.AbstractEventLoop],
    ) -> None:
        self._apply_sync_actions(entry, ctx, result)
        cfg = entry.config
        if cfg.reload_api is None and cfg.handler is None:
            result.done = True
            return
        self._mark_pending(entry.field_name)
        if loop is not None:
            self._track(asyncio.ensure_future(self._run_async_actions(entry, source, value, ctx, result)))
        else:
            asyncio.run(self._run_to_completion(entry, source, value, ctx, result))

    def _mark_pending(self, target: str) -> None:
        self._pending[target] = self._pending.get(target, 0) + 1

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -----------------------------
    # Ações
    # -----------------------------
    def _apply_sync_actions(self, entry: DependencyEntry, ctx: Any, result: DependencyTriggerResult) -> None:
        cfg = entry.config
        if cfg.clear:
            ctx.set_value(entry.field_name, None)
            ctx.clear_field_error(entry.field_name)
            result.cleared = True
        elif cfg.reset:
            ctx.reset_field(entry.field_name)
            result.reset = True

    async def _run_async_actions(
        self,
        entry: DependencyEntry,
        source: str,
        value: Any,
        ctx: Any,
        result: DependencyTriggerResult,
    ) -> None:
        target = entry.field_name
        cfg = entry.config
        try:
            if cfg.reload_api is not None:
                await self._reload(entry, source, ctx, result)
            if cfg.handler is not None:
                await self._call_handler(entry, source, value, ctx, result)
        finally:
            self._pending[target] -= 1
            if self._pending[target] <= 0:
                del self._pending[target]
            result.done = True

    async def _run_to_completion(
        self,
        entry: DependencyEntry,
        source: str,
        value: Any,
        ctx: Any,
        result: DependencyTriggerResult,
    ) -> None:
        """Sem loop externo: inclui o trabalho disparado em cascata pelo handler."""
        await self._run_async_actions(entry, source, value, ctx, result)
        await self.wait_pending()

    async def _reload(self, entry: DependencyEntry, source: str, ctx: Any, result: DependencyTriggerResult) -> None:
        target = entry.field_name
        cfg = entry.config
        if self.api_caller is None:
            ctx.add_warning(field=target, message=f"reload_api '{cfg.reload_api}' ignorado: nenhum api_caller injetado")
            return

        seq = self._reload_seq.get(target, 0) + 1
        self._reload_seq[target] = seq
        result.api_called = cfg.reload_api

        try:
            params = thaw(resolve(cfg.reload_params, ctx, default={})) or {}
            request = ReloadRequest(api=cfg.reload_api, params=params, field_name=target, source_field=source)
            payload = await self.api_caller(request)
        except Exception as exc:  # noqa: BLE001
            error = DependencyResolutionError(
                f"Reload of '{target}' via '{cfg.reload_api}' failed",
                details={"field": target, "source": source, "api": cfg.reload_api},
            )
            error.__cause__ = exc
            result.api_error = error
            ctx.report_error(
                dependency_reload_failed(
                    field=target,
                    source=source,
                    api=cfg.reload_api,
                    exc_type=type(exc).__name__,
                    exc_message=str(exc),
                )
            )
            return

        if self._reload_seq.get(target) != seq or ctx.is_destroyed:
            result.stale = True
            ctx.log(level="debug", message="stale reload discarded", field=target, source=source, api=cfg.reload_api)
            return

        result.api_result = payload
        ctx.set_field_options(target, payload)

    async def _call_handler(
        self,
        entry: DependencyEntry,
        source: str,
        value: Any,
        ctx: Any,
        result: DependencyTriggerResult,
    ) -> None:
        target = entry.field_name
        try:
            out = entry.config.handler(value, ctx)
            if inspect.isawaitable(out):
                await out
        except Exception as exc:  # noqa: BLE001
            error = DependencyResolutionError(
                f"Dependency handler of '{target}' failed",
                details={"field": target, "source": source},
            )
            error.__cause__ = exc
            result.handler_error = error
            ctx.report_error(
                dependency_handler_failed(
                    field=target,
                    source=source,
                    exc_type=type(exc).__name__,
                    exc_message=str(exc),
                )
            )

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    async def wait_pending(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_pending(self, field_name: Optional[str] = None) -> None:
        """Cancela timers de debounce (de um dependente, ou todos)."""
        for key, (task, result) in list(self._timers.items()):
            if field_name is None or result.field_name == field_name:
                task.cancel()
                result.superseded = True
                result.done = True
                del self._timers[key]

    def clear(self) -> None:
        self.cancel_pending()
        self._by_source.clear()
        self._reload_seq.clear()
        self._count = 0
