# src/atlas_forms/core/context/base.py
"""
Infra comum dos contextos em runtime.

Este módulo define o `BaseContext`, a fundação compartilhada pelos
contextos de formulário, de página e de diálogo.

O BaseContext consolida:
    - identidade do contexto (context_id, created_at)
    - settings efetivos do engine
    - registries usados pelo contexto (injetáveis)
    - event log estruturado e warnings por campo
    - canal de erros de avaliação (dados, nunca exceções)
    - listeners de mudança de valor
    - ciclo de vida (ativo → destruído)

Decisões arquiteturais:
    - Logs são eventos estruturados, não texto livre
    - Falhas de avaliação em runtime viram registros consultáveis
    - `destroy()` é idempotente e irreversível
    - Registries são injetados; o default é um conjunto novo por contexto

Invariantes:
    - Eventos sempre incluem `context_id`, `level` e `timestamp` UTC
    - Warnings são agrupados por campo
    - Após `destroy()`, mutações levantam `ContextDestroyedError`

Limites explícitos:
    - Não conhece a árvore de configuração do formulário
    - Não persiste eventos automaticamente

Este módulo existe para garantir isolamento, rastreabilidade e
encerramento explícito de cada contexto.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from atlas_forms.core.config.settings import FormSettings, default_settings
from atlas_forms.core.errors import FormErrorPayload
from atlas_forms.core.exceptions import ContextDestroyedError
from atlas_forms.core.registry.registry import Registries


Listener = Callable[[Optional[str], Any], None]


class BaseContext:
    def __init__(
        self,
        *,
        context_id: Optional[str] = None,
        settings: Optional[FormSettings] = None,
        registries: Optional[Registries] = None,
        user: Any = None,
    ) -> None:
        self.context_id = context_id or uuid.uuid4().hex
        self.created_at = datetime.now(timezone.utc)
        self.settings = settings or default_settings()
        self.registries = registries if registries is not None else Registries()
        self.user = user

        self.events: List[Dict[str, Any]] = []
        self.warnings: Dict[str, List[str]] = {}
        self._error_channel: List[FormErrorPayload] = []
        self._listeners: List[Listener] = []
        self._destroyed = False

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def _event_base(self) -> Dict[str, Any]:
        return {"context_id": self.context_id}

    def log(self, *, level: str, message: str, **extra: Any) -> None:
        if not self.settings.events_enabled:
            return
        event = self._event_base()
        event.update(
            {
                "level": level,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, field: str, message: str) -> None:
        if field not in self.warnings:
            self.warnings[field] = []
        self.warnings[field].append(message)

    # -----------------------------
    # Canal de erros
    # -----------------------------
    def report_error(self, payload: FormErrorPayload) -> None:
        self._error_channel.append(payload)
        self.log(level="error", message=payload.message, error=payload.to_dict())

    def get_error_channel(self) -> List[FormErrorPayload]:
        return list(self._error_channel)

    # -----------------------------
    # Listeners
    # -----------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registra `listener(field, value)`; `field=None` indica mudança do formulário inteiro.

        Retorna a função que cancela a inscrição.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, field: Optional[str], value: Any) -> None:
        for listener in list(self._listeners):
            listener(field, value)

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def ensure_active(self, operation: str) -> None:
        if self._destroyed:
            raise ContextDestroyedError(
                f"{operation} chamado em contexto destruído",
                details={"context_id": self.context_id, "operation": operation},
            )

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._on_destroy()
        self._destroyed = True
        self._listeners.clear()
        self.log(level="info", message="context destroyed")

    def _on_destroy(self) -> None:
        """Gancho para subclasses liberarem recursos antes do encerramento."""
