"""
Settings efetivos do engine de formulários.

Este módulo materializa o dicionário resolvido pelo loader em um objeto
imutável (`FormSettings`) consumido pelos contextos, pelo resolvedor de
dependências e pelo engine de listas.

Chaves reconhecidas (v1):
    validation.default_action      → ação usada quando validate() não recebe uma
    validation.use_mode_as_action  → sem ação explícita, valida com o modo do contexto
    dependencies.default_debounce_ms → debounce aplicado quando o depends_on não declara
    lists.min_policy               → "allow" | "reject"
    lists.max_policy               → "allow" | "reject"
    events.enabled                 → grava (ou não) o event log estruturado

Decisões arquiteturais:
    - Os defaults empacotados são um dict Python (não um arquivo)
    - Valores fora do domínio são rejeitados com erro explícito
    - O hash dos settings acompanha o objeto para rastreabilidade

Limites explícitos:
    - Não lê arquivos (responsabilidade do loader)
    - Não conhece contextos nem builders
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import InvalidSettingsValueError
from .hashing import compute_settings_hash


LIST_POLICY_ALLOW = "allow"
LIST_POLICY_REJECT = "reject"
LIST_POLICIES = (LIST_POLICY_ALLOW, LIST_POLICY_REJECT)


DEFAULT_SETTINGS: Dict[str, Any] = {
    "validation": {
        "default_action": "default",
        "use_mode_as_action": True,
    },
    "dependencies": {
        "default_debounce_ms": 0,
    },
    "lists": {
        "min_policy": LIST_POLICY_ALLOW,
        "max_policy": LIST_POLICY_ALLOW,
    },
    "events": {
        "enabled": True,
    },
}


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise InvalidSettingsValueError(f"settings.{key} deve ser dict, recebido: {type(value).__name__}")
    return value


@dataclass(frozen=True)
class FormSettings:
    """Settings imutáveis do engine, já validados."""

    default_action: str = "default"
    use_mode_as_action: bool = True
    default_debounce_ms: int = 0
    min_policy: str = LIST_POLICY_ALLOW
    max_policy: str = LIST_POLICY_ALLOW
    events_enabled: bool = True
    settings_hash: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "FormSettings":
        validation = _section(data, "validation")
        dependencies = _section(data, "dependencies")
        lists = _section(data, "lists")
        events = _section(data, "events")

        default_action = validation.get("default_action", "default")
        if not isinstance(default_action, str) or not default_action.strip():
            raise InvalidSettingsValueError("validation.default_action deve ser string não vazia")

        use_mode = validation.get("use_mode_as_action", True)
        if not isinstance(use_mode, bool):
            raise InvalidSettingsValueError(
                f"validation.use_mode_as_action deve ser bool, recebido: {use_mode!r}"
            )

        debounce = dependencies.get("default_debounce_ms", 0)
        if isinstance(debounce, bool) or not isinstance(debounce, int) or debounce < 0:
            raise InvalidSettingsValueError(
                f"dependencies.default_debounce_ms deve ser inteiro >= 0, recebido: {debounce!r}"
            )

        min_policy = lists.get("min_policy", LIST_POLICY_ALLOW)
        max_policy = lists.get("max_policy", LIST_POLICY_ALLOW)
        for key, policy in (("min_policy", min_policy), ("max_policy", max_policy)):
            if policy not in LIST_POLICIES:
                raise InvalidSettingsValueError(
                    f"lists.{key} inválido: {policy!r} (esperado um de {list(LIST_POLICIES)})"
                )

        return cls(
            default_action=default_action,
            use_mode_as_action=use_mode,
            default_debounce_ms=debounce,
            min_policy=min_policy,
            max_policy=max_policy,
            events_enabled=bool(events.get("enabled", True)),
            settings_hash=compute_settings_hash(data),
        )


def default_settings() -> FormSettings:
    return FormSettings.from_mapping(deepcopy(DEFAULT_SETTINGS))
