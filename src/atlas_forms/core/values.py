"""
Valores de configuração: literais ou computados.

Todo slot de configuração que aceita "um valor ou uma função do
contexto" (labels, props, predicados de visibilidade, disable/read-only,
reload params, badges) é normalizado no build para uma de duas formas:

    - Literal(value)   → valor estático, congelado
    - Computed(fn)     → função pura `fn(ctx) -> valor`

A leitura é sempre feita por `resolve(value, ctx)`, o único ponto do
core que decide como um slot é avaliado.

Invariantes:
    - Literais são congelados profundamente (dict → MappingProxyType,
      list → tuple)
    - Computed nunca é avaliado no build
    - `resolve` não muta o contexto

Limites explícitos:
    - Não captura exceções de funções computadas
    - Não faz cache de valores resolvidos
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Computed:
    fn: Callable[[Any], Any]


ValueSlot = Union[Literal, Computed]


def freeze(obj: Any) -> Any:
    """Congela recursivamente dicts, listas e sets."""
    if isinstance(obj, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return tuple(freeze(v) for v in obj)
    if isinstance(obj, (set, frozenset)):
        return frozenset(freeze(v) for v in obj)
    return obj


def thaw(obj: Any) -> Any:
    """Inverso de `freeze`: devolve cópias mutáveis (dict/list)."""
    if isinstance(obj, Mapping):
        return {k: thaw(v) for k, v in obj.items()}
    if isinstance(obj, tuple):
        return [thaw(v) for v in obj]
    if isinstance(obj, frozenset):
        return set(thaw(v) for v in obj)
    return obj


def to_value(raw: Any) -> Optional[ValueSlot]:
    """Normaliza um valor bruto de configuração para Literal ou Computed.

    `None` continua `None` (slot ausente).
    """
    if raw is None:
        return None
    if isinstance(raw, (Literal, Computed)):
        return raw
    if callable(raw):
        return Computed(raw)
    return Literal(freeze(raw))


def resolve(value: Any, ctx: Any, default: Any = None) -> Any:
    if value is None:
        return default
    if isinstance(value, Literal):
        return value.value
    if isinstance(value, Computed):
        return value.fn(ctx)
    if callable(value):
        return value(ctx)
    return value
