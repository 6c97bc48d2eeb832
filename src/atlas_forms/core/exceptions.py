"""
Atlas Forms: Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Atlas Forms.

Objetivo:
- Permitir que builders, mappers e contextos levantem exceções semânticas
- Facilitar o mapeamento determinístico para FormErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Erros estruturais (build-time) falham cedo e de forma explícita.
- Erros de avaliação em runtime NÃO são levantados para o chamador:
  são capturados e expostos como dados via canal de erros do contexto.
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class FormsError(Exception):
    """Base class para exceções internas do Atlas Forms.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    - `hint` indica onde corrigir, quando aplicável
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.hint = hint

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Build-time
# ---------------------------------------------------------------------------

class BuilderStateError(FormsError):
    """Sequência inválida de chamadas em um builder (end() duplo, escopo órfão, build com escopos abertos)."""


class ConfigShapeError(BuilderStateError):
    """Nó de configuração com forma inválida (nomes duplicados, limites invertidos, flags exclusivas)."""


class MappingInvariantViolation(FormsError):
    """Declaração de mapper inválida, detectada no build e nunca no uso."""


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

class ContextDestroyedError(FormsError):
    """Mutação tentada após o encerramento (destroy) do contexto."""


class DependencyResolutionError(FormsError):
    """Falha de reload ou handler de dependência.

    Nunca é propagada para `set_value`: é registrada no canal de erros
    do contexto que disparou a resolução.
    """
