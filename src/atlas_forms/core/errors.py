"""
Atlas Forms: Canonical Error Structures (v1)

Este módulo define o padrão canônico dos registros do canal de erros
de um contexto de formulário. Falhas de avaliação em runtime
(dependências, regras de validação, ações) nunca derrubam o loop de
avaliação: viram dados consultáveis, e devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma falha é descartada silenciosamente.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FormErrorPayload:
    """
    Payload canônico de erro do Atlas Forms.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao desenvolvedor (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Dependências
DEPENDENCY_RELOAD_FAILED = "DEPENDENCY_RELOAD_FAILED"
DEPENDENCY_HANDLER_FAILED = "DEPENDENCY_HANDLER_FAILED"

# Validação
VALIDATION_RULE_ERROR = "VALIDATION_RULE_ERROR"

# Ações
ACTION_EXECUTION_FAILED = "ACTION_EXECUTION_FAILED"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def dependency_reload_failed(
    *,
    field: str,
    source: str,
    api: Optional[str],
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o api_caller injetado e os reload_params declarados no depends_on do campo.",
) -> FormErrorPayload:
    return FormErrorPayload(
        type=DEPENDENCY_RELOAD_FAILED,
        message="Falha ao recarregar opções do campo dependente",
        details={
            "field": field,
            "source": source,
            "api": api,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def dependency_handler_failed(
    *,
    field: str,
    source: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Revise o handler declarado no depends_on; exceções não são propagadas para set_value.",
) -> FormErrorPayload:
    return FormErrorPayload(
        type=DEPENDENCY_HANDLER_FAILED,
        message="Handler de dependência falhou",
        details={
            "field": field,
            "source": source,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def validation_rule_error(
    *,
    field: str,
    rule: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "A regra levantou exceção e foi contabilizada como falha; corrija o predicado da regra.",
) -> FormErrorPayload:
    return FormErrorPayload(
        type=VALIDATION_RULE_ERROR,
        message="Regra de validação levantou exceção",
        details={
            "field": field,
            "rule": rule,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def action_execution_failed(
    *,
    action: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Declare on_error na ação para tratar a falha explicitamente.",
) -> FormErrorPayload:
    return FormErrorPayload(
        type=ACTION_EXECUTION_FAILED,
        message="Falha durante a execução da ação",
        details={
            "action": action,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )
