"""
Regras de validação e seus executores.

Este módulo define o contrato de regra consumido pelo engine
(`(value, ctx) -> bool | Awaitable[bool]`, mensagem, filtros de ação)
e o catálogo `Validators` com as regras embutidas.

Responsabilidades:
    - Construir regras com filtros `skip_on` / `validate_on`
    - Decidir se uma regra roda para uma ação (`should_run_rule`)
    - Executar regras síncronas e separar resultados assíncronos pendentes
    - Executar regras de forma totalmente assíncrona
    - Resolver caminhos aninhados ("addresses[0].street")

Decisões arquiteturais:
    - Falha de validação é DADO (lista de mensagens), nunca exceção
    - Regra que levanta exceção conta como falha e é reportada ao callback
    - Valores vazios passam em todos os validadores, exceto `required`
    - `skip_on` e `validate_on` são mutuamente exclusivos

Limites explícitos:
    - Não conhece visibilidade (o contexto decide o que pular)
    - Não agenda tasks (o contexto decide quando aguardar)
"""

from __future__ import annotations

import inspect
import math
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple, Union


DEFAULT_MESSAGES = {
    "required": "This field is required",
    "email": "Please enter a valid email address",
    "pattern": "Please enter a valid value",
    "min_length": "Must be at least {min} characters",
    "max_length": "Must be at most {max} characters",
    "min": "Must be at least {min}",
    "max": "Must be at most {max}",
    "url": "Please enter a valid URL",
    "numeric": "Please enter a valid number",
    "integer": "Please enter a whole number",
    "alphanumeric": "Please enter only letters and numbers",
    "phone": "Please enter a valid phone number",
    "custom": "Validation failed",
}

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_URL_RE = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)*/?$", re.IGNORECASE)
_ALNUM_RE = re.compile(r"^[a-zA-Z0-9]+$")
_PHONE_RE = re.compile(r"^[+]?[(]?[0-9]{3}[)]?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}$")
_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")
_PATH_RE = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


ValidateFn = Callable[[Any, Any], Union[bool, Awaitable[bool]]]
RuleErrorCallback = Callable[["ValidationRule", BaseException], None]


@dataclass(frozen=True)
class ValidationRule:
    type: str
    validate: ValidateFn
    message: str
    skip_on: Tuple[str, ...] = ()
    validate_on: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def format_message(message: str, params: dict) -> str:
    return _PLACEHOLDER_RE.sub(lambda m: str(params.get(m.group(1), "")), message)


def _to_number(value: Any) -> Optional[float]:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num):
        return None
    return num


def _as_actions(actions: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if actions is None:
        return ()
    if isinstance(actions, str):
        return (actions,)
    return tuple(actions)


def create_rule(
    rule_type: str,
    validate: ValidateFn,
    message: str,
    *,
    skip_on: Optional[Iterable[str]] = None,
    validate_on: Optional[Iterable[str]] = None,
) -> ValidationRule:
    skip = _as_actions(skip_on)
    only = _as_actions(validate_on)
    if skip and only:
        raise ValueError(
            f'Validator "{rule_type}": cannot use both "skip_on" and "validate_on" together'
        )
    return ValidationRule(
        type=rule_type,
        validate=validate,
        message=message,
        skip_on=skip,
        validate_on=only,
    )


def parse_field_path(path: str) -> List[Union[str, int]]:
    """"addresses[0].street" -> ["addresses", 0, "street"]"""
    segments: List[Union[str, int]] = []
    for name, index in _PATH_RE.findall(path):
        if name:
            segments.append(name)
        else:
            segments.append(int(index))
    return segments


def get_path_value(data: Any, path: str) -> Any:
    current = data
    for segment in parse_field_path(path):
        if current is None:
            return None
        if isinstance(segment, int):
            if not isinstance(current, (list, tuple)) or not 0 <= segment < len(current):
                return None
            current = current[segment]
        else:
            if not hasattr(current, "get"):
                return None
            current = current.get(segment)
    return current


# ---------------------------------------------------------------------------
# Catálogo
# ---------------------------------------------------------------------------

class Validators:
    """Fábrica estática das regras embutidas.

    Todas aceitam `message`, `skip_on` e `validate_on` como keywords.
    """

    @staticmethod
    def required(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "required",
            lambda value, ctx: not is_empty(value),
            message or DEFAULT_MESSAGES["required"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def email(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "email",
            lambda value, ctx: is_empty(value) or bool(_EMAIL_RE.match(str(value))),
            message or DEFAULT_MESSAGES["email"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def pattern(regex: Union[str, "re.Pattern[str]"], message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        compiled = re.compile(regex) if isinstance(regex, str) else regex
        return create_rule(
            "pattern",
            lambda value, ctx: is_empty(value) or bool(compiled.search(str(value))),
            message or DEFAULT_MESSAGES["pattern"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def min_length(length: int, message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "min_length",
            lambda value, ctx: is_empty(value) or len(value if isinstance(value, str) else str(value)) >= length,
            format_message(message or DEFAULT_MESSAGES["min_length"], {"min": length}),
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def max_length(length: int, message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "max_length",
            lambda value, ctx: is_empty(value) or len(value if isinstance(value, str) else str(value)) <= length,
            format_message(message or DEFAULT_MESSAGES["max_length"], {"max": length}),
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def min_value(minimum: float, message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        def _check(value: Any, ctx: Any) -> bool:
            if is_empty(value):
                return True
            num = _to_number(value)
            return num is not None and num >= minimum

        return create_rule(
            "min",
            _check,
            format_message(message or DEFAULT_MESSAGES["min"], {"min": minimum}),
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def max_value(maximum: float, message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        def _check(value: Any, ctx: Any) -> bool:
            if is_empty(value):
                return True
            num = _to_number(value)
            return num is not None and num <= maximum

        return create_rule(
            "max",
            _check,
            format_message(message or DEFAULT_MESSAGES["max"], {"max": maximum}),
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def url(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "url",
            lambda value, ctx: is_empty(value) or bool(_URL_RE.match(str(value))),
            message or DEFAULT_MESSAGES["url"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def numeric(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "numeric",
            lambda value, ctx: is_empty(value) or _to_number(value) is not None,
            message or DEFAULT_MESSAGES["numeric"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def integer(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        def _check(value: Any, ctx: Any) -> bool:
            if is_empty(value):
                return True
            num = _to_number(value)
            return num is not None and not math.isinf(num) and num.is_integer()

        return create_rule(
            "integer",
            _check,
            message or DEFAULT_MESSAGES["integer"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def alphanumeric(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "alphanumeric",
            lambda value, ctx: is_empty(value) or bool(_ALNUM_RE.match(str(value))),
            message or DEFAULT_MESSAGES["alphanumeric"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def phone(message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        return create_rule(
            "phone",
            lambda value, ctx: is_empty(value) or bool(_PHONE_RE.match(str(value))),
            message or DEFAULT_MESSAGES["phone"],
            skip_on=skip_on,
            validate_on=validate_on,
        )

    @staticmethod
    def custom(validate: ValidateFn, message: Optional[str] = None, *, skip_on=None, validate_on=None) -> ValidationRule:
        if not callable(validate):
            raise ValueError("Validators.custom: validate function is required")
        return create_rule(
            "custom",
            validate,
            message or DEFAULT_MESSAGES["custom"],
            skip_on=skip_on,
            validate_on=validate_on,
        )


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

def should_run_rule(rule: ValidationRule, action: str) -> bool:
    if rule.validate_on:
        return action in rule.validate_on
    if rule.skip_on:
        return action not in rule.skip_on
    return True


def run_rules(
    rules: Sequence[ValidationRule],
    value: Any,
    ctx: Any,
    action: str,
    *,
    on_rule_error: Optional[RuleErrorCallback] = None,
) -> Tuple[List[str], List[Tuple[ValidationRule, Awaitable[Any]]]]:
    """
    Executa as regras síncronas e separa as assíncronas.

    Returns:
        (mensagens de erro síncronas, [(regra, awaitable pendente), ...])
    """
    errors: List[str] = []
    pending: List[Tuple[ValidationRule, Awaitable[Any]]] = []

    for rule in rules:
        if not should_run_rule(rule, action):
            continue
        try:
            result = rule.validate(value, ctx)
        except Exception as exc:  # noqa: BLE001
            errors.append(rule.message)
            if on_rule_error is not None:
                on_rule_error(rule, exc)
            continue

        if inspect.isawaitable(result):
            pending.append((rule, result))
        elif not result:
            errors.append(rule.message)

    return errors, pending


async def settle_pending(
    pending: Sequence[Tuple[ValidationRule, Awaitable[Any]]],
    *,
    on_rule_error: Optional[RuleErrorCallback] = None,
) -> List[str]:
    """Aguarda resultados assíncronos na ordem das regras."""
    errors: List[str] = []
    for rule, awaitable in pending:
        try:
            ok = await awaitable
        except Exception as exc:  # noqa: BLE001
            errors.append(rule.message)
            if on_rule_error is not None:
                on_rule_error(rule, exc)
            continue
        if not ok:
            errors.append(rule.message)
    return errors


async def run_rules_async(
    rules: Sequence[ValidationRule],
    value: Any,
    ctx: Any,
    action: str,
    *,
    on_rule_error: Optional[RuleErrorCallback] = None,
) -> List[str]:
    errors, pending = run_rules(rules, value, ctx, action, on_rule_error=on_rule_error)
    errors.extend(await settle_pending(pending, on_rule_error=on_rule_error))
    return errors
