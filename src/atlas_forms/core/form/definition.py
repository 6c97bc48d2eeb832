# src/atlas_forms/core/form/definition.py
"""
Definições de formulário como dados (YAML/JSON).

Este módulo carrega uma definição declarativa de formulário a partir de
um arquivo YAML ou JSON, valida sua estrutura com checagens explícitas
e conduz o `FormBuilder` para produzir um `FormConfig`.

Formato (v1):

    id: customer
    read_only: false
    sections:
      - title: Dados
        id: main
        rows:
          - fields:
              - name: email
                label: E-mail
                rules: [required, email]
              - name: state
                depends_on:
                  - sources: [country]
                    clear: true
    lists:
      - name: addresses
        min_items: 1
        max_items: 3
        display: cards
        defaults: {country: BR}
        rows:
          - fields:
              - name: street
                rules: [required]
    actions:
      - name: save
        label: Salvar

Decisões arquiteturais:
    - Validação estrutural explícita, sem dependências de schema externas
    - Mensagens de erro sempre nomeiam o caminho ofensor
    - Callables não são representáveis: predicados são booleanos
    - Regras de forma continuam sendo verificadas pelos builders

Limites explícitos:
    - Não registra o formulário em registries
    - Não resolve componentes (a referência é repassada como string)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml  # PyYAML

from atlas_forms.core.form.builder import FieldBuilder, FormBuilder, ListBuilder, RowBuilder, SectionBuilder
from atlas_forms.core.form.types import FormConfig
from atlas_forms.core.form.validation import ValidationRule, Validators


class DefinitionError(Exception):
    """Erro base do domínio de definições de formulário."""


class DefinitionFileNotFoundError(DefinitionError):
    """Arquivo de definição não existe no caminho informado."""


class UnsupportedDefinitionFormatError(DefinitionError):
    """Formato não suportado (v1: YAML/JSON)."""


class DefinitionParseError(DefinitionError):
    """Falha ao parsear YAML/JSON ou raiz que não é mapping."""


class DefinitionValidationError(DefinitionError):
    """Definição estruturalmente inválida; a mensagem nomeia o caminho."""


_VISIBILITY_KEYS = ("hide", "visible", "hide_by_access", "visible_by_access")
_FIELD_KEYS = {
    "name", "component", "label", "placeholder", "field_type", "col_span", "group",
    "props", "disabled", "read_only", "rules", "depends_on", "reset_on_show",
} | set(_VISIBILITY_KEYS)
_DEPENDS_KEYS = {"sources", "clear", "reset", "reload_api", "reload_params", "debounce_ms", "only_if_truthy"}

_RULES_WITHOUT_ARG = {
    "required": Validators.required,
    "email": Validators.email,
    "url": Validators.url,
    "numeric": Validators.numeric,
    "integer": Validators.integer,
    "alphanumeric": Validators.alphanumeric,
    "phone": Validators.phone,
}
_RULES_WITH_ARG = {
    "pattern": Validators.pattern,
    "min_length": Validators.min_length,
    "max_length": Validators.max_length,
    "min": Validators.min_value,
    "max": Validators.max_value,
}


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise DefinitionValidationError(msg)


def load_form_definition(path: Union[str, Path]) -> Dict[str, Any]:
    """Carrega uma definição YAML/JSON e devolve o mapping bruto.

    Raises:
        DefinitionFileNotFoundError: se o arquivo não existir.
        UnsupportedDefinitionFormatError: se a extensão não for suportada.
        DefinitionParseError: se o parsing falhar ou a raiz não for mapping.
    """
    p = Path(path)
    if not p.exists():
        raise DefinitionFileNotFoundError(f"form definition not found: {p}")

    suffix = p.suffix.lower()
    raw = p.read_text(encoding="utf-8")

    try:
        if suffix in {".yml", ".yaml"}:
            data = yaml.safe_load(raw)
        elif suffix == ".json":
            data = json.loads(raw)
        else:
            raise UnsupportedDefinitionFormatError(f"unsupported definition format: {suffix}")
    except UnsupportedDefinitionFormatError:
        raise
    except Exception as e:
        raise DefinitionParseError(str(e) or "failed to parse form definition") from e

    if data is None:
        raise DefinitionParseError("form definition file is empty")
    if not isinstance(data, dict):
        raise DefinitionParseError("form definition root must be a mapping/dict")
    return data


def load_form(path: Union[str, Path]) -> FormConfig:
    """Atalho: `load_form_definition` seguido de `build_form_from_definition`."""
    return build_form_from_definition(load_form_definition(path))


# ---------------------------------------------------------------------------
# Regras
# ---------------------------------------------------------------------------

def _build_rule(spec: Any, where: str) -> ValidationRule:
    if isinstance(spec, str):
        spec = {"type": spec}
    _expect(isinstance(spec, dict), f"{where} must be a string or a mapping")

    rule_type = spec.get("type")
    _expect(_is_non_empty_str(rule_type), f"{where}.type is required")
    options = {
        "message": spec.get("message"),
        "skip_on": spec.get("skip_on"),
        "validate_on": spec.get("validate_on"),
    }
    _expect(
        not (options["skip_on"] and options["validate_on"]),
        f"{where}: skip_on and validate_on are mutually exclusive",
    )

    if rule_type in _RULES_WITHOUT_ARG:
        return _RULES_WITHOUT_ARG[rule_type](**options)
    if rule_type in _RULES_WITH_ARG:
        _expect("value" in spec, f"{where}.value is required for rule '{rule_type}'")
        return _RULES_WITH_ARG[rule_type](spec["value"], **options)

    allowed = sorted(set(_RULES_WITHOUT_ARG) | set(_RULES_WITH_ARG))
    raise DefinitionValidationError(f"{where}.type must be one of {allowed}, got {rule_type!r}")


def _build_rules(specs: Any, where: str) -> List[ValidationRule]:
    if specs is None:
        return []
    _expect(isinstance(specs, list), f"{where} must be a list")
    return [_build_rule(s, f"{where}[{i}]") for i, s in enumerate(specs)]


# ---------------------------------------------------------------------------
# Nós
# ---------------------------------------------------------------------------

def _apply_visibility(builder: Any, data: Dict[str, Any], where: str) -> None:
    for key in _VISIBILITY_KEYS:
        if key in data:
            _expect(isinstance(data[key], bool), f"{where}.{key} must be boolean")
    if "hide" in data:
        builder.hide_by_condition(data["hide"])
    if "visible" in data:
        builder.visible_by_condition(data["visible"])
    if "hide_by_access" in data:
        builder.hide_by_access(data["hide_by_access"])
    if "visible_by_access" in data:
        builder.visible_by_access(data["visible_by_access"])
    if data.get("reset_on_show"):
        builder.reset_on_show(True)


def _apply_depends_on(fb: FieldBuilder, specs: Any, where: str) -> None:
    _expect(isinstance(specs, list), f"{where} must be a list")
    for i, spec in enumerate(specs):
        path = f"{where}[{i}]"
        _expect(isinstance(spec, dict), f"{path} must be a mapping")
        unknown = sorted(set(spec) - _DEPENDS_KEYS)
        _expect(not unknown, f"{path} has unknown keys: {unknown}")
        sources = spec.get("sources")
        _expect(
            _is_non_empty_str(sources) or (isinstance(sources, list) and sources),
            f"{path}.sources is required",
        )
        params = spec.get("reload_params")
        _expect(params is None or isinstance(params, dict), f"{path}.reload_params must be a mapping")
        fb.depends_on(
            sources,
            clear=bool(spec.get("clear", False)),
            reset=bool(spec.get("reset", False)),
            reload_api=spec.get("reload_api"),
            reload_params=params,
            debounce_ms=spec.get("debounce_ms"),
            only_if_truthy=bool(spec.get("only_if_truthy", False)),
        )


def _build_field(row: RowBuilder, data: Any, where: str) -> None:
    _expect(isinstance(data, dict), f"{where} must be a mapping")
    _expect(_is_non_empty_str(data.get("name")), f"{where}.name is required")
    unknown = sorted(set(data) - _FIELD_KEYS)
    _expect(not unknown, f"{where} has unknown keys: {unknown}")

    fb = row.add_field(data["name"], data.get("component"))
    if "label" in data:
        fb.label(data["label"])
    if "placeholder" in data:
        fb.placeholder(data["placeholder"])
    if "field_type" in data:
        fb.field_type(data["field_type"])
    if "col_span" in data:
        fb.col_span(data["col_span"])
    if "group" in data:
        fb.group(data["group"])
    if "props" in data:
        _expect(isinstance(data["props"], dict), f"{where}.props must be a mapping")
        fb.props(data["props"])
    if "disabled" in data:
        _expect(isinstance(data["disabled"], bool), f"{where}.disabled must be boolean")
        fb.disable(data["disabled"])
    if "read_only" in data:
        _expect(isinstance(data["read_only"], bool), f"{where}.read_only must be boolean")
        fb.read_only(data["read_only"])
    rules = _build_rules(data.get("rules"), f"{where}.rules")
    if rules:
        fb.rules(*rules)
    if "depends_on" in data:
        _apply_depends_on(fb, data["depends_on"], f"{where}.depends_on")
    _apply_visibility(fb, data, where)
    fb.end()


def _build_rows(parent: Union[SectionBuilder, ListBuilder], rows: Any, where: str) -> None:
    _expect(isinstance(rows, list), f"{where} must be a list")
    for i, row_data in enumerate(rows):
        path = f"{where}[{i}]"
        _expect(isinstance(row_data, dict), f"{path} must be a mapping")
        fields = row_data.get("fields")
        _expect(isinstance(fields, list) and fields, f"{path}.fields must be a non-empty list")
        rb = parent.add_row()
        if "layout" in row_data:
            _expect(isinstance(row_data["layout"], list), f"{path}.layout must be a list")
            rb.layout(*row_data["layout"])
        if "columns" in row_data:
            rb.columns(row_data["columns"])
        _apply_visibility(rb, row_data, path)
        for j, f in enumerate(fields):
            _build_field(rb, f, f"{path}.fields[{j}]")
        rb.end()


def _build_section(fb: FormBuilder, data: Any, where: str) -> None:
    _expect(isinstance(data, dict), f"{where} must be a mapping")
    section_id = data.get("id")
    _expect(section_id is None or _is_non_empty_str(section_id), f"{where}.id must be a non-empty string")
    sb = fb.add_section(data.get("title"), section_id=section_id)
    if data.get("collapsible"):
        sb.collapsible(bool(data.get("collapsed", False)))
    actions = data.get("actions") or []
    _expect(isinstance(actions, list), f"{where}.actions must be a list")
    if actions:
        sb.actions(*actions)
    _apply_visibility(sb, data, where)
    _build_rows(sb, data.get("rows") or [], f"{where}.rows")
    sb.end()


def _build_list(fb: FormBuilder, data: Any, where: str) -> None:
    _expect(isinstance(data, dict), f"{where} must be a mapping")
    _expect(_is_non_empty_str(data.get("name")), f"{where}.name is required")
    lb = fb.add_list(data["name"])
    if "label" in data:
        lb.label(data["label"])
    for key in ("min_items", "max_items"):
        if key in data:
            value = data[key]
            _expect(isinstance(value, int) and not isinstance(value, bool), f"{where}.{key} must be an integer")
            getattr(lb, key)(value)
    if "defaults" in data:
        _expect(isinstance(data["defaults"], dict), f"{where}.defaults must be a mapping")
        lb.defaults(data["defaults"])
    if "display" in data:
        lb.display(data["display"])
    if "actions" in data:
        _expect(isinstance(data["actions"], dict), f"{where}.actions must be a mapping")
        lb.actions(**data["actions"])
    if "table_columns" in data:
        lb.table_columns(*data["table_columns"])
    rules = _build_rules(data.get("rules"), f"{where}.rules")
    if rules:
        lb.rules(*rules)
    _apply_visibility(lb, data, where)
    _build_rows(lb, data.get("rows") or [], f"{where}.rows")
    lb.end()


def _build_action(fb: FormBuilder, data: Any, where: str) -> None:
    _expect(isinstance(data, dict), f"{where} must be a mapping")
    _expect(_is_non_empty_str(data.get("name")), f"{where}.name is required")
    ab = fb.add_action(data["name"])
    if "label" in data:
        ab.label(data["label"])
    if data.get("skip_validation"):
        ab.skip_validation(True)
    ab.end()


def build_form_from_definition(data: Any) -> FormConfig:
    """Valida a definição e produz o `FormConfig` via `FormBuilder`.

    Raises:
        DefinitionValidationError: estrutura inválida (nomeia o caminho).
        ConfigShapeError / UnknownDependencyError / DependencyCycleError:
            falhas de forma detectadas pelos builders.
    """
    _expect(isinstance(data, dict), "form definition must be a mapping/dict")
    _expect(_is_non_empty_str(data.get("id")), "id is required")

    fb = FormBuilder(data["id"])
    if "read_only" in data:
        _expect(isinstance(data["read_only"], bool), "read_only must be boolean")
        fb.read_only(data["read_only"])

    for key in ("sections", "lists", "actions"):
        _expect(isinstance(data.get(key) or [], list), f"{key} must be a list")

    for i, section in enumerate(data.get("sections") or []):
        _build_section(fb, section, f"sections[{i}]")
    for i, lst in enumerate(data.get("lists") or []):
        _build_list(fb, lst, f"lists[{i}]")
    for i, action in enumerate(data.get("actions") or []):
        _build_action(fb, action, f"actions[{i}]")

    return fb.build()
