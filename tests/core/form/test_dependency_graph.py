# tests/core/form/test_dependency_graph.py
"""
Testes do planejamento estrutural de dependências (build-time).

Os testes asseguram que:
- fontes inexistentes são rejeitadas
- ciclos são detectados e nomeados
- a ordem topológica é determinística (empates por nome)
"""

import pytest

try:
    from atlas_forms.core.form.dependency_graph import (
        DependencyCycleError,
        UnknownDependencyError,
        plan_dependencies,
    )
    from atlas_forms.core.form.types import DependsOnConfig, FieldConfig
except Exception as e:  # noqa: BLE001
    plan_dependencies = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing dependency graph planner. Implement:
- plan_dependencies
- DependencyCycleError
- UnknownDependencyError
Import error: {_IMPORT_ERR}
""")


def _field(name, *sources):
    deps = (DependsOnConfig(sources=tuple(sources)),) if sources else ()
    return FieldConfig(name=name, depends_on=deps)


def test_sources_come_before_dependents():
    _require_imports()
    fields = [_field("city", "state"), _field("state", "country"), _field("country")]
    order = plan_dependencies(fields, known_names=["country", "state", "city"])
    assert order == ["country", "state", "city"]


def test_ties_are_broken_lexicographically():
    _require_imports()
    fields = [_field("z", "a"), _field("b", "a"), _field("a")]
    assert plan_dependencies(fields, known_names=["a", "b", "z"]) == ["a", "b", "z"]


def test_fields_without_dependencies_are_not_planned():
    _require_imports()
    assert plan_dependencies([_field("a"), _field("b")], known_names=["a", "b"]) == []


def test_unknown_source_raises():
    _require_imports()
    with pytest.raises(UnknownDependencyError):
        plan_dependencies([_field("b", "ghost")], known_names=["b"])


def test_cycle_raises_and_names_fields():
    _require_imports()
    fields = [_field("a", "c"), _field("b", "a"), _field("c", "b")]
    with pytest.raises(DependencyCycleError) as exc:
        plan_dependencies(fields, known_names=["a", "b", "c"])
    assert "a, b, c" in str(exc.value)


def test_self_dependency_is_a_cycle():
    _require_imports()
    with pytest.raises(DependencyCycleError):
        plan_dependencies([_field("a", "a")], known_names=["a"])
