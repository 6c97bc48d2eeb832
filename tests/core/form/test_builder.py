# tests/core/form/test_builder.py
"""
Testes dos builders fluentes de formulário.

Os testes asseguram que:
- a árvore construída reflete exatamente as declarações, em ordem
- sequências inválidas de chamadas levantam `BuilderStateError`
- formas inválidas levantam `ConfigShapeError` no momento do build
- o grafo de dependências é validado no build
- snapshots construídos são imutáveis

Decisões arquiteturais:
    - Falhas de forma deixam o escopo aberto: o build subsequente falha
    - Uma falha em um builder filho não corrompe seus irmãos

Limites explícitos:
    - Não avalia visibilidade nem regras em runtime (ver test_form_context)
"""

from dataclasses import FrozenInstanceError

import pytest

try:
    from atlas_forms.core.exceptions import BuilderStateError, ConfigShapeError
    from atlas_forms.core.form.builder import FormBuilder
    from atlas_forms.core.form.dependency_graph import DependencyCycleError, UnknownDependencyError
    from atlas_forms.core.form.types import DisplayMode, NodeKind
    from atlas_forms.core.form.validation import Validators
    from atlas_forms.core.values import Computed, Literal
except Exception as e:  # noqa: BLE001
    FormBuilder = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que os builders e as exceções de build estejam disponíveis.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing builder modules. Implement:\n"
            "- src/atlas_forms/core/form/builder.py (FormBuilder)\n"
            "- src/atlas_forms/core/exceptions.py (BuilderStateError, ConfigShapeError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_build_reflects_declarations_in_order(customer_form):
    """
    Verifica que seções, linhas, campos, listas e ações aparecem na
    ordem de declaração.

    Invariantes:
        - `element_order` registra seções e listas de topo na sequência declarada
        - Nomes de campos de topo são acessíveis via `field_names()`
    """
    _require_imports()
    form = customer_form

    assert form.id == "customer"
    assert [s.id for s in form.sections] == ["main", "company", "location"]
    assert [f.name for f in form.sections[0].rows[0].fields] == ["first_name", "last_name", "email"]
    assert [lc.name for lc in form.lists] == ["addresses"]
    assert [a.name for a in form.actions] == ["save"]
    assert form.element_order == (
        (NodeKind.SECTION, "main"),
        (NodeKind.SECTION, "company"),
        (NodeKind.SECTION, "location"),
        (NodeKind.LIST, "addresses"),
    )
    assert "addresses" in form.field_names()


def test_value_slots_are_normalized(customer_form):
    _require_imports()
    first_name = customer_form.get_field("first_name")
    company_name = customer_form.get_field("company_name")

    assert first_name.label == Literal("Nome")
    assert isinstance(company_name.visibility.visible, Computed)
    assert company_name.visibility.hide is None


def test_list_node_carries_bounds_and_frozen_defaults(customer_form):
    _require_imports()
    lc = customer_form.get_list("addresses")

    assert lc.min_items == 1
    assert lc.max_items == 3
    assert lc.display is DisplayMode.ROWS
    assert dict(lc.defaults) == {"country": "BR"}
    with pytest.raises(TypeError):
        lc.defaults["country"] = "US"  # type: ignore[index]


def test_built_nodes_are_immutable(customer_form):
    _require_imports()
    with pytest.raises(FrozenInstanceError):
        customer_form.id = "other"  # type: ignore[misc]
    with pytest.raises(FrozenInstanceError):
        customer_form.get_field("email").name = "mail"  # type: ignore[misc]
    assert isinstance(customer_form.sections, tuple)


def test_props_literal_is_deeply_frozen():
    _require_imports()
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("a").props({"options": [1, 2]}).end()
            .end()
        .end()
        .build()
    )
    props = form.get_field("a").props.value
    assert props["options"] == (1, 2)
    with pytest.raises(TypeError):
        props["options"] = []  # type: ignore[index]


def test_section_ids_are_generated_when_missing():
    _require_imports()
    form = (
        FormBuilder("f")
        .add_section("A").add_row().add_field("a").end().end().end()
        .add_section("B").add_row().add_field("b").end().end().end()
        .build()
    )
    assert [s.id for s in form.sections] == ["section-0", "section-1"]


def test_tabs_nest_sections():
    _require_imports()
    form = (
        FormBuilder("f")
        .add_tabs("details")
            .initial_tab("general")
            .add_tab("general", "Geral")
                .add_section("Dados", section_id="general-data")
                    .add_row().add_field("a").end().end()
                .end()
            .end()
            .add_tab("extra", "Extra")
                .add_section(section_id="extra-data")
                    .add_row().add_field("b").end().end()
                .end()
            .end()
        .end()
        .build()
    )
    assert [t.id for t in form.tabs[0].tabs] == ["general", "extra"]
    assert [s.id for s in form.all_sections()] == ["general-data", "extra-data"]
    assert form.section_of("b").id == "extra-data"


# -----------------------------------------------------------------------------
# Sequências inválidas
# -----------------------------------------------------------------------------

def test_end_twice_raises():
    """
    Verifica que encerrar o mesmo escopo duas vezes é erro de estado.
    """
    _require_imports()
    fb = FormBuilder("f")
    section = fb.add_section()
    section.add_row().add_field("a").end().end()
    section.end()
    with pytest.raises(BuilderStateError):
        section.end()


def test_end_on_root_raises():
    _require_imports()
    with pytest.raises(BuilderStateError):
        FormBuilder("f").end()


def test_build_with_open_scopes_raises():
    _require_imports()
    fb = FormBuilder("f")
    fb.add_section().add_row().add_field("a")
    with pytest.raises(BuilderStateError):
        fb.build()


def test_closed_builder_rejects_mutations():
    _require_imports()
    fb = FormBuilder("f")
    field = fb.add_section().add_row().add_field("a")
    field.end()
    with pytest.raises(BuilderStateError):
        field.label("late")


def test_parent_cannot_end_with_open_child():
    _require_imports()
    fb = FormBuilder("f")
    section = fb.add_section()
    section.add_row()
    with pytest.raises(BuilderStateError):
        section.end()


def test_failed_child_does_not_corrupt_siblings():
    """
    Verifica que uma falha em um builder filho não afeta seus irmãos.

    O campo com `col_span` inválido permanece aberto e pode ser corrigido;
    o campo irmão já encerrado continua intacto.
    """
    _require_imports()
    fb = FormBuilder("f")
    row = fb.add_section().add_row()
    row.add_field("a").end()
    broken = row.add_field("b")
    with pytest.raises(ConfigShapeError):
        broken.col_span(0)
    broken.col_span(6).end()
    row.end().end()

    form = fb.build()
    assert [f.name for f in form.sections[0].rows[0].fields] == ["a", "b"]
    assert form.get_field("b").col_span == 6


# -----------------------------------------------------------------------------
# Formas inválidas
# -----------------------------------------------------------------------------

def test_duplicate_field_names_across_sections_raise():
    _require_imports()
    fb = (
        FormBuilder("f")
        .add_section().add_row().add_field("a").end().end().end()
        .add_section().add_row().add_field("a").end().end().end()
    )
    with pytest.raises(ConfigShapeError):
        fb.build()


def test_duplicate_field_name_in_row_raises_on_end():
    _require_imports()
    row = FormBuilder("f").add_section().add_row()
    row.add_field("a").end()
    with pytest.raises(ConfigShapeError):
        row.add_field("a").end()


def test_min_items_greater_than_max_items_raises():
    _require_imports()
    fb = FormBuilder("f")
    lst = fb.add_list("items").min_items(3).max_items(1)
    with pytest.raises(ConfigShapeError):
        lst.end()
    with pytest.raises(BuilderStateError):
        fb.build()


def test_clear_and_reset_are_mutually_exclusive():
    _require_imports()
    field = FormBuilder("f").add_section().add_row().add_field("b")
    with pytest.raises(ConfigShapeError):
        field.depends_on("a", clear=True, reset=True)


def test_invalid_display_mode_raises():
    _require_imports()
    with pytest.raises(ConfigShapeError):
        FormBuilder("f").add_list("items").display("carousel")


def test_list_defaults_must_be_mapping_or_callable():
    _require_imports()
    with pytest.raises(ConfigShapeError):
        FormBuilder("f").add_list("items").defaults(["not", "a", "mapping"])


def test_item_fields_cannot_declare_depends_on():
    _require_imports()
    lst = FormBuilder("f").add_list("items")
    lst.add_row().add_field("a").end().add_field("b").depends_on("a").end().end()
    with pytest.raises(ConfigShapeError):
        lst.end()


def test_non_rule_objects_are_rejected():
    _require_imports()
    field = FormBuilder("f").add_section().add_row().add_field("a")
    with pytest.raises(ConfigShapeError):
        field.rules(lambda value, ctx: True)  # type: ignore[arg-type]


def test_unknown_initial_tab_raises():
    _require_imports()
    tabs = FormBuilder("f").add_tabs().initial_tab("missing")
    tabs.add_tab("a").end()
    with pytest.raises(ConfigShapeError):
        tabs.end()


def test_duplicate_action_raises():
    _require_imports()
    fb = FormBuilder("f").add_action("save").end()
    with pytest.raises(ConfigShapeError):
        fb.add_action("save").end()


def test_empty_names_are_rejected():
    _require_imports()
    with pytest.raises(ConfigShapeError):
        FormBuilder("")
    with pytest.raises(ConfigShapeError):
        FormBuilder("f").add_section().add_row().add_field("  ")


# -----------------------------------------------------------------------------
# Dependências
# -----------------------------------------------------------------------------

def test_unknown_dependency_source_fails_build():
    _require_imports()
    fb = FormBuilder("f").add_section().add_row().add_field("b").depends_on("ghost").end().end().end()
    with pytest.raises(UnknownDependencyError):
        fb.build()


def test_dependency_cycle_fails_build():
    _require_imports()
    fb = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("a").depends_on("b").end()
                .add_field("b").depends_on("a").end()
            .end()
        .end()
    )
    with pytest.raises(DependencyCycleError):
        fb.build()


def test_comma_separated_sources_are_split():
    _require_imports()
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("a").end()
                .add_field("b").end()
                .add_field("c").depends_on("a, b", reload_api="c-options").end()
            .end()
        .end()
        .build()
    )
    dep = form.get_field("c").depends_on[0]
    assert dep.sources == ("a", "b")
    assert dep.reload_api == "c-options"


def test_build_can_be_called_again():
    _require_imports()
    fb = FormBuilder("f").add_section().add_row().add_field("a").rules(Validators.required()).end().end().end()
    first = fb.build()
    second = fb.build()
    assert first == second
    assert first is not second
