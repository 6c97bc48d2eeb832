# tests/core/context/test_form_context.py
"""
Testes do FormContext: valores, estado, visibilidade e validação.

Os testes asseguram que:
- leituras devolvem cópias e mutações passam pelas operações documentadas
- dirty e touched são rastreados por campo
- ocultar por condição limpa valor, erros e touched (apenas na borda)
- ocultar por acesso preserva o valor e continua validando
- `reset_on_show` restaura o valor inicial quando o campo reaparece
- a ação de validação padrão é o modo do contexto (configurável)
- regras que levantam exceção contam como falha e vão para o canal de erros

Decisões arquiteturais:
    - Regras assíncronas são exercitadas via `asyncio.run` em testes síncronos
    - Nenhum teste depende de tempo real além de `asyncio.sleep(0)`
"""

import asyncio

import pytest

try:
    from atlas_forms.core.config.settings import FormSettings
    from atlas_forms.core.context.form_context import FormContext
    from atlas_forms.core.errors import VALIDATION_RULE_ERROR
    from atlas_forms.core.form.builder import FormBuilder
    from atlas_forms.core.form.validation import Validators
except Exception as e:  # pragma: no cover
    FormContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar atlas_forms.core.context: {_IMPORT_ERR}")


def _single_field_form(*rules, **field_options):
    fb = FormBuilder("single").add_section(section_id="s").add_row().add_field("code")
    if rules:
        fb.rules(*rules)
    for name, value in field_options.items():
        getattr(fb, name)(value)
    return fb.end().end().end().build()


# -----------------------------------------------------------------------------
# Valores & estado
# -----------------------------------------------------------------------------

def test_values_are_copied_in_and_out(customer_form):
    _require_imports()
    entity = {"first_name": "Ana", "addresses": [{"street": "Rua A"}]}
    ctx = FormContext(customer_form, entity=entity)

    entity["first_name"] = "mutated"
    data = ctx.get_form_data()
    data["addresses"][0]["street"] = "mutated"

    assert ctx.get_value("first_name") == "Ana"
    assert ctx.get_value("addresses[0].street") == "Rua A"
    assert ctx.get_entity() == {"first_name": "Ana", "addresses": [{"street": "Rua A"}]}


def test_dirty_and_touched_tracking(customer_ctx):
    _require_imports()
    assert not customer_ctx.is_dirty()
    assert not customer_ctx.is_touched()

    customer_ctx.set_value("first_name", "Ana")
    assert customer_ctx.is_field_touched("first_name")
    assert not customer_ctx.is_field_dirty("first_name")
    assert not customer_ctx.is_dirty()

    customer_ctx.set_value("last_name", "Lima")
    assert customer_ctx.is_field_dirty("last_name")
    assert customer_ctx.is_dirty()


def test_unknown_field_reads_none(customer_ctx):
    _require_imports()
    assert customer_ctx.get_value("ghost") is None
    assert customer_ctx.get_value("addresses[9].street") is None


def test_set_values_commits_all_and_notifies_each(customer_ctx):
    _require_imports()
    seen = []
    customer_ctx.subscribe(lambda field, value: seen.append((field, value)))

    customer_ctx.set_values({"first_name": "Bia", "last_name": "Reis"})

    assert seen == [("first_name", "Bia"), ("last_name", "Reis")]
    assert customer_ctx.get_value("last_name") == "Reis"


def test_unsubscribe_stops_notifications(customer_ctx):
    _require_imports()
    seen = []
    unsubscribe = customer_ctx.subscribe(lambda field, value: seen.append(field))
    customer_ctx.set_value("first_name", "A")
    unsubscribe()
    unsubscribe()
    customer_ctx.set_value("first_name", "B")
    assert seen == ["first_name"]


def test_set_entity_resets_state_and_notifies_whole_form(customer_ctx):
    _require_imports()
    seen = []
    customer_ctx.set_value("first_name", "")
    customer_ctx.validate()
    customer_ctx.subscribe(lambda field, value: seen.append(field))

    customer_ctx.set_entity({"first_name": "Caio"})

    assert seen == [None]
    assert customer_ctx.get_errors() == {}
    assert not customer_ctx.is_touched()
    assert not customer_ctx.is_dirty()
    assert customer_ctx.get_value("first_name") == "Caio"
    assert customer_ctx.get_value("last_name") is None


def test_reset_and_reset_field(customer_ctx):
    _require_imports()
    customer_ctx.set_value("first_name", "")
    customer_ctx.set_value("last_name", "X")
    customer_ctx.validate()

    customer_ctx.reset_field("first_name")
    assert customer_ctx.get_value("first_name") == "Ana"
    assert customer_ctx.get_field_errors("first_name") == []
    assert not customer_ctx.is_field_touched("first_name")

    customer_ctx.reset()
    assert customer_ctx.get_value("last_name") == "Souza"
    assert not customer_ctx.is_dirty()


def test_field_error_api(customer_ctx):
    _require_imports()
    customer_ctx.set_field_error("email", "taken")
    customer_ctx.set_field_error("email", "taken")
    customer_ctx.set_field_error("email", "blocked")

    assert customer_ctx.get_field_errors("email") == ["taken", "blocked"]
    assert customer_ctx.get_field_error("email") == "taken"
    assert not customer_ctx.is_valid()

    customer_ctx.clear_field_error("email")
    assert customer_ctx.get_field_error("email") is None
    assert customer_ctx.is_valid()


def test_enable_disable_read_only_and_options():
    _require_imports()
    ctx = FormContext(_single_field_form(disable=lambda c: c.mode == "view"), mode="view")

    assert ctx.is_field_disabled("code")
    ctx.enable_field("code")
    assert not ctx.is_field_disabled("code")
    ctx.disable_field("code")
    assert ctx.is_field_disabled("code")

    assert not ctx.is_field_read_only("code")
    ctx.set_read_only(True)
    assert ctx.is_read_only()
    assert ctx.is_field_read_only("code")

    assert ctx.get_field_options("code") is None
    ctx.set_field_options("code", [{"value": 1, "label": "Um"}])
    assert ctx.get_field_options("code") == [{"value": 1, "label": "Um"}]


def test_set_mode_changes_mode_and_logs(customer_ctx):
    _require_imports()
    customer_ctx.set_mode("view")
    assert customer_ctx.mode == "view"
    assert customer_ctx.events[-1]["message"] == "mode changed"
    assert customer_ctx.events[-1]["previous"] == "edit"


# -----------------------------------------------------------------------------
# Visibilidade
# -----------------------------------------------------------------------------

def test_conditional_hide_clears_on_transition(customer_ctx):
    """
    Verifica a limpeza disparada por borda.

    Este teste garante que:
    - o campo é limpo quando passa de visível para oculto
    - um valor gravado enquanto oculto não é limpo de novo
    """
    _require_imports()
    customer_ctx.set_value("has_company", True)
    customer_ctx.set_value("company_name", "ACME")

    customer_ctx.set_value("has_company", False)
    assert customer_ctx.get_value("company_name") is None
    assert not customer_ctx.is_field_touched("company_name")
    assert customer_ctx.is_field_hidden("company_name")

    customer_ctx.set_value("company_name", "while hidden")
    customer_ctx.set_value("last_name", "Lima")
    assert customer_ctx.get_value("company_name") == "while hidden"


def test_initially_hidden_values_are_preserved(customer_form):
    _require_imports()
    ctx = FormContext(customer_form, entity={"has_company": False, "company_name": "Old"})
    assert ctx.get_value("company_name") == "Old"


def test_conditional_hidden_field_skips_validation(customer_ctx):
    _require_imports()
    assert customer_ctx.validate() is True

    customer_ctx.set_value("has_company", True)
    assert customer_ctx.validate() is False
    assert customer_ctx.get_field_errors("company_name") == ["This field is required"]


def test_access_hidden_field_preserves_value_and_validates():
    _require_imports()
    form = _single_field_form(Validators.required(), hide_by_access=lambda c: c.user != "admin")

    ctx = FormContext(form, entity={"code": "X1"}, user="guest")
    assert ctx.is_field_hidden("code")
    assert ctx.is_field_hidden_by_access("code")
    assert ctx.get_value("code") == "X1"

    ctx.set_value("code", "")
    assert ctx.validate() is False
    assert ctx.get_field_errors("code") == ["This field is required"]


def test_access_hidden_field_clears_when_condition_also_hides():
    """
    Campo oculto por acesso que passa a ser oculto por condição deve ser
    limpo: ocultação condicional sempre limpa os dados.
    """
    _require_imports()
    form = (
        FormBuilder("payroll")
        .add_section(section_id="s")
            .add_row()
                .add_field("role").end()
                .add_field("salary")
                    .hide_by_access(lambda c: c.user == "guest")
                    .hide_by_condition(lambda c: c.get_value("role") == "intern")
                .end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form, entity={"role": "dev", "salary": 100}, user="guest")
    assert ctx.is_field_hidden_by_access("salary")
    assert ctx.get_value("salary") == 100

    ctx.set_value("role", "intern")

    assert ctx.evaluate_visibility("salary").should_clear_data
    assert ctx.get_value("salary") is None

    ctx.set_value("salary", 50)
    ctx.set_value("role", "intern")
    assert ctx.get_value("salary") == 50


def test_reset_on_show_restores_initial_value():
    _require_imports()
    form = (
        FormBuilder("f")
        .add_section(section_id="s")
            .add_row()
                .add_field("toggle").end()
                .add_field("detail")
                    .visible_by_condition(lambda c: bool(c.get_value("toggle")))
                    .reset_on_show()
                .end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form, entity={"toggle": True, "detail": "initial"})

    ctx.set_value("detail", "changed")
    ctx.set_value("toggle", False)
    assert ctx.get_value("detail") is None

    ctx.set_value("toggle", True)
    assert ctx.get_value("detail") == "initial"


def test_imperative_hide_by_condition_is_idempotent(customer_ctx):
    _require_imports()
    seen = []
    customer_ctx.set_field_error("email", "bad")
    customer_ctx.subscribe(lambda field, value: seen.append(field))

    customer_ctx.hide_field_by_condition("email")
    customer_ctx.hide_field_by_condition("email")

    assert seen == ["email"]
    assert customer_ctx.get_value("email") is None
    assert customer_ctx.get_field_error("email") is None
    assert customer_ctx.evaluate_visibility("email").should_skip_validation

    customer_ctx.set_value("email", "x@example.com")
    assert customer_ctx.get_value("email") == "x@example.com"

    customer_ctx.show_field("email")
    assert not customer_ctx.is_field_hidden("email")


def test_imperative_hide_by_access_preserves_value(customer_ctx):
    _require_imports()
    customer_ctx.hide_field_by_access("email")
    assert customer_ctx.is_field_hidden_by_access("email")
    assert customer_ctx.get_value("email") == "ana@example.com"


def test_section_hide_by_condition_clears_its_fields(customer_ctx):
    _require_imports()
    customer_ctx.hide_section_by_condition("location")

    assert customer_ctx.is_section_hidden("location")
    assert customer_ctx.get_value("country") is None
    assert customer_ctx.get_value("state") is None
    assert customer_ctx.is_field_hidden("state")
    assert customer_ctx.get_value("first_name") == "Ana"

    customer_ctx.show_section("location")
    assert not customer_ctx.is_section_hidden("location")


def test_section_hide_by_access_preserves_fields(customer_ctx):
    _require_imports()
    customer_ctx.hide_section_by_access("location")
    assert customer_ctx.is_section_hidden_by_access("location")
    assert customer_ctx.get_value("country") == "BR"


def test_unknown_section_raises_key_error(customer_ctx):
    _require_imports()
    with pytest.raises(KeyError):
        customer_ctx.hide_section_by_condition("ghost")


def test_refresh_visibility_reports_cleared_fields():
    _require_imports()
    flags = {"show": True}
    form = _single_field_form(visible_by_condition=lambda c: flags["show"])
    ctx = FormContext(form, entity={"code": "X1"})

    flags["show"] = False
    assert ctx.refresh_visibility() == ["code"]
    assert ctx.get_value("code") is None
    assert ctx.refresh_visibility() == []


# -----------------------------------------------------------------------------
# Validação
# -----------------------------------------------------------------------------

def test_validate_uses_mode_as_action():
    _require_imports()
    form = _single_field_form(Validators.required(skip_on=["view"]))

    ctx = FormContext(form, mode="view")
    assert ctx.validate() is True
    assert ctx.validate("submit") is False
    assert ctx.validate_action("view") is True


def test_validate_uses_default_action_when_mode_is_disabled():
    _require_imports()
    form = _single_field_form(Validators.required(validate_on=["submit"]))
    settings = FormSettings(default_action="submit", use_mode_as_action=False)

    ctx = FormContext(form, mode="view", settings=settings)
    assert ctx.validate() is False


def test_validate_field_only_touches_that_field(customer_ctx):
    _require_imports()
    customer_ctx.set_value("first_name", "")
    customer_ctx.set_field_error("email", "taken")

    assert customer_ctx.validate_field("first_name") is False
    assert customer_ctx.get_field_errors("email") == ["taken"]
    customer_ctx.set_value("first_name", "Ana")
    assert customer_ctx.validate_field("first_name") is True


def test_raising_rule_counts_as_failure_and_is_reported():
    _require_imports()

    def _boom(value, ctx):
        raise RuntimeError("kaboom")

    ctx = FormContext(_single_field_form(Validators.custom(_boom, "Broken rule")), entity={"code": "x"})

    assert ctx.validate() is False
    assert ctx.get_field_errors("code") == ["Broken rule"]
    channel = ctx.get_error_channel()
    assert [p.type for p in channel] == [VALIDATION_RULE_ERROR]
    assert channel[0].details["field"] == "code"
    assert channel[0].details["exc_message"] == "kaboom"


def test_async_rule_without_running_loop_is_settled():
    _require_imports()

    async def _unique(value, ctx):
        await asyncio.sleep(0)
        return value != "taken"

    ctx = FormContext(_single_field_form(Validators.custom(_unique, "Already taken")), entity={"code": "taken"})

    assert ctx.validate() is False
    assert ctx.get_field_errors("code") == ["Already taken"]
    assert asyncio.run(ctx.validate_async()) is False

    ctx.set_value("code", "free")
    assert asyncio.run(ctx.validate_async()) is True


def test_async_rule_inside_running_loop_is_pending_until_settled():
    _require_imports()
    gate = {}

    async def _slow(value, ctx):
        await gate["event"].wait()
        return True

    async def _scenario():
        gate["event"] = asyncio.Event()
        ctx = FormContext(_single_field_form(Validators.custom(_slow)), entity={"code": "x"})
        immediate = ctx.validate()
        pending = (ctx.is_pending(), ctx.is_valid())
        gate["event"].set()
        await ctx.wait_pending()
        return immediate, pending, ctx.is_pending(), ctx.is_valid()

    immediate, pending, after_pending, after_valid = asyncio.run(_scenario())
    assert immediate is False
    assert pending == (True, False)
    assert after_pending is False
    assert after_valid is True


def test_register_field_rules_replaces_declared_rules(customer_ctx):
    _require_imports()
    customer_ctx.register_field_rules("last_name", [Validators.min_length(10)])
    assert customer_ctx.validate() is False
    assert customer_ctx.get_field_errors("last_name") == ["Must be at least 10 characters"]


def test_list_level_and_item_errors_use_path_keys(customer_form):
    _require_imports()
    ctx = FormContext(customer_form, entity={"first_name": "Ana", "addresses": [{"street": ""}]})

    assert ctx.validate() is False
    assert ctx.get_errors()["addresses[0].street"] == ["This field is required"]

    ctx.list("addresses").remove(0)
    ctx.validate()
    assert ctx.get_errors()["addresses"] == ["At least 1 items required"]
