# tests/core/form/test_dependencies.py
"""
Testes do resolvedor de dependências em runtime.

Este módulo exercita o `DependencyResolver` através do `FormContext`,
que o aciona a cada mudança confirmada de valor.

Os testes asseguram que:
- `clear` / `reset` são aplicados antes de reload e handler
- `only_if_truthy` pula a resolução para valores falsy
- o reload chama o api_caller injetado e grava as opções do alvo
- respostas obsoletas são descartadas (o fetch mais recente vence)
- debounce coalesce mudanças rápidas em uma única resolução
- lotes (`set_values`) resolvem cada dependente no máximo uma vez
- falhas viram registros no canal de erros, nunca exceções de set_value

Decisões arquiteturais:
    - Sem loop em execução, a resolução roda até o fim via `asyncio.run`
    - Com loop em execução, a resolução vira task e `wait_pending` a aguarda
"""

import asyncio

import pytest

from atlas_forms.core.config.settings import FormSettings
from atlas_forms.core.context.form_context import FormContext
from atlas_forms.core.errors import DEPENDENCY_HANDLER_FAILED, DEPENDENCY_RELOAD_FAILED
from atlas_forms.core.form.builder import FormBuilder


def _location_form(**dep_kwargs):
    return (
        FormBuilder("location")
        .add_section()
            .add_row()
                .add_field("country").end()
                .add_field("state").depends_on("country", **dep_kwargs).end()
            .end()
        .end()
        .build()
    )


def _recorder():
    calls = []

    def _handler(value, ctx):
        calls.append(value)

    _handler.calls = calls
    return _handler


# -----------------------------------------------------------------------------
# clear / reset / only_if_truthy
# -----------------------------------------------------------------------------

def test_clear_sets_target_to_none_and_drops_its_errors():
    ctx = FormContext(_location_form(clear=True), entity={"country": "BR", "state": "SP"})
    ctx.set_field_error("state", "Invalid state")

    ctx.set_value("country", "US")

    assert ctx.get_value("state") is None
    assert ctx.get_field_errors("state") == []


def test_reset_restores_initial_value():
    ctx = FormContext(_location_form(reset=True), entity={"country": "BR", "state": "SP"})
    ctx.set_value("state", "RJ")

    ctx.set_value("country", "US")

    assert ctx.get_value("state") == "SP"
    assert not ctx.is_field_touched("state")


def test_only_if_truthy_skips_falsy_values():
    handler = _recorder()
    ctx = FormContext(_location_form(handler=handler, only_if_truthy=True))

    ctx.set_value("country", "")
    ctx.set_value("country", None)
    ctx.set_value("country", "US")

    assert handler.calls == ["US"]
    assert any(e["message"] == "dependency skipped (only_if_truthy)" for e in ctx.events)


def test_clear_cascades_to_transitive_dependents():
    form = (
        FormBuilder("chain")
        .add_section()
            .add_row()
                .add_field("country").end()
                .add_field("state").depends_on("country", clear=True).end()
                .add_field("city").depends_on("state", clear=True).end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form, entity={"country": "BR", "state": "SP", "city": "Campinas"})

    ctx.set_value("country", "US")

    assert ctx.get_value("state") is None
    assert ctx.get_value("city") is None


# -----------------------------------------------------------------------------
# Reload
# -----------------------------------------------------------------------------

def test_reload_calls_api_caller_and_stores_options(fake_api_caller):
    """
    Verifica o reload síncrono (sem loop em execução).

    Invariantes:
        - O api_caller recebe api, params resolvidos, alvo e fonte
        - O resultado vira as opções do campo dependente
    """
    caller = fake_api_caller(lambda request: [{"value": "CA"}, {"value": "NY"}])
    form = _location_form(
        clear=True,
        reload_api="states",
        reload_params=lambda ctx: {"country": ctx.get_value("country")},
    )
    ctx = FormContext(form, api_caller=caller)

    ctx.set_value("country", "US")

    assert len(caller.requests) == 1
    request = caller.requests[0]
    assert request.api == "states"
    assert request.params == {"country": "US"}
    assert request.field_name == "state"
    assert request.source_field == "country"
    assert ctx.get_field_options("state") == [{"value": "CA"}, {"value": "NY"}]
    assert not ctx.is_pending()


def test_reload_without_api_caller_adds_warning():
    ctx = FormContext(_location_form(reload_api="states"))
    ctx.set_value("country", "US")
    assert "state" in ctx.warnings
    assert ctx.get_field_options("state") is None


def test_reload_failure_is_reported_not_raised():
    async def _failing(request):
        raise ConnectionError("offline")

    ctx = FormContext(_location_form(reload_api="states"), api_caller=_failing)

    ctx.set_value("country", "US")

    channel = ctx.get_error_channel()
    assert [p.type for p in channel] == [DEPENDENCY_RELOAD_FAILED]
    assert channel[0].details["exc_type"] == "ConnectionError"
    assert channel[0].details["exc_message"] == "offline"
    assert ctx.get_field_options("state") is None
    assert ctx.get_value("country") == "US"


def test_stale_reload_is_discarded():
    """
    Verifica o guard de resposta obsoleta.

    O primeiro fetch fica bloqueado até depois do segundo concluir; ao
    retornar, seu resultado não sobrescreve as opções mais recentes.
    """
    form = _location_form(reload_api="states", reload_params=lambda ctx: {"country": ctx.get_value("country")})

    async def _scenario():
        gate = asyncio.Event()

        async def _api(request):
            if request.params["country"] == "BR":
                await gate.wait()
                return ["stale"]
            return ["fresh"]

        ctx = FormContext(form, api_caller=_api)
        ctx.set_value("country", "BR")
        await asyncio.sleep(0)
        ctx.set_value("country", "US")
        await asyncio.sleep(0)
        gate.set()
        await ctx.wait_pending()
        return ctx

    ctx = asyncio.run(_scenario())

    assert ctx.get_field_options("state") == ["fresh"]
    assert any(e["message"] == "stale reload discarded" for e in ctx.events)


def test_pending_while_reload_is_in_flight():
    form = _location_form(reload_api="states")

    async def _scenario():
        gate = asyncio.Event()

        async def _api(request):
            await gate.wait()
            return ["x"]

        ctx = FormContext(form, api_caller=_api)
        ctx.set_value("country", "US")
        during = (ctx.is_pending("state"), ctx.is_pending(), ctx.is_valid())
        gate.set()
        await ctx.wait_pending()
        after = (ctx.is_pending("state"), ctx.is_pending(), ctx.is_valid())
        return during, after

    during, after = asyncio.run(_scenario())

    assert during == (True, True, False)
    assert after == (False, False, True)


# -----------------------------------------------------------------------------
# Handler
# -----------------------------------------------------------------------------

def test_handler_receives_new_value_and_context():
    seen = []
    ctx = FormContext(_location_form(handler=lambda value, c: seen.append((value, c.get_value("country")))))

    ctx.set_value("country", "US")

    assert seen == [("US", "US")]


def test_async_handler_runs_to_completion_without_loop():
    calls = []

    async def _handler(value, ctx):
        await asyncio.sleep(0)
        calls.append(value)

    ctx = FormContext(_location_form(handler=_handler))
    ctx.set_value("country", "US")

    assert calls == ["US"]


def test_handler_failure_is_reported_and_siblings_still_run():
    def _boom(value, ctx):
        raise RuntimeError("handler broke")

    city = _recorder()
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("country").end()
                .add_field("state").depends_on("country", handler=_boom).end()
                .add_field("city").depends_on("country", handler=city).end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form)

    ctx.set_value("country", "US")

    assert [p.type for p in ctx.get_error_channel()] == [DEPENDENCY_HANDLER_FAILED]
    assert city.calls == ["US"]


def test_dependents_resolve_in_registration_order():
    order = []
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("source").end()
                .add_field("second").depends_on("source", handler=lambda v, c: order.append("second")).end()
                .add_field("first").depends_on("source", handler=lambda v, c: order.append("first")).end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form)
    ctx.set_value("source", 1)
    assert order == ["second", "first"]


# -----------------------------------------------------------------------------
# Lote
# -----------------------------------------------------------------------------

def test_batch_resolves_each_dependent_once_after_all_commits():
    """
    Verifica que um lote confirma todos os valores antes de resolver e
    que um dependente de várias fontes resolve uma única vez.
    """
    seen = []
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("first").end()
                .add_field("last").end()
                .add_field("full")
                    .depends_on(["first", "last"], handler=lambda v, c: seen.append((c.get_value("first"), c.get_value("last"))))
                .end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form)

    ctx.set_values({"first": "Ana", "last": "Souza"})

    assert seen == [("Ana", "Souza")]


def test_batch_resolves_target_once_across_separate_entries():
    """
    Verifica que um alvo com duas entradas `depends_on` distintas resolve
    uma única vez por lote; vence a entrada da primeira fonte alterada.
    """
    calls = []
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("a").end()
                .add_field("b").end()
                .add_field("c")
                    .depends_on("a", handler=lambda v, c: calls.append(("a", v)))
                    .depends_on("b", handler=lambda v, c: calls.append(("b", v)))
                .end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form)

    ctx.set_values({"a": 1, "b": 2})
    assert calls == [("a", 1)]

    ctx.set_value("b", 3)
    assert calls == [("a", 1), ("b", 3)]


def test_batch_skipped_entry_does_not_consume_target():
    calls = []
    form = (
        FormBuilder("f")
        .add_section()
            .add_row()
                .add_field("a").end()
                .add_field("b").end()
                .add_field("c")
                    .depends_on("a", only_if_truthy=True, handler=lambda v, c: calls.append(("a", v)))
                    .depends_on("b", handler=lambda v, c: calls.append(("b", v)))
                .end()
            .end()
        .end()
        .build()
    )
    ctx = FormContext(form)

    ctx.set_values({"a": "", "b": 2})

    assert calls == [("b", 2)]


# -----------------------------------------------------------------------------
# Debounce
# -----------------------------------------------------------------------------

def test_debounce_coalesces_rapid_changes():
    """
    Verifica que três mudanças rápidas dentro da janela de debounce
    produzem uma única chamada de handler com o último valor.
    """
    handler = _recorder()
    form = _location_form(handler=handler, debounce_ms=20)

    async def _scenario():
        ctx = FormContext(form)
        ctx.set_value("country", "A")
        ctx.set_value("country", "AB")
        ctx.set_value("country", "ABC")
        pending = ctx.is_pending("state")
        await ctx.wait_pending()
        return ctx, pending

    ctx, pending = asyncio.run(_scenario())

    assert pending is True
    assert handler.calls == ["ABC"]
    assert not ctx.is_pending()


def test_default_debounce_comes_from_settings():
    handler = _recorder()
    form = _location_form(handler=handler)
    settings = FormSettings(default_debounce_ms=15)

    async def _scenario():
        ctx = FormContext(form, settings=settings)
        for value in ("x", "xy", "xyz"):
            ctx.set_value("country", value)
        await ctx.wait_pending()

    asyncio.run(_scenario())

    assert handler.calls == ["xyz"]


def test_debounce_without_running_loop_resolves_immediately():
    handler = _recorder()
    ctx = FormContext(_location_form(handler=handler, debounce_ms=50))

    for value in ("a", "b", "c"):
        ctx.set_value("country", value)

    assert handler.calls == ["a", "b", "c"]


def test_destroy_cancels_debounce_timers():
    handler = _recorder()
    form = _location_form(handler=handler, debounce_ms=20)

    async def _scenario():
        ctx = FormContext(form)
        ctx.set_value("country", "US")
        ctx.destroy()
        await asyncio.sleep(0.05)
        return ctx

    ctx = asyncio.run(_scenario())

    assert handler.calls == []
    assert not ctx.is_pending()


@pytest.mark.parametrize("bad", [-1, 1.5, "10"])
def test_invalid_debounce_is_rejected_at_build(bad):
    from atlas_forms.core.exceptions import ConfigShapeError

    field = FormBuilder("f").add_section().add_row().add_field("b")
    with pytest.raises(ConfigShapeError):
        field.depends_on("a", debounce_ms=bad)
