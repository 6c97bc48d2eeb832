# tests/core/context/test_page_context.py
"""
Testes do PageContext.

Os testes asseguram que:
- formulários da página são criados com modo e entity compartilhados
- o modo é decidido pela função da página e dispara handlers de modo
- mudanças de modo e de entity são propagadas a todos os formulários
- ids de formulário são únicos por página
- destruir a página destrói seus formulários
"""

import pytest

from atlas_forms.core.context.form_context import FormContext
from atlas_forms.core.context.page_context import PageContext
from atlas_forms.core.exceptions import ContextDestroyedError
from atlas_forms.core.form.builder import FormBuilder
from atlas_forms.core.page.page import DEFAULT_MODE, Page
from atlas_forms.core.registry.registry import DuplicateRegistrationError


def _notes_form():
    return (
        FormBuilder("notes")
        .add_section(section_id="n")
            .add_row().add_field("note").end().end()
        .end()
        .build()
    )


def _page(customer_form, handled=None):
    class CustomerPage(Page):
        page_id = "customer"

        def configure(self):
            self.add_form(customer_form).add_form(_notes_form())
            self.mode(lambda ctx: "edit" if ctx.get_entity().get("id") else "new")
            if handled is not None:
                self.on_mode("edit", lambda ctx: handled.append(("edit", ctx.page_id)))
                self.on_mode("view", lambda ctx: handled.append(("view", ctx.page_id)))

    return CustomerPage().construct()


def test_page_creates_its_forms_with_shared_mode_and_entity(customer_form):
    handled = []
    page_ctx = PageContext(_page(customer_form, handled), entity={"id": 1, "first_name": "Ana"})

    assert page_ctx.page_id == "customer"
    assert page_ctx.mode == "edit"
    assert handled == [("edit", "customer")]
    assert page_ctx.registered_form_ids() == ["customer", "notes"]

    customer = page_ctx.get_form("customer")
    assert customer.mode == "edit"
    assert customer.get_value("first_name") == "Ana"
    assert customer.registries is page_ctx.registries


def test_mode_function_defaults_to_new_for_empty_entity(customer_form):
    assert PageContext(_page(customer_form)).mode == "new"


def test_explicit_mode_wins(customer_form):
    assert PageContext(_page(customer_form), entity={"id": 1}, mode="view").mode == "view"


def test_page_without_mode_function_uses_default_mode(customer_form):
    class Plain(Page):
        page_id = "plain"

        def configure(self):
            self.add_form(customer_form)

    assert PageContext(Plain().construct()).mode == DEFAULT_MODE


def test_set_mode_propagates_and_runs_handler(customer_form):
    handled = []
    page_ctx = PageContext(_page(customer_form, handled), entity={"id": 1})

    page_ctx.set_mode("view")

    assert page_ctx.get_form("customer").mode == "view"
    assert page_ctx.get_form("notes").mode == "view"
    assert handled[-1] == ("view", "customer")


def test_set_entity_propagates_to_forms(customer_form):
    page_ctx = PageContext(_page(customer_form), entity={"id": 1, "first_name": "Ana"})
    page_ctx.get_form("customer").set_value("first_name", "Bia")
    assert page_ctx.is_dirty()

    page_ctx.set_entity({"id": 2, "first_name": "Caio"})

    assert page_ctx.get_entity() == {"id": 2, "first_name": "Caio"}
    assert page_ctx.get_form("customer").get_value("first_name") == "Caio"
    assert not page_ctx.is_dirty()


def test_form_registration(customer_form):
    page_ctx = PageContext(page_id="adhoc")
    form = page_ctx.create_form(customer_form)

    assert page_ctx.has_form("customer")
    assert form.mode == "new"
    with pytest.raises(DuplicateRegistrationError):
        page_ctx.register_form(FormContext(customer_form))
    with pytest.raises(KeyError):
        page_ctx.get_form("ghost")

    assert page_ctx.unregister_form("customer") is form
    assert page_ctx.unregister_form("customer") is None
    assert page_ctx.registered_form_ids() == []


def test_destroy_page_destroys_forms(customer_form):
    page_ctx = PageContext(_page(customer_form), entity={"id": 1})
    customer = page_ctx.get_form("customer")

    page_ctx.destroy()

    assert page_ctx.is_destroyed
    assert customer.is_destroyed
    with pytest.raises(ContextDestroyedError):
        page_ctx.set_mode("view")
    with pytest.raises(ContextDestroyedError):
        customer.set_value("first_name", "x")
