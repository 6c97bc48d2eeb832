# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Forms.

Este módulo define fixtures reutilizáveis que fornecem:
- YAMLs de settings (defaults do projeto + override local)
- um formulário de cliente construído via FormBuilder
- um contexto de formulário determinístico (FormContext)
- um api_caller fake que registra as requisições recebidas

O objetivo destas fixtures é permitir testes do core (config, form,
context, mapping, page) sem depender de:
- filesystem (exceto quando o próprio teste usa `tmp_path`)
- rede ou serviços externos
- camadas de renderização

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - O api_caller fake é assíncrono e nunca faz I/O

Invariantes:
    - Nenhuma fixture contém lógica de domínio
    - Cada teste recebe instâncias novas (sem estado global)

Limites explícitos:
    - Não substituir testes de integração (tests/e2e)
    - Não validar semântica completa de formulários

Este módulo existe como infraestrutura de teste e não
como validação funcional do engine.
"""

import pytest


# =====================================================
# Settings fixtures
# =====================================================

@pytest.fixture
def project_like_settings_defaults_yaml() -> str:
    """
    YAML de settings do projeto (equivalente a `forms.defaults.yaml`).

    Representa a base sobre a qual overrides locais são aplicados
    via deep-merge.

    Returns:
        str: Conteúdo YAML dos defaults do projeto.
    """
    return """\
validation:
  default_action: submit
  use_mode_as_action: true
dependencies:
  default_debounce_ms: 0
lists:
  min_policy: allow
  max_policy: reject
"""


@pytest.fixture
def project_like_settings_local_yaml() -> str:
    """
    YAML de override local (equivalente a `forms.local.yaml`).

    Returns:
        str: Conteúdo YAML contendo apenas overrides.
    """
    return """\
dependencies:
  default_debounce_ms: 150
lists:
  min_policy: reject
"""


# =====================================================
# Form fixtures
# =====================================================

@pytest.fixture
def customer_form():
    """
    Formulário de cliente com campos obrigatórios, visibilidade condicional,
    uma dependência `clear` e uma lista de endereços.

    Estrutura:
        - main: first_name (required), last_name, email (email)
        - company: has_company, company_name (visível se has_company)
        - location: country, state (depends_on country, clear)
        - addresses: lista (min 1, max 3) com street (required)
        - save: ação declarada
    """
    from atlas_forms.core.form.builder import FormBuilder
    from atlas_forms.core.form.validation import Validators

    return (
        FormBuilder("customer")
        .add_section("Dados", section_id="main")
            .add_row()
                .add_field("first_name").label("Nome").rules(Validators.required()).end()
                .add_field("last_name").label("Sobrenome").end()
                .add_field("email").rules(Validators.email()).end()
            .end()
        .end()
        .add_section("Empresa", section_id="company")
            .add_row()
                .add_field("has_company").end()
                .add_field("company_name")
                    .visible_by_condition(lambda ctx: bool(ctx.get_value("has_company")))
                    .rules(Validators.required())
                .end()
            .end()
        .end()
        .add_section("Localização", section_id="location")
            .add_row()
                .add_field("country").end()
                .add_field("state").depends_on("country", clear=True).end()
            .end()
        .end()
        .add_list("addresses")
            .min_items(1)
            .max_items(3)
            .defaults({"country": "BR"})
            .add_row()
                .add_field("street").rules(Validators.required()).end()
            .end()
        .end()
        .add_action("save").label("Salvar").end()
        .build()
    )


@pytest.fixture
def customer_ctx(customer_form):
    """
    FormContext determinístico sobre `customer_form`.

    `context_id` é fixo; a entity já satisfaz todas as regras.
    """
    from atlas_forms.core.context.form_context import FormContext

    entity = {
        "first_name": "Ana",
        "last_name": "Souza",
        "email": "ana@example.com",
        "has_company": False,
        "country": "BR",
        "state": "SP",
        "addresses": [{"street": "Rua A", "country": "BR"}],
    }
    return FormContext(customer_form, entity=entity, mode="edit", context_id="ctx-test-001")


@pytest.fixture
def fake_api_caller():
    """
    Fábrica de api_caller assíncrono que registra requisições.

    Uso:
        caller = fake_api_caller(lambda request: [...])
        caller.requests  # ReloadRequests recebidos, em ordem
    """

    def _factory(respond=None):
        async def _caller(request):
            _caller.requests.append(request)
            if respond is None:
                return [{"value": request.params, "label": request.api}]
            return respond(request)

        _caller.requests = []
        return _caller

    return _factory
