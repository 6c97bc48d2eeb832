# src/atlas_forms/core/page/page.py
"""
Declaração de páginas e ciclo de vida em duas fases.

Uma página agrupa formulários construídos, uma rota opcional, metadados
e uma política de modo (por exemplo "new" / "edit" / "view").

Ciclo de vida:
    1. `configure()` declara a página (rota, título, formulários, modo)
    2. `construct()` executa `configure()` exatamente uma vez e congela
       o resultado em um `PageConfig`
    3. `register(registries)` registra a página e, se houver, sua rota

Decisões arquiteturais:
    - Nenhum registro ocorre por efeito colateral do construtor
    - `install_pages` é a fábrica que executa as fases em sequência
    - O modo é decidido por função pura do contexto da página

Limites explícitos:
    - Não renderiza componentes
    - Não navega nem resolve URLs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from atlas_forms.core.exceptions import BuilderStateError
from atlas_forms.core.form.types import FormConfig
from atlas_forms.core.registry.registry import DuplicateRegistrationError
from atlas_forms.core.values import freeze


ModeFn = Callable[[Any], str]
ModeHandler = Callable[[Any], Any]

DEFAULT_MODE = "default"


@dataclass(frozen=True)
class PageConfig:
    id: str
    route: Optional[str] = None
    title: Optional[str] = None
    forms: Tuple[FormConfig, ...] = ()
    meta: Mapping[str, Any] = field(default_factory=dict)
    mode_fn: Optional[ModeFn] = None
    mode_handlers: Mapping[str, ModeHandler] = field(default_factory=lambda: MappingProxyType({}))

    def get_form(self, form_id: str) -> FormConfig:
        for form in self.forms:
            if form.id == form_id:
                return form
        raise KeyError(form_id)

    def determine_mode(self, ctx: Any) -> str:
        if self.mode_fn is not None:
            return self.mode_fn(ctx)
        return DEFAULT_MODE

    def get_mode_handler(self, mode: str) -> Optional[ModeHandler]:
        return self.mode_handlers.get(mode)


class Page:
    """
    Base para páginas declaradas por subclasse.

    Exemplo:
        class CustomerPage(Page):
            page_id = "customer"

            def configure(self):
                self.route("/customers/:id").title("Cliente")
                self.add_form(customer_form)
    """

    page_id: str = ""

    def __init__(self, page_id: Optional[str] = None) -> None:
        self._id = page_id or self.page_id
        if not self._id:
            raise BuilderStateError(f"{type(self).__name__} não declara page_id")
        self._route: Optional[str] = None
        self._title: Optional[str] = None
        self._forms: List[FormConfig] = []
        self._meta: Dict[str, Any] = {}
        self._mode_fn: Optional[ModeFn] = None
        self._mode_handlers: Dict[str, ModeHandler] = {}
        self._config: Optional[PageConfig] = None

    @property
    def id(self) -> str:
        return self._id

    def configure(self) -> None:
        raise NotImplementedError

    # -----------------------------
    # Declaração
    # -----------------------------
    def route(self, path: str) -> "Page":
        self._route = path
        return self

    def title(self, value: str) -> "Page":
        self._title = value
        return self

    def add_form(self, form: FormConfig) -> "Page":
        if any(f.id == form.id for f in self._forms):
            raise BuilderStateError(f"Form '{form.id}' adicionado duas vezes na página '{self._id}'")
        self._forms.append(form)
        return self

    def mode(self, fn: ModeFn) -> "Page":
        self._mode_fn = fn
        return self

    def on_mode(self, mode: str, handler: ModeHandler) -> "Page":
        self._mode_handlers[mode] = handler
        return self

    def set_meta(self, key: str, value: Any) -> "Page":
        self._meta[key] = value
        return self

    # -----------------------------
    # Fases
    # -----------------------------
    @property
    def config(self) -> Optional[PageConfig]:
        return self._config

    def construct(self) -> PageConfig:
        if self._config is not None:
            raise BuilderStateError(f"Page '{self._id}' já foi construída")
        self.configure()
        self._config = PageConfig(
            id=self._id,
            route=self._route,
            title=self._title,
            forms=tuple(self._forms),
            meta=freeze(self._meta),
            mode_fn=self._mode_fn,
            mode_handlers=MappingProxyType(dict(self._mode_handlers)),
        )
        return self._config

    def register(self, registries: Any) -> PageConfig:
        """Registra a página e sua rota; conflito de rota não deixa a página registrada."""
        config = self._config if self._config is not None else self.construct()
        if config.route:
            if registries.routes.get_by_path(config.route) is not None:
                raise DuplicateRegistrationError(f"Duplicate route path: {config.route}")
            if registries.routes.get_by_page_id(config.id) is not None:
                raise DuplicateRegistrationError(f"Page already has a route: {config.id}")
        registries.pages.register(config.id, config)
        if config.route:
            registries.routes.register(config.route, config.id, {"title": config.title})
        return config


def install_pages(registries: Any, *page_classes: type) -> List[PageConfig]:
    return [cls().register(registries) for cls in page_classes]
