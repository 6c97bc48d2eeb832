# src/atlas_forms/core/context/page_context.py
"""
Contexto de página em runtime.

O `PageContext` agrupa os formulários de uma página sob um modo e uma
entity compartilhados.

Decisões arquiteturais:
    - Mudanças de modo e de entity são propagadas para todos os formulários
    - Formulários são registrados por id; duplicidade é erro fatal
    - Destruir a página destrói todos os seus formulários

Invariantes:
    - `get_form` de id desconhecido levanta `KeyError`
    - Após `destroy()` mutações levantam `ContextDestroyedError`
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Mapping, Optional

from atlas_forms.core.config.settings import FormSettings
from atlas_forms.core.context.base import BaseContext
from atlas_forms.core.context.form_context import FormContext
from atlas_forms.core.form.types import FormConfig
from atlas_forms.core.page.page import PageConfig
from atlas_forms.core.registry.registry import DuplicateRegistrationError, Registries


class PageContext(BaseContext):
    def __init__(
        self,
        page: Optional[PageConfig] = None,
        *,
        page_id: Optional[str] = None,
        entity: Optional[Mapping[str, Any]] = None,
        mode: Optional[str] = None,
        registries: Optional[Registries] = None,
        settings: Optional[FormSettings] = None,
        user: Any = None,
    ) -> None:
        super().__init__(settings=settings, registries=registries, user=user)
        self.page = page
        self.page_id = page_id or (page.id if page else None)
        self._entity: Dict[str, Any] = deepcopy(dict(entity or {}))
        self._forms: Dict[str, FormContext] = {}
        self._mode = mode or (page.determine_mode(self) if page else "new")
        self.log(level="info", message="page context created", mode=self._mode)

        if page is not None:
            for form in page.forms:
                self.create_form(form)
            handler = page.get_mode_handler(self._mode)
            if handler is not None:
                handler(self)

    def _event_base(self) -> Dict[str, Any]:
        return {"context_id": self.context_id, "page_id": self.page_id}

    # -----------------------------
    # Modo & entity
    # -----------------------------
    @property
    def mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> None:
        self.ensure_active("page.set_mode")
        previous, self._mode = self._mode, mode
        for form in self._forms.values():
            form.set_mode(mode)
        self.log(level="info", message="mode changed", previous=previous, mode=mode)
        if self.page is not None:
            handler = self.page.get_mode_handler(mode)
            if handler is not None:
                handler(self)

    def get_entity(self) -> Dict[str, Any]:
        return deepcopy(self._entity)

    def set_entity(self, entity: Optional[Mapping[str, Any]]) -> None:
        self.ensure_active("page.set_entity")
        self._entity = deepcopy(dict(entity or {}))
        for form in self._forms.values():
            form.set_entity(self._entity)

    # -----------------------------
    # Formulários
    # -----------------------------
    def register_form(self, form: FormContext) -> None:
        self.ensure_active("register_form")
        if form.form_id in self._forms:
            raise DuplicateRegistrationError(f"Duplicate form id in page: {form.form_id}")
        self._forms[form.form_id] = form

    def create_form(self, config: FormConfig, **kwargs: Any) -> FormContext:
        kwargs.setdefault("entity", self._entity)
        kwargs.setdefault("mode", self._mode)
        kwargs.setdefault("registries", self.registries)
        kwargs.setdefault("settings", self.settings)
        kwargs.setdefault("user", self.user)
        form = FormContext(config, **kwargs)
        self.register_form(form)
        return form

    def unregister_form(self, form_id: str) -> Optional[FormContext]:
        self.ensure_active("unregister_form")
        return self._forms.pop(form_id, None)

    def get_form(self, form_id: str) -> FormContext:
        return self._forms[form_id]

    def has_form(self, form_id: str) -> bool:
        return form_id in self._forms

    def registered_form_ids(self) -> List[str]:
        return list(self._forms)

    def is_dirty(self) -> bool:
        return any(form.is_dirty() for form in self._forms.values())

    def _on_destroy(self) -> None:
        for form in self._forms.values():
            form.destroy()
