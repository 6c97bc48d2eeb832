# src/atlas_forms/core/context/scoped.py
"""
Contextos escopados: item de lista e diálogo.

`ListItemContext` é uma visão de um item dentro de um campo-lista do
formulário pai. Predicados de visibilidade e regras de validação dos
campos de item recebem este contexto, de modo que `get_value("qty")`
lê o valor do próprio item.

`DialogContext` é um contexto de vida curta, aberto por um formulário,
que carrega dados de entrada (`dialog_data`), opções e callbacks de
ciclo de vida. Fechar o diálogo o destrói.

Invariantes:
    - Um ListItemContext nunca guarda cópia do item: lê sempre do pai
    - Mutações de item passam pelo engine de listas do pai
    - Um diálogo fechado rejeita mutações (`ContextDestroyedError`)
    - `on_before_close` devolvendo False impede o fechamento
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from atlas_forms.core.context.base import BaseContext
from atlas_forms.core.form.validation import get_path_value


class ListItemContext:
    def __init__(self, parent: Any, list_name: str, index: int) -> None:
        self._parent = parent
        self._list_name = list_name
        self._index = index

    @property
    def parent(self) -> Any:
        return self._parent

    @property
    def list_field_name(self) -> str:
        return self._list_name

    @property
    def list_item_index(self) -> int:
        return self._index

    @property
    def mode(self) -> str:
        return self._parent.mode

    @property
    def user(self) -> Any:
        return self._parent.user

    @property
    def is_destroyed(self) -> bool:
        return self._parent.is_destroyed

    @property
    def item(self) -> Optional[Dict[str, Any]]:
        return self._parent.list(self._list_name).get(self._index)

    def get_value(self, name: str) -> Any:
        item = self.item
        if not isinstance(item, Mapping):
            return None
        if name in item:
            return item[name]
        return get_path_value(item, name)

    def get_form_data(self) -> Dict[str, Any]:
        item = self.item
        return deepcopy(dict(item)) if isinstance(item, Mapping) else {}

    def get_parent_form_data(self) -> Dict[str, Any]:
        return self._parent.get_form_data()

    def get_parent_value(self, name: str) -> Any:
        return self._parent.get_value(name)

    def set_value(self, name: str, value: Any) -> bool:
        return self.update_current_item({name: value})

    def update_current_item(self, values: Mapping[str, Any]) -> bool:
        return self._parent.list(self._list_name).update(self._index, values)

    def remove_current_item(self) -> bool:
        return self._parent.list(self._list_name).remove(self._index)

    def log(self, *, level: str, message: str, **extra: Any) -> None:
        self._parent.log(level=level, message=message, list=self._list_name, index=self._index, **extra)


@dataclass
class DialogOptions:
    """Dados, modo e callbacks de ciclo de vida de um diálogo."""

    data: Any = None
    initial_values: Dict[str, Any] = field(default_factory=dict)
    mode: Optional[str] = None
    on_open: Optional[Callable[[], Any]] = None
    on_save: Optional[Callable[[Any], Any]] = None
    on_cancel: Optional[Callable[[], Any]] = None
    on_close: Optional[Callable[[], Any]] = None
    on_before_close: Optional[Callable[[], Any]] = None


class DialogContext(BaseContext):
    def __init__(self, parent: Any = None, *, data: Any = None, options: Optional[DialogOptions] = None) -> None:
        super().__init__(
            settings=getattr(parent, "settings", None),
            registries=getattr(parent, "registries", None),
            user=getattr(parent, "user", None),
        )
        self.parent = parent
        self._options = options or DialogOptions()
        payload = data if data is not None else self._options.data
        self._data = deepcopy(payload)
        self._values: Dict[str, Any] = deepcopy(dict(self._options.initial_values))
        self._mode = self._options.mode or getattr(parent, "mode", "new")
        self._open = True

        self.log(level="info", message="dialog opened", mode=self._mode)
        if self._options.on_open is not None:
            self._options.on_open()

    @property
    def dialog_data(self) -> Any:
        return self._data

    @property
    def dialog_options(self) -> DialogOptions:
        return self._options

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def is_open(self) -> bool:
        return self._open

    # -----------------------------
    # Valores do diálogo
    # -----------------------------
    def get_value(self, name: str) -> Any:
        return self._values.get(name)

    def set_value(self, name: str, value: Any) -> None:
        self.ensure_active("dialog.set_value")
        self._values[name] = value
        self._notify(name, value)

    def get_form_data(self) -> Dict[str, Any]:
        return deepcopy(self._values)

    # -----------------------------
    # Fechamento
    # -----------------------------
    def save(self, data: Any = None) -> bool:
        self.ensure_active("dialog.save")
        result = self.get_form_data() if data is None else data
        if self._options.on_save is not None:
            self._options.on_save(result)
        return self.close()

    def cancel(self) -> bool:
        self.ensure_active("dialog.cancel")
        if self._options.on_cancel is not None:
            self._options.on_cancel()
        return self.close()

    def close(self) -> bool:
        if not self._open:
            return False
        if self._options.on_before_close is not None and self._options.on_before_close() is False:
            self.log(level="debug", message="dialog close prevented")
            return False
        self._open = False
        if self._options.on_close is not None:
            self._options.on_close()
        self.destroy()
        return True

    def _on_destroy(self) -> None:
        self._open = False
