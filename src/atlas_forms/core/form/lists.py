# src/atlas_forms/core/form/lists.py
"""
Engine de operações sobre campos-lista.

Este módulo define `ListOperations`, a única via permitida de mutação de
um campo cujo valor é um array de itens. Cada instância é criada pelo
contexto no primeiro `ctx.list(nome)` e vive enquanto o contexto viver.

Responsabilidades:
    - Adição (fim, início, posição), remoção, reordenação e acesso
    - Índice ativo (modo de exibição em abas)
    - Consultas de validação da lista e de cada item
    - Políticas de mínimo/máximo de itens

Decisões arquiteturais:
    - Toda mutação grava um NOVO array via `ctx.set_value` (uma notificação)
    - Índices são sempre verificados; fora do intervalo é no-op, não erro
    - Valores parciais são mesclados (raso) sobre os defaults da lista
    - Leituras (`get`, `get_all`, `find`) devolvem cópias profundas
    - Política "allow": a mutação ocorre e a lista fica inválida
    - Política "reject": a mutação é ignorada e um warning é registrado

Invariantes:
    - `move` / `swap` preservam o tamanho e nunca duplicam ou perdem itens
    - O índice devolvido por `add*` é a posição final do item
    - O índice ativo nunca aponta para fora da lista após remoções

Limites explícitos:
    - Não valida regras de item (responsabilidade do contexto)
    - Não renderiza nem conhece o modo de exibição além do índice ativo
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Callable, Dict, List, Mapping, Optional

from atlas_forms.core.config.settings import LIST_POLICY_ALLOW, LIST_POLICY_REJECT
from atlas_forms.core.form.types import ListConfig
from atlas_forms.core.values import thaw


MIN_ITEMS_MESSAGE = "At least {min} items required"
MAX_ITEMS_MESSAGE = "At most {max} items allowed"


class ListOperations:
    def __init__(
        self,
        ctx: Any,
        field_name: str,
        *,
        config: Optional[ListConfig] = None,
        defaults: Any = None,
        min_policy: str = LIST_POLICY_ALLOW,
        max_policy: str = LIST_POLICY_ALLOW,
    ) -> None:
        self._ctx = ctx
        self._field_name = field_name
        self._config = config
        self._defaults = defaults if defaults is not None else (config.defaults if config else None)
        self._min_policy = min_policy
        self._max_policy = max_policy
        self._active_index = 0

    @property
    def field_name(self) -> str:
        return self._field_name

    @property
    def min_items(self) -> Optional[int]:
        return self._config.min_items if self._config else None

    @property
    def max_items(self) -> Optional[int]:
        return self._config.max_items if self._config else None

    def set_defaults(self, defaults: Any) -> None:
        self._defaults = defaults

    # -----------------------------
    # Helpers
    # -----------------------------
    def _items(self) -> List[Any]:
        value = self._ctx.get_value(self._field_name)
        return list(value) if isinstance(value, (list, tuple)) else []

    def _store(self, items: List[Any]) -> None:
        self._ctx.set_value(self._field_name, list(items))

    def _default_values(self, index: int) -> Dict[str, Any]:
        if self._defaults is None:
            return {}
        if callable(self._defaults):
            return dict(self._defaults(self._ctx, index) or {})
        return thaw(self._defaults)

    def _new_item(self, index: int, values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        item = self._default_values(index)
        item.update(values or {})
        return item

    def _rejected(self, operation: str, message: str) -> None:
        self._ctx.add_warning(field=self._field_name, message=message)
        self._ctx.log(level="warning", message=message, field=self._field_name, operation=operation)

    def _blocks_add(self, count: int) -> bool:
        limit = self.max_items
        if self._max_policy == LIST_POLICY_REJECT and limit is not None and count >= limit:
            self._rejected("add", MAX_ITEMS_MESSAGE.format(max=limit))
            return True
        return False

    def _blocks_remove(self, count: int, removing: int = 1) -> bool:
        limit = self.min_items
        if self._min_policy == LIST_POLICY_REJECT and limit is not None and count - removing < limit:
            self._rejected("remove", MIN_ITEMS_MESSAGE.format(min=limit))
            return True
        return False

    def _in_range(self, index: int, items: List[Any]) -> bool:
        return isinstance(index, int) and 0 <= index < len(items)

    # -----------------------------
    # Adição
    # -----------------------------
    def add(self, values: Optional[Mapping[str, Any]] = None) -> Optional[int]:
        items = self._items()
        if self._blocks_add(len(items)):
            return None
        index = len(items)
        items.append(self._new_item(index, values))
        self._store(items)
        return index

    def add_at(self, index: int, values: Optional[Mapping[str, Any]] = None) -> Optional[int]:
        items = self._items()
        if self._blocks_add(len(items)):
            return None
        clamped = max(0, min(index, len(items)))
        items.insert(clamped, self._new_item(clamped, values))
        self._store(items)
        return clamped

    def add_first(self, values: Optional[Mapping[str, Any]] = None) -> Optional[int]:
        return self.add_at(0, values)

    def add_last(self, values: Optional[Mapping[str, Any]] = None) -> Optional[int]:
        return self.add(values)

    # -----------------------------
    # Remoção
    # -----------------------------
    def remove(self, index: int) -> bool:
        items = self._items()
        if not self._in_range(index, items):
            return False
        if self._blocks_remove(len(items)):
            return False
        del items[index]
        self._store(items)
        if self._active_index >= len(items):
            self._active_index = max(0, len(items) - 1)
        return True

    def remove_item(self, item: Any) -> bool:
        """Remove o item pela referência; sem referência, o primeiro item igual."""
        items = self._items()
        for index, existing in enumerate(items):
            if existing is item:
                return self.remove(index)
        for index, existing in enumerate(items):
            if existing == item:
                return self.remove(index)
        return False

    def remove_first(self) -> bool:
        return self.remove(0)

    def remove_last(self) -> bool:
        return self.remove(len(self._items()) - 1)

    def clear(self) -> bool:
        items = self._items()
        if items and self._blocks_remove(len(items), removing=len(items)):
            return False
        self._store([])
        self._active_index = 0
        return True

    # -----------------------------
    # Reordenação
    # -----------------------------
    def move(self, from_index: int, to_index: int) -> bool:
        items = self._items()
        if not self._in_range(from_index, items) or not self._in_range(to_index, items):
            return False
        if from_index == to_index:
            return False
        item = items.pop(from_index)
        items.insert(to_index, item)
        self._store(items)
        return True

    def swap(self, index_a: int, index_b: int) -> bool:
        items = self._items()
        if not self._in_range(index_a, items) or not self._in_range(index_b, items):
            return False
        if index_a == index_b:
            return False
        items[index_a], items[index_b] = items[index_b], items[index_a]
        self._store(items)
        return True

    # -----------------------------
    # Acesso
    # -----------------------------
    def get(self, index: int) -> Any:
        items = self._items()
        return deepcopy(items[index]) if self._in_range(index, items) else None

    def set(self, index: int, item: Mapping[str, Any]) -> bool:
        items = self._items()
        if not self._in_range(index, items):
            return False
        items[index] = dict(item)
        self._store(items)
        return True

    def update(self, index: int, values: Mapping[str, Any]) -> bool:
        items = self._items()
        if not self._in_range(index, items):
            return False
        merged = dict(items[index] or {})
        merged.update(values)
        items[index] = merged
        self._store(items)
        return True

    def get_all(self) -> List[Any]:
        return deepcopy(self._items())

    def count(self) -> int:
        return len(self._items())

    def is_empty(self) -> bool:
        return self.count() == 0

    def find_index(self, predicate: Callable[[Any, int], bool]) -> int:
        for index, item in enumerate(self._items()):
            if predicate(item, index):
                return index
        return -1

    def find(self, predicate: Callable[[Any, int], bool]) -> Any:
        for index, item in enumerate(self._items()):
            if predicate(item, index):
                return deepcopy(item)
        return None

    # -----------------------------
    # Abas
    # -----------------------------
    def get_active_index(self) -> int:
        return self._active_index

    def set_active_index(self, index: int) -> bool:
        self._ctx.ensure_active("list.set_active_index")
        if not self._in_range(index, self._items()):
            return False
        self._active_index = index
        return True

    # -----------------------------
    # Validação
    # -----------------------------
    def bounds_error(self) -> Optional[str]:
        count = self.count()
        if self.min_items is not None and count < self.min_items:
            return MIN_ITEMS_MESSAGE.format(min=self.min_items)
        if self.max_items is not None and count > self.max_items:
            return MAX_ITEMS_MESSAGE.format(max=self.max_items)
        return None

    def get_errors(self) -> List[str]:
        errors = list(self._ctx.get_field_errors(self._field_name))
        bounds = self.bounds_error()
        if bounds is not None and bounds not in errors:
            errors.append(bounds)
        return errors

    def get_item_errors(self, index: int) -> Dict[str, List[str]]:
        prefix = f"{self._field_name}[{index}]."
        return {
            key[len(prefix):]: list(messages)
            for key, messages in self._ctx.get_errors().items()
            if key.startswith(prefix)
        }

    def is_valid(self) -> bool:
        return not self.get_errors()

    def is_item_valid(self, index: int) -> bool:
        return not self.get_item_errors(index)
