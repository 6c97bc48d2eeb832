# src/atlas_forms/core/registry/registry.py
"""
Registries de mappers, páginas e rotas.

Este módulo define os registries nomeados usados pelos mappers e pelas
páginas. Cada registry é uma instância explícita: não há singleton
implícito, e os contextos recebem os registries por injeção.

Responsabilidades do módulo:
    - Validar unicidade de identificadores no registro
    - Preservar a ordem de registro
    - Oferecer acesso controlado (get / has / get_all)
    - Indexar rotas por caminho e por página

Decisões arquiteturais:
    - Registro duplicado é falha fatal (`DuplicateRegistrationError`)
    - `get` de id desconhecido levanta `KeyError`
    - Rotas são consultas "talvez": devolvem `None` quando ausentes
    - `default_registries()` existe como conveniência, nunca como requisito

Invariantes:
    - Cada id é único dentro do seu registry
    - `get_all` reflete exatamente a ordem de registro
    - Uma página possui no máximo uma rota

Limites explícitos:
    - Não instancia mappers nem páginas
    - Não navega entre rotas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterator, List, Mapping, Optional, TypeVar


T = TypeVar("T")


class DuplicateRegistrationError(ValueError):
    """
    Exceção levantada quando um id já registrado é registrado novamente.

    Decisões arquiteturais:
        - Ids devem ser únicos por registry
        - A duplicidade é detectada no registro, nunca no uso
        - Nenhuma substituição silenciosa é permitida
    """


class Registry(Generic[T]):
    """Registry genérico indexado por id, com ordem de registro preservada."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._items: Dict[str, T] = {}
        self._order: List[str] = []

    def register(self, item_id: str, item: T) -> None:
        if not isinstance(item_id, str) or not item_id.strip():
            raise ValueError(f"{self.kind} id must be a non-empty string")
        if item_id in self._items:
            raise DuplicateRegistrationError(f"Duplicate {self.kind} id: {item_id}")
        self._items[item_id] = item
        self._order.append(item_id)

    def get(self, item_id: str) -> T:
        return self._items[item_id]

    def has(self, item_id: str) -> bool:
        return item_id in self._items

    def get_all(self) -> List[T]:
        return [self._items[i] for i in self._order]

    def ids(self) -> List[str]:
        return list(self._order)

    def clear(self) -> None:
        self._items.clear()
        self._order.clear()

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))


class MapperRegistry(Registry[Any]):
    def __init__(self) -> None:
        super().__init__("mapper")


class PageRegistry(Registry[Any]):
    def __init__(self) -> None:
        super().__init__("page")


@dataclass(frozen=True)
class RouteEntry:
    path: str
    page_id: str
    meta: Mapping[str, Any] = field(default_factory=dict)


class RouteRegistry:
    """Índice bidirecional caminho ↔ página."""

    def __init__(self) -> None:
        self._by_path: Dict[str, RouteEntry] = {}
        self._by_page: Dict[str, RouteEntry] = {}

    def register(self, path: str, page_id: str, meta: Optional[Mapping[str, Any]] = None) -> RouteEntry:
        if path in self._by_path:
            raise DuplicateRegistrationError(f"Duplicate route path: {path}")
        if page_id in self._by_page:
            raise DuplicateRegistrationError(f"Page already has a route: {page_id}")
        entry = RouteEntry(path=path, page_id=page_id, meta=dict(meta or {}))
        self._by_path[path] = entry
        self._by_page[page_id] = entry
        return entry

    def get_by_path(self, path: str) -> Optional[RouteEntry]:
        return self._by_path.get(path)

    def get_by_page_id(self, page_id: str) -> Optional[RouteEntry]:
        return self._by_page.get(page_id)

    def get_path(self, page_id: str) -> Optional[str]:
        entry = self._by_page.get(page_id)
        return entry.path if entry else None

    def get_all(self) -> List[RouteEntry]:
        return list(self._by_path.values())

    def clear(self) -> None:
        self._by_path.clear()
        self._by_page.clear()

    def __len__(self) -> int:
        return len(self._by_path)


@dataclass
class Registries:
    """Conjunto de registries injetado em páginas e contextos."""

    mappers: MapperRegistry = field(default_factory=MapperRegistry)
    pages: PageRegistry = field(default_factory=PageRegistry)
    routes: RouteRegistry = field(default_factory=RouteRegistry)

    def clear(self) -> None:
        self.mappers.clear()
        self.pages.clear()
        self.routes.clear()


_DEFAULT: Optional[Registries] = None


def default_registries() -> Registries:
    """Instância de conveniência compartilhada pelo processo (criada sob demanda)."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = Registries()
    return _DEFAULT
