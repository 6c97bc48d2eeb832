# tests/core/registry/test_registries.py
"""
Testes dos registries de mappers, páginas e rotas.

Os testes asseguram que:
- ids duplicados falham no registro
- a ordem de registro é preservada
- `get` de id desconhecido levanta KeyError
- rotas ausentes devolvem None
- registries são instâncias independentes
"""

import pytest

from atlas_forms.core.registry.registry import (
    DuplicateRegistrationError,
    MapperRegistry,
    PageRegistry,
    Registries,
    RouteRegistry,
    default_registries,
)


def test_registry_preserves_order_and_lookup():
    registry = PageRegistry()
    registry.register("b", 2)
    registry.register("a", 1)

    assert registry.ids() == ["b", "a"]
    assert registry.get_all() == [2, 1]
    assert registry.get("a") == 1
    assert registry.has("b")
    assert "a" in registry
    assert list(registry) == ["b", "a"]


def test_duplicate_id_raises():
    registry = MapperRegistry()
    registry.register("user", object())
    with pytest.raises(DuplicateRegistrationError) as exc:
        registry.register("user", object())
    assert "user" in str(exc.value)


def test_unknown_id_raises_key_error():
    with pytest.raises(KeyError):
        MapperRegistry().get("ghost")


@pytest.mark.parametrize("bad", ["", "   ", None])
def test_empty_id_is_rejected(bad):
    with pytest.raises(ValueError):
        PageRegistry().register(bad, 1)


def test_clear_empties_registry():
    registry = PageRegistry()
    registry.register("p", 1)
    registry.clear()
    assert len(registry) == 0
    assert not registry.has("p")


def test_routes_index_both_directions():
    routes = RouteRegistry()
    entry = routes.register("/customers/:id", "customer", {"title": "Cliente"})

    assert routes.get_by_path("/customers/:id") is entry
    assert routes.get_by_page_id("customer") is entry
    assert routes.get_path("customer") == "/customers/:id"
    assert entry.meta == {"title": "Cliente"}
    assert routes.get_by_path("/nope") is None
    assert routes.get_path("nope") is None


def test_routes_reject_duplicate_path_and_second_route_for_page():
    routes = RouteRegistry()
    routes.register("/a", "page-a")
    with pytest.raises(DuplicateRegistrationError):
        routes.register("/a", "page-b")
    with pytest.raises(DuplicateRegistrationError):
        routes.register("/b", "page-a")
    assert len(routes) == 1


def test_registries_are_independent_instances():
    first, second = Registries(), Registries()
    first.pages.register("p", 1)

    assert first.pages.has("p")
    assert not second.pages.has("p")

    first.clear()
    assert len(first.pages) == 0


def test_default_registries_is_shared_convenience():
    assert default_registries() is default_registries()
