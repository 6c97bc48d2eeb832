# src/atlas_forms/core/mapping/mapper.py
"""
Mapper bidirecional Entity ↔ DTO.

Este módulo define a transformação campo a campo entre o formato de
transporte (Entity) e o formato de UI (DTO), com mapeamentos explícitos,
campos computados e campos ignorados.

Regras de `to_dto(entity)`:
    1. Chaves ignoradas são descartadas
    2. Mapeamento explícito (pela chave da entity) aplica a transformação
       e grava sob o nome do DTO
    3. Demais chaves são copiadas com o mesmo nome
    4. Campos computados de DTO são sobrepostos a partir da entity inteira

`to_entity(dto)` é o espelho:
    - mapeamento reverso (pela chave do DTO) tem prioridade
    - nomes de campos computados de DTO nunca voltam para a entity
    - campos computados de Entity são sobrepostos a partir do DTO inteiro

Decisões arquiteturais:
    - Declaração em duas fases: `configure()` declara, `construct()` registra
    - Declarações inválidas falham no build (`MappingInvariantViolation`)
    - O mapper construído é imutável e não guarda referência ao declarante
    - Nenhum registro ocorre por efeito colateral de construção implícita

Invariantes:
    - `to_entity(to_dto(e)) == e` para campos sem computado, ignorado
      ou transformação com perda
    - Campos ignorados nunca aparecem em nenhuma das saídas
    - Variantes de lista devolvem `[]` para entrada `None`

Limites explícitos:
    - Não valida tipos dos valores
    - Não faz cópia profunda dos valores copiados

Este módulo existe para garantir transformações previsíveis,
declarativas e reversíveis entre API e UI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from atlas_forms.core.exceptions import BuilderStateError, MappingInvariantViolation


Transform = Callable[[Any, Mapping[str, Any]], Any]
ComputeFn = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class FieldMapping:
    dto_field: str
    entity_field: str
    to_dto: Optional[Transform] = None
    to_entity: Optional[Transform] = None


@dataclass(frozen=True)
class ComputedField:
    value: ComputeFn
    dto_field: Optional[str] = None
    entity_field: Optional[str] = None


# ---------------------------------------------------------------------------
# Builders de declaração
# ---------------------------------------------------------------------------

class FieldMappingBuilder:
    def __init__(self, parent: "MapperBuilder") -> None:
        self._parent = parent
        self._dto: Optional[str] = None
        self._entity: Optional[str] = None
        self._to_dto: Optional[Transform] = None
        self._to_entity: Optional[Transform] = None
        self._closed = False

    def dto(self, name: str) -> "FieldMappingBuilder":
        self._dto = name
        return self

    def entity(self, name: str) -> "FieldMappingBuilder":
        self._entity = name
        return self

    def to_dto(self, fn: Transform) -> "FieldMappingBuilder":
        self._to_dto = fn
        return self

    def to_entity(self, fn: Transform) -> "FieldMappingBuilder":
        self._to_entity = fn
        return self

    def end(self) -> "MapperBuilder":
        if self._closed:
            raise BuilderStateError("end() chamado duas vezes em field mapping")
        if not self._dto or not self._entity:
            raise MappingInvariantViolation(
                "Field mapping requires both dto and entity field names",
                details={"dto": self._dto, "entity": self._entity},
            )
        self._parent._add_mapping(FieldMapping(self._dto, self._entity, self._to_dto, self._to_entity))
        self._closed = True
        return self._parent


class ComputedFieldBuilder:
    def __init__(self, parent: "MapperBuilder") -> None:
        self._parent = parent
        self._dto: Optional[str] = None
        self._entity: Optional[str] = None
        self._value: Optional[ComputeFn] = None
        self._closed = False

    def dto(self, name: str) -> "ComputedFieldBuilder":
        self._dto = name
        return self

    def entity(self, name: str) -> "ComputedFieldBuilder":
        self._entity = name
        return self

    def value(self, fn: ComputeFn) -> "ComputedFieldBuilder":
        self._value = fn
        return self

    def end(self) -> "MapperBuilder":
        if self._closed:
            raise BuilderStateError("end() chamado duas vezes em computed field")
        if self._value is None:
            raise MappingInvariantViolation("Computed field requires a value function")
        if not self._dto and not self._entity:
            raise MappingInvariantViolation("Computed field requires a dto or entity field name")
        self._parent._add_computed(ComputedField(self._value, self._dto, self._entity))
        self._closed = True
        return self._parent


class MapperBuilder:
    """Acumula declarações e produz um `BuiltMapper` imutável."""

    def __init__(self) -> None:
        self._mappings: Dict[str, FieldMapping] = {}
        self._computed_dto: Dict[str, ComputeFn] = {}
        self._computed_entity: Dict[str, ComputeFn] = {}
        self._ignored: List[str] = []

    def field(self) -> FieldMappingBuilder:
        return FieldMappingBuilder(self)

    def computed(self) -> ComputedFieldBuilder:
        return ComputedFieldBuilder(self)

    def ignore(self, *names: str) -> "MapperBuilder":
        for name in names:
            if name not in self._ignored:
                self._ignored.append(name)
        return self

    def _add_mapping(self, mapping: FieldMapping) -> None:
        if mapping.entity_field in self._mappings:
            raise MappingInvariantViolation(
                f"Entity field mapped twice: {mapping.entity_field}",
                details={"entity": mapping.entity_field},
            )
        if any(m.dto_field == mapping.dto_field for m in self._mappings.values()):
            raise MappingInvariantViolation(
                f"DTO field mapped twice: {mapping.dto_field}",
                details={"dto": mapping.dto_field},
            )
        self._mappings[mapping.entity_field] = mapping

    def _add_computed(self, computed: ComputedField) -> None:
        if computed.dto_field:
            self._computed_dto[computed.dto_field] = computed.value
        if computed.entity_field:
            self._computed_entity[computed.entity_field] = computed.value

    def build(self, name: str) -> "BuiltMapper":
        forward = tuple(self._mappings.values())
        return BuiltMapper(
            name=name,
            mappings=forward,
            computed_dto=tuple(self._computed_dto.items()),
            computed_entity=tuple(self._computed_entity.items()),
            ignored=frozenset(self._ignored),
        )


# ---------------------------------------------------------------------------
# Mapper construído
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BuiltMapper:
    name: str
    mappings: Tuple[FieldMapping, ...] = ()
    computed_dto: Tuple[Tuple[str, ComputeFn], ...] = ()
    computed_entity: Tuple[Tuple[str, ComputeFn], ...] = ()
    ignored: FrozenSet[str] = frozenset()

    _by_entity: Dict[str, FieldMapping] = field(default_factory=dict, init=False, repr=False, compare=False)
    _by_dto: Dict[str, FieldMapping] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_entity", {m.entity_field: m for m in self.mappings})
        object.__setattr__(self, "_by_dto", {m.dto_field: m for m in self.mappings})

    def to_dto(self, entity: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
        if entity is None:
            return None
        result: Dict[str, Any] = {}
        for key, value in entity.items():
            if key in self.ignored:
                continue
            mapping = self._by_entity.get(key)
            if mapping is not None:
                result[mapping.dto_field] = mapping.to_dto(value, entity) if mapping.to_dto else value
            else:
                result[key] = value
        for name, compute in self.computed_dto:
            result[name] = compute(entity)
        return result

    def to_entity(self, dto: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
        if dto is None:
            return None
        computed_names = {name for name, _ in self.computed_dto}
        result: Dict[str, Any] = {}
        for key, value in dto.items():
            if key in self.ignored:
                continue
            mapping = self._by_dto.get(key)
            if mapping is not None:
                result[mapping.entity_field] = mapping.to_entity(value, dto) if mapping.to_entity else value
            elif key in computed_names:
                continue
            else:
                result[key] = value
        for name, compute in self.computed_entity:
            result[name] = compute(dto)
        return result

    def to_dto_list(self, entities: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
        if entities is None:
            return []
        return [self.to_dto(e) for e in entities]

    def to_entity_list(self, dtos: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
        if dtos is None:
            return []
        return [self.to_entity(d) for d in dtos]


# ---------------------------------------------------------------------------
# Declaração por subclasse
# ---------------------------------------------------------------------------

class Mapper:
    """
    Base para mappers declarados por subclasse.

    Exemplo:
        class UserMapper(Mapper):
            name = "user"

            def configure(self):
                self.field().dto("userName").entity("user_name").end()
                self.computed().dto("fullName").value(
                    lambda e: f"{e['first_name']} {e['last_name']}"
                ).end()
                self.ignore("password")

        built = UserMapper().construct()
    """

    name: str = ""

    def __init__(self, name: Optional[str] = None) -> None:
        self._name = name or self.name or type(self).__name__
        self._builder = MapperBuilder()
        self._built: Optional[BuiltMapper] = None

    def configure(self) -> None:
        raise NotImplementedError

    def field(self) -> FieldMappingBuilder:
        return self._builder.field()

    def computed(self) -> ComputedFieldBuilder:
        return self._builder.computed()

    def ignore(self, *names: str) -> "Mapper":
        self._builder.ignore(*names)
        return self

    @property
    def built(self) -> Optional[BuiltMapper]:
        return self._built

    def construct(self) -> BuiltMapper:
        if self._built is not None:
            raise BuilderStateError(f"Mapper '{self._name}' já foi construído")
        self.configure()
        self._built = self._builder.build(self._name)
        return self._built

    def register(self, registry: Any) -> BuiltMapper:
        """Registra o mapper construído (construindo-o se necessário)."""
        built = self._built if self._built is not None else self.construct()
        registry.register(self._name, built)
        return built


def install_mappers(registry: Any, *mapper_classes: type) -> List[BuiltMapper]:
    return [cls().register(registry) for cls in mapper_classes]
