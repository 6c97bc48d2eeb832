"""
Planejamento estrutural das dependências entre campos.

Este módulo valida, no build do formulário, o grafo formado pelas
declarações `depends_on` dos campos e produz uma ordem topológica
determinística (fonte antes de dependente).

Princípios fundamentais:
    - O grafo de dependências deve ser um DAG
    - Toda fonte declarada deve existir no formulário
    - A mesma definição sempre produz a mesma ordem

Decisões arquiteturais:
    - Utiliza ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos por ordem lexicográfica do nome do campo
    - Erros estruturais são tratados como falhas fatais de build

Limites explícitos:
    - Não executa resoluções (responsabilidade do DependencyResolver)
    - Não interage com contextos
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from atlas_forms.core.form.types import FieldConfig


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando um `depends_on` referencia um campo inexistente.

    Decisões arquiteturais:
        - Toda fonte deve ser resolvível no próprio formulário
        - A validação ocorre no build, antes de qualquer contexto existir
    """


class DependencyCycleError(ValueError):
    """
    Exceção levantada quando as dependências entre campos formam um ciclo.

    Um ciclo faria uma mudança de valor disparar resoluções
    indefinidamente; nenhuma ordem válida pode ser produzida.
    """


def plan_dependencies(fields: Iterable[FieldConfig], *, known_names: Iterable[str]) -> List[str]:
    """
    Valida e ordena topologicamente os campos envolvidos em dependências.

    Args:
        fields (Iterable[FieldConfig]): Campos de topo do formulário.
        known_names (Iterable[str]): Todos os nomes que podem ser fonte
            (campos e listas de topo).

    Returns:
        List[str]: Nomes em ordem topológica (fontes antes de dependentes).

    Raises:
        UnknownDependencyError: Se uma fonte não existir.
        DependencyCycleError: Se houver ciclo no grafo.
    """
    known: Set[str] = set(known_names)
    edges: Dict[str, Set[str]] = {}

    for f in fields:
        for dep in f.depends_on:
            for source in dep.sources:
                if source not in known:
                    raise UnknownDependencyError(
                        f"Field '{f.name}' depends on unknown field '{source}'"
                    )
                edges.setdefault(source, set()).add(f.name)
                edges.setdefault(f.name, set())

    incoming: Dict[str, int] = {name: 0 for name in edges}
    for source, targets in edges.items():
        for target in targets:
            incoming[target] += 1

    ready: List[str] = sorted(name for name, count in incoming.items() if count == 0)
    order: List[str] = []

    while ready:
        name = ready.pop(0)
        order.append(name)
        for child in sorted(edges[name]):
            incoming[child] -= 1
            if incoming[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order) != len(edges):
        remaining = sorted(name for name, count in incoming.items() if count > 0)
        raise DependencyCycleError(
            f"Cycle detected in field dependency graph: {', '.join(remaining)}"
        )

    return order
