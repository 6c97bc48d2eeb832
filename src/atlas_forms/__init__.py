# src/atlas_forms/__init__.py
"""
Atlas Forms: engine declarativo de configuração e avaliação de formulários.

Este pacote raiz define o namespace público do Atlas Forms: formulários
são descritos por builders fluentes (ou por definições YAML/JSON),
congelados em configurações imutáveis e avaliados em runtime por
contextos explícitos.

Arquitetura em alto nível:
    - core.config   → settings do engine (carregamento, merge, hashing)
    - core.form     → builders, tipos, visibilidade, validação, dependências, listas
    - core.context  → contextos de formulário, página, item de lista e diálogo
    - core.mapping  → mapper bidirecional Entity ↔ DTO
    - core.page     → declaração de páginas em duas fases
    - core.registry → registries injetáveis de mappers, páginas e rotas

Limites explícitos:
    - Não renderiza componentes
    - Não executa I/O por conta própria
"""

from .core import *  # noqa: F401,F403
from .core import __all__  # noqa: F401
