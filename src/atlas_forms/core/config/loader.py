"""
Loader canônico de settings do Atlas Forms.

Este módulo é responsável por carregar, validar estruturalmente e
resolver os settings efetivos do engine de formulários.

Os settings são resolvidos a partir de:
    - defaults empacotados (`DEFAULT_SETTINGS`, sempre presentes)
    - um arquivo de defaults do projeto (opcional, mas obrigatório se informado)
    - um arquivo local de overrides (opcional; ignorado se ausente)

Responsabilidades do módulo:
    - Carregar arquivos de settings em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver o resultado via deep-merge determinístico
    - Garantir precedência explícita: local > projeto > empacotado

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
    - A mesma entrada sempre produz os mesmos settings

Limites explícitos:
    - Não valida semântica de formulários
    - Não persiste settings ou hash

Este módulo existe para garantir resolução previsível,
determinística e segura dos settings do engine.
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .errors import (
    InvalidSettingsRootTypeError,
    SettingsFileNotFoundError,
    UnsupportedSettingsFormatError,
)
from .merge import deep_merge
from .settings import DEFAULT_SETTINGS, FormSettings


def load_mapping_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo YAML/JSON e valida que o conteúdo raiz é um dict.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        SettingsFileNotFoundError: Se o arquivo não existir.
        UnsupportedSettingsFormatError: Se a extensão não for suportada.
        InvalidSettingsRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise SettingsFileNotFoundError(f"Arquivo não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedSettingsFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidSettingsRootTypeError(
            f"Raiz do arquivo deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_settings(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve o dicionário efetivo de settings.

    Política de resolução:
        - Parte sempre de `DEFAULT_SETTINGS`
        - `defaults_path`, quando informado, deve existir
        - `local_path`, quando informado e existente, tem prioridade final
        - A resolução utiliza `deep_merge`

    Args:
        defaults_path (Optional[str]): Arquivo de defaults do projeto.
        local_path (Optional[str]): Arquivo opcional de overrides locais.

    Returns:
        Dict[str, Any]: Settings resolvidos.

    Raises:
        SettingsFileNotFoundError: Se `defaults_path` não existir.
        UnsupportedSettingsFormatError: Se o formato não for suportado.
        InvalidSettingsRootTypeError: Se o conteúdo não for um dicionário.
        SettingsTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    effective: Dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    if defaults_path is not None:
        effective = deep_merge(effective, load_mapping_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, load_mapping_file(local_file))

    return effective


def resolve_settings(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> FormSettings:
    """Atalho: `load_settings` seguido de `FormSettings.from_mapping`."""
    return FormSettings.from_mapping(
        load_settings(defaults_path=defaults_path, local_path=local_path)
    )
