# src/atlas_forms/core/config/__init__.py

"""
Camada de settings do Atlas Forms.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar e identificar os settings do engine de formulários.

Settings no Atlas Forms são:
    - declarativos (YAML/JSON)
    - determinísticos
    - separados da configuração dos formulários em si

Responsabilidades do pacote:
    - Carregamento de arquivos (defaults do projeto + overrides locais)
    - Resolução via deep-merge determinístico
    - Validação de domínio dos valores (políticas, debounce)
    - Geração de hash canônico para rastreabilidade
"""

from .errors import (
    InvalidSettingsRootTypeError,
    InvalidSettingsValueError,
    SettingsError,
    SettingsFileNotFoundError,
    SettingsTypeConflictError,
    UnsupportedSettingsFormatError,
)
from .hashing import compute_settings_hash
from .loader import load_mapping_file, load_settings, resolve_settings
from .merge import deep_merge
from .settings import (
    DEFAULT_SETTINGS,
    LIST_POLICY_ALLOW,
    LIST_POLICY_REJECT,
    FormSettings,
    default_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "LIST_POLICY_ALLOW",
    "LIST_POLICY_REJECT",
    "FormSettings",
    "InvalidSettingsRootTypeError",
    "InvalidSettingsValueError",
    "SettingsError",
    "SettingsFileNotFoundError",
    "SettingsTypeConflictError",
    "UnsupportedSettingsFormatError",
    "compute_settings_hash",
    "deep_merge",
    "default_settings",
    "load_mapping_file",
    "load_settings",
    "resolve_settings",
]
