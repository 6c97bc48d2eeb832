"""
Exceções canônicas da camada de settings do Atlas Forms.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento, validação estrutural e resolução dos settings do engine.

As exceções aqui definidas representam **violações explícitas de
configuração**, e não erros de avaliação de formulários.

Invariantes:
    - Todas as exceções de settings herdam de `SettingsError`
    - Nenhuma exceção representa erro de validação de campo

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de contextos ou builders
"""


class SettingsError(Exception):
    """
    Exceção base para erros relacionados aos settings do Atlas Forms.

    Esta hierarquia permite:
        - captura genérica de erros de settings
        - distinção clara entre falhas de configuração e falhas de avaliação
    """


class SettingsFileNotFoundError(SettingsError):
    """
    Exceção levantada quando o arquivo de settings explicitamente
    informado não existe.

    Decisões arquiteturais:
        - Um caminho de defaults informado é obrigatório
        - O override local ausente é ignorado (é opcional)
    """


class UnsupportedSettingsFormatError(SettingsError):
    """
    Exceção levantada quando o formato do arquivo não é suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidSettingsRootTypeError(SettingsError):
    """
    Exceção levantada quando o conteúdo raiz do arquivo não é um
    dicionário (`dict`).
    """


class SettingsTypeConflictError(SettingsError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"lists": {"min_policy": "allow"}}
        - override: {"lists": "reject"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSettingsValueError(SettingsError):
    """
    Exceção levantada quando um valor resolvido está fora do domínio
    aceito (ex.: política de lista desconhecida, debounce negativo).
    """
