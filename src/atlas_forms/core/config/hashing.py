"""
Hashing canônico dos settings efetivos do Atlas Forms.

O hash representa a identidade estrutural dos settings e é gravado no
evento de criação de cada contexto, permitindo correlacionar o
comportamento observado (políticas de lista, debounce padrão) com a
configuração que o produziu.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256
"""

import hashlib
import json
from typing import Any, Dict


def compute_settings_hash(settings: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico dos settings efetivos.

    Invariantes:
        - O valor retornado é uma string hexadecimal de 64 caracteres
        - Settings estruturalmente equivalentes produzem o mesmo hash

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(settings, dict):
        raise TypeError(
            f"Settings para hashing devem ser dict, recebido: {type(settings).__name__}"
        )

    canonical_json = json.dumps(
        settings,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
