# src/eegflow/core/config/hashing.py
"""
Hash canônico da configuração efetiva.

O hash identifica estruturalmente a configuração usada em uma run e é
gravado em `runtime.config_hash` por `build_pipeline`, permitindo
associar resumos de execução à config exata que os produziu.

Política (v1): SHA-256 do JSON canônico (chaves ordenadas, separadores
compactos, UTF-8).
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração.

    Configurações estruturalmente equivalentes (mesmo conteúdo, qualquer
    ordem de chaves) produzem o mesmo hash hexadecimal de 64 caracteres.

    Raises:
        TypeError: se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
