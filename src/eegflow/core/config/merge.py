# src/eegflow/core/config/merge.py
"""
Deep-merge de configuração (defaults + overrides locais).

Política (v1):
    - dict + dict       → merge recursivo por chave
    - list              → sobrescrita total
    - escalar           → sobrescrita direta
    - conflito de tipos → ConfigTypeConflictError

O merge é puramente funcional: nenhum input é mutado.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `override` sobre `base` e devolve um novo dicionário.

    Args:
        base (Dict[str, Any]): configuração base (ex.: defaults do lab).
        override (Dict[str, Any]): overrides explícitos (ex.: config do sujeito).

    Returns:
        Dict[str, Any]: configuração resultante.

    Raises:
        ConfigTypeConflictError: se uma chave mudar de tipo entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, incoming in override.items():
        if key not in result:
            result[key] = deepcopy(incoming)
            continue

        current = result[key]

        if isinstance(current, dict) and isinstance(incoming, dict):
            result[key] = deep_merge(current, incoming)
        elif isinstance(incoming, list):
            result[key] = deepcopy(incoming)
        elif current is not None and incoming is not None and type(current) is not type(incoming):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(current).__name__} vs {type(incoming).__name__}"
            )
        else:
            result[key] = deepcopy(incoming)

    return result
