# src/eegflow/core/config/loader.py
"""
Loader de configuração do EEGflow.

A configuração efetiva de um pipeline é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional; ignorado se não existir)

Formatos aceitos: YAML (.yaml/.yml, via PyYAML `safe_load`) e JSON.
Documentos vazios equivalem a `{}`; qualquer raiz que não seja mapping
é rejeitada.

Limites explícitos:
    - Não valida parâmetros de operações (responsabilidade dos handlers)
    - Não monta Pipelines (ver `builder.build_pipeline`)
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


def load_document(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Lê um único documento de configuração (YAML ou JSON).

    Raises:
        DefaultsNotFoundError: se o arquivo não existir.
        UnsupportedConfigFormatError: se a extensão não for suportada.
        InvalidConfigRootTypeError: se a raiz não for um mapping.
    """
    path = Path(path)
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            text = f.read()
        data = json.loads(text) if text.strip() else None
    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: Union[str, Path],
    local_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva.

    Política de resolução:
        - defaults obrigatórios
        - local opcional; quando presente, tem prioridade (deep-merge)

    Args:
        defaults_path: caminho do arquivo base.
        local_path: caminho opcional de overrides.

    Returns:
        Dict[str, Any]: configuração final resolvida.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    effective = load_document(defaults_path)

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, load_document(local_file))

    return effective
