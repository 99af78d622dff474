# src/eegflow/core/config/__init__.py
"""
Camada de configuração do EEGflow.

Responsabilidades do pacote:
    - Carregar documentos YAML/JSON (defaults + overrides locais)
    - Resolver a configuração final via deep-merge determinístico
    - Gerar hash canônico para rastreabilidade
    - Montar um Pipeline a partir da lista declarativa de Steps

Limites explícitos:
    - Não valida parâmetros de domínio
    - Não executa pipeline
"""

from .builder import build_pipeline, extract_steps
from .errors import (
    ArgsRefNotFoundError,
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    MissingStepsError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config, load_document
from .merge import deep_merge

__all__ = [
    "build_pipeline",
    "extract_steps",
    "ArgsRefNotFoundError",
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "MissingStepsError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "load_document",
    "deep_merge",
]
