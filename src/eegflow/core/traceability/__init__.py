# src/eegflow/core/traceability/__init__.py
"""
Pacote de rastreabilidade do EEGflow.

API pública:
    - build_run_summary → resumo serializável de uma run finalizada
    - write_run_summary → persistência determinística do resumo em JSON

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução
"""

from .summary import build_run_summary, write_run_summary

__all__ = [
    "build_run_summary",
    "write_run_summary",
]
