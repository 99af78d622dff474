# src/eegflow/ops/__init__.py
"""Adaptadores de operações: funções de processamento → handlers registráveis."""

from .generic import operation, resolve_params, wrap_operation

__all__ = ["operation", "resolve_params", "wrap_operation"]
