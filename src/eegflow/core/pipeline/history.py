# src/eegflow/core/pipeline/history.py
"""
Histórico de domínio escrito pelos handlers.

Complementar aos StepRecords (escritos pelo Engine), o histórico
registra o que cada operação fez sobre o payload: parâmetros efetivos,
status e métricas. Registros heterogêneos são reconciliados para que a
lista continue sendo uma tabela homogênea: chaves novas são propagadas
com valor None para registros anteriores, e o novo registro recebe None
para chaves que ele não declara.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .context import ExecutionContext

BASE_FIELDS = ("op", "params", "status", "metrics", "at")


def append_history(
    context: ExecutionContext,
    op_name: str,
    params: Optional[Mapping[str, Any]],
    status: str,
    metrics: Optional[Mapping[str, Any]] = None,
    **extra: Any,
) -> ExecutionContext:
    record: Dict[str, Any] = {
        "op": op_name,
        "params": dict(params or {}),
        "status": status,
        "metrics": dict(metrics or {}),
        "at": datetime.now(timezone.utc).isoformat(),
    }
    record.update(extra)

    history: List[Dict[str, Any]] = context.history
    all_fields: List[str] = []
    for row in history + [record]:
        for key in row:
            if key not in all_fields:
                all_fields.append(key)

    for row in history:
        for key in all_fields:
            row.setdefault(key, None)
    for key in all_fields:
        record.setdefault(key, None)

    history.append(record)
    return context


def history_frame(context: ExecutionContext) -> pd.DataFrame:
    """Histórico como DataFrame (uma linha por registro, colunas reconciliadas)."""
    if not context.history:
        return pd.DataFrame(columns=list(BASE_FIELDS))
    return pd.DataFrame.from_records(context.history)
