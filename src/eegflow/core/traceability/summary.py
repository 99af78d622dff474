# src/eegflow/core/traceability/summary.py
"""
Resumo de execução (run summary) do EEGflow.

Consolida, em um dicionário serializável em JSON, o estado de auditoria
de uma run já finalizada:
    - timestamps de início/fim (ISO 8601, UTC)
    - resultado agregado (ok, n_steps, total_sec)
    - hash da configuração efetiva, quando conhecido
    - StepRecords e erros estruturados
    - contagem de linhas de log/erro

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - A persistência é JSON determinístico (`sort_keys=True`)
    - O resumo é derivado; nunca muta o contexto

Limites explícitos:
    - Não executa pipeline
    - Não serializa o payload de domínio
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from eegflow.core.pipeline.context import ExecutionContext
from eegflow.core.pipeline.types import ExecutionReport


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return _ensure_tzaware_utc(dt).isoformat() if dt is not None else None


def build_run_summary(context: ExecutionContext, report: ExecutionReport) -> Dict[str, Any]:
    """
    Constrói o resumo serializável de uma run (ou validate).

    Args:
        context: contexto retornado por `Pipeline.run`/`Pipeline.validate`.
        report: relatório retornado pela mesma chamada.

    Returns:
        Dict[str, Any]: resumo pronto para `json.dumps`.
    """
    runtime = context.runtime
    return {
        "started_at": _iso(runtime.run_started_at),
        "finished_at": _iso(runtime.run_finished_at),
        "validate_only": bool(runtime.validate_only),
        "ok": bool(report.ok),
        "n_steps": int(report.n_steps),
        "total_sec": float(report.total_sec),
        "config_hash": runtime.config_hash,
        "errors": [p.to_dict() for p in report.error_payloads],
        "steps": [record.to_dict() for record in runtime.steps],
        "n_log_lines": len(runtime.log),
        "n_err_lines": len(runtime.err),
        "n_history": len(context.history),
    }


def write_run_summary(path: Union[str, Path], summary: Dict[str, Any]) -> Path:
    """
    Persiste o resumo em JSON (UTF-8), criando diretórios intermediários.

    Valores não nativos de JSON em `args` (ex.: arrays, Paths) são
    convertidos com `str`.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(summary, ensure_ascii=False, indent=2, sort_keys=True, default=str),
        encoding="utf-8",
    )
    return path
