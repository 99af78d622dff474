# src/eegflow/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `ExecutionContext`, o agregado mutável passado a
todos os handlers durante uma run do EEGflow, e o `RuntimeState`, sua
partição de auditoria mantida pelo Engine.

Partições do contexto:
    - payload: objeto de domínio transformado pelo pipeline (opaco ao Engine)
    - config: defaults por operação, indexados sem distinção de caixa
    - scratch: estado auxiliar entre Steps (artefatos intermediários, QC)
    - runtime: contador de ids, StepRecords, buffers de log/erro, timestamps
    - history: registros de domínio escritos pelos próprios handlers

Invariantes:
    - As quatro partições sempre existem (mesmo vazias) após normalização
    - Um contexto pertence a exatamente uma run em andamento
    - `runtime.id_counter` é monotônico

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
    - Não oferece sincronização entre threads
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from eegflow.core.errors import ErrorPayload

from .types import StepRecord, StepStatus


@dataclass
class RuntimeState:
    """
    Partição de runtime/auditoria do contexto.

    Mantida pelo Engine; handlers podem ler, mas não devem reescrever
    `steps` nem `id_counter`.
    """
    id_counter: int = 0
    steps: List[StepRecord] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    err: List[str] = field(default_factory=list)
    validate_only: bool = False
    last_error: Optional[ErrorPayload] = None
    run_started_at: Optional[datetime] = None
    run_finished_at: Optional[datetime] = None
    total_sec: Optional[float] = None
    config_hash: Optional[str] = None

    def next_id(self) -> str:
        self.id_counter += 1
        return f"S{self.id_counter:03d}"

    def strip_init_record(self) -> None:
        if not self.steps:
            return
        first = self.steps[0]
        status = first.get("status") if isinstance(first, Mapping) else getattr(first, "status", None)
        if status == StepStatus.INIT:
            del self.steps[0]


@dataclass
class ExecutionContext:
    """
    Agregado mutável passado por todos os handlers de uma run.

    Handlers recebem o contexto, mutam payload/scratch/history conforme
    necessário e o retornam. O Engine é o único que escreve em `runtime`.
    """
    payload: Any = None
    config: Dict[str, Any] = field(default_factory=dict)
    scratch: Dict[str, Any] = field(default_factory=dict)
    runtime: RuntimeState = field(default_factory=RuntimeState)
    history: List[Dict[str, Any]] = field(default_factory=list)

    # -----------------------------
    # Config
    # -----------------------------
    def op_config(self, op_name: str) -> Dict[str, Any]:
        """Defaults da operação em `config`, com busca case-insensitive."""
        cfg = self.config or {}
        if op_name in cfg and isinstance(cfg[op_name], Mapping):
            return dict(cfg[op_name])
        wanted = op_name.lower()
        for key, value in cfg.items():
            if isinstance(key, str) and key.lower() == wanted and isinstance(value, Mapping):
                return dict(value)
        return {}

    # -----------------------------
    # Scratch store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self.scratch[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self.scratch

    def get_artifact(self, key: str) -> Any:
        if key not in self.scratch:
            raise KeyError(key)
        return self.scratch[key]


def _coerce_record(record: Any) -> StepRecord:
    if isinstance(record, StepRecord):
        return record
    if isinstance(record, Mapping):
        return StepRecord.from_dict(record)
    raise TypeError(f"runtime.steps entries must be StepRecord or mapping, got {type(record).__name__}")


def normalize_context(context: Any = None) -> ExecutionContext:
    """
    Garante um ExecutionContext com todas as partições presentes.

    Aceita:
        - None → contexto vazio
        - ExecutionContext → o mesmo objeto, com partições ausentes preenchidas
        - Mapping com chaves opcionais payload/config/scratch/runtime/history

    Raises:
        TypeError: para qualquer outro tipo de entrada.
    """
    if context is None:
        return ExecutionContext()

    if isinstance(context, ExecutionContext):
        if context.config is None:
            context.config = {}
        if context.scratch is None:
            context.scratch = {}
        if context.history is None:
            context.history = []
        if context.runtime is None:
            context.runtime = RuntimeState()
        return context

    if isinstance(context, Mapping):
        unknown = sorted(set(context.keys()) - {"payload", "config", "scratch", "runtime", "history"})
        if unknown:
            raise TypeError(f"Unknown context partitions: {unknown}")
        runtime = context.get("runtime")
        if runtime is None:
            runtime = RuntimeState()
        elif isinstance(runtime, Mapping):
            fields = dict(runtime)
            fields["steps"] = [_coerce_record(r) for r in fields.get("steps") or []]
            runtime = RuntimeState(**fields)
        elif not isinstance(runtime, RuntimeState):
            raise TypeError(f"runtime must be RuntimeState or mapping, got {type(runtime).__name__}")
        return ExecutionContext(
            payload=context.get("payload"),
            config=dict(context.get("config") or {}),
            scratch=dict(context.get("scratch") or {}),
            runtime=runtime,
            history=list(context.get("history") or []),
        )

    raise TypeError(
        f"context must be ExecutionContext, mapping or None, got {type(context).__name__}"
    )
