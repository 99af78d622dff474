# src/eegflow/core/pipeline/__init__.py
"""
# Pipeline Core — EEGflow

Este pacote define os **contratos canônicos** e as **estruturas fundamentais**
consumidas pelo Engine do EEGflow.

## Componentes

- **types**
  - `StepStatus`: estados de um StepRecord (ok, skipped, error, init)
  - `StepRecord`: registro imutável de auditoria de um Step
  - `ExecutionReport`: resumo de uma execução

- **step**
  - `Step`: unidade declarativa de trabalho (imutável)
  - `StepMeta`: metadados entregues ao handler
  - `Handler` (Protocol): `(context, args, meta) -> context`

- **context**
  - `ExecutionContext`: payload, config, scratch, runtime e history
  - `RuntimeState`: partição de auditoria mantida pelo Engine

- **registry**
  - `OperationRegistry`: tabela nome → handler com aliases
  - `build_registry`: composição escopada por família de operações

- **history**
  - `append_history`: histórico de domínio reconciliado

## Princípios Fundamentais

- Handlers **não conhecem** o Engine
- Handlers **não controlam** ordem de execução
- Comunicação entre Steps ocorre **apenas via ExecutionContext**
- Nenhuma decisão implícita ou silenciosa
"""

from .context import ExecutionContext, RuntimeState, normalize_context
from .history import append_history, history_frame
from .registry import OperationRegistry, build_registry
from .step import Handler, Step, StepMeta
from .types import ExecutionReport, StepRecord, StepStatus

__all__ = [
    "ExecutionContext",
    "RuntimeState",
    "normalize_context",
    "append_history",
    "history_frame",
    "OperationRegistry",
    "build_registry",
    "Handler",
    "Step",
    "StepMeta",
    "ExecutionReport",
    "StepRecord",
    "StepStatus",
]
