# src/eegflow/__init__.py
"""
EEGflow — engine declarativo de pipelines de processamento.

Um pipeline é uma sequência ordenada de Steps nomeados; cada Step invoca
uma operação registrada (`handler(context, args, meta) -> context`) sobre
um contexto de execução compartilhado, com guards `when`, modo
validate-only e trilha de auditoria por Step.

Arquitetura em alto nível:
    - core.pipeline     → Step, ExecutionContext, OperationRegistry, histórico
    - core.engine       → Pipeline (run/validate) e execução em lote
    - core.config       → configuração YAML/JSON e build_pipeline
    - core.traceability → resumo de execução
    - ops               → adaptador genérico de operações
"""

from .core.config import build_pipeline, load_config
from .core.engine import Pipeline, run_batch
from .core.exceptions import (
    DuplicateOperation,
    FlowException,
    HandlerError,
    MissingWhenEvaluator,
    UnknownOperation,
)
from .core.pipeline import (
    ExecutionContext,
    ExecutionReport,
    OperationRegistry,
    Step,
    StepRecord,
    StepStatus,
    append_history,
    build_registry,
)
from .ops import operation, wrap_operation

__version__ = "0.1.0"

__all__ = [
    "build_pipeline",
    "load_config",
    "Pipeline",
    "run_batch",
    "DuplicateOperation",
    "FlowException",
    "HandlerError",
    "MissingWhenEvaluator",
    "UnknownOperation",
    "ExecutionContext",
    "ExecutionReport",
    "OperationRegistry",
    "Step",
    "StepRecord",
    "StepStatus",
    "append_history",
    "build_registry",
    "operation",
    "wrap_operation",
    "__version__",
]
