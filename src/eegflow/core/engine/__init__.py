# src/eegflow/core/engine/__init__.py
"""
Engine do EEGflow.

Este pacote contém a implementação responsável por **executar**
pipelines declarativos: uma sequência ordenada de Steps resolvidos
contra um Registry, com um único contexto mutável atravessando todos
os handlers.

Componentes principais:
    - engine → `Pipeline`: builder (add/add_steps) e executor (run/validate)
    - guards → avaliação do guard `when`
    - sinks  → destinos de log injetáveis (stdout, stderr, arquivo)
    - batch  → um Pipeline por unidade de trabalho, com fan-out opcional

Invariantes:
    - Steps executam estritamente na ordem declarada
    - Cada Step produz exatamente um StepRecord por execução
    - O guard sempre enxerga o contexto produzido pelos Steps anteriores

Limites explícitos:
    - Não é um scheduler distribuído
    - Não persiste estado
    - Não faz retry automático
"""

from .batch import BatchOutcome, run_batch
from .engine import Pipeline
from .guards import evaluate_when
from .sinks import file_sink, null_sink, stderr_sink, stdout_sink, tee

__all__ = [
    "BatchOutcome",
    "run_batch",
    "Pipeline",
    "evaluate_when",
    "file_sink",
    "null_sink",
    "stderr_sink",
    "stdout_sink",
    "tee",
]
