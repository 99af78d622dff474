# src/eegflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do EEGflow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Pipeline, handlers e a trilha de auditoria.

Os tipos aqui definidos representam:
    - estados finais de execução de Steps
    - o registro de auditoria produzido pelo Engine para cada Step
    - o relatório agregado de uma execução (run ou validate)

Componentes principais:
    - StepStatus      → enum de estados (OK, SKIPPED, ERROR, INIT)
    - StepRecord      → registro imutável de auditoria de um Step
    - ExecutionReport → resumo imutável de uma execução

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from eegflow.core.errors import ErrorPayload, exception_to_error
from eegflow.core.exceptions import FlowException


class StepStatus(str, Enum):
    """
    Estados possíveis de um StepRecord.

    Os valores são strings para facilitar serialização em JSON
    e leitura direta da trilha de auditoria.

    Estados definidos:
        - OK: handler executado com sucesso
        - SKIPPED: guard `when` avaliado como falso; handler não invocado
        - ERROR: operação desconhecida ou erro levantado pelo handler
        - INIT: registro sentinela de inicialização, removido ao final da run

    Invariantes:
        - O status final de um Step é exatamente um dos valores definidos
        - INIT nunca aparece como primeiro registro de um contexto retornado
    """
    OK = "ok"
    SKIPPED = "skipped"
    ERROR = "error"
    INIT = "init"


@dataclass(frozen=True)
class StepRecord:
    """
    Registro imutável de auditoria de um Step (append-only).

    Produzido exclusivamente pelo Engine, um por Step considerado,
    na mesma ordem da sequência de Steps do Pipeline.

    Campos:
        - id: identificador do Step
        - index: posição 1-based do Step na sequência
        - name: rótulo humano do Step
        - op: nome da operação resolvida no Registry
        - status: StepStatus final
        - elapsed_sec: tempo gasto (0.0 para skipped/unknown op)
        - args: argumentos efetivamente usados
        - error: ErrorPayload quando status == ERROR
    """
    id: str
    index: int
    name: str
    op: str
    status: StepStatus
    elapsed_sec: float = 0.0
    args: Dict[str, Any] = field(default_factory=dict)
    error: Optional[ErrorPayload] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "index": self.index,
            "name": self.name,
            "op": self.op,
            "status": self.status.value,
            "elapsed_sec": self.elapsed_sec,
            "args": dict(self.args),
            "error": self.error.to_dict() if self.error is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StepRecord":
        """Reconstrói um registro a partir de `to_dict` (ou de um runtime desserializado)."""
        error = data.get("error")
        if isinstance(error, Mapping):
            error = ErrorPayload(**error)
        step_id = str(data.get("id", ""))
        return cls(
            id=step_id,
            index=int(data.get("index", 0)),
            name=str(data.get("name") or step_id),
            op=str(data.get("op") or ""),
            status=StepStatus(data.get("status", StepStatus.OK.value)),
            elapsed_sec=float(data.get("elapsed_sec", 0.0)),
            args=dict(data.get("args") or {}),
            error=error,
        )


@dataclass(frozen=True)
class ExecutionReport:
    """
    Resumo de uma execução (`run` ou `validate`).

    Campos:
        - ok: False se qualquer erro foi registrado, independente de stop_on_error
        - errors: exceções capturadas, na ordem em que ocorreram
        - n_steps: quantidade de Steps considerados (após max_steps)
        - total_sec: tempo total da execução
    """
    ok: bool
    errors: List[FlowException] = field(default_factory=list)
    n_steps: int = 0
    total_sec: float = 0.0

    @property
    def error_payloads(self) -> List[ErrorPayload]:
        return [exception_to_error(e) for e in self.errors]
