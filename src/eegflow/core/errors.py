"""
EEGflow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do EEGflow.
Erros são artefatos de auditoria e fazem parte do contrato operacional
do engine, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Todo erro capturado pelo Pipeline (StepRecord.error, runtime.last_error,
ExecutionReport.errors) pode ser convertido para `ErrorPayload`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do EEGflow.

    Campos:
    - code: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico (ex.: step, op)
    - hint: ação sugerida ao operador (onde corrigir)
    """

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de códigos de erro (v1)
# ---------------------------------------------------------------------------

# Registry
DUPLICATE_OPERATION = "DUPLICATE_OPERATION"
UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
INVALID_REGISTRY_SCOPE = "INVALID_REGISTRY_SCOPE"

# Steps / guards
INVALID_STEP_SPEC = "INVALID_STEP_SPEC"
INVALID_WHEN_GUARD = "INVALID_WHEN_GUARD"
MISSING_WHEN_EVALUATOR = "MISSING_WHEN_EVALUATOR"
GUARD_EVALUATION_ERROR = "GUARD_EVALUATION_ERROR"

# Handlers
HANDLER_ERROR = "HANDLER_ERROR"
PAYLOAD_MISSING = "PAYLOAD_MISSING"
OPERATION_FAILED = "OPERATION_FAILED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


def exception_to_error(exc: BaseException, **details: Any) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - FlowException: já carrega code/message/details/hint.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.

    `details` extras (ex.: step, op) são mesclados sobre os do erro.
    """
    # import tardio: exceptions depende deste módulo
    from .exceptions import FlowException

    if isinstance(exc, FlowException):
        payload = exc.to_error()
        if not details:
            return payload
        merged = dict(payload.details)
        merged.update(details)
        return ErrorPayload(
            code=payload.code,
            message=payload.message,
            details=merged,
            hint=payload.hint,
        )

    merged = {"exception_class": exc.__class__.__name__}
    merged.update(details)
    return ErrorPayload(
        code=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details=merged,
        hint="Verifique o log técnico e a configuração do pipeline",
    )
