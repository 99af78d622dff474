"""
EEGflow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas do EEGflow.

Objetivo:
- Permitir que Registry/Engine/handlers levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Taxonomia:
- Estruturais (abortam sempre): DuplicateOperation, MissingWhenEvaluator,
  InvalidWhenGuard, InvalidStepSpec, InvalidRegistryScope
- Locais ao Step (registradas em StepRecord): UnknownOperation, HandlerError

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Cada classe expõe um `code` estável do catálogo em `core.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from . import errors
from .errors import ErrorPayload


@dataclass(frozen=True, eq=False)
class FlowException(Exception):
    """Base class para exceções internas do EEGflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    CODE: ClassVar[str] = errors.ENGINE_EXECUTION_ERROR

    def __str__(self) -> str:
        return self.message

    @property
    def code(self) -> str:
        return self.CODE

    def to_error(self) -> ErrorPayload:
        return ErrorPayload(
            code=self.code,
            message=self.message,
            details=dict(self.details or {}),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class DuplicateOperation(FlowException):
    """Nome de operação já registrado sem override explícito."""

    CODE: ClassVar[str] = errors.DUPLICATE_OPERATION


@dataclass(frozen=True, eq=False)
class UnknownOperation(FlowException):
    """Operação não registrada no Registry."""

    CODE: ClassVar[str] = errors.UNKNOWN_OPERATION


@dataclass(frozen=True, eq=False)
class InvalidRegistryScope(FlowException):
    """Escopo de registry desconhecido (família inexistente)."""

    CODE: ClassVar[str] = errors.INVALID_REGISTRY_SCOPE


# ---------------------------------------------------------------------------
# Steps / guards
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class InvalidStepSpec(FlowException):
    """Declaração de Step inválida (op ausente, id duplicado, campo desconhecido)."""

    CODE: ClassVar[str] = errors.INVALID_STEP_SPEC


@dataclass(frozen=True, eq=False)
class InvalidWhenGuard(FlowException):
    """Guard `when` de tipo não suportado."""

    CODE: ClassVar[str] = errors.INVALID_WHEN_GUARD


@dataclass(frozen=True, eq=False)
class MissingWhenEvaluator(FlowException):
    """Guard textual sem avaliador configurado. Sempre fatal para a run inteira."""

    CODE: ClassVar[str] = errors.MISSING_WHEN_EVALUATOR


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class HandlerError(FlowException):
    """Erro surgido durante a execução de um handler (encapsulado).

    O `code` é o código do próprio handler, preservado em
    `details["handler_code"]`.
    """

    CODE: ClassVar[str] = errors.HANDLER_ERROR

    @property
    def code(self) -> str:
        return str((self.details or {}).get("handler_code") or self.CODE)

    @classmethod
    def wrap(cls, exc: BaseException, *, step: str, op: str) -> "HandlerError":
        if isinstance(exc, HandlerError):
            return exc
        if isinstance(exc, FlowException):
            handler_code = exc.code
            hint = exc.hint
        else:
            raw = getattr(exc, "code", None)
            handler_code = raw if isinstance(raw, str) and raw else exc.__class__.__name__
            hint = None
        return cls(
            message=str(exc) or exc.__class__.__name__,
            details={
                "handler_code": handler_code,
                "step": step,
                "op": op,
                "exception_class": exc.__class__.__name__,
            },
            hint=hint,
        )


@dataclass(frozen=True, eq=False)
class PayloadMissing(FlowException):
    """Payload de domínio ausente quando a operação o exige."""

    CODE: ClassVar[str] = errors.PAYLOAD_MISSING


@dataclass(frozen=True, eq=False)
class OperationFailed(FlowException):
    """Falha do algoritmo externo invocado por um handler genérico."""

    CODE: ClassVar[str] = errors.OPERATION_FAILED
