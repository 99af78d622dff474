# src/eegflow/core/pipeline/step.py
"""
Contrato canônico de Step e de handler do EEGflow.

Um Step é um registro declarativo e imutável de uma unidade de trabalho:
identificador, rótulo, nome da operação, argumentos e guard opcional.
Quem executa o trabalho é o handler registrado para a operação; o Step
apenas descreve o que deve ser feito.

Formato de intercâmbio (consumido por `Pipeline.add_steps`):

    - op: filter            # obrigatório
      id: S010              # opcional
      name: highpass        # opcional
      args: {LowCutoff: 1}  # opcional
      when: "<expr>"        # opcional

Assinatura de handler:

    handler(context, args, meta) -> context

Limites explícitos:
    - Não valida argumentos (responsabilidade de cada handler)
    - Não executa handlers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Protocol, Union

from eegflow.core.exceptions import InvalidStepSpec, InvalidWhenGuard

if TYPE_CHECKING:
    from .context import ExecutionContext


Predicate = Callable[["ExecutionContext"], Any]
Guard = Union[None, bool, str, Predicate]

SPEC_KEYS = frozenset({"id", "name", "op", "args", "when"})


@dataclass(frozen=True)
class Step:
    """
    Unidade declarativa de trabalho do pipeline (imutável após criada).

    Campos:
        - id: identificador único na sequência do Pipeline
        - name: rótulo humano (default: "<op>_<id>")
        - op: chave no Registry
        - args: argumentos livres, validados pelo próprio handler
        - when: guard opcional (None, bool, predicado ou expressão textual)
    """
    id: str
    name: str
    op: str
    args: Dict[str, Any] = field(default_factory=dict)
    when: Guard = None


@dataclass(frozen=True)
class StepMeta:
    """Metadados entregues ao handler em cada invocação."""

    step: Step
    step_index: int
    validate_only: bool
    started_at: datetime
    logger: Callable[[str], None]

    def log(self, message: str) -> None:
        self.logger(message)


class Handler(Protocol):
    """Contrato mínimo de uma operação registrável."""

    def __call__(
        self,
        context: "ExecutionContext",
        args: Dict[str, Any],
        meta: StepMeta,
    ) -> "ExecutionContext":
        ...


def check_guard(when: Any, *, op: str) -> Guard:
    if when is None or isinstance(when, (bool, str)) or callable(when):
        return when
    raise InvalidWhenGuard(
        message=f'"when" must be a callable, string or bool (op "{op}")',
        details={"op": op, "received": type(when).__name__},
        hint="Use um predicado (context) -> bool ou uma expressão textual com avaliador configurado",
    )


def make_step(
    op: Any,
    *,
    step_id: str,
    name: Optional[str] = None,
    args: Optional[Mapping[str, Any]] = None,
    when: Any = None,
) -> Step:
    if not isinstance(op, str) or not op.strip():
        raise InvalidStepSpec(
            message="op is required and must be a non-empty string",
            details={"op": op, "id": step_id},
        )
    if args is not None and not isinstance(args, Mapping):
        raise InvalidStepSpec(
            message=f'args must be a mapping (op "{op}")',
            details={"op": op, "id": step_id, "received": type(args).__name__},
        )
    return Step(
        id=step_id,
        name=str(name) if name else f"{op}_{step_id}",
        op=op,
        args=dict(args or {}),
        when=check_guard(when, op=op),
    )


def spec_entry_fields(entry: Any) -> Dict[str, Any]:
    """Normaliza uma entrada do formato de intercâmbio em campos de Step.

    Aceita `Step` ou mapping. Chaves fora de {id, name, op, args, when}
    são rejeitadas explicitamente.
    """
    if isinstance(entry, Step):
        return {
            "id": entry.id,
            "name": entry.name,
            "op": entry.op,
            "args": entry.args,
            "when": entry.when,
        }
    if not isinstance(entry, Mapping):
        raise InvalidStepSpec(
            message="step entry must be a mapping",
            details={"received": type(entry).__name__},
        )
    unknown = sorted(set(entry.keys()) - SPEC_KEYS)
    if unknown:
        raise InvalidStepSpec(
            message=f"Unknown step fields: {unknown}",
            details={"unknown": unknown, "op": entry.get("op")},
            hint="Campos aceitos: id, name, op, args, when",
        )
    step_id = entry.get("id")
    return {
        "id": str(step_id) if step_id not in (None, "") else None,
        "name": entry.get("name") or None,
        "op": entry.get("op"),
        "args": entry.get("args") or {},
        "when": entry.get("when"),
    }
