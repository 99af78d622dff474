# src/eegflow/core/engine/engine.py
"""
Engine de execução do pipeline do EEGflow.

O `Pipeline` possui uma sequência ordenada de Steps e um Registry, e
expõe dois pontos de entrada com a mesma máquina de estados por Step:

    Gate → Dispatch → Execute → Record

- Gate: avalia `when` contra o contexto atual. Falso → StepRecord
  `skipped`, handler nunca invocado. Guard textual sem avaliador
  (MissingWhenEvaluator) aborta a run inteira.
- Dispatch: resolve `op` no Registry. Operação desconhecida → StepRecord
  `error` (local ao Step).
- Execute: invoca `handler(context, args, meta)` com
  `meta = {step, step_index, validate_only, started_at, logger}`.
- Record: StepRecord `ok` com tempo gasto, ou `error` com ErrorPayload,
  `runtime.last_error` atualizado e erro acumulado no relatório.

Políticas de erro:
    - `run` continua após erros por padrão (stop_on_error=False)
    - `validate` para no primeiro erro por padrão (stop_on_error=True)
    - stop_on_error só atua entre Steps, nunca interrompe um handler

Limites explícitos:
    - Não executa Steps em paralelo
    - Não faz retry
    - Não trata nenhum nome de operação de forma especial
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Set, Tuple, Union

from eegflow.core.errors import ENGINE_CONFIGURATION_ERROR, GUARD_EVALUATION_ERROR, exception_to_error
from eegflow.core.exceptions import (
    FlowException,
    HandlerError,
    InvalidStepSpec,
    InvalidWhenGuard,
    MissingWhenEvaluator,
    UnknownOperation,
)
from eegflow.core.pipeline.context import ExecutionContext, normalize_context
from eegflow.core.pipeline.registry import OperationRegistry
from eegflow.core.pipeline.step import Handler, Step, StepMeta, make_step, spec_entry_fields
from eegflow.core.pipeline.types import ExecutionReport, StepRecord, StepStatus

from .guards import WhenEvaluator, evaluate_when
from .sinks import Sink, stderr_sink, stdout_sink


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Pipeline:
    """
    Sequenciador declarativo de operações (builder + executor).

    Uso:
        pipe = Pipeline(context={"payload": eeg}, registry=reg)
        pipe.add("filter", {"LowCutoff": 1.0}, HighCutoff=30)
        pipe.add("reref", when=lambda ctx: ctx.scratch.get("needs_reref"))
        context, report = pipe.run()

    O contexto pertence a uma única run em andamento; para processar
    várias unidades (ex.: sujeitos) em paralelo, crie um Pipeline e um
    contexto por unidade (ver `eegflow.core.engine.batch`).
    """

    def __init__(
        self,
        context: Any = None,
        registry: Optional[OperationRegistry] = None,
        *,
        info_sink: Optional[Sink] = None,
        error_sink: Optional[Sink] = None,
        when_evaluator: Optional[WhenEvaluator] = None,
    ) -> None:
        self.context: ExecutionContext = normalize_context(context)
        self.registry: OperationRegistry = registry if registry is not None else OperationRegistry()
        self.steps: List[Step] = []

        self._info_sink: Sink = info_sink or stdout_sink
        self._error_sink: Sink = error_sink or stderr_sink
        self._when_evaluator: Optional[WhenEvaluator] = when_evaluator

        self._log(f"=== Pipeline start ({_now().isoformat(timespec='seconds')}) ===")

    # ------------------------------------------------------------------
    # Configuração
    # ------------------------------------------------------------------
    def set_logger(self, info: Optional[Sink] = None, error: Optional[Sink] = None) -> "Pipeline":
        if info is not None:
            self._info_sink = info
        if error is not None:
            self._error_sink = error
        return self

    def set_when_evaluator(self, fn: Optional[WhenEvaluator]) -> "Pipeline":
        self._when_evaluator = fn
        return self

    def register(self, op: str, handler: Handler, *, override: bool = False) -> "Pipeline":
        self.registry.register(op, handler, override=override)
        return self

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------
    def add(
        self,
        op: str,
        *arg_maps: Mapping[str, Any],
        name: Optional[str] = None,
        when: Any = None,
        id: Optional[str] = None,
        **args: Any,
    ) -> "Pipeline":
        """Acrescenta um Step.

        Mappings posicionais são mesclados da esquerda para a direita e os
        argumentos nomeados sobrescrevem todos eles (a última escrita vence).
        `name`, `when` e `id` são reservados; qualquer outro nome vira arg.
        """
        merged: dict = {}
        for extra in arg_maps:
            if not isinstance(extra, Mapping):
                raise InvalidStepSpec(
                    message=f'positional args must be mappings (op "{op}")',
                    details={"op": op, "received": type(extra).__name__},
                )
            merged.update(extra)
        merged.update(args)

        taken = {s.id for s in self.steps}
        step_id = self._claim_id(id, taken)
        self.steps.append(make_step(op, step_id=step_id, name=name, args=merged, when=when))
        return self

    def add_steps(self, steps: Union[Mapping[str, Any], Iterable[Any]]) -> "Pipeline":
        """Substitui a sequência de Steps por uma lista declarativa externa.

        Aceita uma lista de entradas `{id?, name?, op, args?, when?}` (ou
        objetos Step) ou um mapping com a chave `steps`. Campos ausentes
        recebem os mesmos defaults de `add`.
        """
        if isinstance(steps, Mapping):
            if "steps" not in steps:
                raise InvalidStepSpec(
                    message="step spec mapping must contain a 'steps' list",
                    details={"keys": sorted(str(k) for k in steps)},
                )
            steps = steps["steps"]
        if isinstance(steps, (str, bytes)) or not isinstance(steps, Iterable):
            raise InvalidStepSpec(
                message="steps must be a list of step entries",
                details={"received": type(steps).__name__},
            )

        entries = [spec_entry_fields(entry) for entry in steps]

        taken: Set[str] = set()
        for fields in entries:
            if fields["id"] is None:
                continue
            if fields["id"] in taken:
                raise InvalidStepSpec(
                    message=f'Duplicate step id "{fields["id"]}"',
                    details={"id": fields["id"]},
                )
            taken.add(fields["id"])

        built: List[Step] = []
        for fields in entries:
            step_id = fields["id"]
            if step_id is None:
                step_id = self._next_free_id(taken)
                taken.add(step_id)
            built.append(
                make_step(
                    fields["op"],
                    step_id=step_id,
                    name=fields["name"],
                    args=fields["args"],
                    when=fields["when"],
                )
            )

        self.steps = built
        return self

    def _next_free_id(self, taken: Set[str]) -> str:
        while True:
            candidate = self.context.runtime.next_id()
            if candidate not in taken:
                return candidate

    def _claim_id(self, explicit: Optional[str], taken: Set[str]) -> str:
        if explicit in (None, ""):
            return self._next_free_id(taken)
        step_id = str(explicit)
        if step_id in taken:
            raise InvalidStepSpec(
                message=f'Duplicate step id "{step_id}"',
                details={"id": step_id},
            )
        return step_id

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------
    def run(
        self,
        *,
        max_steps: Optional[float] = None,
        stop_on_error: bool = False,
    ) -> Tuple[ExecutionContext, ExecutionReport]:
        return self._execute(validate_only=False, max_steps=max_steps, stop_on_error=stop_on_error)

    def validate(
        self,
        *,
        max_steps: Optional[float] = None,
        stop_on_error: bool = True,
    ) -> Tuple[ExecutionContext, ExecutionReport]:
        return self._execute(validate_only=True, max_steps=max_steps, stop_on_error=stop_on_error)

    def _execute(
        self,
        *,
        validate_only: bool,
        max_steps: Optional[float],
        stop_on_error: bool,
    ) -> Tuple[ExecutionContext, ExecutionReport]:
        t0 = time.perf_counter()
        runtime = self.context.runtime
        runtime.run_started_at = _now()
        runtime.run_finished_at = None
        runtime.validate_only = validate_only

        if max_steps is None or max_steps >= len(self.steps):
            selected = list(self.steps)
        else:
            selected = self.steps[: max(0, int(max_steps))]

        errors: List[FlowException] = []
        try:
            for index, step in enumerate(selected, start=1):
                failure = self._run_step(index, step, validate_only)
                if failure is None:
                    continue
                errors.append(failure)
                if stop_on_error:
                    break
        finally:
            total_sec = time.perf_counter() - t0
            runtime = self.context.runtime
            runtime.total_sec = total_sec
            runtime.run_finished_at = _now()
            runtime.strip_init_record()

        report = ExecutionReport(
            ok=not errors,
            errors=errors,
            n_steps=len(selected),
            total_sec=total_sec,
        )
        banner = "Pipeline validate end" if validate_only else "Pipeline end"
        self._log(f"=== {banner} ({total_sec:.2f}s) ok={int(report.ok)} ===")
        return self.context, report

    def _run_step(self, index: int, step: Step, validate_only: bool) -> Optional[FlowException]:
        context = self.context

        # ---- Gate ----
        try:
            should_run = evaluate_when(step.when, context, self._when_evaluator)
        except (MissingWhenEvaluator, InvalidWhenGuard) as exc:
            self._fail(index, step, exc, 0.0, exc.message)
            raise
        except Exception as exc:
            failure = HandlerError(
                message=f"when guard failed: {exc}",
                details={
                    "handler_code": GUARD_EVALUATION_ERROR,
                    "step": step.name,
                    "op": step.op,
                    "exception_class": exc.__class__.__name__,
                },
            )
            self._fail(index, step, failure, 0.0, f"[FAIL] #{index} {step.name}: {failure.message}")
            return failure

        if not should_run:
            self._log(f"[SKIP] #{index} {step.name} ({step.op})")
            self._record(step, index, StepStatus.SKIPPED)
            return None

        # ---- Dispatch ----
        try:
            handler = self.registry.resolve(step.op)
        except UnknownOperation as exc:
            failure = UnknownOperation(
                message=f'Unknown op "{step.op}" (step "{step.name}").',
                details={"op": step.op, "step": step.name},
                hint=exc.hint,
            )
            self._fail(index, step, failure, 0.0, failure.message)
            return failure

        # ---- Execute ----
        tag = "[VAL] " if validate_only else "[RUN] "
        self._log(f"{tag} #{index} {step.name} ({step.op})")
        meta = StepMeta(
            step=step,
            step_index=index,
            validate_only=validate_only,
            started_at=_now(),
            logger=self._handler_logger(step.op),
        )
        started = time.perf_counter()
        try:
            result = handler(context, dict(step.args), meta)
            if not isinstance(result, ExecutionContext):
                raise HandlerError(
                    message=f'Handler for "{step.op}" returned {type(result).__name__}, expected ExecutionContext',
                    details={
                        "handler_code": ENGINE_CONFIGURATION_ERROR,
                        "step": step.name,
                        "op": step.op,
                        "received": type(result).__name__,
                    },
                    hint="Ajuste o handler para retornar o contexto recebido",
                )
        except Exception as exc:
            elapsed = time.perf_counter() - started
            failure = HandlerError.wrap(exc, step=step.name, op=step.op)
            self._fail(index, step, failure, elapsed, f"[FAIL] #{index} {step.name}: {failure.message}")
            return failure

        # ---- Record ----
        elapsed = time.perf_counter() - started
        self.context = result
        self._log(f"[OK]   #{index} {step.name} in {elapsed:.2f}s")
        self._record(step, index, StepStatus.OK, elapsed)
        return None

    # ------------------------------------------------------------------
    # Auditoria
    # ------------------------------------------------------------------
    def _record(
        self,
        step: Step,
        index: int,
        status: StepStatus,
        elapsed: float = 0.0,
        error: Any = None,
    ) -> None:
        self.context.runtime.steps.append(
            StepRecord(
                id=step.id,
                index=index,
                name=step.name,
                op=step.op,
                status=status,
                elapsed_sec=elapsed,
                args=dict(step.args),
                error=error,
            )
        )

    def _fail(self, index: int, step: Step, exc: FlowException, elapsed: float, line: str) -> None:
        payload = exception_to_error(exc, step=step.name, op=step.op)
        self._err(line)
        self._record(step, index, StepStatus.ERROR, elapsed, payload)
        self.context.runtime.last_error = payload

    def _handler_logger(self, op: str) -> Sink:
        def _emit(message: str) -> None:
            self._log(f"[{op}] {message}")

        return _emit

    def _log(self, message: str) -> None:
        self._info_sink(message)
        self.context.runtime.log.append(message)

    def _err(self, message: str) -> None:
        self._error_sink(message)
        self.context.runtime.err.append(message)
