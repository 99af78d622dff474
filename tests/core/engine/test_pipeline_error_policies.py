# tests/core/engine/test_pipeline_error_policies.py
"""
Testes das políticas de erro do Pipeline.

Os testes asseguram que:
- `run` continua após erros por padrão e `validate` para no primeiro
- exceções de handlers viram HandlerError com o código do próprio handler
- retorno que não é ExecutionContext é erro local de configuração
- guard nativo que levanta é erro local ao Step
- guard textual sem avaliador aborta a run inteira, após registrar o erro

Invariantes:
    - report.ok=False sempre que qualquer erro é registrado
    - run_finished_at é preenchido mesmo quando a run aborta
"""
import pytest

from eegflow.core.errors import (
    ENGINE_CONFIGURATION_ERROR,
    GUARD_EVALUATION_ERROR,
    MISSING_WHEN_EVALUATOR,
)
from eegflow.core.exceptions import FlowException, HandlerError, InvalidWhenGuard, MissingWhenEvaluator, PayloadMissing
from eegflow.core.pipeline.registry import OperationRegistry
from eegflow.core.pipeline.step import Step
from eegflow.core.pipeline.types import StepStatus


class CodedError(Exception):
    code = "PrepCtx:NoData"


def test_run_defaults_to_continue_on_error(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=RuntimeError("boom"))
    ok = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"fail": failing, "ok": ok}))
    pipe.add("fail").add("ok")

    ctx, report = pipe.run()

    assert report.ok is False
    assert ok.calls == 1
    assert [r.status for r in ctx.runtime.steps] == [StepStatus.ERROR, StepStatus.OK]


def test_validate_defaults_to_stop_on_error(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=RuntimeError("boom"))
    ok = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"fail": failing, "ok": ok}))
    pipe.add("fail").add("ok")

    ctx, report = pipe.validate()

    assert report.ok is False
    assert ok.calls == 0
    assert [r.status for r in ctx.runtime.steps] == [StepStatus.ERROR]


def test_validate_can_continue_when_asked(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=RuntimeError("boom"))
    ok = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"fail": failing, "ok": ok}))
    pipe.add("fail").add("ok")

    _, report = pipe.validate(stop_on_error=False)

    assert report.n_steps == 2
    assert ok.calls == 1


def test_handler_exception_is_wrapped_with_class_name_code(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=ValueError("bad cutoff"))
    pipe = silent_pipeline(registry=OperationRegistry({"filter": failing}))
    pipe.add("filter", name="highpass")

    ctx, report = pipe.run()

    err = report.errors[0]
    assert isinstance(err, HandlerError)
    assert err.code == "ValueError"
    assert err.message == "bad cutoff"

    record = ctx.runtime.steps[0]
    assert record.error.code == "ValueError"
    assert record.error.details["step"] == "highpass"
    assert record.error.details["op"] == "filter"
    assert ctx.runtime.last_error == record.error


def test_handler_code_attribute_is_preserved(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=CodedError("EEG is empty"))
    pipe = silent_pipeline(registry=OperationRegistry({"filter": failing}))
    pipe.add("filter")

    _, report = pipe.run()

    assert report.errors[0].code == "PrepCtx:NoData"


def test_flow_exception_code_is_preserved(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=PayloadMissing(message="no payload"))
    pipe = silent_pipeline(registry=OperationRegistry({"filter": failing}))
    pipe.add("filter")

    _, report = pipe.run()

    assert report.error_payloads[0].code == "PAYLOAD_MISSING"


def test_handler_must_return_context(silent_pipeline):
    def bad(context, args, meta):
        return None

    pipe = silent_pipeline(context={"payload": 7}, registry=OperationRegistry({"bad": bad}))
    pipe.add("bad")

    ctx, report = pipe.run()

    assert report.ok is False
    assert report.errors[0].code == ENGINE_CONFIGURATION_ERROR
    assert ctx.payload == 7


def test_raising_predicate_is_step_local(silent_pipeline, CountingHandler):
    guarded = CountingHandler()
    after = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"a": guarded, "b": after}))
    pipe.add("a", when=lambda ctx: ctx.scratch["missing"]).add("b")

    ctx, report = pipe.run()

    assert report.ok is False
    assert report.errors[0].code == GUARD_EVALUATION_ERROR
    assert guarded.calls == 0
    assert after.calls == 1
    assert [r.status for r in ctx.runtime.steps] == [StepStatus.ERROR, StepStatus.OK]


def test_string_guard_without_evaluator_aborts_run(silent_pipeline, CountingHandler):
    before = CountingHandler()
    after = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"a": before, "b": after}))
    pipe.add("a").add("b", when="scratch.n_bad > 0").add("a")

    with pytest.raises(MissingWhenEvaluator):
        pipe.run(stop_on_error=False)

    runtime = pipe.context.runtime
    assert before.calls == 1
    assert after.calls == 0
    assert runtime.last_error.code == MISSING_WHEN_EVALUATOR
    assert runtime.err
    assert runtime.run_finished_at is not None
    assert [r.status for r in runtime.steps] == [StepStatus.OK, StepStatus.ERROR]


def test_string_guard_with_evaluator(silent_pipeline, CountingHandler):
    handler = CountingHandler()

    def evaluator(expr, ctx):
        return ctx.scratch.get(expr, False)

    pipe = silent_pipeline(
        context={"scratch": {"needs_ica": True}},
        registry=OperationRegistry({"ica": handler}),
        when_evaluator=evaluator,
    )
    pipe.add("ica", when="needs_ica").add("ica", when="needs_reref")

    ctx, report = pipe.run()

    assert report.ok is True
    assert handler.calls == 1
    assert [r.status for r in ctx.runtime.steps] == [StepStatus.OK, StepStatus.SKIPPED]


def test_set_when_evaluator_after_build(silent_pipeline, CountingHandler):
    handler = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"ica": handler}))
    pipe.add("ica", when="always")

    pipe.set_when_evaluator(lambda expr, ctx: True)
    _, report = pipe.run()

    assert report.ok is True
    assert handler.calls == 1


def test_invalid_guard_on_prebuilt_step_aborts(silent_pipeline, CountingHandler):
    pipe = silent_pipeline(registry=OperationRegistry({"a": CountingHandler()}))
    pipe.steps.append(Step(id="S001", name="a", op="a", when=3))

    with pytest.raises(InvalidWhenGuard):
        pipe.run()

    assert pipe.context.runtime.steps[-1].status == StepStatus.ERROR


def test_stop_on_error_never_interrupts_running_handler(silent_pipeline):
    seen = []

    def partial(context, args, meta):
        seen.append("start")
        context.scratch["partial"] = True
        raise RuntimeError("late failure")

    pipe = silent_pipeline(registry=OperationRegistry({"p": partial}))
    pipe.add("p")

    ctx, report = pipe.run(stop_on_error=True)

    assert seen == ["start"]
    assert ctx.scratch["partial"] is True
    assert report.ok is False


def test_report_errors_are_flow_exceptions(silent_pipeline, CountingHandler):
    failing = CountingHandler(fail_with=KeyError("ch"))
    pipe = silent_pipeline(registry=OperationRegistry({"fail": failing}))
    pipe.add("fail").add("missing_op").add("fail", when=lambda ctx: 1 / 0)

    _, report = pipe.run()

    assert len(report.errors) == 3
    assert all(isinstance(e, FlowException) for e in report.errors)
    assert [e.code for e in report.errors] == ["KeyError", "UNKNOWN_OPERATION", GUARD_EVALUATION_ERROR]
