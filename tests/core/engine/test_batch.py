# tests/core/engine/test_batch.py
"""
Testes da execução em lote (um Pipeline e um contexto por unidade).

Invariantes:
    - A lista de resultados preserva a ordem de entrada
    - A falha de uma unidade não afeta as demais
"""
import pytest

from eegflow.core.engine.batch import run_batch
from eegflow.core.engine.engine import Pipeline
from eegflow.core.engine.sinks import null_sink
from eegflow.core.pipeline.registry import OperationRegistry


def _double(context, args, meta):
    if not meta.validate_only:
        context.payload = context.payload * 2
    return context


def _builder(**add_kwargs):
    def build(item):
        if item == "broken":
            raise ValueError("cannot load broken")
        pipe = Pipeline(
            {"payload": item},
            OperationRegistry({"double": _double}),
            info_sink=null_sink,
            error_sink=null_sink,
        )
        return pipe.add("double", **add_kwargs)

    return build


@pytest.mark.parametrize("max_workers", [1, 4])
def test_batch_preserves_order(max_workers):
    outcomes = run_batch([1, 2, 3, 4, 5], _builder(), max_workers=max_workers)

    assert [o.item for o in outcomes] == [1, 2, 3, 4, 5]
    assert [o.context.payload for o in outcomes] == [2, 4, 6, 8, 10]
    assert all(o.ok for o in outcomes)


def test_batch_isolates_failures():
    outcomes = run_batch([1, "broken", 3], _builder())

    assert [o.ok for o in outcomes] == [True, False, True]
    failed = outcomes[1]
    assert failed.context is None
    assert failed.error.code == "ENGINE_EXECUTION_ERROR"
    assert failed.error.details["item"] == "'broken'"


def test_batch_captures_structural_errors():
    outcomes = run_batch([1], _builder(when="scratch.flag"))

    assert outcomes[0].ok is False
    assert outcomes[0].error.code == "MISSING_WHEN_EVALUATOR"


def test_batch_validate_first_skips_run_on_invalid():
    def build(item):
        pipe = Pipeline({"payload": item}, info_sink=null_sink, error_sink=null_sink)
        return pipe.add("unregistered")

    outcomes = run_batch([1], build, validate_first=True)

    outcome = outcomes[0]
    assert outcome.ok is False
    assert outcome.report.ok is False
    assert outcome.context.runtime.validate_only is True


def test_batch_validate_first_then_runs():
    outcomes = run_batch([3], _builder(), validate_first=True)

    assert outcomes[0].context.payload == 6
    assert outcomes[0].context.runtime.validate_only is False
