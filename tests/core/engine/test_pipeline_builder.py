# tests/core/engine/test_pipeline_builder.py
"""
Testes da API de construção do Pipeline (add / add_steps / max_steps).

Os testes asseguram que:
- mappings posicionais são mesclados e kwargs vencem
- ids explícitos duplicados são rejeitados
- o contador automático pula ids já ocupados
- add_steps aceita lista, mapping com `steps` e objetos Step
- max_steps trunca os Steps considerados
- o registro sentinela INIT é removido antes do retorno
"""
import math

import pytest

from eegflow.core.exceptions import InvalidStepSpec, InvalidWhenGuard
from eegflow.core.pipeline.context import RuntimeState
from eegflow.core.pipeline.registry import OperationRegistry
from eegflow.core.pipeline.step import make_step
from eegflow.core.pipeline.types import StepRecord, StepStatus


def test_add_merges_arg_maps_and_kwargs(silent_pipeline):
    pipe = silent_pipeline()
    pipe.add("filter", {"LowCutoff": 0.1, "HighCutoff": 30}, {"LowCutoff": 0.5}, LowCutoff=1.0)

    step = pipe.steps[0]
    assert step.args == {"LowCutoff": 1.0, "HighCutoff": 30}
    assert step.name == "filter_S001"


def test_add_rejects_non_mapping_positional(silent_pipeline):
    with pytest.raises(InvalidStepSpec):
        silent_pipeline().add("filter", [1, 2])


def test_add_rejects_empty_op(silent_pipeline):
    with pytest.raises(InvalidStepSpec):
        silent_pipeline().add("")


def test_add_rejects_invalid_guard(silent_pipeline):
    with pytest.raises(InvalidWhenGuard):
        silent_pipeline().add("filter", when=42)


def test_add_duplicate_explicit_id(silent_pipeline):
    pipe = silent_pipeline().add("filter", id="hp")

    with pytest.raises(InvalidStepSpec):
        pipe.add("reref", id="hp")


def test_auto_id_skips_taken_explicit_ids(silent_pipeline):
    pipe = silent_pipeline().add("a", id="S001").add("b")

    assert [s.id for s in pipe.steps] == ["S001", "S002"]


def test_add_steps_from_mapping_and_step_objects(silent_pipeline):
    pipe = silent_pipeline()
    pipe.add_steps(
        {
            "steps": [
                {"op": "filter", "name": "hp", "args": {"LowCutoff": 1}},
                make_step("reref", step_id="R1"),
                {"op": "ica", "when": False},
            ]
        }
    )

    assert [s.op for s in pipe.steps] == ["filter", "reref", "ica"]
    assert pipe.steps[0].name == "hp"
    assert pipe.steps[1].id == "R1"
    assert pipe.steps[2].when is False


def test_add_steps_counter_skips_explicit_ids(silent_pipeline):
    pipe = silent_pipeline()
    pipe.add_steps([{"op": "a"}, {"op": "b", "id": "S002"}, {"op": "c"}])

    assert [s.id for s in pipe.steps] == ["S001", "S002", "S003"]


def test_add_steps_rejects_duplicate_ids(silent_pipeline):
    with pytest.raises(InvalidStepSpec):
        silent_pipeline().add_steps([{"op": "a", "id": "x"}, {"op": "b", "id": "x"}])


def test_add_steps_rejects_unknown_fields_and_bad_shapes(silent_pipeline):
    pipe = silent_pipeline()
    with pytest.raises(InvalidStepSpec):
        pipe.add_steps([{"op": "a", "depends_on": []}])
    with pytest.raises(InvalidStepSpec):
        pipe.add_steps({"spec": []})
    with pytest.raises(InvalidStepSpec):
        pipe.add_steps("filter")


def test_add_steps_replaces_sequence(silent_pipeline):
    pipe = silent_pipeline().add("a").add("b")
    pipe.add_steps([{"op": "c"}])

    assert [s.op for s in pipe.steps] == ["c"]


@pytest.mark.parametrize("max_steps, expected", [(0, 0), (2, 2), (10, 3), (math.inf, 3)])
def test_max_steps_truncates(silent_pipeline, CountingHandler, max_steps, expected):
    handler = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"a": handler}))
    pipe.add("a").add("a").add("a")

    ctx, report = pipe.run(max_steps=max_steps)

    assert report.n_steps == expected
    assert handler.calls == expected
    assert len(ctx.runtime.steps) == expected


def test_init_record_is_stripped(silent_pipeline, CountingHandler):
    init = StepRecord(id="S000", index=0, name="init", op="init", status=StepStatus.INIT)
    pipe = silent_pipeline(
        context={"runtime": RuntimeState(steps=[init])},
        registry=OperationRegistry({"a": CountingHandler()}),
    )
    pipe.add("a")

    ctx, _ = pipe.run()

    assert [r.status for r in ctx.runtime.steps] == [StepStatus.OK]


def test_run_records_timestamps_and_args(silent_pipeline, CountingHandler):
    handler = CountingHandler()
    pipe = silent_pipeline(registry=OperationRegistry({"a": handler}))
    pipe.add("a", x=1)

    ctx, report = pipe.run()

    rt = ctx.runtime
    assert rt.run_started_at <= rt.run_finished_at
    assert rt.total_sec == report.total_sec >= 0
    assert rt.steps[0].args == {"x": 1}
    assert handler.seen_args == [{"x": 1}]


def test_handler_receives_meta(silent_pipeline):
    seen = {}

    def spy(context, args, meta):
        seen["step"] = meta.step
        seen["index"] = meta.step_index
        seen["started_at"] = meta.started_at
        return context

    pipe = silent_pipeline(registry=OperationRegistry({"spy": spy}))
    pipe.add("a_placeholder", when=False).add("spy", name="probe")

    pipe.run()

    assert seen["step"].name == "probe"
    assert seen["index"] == 2
    assert seen["started_at"] is not None
