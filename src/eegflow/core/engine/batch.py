# src/eegflow/core/engine/batch.py
"""
Execução em lote: um Pipeline e um contexto por unidade de trabalho.

Cada item (ex.: arquivo de um sujeito) recebe seu próprio Pipeline via
`build(item)`. Nenhum contexto é compartilhado entre unidades; com
`max_workers > 1` as unidades rodam em threads separadas, cada uma com
seu próprio Pipeline.

Falhas de uma unidade (inclusive exceções estruturais como
MissingWhenEvaluator ou erros de config) ficam registradas no
`BatchOutcome` daquela unidade e não afetam as demais.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from eegflow.core.errors import ErrorPayload, exception_to_error
from eegflow.core.pipeline.context import ExecutionContext
from eegflow.core.pipeline.types import ExecutionReport

from .engine import Pipeline

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchOutcome:
    """Resultado de uma unidade do lote."""

    item: Any
    context: Optional[ExecutionContext] = None
    report: Optional[ExecutionReport] = None
    error: Optional[ErrorPayload] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None and self.report.ok


def _run_one(
    item: Any,
    build: Callable[[Any], Pipeline],
    validate_first: bool,
    stop_on_error: bool,
) -> BatchOutcome:
    try:
        pipe = build(item)
        if validate_first:
            context, report = pipe.validate()
            if not report.ok:
                return BatchOutcome(item=item, context=context, report=report)
        context, report = pipe.run(stop_on_error=stop_on_error)
        return BatchOutcome(item=item, context=context, report=report)
    except Exception as exc:
        log.exception("Batch unit %r failed", item)
        return BatchOutcome(item=item, error=exception_to_error(exc, item=repr(item)))


def run_batch(
    items: Iterable[Any],
    build: Callable[[Any], Pipeline],
    *,
    validate_first: bool = False,
    stop_on_error: bool = True,
    max_workers: int = 1,
) -> List[BatchOutcome]:
    """
    Processa várias unidades independentes, preservando a ordem de entrada.

    Args:
        items: unidades de trabalho (qualquer objeto aceito por `build`)
        build: fábrica que devolve um Pipeline novo para cada item
        validate_first: roda `validate()` antes e só executa se ok
        stop_on_error: repassado a `Pipeline.run`
        max_workers: > 1 distribui as unidades em um pool de threads

    Returns:
        List[BatchOutcome]: um resultado por item, na mesma ordem.
    """
    units = list(items)
    if max_workers <= 1 or len(units) <= 1:
        outcomes = [_run_one(item, build, validate_first, stop_on_error) for item in units]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(
                pool.map(lambda item: _run_one(item, build, validate_first, stop_on_error), units)
            )

    n_ok = sum(1 for o in outcomes if o.ok)
    log.info("Batch finished: %d/%d units ok", n_ok, len(outcomes))
    return outcomes
