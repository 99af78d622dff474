# src/eegflow/core/engine/guards.py
"""Avaliação do guard `when` de um Step (estágio Gate do Engine)."""

from __future__ import annotations

from typing import Any, Callable, Optional

from eegflow.core.exceptions import InvalidWhenGuard, MissingWhenEvaluator
from eegflow.core.pipeline.context import ExecutionContext

WhenEvaluator = Callable[[str, ExecutionContext], Any]


def evaluate_when(
    when: Any,
    context: ExecutionContext,
    evaluator: Optional[WhenEvaluator] = None,
) -> bool:
    """
    Decide se um Step deve executar.

    Regras:
        - None → sempre executa
        - bool → constante (ex.: `when: false` em documento de config)
        - callable → `bool(when(context))`
        - str → `bool(evaluator(expr, context))`; sem avaliador é fatal

    Raises:
        MissingWhenEvaluator: guard textual sem avaliador configurado.
        InvalidWhenGuard: guard de tipo não suportado.
    """
    if when is None:
        return True
    if isinstance(when, bool):
        return when
    if isinstance(when, str):
        if evaluator is None:
            raise MissingWhenEvaluator(
                message='Step has string "when" but no when-evaluator is set.',
                details={"expression": when},
                hint="Configure Pipeline.set_when_evaluator(fn) ou use um predicado nativo",
            )
        return bool(evaluator(when, context))
    if callable(when):
        return bool(when(context))
    raise InvalidWhenGuard(
        message='"when" must be a callable, string or bool.',
        details={"received": type(when).__name__},
    )
