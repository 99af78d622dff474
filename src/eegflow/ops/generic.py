# src/eegflow/ops/generic.py
"""
Adaptador genérico de operações do EEGflow.

Transforma uma função de processamento simples

    fn(payload, **params) -> payload
    fn(payload, **params) -> (payload, metrics)   # returns_metrics=True

em um handler registrável `(context, args, meta) -> context`.

Ordem de resolução de parâmetros (a última escrita vence):

    defaults  ←  context.op_config(op_name)  ←  args do Step

Fluxo do handler:
    1. resolve parâmetros e aplica aliases `(alias, alvo)`
    2. `pre(params)` e `context_check(context, params)`, se fornecidos
    3. em `validate_only`, retorna o contexto sem tocar no payload
    4. exige payload presente (PayloadMissing) quando `require_payload`
    5. executa `fn`, aplica `post` e registra histórico `success`

Falhas de `fn`/`post` viram `OperationFailed("<op> failed: <msg>")`.

Limites explícitos:
    - Não valida o domínio dos parâmetros (responsabilidade de `pre`/`fn`)
    - Não registra o handler em nenhum Registry
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from eegflow.core.exceptions import OperationFailed, PayloadMissing
from eegflow.core.pipeline.context import ExecutionContext
from eegflow.core.pipeline.history import append_history

PreFn = Callable[[Dict[str, Any]], Dict[str, Any]]
ContextCheckFn = Callable[[ExecutionContext, Dict[str, Any]], Tuple[ExecutionContext, Dict[str, Any]]]
PostFn = Callable[[ExecutionContext, Dict[str, Any], Dict[str, Any]], Tuple[ExecutionContext, Dict[str, Any]]]


def resolve_params(
    context: ExecutionContext,
    op_name: str,
    args: Optional[Mapping[str, Any]],
    defaults: Optional[Mapping[str, Any]] = None,
    aliases: Sequence[Tuple[str, str]] = (),
) -> Dict[str, Any]:
    """Mescla defaults, config da operação e args, e aplica aliases."""
    params: Dict[str, Any] = dict(defaults or {})
    params.update(context.op_config(op_name))
    params.update(args or {})

    for alias, target in aliases:
        if alias in params and target not in params:
            params[target] = params[alias]
    for _, target in aliases:
        params.setdefault(target, None)
    return params


def wrap_operation(
    fn: Callable[..., Any],
    op_name: str,
    *,
    defaults: Optional[Mapping[str, Any]] = None,
    aliases: Sequence[Tuple[str, str]] = (),
    require_payload: bool = True,
    pre: Optional[PreFn] = None,
    context_check: Optional[ContextCheckFn] = None,
    post: Optional[PostFn] = None,
    returns_metrics: bool = False,
) -> Callable[..., ExecutionContext]:
    """
    Constrói um handler a partir de uma função de processamento.

    Args:
        fn: função `fn(payload, **params)`.
        op_name: nome da operação (chave de config e de histórico).
        defaults: parâmetros default da operação.
        aliases: pares `(alias, alvo)`; o alias preenche o alvo ausente.
        require_payload: exige `context.payload` não nulo fora de validate.
        pre: normaliza/valida parâmetros (roda também em validate).
        context_check: valida o contexto (roda também em validate).
        post: pós-processamento `(context, params, metrics) -> (context, metrics)`.
        returns_metrics: `fn` retorna `(payload, metrics)`.

    Returns:
        Handler `(context, args, meta) -> context`.
    """
    alias_pairs = [tuple(pair) for pair in aliases]

    def handler(context: ExecutionContext, args: Dict[str, Any], meta: Any = None) -> ExecutionContext:
        params = resolve_params(context, op_name, args, defaults, alias_pairs)
        if pre is not None:
            params = pre(params)
        if context_check is not None:
            context, params = context_check(context, params)

        if getattr(meta, "validate_only", False):
            return context

        if require_payload and context.payload is None:
            raise PayloadMissing(
                message=f"Payload is empty. Load data before running {op_name}.",
                details={"op": op_name},
                hint="Adicione um Step de carga antes desta operação",
            )

        try:
            result = fn(context.payload, **params)
            if returns_metrics:
                payload, metrics = result
            else:
                payload, metrics = result, {}
            context.payload = payload
            metrics = dict(metrics or {})
            if post is not None:
                context, metrics = post(context, params, metrics)
        except Exception as exc:
            raise OperationFailed(
                message=f"{op_name} failed: {exc}",
                details={"op": op_name, "exception_class": exc.__class__.__name__},
            ) from exc

        append_history(context, op_name, params, "success", metrics)
        if meta is not None and hasattr(meta, "log"):
            meta.log(f"{op_name} done ({len(params)} params)")
        return context

    handler.__name__ = f"{op_name}_handler"
    handler.__qualname__ = handler.__name__
    handler.__doc__ = fn.__doc__
    return handler


def operation(op_name: str, **options: Any) -> Callable[[Callable[..., Any]], Callable[..., ExecutionContext]]:
    """Forma decorator de `wrap_operation`.

    Exemplo:
        @operation("filter", defaults={"LowCutoff": 0.5})
        def filter_eeg(eeg, LowCutoff, **_):
            ...
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., ExecutionContext]:
        return wrap_operation(fn, op_name, **options)

    return decorator
