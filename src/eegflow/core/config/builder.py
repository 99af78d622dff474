# src/eegflow/core/config/builder.py
"""
Montagem de Pipeline a partir de um documento de configuração.

Formato esperado (YAML):

    filter:               # defaults por operação (case-insensitive)
      LowCutoff: 0.5
    BadChan:
      Method: faster
    steps:                # ou spec.steps
      - op: load_set
        args: {filename: sub-01.set}
      - op: filter
      - op: remove_bad_channels
        args_ref: BadChan # args copiados de cfg["BadChan"]
        when: "scratch.n_bad > 0"

A configuração resolvida vira `context.config` e seu hash é gravado em
`context.runtime.config_hash`.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from eegflow.core.engine.engine import Pipeline
from eegflow.core.engine.guards import WhenEvaluator
from eegflow.core.engine.sinks import Sink
from eegflow.core.pipeline.context import normalize_context
from eegflow.core.pipeline.registry import OperationRegistry

from .errors import ArgsRefNotFoundError, ConfigError, MissingStepsError
from .hashing import compute_config_hash
from .loader import load_config


def extract_steps(cfg: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Lê a lista de Steps de `cfg["steps"]` ou `cfg["spec"]["steps"]`,
    resolvendo `args_ref`."""
    if isinstance(cfg.get("steps"), list):
        raw = cfg["steps"]
    elif isinstance(cfg.get("spec"), Mapping) and isinstance(cfg["spec"].get("steps"), list):
        raw = cfg["spec"]["steps"]
    else:
        raise MissingStepsError("cfg.steps (or cfg.spec.steps) is required.")

    steps: List[Dict[str, Any]] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise ConfigError(f"step entries must be mappings, got {type(entry).__name__}")
        step = dict(entry)
        ref = step.pop("args_ref", None)
        if ref and not step.get("args"):
            if ref not in cfg:
                raise ArgsRefNotFoundError(f"cfg.{ref} not found (args_ref of op '{step.get('op')}').")
            step["args"] = deepcopy(cfg[ref])
        steps.append(step)
    return steps


def build_pipeline(
    config: Union[Mapping[str, Any], str, Path],
    *,
    registry: Optional[OperationRegistry] = None,
    context: Any = None,
    when_evaluator: Optional[WhenEvaluator] = None,
    local_path: Optional[Union[str, Path]] = None,
    info_sink: Optional[Sink] = None,
    error_sink: Optional[Sink] = None,
) -> Pipeline:
    """
    Constrói um Pipeline configurado a partir de um mapping ou caminho.

    Args:
        config: configuração já resolvida ou caminho para YAML/JSON.
        registry: registry a usar (default: registry vazio).
        context: contexto inicial (payload, scratch...); `config` é substituída.
        when_evaluator: avaliador para guards textuais.
        local_path: overrides locais quando `config` é um caminho.

    Raises:
        ConfigError: documento inválido, sem Steps ou com args_ref quebrado.
        InvalidStepSpec: entrada de Step inválida.
    """
    if isinstance(config, (str, Path)):
        cfg = load_config(defaults_path=config, local_path=local_path)
    elif isinstance(config, Mapping):
        cfg = deepcopy(dict(config))
    else:
        raise ConfigError(f"config must be a mapping or a path, got {type(config).__name__}")

    steps = extract_steps(cfg)

    ctx = normalize_context(context)
    ctx.config = cfg
    ctx.runtime.config_hash = compute_config_hash(cfg)

    pipe = Pipeline(
        ctx,
        registry,
        info_sink=info_sink,
        error_sink=error_sink,
        when_evaluator=when_evaluator,
    )
    return pipe.add_steps(steps)
