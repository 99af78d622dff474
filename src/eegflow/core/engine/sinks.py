# src/eegflow/core/engine/sinks.py
"""
Sinks de log injetáveis no Pipeline.

Um sink é qualquer callable `(message: str) -> None`. O Pipeline sempre
registra as linhas também em `runtime.log` / `runtime.err`, portanto
trocar um sink nunca remove linhas da trilha de auditoria.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Union

Sink = Callable[[str], None]


def stdout_sink(message: str) -> None:
    sys.stdout.write(f"{message}\n")


def stderr_sink(message: str) -> None:
    sys.stderr.write(f"{message}\n")


def null_sink(message: str) -> None:
    return None


def file_sink(path: Union[str, Path]) -> Sink:
    """Sink que acrescenta cada linha ao arquivo (criando diretórios pais)."""
    target = Path(path)

    def _write(message: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as f:
            f.write(f"{message}\n")

    return _write


def tee(*sinks: Sink) -> Sink:
    """Encaminha cada linha para todos os sinks, em ordem."""

    def _fanout(message: str) -> None:
        for sink in sinks:
            sink(message)

    return _fanout
