# src/eegflow/core/pipeline/registry.py
"""
Registro de operações do pipeline.

Este módulo define o `OperationRegistry`, a tabela nome → handler
consultada pelo Engine no estágio de Dispatch, e `build_registry`,
que compõe registries escopados a partir de famílias de operações
(ex.: `prep`, `analysis`).

Responsabilidades do módulo:
    - Registrar handlers com detecção explícita de duplicidade
    - Resolver nomes de operação (UnknownOperation quando ausente)
    - Inserir aliases qualificados sem colidir com nomes primários
    - Compor registries escopados por família

Decisões arquiteturais:
    - Duplicidade sem override é erro fatal de configuração
    - Aliases nunca sobrescrevem um nome já vinculado (idempotentes)
    - A ordem de registro é preservada para listagem

Invariantes:
    - Cada nome está vinculado a exatamente um handler
    - Um alias resolve para o mesmo objeto handler do nome curto

Limites explícitos:
    - Não executa handlers
    - Não conhece Steps nem contexto
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Union

from eegflow.core.exceptions import DuplicateOperation, InvalidRegistryScope, UnknownOperation

from .step import Handler

log = logging.getLogger(__name__)


class OperationRegistry:
    """
    Tabela canônica nome-de-operação → handler.

    Exemplo:
        reg = OperationRegistry()
        reg.register("filter", filter_handler)
        reg.alias("filter", "prep.filter")
        reg.resolve("prep.filter") is filter_handler  # True
    """

    def __init__(self, handlers: Optional[Mapping[str, Handler]] = None) -> None:
        self._handlers: Dict[str, Handler] = {}
        self._aliases: Set[str] = set()
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    # -----------------------------
    # Registro
    # -----------------------------
    def register(self, name: str, handler: Handler, *, override: bool = False) -> "OperationRegistry":
        if not isinstance(name, str) or not name.strip():
            raise ValueError("operation name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler for '{name}' must be callable, got {type(handler).__name__}")

        if name in self._handlers and not override:
            raise DuplicateOperation(
                message=f'Operation "{name}" already registered.',
                details={"op": name},
                hint="Use override=True para substituir explicitamente o handler",
            )

        self._handlers[name] = handler
        self._aliases.discard(name)
        return self

    def resolve(self, name: str) -> Handler:
        try:
            return self._handlers[name]
        except KeyError:
            raise UnknownOperation(
                message=f'Unknown op "{name}".',
                details={"op": name, "registered": sorted(self._handlers)},
                hint="Registre a operação ou corrija o campo `op` do Step",
            ) from None

    # -----------------------------
    # Aliases
    # -----------------------------
    def alias(self, short_name: str, qualified_name: str) -> bool:
        """Vincula `qualified_name` ao handler de `short_name`, se livre.

        Returns:
            bool: True se o alias foi criado; False se o nome curto não
            existe ou o nome qualificado já estava vinculado.
        """
        if short_name not in self._handlers or qualified_name in self._handlers:
            return False
        self._handlers[qualified_name] = self._handlers[short_name]
        self._aliases.add(qualified_name)
        return True

    def alias_prefix(self, prefix: str, names: Optional[Iterable[str]] = None) -> List[str]:
        """Cria `<prefix>.<nome>` para cada nome curto (sem ponto) registrado."""
        candidates = list(names) if names is not None else self.primary_names()
        created: List[str] = []
        for short_name in candidates:
            if "." in short_name:
                continue
            qualified = f"{prefix}.{short_name}"
            if self.alias(short_name, qualified):
                created.append(qualified)
        return created

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    # -----------------------------
    # Composição
    # -----------------------------
    def merge(self, other: "OperationRegistry") -> "OperationRegistry":
        """Retorna um novo registry com os vínculos de ambos.

        Um mesmo nome vinculado ao mesmo handler nos dois lados é aceito;
        handlers diferentes para o mesmo nome levantam DuplicateOperation.
        """
        merged = OperationRegistry()
        for source in (self, other):
            for name, handler in source._handlers.items():
                if name in merged._handlers:
                    if merged._handlers[name] is handler:
                        continue
                    raise DuplicateOperation(
                        message=f'Operation "{name}" bound to different handlers in merged registries.',
                        details={"op": name},
                    )
                merged._handlers[name] = handler
                if source.is_alias(name):
                    merged._aliases.add(name)
        return merged

    # -----------------------------
    # Inspeção
    # -----------------------------
    def names(self) -> List[str]:
        return list(self._handlers)

    def primary_names(self) -> List[str]:
        return [n for n in self._handlers if n not in self._aliases]

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handlers))

    def __repr__(self) -> str:
        return f"OperationRegistry(n_ops={len(self._handlers)}, n_aliases={len(self._aliases)})"


def _resolve_scope(scope: Union[str, Sequence[str]], available: Sequence[str]) -> List[str]:
    if isinstance(scope, str):
        key = scope.strip().lower()
        if key in ("all", "both"):
            return list(available)
        requested = [key]
    else:
        requested = [str(s).strip().lower() for s in scope]

    lowered = {name.lower(): name for name in available}
    unknown = [s for s in requested if s not in lowered]
    if unknown:
        raise InvalidRegistryScope(
            message=f'Unknown scope {unknown}. Use: all|{"|".join(available)}.',
            details={"requested": requested, "available": list(available)},
        )
    return [lowered[s] for s in requested]


def build_registry(
    families: Mapping[str, Mapping[str, Handler]],
    scope: Union[str, Sequence[str]] = "all",
) -> OperationRegistry:
    """
    Constrói um registry escopado a partir de famílias de operações.

    Política:
        - Registro estrito: o mesmo nome em duas famílias incluídas é erro
        - Após o registro, cada nome curto de uma família ganha o alias
          `<família>.<nome>` quando o nome qualificado está livre

    Args:
        families: mapa família → {op: handler}
        scope: "all"/"both", um nome de família ou uma lista de nomes

    Raises:
        InvalidRegistryScope: se o escopo pedir família inexistente.
        DuplicateOperation: se duas famílias incluídas declararem o mesmo op.
    """
    selected = _resolve_scope(scope, list(families))

    reg = OperationRegistry()
    for family in selected:
        for op_name, handler in families[family].items():
            reg.register(op_name, handler)

    for family in selected:
        reg.alias_prefix(family, names=list(families[family]))

    log.info(
        "Registry initialized with %d operations (scope: %s).",
        len(reg),
        scope if isinstance(scope, str) else ",".join(selected),
    )
    return reg
