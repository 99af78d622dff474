# tests/conftest.py
"""
Fixtures compartilhados para testes do EEGflow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contextos de execução vazios ou com payload numérico
- handlers de teste com contadores de chamada
- Pipelines silenciosos (sinks descartam as linhas de log)

Decisões arquiteturais:
    - Handlers de teste operam sobre payloads numéricos simples
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Sinks nulos mantêm a saída do pytest limpa; as linhas continuam
      disponíveis em `runtime.log` / `runtime.err`

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O
    - Cada fixture devolve objetos novos (sem estado compartilhado)

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao uso real do projeto.

    Contém defaults por operação (chaves com caixa mista, como nos
    arquivos de configuração de pré-processamento) e a lista de Steps.
    """
    return """\
Filter:
  LowCutoff: 0.5
  HighCutoff: 40
BadChan:
  Method: faster
  Threshold: 3
steps:
  - op: filter
  - op: remove_bad_channels
    args_ref: BadChan
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML local (override) que altera apenas o corte inferior do filtro."""
    return """\
Filter:
  LowCutoff: 1.0
"""


@pytest.fixture
def dummy_config() -> dict:
    return {
        "Filter": {"LowCutoff": 0.5, "HighCutoff": 40},
        "reref": {"Ref": "average"},
    }


# =====================================================
# Context / handler fixtures
# =====================================================

@pytest.fixture
def empty_ctx():
    """ExecutionContext vazio, com todas as partições presentes."""
    from eegflow.core.pipeline.context import ExecutionContext

    return ExecutionContext()


@pytest.fixture
def numeric_ctx(dummy_config):
    """ExecutionContext com payload numérico (1) e config mínima."""
    from eegflow.core.pipeline.context import ExecutionContext

    return ExecutionContext(payload=1, config=dict(dummy_config))


@pytest.fixture
def double_handler():
    """Handler que multiplica `context.payload` por 2."""

    def _double(context, args, meta):
        context.payload = context.payload * 2
        return context

    return _double


@pytest.fixture
def CountingHandler():
    """
    Fixture factory que fornece um handler com contador de chamadas.

    O handler retornado registra, a cada invocação, o flag
    `validate_only` recebido e os args, permitindo verificar quantas
    vezes e em que modo o Engine o chamou.

    Returns:
        type: classe _CountingHandler (instâncias são callables).
    """

    class _CountingHandler:
        def __init__(self, fail_with=None):
            self.calls = 0
            self.seen_validate_only = []
            self.seen_args = []
            self.fail_with = fail_with

        def __call__(self, context, args, meta):
            self.calls += 1
            self.seen_validate_only.append(meta.validate_only)
            self.seen_args.append(dict(args))
            if self.fail_with is not None:
                raise self.fail_with
            return context

    return _CountingHandler


@pytest.fixture
def silent_pipeline():
    """
    Factory de Pipeline com sinks nulos.

    Uso:
        pipe = silent_pipeline(context={"payload": 1}, registry=reg)
    """
    from eegflow.core.engine.engine import Pipeline
    from eegflow.core.engine.sinks import null_sink

    def _make(context=None, registry=None, **kwargs):
        kwargs.setdefault("info_sink", null_sink)
        kwargs.setdefault("error_sink", null_sink)
        return Pipeline(context, registry, **kwargs)

    return _make
