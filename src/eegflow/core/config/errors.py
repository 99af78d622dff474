# src/eegflow/core/config/errors.py
"""
Exceções da camada de configuração do EEGflow.

Todas herdam de `ConfigError`, permitindo que chamadores (CLI, batch,
testes) distingam falhas de configuração de falhas de execução de Steps.
Erros de configuração são sempre fatais: nenhum fallback é aplicado.
"""


class ConfigError(Exception):
    """Base para erros de carregamento, merge e interpretação de configuração."""


class DefaultsNotFoundError(ConfigError):
    """Arquivo de configuração obrigatório (defaults) não encontrado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada.

    Formatos aceitos (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do documento não é um mapping."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"filter": {"LowCutoff": 1.0}}
        - override: {"filter": "off"}
    """


class MissingStepsError(ConfigError):
    """Documento sem lista de Steps (`steps` ou `spec.steps`)."""


class ArgsRefNotFoundError(ConfigError):
    """Step declara `args_ref` apontando para uma seção inexistente da config."""
