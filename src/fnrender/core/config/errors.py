# src/fnrender/core/config/errors.py
"""
Exceções canônicas da camada de configuração do fnrender.

Falhas de leitura, merge e validação de configuração herdam de `ConfigError`.
São levantadas antes da descoberta de funções e nunca viram payload de run:
`render_package` as propaga para o chamador.
"""


class ConfigError(Exception):
    """Base dos erros de configuração (nunca falha de função ou de escrita)."""


class DefaultsNotFoundError(ConfigError):
    """O arquivo de defaults indicado explicitamente não existe."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo de configuração desconhecida.

    Aceitas: `.yaml`, `.yml`, `.json`. O formato nunca é adivinhado pelo conteúdo.
    """


class ConfigSyntaxError(ConfigError):
    """Arquivo de configuração com YAML/JSON malformado."""


class InvalidConfigRootTypeError(ConfigError):
    """A raiz do arquivo não é um mapa (lista ou escalar no topo)."""


class ConfigTypeConflictError(ConfigError):
    """
    Override incompatível com o tipo já presente na base.

    Exemplo:
        - base:     {"runtimes": {"container": {"network": false}}}
        - override: {"runtimes": {"container": "podman"}}

    O merge não produz resultado parcial.
    """


class InvalidConfigValueError(ConfigError):
    """
    Valor de configuração com tipo ou faixa inválidos para o core.

    Exemplo:
        - engine.timeout_seconds: -1
        - runtimes.container.extra_args: "--privileged"
    """
