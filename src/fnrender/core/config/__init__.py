# src/fnrender/core/config/__init__.py
"""
Camada de configuração do fnrender.

Este pacote reúne carregamento, merge, validação e hashing da configuração
de uma run de renderização (timeouts, destino de resultados, runtimes).

Responsabilidades do pacote:
    - Carregar arquivos YAML/JSON (defaults + overrides, ou `.fnrender/config.*` do pacote)
    - Resolver a configuração final via deep-merge determinístico
    - Expor uma visão tipada (`EngineSettings`) das chaves consumidas pelo core
    - Gerar hash canônico para o Manifest

Limites explícitos:
    - Não executa funções
    - Não interpreta recursos
"""
from .errors import (
    ConfigError,
    ConfigSyntaxError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import (
    PACKAGE_CONFIG_DIR,
    find_package_config,
    load_config,
    read_config_file,
)
from .merge import deep_merge
from .settings import DEFAULT_CONFIG, EngineSettings, resolve_settings

__all__ = [
    "ConfigError",
    "ConfigSyntaxError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "PACKAGE_CONFIG_DIR",
    "find_package_config",
    "load_config",
    "read_config_file",
    "deep_merge",
    "DEFAULT_CONFIG",
    "EngineSettings",
    "resolve_settings",
]
