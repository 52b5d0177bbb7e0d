# src/fnrender/core/config/loader.py
"""
Leitura de arquivos de configuração do fnrender.

Duas origens, sempre mescladas sobre `DEFAULT_CONFIG` por quem consome:

    - `load_config(defaults_path=..., local_path=...)`: par explícito
      defaults (obrigatório) + overrides locais (opcional)
    - `find_package_config(root)`: arquivo opcional versionado junto ao
      pacote, em `<root>/.fnrender/config.{yaml,yml,json}`

YAML é lido com o mesmo `StrictLoader` dos recursos: `on`, `yes` ou datas
não viram bool/date por acidente.

Limites explícitos:
    - Não valida semântica das chaves (ver `settings.resolve_settings`)
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from fnrender.core.resources.yamlio import StrictLoader

from .errors import (
    ConfigSyntaxError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


PACKAGE_CONFIG_DIR = ".fnrender"
PACKAGE_CONFIG_NAMES = ("config.yaml", "config.yml", "config.json")


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Lê um arquivo YAML/JSON cuja raiz deve ser um mapa (vazio → `{}`).

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for YAML/JSON.
        ConfigSyntaxError: Se o conteúdo não puder ser interpretado.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    path = Path(path)
    if not path.is_file():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix or path.name}")

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if suffix == ".json" and text.strip() else yaml.load(text, Loader=StrictLoader)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigSyntaxError(f"{path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(f"{path}: raiz deve ser um mapa, recebido {type(data).__name__}")
    return data


def load_config(
    *,
    defaults_path: Union[str, Path],
    local_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Mescla o arquivo de defaults com o de overrides locais.

    O arquivo local é ignorado quando não existe; quando existe, tem
    prioridade chave a chave (ver `deep_merge`).

    Raises:
        ConfigError: Qualquer falha de `read_config_file` ou de merge.
    """
    effective = read_config_file(defaults_path)
    if local_path is not None and Path(local_path).exists():
        effective = deep_merge(effective, read_config_file(local_path))
    return effective


def find_package_config(root: Union[str, Path]) -> Optional[Path]:
    """Primeiro `config.*` existente em `<root>/.fnrender`, na ordem de `PACKAGE_CONFIG_NAMES`."""
    base = Path(root) / PACKAGE_CONFIG_DIR
    for name in PACKAGE_CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None

