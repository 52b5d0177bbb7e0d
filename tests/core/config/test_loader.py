# tests/core/config/test_loader.py
"""
Testes da leitura de arquivos de configuração.

Cobre:
- par defaults + overrides locais (`load_config`)
- arquivo versionado no pacote (`find_package_config`)
- rejeição de formatos, sintaxe e raízes inválidas

Limites explícitos:
    - Semântica das chaves fica em test_settings.py
"""

from pathlib import Path

import pytest

from fnrender.core.config import (
    PACKAGE_CONFIG_DIR,
    ConfigSyntaxError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
    find_package_config,
    load_config,
    read_config_file,
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_defaults_raises(tmp_path: Path):
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=tmp_path / "defaults.yaml")


def test_missing_local_keeps_defaults(tmp_path: Path, project_like_config_defaults_yaml):
    defaults = _write(tmp_path / "defaults.yaml", project_like_config_defaults_yaml)

    out = load_config(defaults_path=defaults, local_path=tmp_path / "local.yaml")

    assert out["engine"]["timeout_seconds"] == 300
    assert out["runtimes"]["exec"]["enabled"] is True


def test_local_overrides_defaults(tmp_path: Path, project_like_config_defaults_yaml, project_like_config_local_yaml):
    """
    Invariantes:
        - Overrides locais têm precedência chave a chave
        - Chaves não sobrescritas permanecem
    """
    defaults = _write(tmp_path / "defaults.yaml", project_like_config_defaults_yaml)
    local = _write(tmp_path / "local.yml", project_like_config_local_yaml)

    out = load_config(defaults_path=str(defaults), local_path=str(local))

    assert out["engine"] == {"timeout_seconds": 30, "results_dir": None}
    assert out["runtimes"]["exec"]["enabled"] is False
    assert out["runtimes"]["container"]["binary"] == "docker"


def test_json_and_empty_files(tmp_path: Path):
    assert read_config_file(_write(tmp_path / "c.json", '{"engine": {"timeout_seconds": 5}}')) == {
        "engine": {"timeout_seconds": 5}
    }
    assert read_config_file(_write(tmp_path / "empty.yaml", "")) == {}
    assert read_config_file(_write(tmp_path / "empty.json", "  \n")) == {}


def test_yaml_is_read_strictly(tmp_path: Path):
    """`yes` continua string; a validação de tipo acontece depois, em resolve_settings."""
    out = read_config_file(_write(tmp_path / "c.yaml", "runtimes:\n  exec:\n    enabled: yes\n"))
    assert out["runtimes"]["exec"]["enabled"] == "yes"


@pytest.mark.parametrize(
    "name, text, error",
    [
        ("list.yaml", "- just\n- a list\n", InvalidConfigRootTypeError),
        ("scalar.json", '"engine"', InvalidConfigRootTypeError),
        ("broken.yaml", "engine: [unclosed\n", ConfigSyntaxError),
        ("broken.json", '{"engine": ', ConfigSyntaxError),
        ("config.toml", "[engine]\ntimeout_seconds = 1\n", UnsupportedConfigFormatError),
    ],
)
def test_invalid_files_raise(tmp_path: Path, name, text, error):
    with pytest.raises(error):
        read_config_file(_write(tmp_path / name, text))


def test_find_package_config_prefers_yaml(tmp_path: Path):
    assert find_package_config(tmp_path) is None

    _write(tmp_path / PACKAGE_CONFIG_DIR / "config.json", "{}")
    assert find_package_config(tmp_path).name == "config.json"

    _write(tmp_path / PACKAGE_CONFIG_DIR / "config.yaml", "engine: {}\n")
    assert find_package_config(tmp_path).name == "config.yaml"
