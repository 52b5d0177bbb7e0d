# src/fnrender/core/config/settings.py
"""
Visão tipada da configuração consumida pelo core do fnrender.

A configuração bruta (dict) é mesclada sobre `DEFAULT_CONFIG` e validada
em `EngineSettings`, um objeto imutável lido por Engine, runners e
`render_package`.

Config esperada (exemplo):

engine:
  timeout_seconds: 300
  run_deadline_seconds: null
  results_dir: null        # null: nenhum artefato de resultado é gravado
runtimes:
  container:
    binary: docker
    network: false
    extra_args: []
  exec:
    enabled: true
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import InvalidConfigValueError
from .merge import deep_merge


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "timeout_seconds": 300,
        "run_deadline_seconds": None,
        "results_dir": None,
    },
    "runtimes": {
        "container": {
            "binary": "docker",
            "network": False,
            "extra_args": [],
        },
        "exec": {
            "enabled": True,
        },
    },
}


@dataclass(frozen=True)
class EngineSettings:
    """Configuração efetiva e validada de uma run."""

    timeout_seconds: Optional[float]
    run_deadline_seconds: Optional[float]
    results_dir: Optional[str]
    container_binary: str
    container_network: bool
    container_extra_args: Tuple[str, ...]
    exec_enabled: bool


def _section(cfg: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    node: Any = cfg
    for key in keys:
        node = node.get(key) if isinstance(node, dict) else None
        if node is None:
            return {}
    if not isinstance(node, dict):
        raise InvalidConfigValueError(f"{'.'.join(keys)} must be a mapping")
    return node


def _positive_seconds(value: Any, key: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigValueError(f"{key} must be a number or null")
    if value <= 0:
        raise InvalidConfigValueError(f"{key} must be > 0, got {value}")
    return float(value)


def resolve_settings(config: Optional[Dict[str, Any]] = None) -> EngineSettings:
    """
    Mescla `config` sobre `DEFAULT_CONFIG` e valida as chaves do core.

    Raises:
        ConfigTypeConflictError: Se o override conflitar com os defaults.
        InvalidConfigValueError: Se algum valor tiver tipo ou faixa inválidos.
    """
    effective = deep_merge(DEFAULT_CONFIG, config or {})

    engine = _section(effective, "engine")
    container = _section(effective, "runtimes", "container")
    exec_cfg = _section(effective, "runtimes", "exec")

    results_dir = engine.get("results_dir")
    if results_dir is not None and (not isinstance(results_dir, str) or not results_dir.strip()):
        raise InvalidConfigValueError("engine.results_dir must be a non-empty string or null")

    binary = container.get("binary")
    if not isinstance(binary, str) or not binary.strip():
        raise InvalidConfigValueError("runtimes.container.binary must be a non-empty string")

    network = container.get("network", False)
    if not isinstance(network, bool):
        raise InvalidConfigValueError("runtimes.container.network must be a bool")

    extra_args = container.get("extra_args") or []
    if not isinstance(extra_args, list) or not all(isinstance(a, str) for a in extra_args):
        raise InvalidConfigValueError("runtimes.container.extra_args must be a list of strings")

    exec_enabled = exec_cfg.get("enabled", True)
    if not isinstance(exec_enabled, bool):
        raise InvalidConfigValueError("runtimes.exec.enabled must be a bool")

    return EngineSettings(
        timeout_seconds=_positive_seconds(engine.get("timeout_seconds"), "engine.timeout_seconds"),
        run_deadline_seconds=_positive_seconds(
            engine.get("run_deadline_seconds"), "engine.run_deadline_seconds"
        ),
        results_dir=results_dir,
        container_binary=binary,
        container_network=network,
        container_extra_args=tuple(extra_args),
        exec_enabled=exec_enabled,
    )
