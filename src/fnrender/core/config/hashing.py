# src/fnrender/core/config/hashing.py
"""
Fingerprints determinísticos registrados no Manifest.

`inputs.config_hash` identifica a configuração efetiva da run e
`inputs.plan_hash` (ver `core.engine.planner.plan_hash`) o plano de funções.
Os dois usam a mesma serialização:

    - JSON com chaves ordenadas e separadores compactos, UTF-8 sem escapes
    - SHA-256 em hexadecimal (64 caracteres)
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def fingerprint(value: Any) -> str:
    """SHA-256 do JSON canônico de `value` (qualquer estrutura JSON)."""
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Fingerprint da configuração efetiva (defaults + overrides já mesclados).

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(f"config_hash espera um dict, recebido: {type(config).__name__}")
    return fingerprint(config)
