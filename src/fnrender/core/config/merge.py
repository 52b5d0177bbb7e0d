# src/fnrender/core/config/merge.py
"""
Deep-merge de configuração.

Regras, aplicadas chave a chave:
    - mapa sobre mapa → recursão
    - None em qualquer lado → o override vence (ex.: desligar um timeout)
    - lista → substituída inteira
    - int/float → intercambiáveis (bool nunca conta como número)
    - demais tipos diferentes → `ConfigTypeConflictError` com o caminho da chave

Nenhum input é mutado.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _merge_into(result: Dict[str, Any], override: Dict[str, Any], prefix: str) -> None:
    for key, new in override.items():
        dotted = f"{prefix}{key}"
        if key not in result:
            result[key] = deepcopy(new)
            continue

        old = result[key]
        if isinstance(old, dict) and isinstance(new, dict):
            _merge_into(old, new, f"{dotted}.")
        elif (
            old is None
            or new is None
            or isinstance(new, list)
            or (_is_number(old) and _is_number(new))
            or type(old) is type(new)
        ):
            result[key] = deepcopy(new)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{dotted}': {type(old).__name__} vs {type(new).__name__}"
            )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Retorna `base` com `override` aplicado por cima.

    Raises:
        ConfigTypeConflictError: Se alguma raiz não for dict ou uma chave
            mudar de tipo de forma incompatível.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"deep_merge espera dois dicts, recebido: {type(base).__name__} vs {type(override).__name__}"
        )
    result = deepcopy(base)
    _merge_into(result, override, "")
    return result
