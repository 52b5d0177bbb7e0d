# src/fnrender/core/resources/yamlio.py
"""
Leitura e escrita YAML estrita para documentos de recursos.

O SafeLoader padrão do PyYAML segue YAML 1.1 e converteria silenciosamente
valores como `on`, `yes`, `2024-01-01` ou `22:22` em bool/date/int. Isso
altera campos que o orquestrador não conhece, então o loader daqui:

- aceita apenas `true`/`false` como booleanos
- não resolve timestamps implícitos
- aceita inteiros apenas em decimal ou hexadecimal

A escrita preserva a ordem das chaves e usa blocos literais (`|`) para
strings multilinha.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List

import yaml

from fnrender.core.exceptions import CollectionFormatError


_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_STR_TAG = "tag:yaml.org,2002:str"


class StrictLoader(yaml.SafeLoader):
    """SafeLoader com resolução implícita restrita."""


def _strict_resolvers():
    dropped = {_BOOL_TAG, _INT_TAG, _TIMESTAMP_TAG}
    resolvers = {}
    for first, entries in yaml.SafeLoader.yaml_implicit_resolvers.items():
        kept = [(tag, rx) for tag, rx in entries if tag not in dropped]
        if kept:
            resolvers[first] = kept
    return resolvers


StrictLoader.yaml_implicit_resolvers = _strict_resolvers()
StrictLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
StrictLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9_]*)|0x[0-9a-fA-F_]+)$"),
    list("-+0123456789"),
)


class BlockDumper(yaml.SafeDumper):
    """SafeDumper que emite strings multilinha como bloco literal."""


def _represent_str(dumper: yaml.SafeDumper, data: str):
    if "\n" in data:
        return dumper.represent_scalar(_STR_TAG, data, style="|")
    return dumper.represent_str(data)


BlockDumper.add_representer(str, _represent_str)


def load_document(text: str) -> Any:
    """Carrega um único documento YAML (ou JSON)."""
    try:
        return yaml.load(text, Loader=StrictLoader)
    except yaml.YAMLError as e:
        raise CollectionFormatError(
            "Documento YAML inválido",
            details={"error": str(e)},
        ) from e


def load_documents(text: str) -> List[Any]:
    """Carrega um stream multi-documento, descartando documentos vazios."""
    try:
        return [doc for doc in yaml.load_all(text, Loader=StrictLoader) if doc is not None]
    except yaml.YAMLError as e:
        raise CollectionFormatError(
            "Stream YAML inválido",
            details={"error": str(e)},
        ) from e


def dump_document(doc: Any) -> str:
    return yaml.dump(
        doc,
        Dumper=BlockDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def dump_documents(docs: Iterable[Any]) -> str:
    return yaml.dump_all(
        list(docs),
        Dumper=BlockDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        explicit_start=False,
    )
