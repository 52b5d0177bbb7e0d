# src/fnrender/core/resources/collection.py
"""
ResourceCollection — a unidade trocada entre estágios do pipeline.

Formato de fio (ResourceList):

apiVersion: config.kubernetes.io/v1
kind: ResourceList
items: [<documento>, ...]
functionConfig: <documento>        (opcional)
results: [...]                     (opcional)

`results` aceita duas formas, preservando a ordem:
    - registros planos de FunctionResult (o que uma função normalmente emite)
    - ResultSets nomeados `{name, results: [...]}`
Registros planos consecutivos são agrupados em um ResultSet sem nome.

Invariantes:
    - A ordem de `items` é preservada em leitura e escrita
    - A conversão para o fio sempre produz cópias profundas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fnrender.core.exceptions import CollectionFormatError

from .resource import Resource
from .results import FunctionResult, ResultSet
from .yamlio import dump_document, load_document


RESOURCE_LIST_API_VERSION = "config.kubernetes.io/v1"
RESOURCE_LIST_KIND = "ResourceList"


def _is_named_set(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and "results" in entry
        and "severity" not in entry
        and "message" not in entry
    )


def _parse_results(raw: Any) -> List[ResultSet]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CollectionFormatError(
            "results deve ser uma lista",
            details={"received": type(raw).__name__},
        )

    sets: List[ResultSet] = []
    pending: List[FunctionResult] = []
    for entry in raw:
        if _is_named_set(entry):
            if pending:
                sets.append(ResultSet(name="", results=tuple(pending)))
                pending = []
            sets.append(ResultSet.from_dict(entry))
        else:
            pending.append(FunctionResult.from_dict(entry))
    if pending:
        sets.append(ResultSet(name="", results=tuple(pending)))
    return sets


@dataclass
class ResourceCollection:
    """Itens ordenados + functionConfig opcional + ResultSets."""

    items: List[Resource] = field(default_factory=list)
    function_config: Optional[Resource] = None
    results: List[ResultSet] = field(default_factory=list)

    def copy(self) -> "ResourceCollection":
        return ResourceCollection(
            items=[r.copy() for r in self.items],
            function_config=self.function_config.copy() if self.function_config else None,
            results=list(self.results),
        )

    def to_wire(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "apiVersion": RESOURCE_LIST_API_VERSION,
            "kind": RESOURCE_LIST_KIND,
            "items": [r.to_wire() for r in self.items],
        }
        if self.function_config is not None:
            out["functionConfig"] = self.function_config.to_wire()
        if self.results:
            out["results"] = [rs.to_dict() for rs in self.results]
        return out

    @classmethod
    def from_wire(cls, data: Any) -> "ResourceCollection":
        """Reconstrói uma coleção a partir do formato ResourceList.

        Raises:
            CollectionFormatError: Se o documento não for um ResourceList válido.
        """
        if not isinstance(data, dict):
            raise CollectionFormatError(
                "ResourceList deve ser um mapa",
                details={"received": type(data).__name__},
            )

        kind = data.get("kind")
        if kind is not None and kind != RESOURCE_LIST_KIND:
            raise CollectionFormatError(
                "Documento não é um ResourceList",
                details={"kind": kind},
            )

        raw_items = data.get("items")
        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise CollectionFormatError(
                "items deve ser uma lista",
                details={"received": type(raw_items).__name__},
            )

        fn_config = data.get("functionConfig")
        return cls(
            items=[Resource.from_wire(doc) for doc in raw_items],
            function_config=Resource.from_wire(fn_config) if fn_config is not None else None,
            results=_parse_results(data.get("results")),
        )

    def to_yaml(self) -> str:
        return dump_document(self.to_wire())

    @classmethod
    def from_yaml(cls, text: str) -> "ResourceCollection":
        if not text or not text.strip():
            raise CollectionFormatError("ResourceList vazio", details={})
        return cls.from_wire(load_document(text))
