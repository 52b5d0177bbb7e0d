# src/fnrender/core/resources/resource.py
"""
Recurso canônico do fnrender.

Um `Resource` é um documento estruturado genérico (dict ordenado) acompanhado
de sua `Provenance` (arquivo de origem relativo + índice do documento no
arquivo). A identidade `ResourceKey` é derivada por valor do próprio documento.

Transporte da proveniência:
    Ao cruzar a fronteira de uma função, a proveniência é serializada nas
    anotações reservadas `internal.config.kubernetes.io/path` e
    `internal.config.kubernetes.io/index`. Na volta, essas anotações são
    removidas do documento e reconvertidas em `Provenance`. Uma função pode
    reescrever essas anotações para mover um recurso explicitamente.

    Quando `metadata` ou `annotations` não existiam, eram `null` ou `{}`,
    essa forma viaja em `internal.config.kubernetes.io/fnrender-shape` e é
    restaurada na volta: uma função identidade devolve o documento idêntico.

Invariantes:
    - Campos desconhecidos do documento nunca são descartados
    - `Resource` é imutável: alterações produzem novas instâncias
    - A identidade é calculada sempre a partir do documento atual

Limites explícitos:
    - Não interpreta a semântica de nenhum kind
    - Não valida schema de recursos
"""

from __future__ import annotations

import posixpath
from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from fnrender.core.exceptions import CollectionFormatError


FUNCTION_ANNOTATION = "config.kubernetes.io/function"

PATH_ANNOTATION = "internal.config.kubernetes.io/path"
INDEX_ANNOTATION = "internal.config.kubernetes.io/index"

# Forma original de `metadata`/`annotations` quando só a proveniência as preenche.
SHAPE_ANNOTATION = "internal.config.kubernetes.io/fnrender-shape"

# Aceitas apenas na leitura; nunca removidas do documento.
LEGACY_PATH_ANNOTATION = "config.kubernetes.io/path"
LEGACY_INDEX_ANNOTATION = "config.kubernetes.io/index"


@dataclass(frozen=True, order=True)
class ResourceKey:
    """Identidade de um recurso: {apiVersion, kind, namespace, name}."""

    api_version: str
    kind: str
    namespace: str
    name: str

    def to_ref(self) -> Dict[str, str]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "namespace": self.namespace,
        }

    @classmethod
    def from_ref(cls, ref: Dict[str, Any]) -> "ResourceKey":
        return cls(
            api_version=str(ref.get("apiVersion") or ""),
            kind=str(ref.get("kind") or ""),
            namespace=str(ref.get("namespace") or ""),
            name=str(ref.get("name") or ""),
        )

    def __str__(self) -> str:
        ns = f"{self.namespace}/" if self.namespace else ""
        return f"{self.api_version}/{self.kind} {ns}{self.name}"


@dataclass(frozen=True)
class Provenance:
    """Origem de um recurso: caminho relativo (POSIX) e índice no stream."""

    path: Optional[str] = None
    index: Optional[int] = None

    @property
    def directory(self) -> str:
        """Diretório relativo do recurso ("" para a raiz ou sem caminho)."""
        if not self.path:
            return ""
        return posixpath.dirname(posixpath.normpath(self.path)).strip("/")


def _metadata(doc: Dict[str, Any]) -> Dict[str, Any]:
    meta = doc.get("metadata")
    return meta if isinstance(meta, dict) else {}


def _annotations(doc: Dict[str, Any]) -> Dict[str, Any]:
    ann = _metadata(doc).get("annotations")
    return ann if isinstance(ann, dict) else {}


def _container_shape(doc: Dict[str, Any]) -> Optional[str]:
    """Como `metadata.annotations` existia antes de receber a proveniência."""
    if "metadata" not in doc:
        return "metadata-absent"
    meta = doc["metadata"]
    if meta is None:
        return "metadata-null"
    if not isinstance(meta, dict):
        return None
    if "annotations" not in meta:
        return "annotations-absent"
    if meta["annotations"] is None:
        return "annotations-null"
    if meta["annotations"] == {}:
        return "annotations-empty"
    return None


def _restore_shape(document: Dict[str, Any], shape: Optional[str]) -> None:
    meta = document["metadata"]
    if shape == "annotations-empty":
        return
    if shape == "annotations-null":
        meta["annotations"] = None
        return
    del meta["annotations"]
    if shape == "annotations-absent" or meta:
        return
    if shape == "metadata-null":
        document["metadata"] = None
    else:
        del document["metadata"]


def _parse_index(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        index = int(str(value).strip())
    except ValueError as e:
        raise CollectionFormatError(
            "Anotação de índice inválida",
            details={"annotation": INDEX_ANNOTATION, "value": value},
        ) from e
    if index < 0:
        raise CollectionFormatError(
            "Anotação de índice negativa",
            details={"annotation": INDEX_ANNOTATION, "value": value},
        )
    return index


@dataclass(frozen=True)
class Resource:
    """Documento opaco + proveniência."""

    document: Dict[str, Any]
    provenance: Provenance = field(default_factory=Provenance)

    @property
    def key(self) -> ResourceKey:
        meta = _metadata(self.document)
        return ResourceKey(
            api_version=str(self.document.get("apiVersion") or ""),
            kind=str(self.document.get("kind") or ""),
            namespace=str(meta.get("namespace") or ""),
            name=str(meta.get("name") or ""),
        )

    @property
    def annotations(self) -> Dict[str, Any]:
        return dict(_annotations(self.document))

    def copy(self) -> "Resource":
        return Resource(document=deepcopy(self.document), provenance=self.provenance)

    def with_provenance(self, provenance: Provenance) -> "Resource":
        return replace(self, provenance=provenance)

    def to_wire(self) -> Dict[str, Any]:
        """Cópia do documento com a proveniência embutida nas anotações."""
        doc = deepcopy(self.document)
        if self.provenance.path is None and self.provenance.index is None:
            return doc

        shape = _container_shape(doc)
        meta = doc.get("metadata")
        if not isinstance(meta, dict):
            meta = {}
            doc["metadata"] = meta
        ann = meta.get("annotations")
        if not isinstance(ann, dict):
            ann = {}
            meta["annotations"] = ann
        if shape is not None:
            ann[SHAPE_ANNOTATION] = shape

        if self.provenance.path is not None:
            ann[PATH_ANNOTATION] = self.provenance.path
        if self.provenance.index is not None:
            ann[INDEX_ANNOTATION] = str(self.provenance.index)
        return doc

    @classmethod
    def from_wire(cls, doc: Any) -> "Resource":
        """Reconstrói um Resource removendo as anotações internas de proveniência.

        Raises:
            CollectionFormatError: Se o item não for um mapa ou o índice for inválido.
        """
        if not isinstance(doc, dict):
            raise CollectionFormatError(
                "Item da coleção deve ser um mapa",
                details={"received": type(doc).__name__},
            )

        document = deepcopy(doc)
        meta = document.get("metadata")
        ann = meta.get("annotations") if isinstance(meta, dict) else None
        if not isinstance(ann, dict):
            return cls(document=document)

        stripped = PATH_ANNOTATION in ann or INDEX_ANNOTATION in ann
        shape = ann.pop(SHAPE_ANNOTATION, None)
        path = ann.pop(PATH_ANNOTATION, None)
        index = _parse_index(ann.pop(INDEX_ANNOTATION, None))

        if path is None:
            path = ann.get(LEGACY_PATH_ANNOTATION)
            if index is None:
                index = _parse_index(ann.get(LEGACY_INDEX_ANNOTATION))

        if not ann and (stripped or shape is not None):
            _restore_shape(document, shape)

        path = str(path) if path is not None else None
        return cls(document=document, provenance=Provenance(path=path, index=index))
