# src/fnrender/core/engine/scope.py
"""
Resolução de escopo de uma invocação.

Um recurso está no escopo de uma invocação se o seu diretório de origem é o
diretório âncora ou qualquer subdiretório dele. Os demais recursos formam o
complemento e atravessam a invocação sem alteração.

Regras:
    - A âncora raiz ("") enxerga toda a coleção
    - Recursos sem caminho pertencem ao diretório raiz
    - O escopo é sempre de recurso inteiro (nunca por campo)
    - O recurso declarante está sempre no escopo da própria invocação

Erros:
    - Âncora absoluta ou que escapa da árvore (`..`) → ScopeResolutionError
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from fnrender.core.exceptions import ScopeResolutionError
from fnrender.core.resources import Resource, ResourceCollection


def normalize_anchor(anchor: Optional[str]) -> str:
    """
    Normaliza a âncora para um caminho relativo POSIX sem barras nas pontas.

    Raises:
        ScopeResolutionError: Se a âncora for ausente, absoluta ou escapar da árvore.
    """
    if anchor is None:
        raise ScopeResolutionError(
            "Âncora de invocação ausente",
            details={"anchor": anchor},
            hint="Toda invocação precisa de um diretório âncora (use '' para a raiz).",
        )

    text = str(anchor).replace("\\", "/").strip()
    if text.startswith("/"):
        raise ScopeResolutionError(
            "Âncora de invocação deve ser relativa à raiz do pacote",
            details={"anchor": anchor},
        )
    if text in ("", "."):
        return ""

    normalized = posixpath.normpath(text)
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../"):
        raise ScopeResolutionError(
            "Âncora de invocação escapa da árvore do pacote",
            details={"anchor": anchor, "normalized": normalized},
        )
    return normalized.strip("/")


def in_scope(resource: Resource, anchor: str) -> bool:
    if anchor == "":
        return True
    directory = resource.provenance.directory
    return directory == anchor or directory.startswith(anchor + "/")


@dataclass(frozen=True)
class ScopeSplit:
    """
    Partição da coleção para uma âncora.

    `scoped_positions[i]` é a posição, na coleção original, de `scoped[i]`.
    Desempacotável como `(scoped, complement)`.
    """

    anchor: str
    scoped: List[Resource] = field(default_factory=list)
    complement: List[Resource] = field(default_factory=list)
    scoped_positions: List[int] = field(default_factory=list)

    def __iter__(self) -> Iterator[List[Resource]]:
        yield self.scoped
        yield self.complement


def resolve(collection: ResourceCollection, anchor: Optional[str]) -> ScopeSplit:
    """
    Divide a coleção em (escopo, complemento) para a âncora informada.

    As duas listas preservam a ordem relativa da coleção original e
    referenciam os mesmos objetos Resource (imutáveis).
    """
    normalized = normalize_anchor(anchor)

    scoped: List[Resource] = []
    complement: List[Resource] = []
    positions: List[int] = []
    for pos, resource in enumerate(collection.items):
        if in_scope(resource, normalized):
            scoped.append(resource)
            positions.append(pos)
        else:
            complement.append(resource)

    return ScopeSplit(
        anchor=normalized,
        scoped=scoped,
        complement=complement,
        scoped_positions=positions,
    )
