# src/fnrender/core/engine/reconcile.py
"""
Reconciliação da resposta de uma função com a coleção completa.

A resposta substitui o subconjunto em escopo; o complemento nunca é tocado.

Regras de correspondência (na ordem):
    1. Proveniência (path, index) de um item em escopo
    2. Chave de identidade {apiVersion, kind, namespace, name}

Efeitos:
    - Item correspondido: ocupa a posição do original e mantém a proveniência
      dele, exceto quando a função reescreveu as anotações de proveniência
    - Item sem correspondência: anexado ao final; sem proveniência recebe
      `<âncora>/<kind>_<name>.yaml` (índice atribuído pelo store)
    - Item em escopo ausente da resposta: removido
    - Item sem proveniência cuja chave já apareceu na mesma resposta substitui
      a cópia anterior e herda a proveniência dela (regenerar é idempotente)
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fnrender.core.resources import Provenance, Resource, ResourceCollection, ResourceKey

from .scope import ScopeSplit


@dataclass(frozen=True)
class MergeOutcome:
    items: List[Resource]
    matched: int
    added: int
    deleted: int


def default_path(anchor: str, resource: Resource) -> str:
    """Caminho padrão de um recurso novo, relativo à raiz do pacote."""
    key = resource.key
    kind = (key.kind or "resource").lower()
    name = key.name or "unnamed"
    filename = f"{kind}_{name}.yaml".replace("/", "_")
    return posixpath.join(anchor, filename) if anchor else filename


def _dedupe(items: List[Resource]) -> List[Resource]:
    out: List[Resource] = []
    slot_by_key: Dict[ResourceKey, int] = {}
    for item in items:
        slot = slot_by_key.get(item.key)
        if item.provenance.path is None and slot is not None:
            out[slot] = item.with_provenance(out[slot].provenance)
            continue
        slot_by_key.setdefault(item.key, len(out))
        out.append(item)
    return out


def merge_response(
    collection: ResourceCollection,
    split: ScopeSplit,
    response_items: List[Resource],
) -> MergeOutcome:
    """
    Monta a nova lista de itens: complemento intacto + resposta reconciliada.

    Args:
        collection (ResourceCollection): Coleção antes da invocação.
        split (ScopeSplit): Partição usada para montar o request.
        response_items (List[Resource]): Itens devolvidos pela função.

    Returns:
        MergeOutcome: Itens resultantes e contagens da reconciliação.
    """
    by_provenance: Dict[Tuple[str, Optional[int]], int] = {}
    by_key: Dict[ResourceKey, List[int]] = {}
    for pos, original in zip(split.scoped_positions, split.scoped):
        prov = original.provenance
        if prov.path is not None:
            by_provenance.setdefault((prov.path, prov.index), pos)
        by_key.setdefault(original.key, []).append(pos)

    replacements: Dict[int, Resource] = {}
    appended: List[Resource] = []

    for item in _dedupe(response_items):
        prov = item.provenance
        slot: Optional[int] = None

        if prov.path is not None:
            candidate = by_provenance.get((prov.path, prov.index))
            if candidate is not None and candidate not in replacements:
                slot = candidate

        if slot is None:
            for candidate in by_key.get(item.key, []):
                if candidate not in replacements:
                    slot = candidate
                    break

        if slot is not None:
            original = collection.items[slot]
            rewritten = prov.path is not None and prov != original.provenance
            replacements[slot] = item if rewritten else item.with_provenance(original.provenance)
            continue

        if prov.path is None:
            item = item.with_provenance(Provenance(path=default_path(split.anchor, item), index=None))
        appended.append(item)

    scoped = set(split.scoped_positions)
    items: List[Resource] = []
    for pos, resource in enumerate(collection.items):
        if pos not in scoped:
            items.append(resource)
        elif pos in replacements:
            items.append(replacements[pos])
    items.extend(appended)

    return MergeOutcome(
        items=items,
        matched=len(replacements),
        added=len(appended),
        deleted=len(scoped) - len(replacements),
    )
