# src/fnrender/core/engine/planner.py
"""
Descoberta de funções e planejamento da execução.

`discover(collection)` percorre a coleção, reconhece as anotações de função,
interpreta cada uma em uma `FunctionDeclaration` e produz um `ExecutionPlan`
determinístico.

Ordenação:
    1. Diretórios são visitados em profundidade, filhos antes do próprio
       diretório (pós-ordem); funções de um diretório observam a saída já
       transformada dos escopos aninhados
    2. Irmãos são visitados em ordem lexical do nome do diretório
    3. Dentro de um diretório: nome do arquivo, depois índice do documento

Decisões arquiteturais:
    - Qualquer erro de interpretação aborta a descoberta (nenhum plano parcial)
    - Todos os erros são validados antes da ordenação
    - O plano é imutável depois de produzido

Limites explícitos:
    - Não executa funções
    - Não lê nem escreve arquivos
"""

from __future__ import annotations

import posixpath
from typing import Dict, List, Tuple

from fnrender.core.config.hashing import fingerprint
from fnrender.core.exceptions import ScopeResolutionError
from fnrender.core.pipeline.declaration import parse_declaration
from fnrender.core.pipeline.types import (
    ContainerRuntime,
    ExecutionPlan,
    FunctionDeclaration,
    FunctionInvocation,
)
from fnrender.core.resources import Resource, ResourceCollection

from .scope import normalize_anchor


# (âncora, arquivo, índice do documento, posição na coleção, declaração)
_Found = Tuple[str, str, int, int, FunctionDeclaration]


def _split_dir(directory: str) -> Tuple[str, ...]:
    return tuple(p for p in directory.split("/") if p)


def _post_order(directories: List[str]) -> List[str]:
    """Diretórios em pós-ordem (filhos lexicais antes do pai)."""
    tree: Dict[Tuple[str, ...], set] = {(): set()}
    for directory in directories:
        parts = _split_dir(directory)
        for depth in range(len(parts)):
            parent, child = parts[:depth], parts[: depth + 1]
            tree.setdefault(parent, set()).add(child)
            tree.setdefault(child, set())

    order: List[str] = []

    def visit(node: Tuple[str, ...]) -> None:
        for child in sorted(tree[node], key=lambda c: c[-1]):
            visit(child)
        order.append("/".join(node))

    visit(())
    return order


def _locate(resource: Resource) -> Tuple[str, str]:
    path = resource.provenance.path
    if not path:
        raise ScopeResolutionError(
            "Recurso declarante sem caminho de origem",
            details={"resource": str(resource.key)},
            hint="A âncora de uma função é o diretório do recurso que a declara; "
            "garanta que o store marque a proveniência de todos os recursos.",
        )
    anchor = normalize_anchor(posixpath.dirname(path.replace("\\", "/")))
    return anchor, posixpath.basename(path)


def discover(collection: ResourceCollection) -> ExecutionPlan:
    """
    Produz o plano de execução da coleção.

    Args:
        collection (ResourceCollection): Coleção completa carregada do store.

    Returns:
        ExecutionPlan: Invocações em ordem determinística, com `sequence_index`
        igual à posição no plano.

    Raises:
        DeclarationParseError: Se alguma anotação de função for malformada.
        ScopeResolutionError: Se um recurso declarante não tiver âncora válida.
    """
    found: List[_Found] = []
    for position, resource in enumerate(collection.items):
        declaration = parse_declaration(resource)
        if declaration is None:
            continue
        anchor, filename = _locate(resource)
        index = resource.provenance.index
        found.append((anchor, filename, index if index is not None else -1, position, declaration))

    by_dir: Dict[str, List[_Found]] = {}
    for entry in found:
        by_dir.setdefault(entry[0], []).append(entry)

    invocations: List[FunctionInvocation] = []
    for directory in _post_order(list(by_dir)):
        entries = sorted(by_dir.get(directory, []), key=lambda e: (e[1], e[2], e[3]))
        for anchor, _filename, _index, _position, declaration in entries:
            invocations.append(
                FunctionInvocation(
                    declaration=declaration,
                    anchor=anchor,
                    sequence_index=len(invocations),
                )
            )

    return ExecutionPlan(invocations=tuple(invocations))


def plan_hash(plan: ExecutionPlan) -> str:
    """SHA-256 estável do plano (ids de invocação, âncoras e runtimes)."""
    entries = []
    for inv in plan:
        runtime = inv.declaration.runtime
        ref = runtime.image if isinstance(runtime, ContainerRuntime) else runtime.path
        entries.append(
            {
                "invocation_id": inv.invocation_id,
                "anchor": inv.anchor,
                "runtime": runtime.kind,
                "ref": ref,
                "defer_failure": inv.declaration.defer_failure,
            }
        )
    return fingerprint(entries)
