"""Store local de recursos (árvore de diretórios com arquivos YAML).

Lê todos os `*.yaml`/`*.yml` sob a raiz do pacote em uma ResourceCollection,
marcando a proveniência de cada documento (caminho relativo POSIX + índice no
stream), e grava a coleção final de volta.

Decisões:
- Diretórios ocultos (`.git`, `.fnrender`, ...) são ignorados
- Um arquivo com algum documento que não seja recurso (sem apiVersion/kind)
  é ignorado por inteiro e nunca reescrito
- Na escrita, apenas arquivos cujo conteúdo mudou são regravados
- Arquivos cujos recursos foram todos removidos são apagados
- Recursos novos recebem índice pela ordem de chegada no arquivo

Limites explícitos:
- Não preserva comentários nem formatação original de arquivos alterados
- Não busca pacotes remotos
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from fnrender.core.engine.reconcile import default_path
from fnrender.core.exceptions import CollectionFormatError, PersistenceError
from fnrender.core.resources import Provenance, Resource, ResourceCollection
from fnrender.core.resources.yamlio import dump_documents, load_documents


RESOURCE_SUFFIXES = (".yaml", ".yml")


def _is_resource(doc: Any) -> bool:
    return isinstance(doc, dict) and bool(doc.get("apiVersion")) and bool(doc.get("kind"))


@dataclass(frozen=True)
class StoreWriteReport:
    """Resumo de uma escrita: arquivos gravados, apagados e inalterados."""

    collection: ResourceCollection
    written: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)


class LocalResourceStore:
    """Store canônica de um pacote em disco."""

    def __init__(self, *, root: Union[str, Path]):
        self.root = Path(root)
        self.skipped: List[str] = []
        self._loaded: Dict[str, List[Dict[str, Any]]] = {}

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def _resource_files(self) -> List[str]:
        found: List[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            for name in sorted(filenames):
                if name.startswith(".") or not name.endswith(RESOURCE_SUFFIXES):
                    continue
                found.append(name if rel_dir == "." else f"{rel_dir}/{name}")
        return sorted(found)

    def _abs(self, rel_path: str) -> Path:
        normalized = posixpath.normpath(rel_path)
        if normalized.startswith("/") or normalized == ".." or normalized.startswith("../"):
            raise PersistenceError(
                "Caminho de recurso fora da raiz do pacote",
                details={"path": rel_path},
                hint="Funções só podem mover recursos para dentro da árvore do pacote.",
            )
        return self.root / normalized

    # ------------------------------------------------------------------
    # Load / Write
    # ------------------------------------------------------------------
    def load(self) -> ResourceCollection:
        """Carrega a árvore em uma coleção ordenada por (arquivo, índice).

        Raises:
            PersistenceError: Se a raiz não existir ou um arquivo não puder ser lido.
            CollectionFormatError: Se um arquivo contiver YAML inválido.
        """
        if not self.root.is_dir():
            raise PersistenceError(
                "Raiz do pacote não encontrada",
                details={"root": str(self.root)},
            )

        items: List[Resource] = []
        self._loaded = {}
        self.skipped = []
        for rel in self._resource_files():
            try:
                text = (self.root / rel).read_text(encoding="utf-8")
            except OSError as e:
                raise PersistenceError(
                    "Falha ao ler arquivo de recursos",
                    details={"path": rel, "error": str(e)},
                ) from e

            try:
                docs = load_documents(text)
            except CollectionFormatError as e:
                e.details.setdefault("path", rel)
                raise

            if not docs or not all(_is_resource(d) for d in docs):
                self.skipped.append(rel)
                continue

            self._loaded[rel] = docs
            for index, doc in enumerate(docs):
                items.append(Resource(document=doc, provenance=Provenance(path=rel, index=index)).copy())

        return ResourceCollection(items=items)

    def _layout(self, collection: ResourceCollection) -> Dict[str, List[Resource]]:
        by_file: Dict[str, List[Tuple[int, int, Resource]]] = {}
        for order, resource in enumerate(collection.items):
            path = resource.provenance.path or default_path("", resource)
            path = posixpath.normpath(path)
            index = resource.provenance.index
            rank = index if index is not None else len(collection.items) + order
            by_file.setdefault(path, []).append((rank, order, resource))

        layout: Dict[str, List[Resource]] = {}
        for path, entries in by_file.items():
            entries.sort(key=lambda e: (e[0], e[1]))
            layout[path] = [
                r.with_provenance(Provenance(path=path, index=i))
                for i, (_rank, _order, r) in enumerate(entries)
            ]
        return layout

    def write(self, collection: ResourceCollection) -> StoreWriteReport:
        """Grava a coleção, reescrevendo apenas arquivos alterados.

        Raises:
            PersistenceError: Em qualquer falha de escrita ou remoção.
        """
        layout = self._layout(collection)
        written: List[str] = []
        unchanged: List[str] = []
        deleted: List[str] = []

        for rel in sorted(layout):
            docs = [r.document for r in layout[rel]]
            if self._loaded.get(rel) == docs:
                unchanged.append(rel)
                continue
            target = self._abs(rel)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(dump_documents(docs), encoding="utf-8")
            except OSError as e:
                raise PersistenceError(
                    "Falha ao gravar arquivo de recursos",
                    details={"path": rel, "error": str(e)},
                    hint="Nenhuma nova tentativa é feita; verifique o destino e reexecute.",
                ) from e
            written.append(rel)

        for rel in sorted(set(self._loaded) - set(layout)):
            try:
                self._abs(rel).unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise PersistenceError(
                    "Falha ao remover arquivo de recursos",
                    details={"path": rel, "error": str(e)},
                ) from e
            deleted.append(rel)

        self._loaded = {rel: [r.copy().document for r in resources] for rel, resources in layout.items()}

        items = [r for rel in sorted(layout) for r in layout[rel]]
        final = ResourceCollection(
            items=items,
            function_config=collection.function_config,
            results=list(collection.results),
        )
        return StoreWriteReport(collection=final, written=written, deleted=deleted, unchanged=unchanged)
