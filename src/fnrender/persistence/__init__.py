"""
Adaptadores de persistência do fnrender.

    - LocalResourceStore → lê/grava a árvore de recursos em disco
    - ResultsStore       → grava ResultSets e o Manifest da run
"""
from .local_store import LocalResourceStore, StoreWriteReport
from .results_store import MANIFEST_FILENAME, ResultsStore, artifact_name

__all__ = [
    "LocalResourceStore",
    "StoreWriteReport",
    "MANIFEST_FILENAME",
    "ResultsStore",
    "artifact_name",
]
