# src/fnrender/core/resources/__init__.py
"""
Modelo de dados de recursos do fnrender.

Recursos são documentos estruturados opacos (mapas ordenados) com uma
identidade derivada (apiVersion, kind, namespace, name) e uma proveniência
(arquivo de origem + posição). O core nunca interpreta a semântica de um
recurso: campos desconhecidos atravessam o pipeline sem alteração.

Componentes:
    - resource   → Resource, ResourceKey, Provenance e anotações reservadas
    - results    → Severity, FunctionResult, ResultSet
    - collection → ResourceCollection e o formato de fio ResourceList
    - yamlio     → leitura/escrita YAML estrita (PyYAML)
"""
from .collection import ResourceCollection
from .resource import (
    FUNCTION_ANNOTATION,
    INDEX_ANNOTATION,
    PATH_ANNOTATION,
    SHAPE_ANNOTATION,
    Provenance,
    Resource,
    ResourceKey,
)
from .results import FieldLocation, FileLocation, FunctionResult, ResultSet, Severity

__all__ = [
    "ResourceCollection",
    "FUNCTION_ANNOTATION",
    "INDEX_ANNOTATION",
    "PATH_ANNOTATION",
    "SHAPE_ANNOTATION",
    "Provenance",
    "Resource",
    "ResourceKey",
    "FieldLocation",
    "FileLocation",
    "FunctionResult",
    "ResultSet",
    "Severity",
]
