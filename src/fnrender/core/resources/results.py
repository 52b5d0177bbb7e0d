# src/fnrender/core/resources/results.py
"""
Resultados estruturados emitidos por funções de configuração.

Uma função pode reportar, além dos itens transformados, uma lista de
`FunctionResult` (validações, avisos, informações). O orquestrador agrupa os
resultados de cada invocação em um `ResultSet` nomeado.

Formato de fio de um FunctionResult:

severity: error | warn | info      (alias aceito: warning)
message: texto livre
tags: {string: string}
resourceRef: {apiVersion, kind, name, namespace}
file: {path, index}
field: {path, currentValue, suggestedValue}

Decisões:
    - Registro sem `severity` é tratado como `error` (conservador)
    - Severidade desconhecida é erro de formato
    - `Severity` é ordinal: info < warn < error
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from fnrender.core.exceptions import CollectionFormatError

from .resource import ResourceKey


class Severity(str, Enum):
    """Classificação ordinal de um resultado."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        if value is None or value == "":
            return cls.ERROR
        text = str(value).strip().lower()
        if text == "warning":
            text = "warn"
        try:
            return cls(text)
        except ValueError as e:
            raise CollectionFormatError(
                "Severidade de resultado desconhecida",
                details={"severity": value, "allowed": [s.value for s in cls]},
            ) from e


_RANK = {Severity.INFO: 0, Severity.WARN: 1, Severity.ERROR: 2}


def max_severity(severities: Iterable[Severity]) -> Optional[Severity]:
    """Maior severidade da sequência (None quando vazia)."""
    best: Optional[Severity] = None
    for s in severities:
        if best is None or s.rank > best.rank:
            best = s
    return best


@dataclass(frozen=True)
class FileLocation:
    path: str
    index: Optional[int] = None


@dataclass(frozen=True)
class FieldLocation:
    path: str
    current_value: Any = None
    suggested_value: Any = None


def _opt_int(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise CollectionFormatError(
            f"{what} deve ser inteiro",
            details={"received": value},
        ) from e


def _mapping(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CollectionFormatError(
            f"{what} deve ser um mapa",
            details={"received": type(value).__name__},
        )
    return value


@dataclass(frozen=True)
class FunctionResult:
    """Um resultado individual (severidade + mensagem + localizadores opcionais)."""

    severity: Severity
    message: str
    tags: Dict[str, str] = field(default_factory=dict)
    resource_ref: Optional[ResourceKey] = None
    file_location: Optional[FileLocation] = None
    field_location: Optional[FieldLocation] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"severity": self.severity.value, "message": self.message}
        if self.tags:
            out["tags"] = dict(self.tags)
        if self.resource_ref is not None:
            out["resourceRef"] = self.resource_ref.to_ref()
        if self.file_location is not None:
            file_out: Dict[str, Any] = {"path": self.file_location.path}
            if self.file_location.index is not None:
                file_out["index"] = self.file_location.index
            out["file"] = file_out
        if self.field_location is not None:
            field_out: Dict[str, Any] = {"path": self.field_location.path}
            if self.field_location.current_value is not None:
                field_out["currentValue"] = self.field_location.current_value
            if self.field_location.suggested_value is not None:
                field_out["suggestedValue"] = self.field_location.suggested_value
            out["field"] = field_out
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "FunctionResult":
        record = _mapping(data, "Resultado")

        tags = {str(k): str(v) for k, v in _mapping(record.get("tags"), "tags").items()}

        ref = record.get("resourceRef")
        resource_ref = ResourceKey.from_ref(_mapping(ref, "resourceRef")) if ref is not None else None

        file_raw = record.get("file")
        file_location = None
        if file_raw is not None:
            f = _mapping(file_raw, "file")
            file_location = FileLocation(
                path=str(f.get("path") or ""),
                index=_opt_int(f.get("index"), "file.index"),
            )

        field_raw = record.get("field")
        field_location = None
        if field_raw is not None:
            fl = _mapping(field_raw, "field")
            field_location = FieldLocation(
                path=str(fl.get("path") or ""),
                current_value=fl.get("currentValue"),
                suggested_value=fl.get("suggestedValue"),
            )

        return cls(
            severity=Severity.parse(record.get("severity")),
            message=str(record.get("message") or ""),
            tags=tags,
            resource_ref=resource_ref,
            file_location=file_location,
            field_location=field_location,
        )


@dataclass(frozen=True)
class ResultSet:
    """
    Resultados de uma invocação.

    Campos:
        - name: nome derivado da declaração da função
        - results: resultados na ordem emitida pela função
        - sequence_index: posição da invocação no plano (desambigua nomes repetidos)
        - exit_code: status de saída do runtime, quando houve execução
        - stderr: diagnóstico livre emitido pelo runtime
        - status: estado final da invocação (succeeded, failed, deferred)
    """

    name: str
    results: Tuple[FunctionResult, ...] = ()
    sequence_index: Optional[int] = None
    exit_code: Optional[int] = None
    stderr: str = ""
    status: Optional[str] = None

    def max_severity(self) -> Optional[Severity]:
        return max_severity(r.severity for r in self.results)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.sequence_index is not None:
            out["sequenceIndex"] = self.sequence_index
        if self.status is not None:
            out["status"] = self.status
        if self.exit_code is not None:
            out["exitCode"] = self.exit_code
        if self.stderr:
            out["stderr"] = self.stderr
        out["results"] = [r.to_dict() for r in self.results]
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ResultSet":
        raw = _mapping(data, "ResultSet")
        records = raw.get("results") or []
        if not isinstance(records, list):
            raise CollectionFormatError(
                "ResultSet.results deve ser uma lista",
                details={"received": type(records).__name__},
            )
        return cls(
            name=str(raw.get("name") or ""),
            results=tuple(FunctionResult.from_dict(r) for r in records),
            sequence_index=_opt_int(raw.get("sequenceIndex"), "sequenceIndex"),
            exit_code=_opt_int(raw.get("exitCode"), "exitCode"),
            stderr=str(raw.get("stderr") or ""),
            status=raw.get("status"),
        )
