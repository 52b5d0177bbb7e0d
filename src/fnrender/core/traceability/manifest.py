# src/fnrender/core/traceability/manifest.py
"""
Manifest de run — registro forense de uma execução do fnrender.

O Manifest consolida, de forma determinística e auditável:
    - metadados da run (run_id, started_at, fnrender_version, status final)
    - hashes de entrada (configuração resolvida, plano de execução)
    - estado incremental de cada invocação (indexado por invocation_id)
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico de todos os timestamps
    - A API aceita o Manifest como objeto ou como dict serializado

Limites explícitos:
    - Não executa funções
    - Não decide políticas de falha
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class RunManifest:
    """
    Manifest de uma run.

    Campos:
        - run: metadados (run_id, started_at, fnrender_version, status, finished_at)
        - inputs: hashes de entrada (config_hash, plan_hash)
        - invocations: estado por invocation_id, na ordem de início
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    invocations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "invocations": {k: dict(v) for k, v in self.invocations.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            invocations={k: dict(v) for k, v in (data.get("invocations", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


ManifestLike = Union[RunManifest, Dict[str, Any]]


def _get_manifest(manifest: ManifestLike) -> Tuple[RunManifest, bool]:
    if isinstance(manifest, RunManifest):
        return manifest, False
    return RunManifest.from_dict(manifest), True


def _sync_back(manifest: ManifestLike, m: RunManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    fnrender_version: str,
    config_hash: str,
    plan_hash: Optional[str] = None,
) -> RunManifest:
    """
    Cria o Manifest inicial de uma run.

    Esta função não emite eventos: o Event Log inicia vazio e só é
    preenchido por `add_event` e pelas funções de invocação.

    Args:
        run_id (str): Identificador único da run.
        started_at (datetime): Início da run.
        fnrender_version (str): Versão do fnrender em uso.
        config_hash (str): Hash da configuração resolvida.
        plan_hash (Optional[str]): Hash do plano de execução, quando conhecido.

    Returns:
        RunManifest: Manifest com `invocations` e `events` vazios.
    """
    return RunManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "fnrender_version": fnrender_version,
            "status": "running",
        },
        inputs={
            "config_hash": config_hash,
            "plan_hash": plan_hash,
        },
        invocations={},
        events=[],
    )


def add_event(
    manifest: ManifestLike,
    *,
    event_type: str,
    ts: datetime,
    invocation_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona exatamente um evento ao Event Log, na ordem de chamada."""
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if invocation_id is not None:
        ev["invocation_id"] = invocation_id
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync_back(manifest, m, is_dict)


def invocation_started(
    manifest: ManifestLike,
    *,
    invocation_id: str,
    name: str,
    sequence_index: int,
    runtime: str,
    anchor: str,
    ts: datetime,
) -> None:
    """Registra o início de uma invocação (status `running`)."""
    m, is_dict = _get_manifest(manifest)

    m.invocations.setdefault(invocation_id, {})
    m.invocations[invocation_id].update(
        {
            "invocation_id": invocation_id,
            "name": name,
            "sequence_index": sequence_index,
            "runtime": runtime,
            "anchor": anchor,
            "status": "running",
            "started_at": _iso(ts),
        }
    )

    add_event(
        m,
        event_type="invocation_started",
        ts=ts,
        invocation_id=invocation_id,
        payload={"runtime": runtime, "anchor": anchor},
    )
    _sync_back(manifest, m, is_dict)


def invocation_finished(
    manifest: ManifestLike,
    *,
    invocation_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra o fim de uma invocação que produziu resultado utilizável.

    `result` segue a forma de `InvocationResult` serializado: status,
    summary, exit_code, items_in, items_out, warnings.
    """
    m, is_dict = _get_manifest(manifest)

    inv = m.invocations.setdefault(invocation_id, {"invocation_id": invocation_id})
    started_iso = inv.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = result.get("status", "succeeded")
    inv.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": result.get("summary"),
            "exit_code": result.get("exit_code"),
            "items_in": result.get("items_in", 0),
            "items_out": result.get("items_out", 0),
            "warnings": list(result.get("warnings", []) or []),
        }
    )

    add_event(
        m,
        event_type="invocation_finished",
        ts=ts,
        invocation_id=invocation_id,
        payload={"status": status, "duration_ms": inv["duration_ms"]},
    )
    _sync_back(manifest, m, is_dict)


def invocation_failed(
    manifest: ManifestLike,
    *,
    invocation_id: str,
    ts: datetime,
    error: Dict[str, Any],
    deferred: bool = False,
) -> None:
    """Registra a falha de uma invocação (`failed` ou `deferred`)."""
    m, is_dict = _get_manifest(manifest)

    status = "deferred" if deferred else "failed"
    inv = m.invocations.setdefault(invocation_id, {"invocation_id": invocation_id})
    started_iso = inv.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts
    inv.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "error": dict(error),
        }
    )

    add_event(
        m,
        event_type="invocation_failed",
        ts=ts,
        invocation_id=invocation_id,
        payload={"status": status, "error_type": error.get("type")},
    )
    _sync_back(manifest, m, is_dict)


def run_finished(
    manifest: ManifestLike,
    *,
    status: str,
    ts: datetime,
    exit_code: int,
    error: Optional[Dict[str, Any]] = None,
) -> None:
    """Registra o estado final da run (`committed` ou `aborted`)."""
    m, is_dict = _get_manifest(manifest)

    m.run.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "exit_code": exit_code,
        }
    )
    if error is not None:
        m.run["error"] = dict(error)

    payload: Dict[str, Any] = {"status": status, "exit_code": exit_code}
    add_event(m, event_type="run_finished", ts=ts, payload=payload)
    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: ManifestLike, path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (chaves ordenadas).

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
        TypeError: Se o conteúdo não for serializável em JSON.
    """
    data = manifest.to_dict() if isinstance(manifest, RunManifest) else manifest
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> RunManifest:
    """
    Carrega um Manifest persistido.

    Raises:
        OSError: Em caso de falha de leitura.
        json.JSONDecodeError: Em caso de JSON inválido.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    return RunManifest.from_dict(data)
