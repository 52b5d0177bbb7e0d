# tests/core/traceability/test_manifest_round_trip.py
"""
Testes de serialização do Manifest.

Invariantes:
    - `save_manifest` → `load_manifest` preserva o conteúdo integralmente
    - O JSON gravado é determinístico (chaves ordenadas)
"""

import json
from datetime import datetime, timezone

from fnrender.core.traceability import (
    RunManifest,
    add_event,
    create_manifest,
    invocation_finished,
    invocation_started,
    load_manifest,
    run_finished,
    save_manifest,
)


T0 = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)


def test_save_and_load_round_trip(tmp_path):
    m = create_manifest(run_id="run-001", started_at=T0, fnrender_version="0.1.0", config_hash="h", plan_hash="p")
    invocation_started(m, invocation_id="0:fn", name="fn", sequence_index=0, runtime="container", anchor="a", ts=T0)
    invocation_finished(m, invocation_id="0:fn", ts=T0, result={"status": "succeeded", "summary": "ok"})
    add_event(m, event_type="package_written", ts=T0, payload={"written": ["a/x.yaml"], "deleted": []})
    run_finished(m, status="committed", ts=T0, exit_code=0)

    path = tmp_path / "nested" / "manifest.json"
    save_manifest(m, path)
    loaded = load_manifest(path)

    assert isinstance(loaded, RunManifest)
    assert loaded.to_dict() == m.to_dict()

    raw = path.read_text(encoding="utf-8")
    assert raw == json.dumps(m.to_dict(), ensure_ascii=False, indent=2, sort_keys=True)


def test_from_dict_tolerates_missing_sections():
    m = RunManifest.from_dict({"run": {"run_id": "x"}})
    assert m.inputs == {}
    assert m.invocations == {}
    assert m.events == []
