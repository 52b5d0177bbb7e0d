# tests/core/traceability/test_manifest_event_log.py
"""
Testes do Event Log do Manifest.

Os testes asseguram que:
- cada chamada da API adiciona exatamente um evento
- a ordem do log reflete a ordem de chamada
- a API aceita o Manifest como objeto ou como dict serializado
"""

from datetime import datetime, timezone

from fnrender.core.traceability import add_event, create_manifest


T0 = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)


def _manifest():
    return create_manifest(run_id="run-001", started_at=T0, fnrender_version="0.1.0", config_hash="h")


def test_add_event_appends_in_order():
    m = _manifest()
    add_event(m, event_type="files_skipped", ts=T0, payload={"files": ["notes.yaml"]})
    add_event(m, event_type="package_written", ts=T0, invocation_id=None)

    assert [e["event_type"] for e in m.events] == ["files_skipped", "package_written"]
    assert m.events[0] == {
        "event_type": "files_skipped",
        "timestamp": "2026-01-16T12:00:00+00:00",
        "payload": {"files": ["notes.yaml"]},
    }
    assert "invocation_id" not in m.events[1]
    assert "payload" not in m.events[1]


def test_add_event_accepts_dict_manifest():
    data = _manifest().to_dict()
    add_event(data, event_type="results_saved", ts=T0, invocation_id="0:fn", payload={"files": []})

    assert data["events"][-1]["event_type"] == "results_saved"
    assert data["events"][-1]["invocation_id"] == "0:fn"
