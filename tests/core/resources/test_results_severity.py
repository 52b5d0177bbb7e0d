# tests/core/resources/test_results_severity.py
"""
Testes de FunctionResult / ResultSet.

Os testes asseguram que:
- `warning` é aceito como alias de `warn`
- registro sem severidade é tratado como `error`
- severidade desconhecida é erro de formato
- localizadores opcionais (resourceRef, file, field) são preservados
"""

import pytest

from fnrender.core.exceptions import CollectionFormatError
from fnrender.core.resources import FunctionResult, ResourceKey, ResultSet, Severity
from fnrender.core.resources.results import max_severity


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("info", Severity.INFO),
        ("warn", Severity.WARN),
        ("warning", Severity.WARN),
        ("ERROR", Severity.ERROR),
        (None, Severity.ERROR),
        ("", Severity.ERROR),
    ],
)
def test_severity_parse(raw, expected):
    assert Severity.parse(raw) is expected


def test_unknown_severity_raises():
    with pytest.raises(CollectionFormatError):
        Severity.parse("fatal")


def test_max_severity_is_ordinal():
    assert max_severity([]) is None
    assert max_severity([Severity.INFO, Severity.WARN]) is Severity.WARN
    assert max_severity([Severity.ERROR, Severity.INFO]) is Severity.ERROR


def test_function_result_locators_round_trip():
    record = {
        "severity": "warning",
        "message": "replicas too low",
        "tags": {"rule": "min-replicas"},
        "resourceRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": "web", "namespace": "prod"},
        "file": {"path": "apps/web.yaml", "index": 0},
        "field": {"path": "spec.replicas", "currentValue": 1, "suggestedValue": 3},
    }
    r = FunctionResult.from_dict(record)

    assert r.severity is Severity.WARN
    assert r.resource_ref == ResourceKey("apps/v1", "Deployment", "prod", "web")
    assert r.file_location.index == 0
    assert r.field_location.suggested_value == 3

    out = r.to_dict()
    assert out["severity"] == "warn"
    assert out["file"] == {"path": "apps/web.yaml", "index": 0}
    assert out["field"] == {"path": "spec.replicas", "currentValue": 1, "suggestedValue": 3}


def test_malformed_locator_raises():
    with pytest.raises(CollectionFormatError):
        FunctionResult.from_dict({"severity": "info", "message": "x", "file": "apps/web.yaml"})
    with pytest.raises(CollectionFormatError):
        FunctionResult.from_dict({"severity": "info", "message": "x", "file": {"path": "a", "index": "zero"}})


def test_result_set_serialization_keeps_sequence_index():
    rs = ResultSet(
        name="validate",
        results=(FunctionResult(severity=Severity.INFO, message="ok"),),
        sequence_index=3,
        exit_code=0,
        status="succeeded",
    )
    data = rs.to_dict()
    assert data["sequenceIndex"] == 3
    assert ResultSet.from_dict(data) == rs
    assert rs.max_severity() is Severity.INFO
