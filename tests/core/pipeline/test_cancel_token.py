# tests/core/pipeline/test_cancel_token.py
"""Testes do CancelToken e da interpretação de respostas de runners."""

import time

from fnrender.core.pipeline.runner import CancelToken, parse_response


def test_token_without_deadline_is_not_cancelled():
    token = CancelToken()
    assert token.cancelled is False
    assert token.remaining() is None
    assert token.reason is None


def test_explicit_cancel_keeps_first_reason():
    token = CancelToken()
    token.cancel("operator")
    token.cancel("second")
    assert token.cancelled is True
    assert token.reason == "operator"


def test_deadline_expires():
    token = CancelToken(deadline_seconds=0.01)
    time.sleep(0.05)
    assert token.cancelled is True
    assert token.reason == "deadline exceeded"
    assert token.remaining() == 0.0


def test_parse_response_well_formed():
    resp = parse_response(0, "kind: ResourceList\nitems:\n- kind: ConfigMap\n  metadata: {name: a}\n", "note")
    assert resp.well_formed
    assert resp.collection.items[0].key.name == "a"
    assert resp.stderr == "note"


def test_parse_response_garbage_is_not_well_formed():
    resp = parse_response(1, "{not: [valid")
    assert not resp.well_formed
    assert resp.collection is None
    assert resp.exit_code == 1
    assert resp.parse_error
