# tests/core/pipeline/test_run_context_logging.py
"""
Testes do logging estruturado do RunContext.

O RunContext é o único canal de logging do core: cada evento carrega
`run_id` e `invocation_id`, e warnings são agrupados por invocação.

Invariantes:
    - Eventos são anexados na ordem de chamada
    - Campos extras são preservados no evento
    - Contextos diferentes não compartilham estado
"""


def test_log_appends_structured_event(dummy_ctx):
    """
    Verifica que `log` registra um evento completo e ordenado.
    """
    dummy_ctx.log(invocation_id="0:set-labels", level="INFO", message="invocation started", runtime="container")
    dummy_ctx.log(invocation_id="run", level="ERROR", message="run aborted", exit_code=1)

    first, second = dummy_ctx.events
    assert first["run_id"] == "run-test-001"
    assert first["invocation_id"] == "0:set-labels"
    assert first["level"] == "INFO"
    assert first["runtime"] == "container"
    assert "timestamp" in first
    assert second["exit_code"] == 1


def test_warnings_grouped_by_invocation(dummy_ctx):
    dummy_ctx.add_warning(invocation_id="0:a", message="w1")
    dummy_ctx.add_warning(invocation_id="0:a", message="w2")
    dummy_ctx.add_warning(invocation_id="1:b", message="w3")
    assert dummy_ctx.warnings == {"0:a": ["w1", "w2"], "1:b": ["w3"]}


def test_contexts_are_isolated(dummy_ctx, dummy_config):
    from fnrender.core.pipeline.context import RunContext

    other = RunContext(run_id="other", created_at=dummy_ctx.created_at, config=dummy_config)
    dummy_ctx.log(invocation_id="run", level="INFO", message="x")
    assert other.events == []
    assert other.warnings == {}
