"""
Rastreabilidade do fnrender — Manifest de run.

API pública:
    - RunManifest          → estrutura canônica do Manifest
    - create_manifest      → criação explícita (Event Log vazio)
    - add_event            → registro explícito de eventos
    - invocation_started   → início de uma invocação
    - invocation_finished  → fim de uma invocação com resultado utilizável
    - invocation_failed    → falha de uma invocação (failed/deferred)
    - run_finished         → estado final da run
    - save_manifest / load_manifest → persistência JSON determinística

Nenhum evento é emitido implicitamente; a ordem do Event Log reflete a ordem
de chamada.
"""

from .manifest import (
    RunManifest,
    create_manifest,
    add_event,
    invocation_started,
    invocation_finished,
    invocation_failed,
    run_finished,
    save_manifest,
    load_manifest,
)

__all__ = [
    "RunManifest",
    "create_manifest",
    "add_event",
    "invocation_started",
    "invocation_finished",
    "invocation_failed",
    "run_finished",
    "save_manifest",
    "load_manifest",
]
