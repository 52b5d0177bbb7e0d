# src/fnrender/core/pipeline/context.py
"""
Contexto de execução de uma run do fnrender.

O `RunContext` carrega a identidade da run, a configuração resolvida e o
log estruturado de eventos. É o único canal de logging do core: Engine e
`render_package` registram eventos aqui, e o Manifest recebe a versão
persistível desses eventos.

Invariantes:
    - Eventos sempre incluem `run_id` e `invocation_id`
    - Warnings são agrupados por `invocation_id`
    - O contexto é isolado por run (sem estado global)

Limites explícitos:
    - Não executa funções
    - Não persiste dados
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


RUN_SCOPE = "run"


@dataclass
class RunContext:
    """Identidade + configuração + eventos e warnings de uma run."""

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    def log(self, *, invocation_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "invocation_id": invocation_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, invocation_id: str, message: str) -> None:
        if invocation_id not in self.warnings:
            self.warnings[invocation_id] = []
        self.warnings[invocation_id].append(message)
