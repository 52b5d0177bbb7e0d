# src/fnrender/core/pipeline/runner.py
"""
Contrato canônico de runner de funções.

Um runner sabe executar um tipo de runtime (`container`, `exec`, ...): recebe
uma ResourceCollection serializada no formato ResourceList, entrega-a à função
e devolve uma `RunnerResponse` com o exit code, a coleção de resposta (quando
interpretável) e o stderr.

Princípios fundamentais:
    - Runners não conhecem o Engine nem a política de falha
    - Runners não alteram o estado da run
    - Conformidade é garantida por duck typing (@runtime_checkable)

Contrato de falhas:
    - Falha ao iniciar o runtime → RunnerInvocationError
    - Timeout da invocação → InvocationTimeoutError (processo terminado)
    - Cancelamento da run → RunCancelledError (processo terminado)
    - Saída ilegível com exit 0 → RunnerResponse com `parse_error` preenchido;
      a decisão fica com o Engine

Este módulo também define `CancelToken`, o sinal cooperativo de cancelamento
compartilhado entre Engine e runners.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from fnrender.core.exceptions import CollectionFormatError
from fnrender.core.resources import ResourceCollection

from .types import RuntimeDescriptor


class CancelToken:
    """
    Sinal de cancelamento compartilhado por uma run.

    Pode ser cancelado explicitamente (`cancel`) ou expirar por deadline
    (segundos a partir da criação, relógio monotônico).
    """

    def __init__(self, deadline_seconds: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if self.reason is None:
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    def remaining(self) -> Optional[float]:
        """Segundos até o deadline (None quando não há deadline)."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())


@dataclass(frozen=True)
class RunnerResponse:
    """
    Resposta bruta de uma invocação.

    Campos:
        - exit_code: status de saída do runtime
        - collection: coleção de resposta (None quando ilegível ou ausente)
        - stderr: diagnóstico livre do runtime
        - parse_error: motivo pelo qual o stdout não pôde ser interpretado
    """

    exit_code: int
    collection: Optional[ResourceCollection] = None
    stderr: str = ""
    parse_error: Optional[str] = None

    @property
    def well_formed(self) -> bool:
        return self.collection is not None and self.parse_error is None


def parse_response(exit_code: int, stdout: str, stderr: str = "") -> RunnerResponse:
    """Interpreta o stdout de uma função como ResourceList."""
    try:
        collection = ResourceCollection.from_yaml(stdout)
    except CollectionFormatError as e:
        return RunnerResponse(
            exit_code=exit_code,
            collection=None,
            stderr=stderr,
            parse_error=e.message,
        )
    return RunnerResponse(exit_code=exit_code, collection=collection, stderr=stderr)


@runtime_checkable
class FunctionRunner(Protocol):
    """
    Contrato de um runner de funções.

    Atributos obrigatórios:
        - kind: tipo de runtime atendido (chave do RunnerRegistry)
    """

    kind: str

    def run(
        self,
        runtime: RuntimeDescriptor,
        request: ResourceCollection,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[CancelToken] = None,
    ) -> RunnerResponse:
        """Executa a função uma única vez sobre `request`."""
        ...
