"""
fnrender: payloads de erro (v1)

Exceções tipadas (`core.exceptions`) são convertidas aqui em
`FnRenderErrorPayload`, a forma que chega ao RunResult, ao Manifest e aos
arquivos de resultado. O campo `type` é um código estável do catálogo
abaixo; o texto de `message` pode mudar entre versões.

Stack traces nunca entram no payload.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import (
    CollectionFormatError,
    DeclarationParseError,
    EngineConfigurationError,
    FnRenderException,
    InvocationTimeoutError,
    PersistenceError,
    RunCancelledError,
    RunnerInvocationError,
    ScopeResolutionError,
    ValidationFailure,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FnRenderErrorPayload:
    """
    Payload canônico de erro do fnrender.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Descoberta / Escopo
DECLARATION_PARSE_ERROR = "DECLARATION_PARSE_ERROR"
SCOPE_RESOLUTION_ERROR = "SCOPE_RESOLUTION_ERROR"
COLLECTION_FORMAT_ERROR = "COLLECTION_FORMAT_ERROR"

# Invocação de funções
RUNNER_INVOCATION_ERROR = "RUNNER_INVOCATION_ERROR"
INVOCATION_TIMEOUT = "INVOCATION_TIMEOUT"
VALIDATION_FAILURE = "VALIDATION_FAILURE"
RUN_CANCELLED = "RUN_CANCELLED"

# Persistência
PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# Ordem importa: subclasses antes das bases.
_TYPE_BY_EXCEPTION = (
    (DeclarationParseError, DECLARATION_PARSE_ERROR),
    (ScopeResolutionError, SCOPE_RESOLUTION_ERROR),
    (CollectionFormatError, COLLECTION_FORMAT_ERROR),
    (InvocationTimeoutError, INVOCATION_TIMEOUT),
    (RunnerInvocationError, RUNNER_INVOCATION_ERROR),
    (ValidationFailure, VALIDATION_FAILURE),
    (RunCancelledError, RUN_CANCELLED),
    (PersistenceError, PERSISTENCE_ERROR),
    (EngineConfigurationError, ENGINE_CONFIGURATION_ERROR),
)


def exception_to_payload(exc: BaseException) -> FnRenderErrorPayload:
    """Converte exceções em FnRenderErrorPayload (serializável, acionável).

    Regras:
    - FnRenderException: já vem com message/details/hint; o tipo é derivado
      da classe pelo catálogo.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, FnRenderException):
        code = ENGINE_EXECUTION_ERROR
        for cls, mapped in _TYPE_BY_EXCEPTION:
            if isinstance(exc, cls):
                code = mapped
                break
        return FnRenderErrorPayload(
            type=code,
            message=exc.message or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return engine_execution_error(
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def run_cancelled(
    *,
    invocation_id: Optional[str] = None,
    reason: str = "cancelled",
    hint: str = "A run foi abortada sem persistir nenhuma saída; reexecute quando apropriado.",
) -> FnRenderErrorPayload:
    return FnRenderErrorPayload(
        type=RUN_CANCELLED,
        message="Execução cancelada antes da conclusão",
        details={
            "invocation_id": invocation_id,
            "reason": reason,
        },
        hint=hint,
    )


def engine_execution_error(
    *,
    invocation_id: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o event log e o manifest da run para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> FnRenderErrorPayload:
    return FnRenderErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada no Engine durante a invocação de funções",
        details={
            "invocation_id": invocation_id,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração de runners incompatível com o plano",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração de runtimes e registre um runner para cada tipo declarado antes de reexecutar.",
) -> FnRenderErrorPayload:
    return FnRenderErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
