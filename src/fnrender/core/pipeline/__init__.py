"""
Contratos do pipeline de funções.

Componentes:
    - types       → declarações, invocações, plano e resultados
    - declaration → interpretação da anotação de função
    - runner      → FunctionRunner, RunnerResponse e CancelToken
    - registry    → RunnerRegistry (kind → runner)
    - context     → RunContext (identidade + eventos da run)
"""
from .context import RUN_SCOPE, RunContext
from .declaration import default_function_name, parse_declaration
from .registry import DuplicateRunnerKindError, RunnerRegistry
from .runner import CancelToken, FunctionRunner, RunnerResponse, parse_response
from .types import (
    ContainerRuntime,
    ExecRuntime,
    ExecutionPlan,
    FunctionDeclaration,
    FunctionInvocation,
    InvocationResult,
    InvocationStatus,
    RunStatus,
    RuntimeDescriptor,
)

__all__ = [
    "RUN_SCOPE",
    "RunContext",
    "default_function_name",
    "parse_declaration",
    "DuplicateRunnerKindError",
    "RunnerRegistry",
    "CancelToken",
    "FunctionRunner",
    "RunnerResponse",
    "parse_response",
    "ContainerRuntime",
    "ExecRuntime",
    "ExecutionPlan",
    "FunctionDeclaration",
    "FunctionInvocation",
    "InvocationResult",
    "InvocationStatus",
    "RunStatus",
    "RuntimeDescriptor",
]
