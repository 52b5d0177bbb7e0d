# src/fnrender/core/pipeline/types.py
"""
Tipos canônicos do pipeline do fnrender.

Este módulo define as estruturas que padronizam a comunicação entre
Discoverer, Engine, runners e rastreabilidade:

    - InvocationStatus   → estados de uma invocação (pending → running → final)
    - RunStatus          → estados da run (running → committed | aborted)
    - ContainerRuntime / ExecRuntime → formas fechadas de runtime declarável
    - FunctionDeclaration → declaração interpretada a partir de uma anotação
    - FunctionInvocation  → unidade de trabalho resolvida (declaração + âncora + índice)
    - ExecutionPlan       → sequência imutável de invocações
    - InvocationResult    → resultado imutável de uma invocação

Invariantes:
    - Declarações, invocações, planos e resultados são imutáveis
    - Enums possuem valores textuais estáveis (persistidos no Manifest)

Limites explícitos:
    - Não executa funções
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union

from fnrender.core.resources import Resource


class InvocationStatus(str, Enum):
    """
    Estados de uma invocação.

    Transições válidas:
        PENDING → RUNNING → SUCCEEDED | FAILED | DEFERRED

    - SUCCEEDED: exit 0 e resposta bem formada
    - FAILED: falha com deferFailure desligado; aborta a run
    - DEFERRED: falha com deferFailure ligado; a run continua
    """
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DEFERRED = "deferred"

    @property
    def is_terminal(self) -> bool:
        return self in (InvocationStatus.SUCCEEDED, InvocationStatus.FAILED, InvocationStatus.DEFERRED)


class RunStatus(str, Enum):
    """Estados da run: RUNNING → COMMITTED | ABORTED."""
    RUNNING = "running"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ContainerRuntime:
    """Função empacotada como imagem de container."""

    kind: ClassVar[str] = "container"

    image: str
    network: Optional[bool] = None
    env: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecRuntime:
    """Função executada como binário/script local."""

    kind: ClassVar[str] = "exec"

    path: str
    args: Tuple[str, ...] = ()
    env: Dict[str, str] = field(default_factory=dict)


RuntimeDescriptor = Union[ContainerRuntime, ExecRuntime]


@dataclass(frozen=True)
class FunctionDeclaration:
    """
    Declaração de função interpretada a partir da anotação de um recurso.

    Campos:
        - name: nome da função (explícito ou derivado do runtime)
        - runtime: descritor do runtime (forma fechada)
        - defer_failure: continua a run quando a função falha
        - source: snapshot do recurso declarante (usado como functionConfig)
        - params: bloco bruto da anotação, para rastreabilidade
    """

    name: str
    runtime: RuntimeDescriptor
    source: Resource
    defer_failure: bool = False
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FunctionInvocation:
    """Declaração + diretório âncora + posição no plano."""

    declaration: FunctionDeclaration
    anchor: str
    sequence_index: int

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def invocation_id(self) -> str:
        return f"{self.sequence_index}:{self.declaration.name}"


@dataclass(frozen=True)
class ExecutionPlan:
    """Sequência ordenada e imutável de invocações, fixada antes da execução."""

    invocations: Tuple[FunctionInvocation, ...] = ()

    def __iter__(self) -> Iterator[FunctionInvocation]:
        return iter(self.invocations)

    def __len__(self) -> int:
        return len(self.invocations)

    def __getitem__(self, index: int) -> FunctionInvocation:
        return self.invocations[index]

    def runtime_kinds(self) -> List[str]:
        return sorted({inv.declaration.runtime.kind for inv in self.invocations})


@dataclass(frozen=True)
class InvocationResult:
    """
    Resultado imutável de uma invocação, consumido pelo RunResult e pelo Manifest.

    Campos:
        - invocation_id / sequence_index / name: identidade da invocação
        - status: estado final
        - summary: resumo textual
        - exit_code: status do runtime (None quando o runtime não chegou a executar)
        - items_in / items_out: tamanho do escopo enviado e recebido
        - warnings: sinais não fatais (ex.: stderr de uma função bem-sucedida)
        - payload: dados adicionais (ex.: payload de erro)
    """
    invocation_id: str
    sequence_index: int
    name: str
    status: InvocationStatus
    summary: str
    exit_code: Optional[int] = None
    items_in: int = 0
    items_out: int = 0
    warnings: List[str] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)
