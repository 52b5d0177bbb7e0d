# src/fnrender/core/engine/engine.py
"""
Engine de execução do pipeline de funções.

Máquina de estados sobre o ExecutionPlan:
    invocação: PENDING → RUNNING → SUCCEEDED | FAILED | DEFERRED
    run:       RUNNING → COMMITTED | ABORTED

Para cada invocação, na ordem do plano:
    1. Resolve (escopo, complemento) na coleção corrente
    2. Monta o request: cópias dos itens em escopo + functionConfig
       (snapshot do recurso declarante)
    3. Executa o runner do tipo de runtime (bloqueante, com timeout/cancelamento)
    4. Aplica a política de falha:
       - exit 0 e resposta bem formada → SUCCEEDED, reconcilia a resposta
       - falha sem deferFailure → FAILED, a run aborta com a coleção anterior
         à invocação
       - falha com deferFailure → DEFERRED, reconcilia a resposta se bem
         formada (senão o escopo segue inalterado) e continua
    5. Registra um ResultSet da invocação no ResultAggregator

Invariantes:
    - Invocações são estritamente sequenciais
    - O runner recebe cópias; a coleção só é substituída após a chamada terminar
    - Uma run cancelada ou abortada nunca devolve coleção parcial como COMMITTED
    - Nenhum retry automático

O Engine não escreve no store: quem chama decide persistir apenas uma run
COMMITTED.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from fnrender.core.config import EngineSettings, resolve_settings
from fnrender.core.errors import (
    FnRenderErrorPayload,
    engine_execution_error,
    exception_to_payload,
    run_cancelled,
)
from fnrender.core.exceptions import (
    CollectionFormatError,
    RunCancelledError,
    RunnerInvocationError,
    ScopeResolutionError,
    ValidationFailure,
)
from fnrender.core.pipeline.context import RUN_SCOPE, RunContext
from fnrender.core.pipeline.registry import RunnerRegistry
from fnrender.core.pipeline.runner import CancelToken, FunctionRunner, RunnerResponse
from fnrender.core.pipeline.types import (
    ExecutionPlan,
    FunctionInvocation,
    InvocationResult,
    InvocationStatus,
    RunStatus,
)
from fnrender.core.resources import (
    FunctionResult,
    ResourceCollection,
    ResultSet,
    Severity,
)
from fnrender.core.traceability import manifest as mf

from .aggregator import ResultAggregator
from .reconcile import merge_response
from .scope import resolve


@dataclass(frozen=True)
class RunResult:
    """
    Resultado agregado de uma run.

    Campos:
        - status: COMMITTED ou ABORTED
        - collection: coleção final (COMMITTED) ou a coleção anterior à
          invocação que abortou (ABORTED); `results` sempre preenchido
        - invocations: InvocationResult por invocation_id, em ordem de execução
        - results: ResultSets em ordem de invocação
        - exit_code: status final calculado pelo ResultAggregator
        - severity: severidade geral dos resultados
        - error: payload do erro que abortou a run
    """

    status: RunStatus
    collection: ResourceCollection
    invocations: Dict[str, InvocationResult] = field(default_factory=dict)
    results: List[ResultSet] = field(default_factory=list)
    exit_code: int = 0
    severity: Optional[Severity] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def committed(self) -> bool:
        return self.status is RunStatus.COMMITTED


class _Abort(Exception):
    """Interrupção interna do laço de invocações."""

    def __init__(self, error: FnRenderErrorPayload):
        super().__init__(error.message)
        self.error = error


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _flatten_results(
    invocation: FunctionInvocation,
    status: InvocationStatus,
    response: Optional[RunnerResponse],
    extra: Iterable[FunctionResult] = (),
) -> ResultSet:
    records: List[FunctionResult] = []
    if response is not None and response.collection is not None:
        for rs in response.collection.results:
            records.extend(rs.results)
    records.extend(extra)
    return ResultSet(
        name=invocation.name,
        results=tuple(records),
        sequence_index=invocation.sequence_index,
        exit_code=response.exit_code if response is not None else None,
        stderr=response.stderr if response is not None else "",
        status=status.value,
    )


def _runner_error_result(message: str) -> FunctionResult:
    return FunctionResult(
        severity=Severity.ERROR,
        message=message,
        tags={"source": "fnrender"},
    )


class Engine:
    """Executor canônico do plano de funções."""

    def __init__(
        self,
        *,
        plan: ExecutionPlan,
        runners: Union[RunnerRegistry, Iterable[FunctionRunner]],
        ctx: RunContext,
        manifest: Optional[mf.ManifestLike] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.plan = plan
        self.runners = runners if isinstance(runners, RunnerRegistry) else RunnerRegistry.of(runners)
        self.ctx = ctx
        self.manifest = manifest
        self.settings = settings if settings is not None else resolve_settings(ctx.config)

    # ------------------------------------------------------------------
    # Rastreabilidade
    # ------------------------------------------------------------------

    def _started(self, inv: FunctionInvocation) -> None:
        runtime = inv.declaration.runtime.kind
        self.ctx.log(
            invocation_id=inv.invocation_id,
            level="INFO",
            message="invocation started",
            runtime=runtime,
            anchor=inv.anchor,
        )
        if self.manifest is not None:
            mf.invocation_started(
                self.manifest,
                invocation_id=inv.invocation_id,
                name=inv.name,
                sequence_index=inv.sequence_index,
                runtime=runtime,
                anchor=inv.anchor,
                ts=_now(),
            )

    def _finished(self, result: InvocationResult) -> None:
        self.ctx.log(
            invocation_id=result.invocation_id,
            level="INFO" if result.status is InvocationStatus.SUCCEEDED else "WARNING",
            message=f"invocation {result.status.value}",
            exit_code=result.exit_code,
            items_in=result.items_in,
            items_out=result.items_out,
        )
        if self.manifest is None:
            return
        if "error" in result.payload:
            mf.invocation_failed(
                self.manifest,
                invocation_id=result.invocation_id,
                ts=_now(),
                error=result.payload["error"],
                deferred=result.status is InvocationStatus.DEFERRED,
            )
        else:
            mf.invocation_finished(
                self.manifest,
                invocation_id=result.invocation_id,
                ts=_now(),
                result={
                    "status": result.status.value,
                    "summary": result.summary,
                    "exit_code": result.exit_code,
                    "items_in": result.items_in,
                    "items_out": result.items_out,
                    "warnings": result.warnings,
                },
            )

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def _invoke(
        self,
        inv: FunctionInvocation,
        request: ResourceCollection,
        cancel: CancelToken,
    ) -> Tuple[Optional[RunnerResponse], Optional[FnRenderErrorPayload]]:
        """Executa o runner; devolve (resposta, erro de runner)."""
        runner = self.runners.get(inv.declaration.runtime.kind)
        try:
            response = runner.run(
                inv.declaration.runtime,
                request,
                timeout=self.settings.timeout_seconds,
                cancel=cancel,
            )
        except RunCancelledError as e:
            raise _Abort(
                run_cancelled(invocation_id=inv.invocation_id, reason=cancel.reason or e.message)
            ) from e
        except (RunnerInvocationError, CollectionFormatError) as e:
            payload = exception_to_payload(e)
            payload.details.setdefault("invocation_id", inv.invocation_id)
            return None, payload
        except Exception as e:
            raise _Abort(
                engine_execution_error(
                    invocation_id=inv.invocation_id,
                    exc_type=e.__class__.__name__,
                    exc_message=str(e) or None,
                )
            ) from e

        if cancel.cancelled:
            raise _Abort(run_cancelled(invocation_id=inv.invocation_id, reason=cancel.reason or "cancelled"))
        return response, None

    def _step(
        self,
        inv: FunctionInvocation,
        current: ResourceCollection,
        cancel: CancelToken,
        aggregator: ResultAggregator,
    ) -> Tuple[ResourceCollection, InvocationResult]:
        try:
            split = resolve(current, inv.anchor)
        except ScopeResolutionError as e:
            raise _Abort(exception_to_payload(e)) from e

        request = ResourceCollection(
            items=[r.copy() for r in split.scoped],
            function_config=inv.declaration.source.copy(),
        )
        response, runner_error = self._invoke(inv, request, cancel)

        items_in = len(request.items)
        succeeded = runner_error is None and response is not None and response.exit_code == 0 and response.well_formed

        warnings: List[str] = []
        extra: List[FunctionResult] = []
        error: Optional[FnRenderErrorPayload] = None
        if not succeeded:
            if runner_error is not None:
                error = runner_error
                extra.append(_runner_error_result(runner_error.message))
            elif response is not None and response.exit_code != 0:
                error = exception_to_payload(
                    ValidationFailure(
                        "Função terminou com status de falha",
                        details={
                            "invocation_id": inv.invocation_id,
                            "exit_code": response.exit_code,
                            "stderr": response.stderr,
                            "deferred": inv.declaration.defer_failure,
                        },
                        hint=(
                            "Inspecione os resultados e o stderr da função; corrija a "
                            "configuração ou declare deferFailure explicitamente."
                        ),
                    )
                )
            else:
                reason = response.parse_error if response is not None else None
                error = exception_to_payload(
                    RunnerInvocationError(
                        "Resposta da função não é uma ResourceList válida",
                        details={
                            "invocation_id": inv.invocation_id,
                            "parse_error": reason or "resposta ausente",
                        },
                    )
                )
                extra.append(_runner_error_result(f"{error.message}: {reason or 'resposta ausente'}"))
        elif response.stderr.strip():
            warnings.append(response.stderr.strip())
            self.ctx.add_warning(invocation_id=inv.invocation_id, message=response.stderr.strip())

        if succeeded:
            status = InvocationStatus.SUCCEEDED
        elif inv.declaration.defer_failure:
            status = InvocationStatus.DEFERRED
        else:
            status = InvocationStatus.FAILED

        aggregator.record(_flatten_results(inv, status, response, extra))

        payload: Dict[str, Any] = {}
        next_collection = current
        items_out = items_in
        if status is not InvocationStatus.FAILED and response is not None and response.well_formed:
            outcome = merge_response(current, split, response.collection.items)
            next_collection = ResourceCollection(
                items=outcome.items,
                function_config=current.function_config,
                results=current.results,
            )
            items_out = len(response.collection.items)
            payload["merge"] = {
                "matched": outcome.matched,
                "added": outcome.added,
                "deleted": outcome.deleted,
            }
        if error is not None:
            payload["error"] = error.to_dict()
        if status is InvocationStatus.DEFERRED:
            aggregator.mark_deferred(inv.sequence_index)
            if "merge" not in payload:
                payload["pass_through"] = True

        result = InvocationResult(
            invocation_id=inv.invocation_id,
            sequence_index=inv.sequence_index,
            name=inv.name,
            status=status,
            summary=error.message if error is not None else "ok",
            exit_code=response.exit_code if response is not None else None,
            items_in=items_in,
            items_out=items_out,
            warnings=warnings,
            payload=payload,
        )
        return next_collection, result

    def run(self, collection: ResourceCollection, *, cancel: Optional[CancelToken] = None) -> RunResult:
        """
        Executa o plano sobre `collection` (nunca mutada).

        Raises:
            EngineConfigurationError: Se algum tipo de runtime do plano não
                tiver runner registrado (nenhuma invocação é executada).
        """
        self.runners.require(self.plan.runtime_kinds())

        if cancel is None:
            cancel = CancelToken(self.settings.run_deadline_seconds)

        aggregator = ResultAggregator()
        invocations: Dict[str, InvocationResult] = {}
        current = collection.copy()
        error: Optional[FnRenderErrorPayload] = None

        self.ctx.log(invocation_id=RUN_SCOPE, level="INFO", message="run started", invocations=len(self.plan))

        for inv in self.plan:
            if cancel.cancelled:
                error = run_cancelled(invocation_id=inv.invocation_id, reason=cancel.reason or "cancelled")
                break

            self._started(inv)
            try:
                current, result = self._step(inv, current, cancel, aggregator)
            except _Abort as abort:
                error = abort.error
                result = InvocationResult(
                    invocation_id=inv.invocation_id,
                    sequence_index=inv.sequence_index,
                    name=inv.name,
                    status=InvocationStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                )
                aggregator.record(_flatten_results(inv, InvocationStatus.FAILED, None))
                invocations[inv.invocation_id] = result
                self._finished(result)
                break

            invocations[inv.invocation_id] = result
            self._finished(result)
            if result.status is InvocationStatus.FAILED:
                error = FnRenderErrorPayload(**result.payload["error"])
                break

        if error is not None:
            aggregator.mark_aborted()
            status = RunStatus.ABORTED
        else:
            status = RunStatus.COMMITTED

        exit_code = aggregator.final_status()
        results = aggregator.to_collection_results()
        final = ResourceCollection(
            items=current.items,
            function_config=current.function_config,
            results=results,
        )

        self.ctx.log(
            invocation_id=RUN_SCOPE,
            level="INFO" if status is RunStatus.COMMITTED else "ERROR",
            message=f"run {status.value}",
            exit_code=exit_code,
        )
        if self.manifest is not None:
            mf.run_finished(
                self.manifest,
                status=status.value,
                ts=_now(),
                exit_code=exit_code,
                error=error.to_dict() if error is not None else None,
            )

        return RunResult(
            status=status,
            collection=final,
            invocations=invocations,
            results=results,
            exit_code=exit_code,
            severity=aggregator.overall_severity(),
            error=error.to_dict() if error is not None else None,
        )
