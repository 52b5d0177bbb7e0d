# src/fnrender/render.py
"""
Ponto de entrada de uma renderização completa.

`render_package` liga as peças na ordem do fluxo de dados:

    LocalResourceStore.load → discover → Engine.run → LocalResourceStore.write
                                                    → ResultsStore.write

Regras:
    - Apenas uma run COMMITTED é gravada de volta no pacote
    - Resultados (e o Manifest) são gravados tanto em commit quanto em abort,
      quando `engine.results_dir` está configurado
    - Erros fatais viram FnRenderErrorPayload no RenderOutcome; nenhum stack
      trace é exposto
    - Erros de configuração (ConfigError) são do chamador e propagam
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from fnrender import __version__
from fnrender.core.config import (
    DEFAULT_CONFIG,
    EngineSettings,
    compute_config_hash,
    deep_merge,
    find_package_config,
    read_config_file,
    resolve_settings,
)
from fnrender.core.engine import Engine, RunResult, discover, plan_hash
from fnrender.core.errors import FnRenderErrorPayload, exception_to_payload
from fnrender.core.exceptions import FnRenderException, PersistenceError
from fnrender.core.pipeline import CancelToken, FunctionRunner, RunContext, RunnerRegistry, RunStatus
from fnrender.core.pipeline.context import RUN_SCOPE
from fnrender.core.resources import ResultSet
from fnrender.core.traceability import RunManifest, add_event, create_manifest, run_finished
from fnrender.persistence import LocalResourceStore, ResultsStore, StoreWriteReport
from fnrender.runtimes import ContainerRunner, ExecRunner


@dataclass(frozen=True)
class RenderOutcome:
    """
    Resultado de `render_package`.

    Campos:
        - status: COMMITTED ou ABORTED
        - exit_code: 0 apenas para run gravada sem erro, sem adiamento e sem resultado `error`
        - run: RunResult do Engine (None se a run abortou antes de executar)
        - error: payload do erro fatal, quando houver
        - results_written: arquivos gravados no diretório de resultados
        - store_report: resumo da escrita no pacote (apenas em commit)
        - manifest: Manifest da run
    """

    status: RunStatus
    exit_code: int
    run: Optional[RunResult] = None
    error: Optional[Dict[str, Any]] = None
    results_written: List[Path] = field(default_factory=list)
    store_report: Optional[StoreWriteReport] = None
    manifest: Optional[RunManifest] = None


def default_runners(settings: EngineSettings, *, root: Union[str, Path]) -> RunnerRegistry:
    """Runners padrão: container sempre; exec apenas se habilitado."""
    registry = RunnerRegistry()
    registry.add(ContainerRunner.from_settings(settings))
    if settings.exec_enabled:
        registry.add(ExecRunner(base_dir=root))
    return registry


def _results_store(settings: EngineSettings, root: Path) -> Optional[ResultsStore]:
    if settings.results_dir is None:
        return None
    results_dir = Path(settings.results_dir)
    if not results_dir.is_absolute():
        results_dir = root / results_dir
    return ResultsStore(results_dir=results_dir)


def _abort(
    ctx: RunContext,
    manifest: RunManifest,
    error: FnRenderErrorPayload,
) -> None:
    ctx.log(invocation_id=RUN_SCOPE, level="ERROR", message=error.message, error_type=error.type)
    run_finished(
        manifest,
        status=RunStatus.ABORTED.value,
        ts=datetime.now(timezone.utc),
        exit_code=1,
        error=error.to_dict(),
    )


def render_package(
    *,
    root: Union[str, Path],
    config: Optional[Dict[str, Any]] = None,
    runners: Optional[Union[RunnerRegistry, Iterable[FunctionRunner]]] = None,
    cancel: Optional[CancelToken] = None,
    run_id: Optional[str] = None,
) -> RenderOutcome:
    """
    Renderiza o pacote em `root`: descobre, executa e grava.

    Args:
        root: Raiz do pacote (árvore de arquivos YAML de recursos).
        config: Overrides sobre `DEFAULT_CONFIG` e sobre `.fnrender/config.*`
            do pacote, quando existir.
        runners: Runners a usar; por padrão container + exec.
        cancel: Token de cancelamento externo.
        run_id: Identificador da run; gerado quando ausente.

    Raises:
        ConfigError: Se `config` ou o arquivo do pacote forem inválidos.
    """
    root = Path(root)
    config_file = find_package_config(root)
    overrides = read_config_file(config_file) if config_file is not None else {}
    overrides = deep_merge(overrides, config or {})
    effective = deep_merge(DEFAULT_CONFIG, overrides)
    settings = resolve_settings(overrides)
    run_id = run_id or uuid.uuid4().hex
    started_at = datetime.now(timezone.utc)

    ctx = RunContext(
        run_id=run_id,
        created_at=started_at,
        config=effective,
        meta={"root": str(root), "config_file": str(config_file) if config_file else None},
    )
    manifest = create_manifest(
        run_id=run_id,
        started_at=started_at,
        fnrender_version=__version__,
        config_hash=compute_config_hash(effective),
    )
    if runners is None:
        runners = default_runners(settings, root=root)
    results_store = _results_store(settings, root)
    store = LocalResourceStore(root=root)

    def write_results(result_sets: List[ResultSet]) -> List[Path]:
        if results_store is None:
            return []
        return results_store.write(result_sets, manifest=manifest)

    try:
        collection = store.load()
        if store.skipped:
            add_event(
                manifest,
                event_type="files_skipped",
                ts=datetime.now(timezone.utc),
                payload={"files": list(store.skipped)},
            )
        plan = discover(collection)
        manifest.inputs["plan_hash"] = plan_hash(plan)
        engine = Engine(plan=plan, runners=runners, ctx=ctx, manifest=manifest, settings=settings)
        result = engine.run(collection, cancel=cancel)
    except FnRenderException as e:
        error = exception_to_payload(e)
        _abort(ctx, manifest, error)
        try:
            written = write_results([])
        except PersistenceError as persist_error:
            ctx.log(
                invocation_id=RUN_SCOPE,
                level="ERROR",
                message=persist_error.message,
                error_type=exception_to_payload(persist_error).type,
            )
            written = []
        return RenderOutcome(
            status=RunStatus.ABORTED,
            exit_code=1,
            error=error.to_dict(),
            results_written=written,
            manifest=manifest,
        )

    report: Optional[StoreWriteReport] = None
    try:
        if result.committed:
            report = store.write(result.collection)
            add_event(
                manifest,
                event_type="package_written",
                ts=datetime.now(timezone.utc),
                payload={"written": report.written, "deleted": report.deleted},
            )
        written = write_results(result.results)
    except PersistenceError as e:
        error = exception_to_payload(e)
        _abort(ctx, manifest, error)
        return RenderOutcome(
            status=RunStatus.ABORTED,
            exit_code=1,
            run=result,
            error=error.to_dict(),
            store_report=report,
            manifest=manifest,
        )

    return RenderOutcome(
        status=result.status,
        exit_code=result.exit_code,
        run=result,
        error=result.error,
        results_written=written,
        store_report=report,
        manifest=manifest,
    )
