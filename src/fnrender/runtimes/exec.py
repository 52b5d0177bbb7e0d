# src/fnrender/runtimes/exec.py
"""
Runner de funções executadas como binário ou script local.

Caminhos relativos (`./fns/x.py`, `fns/x`) são resolvidos a partir da raiz
do pacote; nomes sem separador são procurados no PATH. O processo roda com
ambiente mínimo: apenas `PATH` e as variáveis declaradas.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Dict, Optional, Union

from fnrender.core.exceptions import RunnerInvocationError
from fnrender.core.pipeline.runner import CancelToken, RunnerResponse, parse_response
from fnrender.core.pipeline.types import ExecRuntime, RuntimeDescriptor
from fnrender.core.resources import ResourceCollection

from ._process import run_process


class ExecRunner:
    kind = ExecRuntime.kind

    def __init__(self, *, base_dir: Optional[Union[str, Path]] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    def resolve_path(self, runtime: ExecRuntime) -> str:
        raw = runtime.path
        if "/" not in raw and "\\" not in raw:
            found = shutil.which(raw)
            if found is None:
                raise RunnerInvocationError(
                    "Executável da função não encontrado no PATH",
                    details={"path": raw},
                )
            return found

        path = Path(raw)
        if not path.is_absolute():
            path = self.base_dir / path
        return str(path)

    def environment(self, runtime: ExecRuntime) -> Dict[str, str]:
        env = {"PATH": os.environ.get("PATH", os.defpath)}
        env.update(runtime.env)
        return env

    def run(
        self,
        runtime: RuntimeDescriptor,
        request: ResourceCollection,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[CancelToken] = None,
    ) -> RunnerResponse:
        if not isinstance(runtime, ExecRuntime):
            raise RunnerInvocationError(
                "ExecRunner recebeu um runtime de outro tipo",
                details={"kind": getattr(runtime, "kind", None)},
            )

        argv = [self.resolve_path(runtime), *runtime.args]
        exit_code, stdout, stderr = run_process(
            argv,
            request.to_yaml(),
            timeout=timeout,
            cancel=cancel,
            env=self.environment(runtime),
            cwd=str(self.base_dir),
        )
        return parse_response(exit_code, stdout, stderr)
