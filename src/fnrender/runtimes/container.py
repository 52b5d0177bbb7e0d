# src/fnrender/runtimes/container.py
"""
Runner de funções empacotadas como imagem de container.

Comando gerado:

    <binary> run --rm -i --network none --security-opt=no-new-privileges \
        -e K=V ... <extra_args> <image>

O request (ResourceList YAML) é escrito no stdin; a resposta é lida do stdout
e o diagnóstico do stderr. Exit 0 é sucesso; qualquer outro valor é falha,
haja ou não corpo de resposta.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from fnrender.core.config import EngineSettings
from fnrender.core.exceptions import RunnerInvocationError
from fnrender.core.pipeline.runner import CancelToken, RunnerResponse, parse_response
from fnrender.core.pipeline.types import ContainerRuntime, RuntimeDescriptor
from fnrender.core.resources import ResourceCollection

from ._process import run_process


class ContainerRunner:
    kind = ContainerRuntime.kind

    def __init__(
        self,
        *,
        binary: str = "docker",
        network: bool = False,
        extra_args: Sequence[str] = (),
    ):
        self.binary = binary
        self.network = network
        self.extra_args = list(extra_args)

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "ContainerRunner":
        return cls(
            binary=settings.container_binary,
            network=settings.container_network,
            extra_args=settings.container_extra_args,
        )

    def command(self, runtime: ContainerRuntime) -> List[str]:
        network = runtime.network if runtime.network is not None else self.network
        argv = [
            self.binary,
            "run",
            "--rm",
            "-i",
            "--network",
            "host" if network else "none",
            "--security-opt=no-new-privileges",
        ]
        for key in sorted(runtime.env):
            argv.extend(["-e", f"{key}={runtime.env[key]}"])
        argv.extend(self.extra_args)
        argv.append(runtime.image)
        return argv

    def run(
        self,
        runtime: RuntimeDescriptor,
        request: ResourceCollection,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[CancelToken] = None,
    ) -> RunnerResponse:
        if not isinstance(runtime, ContainerRuntime):
            raise RunnerInvocationError(
                "ContainerRunner recebeu um runtime de outro tipo",
                details={"kind": getattr(runtime, "kind", None)},
            )

        exit_code, stdout, stderr = run_process(
            self.command(runtime),
            request.to_yaml(),
            timeout=timeout,
            cancel=cancel,
        )
        return parse_response(exit_code, stdout, stderr)
