"""
Runners concretos do fnrender.

    - ContainerRunner → `container` (docker/podman run -i)
    - ExecRunner      → `exec` (executável local)

Ambos implementam `fnrender.core.pipeline.runner.FunctionRunner`.
"""
from .container import ContainerRunner
from .exec import ExecRunner

__all__ = ["ContainerRunner", "ExecRunner"]
