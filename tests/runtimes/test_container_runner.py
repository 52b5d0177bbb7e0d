# tests/runtimes/test_container_runner.py
"""
Testes do ContainerRunner.

A montagem do comando é verificada diretamente; a execução usa um binário
falso (script sh) no lugar do docker, que apenas devolve o stdin.
"""

import os
import stat
import sys

import pytest

from fnrender.core.config import resolve_settings
from fnrender.core.exceptions import RunnerInvocationError
from fnrender.core.pipeline import ContainerRuntime, ExecRuntime
from fnrender.core.resources import ResourceCollection
from fnrender.runtimes import ContainerRunner


def test_command_defaults_to_no_network():
    argv = ContainerRunner().command(ContainerRuntime(image="example/set-labels:v1"))
    assert argv == [
        "docker",
        "run",
        "--rm",
        "-i",
        "--network",
        "none",
        "--security-opt=no-new-privileges",
        "example/set-labels:v1",
    ]


def test_command_env_sorted_and_extra_args_before_image():
    runner = ContainerRunner(binary="podman", extra_args=["--pull=never"])
    argv = runner.command(ContainerRuntime(image="img", env={"B": "2", "A": "1"}))
    assert argv[0] == "podman"
    assert argv[-4:] == ["-e", "B=2", "--pull=never", "img"]
    assert argv[argv.index("-e") + 1] == "A=1"


def test_declared_network_overrides_configured_default():
    assert "host" in ContainerRunner(network=False).command(ContainerRuntime(image="i", network=True))
    assert "none" in ContainerRunner(network=True).command(ContainerRuntime(image="i", network=False))
    assert "host" in ContainerRunner(network=True).command(ContainerRuntime(image="i"))


def test_from_settings():
    settings = resolve_settings(
        {"runtimes": {"container": {"binary": "podman", "network": True, "extra_args": ["--cpus=1"]}}}
    )
    runner = ContainerRunner.from_settings(settings)
    assert (runner.binary, runner.network, runner.extra_args) == ("podman", True, ["--cpus=1"])


def test_wrong_runtime_type_is_rejected():
    with pytest.raises(RunnerInvocationError):
        ContainerRunner().run(ExecRuntime(path="./x"), ResourceCollection())


def test_missing_binary_is_invocation_error(tmp_path):
    runner = ContainerRunner(binary=str(tmp_path / "no-docker-here"))
    with pytest.raises(RunnerInvocationError):
        runner.run(ContainerRuntime(image="i"), ResourceCollection(), timeout=5)


@pytest.mark.skipif(sys.platform == "win32", reason="script sh como binário falso")
def test_run_with_fake_binary(tmp_path):
    fake = tmp_path / "fake-docker"
    fake.write_text("#!/bin/sh\ncat\n", encoding="utf-8")
    fake.chmod(fake.stat().st_mode | stat.S_IXUSR)
    assert os.access(fake, os.X_OK)

    resp = ContainerRunner(binary=str(fake)).run(ContainerRuntime(image="i"), ResourceCollection(), timeout=30)

    assert resp.exit_code == 0
    assert resp.well_formed
    assert resp.collection.items == []
