# src/fnrender/runtimes/_process.py
"""
Execução de um processo filho com entrada/saída por pipes.

Compartilhado pelos runners concretos: escreve o request no stdin, coleta
stdout/stderr e encerra o processo imediatamente em timeout ou cancelamento.
"""

from __future__ import annotations

import subprocess
import time
from typing import Dict, List, Optional, Tuple

from fnrender.core.exceptions import InvocationTimeoutError, RunCancelledError, RunnerInvocationError
from fnrender.core.pipeline.runner import CancelToken


# Intervalo de verificação do CancelToken enquanto o processo executa.
POLL_SECONDS = 0.1


def _kill(proc: subprocess.Popen) -> Tuple[str, str]:
    proc.kill()
    stdout, stderr = proc.communicate()
    return stdout or "", stderr or ""


def run_process(
    argv: List[str],
    payload: str,
    *,
    timeout: Optional[float] = None,
    cancel: Optional[CancelToken] = None,
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[str] = None,
) -> Tuple[int, str, str]:
    """
    Executa `argv`, entregando `payload` no stdin.

    Returns:
        Tuple[int, str, str]: (exit code, stdout, stderr).

    Raises:
        RunnerInvocationError: Se o processo não puder ser iniciado.
        InvocationTimeoutError: Se `timeout` expirar (processo terminado).
        RunCancelledError: Se `cancel` for acionado (processo terminado).
    """
    if cancel is not None and cancel.cancelled:
        raise RunCancelledError("Run cancelada antes de iniciar o processo", details={"argv": argv})

    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=env,
            cwd=cwd,
        )
    except OSError as e:
        raise RunnerInvocationError(
            "Falha ao iniciar o runtime da função",
            details={"argv": argv, "error": str(e)},
            hint="Verifique se o executável existe, tem permissão de execução e está no PATH.",
        ) from e

    deadline = time.monotonic() + timeout if timeout is not None else None
    pending_input: Optional[str] = payload
    while True:
        wait = POLL_SECONDS
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                _stdout, stderr = _kill(proc)
                raise InvocationTimeoutError(
                    "Invocação excedeu o timeout e foi terminada",
                    details={"argv": argv, "timeout_seconds": timeout, "stderr": stderr},
                    hint="Aumente engine.timeout_seconds ou investigue a função.",
                )
            wait = min(wait, remaining)

        try:
            stdout, stderr = proc.communicate(input=pending_input, timeout=wait)
            return proc.returncode, stdout or "", stderr or ""
        except subprocess.TimeoutExpired:
            pending_input = None
            if cancel is not None and cancel.cancelled:
                _kill(proc)
                raise RunCancelledError(
                    "Run cancelada durante a execução da função",
                    details={"argv": argv, "reason": cancel.reason},
                ) from None
