# src/fnrender/core/pipeline/registry.py
"""
Registro de runners por tipo de runtime.

O `RunnerRegistry` associa cada tipo de runtime (`container`, `exec`) a um
único `FunctionRunner`. O Engine consulta o registry antes de executar
qualquer invocação: um plano que referencia um tipo sem runner registrado é
rejeitado por inteiro.

Decisões arquiteturais:
    - Tipos duplicados são erro fatal de configuração
    - A ordem de registro é preservada
    - O registry não executa funções

Invariantes:
    - Cada `kind` possui exatamente um runner
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from fnrender.core.exceptions import EngineConfigurationError

from .runner import FunctionRunner


class DuplicateRunnerKindError(ValueError):
    """Dois runners registrados para o mesmo tipo de runtime."""


@dataclass
class RunnerRegistry:
    """Registro canônico `kind → FunctionRunner`."""

    _runners: Dict[str, FunctionRunner] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def of(cls, runners: Iterable[FunctionRunner]) -> "RunnerRegistry":
        registry = cls()
        for runner in runners:
            registry.add(runner)
        return registry

    def add(self, runner: FunctionRunner) -> None:
        kind = getattr(runner, "kind", None)
        if not isinstance(kind, str) or not kind.strip():
            raise ValueError("runner.kind must be a non-empty string")

        if kind in self._runners:
            raise DuplicateRunnerKindError(f"Duplicate runner kind: {kind}")

        self._runners[kind] = runner
        self._order.append(kind)

    def __contains__(self, kind: object) -> bool:
        return kind in self._runners

    def get(self, kind: str) -> FunctionRunner:
        try:
            return self._runners[kind]
        except KeyError:
            raise EngineConfigurationError(
                "Nenhum runner registrado para o tipo de runtime",
                details={"kind": kind, "registered": list(self._order)},
                hint="Registre um runner para este tipo ou habilite-o na configuração de runtimes.",
            ) from None

    def kinds(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[FunctionRunner]:
        return [self._runners[k] for k in self._order]

    def require(self, kinds: Iterable[str]) -> None:
        """Garante que todos os `kinds` possuem runner.

        Raises:
            EngineConfigurationError: Listando todos os tipos sem runner.
        """
        missing = sorted({k for k in kinds if k not in self._runners})
        if missing:
            raise EngineConfigurationError(
                "Plano referencia tipos de runtime sem runner registrado",
                details={"missing": missing, "registered": list(self._order)},
                hint="Registre um runner para cada tipo declarado antes de reexecutar.",
            )
