# src/fnrender/core/engine/aggregator.py
"""
Agregação de resultados de uma run.

O `ResultAggregator` é o único dono da lista de ResultSets e o único a
decidir o exit status final.

Regras:
    - ResultSets ficam na ordem das invocações
    - Nomes repetidos são distinguidos por `sequence_index`, nunca sobrescritos
    - Severidade geral = máximo entre todos os resultados (sem resultados → None)
    - Exit status != 0 se houver resultado `error`, invocação adiada ou run abortada
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from fnrender.core.resources import ResultSet, Severity
from fnrender.core.resources.results import max_severity


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@dataclass
class ResultAggregator:
    _result_sets: List[ResultSet] = field(default_factory=list, init=False, repr=False)
    _deferred: Set[int] = field(default_factory=set, init=False, repr=False)
    _aborted: bool = field(default=False, init=False, repr=False)

    def record(self, result_set: ResultSet) -> None:
        self._result_sets.append(result_set)

    def mark_deferred(self, sequence_index: int) -> None:
        self._deferred.add(sequence_index)

    def mark_aborted(self) -> None:
        self._aborted = True

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def deferred(self) -> List[int]:
        return sorted(self._deferred)

    @property
    def result_sets(self) -> List[ResultSet]:
        return list(self._result_sets)

    def overall_severity(self) -> Optional[Severity]:
        return max_severity(
            r.severity for rs in self._result_sets for r in rs.results
        )

    def final_status(self) -> int:
        if self._aborted or self._deferred:
            return EXIT_FAILURE
        if self.overall_severity() is Severity.ERROR:
            return EXIT_FAILURE
        return EXIT_SUCCESS

    def to_collection_results(self) -> List[ResultSet]:
        """ResultSets achatados para o campo `results` da coleção final."""
        return self.result_sets
