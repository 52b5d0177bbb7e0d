# src/fnrender/core/engine/__init__.py
"""
Engine do fnrender.

Componentes:
    - scope      → resolução de escopo por diretório âncora
    - planner    → descoberta de declarações e plano em pós-ordem
    - reconcile  → reconciliação da resposta de uma função com a coleção
    - aggregator → ResultSets, severidade geral e exit status
    - engine     → execução sequencial com política de falha explícita

Princípios fundamentais:
    - Descoberta e execução são responsabilidades separadas
    - O plano é determinístico para a mesma coleção
    - Nenhuma decisão silenciosa é tomada durante a execução

Limites explícitos:
    - Não lê nem escreve o store
    - Não implementa a lógica de nenhuma função
"""
from .aggregator import ResultAggregator
from .engine import Engine, RunResult
from .planner import discover, plan_hash
from .reconcile import MergeOutcome, merge_response
from .scope import ScopeSplit, normalize_anchor, resolve

__all__ = [
    "ResultAggregator",
    "Engine",
    "RunResult",
    "discover",
    "plan_hash",
    "MergeOutcome",
    "merge_response",
    "ScopeSplit",
    "normalize_anchor",
    "resolve",
]
