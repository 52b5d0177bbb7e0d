"""
fnrender — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do fnrender.

Objetivo:
- Permitir que discoverer, resolver, runners e Engine levantem exceções semânticas
- Facilitar o mapeamento determinístico para FnRenderErrorPayload
- Evitar ValueError/RuntimeError genéricos nos pontos críticos do pipeline

Taxonomia:
- DeclarationParseError   → anotação malformada; fatal, aborta a descoberta
- ScopeResolutionError    → âncora ausente/ambígua; fatal, aborta a run
- RunnerInvocationError   → runtime não iniciou ou saída ilegível; sujeita a deferFailure
- ValidationFailure       → resposta bem formada com exit != 0; sujeita a deferFailure
- PersistenceError        → falha de escrita no sink; fatal, nunca repetida
- RunCancelledError       → cancelamento externo ou deadline; a run é sempre abortada

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Nenhuma exceção dispara retry automático.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class FnRenderException(Exception):
    """Base class para exceções internas do fnrender.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Descoberta / Escopo
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class DeclarationParseError(FnRenderException):
    """Anotação de função não pôde ser interpretada como FunctionDeclaration."""


@dataclass(eq=False)
class ScopeResolutionError(FnRenderException):
    """Localização âncora de uma invocação ausente, inválida ou ambígua."""


# ---------------------------------------------------------------------------
# Formato de coleção
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class CollectionFormatError(FnRenderException):
    """Documento não corresponde ao formato de ResourceCollection."""


# ---------------------------------------------------------------------------
# Execução de funções
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class RunnerInvocationError(FnRenderException):
    """Runtime falhou ao iniciar ou a execução não pôde ser concluída."""


@dataclass(eq=False)
class InvocationTimeoutError(RunnerInvocationError):
    """Invocação excedeu o timeout configurado e foi terminada."""


@dataclass(eq=False)
class ValidationFailure(FnRenderException):
    """Função respondeu de forma bem formada, mas sinalizou falha."""


@dataclass(eq=False)
class RunCancelledError(FnRenderException):
    """Run cancelada externamente ou por deadline; nada é persistido."""


# ---------------------------------------------------------------------------
# Engine / Persistência
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EngineConfigurationError(FnRenderException):
    """Configuração inválida ou inconsistente para execução."""


@dataclass(eq=False)
class PersistenceError(FnRenderException):
    """Falha ao gravar a coleção final ou os resultados no destino."""
