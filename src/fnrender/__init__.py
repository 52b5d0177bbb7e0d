# src/fnrender/__init__.py
"""
fnrender — orquestrador de funções de configuração.

Uma árvore de documentos de recursos declara, por anotação, funções que
transformam ou validam os recursos do próprio diretório e subdiretórios.
O fnrender descobre essas declarações, executa as funções em sequência
sobre um snapshot da árvore, reconcilia cada resposta com a coleção
completa e aplica a política de falha (fail-fast ou deferFailure).

Arquitetura em alto nível:
    - core.resources    → recursos, coleção e resultados
    - core.engine       → descoberta, escopo, execução e agregação
    - runtimes          → runners concretos (container, exec)
    - persistence       → store local de recursos e gravação de resultados
    - render            → ponto de entrada `render_package`
"""

__version__ = "0.1.0"

from .render import RenderOutcome, render_package

__all__ = ["RenderOutcome", "render_package", "__version__"]
