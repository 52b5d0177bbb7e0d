# src/fnrender/core/__init__.py
"""
Core do fnrender.

Reúne o orquestrador de funções de configuração, independente de como os
recursos são carregados ou de como cada função é executada.

Componentes principais:
    - resources    → modelo de recursos, coleção e resultados (formato ResourceList)
    - config       → resolução de configuração (merge, validação, hashing)
    - pipeline     → declarações, contrato de runner, registry e contexto da run
    - engine       → descoberta, escopo, execução e agregação
    - traceability → Manifest e Event Log da run

Limites explícitos:
    - Não interpreta a semântica de recursos
    - Não depende de CLI, container runtime ou filesystem
"""
