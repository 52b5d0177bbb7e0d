# tests/conftest.py
"""
Fixtures compartilhados para testes do fnrender.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- fábricas de recursos e de anotações de função

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Recursos são construídos em memória, com proveniência explícita
    - Runners de teste vivem em `tests/fixtures/runners.py` (duck typing)
    - Imports do core são realizados de forma lazy

Invariantes:
    - Nenhuma fixture executa funções reais
    - Nenhuma fixture realiza I/O fora de `tmp_path`

Este módulo existe como infraestrutura de teste e não
como validação funcional do orquestrador.
"""

import pytest
from datetime import datetime, timezone


# =====================================================
# Config loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Representa o conteúdo típico de um `fnrender.defaults.yaml`, base
    sobre a qual overrides locais são aplicados via deep-merge.

    Returns:
        str: Conteúdo YAML da configuração padrão.
    """
    return """\
engine:
  timeout_seconds: 300
  results_dir: null
runtimes:
  container:
    binary: docker
    network: false
  exec:
    enabled: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de override local (apenas as chaves alteradas)."""
    return """\
engine:
  timeout_seconds: 30
runtimes:
  exec:
    enabled: false
"""


# =====================================================
# Pipeline fixtures (RunContext + recursos)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima e válida para testes do Engine.

    Decisões arquiteturais:
        - Config representada como dicionário já resolvido
        - Timeouts curtos e sem deadline de run

    Returns:
        dict: Configuração mínima.
    """
    return {
        "engine": {"timeout_seconds": 30, "run_deadline_seconds": None},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    `run_id` e `created_at` são fixos; o import é lazy para que falhas
    do core apareçam com mensagem clara no teste que as provoca.
    """
    from fnrender.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def make_resource():
    """
    Fábrica de Resource com proveniência explícita.

    Uso:
        make_resource("ConfigMap", "a", path="apps/a.yaml", index=0,
                      annotations={...}, data={...})
    """
    from fnrender.core.resources import Provenance, Resource

    def _make(kind, name, *, path=None, index=None, annotations=None, namespace=None,
              api_version="v1", **fields):
        metadata = {"name": name}
        if namespace:
            metadata["namespace"] = namespace
        if annotations:
            metadata["annotations"] = dict(annotations)
        doc = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
        doc.update(fields)
        return Resource(document=doc, provenance=Provenance(path=path, index=index))

    return _make


@pytest.fixture
def fn_annotation():
    """
    Fábrica da anotação de função (bloco YAML em string).

    Uso:
        fn_annotation(image="example/set-labels:v1", deferFailure=True)
        fn_annotation(exec_path="./fns/check.py")
    """
    import yaml

    from fnrender.core.resources import FUNCTION_ANNOTATION

    def _make(*, image=None, exec_path=None, **extra):
        block = {}
        if image is not None:
            block["container"] = {"image": image}
        if exec_path is not None:
            block["exec"] = {"path": exec_path}
        block.update(extra)
        return {FUNCTION_ANNOTATION: yaml.safe_dump(block, sort_keys=False)}

    return _make


@pytest.fixture
def make_function(make_resource, fn_annotation):
    """Recurso declarante de uma função container em `path`."""

    def _make(name, image, *, path, index=0, **extra):
        return make_resource(
            "FunctionConfig",
            name,
            api_version="fn.example.dev/v1",
            path=path,
            index=index,
            annotations=fn_annotation(image=image, **extra),
        )

    return _make
