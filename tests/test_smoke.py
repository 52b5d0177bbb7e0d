# tests/test_smoke.py
"""
Smoke test: o pacote importa e expõe a API pública mínima.

Nada aqui toca filesystem, runners ou configuração.
"""


def test_smoke():
    import fnrender

    assert fnrender.__version__
    assert callable(fnrender.render_package)
    assert fnrender.RenderOutcome.__name__ == "RenderOutcome"
