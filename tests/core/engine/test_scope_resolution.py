# tests/core/engine/test_scope_resolution.py
"""
Testes da resolução de escopo por diretório âncora.

Invariantes:
    - Escopo = diretório âncora e todos os seus subdiretórios
    - A âncora raiz enxerga a coleção inteira
    - Escopo e complemento preservam a ordem relativa original
    - Âncoras absolutas ou que escapam da árvore são erro fatal
"""

import pytest

from fnrender.core.engine.scope import in_scope, normalize_anchor, resolve
from fnrender.core.exceptions import ScopeResolutionError
from fnrender.core.resources import ResourceCollection


@pytest.fixture
def tree(make_resource):
    return ResourceCollection(
        items=[
            make_resource("ConfigMap", "root", path="root.yaml", index=0),
            make_resource("ConfigMap", "a", path="a/a.yaml", index=0),
            make_resource("ConfigMap", "ab", path="a/b/ab.yaml", index=0),
            make_resource("ConfigMap", "abc", path="abc/x.yaml", index=0),
            make_resource("ConfigMap", "c", path="c/c.yaml", index=0),
            make_resource("ConfigMap", "loose", path=None),
        ]
    )


def _names(resources):
    return [r.key.name for r in resources]


def test_anchor_includes_nested_directories(tree):
    split = resolve(tree, "a")
    assert _names(split.scoped) == ["a", "ab"]
    assert _names(split.complement) == ["root", "abc", "c", "loose"]
    assert split.scoped_positions == [1, 2]


def test_sibling_prefix_is_not_in_scope(tree):
    """`abc/` não pertence ao escopo de `a/` apesar do prefixo textual."""
    scoped, _complement = resolve(tree, "a")
    assert "abc" not in _names(scoped)


def test_root_anchor_sees_everything(tree):
    scoped, complement = resolve(tree, "")
    assert _names(scoped) == _names(tree.items)
    assert complement == []


def test_resources_without_path_belong_to_root(tree):
    loose = tree.items[-1]
    assert in_scope(loose, "")
    assert not in_scope(loose, "a")


@pytest.mark.parametrize(
    "raw, expected",
    [("", ""), (".", ""), ("./a/", "a"), ("a//b", "a/b"), ("a\\b", "a/b"), ("a/../c", "c")],
)
def test_normalize_anchor(raw, expected):
    assert normalize_anchor(raw) == expected


@pytest.mark.parametrize("raw", [None, "/etc", "..", "../outside", "a/../../x"])
def test_invalid_anchor_raises(tree, raw):
    with pytest.raises(ScopeResolutionError):
        resolve(tree, raw)
