# tests/core/engine/test_reconcile_merge.py
"""
Testes da reconciliação da resposta de uma função com a coleção completa.

Regras verificadas:
    - correspondência por proveniência, depois por chave de identidade
    - itens correspondidos mantêm posição e proveniência
    - proveniência reescrita pela função move o recurso
    - itens novos recebem caminho padrão sob a âncora
    - itens em escopo ausentes da resposta são removidos
    - regenerar recursos já produzidos não os duplica
"""

import pytest

from fnrender.core.engine import Engine, discover
from fnrender.core.engine.reconcile import default_path, merge_response
from fnrender.core.engine.scope import resolve
from fnrender.core.resources import Provenance, Resource, ResourceCollection
from tests.fixtures.runners import ScriptedRunner, drop, generate


@pytest.fixture
def collection(make_resource):
    return ResourceCollection(
        items=[
            make_resource("ConfigMap", "outside", path="other/x.yaml", index=0),
            make_resource("ConfigMap", "one", path="a/cms.yaml", index=0, data={"v": "1"}),
            make_resource("ConfigMap", "two", path="a/cms.yaml", index=1),
        ]
    )


def _bare(kind, name, **fields):
    doc = {"apiVersion": "v1", "kind": kind, "metadata": {"name": name}}
    doc.update(fields)
    return Resource(document=doc)


def test_match_by_provenance_survives_rename(collection):
    split = resolve(collection, "a")
    renamed = Resource(
        document={"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "uno"}},
        provenance=Provenance(path="a/cms.yaml", index=0),
    )
    out = merge_response(collection, split, [renamed, collection.items[2]])

    assert [r.key.name for r in out.items] == ["outside", "uno", "two"]
    assert out.items[1].provenance == Provenance(path="a/cms.yaml", index=0)
    assert (out.matched, out.added, out.deleted) == (2, 0, 0)


def test_match_by_key_restores_provenance(collection):
    split = resolve(collection, "a")
    out = merge_response(collection, split, [_bare("ConfigMap", "two"), _bare("ConfigMap", "one", data={"v": "2"})])

    assert [r.key.name for r in out.items] == ["outside", "one", "two"]
    assert out.items[1].document["data"] == {"v": "2"}
    assert out.items[1].provenance == Provenance(path="a/cms.yaml", index=0)
    assert out.items[2].provenance == Provenance(path="a/cms.yaml", index=1)


def test_rewritten_provenance_moves_resource(collection):
    split = resolve(collection, "a")
    moved = collection.items[1].with_provenance(Provenance(path="a/moved.yaml", index=0))
    out = merge_response(collection, split, [moved, collection.items[2]])

    assert out.items[1].key.name == "one"
    assert out.items[1].provenance == Provenance(path="a/moved.yaml", index=0)


def test_new_items_get_default_path_and_missing_are_deleted(collection):
    split = resolve(collection, "a")
    out = merge_response(collection, split, [collection.items[1], _bare("Service", "web")])

    assert [r.key.name for r in out.items] == ["outside", "one", "web"]
    assert out.items[2].provenance == Provenance(path="a/service_web.yaml", index=None)
    assert (out.matched, out.added, out.deleted) == (1, 1, 1)


def test_complement_is_never_touched(collection):
    split = resolve(collection, "a")
    out = merge_response(collection, split, [])
    assert [r.key.name for r in out.items] == ["outside"]
    assert out.items[0] is collection.items[0]


def test_repeated_key_without_provenance_keeps_last_copy(collection):
    split = resolve(collection, "a")
    first = _bare("ConfigMap", "gen", data={"v": "old"})
    second = _bare("ConfigMap", "gen", data={"v": "new"})
    out = merge_response(collection, split, [first, second])

    generated = [r for r in out.items if r.key.name == "gen"]
    assert len(generated) == 1
    assert generated[0].document["data"] == {"v": "new"}


def test_default_path():
    assert default_path("", _bare("Deployment", "web")) == "deployment_web.yaml"
    assert default_path("apps/web", _bare("Service", "web")) == "apps/web/service_web.yaml"
    assert default_path("a", Resource(document={"kind": "X", "metadata": {"name": "a/b"}})) == "a/x_a_b.yaml"


def test_regeneration_is_idempotent(make_function, dummy_ctx):
    """
    Verifica que executar a mesma função geradora sobre a própria saída
    mantém a quantidade de itens e as identidades.
    """
    generated = {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "gen"}, "data": {"v": "1"}}
    runner = ScriptedRunner({"example/gen:v1": generate(generated)})
    start = ResourceCollection(items=[make_function("fn", "example/gen:v1", path="a/fn.yaml")])

    first = Engine(plan=discover(start), runners=[runner], ctx=dummy_ctx).run(start)
    second = Engine(plan=discover(first.collection), runners=[runner], ctx=dummy_ctx).run(first.collection)

    assert [r.key for r in first.collection.items] == [r.key for r in second.collection.items]
    assert len(second.collection.items) == 2
    assert second.collection.items[1].provenance.path == "a/configmap_gen.yaml"
    assert second.invocations["0:gen"].payload["merge"] == {"matched": 2, "added": 0, "deleted": 0}


def test_function_can_delete_scoped_resources(make_resource, make_function, dummy_ctx):
    start = ResourceCollection(
        items=[
            make_function("fn", "example/prune:v1", path="a/fn.yaml"),
            make_resource("ConfigMap", "stale", path="a/stale.yaml", index=0),
            make_resource("ConfigMap", "stale", path="b/stale.yaml", index=0),
        ]
    )
    runner = ScriptedRunner({"example/prune:v1": drop("ConfigMap", "stale")})
    result = Engine(plan=discover(start), runners=[runner], ctx=dummy_ctx).run(start)

    assert [r.provenance.path for r in result.collection.items] == ["a/fn.yaml", "b/stale.yaml"]
