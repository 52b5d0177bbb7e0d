"""
Runners de teste (in-process) — fnrender

Simulam a fronteira de processo sem subprocess: o request é serializado no
formato ResourceList, entregue como dict ao comportamento registrado para a
imagem, e a resposta volta como YAML para `parse_response`. Assim a
proveniência viaja pelas anotações exatamente como com um runtime real.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from fnrender.core.exceptions import RunnerInvocationError
from fnrender.core.pipeline.runner import RunnerResponse, parse_response
from fnrender.core.resources import ResourceCollection
from fnrender.core.resources.yamlio import dump_document


# (exit_code, resposta como dict ou texto bruto, stderr)
Reply = Tuple[int, Union[Dict[str, Any], str, None], str]
Behaviour = Callable[[Dict[str, Any]], Reply]


def echo(request: Dict[str, Any]) -> Reply:
    return 0, {"items": request.get("items", [])}, ""


def set_label(key: str, value: str) -> Behaviour:
    def behaviour(request: Dict[str, Any]) -> Reply:
        items = deepcopy(request.get("items", []))
        for item in items:
            labels = item.setdefault("metadata", {}).setdefault("labels", {})
            labels[key] = value
        return 0, {"items": items}, ""

    return behaviour


def fail(exit_code: int = 1, *, message: str = "validation failed", keep_items: bool = True) -> Behaviour:
    def behaviour(request: Dict[str, Any]) -> Reply:
        body: Dict[str, Any] = {"results": [{"severity": "error", "message": message}]}
        if keep_items:
            body["items"] = request.get("items", [])
        return exit_code, body, "boom"

    return behaviour


def garbage(exit_code: int = 0) -> Behaviour:
    def behaviour(request: Dict[str, Any]) -> Reply:
        return exit_code, "{not: [valid", ""

    return behaviour


def emit_results(*records: Dict[str, Any]) -> Behaviour:
    def behaviour(request: Dict[str, Any]) -> Reply:
        return 0, {"items": request.get("items", []), "results": list(records)}, ""

    return behaviour


def generate(*docs: Dict[str, Any]) -> Behaviour:
    """Mantém a entrada e (re)gera `docs` sem proveniência."""

    def behaviour(request: Dict[str, Any]) -> Reply:
        return 0, {"items": list(request.get("items", [])) + [deepcopy(d) for d in docs]}, ""

    return behaviour


def drop(kind: str, name: str) -> Behaviour:
    def behaviour(request: Dict[str, Any]) -> Reply:
        items = [
            i for i in request.get("items", [])
            if not (i.get("kind") == kind and (i.get("metadata") or {}).get("name") == name)
        ]
        return 0, {"items": items}, ""

    return behaviour


class ScriptedRunner:
    """Runner `container` cujo comportamento é escolhido pela imagem."""

    kind = "container"

    def __init__(self, behaviours: Optional[Dict[str, Behaviour]] = None, *, default: Behaviour = echo):
        self.behaviours = dict(behaviours or {})
        self.default = default
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    @property
    def images(self) -> List[str]:
        return [image for image, _ in self.calls]

    def run(self, runtime, request: ResourceCollection, *, timeout=None, cancel=None) -> RunnerResponse:
        wire = request.to_wire()
        self.calls.append((runtime.image, deepcopy(wire)))
        behaviour = self.behaviours.get(runtime.image, self.default)
        exit_code, body, stderr = behaviour(deepcopy(wire))
        if body is None:
            return RunnerResponse(exit_code=exit_code, stderr=stderr, parse_error="resposta ausente")
        text = body if isinstance(body, str) else dump_document(body)
        return parse_response(exit_code, text, stderr)


class BrokenRunner:
    """Runner cujo runtime nunca inicia."""

    kind = "container"

    def run(self, runtime, request, *, timeout=None, cancel=None):
        raise RunnerInvocationError("runtime indisponível", details={"image": runtime.image})
