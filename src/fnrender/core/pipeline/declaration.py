# src/fnrender/core/pipeline/declaration.py
"""
Interpretação de declarações de função.

Qualquer recurso pode declarar uma função através da anotação reservada
`config.kubernetes.io/function`. O valor é um bloco YAML (string) ou um mapa:

container:
  image: example.dev/set-labels:v1
  network: false
  env: {LOG: debug}
name: set-labels
deferFailure: false

ou

exec:
  path: ./fns/validate.py
  args: [--strict]

O discriminante é a chave do runtime: o bloco deve conter exatamente uma das
formas registradas em `_RUNTIME_SHAPES`. Nenhuma reflexão aberta é usada.

Decisões:
    - Chaves desconhecidas no bloco são erro (um `deferFailre` digitado errado
      não pode virar silenciosamente `deferFailure: false`)
    - O nome padrão é derivado da imagem (sem registry/tag/digest) ou do
      basename do executável (sem extensão)

Limites explícitos:
    - Não executa funções
    - Não valida se a imagem/executável existe
"""

from __future__ import annotations

import posixpath
from typing import Any, Callable, Dict, Optional

from fnrender.core.exceptions import CollectionFormatError, DeclarationParseError
from fnrender.core.resources import FUNCTION_ANNOTATION, Resource
from fnrender.core.resources.yamlio import load_document

from .types import ContainerRuntime, ExecRuntime, FunctionDeclaration, RuntimeDescriptor


_ALLOWED_KEYS = {"container", "exec", "name", "deferFailure"}


def _fail(resource: Resource, message: str, **details: Any) -> DeclarationParseError:
    return DeclarationParseError(
        message,
        details={
            "resource": str(resource.key),
            "path": resource.provenance.path,
            "index": resource.provenance.index,
            **details,
        },
        hint=f"Corrija a anotação '{FUNCTION_ANNOTATION}' do recurso declarante.",
    )


def _parse_env(resource: Resource, raw: Any) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise _fail(resource, "env deve ser um mapa", received=type(raw).__name__)
    env: Dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not key:
            raise _fail(resource, "chaves de env devem ser strings não vazias", key=key)
        if isinstance(value, (dict, list)):
            raise _fail(resource, "valores de env devem ser escalares", key=key)
        env[key] = "" if value is None else str(value)
    return env


def _parse_container(resource: Resource, block: Dict[str, Any]) -> ContainerRuntime:
    image = block.get("image")
    if not isinstance(image, str) or not image.strip():
        raise _fail(resource, "container.image deve ser uma string não vazia")

    network = block.get("network")
    if network is not None and not isinstance(network, bool):
        raise _fail(resource, "container.network deve ser bool")

    unknown = sorted(set(block) - {"image", "network", "env"})
    if unknown:
        raise _fail(resource, "chaves desconhecidas em container", unknown=unknown)

    return ContainerRuntime(
        image=image.strip(),
        network=network,
        env=_parse_env(resource, block.get("env")),
    )


def _parse_exec(resource: Resource, block: Dict[str, Any]) -> ExecRuntime:
    path = block.get("path")
    if not isinstance(path, str) or not path.strip():
        raise _fail(resource, "exec.path deve ser uma string não vazia")

    args = block.get("args") or []
    if not isinstance(args, list) or not all(isinstance(a, (str, int, float)) for a in args):
        raise _fail(resource, "exec.args deve ser uma lista de escalares")

    unknown = sorted(set(block) - {"path", "args", "env"})
    if unknown:
        raise _fail(resource, "chaves desconhecidas em exec", unknown=unknown)

    return ExecRuntime(
        path=path.strip(),
        args=tuple(str(a) for a in args),
        env=_parse_env(resource, block.get("env")),
    )


_RUNTIME_SHAPES: Dict[str, Callable[[Resource, Dict[str, Any]], RuntimeDescriptor]] = {
    ContainerRuntime.kind: _parse_container,
    ExecRuntime.kind: _parse_exec,
}


def default_function_name(runtime: RuntimeDescriptor) -> str:
    """Deriva um nome estável a partir do runtime."""
    if isinstance(runtime, ContainerRuntime):
        ref = runtime.image.split("@", 1)[0]
        last = ref.rsplit("/", 1)[-1]
        return last.split(":", 1)[0] or ref
    base = posixpath.basename(runtime.path.replace("\\", "/"))
    stem, _ext = posixpath.splitext(base)
    return stem or base


def _load_block(resource: Resource, raw: Any) -> Dict[str, Any]:
    if isinstance(raw, str):
        try:
            raw = load_document(raw)
        except CollectionFormatError as e:
            raise _fail(resource, "anotação de função não é YAML válido", error=e.details.get("error")) from e

    if not isinstance(raw, dict):
        raise _fail(resource, "anotação de função deve ser um mapa", received=type(raw).__name__)
    return raw


def parse_declaration(resource: Resource) -> Optional[FunctionDeclaration]:
    """
    Interpreta a anotação de função de um recurso.

    Returns:
        Optional[FunctionDeclaration]: None quando o recurso não declara função.

    Raises:
        DeclarationParseError: Se a anotação existir mas for malformada.
    """
    annotations = resource.annotations
    if FUNCTION_ANNOTATION not in annotations:
        return None

    block = _load_block(resource, annotations[FUNCTION_ANNOTATION])

    unknown = sorted(set(block) - _ALLOWED_KEYS)
    if unknown:
        raise _fail(resource, "chaves desconhecidas na declaração", unknown=unknown)

    shapes = [k for k in _RUNTIME_SHAPES if k in block]
    if len(shapes) != 1:
        raise _fail(
            resource,
            "declaração deve conter exatamente um runtime",
            found=shapes,
            allowed=sorted(_RUNTIME_SHAPES),
        )

    shape = shapes[0]
    runtime_block = block[shape]
    if not isinstance(runtime_block, dict):
        raise _fail(resource, f"{shape} deve ser um mapa", received=type(runtime_block).__name__)
    runtime = _RUNTIME_SHAPES[shape](resource, runtime_block)

    defer_failure = block.get("deferFailure", False)
    if not isinstance(defer_failure, bool):
        raise _fail(resource, "deferFailure deve ser bool", received=defer_failure)

    name = block.get("name")
    if name is None:
        name = default_function_name(runtime)
    elif not isinstance(name, str) or not name.strip():
        raise _fail(resource, "name deve ser uma string não vazia")

    return FunctionDeclaration(
        name=name.strip(),
        runtime=runtime,
        source=resource.copy(),
        defer_failure=defer_failure,
        params=dict(block),
    )
