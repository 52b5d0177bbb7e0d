"""Persistência dos resultados de uma run.

Cada ResultSet vira um artefato YAML nomeado individualmente:

    <results_dir>/results-<sequence_index>-<name>.yaml

O Manifest da run, quando fornecido, é gravado ao lado em `manifest.json`.

Decisões:
- Nomes repetidos nunca colidem: o índice de sequência faz parte do nome
- Caracteres fora de [A-Za-z0-9._-] no nome são substituídos por `_`
- Antes de gravar, artefatos de runs anteriores (`results-<n>-*.yaml` e
  `manifest.json`) são removidos; outros arquivos do diretório ficam intactos
- Falhas de escrita viram PersistenceError, sem nova tentativa
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from fnrender.core.exceptions import PersistenceError
from fnrender.core.resources import ResultSet
from fnrender.core.resources.yamlio import dump_document
from fnrender.core.traceability.manifest import RunManifest, add_event, save_manifest


MANIFEST_FILENAME = "manifest.json"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")
_ARTIFACT = re.compile(r"^results-\d+-[A-Za-z0-9._-]+\.yaml$")


def artifact_name(result_set: ResultSet, position: int) -> str:
    index = result_set.sequence_index if result_set.sequence_index is not None else position
    name = _UNSAFE.sub("_", result_set.name).strip("._") or "function"
    return f"results-{index}-{name}.yaml"


def _is_artifact(path: Path) -> bool:
    return path.is_file() and (path.name == MANIFEST_FILENAME or bool(_ARTIFACT.match(path.name)))


class ResultsStore:
    """Grava ResultSets (e o Manifest) em um diretório de resultados."""

    def __init__(self, *, results_dir: Union[str, Path]):
        self.results_dir = Path(results_dir)

    def write(
        self,
        result_sets: Sequence[ResultSet],
        *,
        manifest: Optional[Union[RunManifest, Dict[str, Any]]] = None,
    ) -> List[Path]:
        """Substitui os artefatos da run anterior: um arquivo por ResultSet, na ordem de invocação.

        Returns:
            List[Path]: Caminhos gravados (o Manifest por último, se houver).

        Raises:
            PersistenceError: Em qualquer falha de escrita.
        """
        written: List[Path] = []
        try:
            self.results_dir.mkdir(parents=True, exist_ok=True)
            removed = sorted(p.name for p in self.results_dir.iterdir() if _is_artifact(p))
            for name in removed:
                (self.results_dir / name).unlink()
            for position, rs in enumerate(result_sets):
                path = self.results_dir / artifact_name(rs, position)
                path.write_text(dump_document(rs.to_dict()), encoding="utf-8")
                written.append(path)

            if manifest is not None:
                add_event(
                    manifest,
                    event_type="results_saved",
                    ts=datetime.now(timezone.utc),
                    payload={"files": [p.name for p in written], "removed": removed},
                )
                path = self.results_dir / MANIFEST_FILENAME
                save_manifest(manifest, path)
                written.append(path)
        except OSError as e:
            raise PersistenceError(
                "Falha ao gravar resultados da run",
                details={"results_dir": str(self.results_dir), "error": str(e)},
                hint="Verifique permissões do diretório de resultados; nenhuma nova tentativa é feita.",
            ) from e
        return written


__all__ = ["ResultsStore", "artifact_name", "MANIFEST_FILENAME"]
