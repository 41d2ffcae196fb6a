"""Exportación JSON de resultados del portal.

Por qué JSON:
- Interoperabilidad con scripts de inventario de direcciones y pipelines.
- Permite archivar el resultado de una búsqueda sin volver a consultar el portal.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel


def dump_records(payload: BaseModel | Sequence[BaseModel]) -> str:
    """Serializa un modelo (o lista de modelos) a JSON UTF-8 estable."""

    if isinstance(payload, BaseModel):
        data: object = payload.model_dump(mode="json")
    else:
        data = [item.model_dump(mode="json") for item in payload]
    return json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_records_json(*, payload: BaseModel | Sequence[BaseModel], output_path: Path) -> Path:
    """Escribe `payload` en `output_path` (creando directorios)."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_records(payload), encoding="utf-8")
    return output_path
