"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (sesión HTTP, credenciales) lean config de forma
  consistente.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

APP_DIR_NAME = "jpnic-portal"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (Windows, macOS o XDG)."""

    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA") or Path.home())
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return root / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    """Lee `CLAVE=valor` ignorando comentarios y líneas sin `=`."""

    data: dict[str, str] = {}
    for line in map(str.strip, text.splitlines()):
        if line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep and key.strip():
            data[key.strip()] = value.strip().strip("\"'")
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    target = env_path or get_user_env_file()
    merged = _parse_env_lines(target.read_text(encoding="utf-8")) if target.is_file() else {}
    merged.update((key, value) for key, value in values.items() if value is not None)

    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(f"# {APP_DIR_NAME}: credenciales y endpoints del portal\n{body}", encoding="utf-8")
    logger.debug("Config de usuario actualizada: %s (%d claves)", target, len(merged))
    return target


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="JPNIC_PORTAL_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="https://iphostmaster.nic.ad.jp",
        min_length=8,
        description="URL base del portal de miembros.",
    )
    transaction_url: str | None = Field(
        default=None,
        description="Endpoint de Webトランザクション (respuesta RET/RET_CODE).",
    )

    pfx_path: Path | None = Field(
        default=None,
        description="Ruta al bundle PKCS#12 (.p12/.pfx) con certificado y clave cliente.",
    )
    pfx_pass: str | None = Field(
        default=None,
        description="Passphrase del bundle PKCS#12.",
    )
    ca_path: Path | None = Field(
        default=None,
        description="Ruta al PEM con la(s) CA que validan el servidor.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:91.0) Gecko/20100101 Firefox/91.0",
        min_length=1,
        description="User-Agent enviado al portal.",
    )
    request_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pausa mínima entre peticiones dependientes (detalle/handles).",
    )
    workflow_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Plazo total de un workflow; None = sin plazo.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging por defecto de la CLI.",
    )
