"""Configuración del cliente.

Por qué aquí:
- Un único `AppSettings` (pydantic-settings) para el cliente HTTP, los
  adaptadores y la CLI; nadie lee `os.environ` por su cuenta.
- El `.env` de usuario vive fuera del proyecto: `doctor setup` lo escribe y
  cualquier instalación del paquete lo encuentra.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "openai-models-client"
ENV_FILE_HEADER = f"# {APP_DIR_NAME} user config (.env)"


def get_user_config_dir() -> Path:
    """Directorio de config por usuario: APPDATA, Application Support o XDG."""

    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA") or Path.home())
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return root / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def read_user_env_vars() -> dict[str, str]:
    """Variables `KEY=value` del .env de usuario (vacío si no existe)."""

    env_path = get_user_env_file()
    if not env_path.is_file():
        return {}

    values: dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#") or not key.strip():
            continue
        values[key.strip()] = value.strip().strip("\"'")
    return values


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Fusiona `values` en el .env de usuario; un valor `None` borra la clave."""

    merged = read_user_env_vars()
    for key, value in values.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    body = [ENV_FILE_HEADER, *(f"{key}={merged[key]}" for key in sorted(merged))]
    env_path.write_text("\n".join(body) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central: credenciales, endpoint, timeout y logging.

    Las env vars `OPENAI_CLIENT_*` ganan sobre los ficheros `.env`.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_CLIENT_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None,
        description="API key (bearer token) para la API remota.",
    )
    organization_id: str | None = Field(
        default=None,
        description="Organización opcional (header `OpenAI-Organization`).",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1/",
        min_length=8,
        description="Base URL de la API.",
    )
    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout por request por defecto (segundos).",
    )
    user_agent: str = Field(
        default="openai-models-client/0.1",
        min_length=1,
        description="User-Agent de las peticiones.",
    )
    verbose: bool = Field(
        default=False,
        description="Logs a nivel DEBUG.",
    )
    log_json: bool = Field(
        default=False,
        description="Logs como líneas JSON en lugar de consola.",
    )
