"""
Backend Settings.

Loads and validates configuration for the backend application,
aggregating settings from environment variables and config files.
"""

import os
import re
from dataclasses import dataclass
from typing import Dict

from libs.core.config_loader import load_root_config
from libs.core.project_paths import get_project_root


@dataclass(frozen=True)
class BackendSettings:
    """Immutable configuration object for the backend service."""

    host: str
    port: int
    gemini_model_name: str
    gemini_image_model_name: str
    # pause after each illustrated life-cycle stage
    stage_image_delay_ms: int = 2000
    cors_allow_origins: tuple = ()
    # idle workspaces / consultations are dropped after this; 0 disables
    session_idle_ttl_seconds: int = 3600


_DOTENV_CACHE: Dict[str, str] = {}

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
)


def _load_dotenv_vars() -> Dict[str, str]:
    """
    Load key/value pairs from project root .env without third-party deps.
    """
    if _DOTENV_CACHE:
        return _DOTENV_CACHE

    env_path = get_project_root() / ".env"
    if not env_path.exists():
        return _DOTENV_CACHE

    content = env_path.read_text(encoding="utf-8", errors="ignore")
    pattern = re.compile(
        r'^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?:["\'](.+?)["\']|([^#\r\n]*))'
    )

    for line in content.splitlines():
        match = pattern.match(line)
        if not match:
            continue
        key = match.group(1)
        val = match.group(2) if match.group(2) is not None else match.group(3)
        if val is not None:
            _DOTENV_CACHE[key] = val.strip()

    return _DOTENV_CACHE


def _get_env_value(name: str, default: str = "") -> str:
    """
    Read from real env first, then .env, then fallback.
    """
    value = os.getenv(name)
    if value is not None and value.strip():
        return value.strip()
    dotenv_val = _load_dotenv_vars().get(name, "").strip()
    return dotenv_val if dotenv_val else default


def load_settings() -> BackendSettings:
    """
    Backend configuration (single-process entry).

    Precedence: environment > .env > root config.json > defaults.
    The API key is not read here; libs.api_keys resolves it on first use.
    """
    root_cfg = load_root_config()

    host = _get_env_value("BACKEND_HOST", "127.0.0.1")
    port = int(_get_env_value("BACKEND_PORT", "8001"))

    default_model = str(root_cfg.get("GEMINI_MODEL_NAME") or "gemini-2.5-flash")
    gemini_model_name = _get_env_value("GEMINI_MODEL_NAME", default_model)

    default_image_model = str(
        root_cfg.get("GEMINI_IMAGE_MODEL_NAME") or "gemini-2.5-flash-image"
    )
    gemini_image_model_name = _get_env_value("GEMINI_IMAGE_MODEL_NAME", default_image_model)

    default_delay = str(root_cfg.get("STAGE_IMAGE_DELAY_MS") or 2000)
    stage_image_delay_ms = int(_get_env_value("STAGE_IMAGE_DELAY_MS", default_delay))

    default_ttl = str(root_cfg.get("SESSION_IDLE_TTL_SECONDS", 3600))
    session_idle_ttl_seconds = int(_get_env_value("SESSION_IDLE_TTL_SECONDS", default_ttl))

    # e.g. "https://botanist.example.com,http://localhost:5173"
    origins_str = _get_env_value("CORS_ALLOW_ORIGINS", "")
    cors_allow_origins = tuple(
        o.strip() for o in origins_str.split(",") if o.strip()
    ) or DEFAULT_CORS_ORIGINS

    return BackendSettings(
        host=host,
        port=port,
        gemini_model_name=gemini_model_name,
        gemini_image_model_name=gemini_image_model_name,
        stage_image_delay_ms=stage_image_delay_ms,
        cors_allow_origins=cors_allow_origins,
        session_idle_ttl_seconds=session_idle_ttl_seconds,
    )
