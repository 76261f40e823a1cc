"""Process entry point: environment, logging and the uvicorn server.

    mallnav                      # console script, settings from the environment
    uvicorn mallnav.main:app     # any ASGI server

Settings come from the process environment first, then from the file named by
MALLNAV_ENV_FILE (default `.env` in the working directory). The venue itself is
chosen by MALLNAV_VENUE_PATH / MALLNAV_GENERATED_FLOORS, read by `create_app`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import uvicorn

from mallnav.api import create_app

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def read_env_file(path: Path) -> dict[str, str]:
    """Parse `KEY=value` lines; comments, blanks and `export ` prefixes are skipped."""
    settings: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        if key:
            settings[key] = value
    return settings


def apply_env_file(path: Path | None = None) -> list[str]:
    """Copy settings from the env file into os.environ without overriding.

    Returns the keys that were set. A missing file is not an error.
    """
    env_path = path or Path(os.getenv("MALLNAV_ENV_FILE", ".env"))
    if not env_path.is_file():
        return []

    applied = []
    for key, value in read_env_file(env_path).items():
        if key not in os.environ:
            os.environ[key] = value
            applied.append(key)
    return applied


def configure_logging() -> None:
    level_name = os.getenv("MALLNAV_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"MALLNAV_LOG_LEVEL '{level_name}' is not a logging level")
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main() -> None:
    host = os.getenv("API_HOST", "127.0.0.1")
    port = int(os.getenv("API_PORT", "8000"))
    reload_enabled = os.getenv("API_RELOAD", "false").lower() in {"1", "true", "yes"}
    logging.getLogger(__name__).info("Serving mallnav on %s:%d", host, port)
    uvicorn.run("mallnav.main:app", host=host, port=port, reload=reload_enabled)


apply_env_file()
configure_logging()
app = create_app()


if __name__ == "__main__":
    main()
