"""
Runtime configuration for the tool transports.

Values come from the environment, after a `.env` file (searched from the
working directory upward) has been loaded.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv


def _find_env_file() -> Path:
    env_path = Path(".env")
    if not env_path.exists():
        for parent in Path.cwd().parents:
            candidate = parent / ".env"
            if candidate.exists():
                return candidate
    return env_path


_env_path = _find_env_file()
if _env_path.exists():
    load_dotenv(_env_path)

MAX_SOURCE_LENGTH = int(os.environ.get("MERMAID_MAX_SOURCE_LENGTH", "100000"))
SERVER_HOST = os.environ.get("MERMAID_SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.environ.get("MERMAID_SERVER_PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Set up root logging for a transport process. Logs go to stderr."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
