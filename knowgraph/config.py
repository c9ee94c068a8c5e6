"""
Runtime configuration for KnowGraph.

Settings come from environment variables, optionally loaded from a
.env file at the project root:

- KNOWGRAPH_DB_PATH: SQLite database (default: ~/.knowgraph/knowgraph.db)
- KNOWGRAPH_COURSES_DIR: YAML course definitions (default: <project>/courses)
- KNOWGRAPH_LOG_LEVEL: logging level name (default: INFO)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = Path.home() / ".knowgraph"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "knowgraph.db"
DEFAULT_COURSES_DIR = PROJECT_ROOT / "courses"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    """Resolved runtime settings."""
    db_path: Path
    courses_dir: Path
    log_level: str


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional .env file (default: <project>/.env). Values already
            present in the environment take precedence.

    Returns:
        Settings with defaults applied
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    db_path = os.environ.get("KNOWGRAPH_DB_PATH")
    courses_dir = os.environ.get("KNOWGRAPH_COURSES_DIR")
    log_level = os.environ.get("KNOWGRAPH_LOG_LEVEL", DEFAULT_LOG_LEVEL)

    return Settings(
        db_path=Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH,
        courses_dir=Path(courses_dir).expanduser() if courses_dir else DEFAULT_COURSES_DIR,
        log_level=log_level.upper(),
    )


def setup_logging(level: str | int = DEFAULT_LOG_LEVEL):
    """Configure root logging for scripts and the app."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
