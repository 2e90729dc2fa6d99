"""
AQL Job Desk - System Configuration
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Autosave retry warning threshold, placeholder marker for
                      unallocated job numbers, SQLite busy timeout
v1.0.0 (2026-09-28): Initial configuration module
"""

from pydantic_settings import BaseSettings
from pathlib import Path
import os


class Settings(BaseSettings):
    """System-wide configuration"""

    # Application
    APP_NAME: str = "AQL Job Desk"
    APP_VERSION: str = "1.1.0"
    DEBUG: bool = False

    # API Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_WORKERS: int = 1

    # SQLite Configuration
    SQLITE_DB_PATH: str = str(Path(__file__).parent / "data" / "aql_jobs.db")
    DB_BUSY_TIMEOUT_S: float = 10.0  # writers queue on the lock instead of failing

    # File Paths
    LOGS_DIR: str = str(Path(__file__).parent / "logs")

    # Draft Autosave
    AUTOSAVE_DEBOUNCE_S: float = 2.0  # quiet period after the last form edit
    AUTOSAVE_WARN_AFTER_FAILURES: int = 3
    DEFAULT_TAB: str = "basic"
    DRAFT_QUERY_PARAM: str = "draft"  # /jobs/new?draft=<id>

    # Job Numbering ({facility}-{sequence}-{revision})
    JOB_NUMBER_PLACEHOLDER: str = "TEMP"  # 16-TEMP-1 until reconciled
    INITIAL_REVISION: int = 1

    # Demo data
    SEED_ON_STARTUP: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Singleton instance
settings = Settings()


def init_directories():
    """Create necessary directories if they don't exist"""
    for directory in [os.path.dirname(os.path.abspath(settings.SQLITE_DB_PATH)),
                      settings.LOGS_DIR]:
        os.makedirs(directory, exist_ok=True)


if __name__ == "__main__":
    print(f"{settings.APP_NAME} Configuration v{settings.APP_VERSION}")
    print(f"SQLite: {settings.SQLITE_DB_PATH}")
    print(f"Autosave debounce: {settings.AUTOSAVE_DEBOUNCE_S}s "
          f"(warn after {settings.AUTOSAVE_WARN_AFTER_FAILURES} failures)")
    print(f"Job number placeholder: <facility>-{settings.JOB_NUMBER_PLACEHOLDER}-1")
