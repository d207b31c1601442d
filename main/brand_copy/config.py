import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class CopyEngineConfig:
    db_path: str = os.getenv("BRAND_COPY_DB_PATH", "./brand_copy.db")
    queries_key: str = os.getenv("QUERIES_KEY", "fnf-shared-queries")
    insights_key: str = os.getenv("INSIGHTS_KEY", "fnf-shared-insights")
    max_saved_queries: int = int(os.getenv("MAX_SAVED_QUERIES", "100"))
    max_saved_insights: int = int(os.getenv("MAX_SAVED_INSIGHTS", "50"))
    default_region: str = os.getenv("DEFAULT_REGION", "domestic")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def db_parent(self) -> Path:
        return Path(self.db_path).resolve().parent


DEFAULT_CONFIG = CopyEngineConfig()
