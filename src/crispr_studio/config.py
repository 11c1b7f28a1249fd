import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load the appropriate .env file on module import
env = os.environ.get("CRISPR_STUDIO_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    # Fall back to the default .env file
    load_dotenv()


def _parse_timeout(raw: str | None) -> float | None:
    """An empty or non-positive value disables the aggregation deadline."""
    if not raw:
        return None
    seconds = float(raw)
    return seconds if seconds > 0 else None


@dataclass
class Config:
    environment: str
    database_url: str
    redis_url: str
    export_path: Path
    fanout_workers: int
    aggregation_timeout: float | None
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get(
                "DATABASE_URL", f"postgresql://localhost:5432/crispr_studio_{env}"
            ),
            redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
            export_path=Path(os.environ.get("EXPORT_PATH", "./exports")),
            fanout_workers=int(os.environ.get("FANOUT_WORKERS", "8")),
            aggregation_timeout=_parse_timeout(
                os.environ.get("AGGREGATION_TIMEOUT_SECONDS", "30")
            ),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )


config = Config.from_env()
