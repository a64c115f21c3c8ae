from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple
import os

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_LANGUAGES = ("javascript", "typescript", "python", "java", "cpp")


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(part.strip().lower() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once and passed to the app factory."""

    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    database_url: str = f"sqlite:///{BASE_DIR / 'codepractice.db'}"
    languages: Tuple[str, ...] = field(default=DEFAULT_LANGUAGES)
    log_level: str = "INFO"
    executor_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        secret = os.getenv("CODEPRACTICE_SECRET_KEY") or os.getenv("SECRET_KEY") or defaults.secret_key
        seed = os.getenv("CODEPRACTICE_EXECUTOR_SEED")
        return cls(
            secret_key=secret,
            algorithm=os.getenv("CODEPRACTICE_JWT_ALGORITHM", defaults.algorithm),
            access_token_expire_minutes=int(
                os.getenv("CODEPRACTICE_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            database_url=os.getenv("CODEPRACTICE_DB_URL", defaults.database_url),
            languages=_split_csv(os.getenv("CODEPRACTICE_LANGUAGES", "")) or defaults.languages,
            log_level=os.getenv("CODEPRACTICE_LOG_LEVEL", defaults.log_level).upper(),
            executor_seed=int(seed) if seed else None,
        )
