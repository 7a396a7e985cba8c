from typing import List, Optional

from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    jwt_secret: str
    access_token_expire_hours: int = 12

    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"
    postgres_db: str = "competeedu"
    # Full SQLAlchemy URL, takes precedence over the postgres_* parts
    db_url: Optional[str] = None
    db_echo: bool = False

    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # Badges and voting
    badge_secret: str = "competeedu-badge-secret"
    vote_salt: str = "vote-salt"
    badge_issuer_name: str = "CompeteEdu"
    public_base_url: str = "http://localhost:3000"

    # Tier policy: "percentile" uses cumulative *_pct cutoffs, "count" uses *_count slots
    tier_policy_mode: str = "percentile"
    gold_pct: float = 0.10
    silver_pct: float = 0.25
    bronze_pct: float = 0.40
    gold_count: int = 1
    silver_count: int = 2
    bronze_count: int = 3

    max_public_vote_weight: int = 60
    scoring_overdue_days: int = 7
    enforce_judge_assignment: bool = True

    # SMTP settings
    smtp_host: Optional[str] = None
    smtp_port: int = 25
    smtp_sender: str = "noreply@competeedu.local"

    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    class Config:
        env_file = BASE_DIR / ".env"
        extra = "ignore"


settings = Settings()
