"""Configuration from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Acceptance gate for the best-scoring master
    match_threshold: float = Field(default=40.0, gt=0, le=100)

    # Per-tier score constants
    brand_score: float = 90.0
    containment_max_score: float = 80.0
    lcs_max_score: float = 70.0

    # Minimum lengths before a tier may fire
    min_brand_core_length: int = 2
    min_lcs_length: int = 3

    # Learned-mapping persistence (caller side)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "app"
    postgres_password: str = ""
    postgres_db: str = "app"

    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def database_url_sync(self) -> str:
        """Synchronous database URL for Alembic."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_prefix = "LABELMATCH_"
        case_sensitive = False
        frozen = True


# Sales channels that keep their own learned-mapping namespace
CHANNELS = {
    "amazon": "Amazon",
    "rakuten": "楽天市場",
    "yahoo": "Yahoo!",
    "mercari": "メルカリ",
    "base": "BASE",
    "qoo10": "Qoo10",
    "tiktok": "TikTok",
    "csv": "汎用CSV",
}

DEFAULT_CHANNEL = "csv"
