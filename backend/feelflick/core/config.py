import os
from pydantic_settings import BaseSettings



class Settings(BaseSettings):
    db_user: str = os.getenv("POSTGRES_USER", "feelflick")
    db_password: str = os.getenv("POSTGRES_PASSWORD", "feelflick")
    db_name: str = os.getenv("POSTGRES_DB", "feelflick")
    database_url: str = os.getenv(
        "DATABASE_URL",
        f"postgresql+psycopg2://{os.getenv('POSTGRES_USER', 'feelflick')}:{os.getenv('POSTGRES_PASSWORD', 'feelflick')}@db:5432/{os.getenv('POSTGRES_DB', 'feelflick')}",
    )
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    timezone: str = os.getenv("FEELFLICK_TIMEZONE", os.getenv("TZ", "UTC"))

    # Candidate retrieval (online ranking)
    affinity_floor_score: float = float(os.getenv("AFFINITY_FLOOR_SCORE", "30"))
    retrieval_window: int = int(os.getenv("RETRIEVAL_WINDOW", "100"))
    retrieval_timeout_seconds: float = float(os.getenv("RETRIEVAL_TIMEOUT_SECONDS", "5"))
    retrieval_workers: int = int(os.getenv("RETRIEVAL_WORKERS", "8"))
    # Server-side cap on any single query (PostgreSQL only); 0 disables
    db_statement_timeout_ms: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "30000"))
    # Only the HTTP layer applies a default; the ranker itself requires an explicit limit
    default_recommendation_limit: int = int(os.getenv("DEFAULT_RECOMMENDATION_LIMIT", "20"))

    # Offline precompute
    precompute_workers: int = int(os.getenv("PRECOMPUTE_WORKERS", "8"))
    job_lock_ttl_seconds: int = int(os.getenv("JOB_LOCK_TTL_SECONDS", str(60 * 60 * 2)))

settings = Settings()
