"""
Configuration settings for TalentFlow.
Loads values from .env file and provides typed access.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

# Determine project root
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
env_path = os.path.join(project_root, ".env")
load_dotenv(env_path)

CONFIG_DIR = os.path.join(project_root, "config")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Persisted store
    db_path: str = field(
        default_factory=lambda: os.getenv(
            "TALENTFLOW_DB_PATH", os.path.join(project_root, "data", "talentflow.db")
        )
    )

    # Simulated API
    api_base_url: str = field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://talentflow.local")
    )
    api_latency_ms: int = field(
        default_factory=lambda: int(os.getenv("API_LATENCY_MS", "300"))
    )
    api_failure_rate: float = field(
        default_factory=lambda: float(os.getenv("API_FAILURE_RATE", "0.1"))
    )

    # Candidate fixture set
    candidate_count: int = field(
        default_factory=lambda: int(os.getenv("CANDIDATE_COUNT", "1500"))
    )
    candidate_seed: int = field(
        default_factory=lambda: int(os.getenv("CANDIDATE_SEED", "42"))
    )
    candidates_path: Optional[str] = field(
        default_factory=lambda: os.getenv("CANDIDATES_PATH") or None
    )

    # Pagination
    candidates_page_size: int = field(
        default_factory=lambda: int(os.getenv("CANDIDATES_PAGE_SIZE", "50"))
    )
    jobs_per_page: int = field(
        default_factory=lambda: int(os.getenv("JOBS_PER_PAGE", "10"))
    )

    # Identity used for notes and status history
    current_user: str = field(
        default_factory=lambda: os.getenv("CURRENT_USER", "John Doe")
    )

    # Fixture files
    fixtures_dir: str = field(
        default_factory=lambda: os.getenv("FIXTURES_DIR", CONFIG_DIR)
    )

    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )


# Singleton instance
settings = Settings()
