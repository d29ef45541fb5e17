"""Shared builders for the test modules."""

from app.context import AppContext
from config.settings import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "db_path": ":memory:",
        "api_latency_ms": 0,
        "api_failure_rate": 0.0,
        "candidate_count": 1500,
        "candidate_seed": 7,
        "candidates_path": None,
        "candidates_page_size": 50,
        "jobs_per_page": 10,
        "current_user": "John Doe",
    }
    values.update(overrides)
    return Settings(**values)


def make_context(**overrides) -> AppContext:
    return AppContext.create(make_settings(**overrides))
