"""
Candidate fixture provider — the static candidate set served by the simulated API.

Candidates are generated deterministically from the value pools in
config/candidate_pools.yaml, or loaded from a JSON file when one is configured.
"""

import json
import os
import random
from datetime import datetime, timedelta, timezone

import yaml

from config.settings import settings
from models.candidate import CANDIDATE_STATUSES, Candidate

POOLS_FILE = "candidate_pools.yaml"


def load_pools(fixtures_dir: str = None) -> dict[str, list[str]]:
    path = os.path.join(fixtures_dir or settings.fixtures_dir, POOLS_FILE)
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _salary_band(rng: random.Random, experience: int) -> str:
    base = 60000 + experience * 10000
    low = base + rng.randint(-10000, 0)
    high = base + rng.randint(20000, 40000)
    return f"${low // 1000}k - ${high // 1000}k"


def _phone(rng: random.Random) -> str:
    return f"+1 ({rng.randint(200, 999)}) {rng.randint(200, 999)}-{rng.randint(1000, 9999)}"


def generate_candidates(
    count: int,
    seed: int = 42,
    fixtures_dir: str = None,
    now: datetime = None,
) -> list[Candidate]:
    """
    Generate ``count`` candidates with ids candidate-1 .. candidate-N.

    The same seed always yields the same set, apart from appliedAt which is
    relative to ``now``.
    """
    pools = load_pools(fixtures_dir)
    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)

    candidates = []
    for i in range(1, count + 1):
        first = rng.choice(pools["first_names"])
        last = rng.choice(pools["last_names"])
        experience = rng.randint(0, 15)
        skill_count = rng.randint(3, 8)

        candidates.append(
            Candidate(
                id=f"candidate-{i}",
                name=f"{first} {last}",
                email=f"{first.lower()}.{last.lower()}@{rng.choice(pools['email_domains'])}",
                phone=_phone(rng),
                position=rng.choice(pools["positions"]),
                experience=experience,
                skills=rng.sample(pools["skills"], min(skill_count, len(pools["skills"]))),
                resume=f"https://example.com/resume/{first.lower()}-{last.lower()}.pdf",
                status=rng.choice(CANDIDATE_STATUSES),
                applied_at=(now - timedelta(days=rng.randint(1, 365))).isoformat(),
                location=rng.choice(pools["cities"]),
                expected_salary=_salary_band(rng, experience),
            )
        )
    return candidates


def load_candidates(path: str) -> list[Candidate]:
    """Load a previously generated candidate set from a JSON array."""
    with open(path, "r", encoding="utf-8") as f:
        return [Candidate.model_validate(item) for item in json.load(f)]


def candidate_fixture(config=None) -> list[Candidate]:
    """The configured fixture set: a JSON file if set, otherwise generated."""
    config = config or settings
    if config.candidates_path:
        return load_candidates(config.candidates_path)
    return generate_candidates(config.candidate_count, config.candidate_seed, config.fixtures_dir)
