"""
Fixture Seeder — populates the persisted store with baseline jobs and assessments.
Safe to run on every start: it checks collection counts before writing.
"""

import os
from datetime import datetime, timedelta, timezone

import yaml

from config.log import get_logger
from config.settings import settings
from models.job import default_slug, generate_slug
from tools.database import Database

log = get_logger(__name__)

JOBS_FILE = "seed_jobs.yaml"
ASSESSMENTS_FILE = "seed_assessments.yaml"


def load_fixture(filename: str, fixtures_dir: str = None) -> list[dict]:
    """
    Load a list of records from a YAML fixture file.

    Args:
        filename: Fixture file name, e.g. seed_jobs.yaml.
        fixtures_dir: Directory holding the fixture (defaults to settings).

    Returns:
        The list stored under the file's single top-level key.
    """
    path = os.path.join(fixtures_dir or settings.fixtures_dir, filename)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    # One top-level key per file: "jobs" or "assessments"
    for value in data.values():
        return list(value)
    return []


def build_baseline_jobs(fixtures_dir: str = None, now: datetime = None) -> list[dict]:
    """Turn the job fixture into records with order, archived and slug assigned."""
    now = now or datetime.now(timezone.utc)
    jobs = []
    for i, raw in enumerate(load_fixture(JOBS_FILE, fixtures_dir)):
        job = dict(raw)
        days_ago = job.pop("posted_days_ago", 0)
        job["postedAt"] = (now - timedelta(days=days_ago)).isoformat()
        job["order"] = i
        job["archived"] = False
        job["slug"] = f"{generate_slug(job['title'])}-{job['id']}"
        jobs.append(job)
    return jobs


def build_baseline_assessments(fixtures_dir: str = None, now: datetime = None) -> list[dict]:
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    assessments = []
    for raw in load_fixture(ASSESSMENTS_FILE, fixtures_dir):
        assessment = dict(raw)
        assessment["createdAt"] = timestamp
        assessment["updatedAt"] = timestamp
        assessments.append(assessment)
    return assessments


def backfill_jobs(db: Database) -> int:
    """Fill in any missing order, archived or slug field, job by job."""
    backfilled = 0
    for i, job in enumerate(db.jobs.all()):
        updates = {}
        if "order" not in job:
            updates["order"] = i
        if "archived" not in job:
            updates["archived"] = False
        if not job.get("slug"):
            updates["slug"] = default_slug(job.get("title", ""), job["id"])

        if updates:
            db.jobs.update(job["id"], updates)
            backfilled += 1
    return backfilled


def seed_database(db: Database, fixtures_dir: str = None) -> dict:
    """
    Ensure a non-empty baseline dataset exists.

    Returns:
        dict with counts: jobs_added, jobs_backfilled, assessments_added.
    """
    summary = {"jobs_added": 0, "jobs_backfilled": 0, "assessments_added": 0}

    if db.jobs.count() == 0:
        summary["jobs_added"] = db.jobs.bulk_add(build_baseline_jobs(fixtures_dir))
        log.info("Seeded %d baseline jobs", summary["jobs_added"])
    else:
        summary["jobs_backfilled"] = backfill_jobs(db)
        if summary["jobs_backfilled"]:
            log.info("Backfilled %d existing jobs", summary["jobs_backfilled"])

    if db.assessments.count() == 0:
        summary["assessments_added"] = db.assessments.bulk_add(
            build_baseline_assessments(fixtures_dir)
        )
        log.info("Seeded %d baseline assessments", summary["assessments_added"])

    return summary
