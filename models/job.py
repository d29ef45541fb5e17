"""
Job data model — represents a single job posting and applications to it.
"""

import re
from typing import Literal, Optional
from pydantic import Field

from models.base import Record

JobType = Literal["full-time", "part-time", "contract"]
JobStatus = Literal["open", "closed"]
ApplicationStatus = Literal["pending", "reviewing", "accepted", "rejected"]


def generate_slug(title: str) -> str:
    """Lowercase the title and collapse every non-alphanumeric run into a single dash."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower())
    return slug.strip("-")


def default_slug(title: str, job_id: str) -> str:
    """Slug assigned to jobs that were stored without one."""
    return f"{generate_slug(title)}-{job_id[:6]}"


class Job(Record):
    """A job posting as stored in the jobs collection."""

    id: str = Field(description="Unique job id")
    title: str = Field(description="Job title")
    company: str = Field(description="Company name")
    location: str = Field(default="", description="Job location (city, state, remote, etc.)")
    type: JobType = Field(default="full-time", description="Employment type")
    salary: str = Field(default="", description="Free-text salary range")
    description: str = Field(default="", description="Job description")
    requirements: list[str] = Field(default_factory=list, description="Ordered requirement lines")
    posted_at: str = Field(description="ISO timestamp the job was posted")
    status: JobStatus = Field(default="open")
    order: int = Field(default=0, description="Display position; lower sorts first")
    archived: bool = Field(default=False)
    slug: Optional[str] = Field(default=None, description="URL-safe identifier, unique across jobs")

    def matches_search(self, search: str) -> bool:
        """Case-insensitive substring match on title, company or location."""
        needle = search.lower()
        return (
            needle in self.title.lower()
            or needle in self.company.lower()
            or needle in self.location.lower()
        )


class Application(Record):
    """A submitted application to a job."""

    id: str
    job_id: str
    candidate_name: str
    email: str
    phone: str = ""
    resume: str = ""
    cover_letter: str = ""
    status: ApplicationStatus = "pending"
    applied_at: str
