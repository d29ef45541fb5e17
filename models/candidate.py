"""
Candidate data model — candidates, their notes and status history.
"""

from typing import Literal, Optional
from pydantic import Field

from models.base import Record

CandidateStatus = Literal["new", "screening", "interview", "offer", "rejected"]

# Pipeline order, also the kanban column order
CANDIDATE_STATUSES: tuple[str, ...] = ("new", "screening", "interview", "offer", "rejected")


class Note(Record):
    """An immutable note on a candidate, possibly mentioning team members."""

    id: str
    candidate_id: str
    text: str
    mentions: list[str] = Field(default_factory=list)
    created_by: str
    created_at: str


class StatusChange(Record):
    """One transition of a candidate's status."""

    from_status: Optional[CandidateStatus] = Field(default=None, alias="from")
    to: CandidateStatus
    timestamp: str
    changed_by: str

    def to_wire(self) -> dict:
        # "from" is meaningful when null, so keep it
        return self.model_dump(by_alias=True, mode="json")


class Candidate(Record):
    id: str
    name: str
    email: str
    phone: str = ""
    position: str = ""
    experience: int = Field(default=0, ge=0, description="Years of experience")
    skills: list[str] = Field(default_factory=list)
    resume: str = ""
    status: CandidateStatus = "new"
    applied_at: str
    location: str = ""
    expected_salary: str = ""
    notes: list[Note] = Field(default_factory=list)
    status_history: list[StatusChange] = Field(default_factory=list)

    def to_wire(self) -> dict:
        data = super().to_wire()
        data["statusHistory"] = [change.to_wire() for change in self.status_history]
        return data
