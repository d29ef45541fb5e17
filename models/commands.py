"""
Replayable store actions.

Each store remembers the last action it ran as one of these commands, so a
retry repeats it explicitly. Commands are plain data and round-trip through
``to_dict`` / ``command_from_dict``.
"""

from dataclasses import asdict, dataclass, field, fields


@dataclass(frozen=True)
class Command:
    def to_dict(self) -> dict:
        return {"type": type(self).__name__, **asdict(self)}


# ── Jobs ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class FetchJobs(Command):
    pass


@dataclass(frozen=True)
class CreateJob(Command):
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateJob(Command):
    job_id: str
    updates: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteJob(Command):
    job_id: str


@dataclass(frozen=True)
class ArchiveJob(Command):
    job_id: str


@dataclass(frozen=True)
class UnarchiveJob(Command):
    job_id: str


@dataclass(frozen=True)
class ReorderJobs(Command):
    job_ids: tuple = ()


# ── Candidates ───────────────────────────────────────────────

@dataclass(frozen=True)
class FetchCandidates(Command):
    page: int = 1


@dataclass(frozen=True)
class UpdateCandidateStatus(Command):
    candidate_id: str
    status: str


@dataclass(frozen=True)
class DeleteCandidate(Command):
    candidate_id: str


@dataclass(frozen=True)
class AddNote(Command):
    candidate_id: str
    note: dict = field(default_factory=dict)


# ── Assessments ──────────────────────────────────────────────

@dataclass(frozen=True)
class FetchAssessments(Command):
    pass


@dataclass(frozen=True)
class CreateAssessment(Command):
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateAssessment(Command):
    assessment_id: str
    updates: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteAssessment(Command):
    assessment_id: str


COMMAND_TYPES = {
    cls.__name__: cls
    for cls in (
        FetchJobs, CreateJob, UpdateJob, DeleteJob, ArchiveJob, UnarchiveJob, ReorderJobs,
        FetchCandidates, UpdateCandidateStatus, DeleteCandidate, AddNote,
        FetchAssessments, CreateAssessment, UpdateAssessment, DeleteAssessment,
    )
}


def command_from_dict(data: dict) -> Command:
    """Rebuild a command serialized with ``Command.to_dict``."""
    cls = COMMAND_TYPES[data["type"]]
    kwargs = {f.name: data[f.name] for f in fields(cls) if f.name in data}
    if cls is ReorderJobs:
        kwargs["job_ids"] = tuple(kwargs.get("job_ids", ()))
    return cls(**kwargs)
