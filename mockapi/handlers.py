"""
Simulated API — business logic for the jobs, applications, candidates and
assessments endpoints.

Jobs, applications and assessments are served from the persisted store;
candidates from the in-memory CandidateRegistry.
"""

import math
import random
import uuid
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from config.log import get_logger
from mockapi.candidates import CandidateRegistry
from mockapi.router import Router, json_response, read_json
from models.assessment import Assessment
from models.candidate import CANDIDATE_STATUSES, Note
from models.errors import ConflictError, InvalidRequestError, NotFoundError
from models.job import Application, Job, default_slug, generate_slug
from tools.database import Database

log = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse(model, record: dict):
    """Validate a record against its model; 400 on failure."""
    try:
        return model.model_validate(record)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise InvalidRequestError(f"Invalid {model.__name__.lower()}: {location}: {first['msg']}")


def _int_param(request: httpx.Request, name: str, default: int) -> int:
    raw = request.url.params.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidRequestError(f"'{name}' must be an integer")
    if value < 1:
        raise InvalidRequestError(f"'{name}' must be at least 1")
    return value


class MockApi:
    """Registers every endpoint on a Router and holds the backing data."""

    def __init__(
        self,
        db: Database,
        registry: CandidateRegistry,
        current_user: str = "John Doe",
        page_size: int = 50,
        latency_ms: int = 300,
        failure_rate: float = 0.1,
        rng: Optional[random.Random] = None,
    ):
        self.db = db
        self.registry = registry
        self.current_user = current_user
        self.page_size = page_size
        self.router = Router(latency_ms=latency_ms, failure_rate=failure_rate, rng=rng)
        self._register()

    @property
    def failure_rate(self) -> float:
        return self.router.failure_rate

    @failure_rate.setter
    def failure_rate(self, value: float) -> None:
        self.router.failure_rate = value

    def transport(self) -> httpx.MockTransport:
        return self.router.transport()

    def _register(self) -> None:
        add = self.router.add

        # Fixed paths before the /:id patterns they would otherwise match
        add("GET", "/api/jobs/validate-slug", self.validate_slug, "Network error: Failed to validate slug")
        add("PATCH", "/api/jobs/reorder", self.reorder_jobs, "Network error: Failed to reorder jobs")
        add("GET", "/api/jobs", self.list_jobs, "Network error: Failed to fetch jobs")
        add("POST", "/api/jobs", self.create_job, "Network error: Failed to create job")
        add("GET", "/api/jobs/:id/applications", self.list_applications, "Network error: Failed to fetch applications")
        add("PATCH", "/api/jobs/:id/archive", self.archive_job, "Network error: Failed to archive job")
        add("PATCH", "/api/jobs/:id/unarchive", self.unarchive_job, "Network error: Failed to unarchive job")
        add("GET", "/api/jobs/:id", self.get_job, "Network error: Failed to fetch job details")
        add("PUT", "/api/jobs/:id", self.update_job, "Network error: Failed to update job")
        add("DELETE", "/api/jobs/:id", self.delete_job, "Network error: Failed to delete job")
        add("POST", "/api/applications", self.create_application, "Network error: Failed to submit application")

        add("GET", "/api/candidates", self.list_candidates, "Network error: Failed to fetch candidates")
        add("PATCH", "/api/candidates/:id/status", self.update_candidate_status, "Network error: Failed to update candidate status")
        add("POST", "/api/candidates/:id/notes", self.add_note, "Network error: Failed to add note")
        add("GET", "/api/candidates/:id/history", self.get_status_history, "Network error: Failed to fetch status history")
        add("GET", "/api/candidates/:id", self.get_candidate, "Network error: Failed to fetch candidate")
        add("DELETE", "/api/candidates/:id", self.delete_candidate, "Network error: Failed to delete candidate")

        add("GET", "/api/assessments", self.list_assessments, "Network error: Failed to fetch assessments")
        add("POST", "/api/assessments", self.create_assessment, "Network error: Failed to create assessment")
        add("GET", "/api/assessments/job/:job_id", self.get_assessment_by_job, "Network error: Failed to fetch assessment")
        add("GET", "/api/assessments/:id", self.get_assessment, "Network error: Failed to fetch assessment")
        add("PUT", "/api/assessments/:id", self.update_assessment, "Network error: Failed to update assessment")
        add("DELETE", "/api/assessments/:id", self.delete_assessment, "Network error: Failed to delete assessment")

    # ── Jobs ─────────────────────────────────────────────────

    def _require_job(self, job_id: str) -> dict:
        job = self.db.jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    def _slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        return any(job["id"] != exclude_id for job in self.db.jobs.where("slug", slug))

    def _check_slug(self, slug: str, exclude_id: Optional[str] = None) -> None:
        """A supplied slug must already be in slug form and unused by other jobs."""
        if slug != generate_slug(slug):
            raise InvalidRequestError(f"Invalid slug: {slug!r} (use lowercase letters, digits and dashes)")
        if self._slug_taken(slug, exclude_id):
            raise ConflictError("Slug is already in use")

    async def list_jobs(self, request: httpx.Request) -> httpx.Response:
        return json_response(self.db.jobs.order_by("order"))

    async def get_job(self, request: httpx.Request, id: str) -> httpx.Response:
        return json_response(self._require_job(id))

    async def create_job(self, request: httpx.Request) -> httpx.Response:
        body = read_json(request)
        if not isinstance(body, dict):
            raise InvalidRequestError("Job body must be an object")

        job_id = str(uuid.uuid4())
        orders = [job.get("order", -1) for job in self.db.jobs.all()]
        job = {
            **body,
            "id": job_id,
            "postedAt": _now(),
            "status": "open",
            "order": max(orders, default=-1) + 1,
        }
        job.setdefault("archived", False)
        if job.get("slug"):
            self._check_slug(job["slug"])
        else:
            job["slug"] = default_slug(job.get("title", ""), job_id)

        job = _parse(Job, job).to_wire()
        self.db.jobs.add(job)
        log.info("Created job %s (%s)", job_id, job["title"])
        return json_response(job, 201)

    async def update_job(self, request: httpx.Request, id: str) -> httpx.Response:
        updates = read_json(request)
        if not isinstance(updates, dict):
            raise InvalidRequestError("Job updates must be an object")
        current = self._require_job(id)

        updates.pop("id", None)
        if "slug" in updates:
            if updates["slug"]:
                self._check_slug(updates["slug"], exclude_id=id)
            else:
                updates["slug"] = default_slug(updates.get("title") or current.get("title", ""), id)

        merged = _parse(Job, {**current, **updates}).to_wire()
        self.db.jobs.update(id, merged)
        return json_response(merged)

    async def delete_job(self, request: httpx.Request, id: str) -> httpx.Response:
        self.db.jobs.delete(id)
        return json_response({"success": True})

    async def _set_archived(self, job_id: str, archived: bool) -> httpx.Response:
        self._require_job(job_id)
        self.db.jobs.update(job_id, {"archived": archived})
        return json_response(self.db.jobs.get(job_id))

    async def archive_job(self, request: httpx.Request, id: str) -> httpx.Response:
        return await self._set_archived(id, True)

    async def unarchive_job(self, request: httpx.Request, id: str) -> httpx.Response:
        return await self._set_archived(id, False)

    async def reorder_jobs(self, request: httpx.Request) -> httpx.Response:
        body = read_json(request)
        job_ids = body.get("jobIds") if isinstance(body, dict) else None
        if not isinstance(job_ids, list) or not all(isinstance(i, str) for i in job_ids):
            raise InvalidRequestError("jobIds must be a list of job ids")

        unknown = [job_id for job_id in job_ids if self.db.jobs.get(job_id) is None]
        if unknown:
            raise InvalidRequestError(f"Unknown job ids: {', '.join(unknown)}")

        # Single transaction: either every order is written or none is
        self.db.jobs.bulk_update({job_id: {"order": i} for i, job_id in enumerate(job_ids)})
        return json_response({"success": True, "jobs": self.db.jobs.order_by("order")})

    async def validate_slug(self, request: httpx.Request) -> httpx.Response:
        slug = request.url.params.get("slug")
        exclude_id = request.url.params.get("excludeId") or None
        if not slug:
            return json_response({"isValid": False})
        return json_response({"isValid": not self._slug_taken(slug, exclude_id)})

    # ── Applications ─────────────────────────────────────────

    async def list_applications(self, request: httpx.Request, id: str) -> httpx.Response:
        return json_response(self.db.applications.where("jobId", id))

    async def create_application(self, request: httpx.Request) -> httpx.Response:
        body = read_json(request)
        if not isinstance(body, dict):
            raise InvalidRequestError("Application body must be an object")

        application = _parse(Application, {
            **body,
            "id": str(uuid.uuid4()),
            "status": "pending",
            "appliedAt": _now(),
        }).to_wire()
        self.db.applications.add(application)
        return json_response(application, 201)

    # ── Candidates ───────────────────────────────────────────

    async def list_candidates(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        search = params.get("search") or ""
        status = params.get("status") or "all"
        page = _int_param(request, "page", 1)
        limit = _int_param(request, "limit", self.page_size)

        filtered = self.registry.search(search, status)
        total = len(filtered)
        start = (page - 1) * limit

        return json_response({
            "data": [c.to_wire() for c in filtered[start:start + limit]],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        })

    async def get_candidate(self, request: httpx.Request, id: str) -> httpx.Response:
        candidate = self.registry.require(id)
        return json_response(self.registry.with_history(candidate).to_wire())

    async def update_candidate_status(self, request: httpx.Request, id: str) -> httpx.Response:
        body = read_json(request)
        status = body.get("status") if isinstance(body, dict) else None
        if status not in CANDIDATE_STATUSES:
            raise InvalidRequestError(f"Invalid status: {status}")

        candidate = self.registry.set_status(id, status, changed_by=self.current_user)
        return json_response(self.registry.with_history(candidate).to_wire())

    async def delete_candidate(self, request: httpx.Request, id: str) -> httpx.Response:
        self.registry.delete(id)
        return json_response({"success": True})

    async def add_note(self, request: httpx.Request, id: str) -> httpx.Response:
        body = read_json(request)
        if not isinstance(body, dict):
            raise InvalidRequestError("Note body must be an object")
        self.registry.require(id)

        record = {
            "createdBy": self.current_user,
            "createdAt": _now(),
            "mentions": [],
            **body,
            "id": str(uuid.uuid4()),
            "candidateId": id,
        }
        note = _parse(Note, record)
        self.registry.add_note(id, note)
        return json_response(note.to_wire(), 201)

    async def get_status_history(self, request: httpx.Request, id: str) -> httpx.Response:
        return json_response([change.to_wire() for change in self.registry.history_for(id)])

    # ── Assessments ──────────────────────────────────────────

    def _require_assessment(self, assessment_id: str) -> dict:
        assessment = self.db.assessments.get(assessment_id)
        if assessment is None:
            raise NotFoundError("Assessment not found")
        return assessment

    async def list_assessments(self, request: httpx.Request) -> httpx.Response:
        return json_response(self.db.assessments.all())

    async def get_assessment(self, request: httpx.Request, id: str) -> httpx.Response:
        return json_response(self._require_assessment(id))

    async def get_assessment_by_job(self, request: httpx.Request, job_id: str) -> httpx.Response:
        assessment = self.db.assessments.first("jobId", job_id)
        if assessment is None:
            raise NotFoundError("Assessment not found")
        return json_response(assessment)

    async def create_assessment(self, request: httpx.Request) -> httpx.Response:
        body = read_json(request)
        if not isinstance(body, dict) or not body.get("jobId"):
            raise InvalidRequestError("Assessment must reference a jobId")

        if self.db.assessments.first("jobId", body["jobId"]) is not None:
            raise ConflictError("Assessment already exists for this job")

        timestamp = _now()
        assessment = _parse(Assessment, {
            **body,
            "id": str(uuid.uuid4()),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }).to_wire()
        self.db.assessments.add(assessment)
        return json_response(assessment, 201)

    async def update_assessment(self, request: httpx.Request, id: str) -> httpx.Response:
        updates = read_json(request)
        if not isinstance(updates, dict):
            raise InvalidRequestError("Assessment updates must be an object")
        current = self._require_assessment(id)

        updates.pop("id", None)
        new_job_id = updates.get("jobId")
        if new_job_id and new_job_id != current["jobId"]:
            if self.db.assessments.first("jobId", new_job_id) is not None:
                raise ConflictError("Assessment already exists for this job")

        merged = _parse(Assessment, {**current, **updates, "updatedAt": _now()}).to_wire()
        self.db.assessments.update(id, merged)
        return json_response(merged)

    async def delete_assessment(self, request: httpx.Request, id: str) -> httpx.Response:
        self.db.assessments.delete(id)
        return json_response({"success": True})
