"""
Jobs Store — job postings snapshot, client-side filtering and optimistic reorder.
"""

import math
from typing import Optional

from config.log import get_logger
from config.settings import settings
from models.commands import (
    ArchiveJob,
    CreateJob,
    DeleteJob,
    FetchJobs,
    ReorderJobs,
    UnarchiveJob,
    UpdateJob,
)
from models.errors import ReorderInProgressError
from models.job import Application, Job
from models.result import ApiResult
from models.state import JobFilters, JobsPage
from stores.base import BaseStore, merge_by_id, remove_by_id
from stores.ui_store import UIStore
from tools.api_client import ApiClient

log = get_logger(__name__)

REORDER_FAILED = "Failed to reorder jobs. Changes reverted."


def move_item(items: list, source_index: int, destination_index: int) -> list:
    """Remove the item at source and reinsert it at destination; others shift by one."""
    moved = list(items)
    item = moved.pop(source_index)
    moved.insert(destination_index, item)
    return moved


def filter_and_paginate(
    jobs: list[Job],
    filters: JobFilters,
    show_archived: bool,
    current_page: int,
    per_page: int,
) -> JobsPage:
    """
    Pure filter-and-paginate over the jobs snapshot.

    The archived toggle selects archived jobs only, or non-archived only.
    Search matches title, company or location; status and type filters are
    exact, with "all" disabling them.
    """
    visible = [job for job in jobs if job.archived == show_archived]

    if filters.search:
        visible = [job for job in visible if job.matches_search(filters.search)]
    if filters.status != "all":
        visible = [job for job in visible if job.status == filters.status]
    if filters.type != "all":
        visible = [job for job in visible if job.type == filters.type]

    start = (current_page - 1) * per_page
    return JobsPage(
        jobs=visible[start:start + per_page],
        total_pages=math.ceil(len(visible) / per_page),
        visible_count=len(visible),
    )


class JobsStore(BaseStore):
    name = "Jobs"

    def __init__(self, api: ApiClient, ui: UIStore, per_page: int = None):
        super().__init__(api, ui)
        self.per_page = per_page or settings.jobs_per_page
        self.jobs: list[Job] = []
        self.filters = JobFilters()
        self.show_archived = False
        self.current_page = 1
        self._reorder_in_flight = False
        self._handlers = {
            FetchJobs: self._fetch_jobs,
            CreateJob: self._create_job,
            UpdateJob: self._update_job,
            DeleteJob: self._delete_job,
            ArchiveJob: self._archive_job,
            UnarchiveJob: self._unarchive_job,
            ReorderJobs: self._reorder_jobs,
        }

    def reset(self) -> None:
        super().reset()
        self.jobs = []
        self.filters = JobFilters()
        self.show_archived = False
        self.current_page = 1
        self._reorder_in_flight = False

    # ── Public actions ───────────────────────────────────────

    async def fetch_jobs(self) -> None:
        await self.dispatch(FetchJobs())

    async def add_job(self, data: dict) -> Job:
        return await self._execute(CreateJob(data=dict(data)))

    async def update_job(self, job_id: str, updates: dict) -> Job:
        return await self.dispatch(UpdateJob(job_id=job_id, updates=dict(updates)))

    async def delete_job(self, job_id: str) -> None:
        await self.dispatch(DeleteJob(job_id=job_id))

    async def archive_job(self, job_id: str) -> Job:
        return await self.dispatch(ArchiveJob(job_id=job_id))

    async def unarchive_job(self, job_id: str) -> Job:
        return await self.dispatch(UnarchiveJob(job_id=job_id))

    async def reorder_jobs(self, source_index: int, destination_index: int) -> ApiResult:
        """
        Move the job at source_index to destination_index.

        The new order is applied to ``jobs`` before the network call; on
        failure the pre-reorder snapshot is restored. Only one reorder may be
        in flight; a second one is refused without touching state.
        """
        if self._reorder_in_flight:
            return ApiResult.fail(ReorderInProgressError())

        count = len(self.jobs)
        if not (0 <= source_index < count and 0 <= destination_index < count):
            raise IndexError(
                f"reorder indexes {source_index} -> {destination_index} out of range for {count} jobs"
            )
        if source_index == destination_index:
            return ApiResult.ok({"success": True, "jobs": [job.to_wire() for job in self.jobs]})

        reordered = move_item(self.jobs, source_index, destination_index)
        return await self.dispatch(ReorderJobs(job_ids=tuple(job.id for job in reordered)))

    async def validate_slug(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Ask the API whether a slug is free. A failed call counts as valid."""
        if not slug:
            return False
        result = await self.api.get(
            "/api/jobs/validate-slug",
            params={"slug": slug, "excludeId": exclude_id},
        )
        if not result.success:
            log.warning("[Jobs] Slug validation failed (%s); accepting slug", result.message)
            return True
        return bool(result.data.get("isValid"))

    async def fetch_applications(self, job_id: str) -> list[Application]:
        result = await self._fetch("GET", f"/api/jobs/{job_id}/applications", "Failed to fetch applications")
        if not result.success:
            return []
        return [Application.model_validate(item) for item in result.data]

    async def submit_application(self, data: dict) -> Application:
        result = await self._mutate("POST", "/api/applications", "Failed to submit application", json_body=data)
        return Application.model_validate(result.data)

    # ── Local state ──────────────────────────────────────────

    def set_filter(self, key: str, value: str) -> None:
        if not hasattr(self.filters, key):
            raise KeyError(f"Unknown job filter: {key}")
        setattr(self.filters, key, value)
        self.current_page = 1

    def set_page(self, page: int) -> None:
        self.current_page = page

    def toggle_show_archived(self) -> None:
        self.show_archived = not self.show_archived

    def visible_page(self) -> JobsPage:
        return filter_and_paginate(
            self.jobs, self.filters, self.show_archived, self.current_page, self.per_page
        )

    # ── Command handlers ─────────────────────────────────────

    async def _fetch_jobs(self) -> None:
        result = await self._fetch("GET", "/api/jobs", "Failed to fetch jobs")
        if result.success:
            self.jobs = [Job.model_validate(item) for item in result.data]

    async def _create_job(self, data: dict) -> Job:
        result = await self._mutate("POST", "/api/jobs", "Failed to add job", json_body=data)
        job = Job.model_validate(result.data)
        if all(j.id != job.id for j in self.jobs):
            self.jobs = [*self.jobs, job]
        return job

    async def _update_job(self, job_id: str, updates: dict) -> Job:
        result = await self._mutate("PUT", f"/api/jobs/{job_id}", "Failed to update job", json_body=updates)
        job = Job.model_validate(result.data)
        self.jobs = merge_by_id(self.jobs, job)
        return job

    async def _delete_job(self, job_id: str) -> None:
        await self._mutate("DELETE", f"/api/jobs/{job_id}", "Failed to delete job")
        self.jobs = remove_by_id(self.jobs, job_id)

    async def _archive_job(self, job_id: str) -> Job:
        result = await self._mutate("PATCH", f"/api/jobs/{job_id}/archive", "Failed to archive job")
        job = Job.model_validate(result.data)
        self.jobs = merge_by_id(self.jobs, job)
        return job

    async def _unarchive_job(self, job_id: str) -> Job:
        result = await self._mutate("PATCH", f"/api/jobs/{job_id}/unarchive", "Failed to unarchive job")
        job = Job.model_validate(result.data)
        self.jobs = merge_by_id(self.jobs, job)
        return job

    async def _reorder_jobs(self, job_ids: tuple) -> ApiResult:
        if self._reorder_in_flight:
            return ApiResult.fail(ReorderInProgressError())

        # Capture, then apply the speculative order
        snapshot = list(self.jobs)
        by_id = {job.id: job for job in snapshot}
        wanted = set(job_ids)
        self.jobs = [by_id[i] for i in job_ids if i in by_id] + [
            job for job in snapshot if job.id not in wanted
        ]

        self._reorder_in_flight = True
        self.ui.set_loading(True)
        try:
            result = await self.api.patch(
                "/api/jobs/reorder",
                json_body={"jobIds": list(job_ids)},
                fallback_error="Failed to reorder jobs",
            )
        finally:
            self._reorder_in_flight = False
            self.ui.set_loading(False)

        if result.success:
            self.jobs = [Job.model_validate(item) for item in result.data["jobs"]]
            return result

        log.warning("[Jobs] Reorder failed (%s); rolling back", result.message)
        self.jobs = snapshot
        self.error = REORDER_FAILED
        self.ui.set_error(REORDER_FAILED)
        return result
