"""
Assessments Store — assessments snapshot, one per job.
"""

from typing import Optional

from models.assessment import Assessment
from models.commands import CreateAssessment, DeleteAssessment, FetchAssessments, UpdateAssessment
from stores.base import BaseStore, merge_by_id, remove_by_id


class AssessmentsStore(BaseStore):
    name = "Assessments"

    def __init__(self, api, ui):
        super().__init__(api, ui)
        self.assessments: list[Assessment] = []
        self._handlers = {
            FetchAssessments: self._fetch_assessments,
            CreateAssessment: self._create_assessment,
            UpdateAssessment: self._update_assessment,
            DeleteAssessment: self._delete_assessment,
        }

    def reset(self) -> None:
        super().reset()
        self.assessments = []

    async def fetch_assessments(self) -> None:
        await self.dispatch(FetchAssessments())

    async def create_assessment(self, data: dict) -> Assessment:
        return await self._execute(CreateAssessment(data=dict(data)))

    async def update_assessment(self, assessment_id: str, updates: dict) -> Assessment:
        return await self.dispatch(UpdateAssessment(assessment_id=assessment_id, updates=dict(updates)))

    async def delete_assessment(self, assessment_id: str) -> None:
        await self.dispatch(DeleteAssessment(assessment_id=assessment_id))

    async def fetch_assessment_by_job_id(self, job_id: str) -> Optional[Assessment]:
        """The assessment linked to a job, or None when there is none."""
        self.is_loading = True
        self.error = None
        self.ui.set_loading(True)
        result = await self.api.get(f"/api/assessments/job/{job_id}", fallback_error="Failed to fetch assessment")
        self.is_loading = False
        self.ui.set_loading(False)

        if result.success:
            return Assessment.model_validate(result.data)
        if result.status_code != 404:
            self._record_failure(result.message)
        return None

    async def _fetch_assessments(self) -> None:
        result = await self._fetch("GET", "/api/assessments", "Failed to fetch assessments")
        if result.success:
            self.assessments = [Assessment.model_validate(item) for item in result.data]

    async def _create_assessment(self, data: dict) -> Assessment:
        result = await self._mutate("POST", "/api/assessments", "Failed to create assessment", json_body=data)
        assessment = Assessment.model_validate(result.data)
        if all(a.id != assessment.id for a in self.assessments):
            self.assessments = [*self.assessments, assessment]
        return assessment

    async def _update_assessment(self, assessment_id: str, updates: dict) -> Assessment:
        result = await self._mutate(
            "PUT", f"/api/assessments/{assessment_id}", "Failed to update assessment", json_body=updates
        )
        assessment = Assessment.model_validate(result.data)
        self.assessments = merge_by_id(self.assessments, assessment)
        return assessment

    async def _delete_assessment(self, assessment_id: str) -> None:
        await self._mutate("DELETE", f"/api/assessments/{assessment_id}", "Failed to delete assessment")
        self.assessments = remove_by_id(self.assessments, assessment_id)
