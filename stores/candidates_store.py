"""
Candidates Store — server-paginated candidate list, status changes and notes.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from config.settings import settings
from models.candidate import CANDIDATE_STATUSES, Candidate, Note, StatusChange
from models.commands import AddNote, DeleteCandidate, FetchCandidates, UpdateCandidateStatus
from models.state import CandidateFilters, Pagination
from stores.base import BaseStore, merge_by_id, remove_by_id
from stores.ui_store import UIStore
from tools.api_client import ApiClient


class CandidatesStore(BaseStore):
    name = "Candidates"

    def __init__(
        self,
        api: ApiClient,
        ui: UIStore,
        page_size: int = None,
        current_user: str = None,
    ):
        super().__init__(api, ui)
        self.page_size = page_size or settings.candidates_page_size
        self.current_user = current_user or settings.current_user
        self.candidates: list[Candidate] = []
        self.pagination: Optional[Pagination] = None
        self.filters = CandidateFilters()
        self.history: dict[str, list[StatusChange]] = {}
        self._handlers = {
            FetchCandidates: self._fetch_candidates,
            UpdateCandidateStatus: self._update_status,
            DeleteCandidate: self._delete_candidate,
            AddNote: self._add_note,
        }

    def reset(self) -> None:
        super().reset()
        self.candidates = []
        self.pagination = None
        self.filters = CandidateFilters()
        self.history = {}

    # ── Public actions ───────────────────────────────────────

    async def fetch_candidates(self, page: int = 1) -> None:
        await self.dispatch(FetchCandidates(page=page))

    async def update_candidate_status(self, candidate_id: str, status: str) -> Candidate:
        return await self.dispatch(UpdateCandidateStatus(candidate_id=candidate_id, status=status))

    async def delete_candidate(self, candidate_id: str) -> None:
        await self.dispatch(DeleteCandidate(candidate_id=candidate_id))

    async def add_note(self, candidate_id: str, text: str, mentions: list[str]) -> Note:
        """Create a note authored by the current user and append it to the candidate."""
        note = Note(
            id=str(uuid.uuid4()),
            candidate_id=candidate_id,
            text=text,
            mentions=list(mentions),
            created_by=self.current_user,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        return await self._execute(AddNote(candidate_id=candidate_id, note=note.to_wire()))

    async def fetch_candidate(self, candidate_id: str) -> Optional[Candidate]:
        """One candidate by id, or None. A 404 is not treated as an error."""
        result = await self.api.get(f"/api/candidates/{candidate_id}", fallback_error="Failed to fetch candidate")
        if result.success:
            return Candidate.model_validate(result.data)
        if result.status_code != 404:
            self._record_failure(result.message)
        return None

    async def fetch_status_history(self, candidate_id: str) -> list[StatusChange]:
        result = await self._fetch(
            "GET", f"/api/candidates/{candidate_id}/history", "Failed to fetch status history"
        )
        if result.success:
            self.history[candidate_id] = [StatusChange.model_validate(item) for item in result.data]
        return self.history.get(candidate_id, [])

    # ── Local state ──────────────────────────────────────────

    def set_search(self, search: str) -> None:
        self.filters.search = search

    def set_status_filter(self, status: str) -> None:
        self.filters.status = status

    def kanban_columns(self) -> dict[str, list[Candidate]]:
        """Current snapshot grouped by status, in pipeline order."""
        columns = {status: [] for status in CANDIDATE_STATUSES}
        for candidate in self.candidates:
            columns[candidate.status].append(candidate)
        return columns

    # ── Command handlers ─────────────────────────────────────

    async def _fetch_candidates(self, page: int) -> None:
        params = {
            "page": page,
            "limit": self.page_size,
            "search": self.filters.search,
            "status": self.filters.status or "all",
        }
        result = await self._fetch("GET", "/api/candidates", "Failed to fetch candidates", params=params)
        if result.success:
            self.candidates = [Candidate.model_validate(item) for item in result.data["data"]]
            self.pagination = Pagination.model_validate(result.data["pagination"])

    async def _update_status(self, candidate_id: str, status: str) -> Candidate:
        result = await self._mutate(
            "PATCH",
            f"/api/candidates/{candidate_id}/status",
            "Failed to update candidate status",
            json_body={"status": status},
        )
        candidate = Candidate.model_validate(result.data)
        self.candidates = merge_by_id(self.candidates, candidate)
        return candidate

    async def _delete_candidate(self, candidate_id: str) -> None:
        await self._mutate("DELETE", f"/api/candidates/{candidate_id}", "Failed to delete candidate")
        self.candidates = remove_by_id(self.candidates, candidate_id)

    async def _add_note(self, candidate_id: str, note: dict) -> Note:
        result = await self._mutate(
            "POST", f"/api/candidates/{candidate_id}/notes", "Failed to add note", json_body=note
        )
        saved = Note.model_validate(result.data)
        self.candidates = [
            c.model_copy(update={"notes": [*c.notes, saved]}) if c.id == candidate_id else c
            for c in self.candidates
        ]
        return saved
