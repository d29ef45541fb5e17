"""
In-memory candidate collection and status history behind the simulated API.

Neither survives a restart: ``reset`` rebuilds both from the fixture.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from models.candidate import Candidate, Note, StatusChange
from models.errors import NotFoundError


class CandidateRegistry:
    def __init__(self, loader: Callable[[], list[Candidate]]):
        self._loader = loader
        self.candidates: dict[str, Candidate] = {}
        self.history: dict[str, list[StatusChange]] = {}
        self.reset()

    def reset(self) -> None:
        self.candidates = {c.id: c for c in self._loader()}
        self.history = {}

    def __len__(self) -> int:
        return len(self.candidates)

    def require(self, candidate_id: str) -> Candidate:
        candidate = self.candidates.get(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found")
        return candidate

    def search(self, search: str = "", status: str = "all") -> list[Candidate]:
        """Case-insensitive name-or-email substring match plus exact status, in fixture order."""
        needle = search.lower()
        return [
            c for c in self.candidates.values()
            if (not needle or needle in c.name.lower() or needle in c.email.lower())
            and (status == "all" or c.status == status)
        ]

    def with_history(self, candidate: Candidate) -> Candidate:
        return candidate.model_copy(update={"status_history": self.history_for(candidate.id)})

    def history_for(self, candidate_id: str) -> list[StatusChange]:
        return list(self.history.get(candidate_id, []))

    def set_status(self, candidate_id: str, status: str, changed_by: str) -> Candidate:
        """Write the status; only a real transition is recorded in the history."""
        candidate = self.require(candidate_id)
        previous: Optional[str] = candidate.status
        if previous != status:
            self.history.setdefault(candidate_id, []).append(
                StatusChange(
                    from_status=previous,
                    to=status,
                    timestamp=datetime.now(timezone.utc).isoformat(),
                    changed_by=changed_by,
                )
            )
        updated = candidate.model_copy(update={"status": status})
        self.candidates[candidate_id] = updated
        return updated

    def delete(self, candidate_id: str) -> None:
        self.require(candidate_id)
        del self.candidates[candidate_id]

    def add_note(self, candidate_id: str, note: Note) -> Note:
        candidate = self.require(candidate_id)
        self.candidates[candidate_id] = candidate.model_copy(
            update={"notes": [*candidate.notes, note]}
        )
        return note
