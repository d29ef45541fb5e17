"""
Note Composer — @-mention suggestions while typing, and mention extraction on submit.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

# First-name/last-name pairs only; single-word and 3+ word names are not recognised
MENTION_PATTERN = re.compile(r"@([A-Z][A-Za-z]* [A-Z][A-Za-z]*)")


@dataclass(frozen=True)
class TeamMember:
    id: str
    name: str
    role: str


TEAM_MEMBERS: tuple[TeamMember, ...] = (
    TeamMember("1", "Alice Johnson", "Recruiter"),
    TeamMember("2", "Bob Smith", "Hiring Manager"),
    TeamMember("3", "Carol Davis", "Tech Lead"),
    TeamMember("4", "David Wilson", "HR Manager"),
    TeamMember("5", "Emma Brown", "Senior Developer"),
    TeamMember("6", "Frank Miller", "CTO"),
    TeamMember("7", "Grace Lee", "Product Manager"),
    TeamMember("8", "Henry Taylor", "Engineering Manager"),
)


def extract_mentions(text: str) -> list[str]:
    """Names mentioned as '@First Last', without the leading '@'."""
    return MENTION_PATTERN.findall(text)


def find_mention_trigger(text: str, cursor: int) -> Optional[int]:
    """Index of the nearest '@' before the cursor with no whitespace in between."""
    for i in range(min(cursor, len(text)) - 1, -1, -1):
        char = text[i]
        if char == "@":
            return i
        if char.isspace():
            return None
    return None


@dataclass
class NoteComposer:
    """
    Editing state of a note being written.

    The caller reports every text change and cursor move; the composer keeps
    the suggestion list in sync and handles the suggestion keys.
    """

    roster: tuple[TeamMember, ...] = TEAM_MEMBERS
    text: str = ""
    cursor: int = 0
    suggestions: list[TeamMember] = field(default_factory=list)
    selected_index: int = 0
    showing: bool = False
    _trigger: Optional[int] = None

    def set_text(self, text: str, cursor: Optional[int] = None) -> None:
        self.text = text
        self.cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))
        self._refresh()

    def type(self, chars: str) -> None:
        """Insert characters at the cursor."""
        self.set_text(self.text[:self.cursor] + chars + self.text[self.cursor:], self.cursor + len(chars))

    def move_cursor(self, cursor: int) -> None:
        self.set_text(self.text, cursor)

    def _refresh(self) -> None:
        self._trigger = find_mention_trigger(self.text, self.cursor)
        if self._trigger is None:
            self.dismiss()
            return

        query = self.text[self._trigger + 1:self.cursor].lower()
        self.suggestions = [m for m in self.roster if query in m.name.lower()]
        self.selected_index = 0
        self.showing = True

    @property
    def has_suggestions(self) -> bool:
        return self.showing and bool(self.suggestions)

    @property
    def selected(self) -> Optional[TeamMember]:
        return self.suggestions[self.selected_index] if self.has_suggestions else None

    def handle_key(self, key: str) -> bool:
        """
        Apply a suggestion-list key. Returns True when the key was consumed.

        Down/Up move the highlight (clamped), Enter/Tab commit it, Escape
        closes the list. Keys are ignored while no suggestions are shown.
        """
        if not self.has_suggestions:
            return False

        if key == "ArrowDown":
            self.selected_index = min(self.selected_index + 1, len(self.suggestions) - 1)
        elif key == "ArrowUp":
            self.selected_index = max(self.selected_index - 1, 0)
        elif key in ("Enter", "Tab"):
            self.commit(self.suggestions[self.selected_index])
        elif key == "Escape":
            self.dismiss()
        else:
            return False
        return True

    def commit(self, member: TeamMember) -> None:
        """Replace '@query' before the cursor with '@Full Name ' and move the cursor past it."""
        if self._trigger is None:
            return
        start = self._trigger
        self.text = f"{self.text[:start]}@{member.name} {self.text[self.cursor:]}"
        self.cursor = start + len(member.name) + 2
        self.dismiss()

    def dismiss(self) -> None:
        self.showing = False
        self.suggestions = []
        self.selected_index = 0

    def submit(self) -> Optional[tuple[str, list[str]]]:
        """Return (text, mentions) and clear the composer; None if the note is blank."""
        if not self.text.strip():
            return None
        text = self.text
        self.text = ""
        self.cursor = 0
        self._trigger = None
        self.dismiss()
        return text, extract_mentions(text)
