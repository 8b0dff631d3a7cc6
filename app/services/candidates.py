"""Knowledge-base records as seen by the scorer.

FAQs and Notes share one shape once they leave the database: a title, a
body, a keyword list and the name of their topic.
"""

import uuid
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

FAQ_KIND = "faq"
NOTE_KIND = "note"


@dataclass(frozen=True)
class Candidate:
    id: uuid.UUID
    title: str
    body: str
    keywords: List[str] = field(default_factory=list)
    topic_name: Optional[str] = None

    kind: ClassVar[str] = ""


@dataclass(frozen=True)
class FAQCandidate(Candidate):
    """An FAQ: title is the question, body is the stored answer."""

    kind: ClassVar[str] = FAQ_KIND

    @property
    def question(self) -> str:
        return self.title

    @property
    def answer(self) -> str:
        return self.body


@dataclass(frozen=True)
class NoteCandidate(Candidate):
    """A note: freeform learning material under a title."""

    kind: ClassVar[str] = NOTE_KIND

    @property
    def content(self) -> str:
        return self.body
