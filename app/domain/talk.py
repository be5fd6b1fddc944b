"""
app/domain/talk.py

Domain entities and value objects for speakers and talks.

Value objects validate on construction, so any ``Talk`` that exists is
already well-formed: non-empty title, calendar month/year, non-negative
counts and an http(s) link.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any

INFLUENCE_VIEWS_WEIGHT = 0.7
INFLUENCE_LIKES_WEIGHT = 0.3

# Largest value accepted for view/like counters (signed 64-bit).
MAX_COUNT_VALUE = 2**63 - 1

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_MONTH_LOOKUP = {name.lower(): index for index, name in enumerate(MONTH_NAMES, start=1)}

_LINK_PATTERN = re.compile(r"https?://[^\s/$.?#].[^\s]*", re.IGNORECASE)


class InvalidIdentifierError(ValueError):
    """
    Raised when a speaker or talk identifier is not a valid UUID.
    """


def influence_score(views: int, likes: int) -> float:
    """
    Weighted influence metric: ``views * 0.7 + likes * 0.3``.
    """

    return views * INFLUENCE_VIEWS_WEIGHT + likes * INFLUENCE_LIKES_WEIGHT


def parse_identifier(raw: Any, *, kind: str = "identifier") -> uuid.UUID:
    """
    Parse a speaker/talk identifier, raising ``InvalidIdentifierError`` on garbage.
    """

    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdentifierError(f"Invalid {kind}: {raw!r}") from exc


def _check_count(value: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label} must be an integer.")
    if value < 0:
        raise ValueError(f"{label} must not be negative.")
    if value > MAX_COUNT_VALUE:
        raise ValueError(f"{label} exceeds the maximum supported value.")
    return value


@dataclass(frozen=True, order=True)
class TalkDate:
    """
    Month/year pair a talk was given in.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be within 1..12, got {self.month}.")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"Year must be within 1..9999, got {self.year}.")

    @classmethod
    def parse(cls, raw: str) -> "TalkDate":
        """
        Parse ``"<English month name> <4-digit year>"``, e.g. ``"December 2021"``.

        Month names match case-insensitively. Raises ``ValueError`` otherwise.
        """

        parts = str(raw).split()
        if len(parts) != 2:
            raise ValueError(f"Invalid date format: {raw}")
        month_name, year_text = parts
        month = _MONTH_LOOKUP.get(month_name.lower())
        if month is None or len(year_text) != 4 or not year_text.isascii() or not year_text.isdigit():
            raise ValueError(f"Invalid date format: {raw}")
        return cls(year=int(year_text), month=month)

    def __str__(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"


@dataclass(frozen=True)
class Views:
    value: int

    def __post_init__(self) -> None:
        _check_count(self.value, "Views")


@dataclass(frozen=True)
class Likes:
    value: int

    def __post_init__(self) -> None:
        _check_count(self.value, "Likes")


@dataclass(frozen=True)
class Link:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _LINK_PATTERN.fullmatch(self.value):
            raise ValueError(f"Invalid link: {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass
class Speaker:
    """
    A person who gives talks. Identity is the id; the name is unique.

    Only the biography may change after creation.
    """

    id: uuid.UUID
    name: str
    bio: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Speaker name must not be empty.")

    @classmethod
    def create(cls, name: str, bio: str | None = None) -> "Speaker":
        return cls(id=uuid.uuid4(), name=name, bio=bio)

    def update_bio(self, bio: str | None) -> None:
        self.bio = bio


@dataclass(frozen=True)
class Talk:
    """
    A single talk, always bound to exactly one speaker.
    """

    id: uuid.UUID
    title: str
    speaker: Speaker
    date: TalkDate
    views: Views
    likes: Likes
    link: Link
    influence_score: float = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValueError("Talk title must not be empty.")
        if self.speaker is None:
            raise ValueError("Talk must reference a speaker.")
        object.__setattr__(
            self,
            "influence_score",
            influence_score(self.views.value, self.likes.value),
        )

    @classmethod
    def create(
        cls,
        *,
        title: str,
        speaker: Speaker,
        date: TalkDate,
        views: Views,
        likes: Likes,
        link: Link,
    ) -> "Talk":
        return cls(
            id=uuid.uuid4(),
            title=title,
            speaker=speaker,
            date=date,
            views=views,
            likes=likes,
            link=link,
        )

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def business_key(self) -> tuple[str, uuid.UUID]:
        """
        ``(title, speaker id)``: the uniqueness key used for deduplication.
        """

        return (self.title, self.speaker.id)


@dataclass(frozen=True)
class SpeakerProfile:
    """
    A speaker together with aggregate counts over their talks.
    """

    speaker: Speaker
    talk_count: int = 0
    total_views: int = 0
    total_likes: int = 0
