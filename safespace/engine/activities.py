"""
safespace.engine.activities — Typed Activity Metadata
======================================================

Each :class:`ActivityType` owns exactly one metadata dataclass.  Writers
build the dataclass, the journal stores ``to_dict()`` in the JSON column,
and readers get the typed object back through :func:`parse_metadata`.
Adding a new activity type means adding one dataclass and one registry
entry; anything unregistered is rejected before it reaches the table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from safespace.database.models import ActivityType

__all__ = [
    "ActivityMetadata",
    "AssessmentCompletedMetadata",
    "LoginMetadata",
    "LogoutMetadata",
    "MoodEntryMetadata",
    "parse_metadata",
]


@dataclass(frozen=True, slots=True)
class LoginMetadata:
    activity_type: ClassVar[ActivityType] = ActivityType.LOGIN

    timestamp_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp_ms}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoginMetadata:
        return cls(timestamp_ms=int(data["timestamp"]))


@dataclass(frozen=True, slots=True)
class LogoutMetadata:
    activity_type: ClassVar[ActivityType] = ActivityType.LOGOUT

    timestamp_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp_ms}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogoutMetadata:
        return cls(timestamp_ms=int(data["timestamp"]))


@dataclass(frozen=True, slots=True)
class MoodEntryMetadata:
    activity_type: ClassVar[ActivityType] = ActivityType.MOOD_ENTRY

    mood_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"moodType": self.mood_type}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MoodEntryMetadata:
        return cls(mood_type=str(data["moodType"]))


@dataclass(frozen=True, slots=True)
class AssessmentCompletedMetadata:
    activity_type: ClassVar[ActivityType] = ActivityType.ASSESSMENT_COMPLETED

    assessment_id: int
    score: float
    assessment_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "assessmentId": self.assessment_id,
            "score": self.score,
            "type": self.assessment_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssessmentCompletedMetadata:
        return cls(
            assessment_id=int(data["assessmentId"]),
            score=float(data["score"]),
            assessment_type=str(data["type"]),
        )


ActivityMetadata = (
    LoginMetadata | LogoutMetadata | MoodEntryMetadata | AssessmentCompletedMetadata
)

_REGISTRY: dict[ActivityType, type] = {
    ActivityType.LOGIN: LoginMetadata,
    ActivityType.LOGOUT: LogoutMetadata,
    ActivityType.MOOD_ENTRY: MoodEntryMetadata,
    ActivityType.ASSESSMENT_COMPLETED: AssessmentCompletedMetadata,
}


def parse_metadata(activity_type: str, data: dict[str, Any] | None) -> ActivityMetadata:
    """Rebuild the typed metadata for a stored row.

    Raises
    ------
    ValueError
        If *activity_type* is not a registered :class:`ActivityType` or the
        payload is missing a field its dataclass requires.
    """
    try:
        kind = ActivityType(activity_type)
    except ValueError:
        raise ValueError(f"Unknown activity type: {activity_type!r}") from None
    try:
        return _REGISTRY[kind].from_dict(data or {})
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed {kind.value} metadata: {data!r}") from exc
