"""Schedule validation and normalization.

A schedule is either a raw cron string, passed through untouched, or a
structured value with up to five fields:

    - minute, hour, day_of_month, month: None, an int, or a step pair
      (``Step(start, every)`` or ``{"start": ..., "every": ...}``)
    - day_of_week: None or a non-empty sequence of weekdays (0-6, 0 is Sunday)

Structured schedules are canonicalized into the five-field cron grammar:

    {"minute": {"start": 5, "every": 10}, "day_of_week": [1, 3]}
        -> "5/10 * * * 1,3"
    {}  -> "* * * * *"
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any, Union

from cronkit.exceptions import InvalidScheduleError

SCHEDULE_FIELDS = ("minute", "hour", "day_of_month", "month", "day_of_week")
STEP_KEYS = frozenset(("start", "every"))


@dataclass(frozen=True)
class Step:
    """Start at ``start``, then repeat every ``every`` units."""

    start: int
    every: int

    def __str__(self) -> str:
        return f"{self.start}/{self.every}"


FieldValue = Union[int, Step, Mapping[str, int], None]


@dataclass(frozen=True)
class Schedule:
    """Structured cron schedule. Absent fields match every value."""

    minute: FieldValue = None
    hour: FieldValue = None
    day_of_month: FieldValue = None
    month: FieldValue = None
    day_of_week: Sequence[int] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Schedule":
        """Build a Schedule from a mapping.

        Raises:
            InvalidScheduleError: If the mapping is not a valid schedule
        """
        reason = _find_error(data)
        if reason is not None:
            raise InvalidScheduleError(data, reason)
        return cls(**{key: _freeze(value) for key, value in data.items()})

    def to_dict(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def to_cron(self) -> str:
        return normalize(self)

    def __str__(self) -> str:
        return self.to_cron()


ScheduleLike = Union[str, Schedule, Mapping[str, Any]]


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a meaningful schedule value
    return isinstance(value, int) and not isinstance(value, bool)


def _step_error(name: str, value: Any) -> str | None:
    if isinstance(value, Step):
        start, every = value.start, value.every
    elif isinstance(value, Mapping):
        extra = set(value) - STEP_KEYS
        if extra:
            return f"{name} has unknown step keys {sorted(extra)}"
        start, every = value.get("start"), value.get("every")
    else:
        return f"{name} must be an integer or a step with 'start' and 'every'"

    if not _is_int(start) or not _is_int(every):
        return f"{name} step requires integer 'start' and 'every'"
    if start < 0:
        return f"{name} step start must be non-negative"
    if every < 1:
        return f"{name} step every must be at least 1"
    return None


def _field_error(name: str, value: Any) -> str | None:
    if value is None:
        return None

    if name == "day_of_week":
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            return "day_of_week must be a sequence of weekdays"
        if len(value) == 0:
            return "day_of_week must not be empty"
        for day in value:
            if not _is_int(day) or not 0 <= day <= 6:
                return f"day_of_week entries must be integers 0-6, got {day!r}"
        return None

    if _is_int(value):
        if value < 0:
            return f"{name} must be non-negative"
        return None

    return _step_error(name, value)


def _fields_of(schedule: Schedule | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(schedule, Schedule):
        return {name: getattr(schedule, name) for name in SCHEDULE_FIELDS}
    return schedule


def _find_error(schedule: Any) -> str | None:
    """Return why ``schedule`` is invalid, or None when it is valid."""
    if isinstance(schedule, str):
        return None

    if not isinstance(schedule, (Schedule, Mapping)):
        return f"expected a cron string or a structured schedule, got {type(schedule).__name__}"

    values = _fields_of(schedule)

    unknown = [key for key in values if key not in SCHEDULE_FIELDS]
    if unknown:
        return f"unknown schedule fields {sorted(map(str, unknown))}"

    for name in SCHEDULE_FIELDS:
        reason = _field_error(name, values.get(name))
        if reason is not None:
            return reason

    return None


def validate(schedule: Any) -> bool:
    """Check whether ``schedule`` is a well-formed schedule.

    Cron strings are always valid here; the engine is responsible for
    rejecting malformed ones.
    """
    return _find_error(schedule) is None


def _format_field(value: Any) -> str:
    if value is None:
        return "*"
    if _is_int(value):
        return str(value)
    if isinstance(value, Step):
        return str(value)
    if isinstance(value, Mapping):
        return f"{value['start']}/{value['every']}"
    return ",".join(str(day) for day in value)


def normalize(schedule: ScheduleLike) -> str:
    """Convert a valid schedule into its canonical cron string.

    Must only be called with a schedule that passed ``validate``.
    """
    if isinstance(schedule, str):
        return schedule

    values = _fields_of(schedule)
    return " ".join(_format_field(values.get(name)) for name in SCHEDULE_FIELDS)


def parse_schedule(schedule: Any) -> str:
    """Validate and normalize a schedule in one step.

    Raises:
        InvalidScheduleError: If the schedule is not well-formed
    """
    reason = _find_error(schedule)
    if reason is not None:
        raise InvalidScheduleError(schedule, reason)
    return normalize(schedule)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return Step(start=value["start"], every=value["every"])
    if isinstance(value, list):
        return tuple(value)
    return value
