"""Cron expression evaluator used by the local engine.

Fields, in order:
    - Minute (0-59)
    - Hour (0-23)
    - Day of month (1-31)
    - Month (1-12)
    - Day of week (0-7, where 0 and 7 are Sunday)

Each field accepts ``*``, single values, ``a-b`` ranges, ``,`` lists and
``/`` steps (``*/15``, ``5/10``, ``10-20/2``).

When both day of month and day of week are restricted, a date matches if
either one does, as in classic cron:

    "0 0 1 * 1" - midnight on the 1st of the month and on every Monday
"""

from datetime import datetime, timedelta

# (name, lowest, highest)
FIELD_BOUNDS = (
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day_of_month", 1, 31),
    ("month", 1, 12),
    ("day_of_week", 0, 7),
)

# Long enough to reach the next Feb 29
LOOKAHEAD_DAYS = 366 * 5


def _parse_int(text: str, field_name: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"Invalid value '{text}' in {field_name} field") from None


def _expand(part: str, field_name: str, low: int, high: int) -> range:
    """Expand a single list item of a field into the values it covers."""
    step = 1
    if "/" in part:
        part, step_text = part.split("/", 1)
        step = _parse_int(step_text, field_name)
        if step < 1:
            raise ValueError(f"Step must be at least 1 in {field_name} field")
        if part == "*":
            return range(low, high + 1, step)
        if "-" not in part:
            return range(_parse_int(part, field_name), high + 1, step)

    if part == "*":
        return range(low, high + 1)

    if "-" in part:
        start_text, end_text = part.split("-", 1)
        start = _parse_int(start_text, field_name)
        end = _parse_int(end_text, field_name)
        if start > end:
            raise ValueError(f"Invalid range: {part} (start > end)")
    else:
        start = end = _parse_int(part, field_name)

    if start < low or end > high:
        raise ValueError(f"Value {part} out of range [{low}, {high}] in {field_name} field")
    return range(start, end + 1, step)


def parse_field(text: str, field_name: str, low: int, high: int) -> frozenset[int]:
    """Parse one cron field into the set of values it matches.

    Raises:
        ValueError: If the field is malformed or out of range
    """
    values: set[int] = set()
    for part in text.split(","):
        if not part:
            raise ValueError(f"Empty list item in {field_name} field")
        values.update(v for v in _expand(part, field_name, low, high) if low <= v <= high)

    if not values:
        raise ValueError(f"{field_name} field '{text}' matches no values")
    return frozenset(values)


class CronExpression:
    """Parsed five-field cron expression."""

    def __init__(self, expression: str):
        """Parse a cron expression.

        Args:
            expression: Cron string with five whitespace-separated fields

        Raises:
            ValueError: If expression format is invalid
        """
        self.expression = expression.strip()
        parts = self.expression.split()

        if len(parts) != 5:
            raise ValueError(
                f"Invalid cron expression '{expression}'. "
                f"Expected 5 fields (minute hour day month weekday), got {len(parts)}"
            )

        parsed = [
            parse_field(text, name, low, high)
            for text, (name, low, high) in zip(parts, FIELD_BOUNDS)
        ]
        self.minutes, self.hours, self.days, self.months, weekdays = parsed

        # 7 is an alias for Sunday
        self.weekdays = frozenset(0 if day == 7 else day for day in weekdays)

        self.day_restricted = parts[2] != "*"
        self.weekday_restricted = parts[4] != "*"

    def _matches_day(self, dt: datetime) -> bool:
        # Python: Mon=0 ... Sun=6; cron: Sun=0, Mon=1 ... Sat=6
        day_hit = dt.day in self.days
        weekday_hit = (dt.weekday() + 1) % 7 in self.weekdays

        if self.day_restricted and self.weekday_restricted:
            return day_hit or weekday_hit
        return day_hit and weekday_hit

    def matches(self, dt: datetime) -> bool:
        """Check whether ``dt`` (minute resolution) is a tick of this expression."""
        return (
            dt.minute in self.minutes
            and dt.hour in self.hours
            and dt.month in self.months
            and self._matches_day(dt)
        )

    def next_run(self, after: datetime | None = None) -> datetime:
        """Return the first matching minute strictly after ``after``.

        Args:
            after: Starting datetime (defaults to now)

        Raises:
            ValueError: If no match exists within the lookahead window
        """
        if after is None:
            after = datetime.now()

        current = after.replace(second=0, microsecond=0) + timedelta(minutes=1)
        horizon = current + timedelta(days=LOOKAHEAD_DAYS)

        while current <= horizon:
            if current.month not in self.months:
                current = (current.replace(day=1, hour=0, minute=0) + timedelta(days=32)).replace(day=1)
            elif not self._matches_day(current):
                current = (current + timedelta(days=1)).replace(hour=0, minute=0)
            elif current.hour not in self.hours:
                current = (current + timedelta(hours=1)).replace(minute=0)
            elif current.minute not in self.minutes:
                current += timedelta(minutes=1)
            else:
                return current

        raise ValueError(f"Cron expression '{self.expression}' never fires after {after}")

    def __str__(self) -> str:
        return self.expression

    def __repr__(self) -> str:
        return f"CronExpression('{self.expression}')"
