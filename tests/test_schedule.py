"""Tests for schedule validation and normalization."""

import re

import pytest

from cronkit.exceptions import InvalidScheduleError
from cronkit.schedule import (
    SCHEDULE_FIELDS,
    Schedule,
    Step,
    normalize,
    parse_schedule,
    validate,
)

TOKEN = re.compile(r"^(\*|\d+|\d+/\d+|\d+(,\d+)*)$")


class TestValidate:
    """Tests for validate()."""

    def test_string_always_valid(self):
        """Test that cron strings pass through unchecked."""
        assert validate("0 9 * * 1-5") is True
        assert validate("not a cron string") is True

    def test_empty_schedule_valid(self):
        """Test that an empty structured schedule is valid."""
        assert validate({}) is True
        assert validate(Schedule()) is True

    def test_full_schedule_valid(self):
        """Test a schedule using every field shape."""
        schedule = {
            "minute": {"start": 5, "every": 10},
            "hour": 9,
            "day_of_month": Step(1, 2),
            "month": None,
            "day_of_week": [1, 3, 5],
        }
        assert validate(schedule) is True

    def test_unknown_key_rejected(self):
        """Test that keys outside the five fields are rejected."""
        assert validate({"minute": 1, "second": 5}) is False
        assert validate({"weekday": [1]}) is False

    @pytest.mark.parametrize("field", ["minute", "hour", "day_of_month", "month"])
    @pytest.mark.parametrize(
        "value",
        [
            "5",
            1.5,
            True,
            -1,
            [1, 2],
            {"start": 5},
            {"every": 5},
            {"start": "5", "every": 10},
            {"start": 5, "every": 1.5},
            {"start": 5, "every": 0},
            {"start": -1, "every": 2},
            {"start": 5, "every": 10, "end": 20},
        ],
    )
    def test_bad_field_value_rejected(self, field, value):
        """Test that values other than int or {start, every} are rejected."""
        assert validate({field: value}) is False

    def test_day_of_week_must_be_sequence(self):
        """Test that day_of_week must be a sequence."""
        assert validate({"day_of_week": 1}) is False
        assert validate({"day_of_week": "1,3"}) is False
        assert validate({"day_of_week": (0, 6)}) is True

    def test_day_of_week_elements_checked(self):
        """Test that every weekday must be an integer in 0-6."""
        assert validate({"day_of_week": [1, "3"]}) is False
        assert validate({"day_of_week": [1, None]}) is False
        assert validate({"day_of_week": [True]}) is False
        assert validate({"day_of_week": [7]}) is False
        assert validate({"day_of_week": [-1]}) is False

    def test_day_of_week_empty_rejected(self):
        """Test that an empty weekday list is rejected."""
        assert validate({"day_of_week": []}) is False

    def test_non_schedule_types_rejected(self):
        """Test that other types are not schedules."""
        assert validate(None) is False
        assert validate(42) is False
        assert validate(["* * * * *"]) is False

    def test_schedule_instance_checked(self):
        """Test that Schedule instances are validated field by field."""
        assert validate(Schedule(minute=30, hour=Step(0, 6))) is True
        assert validate(Schedule(minute="30")) is False


class TestNormalize:
    """Tests for normalize()."""

    def test_empty_schedule(self):
        """Test that an empty schedule matches everything."""
        assert normalize({}) == "* * * * *"

    def test_step_and_weekdays(self):
        """Test the canonical form of steps and weekday lists."""
        schedule = {"minute": {"start": 5, "every": 10}, "day_of_week": [1, 3]}
        assert normalize(schedule) == "5/10 * * * 1,3"

    def test_all_fields(self):
        """Test field order with every field present."""
        schedule = {
            "minute": 0,
            "hour": {"start": 8, "every": 4},
            "day_of_month": 15,
            "month": Step(1, 3),
            "day_of_week": [0, 6],
        }
        assert normalize(schedule) == "0 8/4 15 1/3 0,6"

    @pytest.mark.parametrize("position,field", list(enumerate(SCHEDULE_FIELDS)))
    def test_absent_field_is_wildcard(self, position, field):
        """Test that each absent field formats as '*' in its own position."""
        full = {
            "minute": 1,
            "hour": 2,
            "day_of_month": 3,
            "month": 4,
            "day_of_week": [5],
        }
        del full[field]

        tokens = normalize(full).split(" ")
        assert tokens[position] == "*"
        assert tokens.count("*") == 1

    def test_string_unchanged(self):
        """Test that raw strings are returned as given."""
        for expression in ("0 9 * * 1-5", "*/5 * * * *", "@daily"):
            assert normalize(expression) == expression

    def test_duplicate_weekdays_kept(self):
        """Test that duplicate weekdays are passed through."""
        assert normalize({"day_of_week": [1, 1]}) == "* * * * 1,1"

    def test_schedule_instance(self):
        """Test normalizing a Schedule dataclass."""
        schedule = Schedule(minute=Step(0, 15), hour=9, day_of_week=(1, 2, 3, 4, 5))
        assert normalize(schedule) == "0/15 9 * * 1,2,3,4,5"

    @pytest.mark.parametrize(
        "schedule",
        [
            {},
            {"minute": 59},
            {"hour": {"start": 0, "every": 2}},
            {"day_of_month": 1, "month": 12},
            {"day_of_week": [0, 1, 2, 3, 4, 5, 6]},
            Schedule(minute=Step(3, 7), day_of_week=[2]),
        ],
    )
    def test_token_grammar(self, schedule):
        """Test that output is five tokens of the canonical grammar."""
        tokens = normalize(schedule).split(" ")
        assert len(tokens) == 5
        assert all(TOKEN.match(token) for token in tokens)


class TestParseSchedule:
    """Tests for parse_schedule()."""

    def test_valid_schedule(self):
        """Test validating and normalizing in one call."""
        assert parse_schedule({"minute": 0, "hour": 3}) == "0 3 * * *"

    def test_invalid_schedule_raises(self):
        """Test the error raised for a malformed schedule."""
        with pytest.raises(InvalidScheduleError, match="Invalid cron schedule") as exc_info:
            parse_schedule({"minute": "five"})

        assert exc_info.value.schedule == {"minute": "five"}
        assert "minute" in exc_info.value.reason

    def test_invalid_schedule_is_type_error(self):
        """Test that schedule errors are also TypeErrors."""
        with pytest.raises(TypeError):
            parse_schedule({"seconds": 5})


class TestScheduleModel:
    """Tests for the Schedule and Step dataclasses."""

    def test_from_dict(self):
        """Test building a Schedule from a mapping."""
        schedule = Schedule.from_dict({"minute": {"start": 5, "every": 10}, "day_of_week": [1, 3]})

        assert schedule.minute == Step(5, 10)
        assert schedule.day_of_week == (1, 3)
        assert str(schedule) == "5/10 * * * 1,3"

    def test_from_dict_invalid(self):
        """Test that from_dict rejects malformed mappings."""
        with pytest.raises(InvalidScheduleError):
            Schedule.from_dict({"minute": 1, "year": 2024})

    def test_to_dict(self):
        """Test that to_dict omits absent fields."""
        schedule = Schedule(hour=6, day_of_week=(0,))
        assert schedule.to_dict() == {"hour": 6, "day_of_week": (0,)}

    def test_step_str(self):
        """Test step string representation."""
        assert str(Step(start=0, every=15)) == "0/15"

    def test_to_cron(self):
        """Test converting a Schedule to a cron string."""
        assert Schedule(month=6).to_cron() == "* * * 6 *"
