from datetime import date

import pytest

from biblestudy.calendar.epoch import (
    MS_PER_DAY,
    LedgerTime,
    date_for_day_of_week,
    date_for_epoch_day,
    day_of_week,
    epoch_day_for_date,
    month_epoch_range,
    resolve_ledger_time,
    week_number,
    week_range,
    year_epoch_range,
    year_estimate,
)


def test_unix_epoch_was_a_thursday():
    assert day_of_week(0) == 4


def test_day_of_week_matches_calendar():
    # 2024-03-17 was a Sunday
    assert day_of_week(epoch_day_for_date(date(2024, 3, 17))) == 0
    assert day_of_week(epoch_day_for_date(date(2024, 3, 18))) == 1


@pytest.mark.parametrize("day", [-1000, -8, -1, 0, 1, 6, 19800, 100_000])
def test_day_of_week_has_period_seven(day):
    assert day_of_week(day) == day_of_week(day + 7)
    assert 0 <= day_of_week(day) <= 6


def test_week_number_is_monotonic():
    weeks = [week_number(day) for day in range(-30, 400)]

    assert weeks == sorted(weeks)


def test_seven_days_from_sunday_share_week_number():
    sunday = epoch_day_for_date(date(2024, 3, 17))
    weeks = {week_number(sunday + offset) for offset in range(7)}

    assert len(weeks) == 1
    assert week_number(sunday + 7) == week_number(sunday) + 1
    assert week_number(sunday - 1) == week_number(sunday) - 1


def test_first_partial_week_around_epoch():
    # 1969-12-28 (Sunday) through 1970-01-03 (Saturday)
    assert week_number(-4) == week_number(2) == -1
    assert week_number(3) == 0


def test_year_estimate_reference_points():
    assert year_estimate(19723) == 2024
    assert year_estimate(19723 + 364) == 2024
    assert year_estimate(19723 + 365) == 2025
    assert year_estimate(19722) == 2023


def test_month_range_covers_whole_month():
    first, last = month_epoch_range(2, 2024)

    assert date_for_epoch_day(first) == date(2024, 2, 1)
    assert date_for_epoch_day(last) == date(2024, 2, 29)


def test_december_range_ends_on_new_years_eve():
    first, last = month_epoch_range(12, 2023)

    assert date_for_epoch_day(first) == date(2023, 12, 1)
    assert date_for_epoch_day(last) == date(2023, 12, 31)


@pytest.mark.parametrize("month", [0, 13, -1])
def test_month_out_of_range_is_rejected(month):
    with pytest.raises(ValueError):
        month_epoch_range(month, 2024)


def test_year_range_and_week_cover():
    first, last = year_epoch_range(2024)
    weeks = week_range(first, last)

    assert last - first == 365  # leap year
    assert weeks[0] == week_number(first)
    assert weeks[-1] == week_number(last)


def test_date_for_day_of_week_stays_in_same_week():
    monday = epoch_day_for_date(date(2024, 3, 18))

    assert date_for_day_of_week(0, monday, 1) == date(2024, 3, 17)
    assert date_for_day_of_week(6, monday, 1) == date(2024, 3, 23)


def test_ledger_time_derives_calendar_fields():
    now = LedgerTime.from_timestamp(19800 * MS_PER_DAY + 1234, source="ledger")

    assert now.epoch_day == 19800
    assert now.day_of_week == 1
    assert now.week_number == week_number(19800)
    assert now.year == 2024
    assert now.calendar_date == date(2024, 3, 18)


class _Clock:
    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error

    async def get_clock_time(self):
        if self.error:
            raise self.error
        return self.value


@pytest.mark.asyncio
async def test_resolve_ledger_time_uses_ledger_clock():
    now = await resolve_ledger_time(_Clock(value=str(19800 * MS_PER_DAY)))

    assert now.source == "ledger"
    assert now.epoch_day == 19800
    assert now.error is None


@pytest.mark.asyncio
async def test_resolve_ledger_time_falls_back_to_local():
    now = await resolve_ledger_time(_Clock(error=RuntimeError("node down")))

    assert now.source == "local"
    assert "node down" in now.error
    assert now.epoch_day > 19800


@pytest.mark.asyncio
async def test_resolve_ledger_time_without_clock():
    now = await resolve_ledger_time(None)

    assert now.source == "local"
