import pytest

from biblestudy.calendar.epoch import LedgerTime, MS_PER_DAY, month_epoch_range, week_number
from biblestudy.models.domain.results import DecodeFailure, NetworkFailure, Ok
from biblestudy.services.progress.aggregator import ProgressAggregator

JAN_1_2024 = 19723
MAR_31_2024 = 19813


@pytest.fixture
def aggregator(fake_ledger, fake_verses):
    return ProgressAggregator(fake_ledger, fake_verses)


@pytest.fixture
def quarter_records(fake_ledger, record_factory):
    """Claims every other day from 2023-12-28 through 2024-04-03."""
    records = [record_factory(day, f"Psalm {day % 150 + 1}:1") for day in range(JAN_1_2024 - 4, MAR_31_2024 + 4, 2)]
    fake_ledger.records = records
    return records


@pytest.mark.asyncio
async def test_month_returns_exactly_the_records_in_that_month(aggregator, quarter_records, wallet):
    first, last = month_epoch_range(2, 2024)

    view = await aggregator.load_month(wallet, 2, 2024)

    expected = sorted(r.claim_day for r in quarter_records if first <= r.claim_day <= last)
    assert sorted(c.record.claim_day for c in view.claims) == expected
    assert view.month == 2
    assert view.year == 2024
    assert view.failed_weeks == ()


@pytest.mark.asyncio
async def test_adjacent_months_do_not_leak_through_boundary_weeks(aggregator, quarter_records, wallet):
    january = await aggregator.load_month(wallet, 1, 2024)
    february = await aggregator.load_month(wallet, 2, 2024)
    march = await aggregator.load_month(wallet, 3, 2024)

    days = [c.record.claim_day for view in (january, february, march) for c in view.claims]
    in_quarter = [r.claim_day for r in quarter_records if JAN_1_2024 <= r.claim_day <= MAR_31_2024]

    assert sorted(days) == sorted(in_quarter)
    assert len(days) == len(set(days))


@pytest.mark.asyncio
async def test_month_queries_every_overlapping_week(aggregator, fake_ledger, quarter_records, wallet):
    first, last = month_epoch_range(2, 2024)

    await aggregator.load_month(wallet, 2, 2024)

    assert fake_ledger.week_calls == list(range(week_number(first), week_number(last) + 1))


@pytest.mark.asyncio
async def test_month_claims_are_enriched_with_verse_text(aggregator, fake_verses, record_factory, fake_ledger, wallet):
    fake_ledger.records = [record_factory(19760, "John 3:16")]

    view = await aggregator.load_month(wallet, 2, 2024)

    assert len(view.claims) == 1
    claim = view.claims[0]
    assert claim.verse_reference == "John 3:16"
    assert claim.verse_text == "Text of John 3:16"
    assert claim.version == "King James Version"
    assert fake_verses.lookups == ["John 3:16"]


@pytest.mark.asyncio
async def test_failed_week_counts_as_empty(aggregator, fake_ledger, quarter_records, wallet):
    broken_week = week_number(19760)
    fake_ledger.failing_weeks = {broken_week}

    view = await aggregator.load_month(wallet, 2, 2024)

    assert view.failed_weeks == (broken_week,)
    assert all(week_number(c.record.claim_day) != broken_week for c in view.claims)
    assert len(view.claims) > 0


@pytest.mark.asyncio
async def test_undecodable_week_counts_as_empty(aggregator, fake_ledger, quarter_records, wallet):
    corrupt_week = week_number(19790)
    fake_ledger.corrupt_weeks = {corrupt_week}

    view = await aggregator.load_month(wallet, 3, 2024)

    assert corrupt_week in view.failed_weeks
    assert all(week_number(c.record.claim_day) != corrupt_week for c in view.claims)


@pytest.mark.asyncio
async def test_load_week_reports_explicit_results(aggregator, fake_ledger, quarter_records, wallet):
    good_week = week_number(19760)
    fake_ledger.failing_weeks = {good_week + 1}
    fake_ledger.corrupt_weeks = {good_week + 2}

    assert isinstance(await aggregator.load_week(wallet, good_week), Ok)
    assert isinstance(await aggregator.load_week(wallet, good_week + 1), NetworkFailure)
    assert isinstance(await aggregator.load_week(wallet, good_week + 2), DecodeFailure)


@pytest.mark.asyncio
async def test_verse_lookup_failure_leaves_text_empty(aggregator, fake_verses, fake_ledger, record_factory, wallet):
    fake_verses.fail = True
    fake_ledger.records = [record_factory(19760, "John 3:16")]

    view = await aggregator.load_month(wallet, 2, 2024)

    assert len(view.claims) == 1
    assert view.claims[0].verse_text == ""
    assert view.claims[0].version == ""


@pytest.mark.asyncio
async def test_yearly_histogram_sums_to_records_in_year(aggregator, fake_ledger, record_factory, wallet):
    days = [19720, 19722, 19723, 19740, 19760, 19790, 19800, 20000, 20088, 20089, 20090]
    fake_ledger.records = [record_factory(day) for day in days]

    view = await aggregator.load_year(wallet, 2024)

    in_2024 = [d for d in days if 19723 <= d <= 20088]
    assert view.total == len(in_2024)
    assert sum(view.monthly_counts) == len(in_2024)
    assert len(view.monthly_counts) == 12
    assert view.monthly_counts[0] == 2  # Jan 1, Jan 18
    assert view.monthly_counts[11] == 1  # Dec 31


@pytest.mark.asyncio
async def test_yearly_view_skips_verse_lookups(aggregator, fake_verses, fake_ledger, record_factory, wallet):
    fake_ledger.records = [record_factory(19760)]

    await aggregator.load_year(wallet, 2024)

    assert fake_verses.lookups == []


@pytest.mark.asyncio
async def test_weekly_view_is_keyed_by_day_of_week(aggregator, fake_ledger, record_factory, wallet):
    fake_ledger.records = [record_factory(19799, "Genesis 1:1"), record_factory(19800, "John 1:1")]
    today = LedgerTime.from_timestamp(19800 * MS_PER_DAY, source="ledger")

    view = await aggregator.load_weekly_view(wallet, today)

    assert set(view.days) == {0, 1}
    assert view.days[1].verse_reference == "John 1:1"
    assert view.streak == 2
    assert view.week_number == today.week_number


@pytest.mark.asyncio
async def test_weekly_view_is_empty_when_ledger_fails(aggregator, fake_ledger, record_factory, wallet):
    fake_ledger.records = [record_factory(19800)]
    fake_ledger.weekly_error = True
    today = LedgerTime.from_timestamp(19800 * MS_PER_DAY, source="ledger")

    view = await aggregator.load_weekly_view(wallet, today)

    assert view.days == {}
    assert view.week_number == today.week_number


@pytest.mark.asyncio
async def test_weeks_before_epoch_are_empty_without_ledger_query(aggregator, fake_ledger, wallet):
    result = await aggregator.load_week(wallet, -1)

    assert result == Ok([])
    assert fake_ledger.week_calls == []


@pytest.mark.asyncio
async def test_first_epoch_year_loads(aggregator, fake_ledger, record_factory, wallet):
    # 1970-01-02 falls in week -1, 1970-01-05 in week 0
    fake_ledger.records = [record_factory(1), record_factory(4)]

    view = await aggregator.load_year(wallet, 1970)

    assert -1 not in fake_ledger.week_calls
    assert view.failed_weeks == ()
    # the day 1 claim sits in a week the registry cannot index
    assert view.monthly_counts[0] == 1


@pytest.mark.asyncio
async def test_record_served_by_two_weeks_counts_once(aggregator, fake_ledger, record_factory, wallet):
    fake_ledger.duplicate_into_next_week = True
    fake_ledger.records = [record_factory(19760), record_factory(19770)]

    february = await aggregator.load_month(wallet, 2, 2024)
    year = await aggregator.load_year(wallet, 2024)

    assert sorted(c.record.claim_day for c in february.claims) == [19760, 19770]
    assert len(february.claims) == 2
    assert year.monthly_counts[1] == 2
    assert year.total == 2
