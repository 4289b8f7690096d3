"""Tests for raw weekly data entry and retrieval."""

import pytest

YEAR = 2024


@pytest.mark.asyncio
async def test_save_is_an_upsert(engine, owner, make_metric):
    metric = await make_metric(owner, "Calls")
    await engine.save_weekly_data(owner, metric.id, 3, YEAR, 5)
    await engine.save_weekly_data(owner, metric.id, 3, YEAR, 8)

    points = (await engine.get_weekly_data(owner, metric.id, YEAR)).data

    assert [(p.week_number, p.actual_value) for p in points] == [(3, 8)]


@pytest.mark.asyncio
async def test_years_are_kept_apart(engine, owner, make_metric):
    metric = await make_metric(owner, "Calls")
    await engine.save_weekly_data(owner, metric.id, 1, YEAR, 5)
    await engine.save_weekly_data(owner, metric.id, 1, YEAR + 1, 7)

    points = (await engine.get_weekly_data(owner, metric.id, YEAR)).data

    assert [p.actual_value for p in points] == [5]


@pytest.mark.asyncio
async def test_points_come_back_in_week_order(engine, owner, make_metric):
    metric = await make_metric(owner, "Calls")
    for week in (40, 2, 17):
        await engine.save_weekly_data(owner, metric.id, week, YEAR, week)

    points = (await engine.get_weekly_data(owner, metric.id, YEAR)).data

    assert [p.week_number for p in points] == [2, 17, 40]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "week, year, value",
    [
        (0, YEAR, 1),
        (49, YEAR, 1),
        (1, 1899, 1),
        (1, YEAR, -1),
        (1, YEAR, float("nan")),
        (1, YEAR, "3"),
        (1, YEAR, True),
    ],
)
async def test_invalid_points_rejected_before_write(engine, store, owner, make_metric, week, year, value):
    metric = await make_metric(owner, "Calls")

    result = await engine.save_weekly_data(owner, metric.id, week, year, value)

    assert result.code == "validation_error"
    assert store.calls["upsert_weekly_data"] == 0


@pytest.mark.asyncio
async def test_foreign_metric_not_found(engine, owner, other_owner, make_metric):
    metric = await make_metric(owner, "Calls")

    assert (await engine.save_weekly_data(other_owner, metric.id, 1, YEAR, 1)).code == "not_found"
    assert (await engine.get_weekly_data(other_owner, metric.id, YEAR)).code == "not_found"


@pytest.mark.asyncio
async def test_store_failure_surfaces_as_result(engine, store, owner, make_metric):
    metric = await make_metric(owner, "Calls")
    store.failing_metric_ids.add(metric.id)

    result = await engine.save_weekly_data(owner, metric.id, 1, YEAR, 1)

    assert not result.success
    assert result.code == "persistence_error"


@pytest.mark.asyncio
async def test_batch_keeps_good_points(engine, owner, make_metric):
    metric = await make_metric(owner, "Calls")

    result = await engine.save_weekly_data_batch(
        owner,
        [
            {"metric_id": metric.id, "week_number": 1, "year": YEAR, "actual_value": 4},
            {"metric_id": metric.id, "week_number": 60, "year": YEAR, "actual_value": 4},
            {"metric_id": metric.id, "week_number": 2, "year": YEAR, "actual_value": 6},
        ],
    )

    assert result.code == "partial_batch_failure"
    assert [(e.index, e.code) for e in result.errors] == [(1, "validation_error")]
    points = (await engine.get_weekly_data(owner, metric.id, YEAR)).data
    assert [p.week_number for p in points] == [1, 2]


@pytest.mark.asyncio
async def test_month_entries_write_all_four_weeks(engine, owner, make_metric):
    metric = await make_metric(owner, "Calls")

    result = await engine.save_month_entries(owner, metric.id, 2, YEAR, [40, 0, 0, 0])

    assert result.success
    assert result.data == 4
    points = (await engine.get_weekly_data(owner, metric.id, YEAR)).data
    assert [(p.week_number, p.actual_value) for p in points] == [(5, 40), (6, 0), (7, 0), (8, 0)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "month, values",
    [
        (0, [1, 2, 3, 4]),
        (13, [1, 2, 3, 4]),
        (1, [1, 2, 3]),
        (1, [1, 2, 3, 4, 5]),
    ],
)
async def test_month_entries_validation(engine, store, owner, make_metric, month, values):
    metric = await make_metric(owner, "Calls")

    result = await engine.save_month_entries(owner, metric.id, month, YEAR, values)

    assert result.code == "validation_error"
    assert store.calls["upsert_weekly_data"] == 0
