from __future__ import annotations

import pytest

from akibeks_data.backends.mock import MockBackend, MockStore
from akibeks_data.client import DataAccessLayer
from akibeks_data.domain.query import FilterOption
from akibeks_data.domain.tables import Table
from akibeks_data.selector import BackendState

TOTAL_PROJECTS = 25
PAGE_SIZE = 10


def _projects(n: int) -> list[dict]:
    return [{"id": f"p{i:02d}", "title": f"Project {i:02d}", "position": i} for i in range(n)]


@pytest.mark.asyncio
async def test_first_use_resolves_mock_mode(dal):
    assert dal.state is BackendState.UNINITIALIZED
    assert dal.mode is None

    result = await dal.select("projects")

    assert result.ok
    assert result.data == []
    assert dal.state is BackendState.MOCK_BACKED
    assert dal.mode == "mock"


@pytest.mark.asyncio
async def test_seeded_store_serves_fixtures(seeded_dal):
    result = await seeded_dal.select(Table.PROJECTS, {"orderBy": "title"})
    assert [r["title"] for r in result.data] == [
        "Industrial Park Phase 2",
        "Karen Residential Estate",
        "Westlands Office Complex",
    ]


@pytest.mark.asyncio
async def test_paginated_middle_page(mock_settings):
    dal = DataAccessLayer(mock_settings, store=MockStore({"projects": _projects(TOTAL_PROJECTS)}))

    page = await dal.select_paginated("projects", page=2, page_size=PAGE_SIZE)

    assert page.ok
    assert len(page.data) == PAGE_SIZE
    assert page.data[0]["id"] == "p10"
    assert page.total == TOTAL_PROJECTS
    assert page.total_pages == 3
    assert page.has_next is True
    assert page.has_prev is True


@pytest.mark.asyncio
async def test_paginated_pages_cover_every_record_once(mock_settings):
    dal = DataAccessLayer(mock_settings, store=MockStore({"projects": _projects(TOTAL_PROJECTS)}))
    seen = []
    page_number = 1
    while True:
        page = await dal.select_paginated("projects", page=page_number, page_size=PAGE_SIZE, options={"orderBy": "position"})
        seen.extend(r["id"] for r in page.data)
        if not page.has_next:
            break
        page_number += 1

    assert seen == [f"p{i:02d}" for i in range(TOTAL_PROJECTS)]
    assert page_number == 3


@pytest.mark.asyncio
async def test_paginated_past_the_end_and_empty_table(mock_settings):
    dal = DataAccessLayer(mock_settings, store=MockStore({"projects": _projects(5)}))

    beyond = await dal.select_paginated("projects", page=9, page_size=PAGE_SIZE)
    assert beyond.data == []
    assert beyond.total == 5
    assert beyond.has_next is False
    assert beyond.has_prev is True

    empty = await dal.select_paginated("testimonials")
    assert empty.total == 0
    assert empty.total_pages == 0
    assert empty.has_next is False
    assert empty.has_prev is False


@pytest.mark.asyncio
async def test_paginated_clamps_page_and_size(mock_settings):
    dal = DataAccessLayer(mock_settings, store=MockStore({"projects": _projects(3)}))
    page = await dal.select_paginated("projects", page=0, page_size=0)
    assert page.page == 1
    assert page.page_size == 1
    assert len(page.data) == 1
    assert page.total_pages == 3


@pytest.mark.asyncio
async def test_count_with_filter(mock_settings):
    rows = [{"id": str(i), "status": "completed" if i < 3 else "active"} for i in range(10)]
    dal = DataAccessLayer(mock_settings, store=MockStore({"projects": rows}))

    result = await dal.count("projects", [{"column": "status", "operator": "eq", "value": "completed"}])
    assert result.data == 3
    assert (await dal.count("projects")).data == 10


@pytest.mark.asyncio
async def test_filters_are_anded_across_columns(mock_settings):
    rows = [
        {"id": "1", "status": "active", "county": "Nairobi"},
        {"id": "2", "status": "active", "county": "Mombasa"},
        {"id": "3", "status": "completed", "county": "Nairobi"},
    ]
    dal = DataAccessLayer(mock_settings, store=MockStore({"projects": rows}))

    result = await dal.select(
        "projects",
        {
            "filters": [
                FilterOption(column="status", operator="eq", value="active"),
                {"column": "county", "operator": "eq", "value": "Nairobi"},
            ]
        },
    )
    assert [r["id"] for r in result.data] == ["1"]


@pytest.mark.asyncio
async def test_repeated_reads_are_identical(seeded_dal):
    options = {"orderBy": "budgetKes", "orderDirection": "DESC"}
    first = await seeded_dal.select("projects", options)
    second = await seeded_dal.select("projects", options)
    assert first == second
    assert first.data[0]["id"] == "3"


@pytest.mark.asyncio
async def test_unknown_table_is_reported_not_raised(dal):
    result = await dal.select("invoices")
    assert result.data == []
    assert result.error == "Table invoices not found"

    inserted = await dal.insert("invoices", {"amount": 1})
    assert inserted.data is None
    assert inserted.error == "Table invoices not found"


@pytest.mark.asyncio
async def test_malformed_filters_are_reported(dal):
    result = await dal.select("projects", {"filters": "status=active"})
    assert result.data == []
    assert result.error

    result = await dal.count("projects", [{"operator": "eq", "value": 1}])
    assert result.data == 0
    assert "Malformed filter" in result.error


@pytest.mark.asyncio
async def test_strict_filters_reject_unknown_operators(mock_settings, store):
    lenient = DataAccessLayer(mock_settings, store=store)
    strict = DataAccessLayer(mock_settings, store=store, strict_filters=True)
    options = {"filters": [{"column": "title", "operator": "regex", "value": ".*"}]}

    assert (await lenient.select("projects", options)).ok
    result = await strict.select("projects", options)
    assert result.data == []
    assert "regex" in result.error


@pytest.mark.asyncio
async def test_insert_then_find_one(dal):
    inserted = await dal.insert("contactSubmissions", {"name": "Wanjiku", "email": "w@example.com"})
    assert inserted.ok
    record = inserted.data
    assert record["createdAt"] == record["updatedAt"]

    found = await dal.find_one("contactSubmissions", {"email": "w@example.com"})
    assert found.data == record
    missing = await dal.find_one("contactSubmissions", {"email": "nobody@example.com"})
    assert missing.data is None
    assert missing.error is None


@pytest.mark.asyncio
async def test_insert_normalizes_keys_and_ignores_system_fields(dal):
    inserted = await dal.insert("projects", {"id": "mine", "created_at": "x", "budget_kes": "1500000.50", "title": "T"})

    record = inserted.data
    assert record["id"] != "mine"
    assert record["title"] == "T"
    assert str(record["budgetKes"]) == "1500000.50"
    assert "budget_kes" not in record


@pytest.mark.asyncio
async def test_insert_rejects_wrong_typed_fields(dal):
    result = await dal.insert("testimonials", {"name": "A", "rating": 9})
    assert result.data is None
    assert "Invalid record for testimonials: rating" in result.error
    assert (await dal.count("testimonials")).data == 0


@pytest.mark.asyncio
async def test_update_merges_and_bumps_updated_at(dal):
    created = (await dal.insert("projects", {"title": "Old", "county": "Nairobi"})).data

    updated = await dal.update("projects", created["id"], {"title": "New"})

    assert updated.ok
    assert updated.data["title"] == "New"
    assert updated.data["county"] == "Nairobi"
    assert updated.data["createdAt"] == created["createdAt"]
    assert updated.data["updatedAt"] > created["updatedAt"]


@pytest.mark.asyncio
async def test_update_missing_record(dal):
    result = await dal.update("projects", "nope", {"title": "x"})
    assert result.data is None
    assert result.error == "Item with id nope not found in projects"

    result = await dal.update("projects", "", {"title": "x"})
    assert result.error == "update requires a record id"


@pytest.mark.asyncio
async def test_delete_then_find_one(seeded_dal):
    deleted = await seeded_dal.delete("projects", "2")
    assert deleted.data is True
    assert deleted.error is None

    found = await seeded_dal.find_one("projects", {"id": "2"})
    assert found.data is None
    assert found.error is None

    again = await seeded_dal.delete("projects", "2")
    assert again.data is False
    assert again.error == "Item with id 2 not found in projects"


@pytest.mark.asyncio
async def test_find_one_requires_mapping(dal):
    result = await dal.find_one("projects", [("id", "1")])
    assert result.data is None
    assert "mapping" in result.error


@pytest.mark.asyncio
async def test_log_activity_appends_audit_entry(dal):
    result = await dal.log_activity("u1", "project.update", "projects", "p1", {"field": "status"})

    assert result.ok
    entries = (await dal.select(Table.ACTIVITY_LOGS)).data
    assert len(entries) == 1
    assert entries[0]["action"] == "project.update"
    assert entries[0]["details"] == {"field": "status"}


@pytest.mark.asyncio
async def test_health_check_in_mock_mode(dal):
    result = await dal.health_check()
    assert result.data is True
    assert result.error is None


@pytest.mark.asyncio
async def test_unexpected_backend_errors_are_contained(mock_settings):
    class Exploding:
        name = "postgres"

        async def fetch_rows(self, *args, **kwargs):
            raise RuntimeError("connection reset")

        async def close(self):
            return None

    async def factory(settings):
        return Exploding()

    mock_settings = mock_settings.model_copy(update={"data_backend": "postgres"})
    dal = DataAccessLayer(mock_settings, store=MockStore(), backend_factory=factory)

    result = await dal.select("projects")

    assert result.data == []
    assert result.error == "Backend operation failed (RuntimeError)"
    assert dal.mode == "postgres"


@pytest.mark.asyncio
async def test_async_context_manager_closes_backend(mock_settings):
    closed = []

    class Tracking:
        name = "postgres"

        async def ping(self):
            return True, None

        async def close(self):
            closed.append(True)

    async def factory(settings):
        return Tracking()

    settings = mock_settings.model_copy(update={"data_backend": "postgres"})
    async with DataAccessLayer(settings, store=MockStore(), backend_factory=factory) as dal:
        assert (await dal.health_check()).data is True

    assert closed == [True]


@pytest.mark.asyncio
async def test_mutating_a_returned_record_does_not_change_the_store(dal):
    inserted = await dal.insert("activityLogs", {"action": "login", "details": {"attempts": 1}})
    inserted.data["details"]["attempts"] = 99

    found = await dal.find_one("activityLogs", {"id": inserted.data["id"]})
    found.data["details"]["attempts"] = 42

    again = await dal.find_one("activityLogs", {"id": inserted.data["id"]})
    assert again.data["details"] == {"attempts": 1}


@pytest.mark.asyncio
async def test_select_orders_mixed_type_extra_columns(dal):
    await dal.insert("projects", {"title": "A", "tag": 3})
    await dal.insert("projects", {"title": "B", "tag": "x"})

    result = await dal.select("projects", {"orderBy": "tag"})

    assert result.ok
    assert [r["title"] for r in result.data] == ["A", "B"]


@pytest.mark.asyncio
@pytest.mark.parametrize("page, page_size", [("abc", 10), (1, None), (object(), 5)])
async def test_paginated_rejects_non_numeric_window(dal, page, page_size):
    result = await dal.select_paginated("projects", page=page, page_size=page_size)
    assert result.data == []
    assert result.error.startswith("Invalid pagination")


@pytest.mark.asyncio
async def test_paginated_accepts_numeric_strings(seeded_dal):
    result = await seeded_dal.select_paginated("projects", page="2", page_size="2")
    assert result.ok
    assert result.page == 2
    assert len(result.data) == 1


@pytest.mark.asyncio
async def test_batch_insert_splits_rows_into_batches(mock_settings, store):
    batches = []

    class RecordingBackend(MockBackend):
        name = "postgres"

        async def insert_rows(self, table, rows):
            batches.append(len(rows))
            return await super().insert_rows(table, rows)

    async def factory(settings):
        return RecordingBackend(store)

    settings = mock_settings.model_copy(update={"data_backend": "postgres"})
    dal = DataAccessLayer(settings, store=store, backend_factory=factory)
    rows = [{"name": f"Client {i}", "rating": 5} for i in range(7)]

    result = await dal.batch_insert("testimonials", rows, batch_size=3)

    assert result.ok
    assert batches == [3, 3, 1]
    assert [r["name"] for r in result.data] == [f"Client {i}" for i in range(7)]
    assert len({r["id"] for r in result.data}) == 7
    assert (await dal.count("testimonials")).data == 7


@pytest.mark.asyncio
async def test_batch_insert_validates_every_row_first(dal):
    rows = [{"name": "Good", "rating": 4}, {"name": "Bad", "rating": 11}]

    result = await dal.batch_insert("testimonials", rows)

    assert result.data == []
    assert "rating" in result.error
    assert (await dal.count("testimonials")).data == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "rows, batch_size, message",
    [
        ({"name": "single"}, 10, "expects a list"),
        ("rows", 10, "expects a list"),
        ([{"name": "x"}], "big", "Invalid batch size"),
    ],
)
async def test_batch_insert_rejects_bad_arguments(dal, rows, batch_size, message):
    result = await dal.batch_insert("contactSubmissions", rows, batch_size=batch_size)
    assert result.data == []
    assert message in result.error


@pytest.mark.asyncio
async def test_batch_insert_empty_and_clamped_size(dal):
    assert (await dal.batch_insert("services", [])).data == []
    result = await dal.batch_insert("services", [{"title": "A"}, {"title": "B"}], batch_size=0)
    assert len(result.data) == 2


@pytest.mark.asyncio
async def test_dashboard_stats_from_fixtures(seeded_dal):
    result = await seeded_dal.dashboard_stats()

    assert result.ok
    stats = result.data
    assert stats["totalProjects"] == 3
    assert stats["activeProjects"] == 2
    assert stats["totalServices"] == 3
    assert stats["totalUsers"] == 1
    assert stats["projectsByStatus"] == {"planning": 1, "in_progress": 2, "completed": 0, "on_hold": 0}
    assert [p["id"] for p in stats["recentProjects"]] == ["2", "1", "3"]


@pytest.mark.asyncio
async def test_dashboard_stats_limits_recent_projects(seeded_dal):
    result = await seeded_dal.dashboard_stats(recent=1)
    assert [p["id"] for p in result.data["recentProjects"]] == ["2"]


@pytest.mark.asyncio
async def test_health_report_in_mock_mode(seeded_dal):
    result = await seeded_dal.health_report()

    assert result.error is None
    assert result.data["status"] == "healthy"
    assert result.data["mode"] == "mock"
    assert result.data["records"] == 8


@pytest.mark.asyncio
async def test_health_report_includes_pool_stats(mock_settings):
    class PooledBackend:
        name = "postgres"

        def __init__(self, healthy):
            self.healthy = healthy

        async def ping(self):
            return (True, None) if self.healthy else (False, "Database health check failed (OperationalError)")

        async def describe(self):
            return {"version": "PostgreSQL 16.2", "pool": {"pool_size": 2, "pool_available": 1}}

        async def close(self):
            return None

    settings = mock_settings.model_copy(update={"data_backend": "postgres"})

    async def healthy_factory(_):
        return PooledBackend(True)

    report = (await DataAccessLayer(settings, store=MockStore(), backend_factory=healthy_factory).health_report()).data
    assert report["status"] == "healthy"
    assert report["pool"] == {"pool_size": 2, "pool_available": 1}

    async def failing_factory(_):
        return PooledBackend(False)

    result = await DataAccessLayer(settings, store=MockStore(), backend_factory=failing_factory).health_report()
    assert result.data == {"status": "unhealthy", "mode": "postgres"}
    assert result.error == "Database health check failed (OperationalError)"
