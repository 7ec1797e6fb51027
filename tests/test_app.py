"""Tests for the procinspect Textual viewer."""

import pytest
from textual.widgets import DataTable

from procinspect.app import HeaderStats, InspectorApp, SortKey, TaskTable
from procinspect.config import InspectorConfig
from procinspect.models import LoadAverage, MemoryInfo, TaskRecord, Uptime
from procinspect.monitor import SystemSnapshot


@pytest.fixture
def config(procfs):
    return InspectorConfig(procfs_root=procfs, sample_interval=0.0, poll_rate=0.2)


def row_keys(table: DataTable) -> list[str]:
    return [key.value for key in table.rows]


def make_tasks() -> list[TaskRecord]:
    return [
        TaskRecord(pid=100, state="running", name="test1", owner_id=0, thread_count=1),
        TaskRecord(pid=200, state="sleeping", name="test2", owner_id=1000, thread_count=8),
    ]


class TestSortKey:
    """Tests for SortKey enum."""

    def test_sort_key_values(self):
        """Test SortKey enum values."""
        assert SortKey.PID.value == "pid"
        assert SortKey.NAME.value == "name"
        assert SortKey.USER.value == "user"
        assert SortKey.THREADS.value == "threads"

    def test_sort_key_members(self):
        """Test SortKey has one member per sortable column."""
        assert len(list(SortKey)) == 4


@pytest.mark.asyncio
async def test_app_creation(config):
    """Test InspectorApp can be instantiated."""
    app = InspectorApp(config)
    assert app.title == "procinspect"
    assert app._monitor.procfs_root == config.procfs_root


@pytest.mark.asyncio
async def test_app_compose(config):
    """Test InspectorApp composes correctly."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#header-stats") is not None
        assert pilot.app.query_one("#task-table") is not None


@pytest.mark.asyncio
async def test_app_quit_binding(config):
    """Test that 'q' binding triggers quit."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert not app._monitor.is_running


@pytest.mark.asyncio
async def test_app_sort_binding(config):
    """Test that F6 binding cycles sort key."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        task_table = pilot.app.query_one(TaskTable)
        initial_sort = task_table.sort_key

        await pilot.press("f6")

        assert task_table.sort_key != initial_sort


@pytest.mark.asyncio
async def test_task_table_cycle_sort(config):
    """Test TaskTable sort key cycling."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        task_table = pilot.app.query_one(TaskTable)

        assert task_table.sort_key == SortKey.PID
        task_table.cycle_sort()
        assert task_table.sort_key == SortKey.NAME
        task_table.cycle_sort()
        assert task_table.sort_key == SortKey.USER
        task_table.cycle_sort()
        assert task_table.sort_key == SortKey.THREADS
        task_table.cycle_sort()
        assert task_table.sort_key == SortKey.PID


@pytest.mark.asyncio
async def test_task_table_update_tasks(config):
    """Test TaskTable replaces its rows on update."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        task_table = pilot.app.query_one(TaskTable)
        table = task_table.query_one("#task-table", DataTable)

        task_table.update_tasks(make_tasks())
        assert table.row_count == 2
        assert row_keys(table) == ["100", "200"]

        task_table.update_tasks(make_tasks()[1:])
        assert table.row_count == 1
        assert row_keys(table) == ["200"]


@pytest.mark.asyncio
async def test_task_table_rows_follow_sort_key(config):
    """Test rows are rebuilt in the order of the current sort key."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        task_table = pilot.app.query_one(TaskTable)
        table = task_table.query_one("#task-table", DataTable)

        while task_table.sort_key is not SortKey.THREADS:
            task_table.cycle_sort()
        task_table.update_tasks(make_tasks())

        assert row_keys(table) == ["200", "100"]


@pytest.mark.asyncio
async def test_app_receives_updates_from_monitor(config):
    """Test that the app shows snapshots read from the fake procfs."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        await pilot.pause(1.5)

        assert app._monitor.is_running
        header = pilot.app.query_one("#header-stats", HeaderStats)
        assert header.snapshot is not None
        assert header.snapshot.hostname == "testhost"
        table = pilot.app.query_one("#task-table", DataTable)
        assert sorted(row_keys(table), key=int) == ["1", "42", "314"]


@pytest.mark.asyncio
async def test_header_stats_update(config):
    """Test that header stats can be updated."""
    app = InspectorApp(config)
    async with app.run_test() as pilot:
        header = pilot.app.query_one("#header-stats", HeaderStats)
        snapshot = SystemSnapshot(
            hostname="box",
            uptime=Uptime.from_seconds(61),
            cpu_model="CPU [rev 2]",
            processor_count=2,
            load_average=LoadAverage("1.00", "0.50", "0.25"),
            memory=MemoryInfo(total_kib=1024, active_kib=512),
            cpu_usage=0.25,
        )

        header.update_stats(snapshot)

        assert header.snapshot is snapshot
        assert "box" in header._get_system_info()
        assert "1 minute, 1 second" in header._get_system_info()
        assert "0.50" in header._get_hardware_info()
