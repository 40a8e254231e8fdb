"""Tests for logging, timing and the audit trail."""
import logging

import pytest

from mcp_junos_config.utils.audit_log import (
    ChangeRecord,
    ChangeTracker,
    get_recent_changes,
    setup_audit_logging,
)
from mcp_junos_config.utils.logging_config import (
    PerfStats,
    global_stats,
    timed,
    timed_section,
    timed_section_sync,
)


class TestTiming:
    """Tests for timing helpers."""

    @pytest.fixture(autouse=True)
    def clear_stats(self):
        global_stats.clear()
        yield
        global_stats.clear()

    @pytest.mark.asyncio
    async def test_timed_async(self):
        """Async functions are timed under their operation name."""
        @timed("commit")
        async def commit():
            return "ok"

        assert await commit() == "ok"
        assert global_stats.operations() == ["commit"]

    def test_timed_sync_failure(self, caplog):
        """Failures are reported and re-raised."""
        @timed("render", device_id="srx-edge")
        def render():
            raise ValueError("bad config")

        with caplog.at_level(logging.WARNING, logger="junoscraft.perf"):
            with pytest.raises(ValueError):
                render()
        assert "FAIL: bad config" in caplog.text
        assert "srx-edge" in caplog.text

    @pytest.mark.asyncio
    async def test_timed_uses_device_id_attribute(self, caplog):
        """Methods report the device id of their object."""
        class Session:
            device_id = "ex-core"

            @timed("lock")
            async def lock(self):
                pass

        with caplog.at_level(logging.INFO, logger="junoscraft.perf"):
            await Session().lock()
        assert "ex-core" in caplog.text

    @pytest.mark.asyncio
    async def test_timed_section_extra(self, caplog):
        """Extra fields are appended to the perf line."""
        with caplog.at_level(logging.INFO, logger="junoscraft.perf"):
            async with timed_section("tool:read_resource", device_id="srx-edge",
                                     resource_type="snmp"):
                pass
        assert "resource_type=snmp" in caplog.text
        assert global_stats.operations() == ["tool:read_resource"]

    def test_timed_section_sync_failure(self):
        """Sync sections record their timing and re-raise."""
        with pytest.raises(KeyError):
            with timed_section_sync("resource_render"):
                raise KeyError("routing_engine")
        assert global_stats.operations() == ["resource_render"]


class TestPerfStats:
    """Tests for PerfStats."""

    def test_summary(self):
        """Summary lists count, average and bounds per operation."""
        stats = PerfStats()
        stats.record("commit", 100.0)
        stats.record("commit", 300.0)
        stats.record("lock", 5.0)
        summary = stats.summary()
        assert "count=   2" in summary
        assert "avg=  200.00ms" in summary
        assert stats.operations() == ["commit", "lock"]
        stats.clear()
        assert stats.operations() == []


class TestAuditLog:
    """Tests for the audit trail."""

    def test_record_json(self):
        """Records survive a JSON round trip."""
        record = ChangeRecord(
            timestamp="2026-01-01T00:00:00+00:00",
            device_id="srx-edge",
            operation="delete",
            resource_type="snmp",
            resource_id="snmp",
            dry_run=False,
            success=True,
            lines=["delete snmp location"],
        )
        assert ChangeRecord.from_json(record.to_json()) == record

    def test_filters_and_order(self, tmp_path):
        """Filters apply per device and operation; newest first."""
        log_file = setup_audit_logging(str(tmp_path))
        ChangeTracker("srx-edge").log_change("create", "snmp", "snmp", True)
        ChangeTracker("ex-core").log_change("create", "snmp", "snmp", False, error="locked")
        ChangeTracker("srx-edge").log_change("delete", "snmp", "snmp", True)

        records = get_recent_changes(log_file)
        assert [r.operation for r in records] == ["delete", "create", "create"]
        assert [r.device_id for r in get_recent_changes(log_file, device_id="ex-core")] == ["ex-core"]
        assert len(get_recent_changes(log_file, operation="create")) == 2
        assert len(get_recent_changes(log_file, limit=1)) == 1

    def test_malformed_lines_skipped(self, tmp_path):
        """Lines that are not records are ignored."""
        log_file = tmp_path / "audit.log"
        log_file.write_text("not json\n\n")
        assert get_recent_changes(str(log_file)) == []

    def test_missing_file(self, tmp_path):
        """A missing audit log reads as empty."""
        assert get_recent_changes(str(tmp_path / "none.log")) == []
