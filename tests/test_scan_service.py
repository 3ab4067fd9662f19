# tests/test_scan_service.py
"""Unit tests for the QR scan flow."""

import threading
import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy.exc import OperationalError
from app.exceptions import NotFoundError, CapacityExceededError, InternalError
from app.models.entry_exit_log import LogType
from app.services.entry_exit_service import count_logs
from app.services.occupancy_service import read_occupancy, set_capacity, apply_delta
from app.services.user_service import find_user_by_qr_code
from app.services.scan_service import handle_scan
from app.schemas.types import to_utc_iso


class TestScanFlow:
    @pytest.mark.asyncio
    async def test_first_scan_is_entry(self, db, make_user, gateway):
        set_capacity(db, 10)
        user = make_user("Ada", "Lovelace")

        outcome = await handle_scan(db, user.qr_code, gateway)

        assert outcome.type == LogType.ENTRY
        assert outcome.current_occupancy == 1
        assert outcome.user_name == "Ada Lovelace"
        assert outcome.success is True

    @pytest.mark.asyncio
    async def test_scans_alternate(self, db, make_user, gateway):
        set_capacity(db, 10)
        user = make_user()

        kinds = [(await handle_scan(db, user.qr_code, gateway)).type for _ in range(5)]

        assert kinds == [LogType.ENTRY, LogType.EXIT, LogType.ENTRY, LogType.EXIT, LogType.ENTRY]

    @pytest.mark.asyncio
    async def test_occupancy_is_entries_minus_exits(self, db, make_user, gateway):
        set_capacity(db, 50)
        users = [make_user(first_name=f"U{i}") for i in range(6)]
        for user in users:
            await handle_scan(db, user.qr_code, gateway)     # 6 entries
        for user in users[:4]:
            await handle_scan(db, user.qr_code, gateway)     # 4 exits

        assert read_occupancy(db).current_occupancy == 2
        assert count_logs(db) == 10

    @pytest.mark.asyncio
    async def test_unknown_qr_code_changes_nothing(self, db, gateway):
        set_capacity(db, 10)

        with pytest.raises(NotFoundError) as exc_info:
            await handle_scan(db, "QR-DOES-NOT-EXIST", gateway)

        assert exc_info.value.status_code == 404
        assert count_logs(db) == 0
        assert read_occupancy(db).current_occupancy == 0
        assert gateway.global_events == []

    @pytest.mark.asyncio
    async def test_entry_refused_when_full(self, db, make_user, gateway):
        set_capacity(db, 1)
        await handle_scan(db, make_user().qr_code, gateway)
        gateway.global_events.clear()
        gateway.user_events.clear()

        with pytest.raises(CapacityExceededError) as exc_info:
            await handle_scan(db, make_user().qr_code, gateway)

        assert exc_info.value.status_code == 403
        assert count_logs(db) == 1
        assert read_occupancy(db).current_occupancy == 1
        assert gateway.global_events == [] and gateway.user_events == []

    @pytest.mark.asyncio
    async def test_exit_allowed_when_full(self, db, make_user, gateway):
        set_capacity(db, 1)
        user = make_user()
        await handle_scan(db, user.qr_code, gateway)

        outcome = await handle_scan(db, user.qr_code, gateway)

        assert outcome.type == LogType.EXIT
        assert outcome.current_occupancy == 0

    @pytest.mark.asyncio
    async def test_capacity_scenario(self, db, make_user, gateway):
        set_capacity(db, 2)
        a, b, c = make_user("A"), make_user("B"), make_user("C")

        first = await handle_scan(db, a.qr_code, gateway)
        assert (first.type, first.current_occupancy) == (LogType.ENTRY, 1)

        gateway.global_events.clear()
        second = await handle_scan(db, b.qr_code, gateway)
        assert (second.type, second.current_occupancy, second.is_at_capacity) == (LogType.ENTRY, 2, True)
        alerts = [p for name, p in gateway.global_events if name == "occupancy:alert"]
        assert [p["type"] for p in alerts] == ["FULL"]

        with pytest.raises(CapacityExceededError):
            await handle_scan(db, c.qr_code, gateway)
        assert read_occupancy(db).current_occupancy == 2

        third = await handle_scan(db, a.qr_code, gateway)
        assert (third.type, third.current_occupancy) == (LogType.EXIT, 1)

        fourth = await handle_scan(db, c.qr_code, gateway)
        assert (fourth.type, fourth.current_occupancy) == (LogType.ENTRY, 2)

    @pytest.mark.asyncio
    async def test_stale_capacity_check_allows_overshoot(self, db, make_user, gateway):
        set_capacity(db, 1)
        apply_delta(db, is_entry=True)

        # Another scan's entry landed between our check and our update
        with patch("app.services.scan_service.is_capacity_full", return_value=False):
            outcome = await handle_scan(db, make_user().qr_code, gateway)

        assert outcome.current_occupancy == 2
        assert outcome.is_at_capacity is True

    @pytest.mark.asyncio
    async def test_strict_capacity_rolls_back_log(self, db, make_user, gateway, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "STRICT_CAPACITY", True)
        set_capacity(db, 1)
        apply_delta(db, is_entry=True)

        with patch("app.services.scan_service.is_capacity_full", return_value=False):
            with pytest.raises(CapacityExceededError):
                await handle_scan(db, make_user().qr_code, gateway)

        assert count_logs(db) == 0
        assert read_occupancy(db).current_occupancy == 1

    @pytest.mark.asyncio
    async def test_persistence_failure_is_internal_error(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(InternalError) as exc_info:
            await handle_scan(db, "QR-1", MagicMock())

        assert exc_info.value.status_code == 500
        db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_session_work_runs_off_the_event_loop(self, db, make_user, gateway):
        set_capacity(db, 10)
        user = make_user()
        seen = []

        def lookup(session, qr_code):
            seen.append(threading.get_ident())
            return find_user_by_qr_code(session, qr_code)

        with patch("app.services.scan_service.find_user_by_qr_code", side_effect=lookup):
            await handle_scan(db, user.qr_code, gateway)

        assert seen and seen[0] != threading.get_ident()


class TestScanBroadcast:
    @pytest.mark.asyncio
    async def test_update_always_emitted(self, db, make_user, gateway):
        set_capacity(db, 10)
        await handle_scan(db, make_user().qr_code, gateway)

        assert gateway.names() == ["occupancy:update"]
        payload = gateway.global_events[0][1]
        assert payload["currentOccupancy"] == 1
        assert payload["percentage"] == 10
        assert payload["isAvailable"] is True

    @pytest.mark.asyncio
    async def test_warning_alert_near_capacity(self, db, make_user, gateway):
        set_capacity(db, 10)
        for _ in range(8):
            apply_delta(db, is_entry=True)

        await handle_scan(db, make_user().qr_code, gateway)

        assert gateway.names() == ["occupancy:update", "occupancy:alert"]
        assert gateway.global_events[1][1]["type"] == "WARNING"

    @pytest.mark.asyncio
    async def test_user_action_only_to_scanning_user(self, db, make_user, gateway):
        set_capacity(db, 10)
        user = make_user("Grace", "Hopper")

        outcome = await handle_scan(db, user.qr_code, gateway)

        assert "user:action" not in gateway.names()
        assert len(gateway.user_events) == 1
        user_id, event, payload = gateway.user_events[0]
        assert (user_id, event) == (user.id, "user:action")
        assert payload["userName"] == "Grace Hopper"
        assert payload["userId"] == user.id
        assert payload["type"] == "ENTRY"
        assert payload["timestamp"] == to_utc_iso(outcome.timestamp)

    @pytest.mark.asyncio
    async def test_broadcast_failure_does_not_fail_scan(self, db, make_user, failing_gateway):
        set_capacity(db, 10)
        user = make_user()

        outcome = await handle_scan(db, user.qr_code, failing_gateway)

        assert outcome.type == LogType.ENTRY
        assert count_logs(db) == 1
        assert read_occupancy(db).current_occupancy == 1
