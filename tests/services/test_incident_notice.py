"""Tests for the incident notice service and notifier."""

import pytest

from flightdeck.core.errors import NotConfiguredError, StoreError, ValidationError
from flightdeck.services.incident_notice import (
    INCIDENT_NOTICE_KEY,
    IncidentNotice,
    IncidentNoticeService,
    NoticeTransition,
    classify_transition,
)
from flightdeck.services.notifications import IncidentNotifier
from tests.conftest import RecordingEmailSender, RecordingWebhook

ON = IncidentNotice(enabled=True, title="Outage", message="Investigating")


class TestClassifyTransition:
    def test_identical_notices_are_noop(self) -> None:
        assert classify_transition(ON, ON) is NoticeTransition.NOOP

    def test_timestamp_alone_is_noop(self) -> None:
        later = IncidentNotice(True, "Outage", "Investigating", "2024-05-01T13:00:00+00:00")
        assert classify_transition(ON, later) is NoticeTransition.NOOP

    def test_enable_and_disable(self) -> None:
        assert classify_transition(IncidentNotice(), ON) is NoticeTransition.ENABLED
        assert classify_transition(ON, IncidentNotice()) is NoticeTransition.DISABLED

    def test_content_change_is_update(self) -> None:
        edited = IncidentNotice(enabled=True, title="Outage", message="Resolved soon")
        assert classify_transition(ON, edited) is NoticeTransition.UPDATED


class TestIncidentNoticeService:
    @pytest.mark.asyncio
    async def test_get_defaults_when_nothing_stored(self, store) -> None:
        notice = await IncidentNoticeService(store).get()
        assert notice == IncidentNotice()

    @pytest.mark.asyncio
    async def test_get_defaults_on_corrupt_state(self, store) -> None:
        await store.put(INCIDENT_NOTICE_KEY, "[[[")
        assert await IncidentNoticeService(store).get() == IncidentNotice()

    @pytest.mark.asyncio
    async def test_get_never_raises(self, mocker) -> None:
        broken = mocker.AsyncMock()
        broken.get.side_effect = StoreError("down")
        assert await IncidentNoticeService(broken).get() == IncidentNotice()
        assert await IncidentNoticeService(None).get() == IncidentNotice()

    @pytest.mark.asyncio
    async def test_set_trims_and_persists(self, store, clock) -> None:
        service = IncidentNoticeService(store, clock=clock)

        update = await service.set(enabled=True, title="  Outage ", message=" Investigating ")

        assert update.transition is NoticeTransition.ENABLED
        assert update.notice.title == "Outage"
        assert update.notice.message == "Investigating"
        assert update.notice.updated_at_utc == "2024-05-01T12:00:00+00:00"
        assert await service.get() == update.notice

    @pytest.mark.asyncio
    async def test_resaving_same_content_is_noop(self, store, clock) -> None:
        service = IncidentNoticeService(store, clock=clock)
        await service.set(enabled=True, title="Outage", message="Investigating")
        clock.advance(60)

        update = await service.set(enabled=True, title="Outage", message="Investigating")

        assert update.transition is NoticeTransition.NOOP

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("title", "message", "expected"),
        [
            ("", "x", "title is required"),
            ("   ", "x", "title is required"),
            ("Outage", "  ", "message is required"),
            ("t" * 81, "x", "title must be 0-80"),
            ("Outage", "m" * 221, "message must be 0-220"),
        ],
    )
    async def test_enabled_notice_validation(self, store, title, message, expected) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await IncidentNoticeService(store).set(enabled=True, title=title, message=message)
        assert expected in exc_info.value.message
        assert store.keys() == []

    @pytest.mark.asyncio
    async def test_disabled_notice_may_be_empty(self, store) -> None:
        update = await IncidentNoticeService(store).set(enabled=False, title="", message=None)
        assert update.notice.title is None
        assert update.notice.message is None

    @pytest.mark.asyncio
    async def test_set_requires_store(self) -> None:
        with pytest.raises(NotConfiguredError):
            await IncidentNoticeService(None).set(enabled=False, title=None, message=None)


class TestIncidentNotifier:
    @pytest.fixture()
    def update(self, store, clock):
        async def _make():
            return await IncidentNoticeService(store, clock=clock).set(
                enabled=True, title="Outage", message="Investigating"
            )

        return _make

    @pytest.mark.asyncio
    async def test_notify_sends_webhook_and_email(self, update) -> None:
        webhook = RecordingWebhook()
        sender = RecordingEmailSender()
        notifier = IncidentNotifier(
            webhook=webhook,
            email_sender=sender,
            alert_email="ops@example.com",
            status_page_url="https://site.example.test/pages/status.html",
        )

        await notifier.notify(await update())

        assert len(webhook.payloads) == 1
        fields = {f["name"]: f["value"] for f in webhook.payloads[0]["embeds"][0]["fields"]}
        assert fields["Change"] == "enabled"
        assert fields["Title"] == "Outage"
        assert fields["Status page"] == "https://site.example.test/pages/status.html"
        assert sender.sent[0]["to"] == "ops@example.com"
        assert "Incident notice enabled" in sender.sent[0]["subject"]
        assert "Message: Investigating" in sender.sent[0]["text"]

    @pytest.mark.asyncio
    async def test_notify_swallows_failures(self, update, mocker) -> None:
        webhook = mocker.AsyncMock()
        webhook.post.side_effect = RuntimeError("boom")
        sender = RecordingEmailSender(succeed=False)
        notifier = IncidentNotifier(
            webhook=webhook,
            email_sender=sender,
            alert_email="ops@example.com",
            status_page_url="https://example.test/status",
        )

        await notifier.notify(await update())

        webhook.post.assert_awaited_once()
        assert len(sender.sent) == 1

    @pytest.mark.asyncio
    async def test_email_skipped_without_recipient(self, update) -> None:
        sender = RecordingEmailSender()
        notifier = IncidentNotifier(
            webhook=None,
            email_sender=sender,
            alert_email=None,
            status_page_url="https://example.test/status",
        )
        await notifier.notify(await update())
        assert sender.sent == []
