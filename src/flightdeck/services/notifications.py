"""Best-effort fan-out of incident notice changes."""

from __future__ import annotations

import logging
from typing import Any

from flightdeck.services.email import EmailSender
from flightdeck.services.incident_notice import IncidentNoticeUpdate, NoticeTransition
from flightdeck.services.webhook import WebhookNotifier

logger = logging.getLogger(__name__)

_TRANSITION_HEADLINES = {
    NoticeTransition.ENABLED: "Incident notice enabled",
    NoticeTransition.DISABLED: "Incident notice disabled",
    NoticeTransition.UPDATED: "Incident notice updated",
}
_TRANSITION_COLOURS = {
    NoticeTransition.ENABLED: 0xE74C3C,
    NoticeTransition.DISABLED: 0x2ECC71,
    NoticeTransition.UPDATED: 0xF39C12,
}


class IncidentNotifier:
    """Sends webhook and email alerts for notice transitions.

    Every failure is logged and discarded; callers schedule :meth:`notify` as
    a background task after the notice has already been saved.
    """

    def __init__(
        self,
        *,
        webhook: WebhookNotifier | None,
        email_sender: EmailSender | None,
        alert_email: str | None,
        status_page_url: str,
    ) -> None:
        self._webhook = webhook
        self._email_sender = email_sender
        self._alert_email = alert_email
        self._status_page_url = status_page_url

    def build_webhook_message(self, update: IncidentNoticeUpdate) -> dict[str, Any]:
        notice = update.notice
        headline = _TRANSITION_HEADLINES.get(update.transition, "Incident notice changed")
        return {
            "content": f"🚨 **{headline}**",
            "embeds": [
                {
                    "title": headline,
                    "color": _TRANSITION_COLOURS.get(update.transition, 0x95A5A6),
                    "fields": [
                        {"name": "Change", "value": update.transition.value, "inline": True},
                        {
                            "name": "Status",
                            "value": "Enabled" if notice.enabled else "Disabled",
                            "inline": True,
                        },
                        {"name": "Title", "value": notice.title or "(none)", "inline": False},
                        {"name": "Message", "value": notice.message or "(none)", "inline": False},
                        {"name": "Status page", "value": self._status_page_url, "inline": False},
                    ],
                    "footer": {"text": f"Updated {notice.updated_at_utc or 'unknown'}"},
                }
            ],
        }

    def build_email(self, update: IncidentNoticeUpdate) -> tuple[str, str]:
        notice = update.notice
        headline = _TRANSITION_HEADLINES.get(update.transition, "Incident notice changed")
        lines = [
            f"{headline}.",
            "",
            f"Change: {update.transition.value}",
            f"Status: {'Enabled' if notice.enabled else 'Disabled'}",
            f"Title: {notice.title or '(none)'}",
            f"Message: {notice.message or '(none)'}",
            f"Updated: {notice.updated_at_utc or 'unknown'}",
            "",
            f"Status page: {self._status_page_url}",
        ]
        return f"[Flying With Joel] {headline}", "\n".join(lines)

    async def notify(self, update: IncidentNoticeUpdate) -> None:
        """Deliver alerts for ``update``; never raises."""
        if update.transition is NoticeTransition.NOOP:
            return

        if self._webhook is not None:
            try:
                delivered = await self._webhook.post(self.build_webhook_message(update))
            except Exception as exc:
                logger.warning("Incident webhook raised: %s", exc)
            else:
                if not delivered:
                    logger.warning("Incident webhook was not delivered")

        if self._email_sender is not None and self._alert_email:
            subject, text = self.build_email(update)
            try:
                delivered = await self._email_sender.send(self._alert_email, subject, text)
            except Exception as exc:
                logger.warning("Incident alert email raised: %s", exc)
            else:
                if not delivered:
                    logger.warning("Incident alert email was not delivered")
