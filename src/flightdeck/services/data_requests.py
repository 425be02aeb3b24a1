"""Data subject access/deletion requests confirmed by email.

A submission stores a pending record under an unguessable token and emails a
confirmation link. Visiting the link sends the result email and rewrites the
record to a minimized audit form that no longer holds the address.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from flightdeck.core.errors import (
    NotConfiguredError,
    NotFoundOrExpiredError,
    StoreError,
    UpstreamDeliveryError,
    ValidationError,
)
from flightdeck.core.security import generate_token, hash_email
from flightdeck.services.email import EmailSender
from flightdeck.services.rate_limit import RateLimiter
from flightdeck.services.store import KeyValueStore, get_json, put_json
from flightdeck.utils.time import Clock, to_iso, utcnow

logger = logging.getLogger(__name__)

DATA_REQUEST_KEY_PREFIX = "dsar:"
PENDING_TTL_SECONDS = 24 * 60 * 60
AUDIT_TTL_SECONDS = 30 * 24 * 60 * 60
EMAIL_MAX_LENGTH = 254
TOKEN_BYTES = 32

SUBMITTED_MESSAGE = (
    "Thanks. If the address is valid you will receive an email shortly. "
    "Please check your inbox and follow the confirmation link within 24 hours."
)
RATE_LIMITED_MESSAGE = "Too many requests. Please wait before submitting another request."


class DataRequestAction(str, Enum):
    """What the requester wants done with their data."""

    ACCESS = "access"
    DELETE = "delete"


class ConfirmOutcome(str, Enum):
    """Successful results of visiting a confirmation link."""

    CONFIRMED = "confirmed"
    ALREADY_PROCESSED = "already_processed"


@dataclass(frozen=True)
class DataRequestReceipt:
    """Acknowledgement returned to the submitter."""

    token: str
    message: str = SUBMITTED_MESSAGE


@dataclass(frozen=True)
class ConfirmResult:
    """Outcome of a confirmation visit."""

    outcome: ConfirmOutcome
    action: DataRequestAction | None = None


def validate_email(value: object) -> str:
    """Return a trimmed, syntactically plausible email address.

    Raises:
        ValidationError: naming the ``email`` field when the address is implausible.
    """
    if not isinstance(value, str):
        raise ValidationError("email is required.")
    email = value.strip()
    if not email:
        raise ValidationError("email is required.")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"email must be at most {EMAIL_MAX_LENGTH} characters.")
    if any(ch.isspace() for ch in email):
        raise ValidationError("email must not contain spaces.")
    if email.count("@") != 1:
        raise ValidationError("email must contain exactly one @.")
    local, domain = email.split("@")
    if not local:
        raise ValidationError("email is missing the part before @.")
    if "." not in domain or domain.startswith(".") or domain.endswith("."):
        raise ValidationError("email domain is not valid.")
    return email


def validate_action(value: object) -> DataRequestAction:
    """Return the requested action or raise a ``ValidationError`` naming ``action``."""
    if isinstance(value, str):
        try:
            return DataRequestAction(value.strip().lower())
        except ValueError:
            pass
    raise ValidationError("action must be 'access' or 'delete'.")


def compose_result_email(action: DataRequestAction) -> tuple[str, str]:
    """Return the subject and body describing the outcome of a processed request."""
    if action is DataRequestAction.DELETE:
        subject = "Your data deletion request has been completed"
        body = [
            "Hello,",
            "",
            "We have processed your data deletion request.",
            "",
            "Any server-side records associated with your email address on "
            "flyingwithjoel.co.uk have been removed. This site does not run user "
            "accounts, so in most cases there was nothing stored to begin with.",
            "",
            "Please note: third-party providers used to run the site (hosting, "
            "email delivery and chat platforms such as Discord) may keep their "
            "own logs for a limited period. Those logs are outside the control "
            "of this site.",
        ]
    else:
        subject = "Your data access request"
        body = [
            "Hello,",
            "",
            "We have processed your data access request.",
            "",
            "No server-side record linked to your email address was found. "
            "This site does not run user accounts or store profiles.",
            "",
            "Preferences such as your cookie consent choice are stored only in "
            "your own browser and never reach our servers.",
            "",
            "If you previously sent a form (for example a flight suggestion), "
            "it was forwarded to a chat webhook (Discord) and may persist there "
            "independently of this site.",
        ]
    body.extend(["", "This email was sent because a request was confirmed for this address."])
    return subject, "\n".join(body)


class DataRequestService:
    """Creates pending data requests and processes confirmations."""

    def __init__(
        self,
        store: KeyValueStore | None,
        email_sender: EmailSender | None,
        rate_limiter: RateLimiter,
        *,
        confirm_url: str,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._email_sender = email_sender
        self._rate_limiter = rate_limiter
        self._confirm_url = confirm_url
        self._clock = clock or utcnow

    @staticmethod
    def _key(token: str) -> str:
        return f"{DATA_REQUEST_KEY_PREFIX}{token}"

    def _require_backends(self) -> tuple[KeyValueStore, EmailSender]:
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")
        if self._email_sender is None:
            raise NotConfiguredError("Email delivery is not configured.")
        return self._store, self._email_sender

    def confirmation_link(self, token: str) -> str:
        return f"{self._confirm_url}?{urlencode({'token': token})}"

    def _compose_confirmation_email(
        self, action: DataRequestAction, token: str
    ) -> tuple[str, str]:
        label = "access" if action is DataRequestAction.ACCESS else "deletion"
        subject = f"Confirm your data {label} request"
        body = "\n".join(
            [
                "Hello,",
                "",
                f"We received a data {label} request for this email address on "
                "flyingwithjoel.co.uk.",
                "",
                "To confirm it, open the link below within 24 hours:",
                self.confirmation_link(token),
                "",
                "If you did not make this request you can ignore this email; "
                "nothing will happen.",
            ]
        )
        return subject, body

    async def create(self, email: object, action: object, identity: str) -> DataRequestReceipt:
        """Record a pending request and email its confirmation link.

        Raises:
            NotConfiguredError: the store or email sender is missing.
            ValidationError: ``email`` or ``action`` is invalid.
            RateLimitedError: ``identity`` submitted too recently.
            UpstreamDeliveryError: the confirmation email could not be sent.
        """
        store, sender = self._require_backends()
        clean_email = validate_email(email)
        clean_action = validate_action(action)

        await self._rate_limiter.enforce(identity, RATE_LIMITED_MESSAGE)

        token = generate_token(TOKEN_BYTES)
        record = {
            "email": clean_email,
            "action": clean_action.value,
            "createdAtUtc": to_iso(self._clock()),
            "confirmedAtUtc": None,
            "processedAtUtc": None,
        }
        try:
            await put_json(store, self._key(token), record, PENDING_TTL_SECONDS)
        except StoreError as exc:
            raise NotConfiguredError("Could not save the request.") from exc

        subject, text = self._compose_confirmation_email(clean_action, token)
        if not await sender.send(clean_email, subject, text):
            raise UpstreamDeliveryError(
                "We could not send the confirmation email. Please try again later."
            )

        logger.info(
            "Data %s request pending confirmation (email hash %s)",
            clean_action.value,
            hash_email(clean_email)[:12],
        )
        return DataRequestReceipt(token=token)

    async def confirm(self, token: str | None) -> ConfirmResult:
        """Process the request behind ``token``.

        Raises:
            ValidationError: no token supplied.
            NotConfiguredError: the store or email sender is missing.
            NotFoundOrExpiredError: the token is unknown or has expired.
            UpstreamDeliveryError: the result email failed; the record stays pending.
        """
        if not token or not token.strip():
            raise ValidationError("Missing token.")
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")
        store = self._store

        key = self._key(token.strip())
        try:
            record = await get_json(store, key)
        except StoreError as exc:
            raise NotConfiguredError("Could not load the request.") from exc
        if not isinstance(record, dict):
            raise NotFoundOrExpiredError("This link is invalid or has expired.")

        if record.get("processedAtUtc"):
            return ConfirmResult(
                outcome=ConfirmOutcome.ALREADY_PROCESSED,
                action=_stored_action(record),
            )

        email = record.get("email")
        action = _stored_action(record)
        if not isinstance(email, str) or not email or action is None:
            raise NotFoundOrExpiredError("This link is invalid or has expired.")

        _, sender = self._require_backends()

        confirmed_at = to_iso(self._clock())
        subject, text = compose_result_email(action)
        if not await sender.send(email, subject, text):
            raise UpstreamDeliveryError("We could not send the result email. Please try again.")

        minimized: dict[str, Any] = {
            "action": action.value,
            "createdAtUtc": record.get("createdAtUtc"),
            "confirmedAtUtc": confirmed_at,
            "processedAtUtc": to_iso(self._clock()),
            "emailHash": hash_email(email),
        }
        try:
            await put_json(store, key, minimized, AUDIT_TTL_SECONDS)
        except StoreError as exc:
            raise NotConfiguredError("Could not save the request.") from exc

        logger.info(
            "Data %s request processed (email hash %s)",
            action.value,
            minimized["emailHash"][:12],
        )
        return ConfirmResult(outcome=ConfirmOutcome.CONFIRMED, action=action)


def _stored_action(record: dict[str, Any]) -> DataRequestAction | None:
    try:
        return DataRequestAction(record.get("action"))
    except ValueError:
        return None
