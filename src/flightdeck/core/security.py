"""Credential and identity helpers."""
from __future__ import annotations

import base64
import binascii
import hashlib
import secrets

from fastapi import Request


def safe_equal(provided: str | None, expected: str | None) -> bool:
    """Compare two strings in constant time.

    Length mismatches still return early inside ``compare_digest``; only the
    length can leak that way.
    """
    if not isinstance(provided, str) or not isinstance(expected, str):
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def parse_basic_auth(header: str | None) -> tuple[str, str] | None:
    """Decode an ``Authorization: Basic ...`` header into (username, password)."""
    if not header:
        return None
    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def hash_value(value: str) -> str:
    """Return a SHA-256 hex digest of the provided value."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_email(email: str) -> str:
    """Return the audit hash of a normalized email address."""
    return hash_value(email.strip().lower())


def client_identity(request: Request) -> str:
    """Return the caller's network identity for rate limiting.

    Prefers the edge-provided client address, then the first forwarded hop,
    then the socket peer.
    """
    edge_ip = request.headers.get("cf-connecting-ip")
    if edge_ip and edge_ip.strip():
        return edge_ip.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def generate_token(num_bytes: int = 32) -> str:
    """Return an unguessable URL-safe token."""
    return secrets.token_urlsafe(max(24, num_bytes))
