"""Issued token value object."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class TokenKind(StrEnum):
    """What an issued token grants."""

    SESSION = "session"
    INVITATION = "invitation"
    SHARE = "share"


@dataclass(frozen=True)
class IssuedToken:
    """The raw token value handed to a caller.

    ``value`` is only available at issuance time for sessions and
    invitations, since only their hashes are persisted. Share tokens never
    expire and carry ``expires_at=None``.
    """

    value: str
    subject_type: TokenKind
    expires_at: datetime | None = None


@dataclass(frozen=True)
class IssuedSession:
    """A freshly opened session. Unlike share tokens, sessions always expire."""

    value: str
    expires_at: datetime
    subject_type: TokenKind = TokenKind.SESSION
