"""In-process storage for provider access tokens keyed by caller identity."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable, Dict, Optional, Protocol

from drive_relay.core.errors import PreconditionFailedError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class CredentialRecord:
    """A cached credential for one identity.

    A record without ``bearer_token`` is transitional: authorization has been
    started for ``client_id`` but no token has been submitted yet.
    """

    identity: str
    client_id: Optional[str] = None
    bearer_token: Optional[str] = None
    issued_at: datetime = field(default_factory=_utcnow)

    @property
    def is_active(self) -> bool:
        return bool(self.bearer_token)

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.issued_at > ttl


class CredentialStore(Protocol):
    """Operations every credential backend must provide."""

    ttl: timedelta

    def begin_authorization(self, identity: str, client_id: str) -> CredentialRecord:
        ...

    def save_credential(
        self,
        identity: str,
        bearer_token: str,
        *,
        require_authorization: bool = True,
    ) -> CredentialRecord:
        ...

    def resolve_credential(self, identity: str) -> Optional[CredentialRecord]:
        ...

    def end_session(self, identity: str) -> bool:
        ...

    def prune_expired(self) -> int:
        ...

    def clear(self) -> None:
        ...


class InMemoryCredentialStore:
    """Dictionary-backed store with lazy, read-time expiry."""

    def __init__(self, ttl: timedelta, *, clock: Clock = _utcnow) -> None:
        self.ttl = ttl
        self._clock = clock
        self._records: Dict[str, CredentialRecord] = {}
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _live_record(self, identity: str) -> Optional[CredentialRecord]:
        record = self._records.get(identity)
        if record is None:
            return None
        if record.is_expired(self._clock(), self.ttl):
            del self._records[identity]
            logger.info("Evicted expired credential for %s", identity)
            return None
        return record

    def begin_authorization(self, identity: str, client_id: str) -> CredentialRecord:
        """Create or refresh a transitional record holding only ``client_id``."""
        record = CredentialRecord(identity=identity, client_id=client_id, issued_at=self._clock())
        with self._lock:
            self._records[identity] = record
        logger.info("Authorization started for %s", identity)
        return record

    def save_credential(
        self,
        identity: str,
        bearer_token: str,
        *,
        require_authorization: bool = True,
    ) -> CredentialRecord:
        """Store ``bearer_token`` for ``identity``, replacing any previous token."""
        with self._lock:
            current = self._live_record(identity)
            if current is None and require_authorization:
                raise PreconditionFailedError(
                    "No authorization initiated for this identity. Call /auth first."
                )
            if current is None:
                record = CredentialRecord(
                    identity=identity, bearer_token=bearer_token, issued_at=self._clock()
                )
            else:
                record = replace(current, bearer_token=bearer_token, issued_at=self._clock())
            self._records[identity] = record
        logger.info("Stored credential for %s", identity)
        return record

    def resolve_credential(self, identity: str) -> Optional[CredentialRecord]:
        """Return the live record for ``identity``, evicting it first when expired."""
        with self._lock:
            return self._live_record(identity)

    def end_session(self, identity: str) -> bool:
        """Remove the record for ``identity``; report whether one existed."""
        with self._lock:
            record = self._live_record(identity)
            if record is None:
                return False
            del self._records[identity]
        logger.info("Ended session for %s", identity)
        return True

    def prune_expired(self) -> int:
        """Drop every expired record and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [
                identity
                for identity, record in self._records.items()
                if record.is_expired(now, self.ttl)
            ]
            for identity in expired:
                del self._records[identity]
        if expired:
            logger.debug("Pruned %d expired credential(s)", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


__all__ = ["Clock", "CredentialRecord", "CredentialStore", "InMemoryCredentialStore"]
