"""
Session lifecycle on top of the credential store.

Validates caller input, issues consent URLs and turns store misses into the
errors the HTTP layer reports.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from drive_relay.clients.google_auth import GoogleOAuthClient
from drive_relay.core.config import SessionSettings
from drive_relay.core.errors import (
    InvalidRequestError,
    SessionNotFoundError,
    UnauthorizedError,
)
from drive_relay.services.credential_store import CredentialRecord, CredentialStore

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SessionService:
    """Authorize identities, cache their tokens and end their sessions."""

    def __init__(
        self,
        store: CredentialStore,
        oauth_client: GoogleOAuthClient,
        session_settings: SessionSettings,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._settings = session_settings

    @property
    def expires_in_minutes(self) -> int:
        return int(self._store.ttl.total_seconds() // 60)

    def begin_authorization(
        self,
        identity: Optional[str],
        client_id: Optional[str],
        redirect_uri: Optional[str] = None,
    ) -> str:
        """Return the consent URL and register the pending authorization."""
        client_id = _clean(client_id)
        identity = _clean(identity)
        if not client_id:
            raise InvalidRequestError("Missing clientId")
        if not identity and self._settings.require_identity:
            raise InvalidRequestError("Missing identity")

        if identity:
            self._store.begin_authorization(identity, client_id)
        return self._oauth.build_authorization_url(
            client_id,
            login_hint=identity,
            redirect_uri=_clean(redirect_uri),
        )

    def save_credential(
        self, identity: Optional[str], bearer_token: Optional[str]
    ) -> CredentialRecord:
        identity = _clean(identity)
        bearer_token = _clean(bearer_token)
        if not identity:
            raise InvalidRequestError("Missing identity")
        if not bearer_token:
            raise InvalidRequestError("Missing bearerToken")
        return self._store.save_credential(
            identity,
            bearer_token,
            require_authorization=self._settings.require_authorization,
        )

    def resolve_credential(self, identity: Optional[str]) -> Optional[CredentialRecord]:
        """Return the usable credential for ``identity``, if any.

        Transitional records (authorization started, no token yet) are not
        usable and resolve to ``None``.
        """
        identity = _clean(identity)
        if not identity:
            return None
        record = self._store.resolve_credential(identity)
        if record is None or not record.is_active:
            return None
        return record

    def require_credential(self, identity: Optional[str]) -> CredentialRecord:
        if not _clean(identity):
            raise InvalidRequestError("Missing identity")
        record = self.resolve_credential(identity)
        if record is None:
            raise UnauthorizedError("Not authorized or session expired. Please authorize again.")
        return record

    def end_session(self, identity: Optional[str]) -> None:
        identity = _clean(identity)
        if not identity:
            raise InvalidRequestError("Missing identity")
        if not self._store.end_session(identity):
            raise SessionNotFoundError("No active session for this identity.")

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Periodically drop expired records until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self._store.prune_expired()
            if removed:
                logger.info("Swept %d expired credential(s)", removed)


__all__ = ["SessionService"]
