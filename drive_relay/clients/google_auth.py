"""
Google OAuth utilities.

Builds the consent URL a caller opens to authorize Drive access for a given
OAuth client.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote, urlencode

from drive_relay.core.config import GoogleSettings, OAuthSettings


class GoogleOAuthClient:
    """Build Google authorization URLs for caller-supplied OAuth clients."""

    def __init__(self, google_settings: GoogleSettings, oauth_settings: OAuthSettings) -> None:
        self._google = google_settings
        self._oauth = oauth_settings

    @property
    def default_redirect_uri(self) -> str:
        return self._google.redirect_uri

    def build_authorization_url(
        self,
        client_id: str,
        *,
        login_hint: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> str:
        """Construct the Google OAuth consent URL."""
        params = {
            "client_id": client_id,
            "response_type": self._google.response_type,
            "scope": " ".join(self._oauth.scopes),
            "redirect_uri": redirect_uri or self.default_redirect_uri,
        }
        if login_hint:
            params["login_hint"] = login_hint
        query = urlencode(params, safe="", quote_via=quote)
        return f"{self._google.auth_base_url}?{query}"


__all__ = ["GoogleOAuthClient"]
