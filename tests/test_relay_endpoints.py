try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import timedelta

import httpx
import pytest

from drive_relay.clients.google_auth import GoogleOAuthClient
from drive_relay.clients.google_drive import ShareLinks
from drive_relay.core.config import GoogleSettings, OAuthSettings, SessionSettings, UploadSettings
from drive_relay.core.errors import DriveApiError
from drive_relay.main import app
from drive_relay.services import DriveUploadService, InMemoryCredentialStore, SessionService

pytestmark = pytest.mark.anyio("asyncio")


class RecordingDriveClient:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.create_error: Exception | None = None
        self.grant_error: Exception | None = None

    async def create_file(self, access_token, *, name, content, mime_type, folder_id=None):
        self.calls.append(("create", access_token, name, content, mime_type, folder_id))
        if self.create_error:
            raise self.create_error
        return "file-abc"

    async def grant_public_read(self, access_token, file_id):
        self.calls.append(("grant", access_token, file_id))
        if self.grant_error:
            raise self.grant_error

    async def get_share_links(self, access_token, file_id):
        self.calls.append(("links", access_token, file_id))
        return ShareLinks(
            view_url=f"https://drive.google.com/file/d/{file_id}/view",
            download_url=f"https://drive.google.com/uc?id={file_id}&export=download",
        )

    @property
    def steps(self) -> list[str]:
        return [call[0] for call in self.calls]


class Relay:
    def __init__(self, clock) -> None:
        self.clock = clock
        self.store = InMemoryCredentialStore(ttl=timedelta(minutes=45), clock=clock)
        self.drive = RecordingDriveClient()
        self.upload_settings = UploadSettings()
        self.sessions = SessionService(
            store=self.store,
            oauth_client=GoogleOAuthClient(GoogleSettings(), OAuthSettings()),
            session_settings=SessionSettings(),
        )
        self.uploader = DriveUploadService(self.drive, self.upload_settings)


@pytest.fixture()
def relay(clock):
    from drive_relay import dependencies

    state = Relay(clock)
    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_session_service: lambda: state.sessions,
            dependencies.get_drive_upload_service: lambda: state.uploader,
            dependencies.get_upload_settings: lambda: state.upload_settings,
        }
    )

    yield state

    app.dependency_overrides.clear()


def _client(**transport_options) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app, **transport_options),
        base_url="http://testserver",
    )


async def _authorize(client: httpx.AsyncClient, identity: str = "a@x.com") -> None:
    await client.post("/auth", json={"clientId": "c1", "identity": identity})
    await client.post("/token", json={"identity": identity, "bearerToken": "tok"})


async def test_health_endpoints(relay) -> None:
    async with _client() as client:
        health = await client.get("/health")
        root = await client.get("/")

    assert health.status_code == 200
    assert health.json() == {"status": "ok"}
    assert root.status_code == 200


async def test_full_session_lifecycle(relay) -> None:
    async with _client() as client:
        auth = await client.post("/auth", json={"clientId": "c1", "identity": "a@x.com"})
        token = await client.post(
            "/token", json={"identity": "a@x.com", "bearerToken": "tok"}
        )
        upload = await client.post(
            "/upload",
            data={"identity": "a@x.com", "isPublic": "true"},
            files={"file": ("report.pdf", b"%PDF-1.4 body", "application/pdf")},
        )
        logout = await client.post("/logout", json={"identity": "a@x.com"})
        second_logout = await client.post("/logout", json={"identity": "a@x.com"})

    assert auth.status_code == 200
    auth_body = auth.json()
    assert auth_body["success"] is True
    assert "client_id=c1" in auth_body["authUrl"]
    assert "login_hint=a%40x.com" in auth_body["authUrl"]
    assert auth_body["message"]

    assert token.status_code == 200
    assert token.json()["success"] is True
    assert token.json()["expiresInMinutes"] == 45

    assert upload.status_code == 200
    assert upload.json() == {
        "success": True,
        "fileId": "file-abc",
        "viewUrl": "https://drive.google.com/file/d/file-abc/view",
        "downloadUrl": "https://drive.google.com/uc?id=file-abc&export=download",
        "visibility": "public",
    }
    assert relay.drive.steps == ["create", "grant", "links"]
    assert relay.drive.calls[0][1:5] == ("tok", "report.pdf", b"%PDF-1.4 body", "application/pdf")

    assert logout.status_code == 200
    assert logout.json()["success"] is True
    assert second_logout.status_code == 404
    assert second_logout.json()["success"] is False
    assert second_logout.json()["error"]


async def test_auth_accepts_snake_case_fields(relay) -> None:
    async with _client() as client:
        response = await client.post(
            "/auth",
            json={
                "client_id": "c2",
                "email": "b@x.com",
                "redirect_uri": "https://app.example.com/cb",
            },
        )

    assert response.status_code == 200
    assert "redirect_uri=https%3A%2F%2Fapp.example.com%2Fcb" in response.json()["authUrl"]
    assert relay.store.resolve_credential("b@x.com").client_id == "c2"


@pytest.mark.parametrize(
    ("payload", "error"),
    [
        ({"identity": "a@x.com"}, "Missing clientId"),
        ({"clientId": "c1"}, "Missing identity"),
    ],
)
async def test_auth_rejects_missing_fields(relay, payload, error) -> None:
    async with _client() as client:
        response = await client.post("/auth", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == error


async def test_token_without_prior_auth_is_rejected(relay) -> None:
    async with _client() as client:
        response = await client.post(
            "/token", json={"identity": "a@x.com", "accessToken": "tok"}
        )

    assert response.status_code == 400
    assert "No authorization initiated" in response.json()["error"]
    assert relay.store.resolve_credential("a@x.com") is None


async def test_token_requires_bearer_token(relay) -> None:
    async with _client() as client:
        await client.post("/auth", json={"clientId": "c1", "identity": "a@x.com"})
        response = await client.post("/token", json={"identity": "a@x.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing bearerToken"


async def test_upload_for_unknown_identity_is_unauthorized(relay) -> None:
    async with _client() as client:
        response = await client.post(
            "/upload",
            data={"identity": "stranger@x.com"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert relay.drive.calls == []


async def test_upload_after_authorization_only_is_unauthorized(relay) -> None:
    async with _client() as client:
        await client.post("/auth", json={"clientId": "c1", "identity": "a@x.com"})
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 401


async def test_upload_with_expired_credential_is_unauthorized(relay) -> None:
    async with _client() as client:
        await _authorize(client)
        relay.clock.advance(minutes=45, seconds=1)
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 401
    assert relay.store.resolve_credential("a@x.com") is None


async def test_private_upload_returns_no_links(relay) -> None:
    async with _client() as client:
        await _authorize(client)
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com", "folderId": "folder-7", "isPublic": "false"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 200
    assert response.json() == {"success": True, "fileId": "file-abc", "visibility": "private"}
    assert relay.drive.steps == ["create"]
    assert relay.drive.calls[0][5] == "folder-7"


async def test_upload_requires_file(relay) -> None:
    async with _client() as client:
        await _authorize(client)
        missing = await client.post("/upload", data={"identity": "a@x.com"})
        empty = await client.post(
            "/upload",
            data={"identity": "a@x.com"},
            files={"file": ("empty.txt", b"", "text/plain")},
        )

    assert missing.status_code == 400
    assert missing.json() == {"success": False, "error": "No file uploaded"}
    assert empty.status_code == 400
    assert relay.drive.calls == []


async def test_upload_failure_passes_provider_message(relay) -> None:
    relay.drive.create_error = DriveApiError("Storage quota exceeded", status=403)

    async with _client() as client:
        await _authorize(client)
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com", "isPublic": "true"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Storage quota exceeded"}
    assert relay.drive.steps == ["create"]


async def test_share_transport_failure_still_returns_file_id(relay) -> None:
    relay.drive.grant_error = ConnectionResetError("connection reset by peer")

    async with _client() as client:
        await _authorize(client)
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com", "isPublic": "true"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 200
    assert response.json()["fileId"] == "file-abc"
    assert response.json()["visibility"] == "public"
    assert relay.drive.steps == ["create", "grant", "links"]


async def test_unexpected_failure_is_reported_as_server_error(relay) -> None:
    relay.drive.create_error = ConnectionResetError("connection reset by peer")

    async with _client(raise_app_exceptions=False) as client:
        await _authorize(client)
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "connection reset by peer"}


async def test_inline_token_upload_when_enabled(relay) -> None:
    relay.upload_settings = UploadSettings(allow_inline_token=True)

    async with _client() as client:
        response = await client.post(
            "/upload",
            data={"accessToken": "inline-tok"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 200
    assert relay.drive.calls[0][1] == "inline-tok"
    assert len(relay.store) == 0


async def test_inline_token_ignored_when_disabled(relay) -> None:
    async with _client() as client:
        response = await client.post(
            "/upload",
            data={"identity": "a@x.com", "accessToken": "inline-tok"},
            files={"file": ("a.txt", b"data", "text/plain")},
        )

    assert response.status_code == 401
    assert relay.drive.calls == []


async def test_malformed_json_body_is_bad_request(relay) -> None:
    async with _client() as client:
        response = await client.post(
            "/logout",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json()["success"] is False
