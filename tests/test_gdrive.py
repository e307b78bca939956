"""Tests for Google Drive uploader."""

from unittest.mock import MagicMock, patch

import pytest

from cmjewelry.studio.errors import RemoteCallError, StoragePermissionError
from cmjewelry.studio.gdrive import DriveFile, GoogleDriveUploader
from cmjewelry.studio.media import ImageAsset

IMAGE = ImageAsset(data=b"\xff\xd8jpeg", mime_type="image/jpeg")


class FakeHttpError(Exception):
    def __init__(self, status):
        super().__init__(f"HTTP {status}")
        self.resp = MagicMock(status=status)


def _mock_googleapiclient():
    """Context manager that mocks googleapiclient.http and googleapiclient.errors."""
    mock_http = MagicMock()
    mock_errors = MagicMock()
    mock_errors.HttpError = FakeHttpError
    mock_api = MagicMock()
    mock_api.http = mock_http
    mock_api.errors = mock_errors
    return patch.dict("sys.modules", {
        "googleapiclient": mock_api,
        "googleapiclient.http": mock_http,
        "googleapiclient.errors": mock_errors,
    })


def _service_returning(result=None, error=None):
    mock_service = MagicMock()
    mock_files = MagicMock()
    mock_create = MagicMock()
    if error is not None:
        mock_create.execute.side_effect = error
    else:
        mock_create.execute.return_value = result
    mock_files.create.return_value = mock_create
    mock_service.files.return_value = mock_files
    return mock_service, mock_files


def _body(mock_files):
    call_kwargs = mock_files.create.call_args
    return call_kwargs.kwargs.get("body") or call_kwargs[1].get("body")


class TestGoogleDriveUploader:
    def test_init_defaults(self):
        """Initializes with default paths."""
        uploader = GoogleDriveUploader()
        assert "gdrive_credentials.json" in str(uploader._credentials_path)
        assert "gdrive_token.json" in str(uploader._token_path)
        assert uploader._folder_id == ""
        assert uploader._access_token == ""

    def test_init_custom_paths(self, tmp_path):
        """Initializes with custom paths."""
        creds = tmp_path / "creds.json"
        token = tmp_path / "token.json"
        uploader = GoogleDriveUploader(
            credentials_path=str(creds),
            token_path=str(token),
            folder_id="folder123",
        )
        assert uploader._credentials_path == creds
        assert uploader._token_path == token
        assert uploader._folder_id == "folder123"

    def test_upload_success(self):
        """Uploads the image and returns id, link and name."""
        uploader = GoogleDriveUploader(folder_id="folder123")
        uploader._service, mock_files = _service_returning({
            "id": "file_abc123",
            "webViewLink": "https://drive.google.com/file/d/file_abc123/view",
            "name": "CM_Studio_20240307.jpg",
        })

        with _mock_googleapiclient():
            result = uploader.upload_image(IMAGE, "CM_Studio_20240307.jpg")

        assert result == DriveFile(
            id="file_abc123",
            web_view_link="https://drive.google.com/file/d/file_abc123/view",
            name="CM_Studio_20240307.jpg",
        )
        body = _body(mock_files)
        assert body["name"] == "CM_Studio_20240307.jpg"
        assert body["mimeType"] == "image/jpeg"
        assert body["parents"] == ["folder123"]
        assert mock_files.create.call_args.kwargs["fields"] == "id,webViewLink,name"

    def test_upload_no_folder(self):
        """No parents key when folder_id is empty."""
        uploader = GoogleDriveUploader()
        uploader._service, mock_files = _service_returning({"id": "file_123"})

        with _mock_googleapiclient():
            result = uploader.upload_image(IMAGE, "a.jpg")

        assert "parents" not in _body(mock_files)
        assert result.web_view_link == ""
        assert result.name == "a.jpg"

    def test_upload_override_folder(self):
        """folder_id parameter overrides configured default."""
        uploader = GoogleDriveUploader(folder_id="default_folder")
        uploader._service, mock_files = _service_returning({"id": "file_456"})

        with _mock_googleapiclient():
            uploader.upload_image(IMAGE, "a.jpg", folder_id="override_folder")

        assert _body(mock_files)["parents"] == ["override_folder"]

    @pytest.mark.parametrize("status", [401, 403])
    def test_upload_permission_denied(self, status):
        uploader = GoogleDriveUploader(access_token="expired")
        uploader._service, _ = _service_returning(error=FakeHttpError(status))

        with _mock_googleapiclient():
            with pytest.raises(StoragePermissionError, match="Check permissions"):
                uploader.upload_image(IMAGE, "a.jpg")

    def test_upload_server_error(self):
        uploader = GoogleDriveUploader(access_token="token")
        uploader._service, _ = _service_returning(error=FakeHttpError(500))

        with _mock_googleapiclient():
            with pytest.raises(RemoteCallError, match="upload failed"):
                uploader.upload_image(IMAGE, "a.jpg")

    @pytest.mark.asyncio
    async def test_upload_image_async(self):
        uploader = GoogleDriveUploader()
        uploader._service, _ = _service_returning({"id": "file_789"})

        with _mock_googleapiclient():
            result = await uploader.upload_image_async(IMAGE, "a.jpg")

        assert result.id == "file_789"

    def test_get_service_with_access_token(self):
        """A bearer token skips the OAuth flow entirely."""
        uploader = GoogleDriveUploader(access_token="ya29.token")

        mock_creds_module = MagicMock()
        mock_discovery = MagicMock()
        mock_flow = MagicMock()

        with patch.dict("sys.modules", {
            "google": MagicMock(),
            "google.auth": MagicMock(),
            "google.auth.transport": MagicMock(),
            "google.auth.transport.requests": MagicMock(),
            "google.oauth2": MagicMock(),
            "google.oauth2.credentials": mock_creds_module,
            "google_auth_oauthlib": MagicMock(),
            "google_auth_oauthlib.flow": mock_flow,
            "googleapiclient": MagicMock(),
            "googleapiclient.discovery": mock_discovery,
        }):
            service = uploader._get_service()

        mock_creds_module.Credentials.assert_called_once_with(token="ya29.token")
        mock_flow.InstalledAppFlow.from_client_secrets_file.assert_not_called()
        assert service is mock_discovery.build.return_value

    def test_get_service_no_credentials_file(self, tmp_path):
        """Raises FileNotFoundError when credentials file missing."""
        uploader = GoogleDriveUploader(
            credentials_path=str(tmp_path / "nonexistent.json"),
            token_path=str(tmp_path / "token.json"),
        )

        mock_creds_module = MagicMock()

        with patch.dict("sys.modules", {
            "google": MagicMock(),
            "google.auth": MagicMock(),
            "google.auth.transport": MagicMock(),
            "google.auth.transport.requests": MagicMock(),
            "google.oauth2": MagicMock(),
            "google.oauth2.credentials": mock_creds_module,
            "google_auth_oauthlib": MagicMock(),
            "google_auth_oauthlib.flow": MagicMock(),
            "googleapiclient": MagicMock(),
            "googleapiclient.discovery": MagicMock(),
        }):
            with pytest.raises(FileNotFoundError, match="credentials file not found"):
                uploader._get_service()

    def _google_modules(self, creds_module, flow_module=None):
        return patch.dict("sys.modules", {
            "google": MagicMock(),
            "google.auth": MagicMock(),
            "google.auth.transport": MagicMock(),
            "google.auth.transport.requests": MagicMock(),
            "google.oauth2": MagicMock(),
            "google.oauth2.credentials": creds_module,
            "google_auth_oauthlib": MagicMock(),
            "google_auth_oauthlib.flow": flow_module or MagicMock(),
            "googleapiclient": MagicMock(),
            "googleapiclient.discovery": MagicMock(),
        })

    def test_get_service_uses_cached_token(self, tmp_path):
        token = tmp_path / "token.json"
        token.write_text("{}")
        uploader = GoogleDriveUploader(token_path=str(token))

        mock_creds_module = MagicMock()
        cached = mock_creds_module.Credentials.from_authorized_user_file.return_value
        cached.valid = True
        mock_flow = MagicMock()

        with self._google_modules(mock_creds_module, mock_flow):
            uploader._get_service()

        cached.refresh.assert_not_called()
        mock_flow.InstalledAppFlow.from_client_secrets_file.assert_not_called()
        assert token.read_text() == "{}"

    def test_get_service_refreshes_expired_token(self, tmp_path):
        token = tmp_path / "token.json"
        token.write_text("{}")
        uploader = GoogleDriveUploader(token_path=str(token))

        mock_creds_module = MagicMock()
        cached = mock_creds_module.Credentials.from_authorized_user_file.return_value
        cached.valid = False
        cached.expired = True
        cached.refresh_token = "refresh"
        cached.to_json.return_value = '{"token": "new"}'

        with self._google_modules(mock_creds_module):
            uploader._get_service()

        cached.refresh.assert_called_once()
        assert token.read_text() == '{"token": "new"}'
