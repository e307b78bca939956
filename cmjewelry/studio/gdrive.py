"""Google Drive image upload."""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import RemoteCallError, StoragePermissionError
from .media import ImageAsset

logger = logging.getLogger(__name__)


@dataclass
class DriveFile:
    id: str
    web_view_link: str
    name: str


class GoogleDriveUploader:
    """Upload processed images to Google Drive.

    Uses a bearer access token when one is given. Otherwise falls back to
    OAuth 2.0: on first use a browser is opened for Google account
    authorization and the token is saved for subsequent use.
    """

    SCOPES = ["https://www.googleapis.com/auth/drive.file"]

    def __init__(
        self,
        access_token: str = "",
        credentials_path: str | Path = "~/.config/cmjewelry/gdrive_credentials.json",
        token_path: str | Path = "~/.config/cmjewelry/gdrive_token.json",
        folder_id: str = "",
    ) -> None:
        self._access_token = access_token
        self._credentials_path = Path(credentials_path).expanduser()
        self._token_path = Path(token_path).expanduser()
        self._folder_id = folder_id
        self._service = None

    def _get_service(self):
        """Build and return the Drive API service, authenticating if needed."""
        if self._service is not None:
            return self._service

        try:
            from google.oauth2.credentials import Credentials
            from googleapiclient.discovery import build
        except ImportError:
            raise ImportError(
                "Google Drive upload needs extra packages:\n"
                "  pip install 'cmjewelry[gdrive]'"
            )

        if self._access_token:
            creds = Credentials(token=self._access_token)
        else:
            creds = self._oauth_credentials(Credentials)

        self._service = build("drive", "v3", credentials=creds)
        return self._service

    def _oauth_credentials(self, credentials_cls):
        """Cached installed-app credentials, refreshed or re-authorized as needed."""
        from google.auth.transport.requests import Request
        from google_auth_oauthlib.flow import InstalledAppFlow

        creds = None
        if self._token_path.exists():
            creds = credentials_cls.from_authorized_user_file(
                str(self._token_path), self.SCOPES
            )
        if creds is not None and creds.valid:
            return creds

        if creds is not None and creds.expired and creds.refresh_token:
            logger.info("Refreshing Google Drive token")
            creds.refresh(Request())
        elif self._credentials_path.exists():
            logger.info("Authorizing Google Drive access in the browser")
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self._credentials_path), self.SCOPES
            )
            creds = flow.run_local_server(port=0)
        else:
            raise FileNotFoundError(
                f"OAuth credentials file not found: {self._credentials_path}\n"
                "Create an OAuth client in the Google Cloud Console, "
                "or set GOOGLE_DRIVE_ACCESS_TOKEN."
            )

        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        return creds

    def upload_image(
        self,
        image: ImageAsset,
        filename: str,
        folder_id: str | None = None,
    ) -> DriveFile:
        """Upload an image to Google Drive.

        Args:
            image: The image payload.
            filename: Name for the file in Drive.
            folder_id: Drive folder ID. Uses configured default if None.

        Returns:
            The created file's ID, shareable link and name.

        Raises:
            StoragePermissionError: If the token is missing or rejected.
            RemoteCallError: If Drive fails for any other reason.
        """
        from googleapiclient.errors import HttpError
        from googleapiclient.http import MediaIoBaseUpload

        service = self._get_service()
        target_folder = folder_id or self._folder_id

        file_metadata: dict = {
            "name": filename,
            "mimeType": image.mime_type,
        }
        if target_folder:
            file_metadata["parents"] = [target_folder]

        media = MediaIoBaseUpload(
            io.BytesIO(image.data),
            mimetype=image.mime_type,
            resumable=False,
        )

        try:
            result = (
                service.files()
                .create(
                    body=file_metadata,
                    media_body=media,
                    fields="id,webViewLink,name",
                )
                .execute()
            )
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            logger.warning("Google Drive API error (status %s)", status)
            if status in (401, 403):
                raise StoragePermissionError(
                    "Could not upload to Google Drive. Check permissions."
                ) from e
            raise RemoteCallError(f"Google Drive upload failed: {e}") from e

        return DriveFile(
            id=result["id"],
            web_view_link=result.get("webViewLink", ""),
            name=result.get("name", filename),
        )

    async def upload_image_async(
        self,
        image: ImageAsset,
        filename: str,
        folder_id: str | None = None,
    ) -> DriveFile:
        return await asyncio.to_thread(self.upload_image, image, filename, folder_id)
