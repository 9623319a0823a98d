"""
Admin-side QR code manager: holds the panel state (list, busy flags, selection, banners)
and drives the /api/qr-codes endpoints over HTTP.
"""
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import httpx

from app.services.result import Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
CONFIRM_DELETE_PROMPT = "Are you sure you want to delete this QR code?"


@dataclass
class SelectedFile:
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> "SelectedFile":
        """Read a file from disk; the type is declared from the extension unless given."""
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content_type=content_type or guessed or "application/octet-stream", data=path.read_bytes())


@dataclass
class QRCodeItem:
    id: str
    name: str
    image_url: str
    is_active: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_json(cls, data: dict) -> "QRCodeItem":
        return cls(
            id=data["id"],
            name=data["name"],
            image_url=data["image_url"],
            is_active=bool(data["is_active"]),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )


@dataclass
class DownloadLink:
    href: str
    filename: str


@dataclass
class QRCodeManagerState:
    qr_codes: list[QRCodeItem] = field(default_factory=list)
    loading: bool = False
    uploading: bool = False
    selected_file: SelectedFile | None = None
    name: str = ""
    error: str = ""
    error_kind: ErrorKind | None = None
    success: str = ""


def _error_from_response(resp: httpx.Response, fallback: str) -> Err:
    """Err from an API error body {"error", "kind"}; falls back when the body is not ours."""
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    try:
        kind = ErrorKind(body.get("kind"))
    except ValueError:
        kind = ErrorKind.NOT_FOUND if resp.status_code == 404 else ErrorKind.UNEXPECTED
    return Err(kind, body.get("error") or fallback)


class QRCodeManager:
    """One instance per admin panel. Every action updates `state` and returns a Result."""

    def __init__(self, client: httpx.Client, base_path: str = "/api/qr-codes", max_upload_bytes: int = MAX_UPLOAD_BYTES):
        self.client = client
        self.base_path = base_path.rstrip("/")
        self.max_upload_bytes = max_upload_bytes
        self.state = QRCodeManagerState()

    # ---------- banners ----------

    def _fail(self, err: Err) -> Err:
        self.state.error = err.message
        self.state.error_kind = err.kind
        return err

    def _succeed(self, message: str) -> None:
        self.state.success = message

    def dismiss_error(self) -> None:
        self.state.error = ""
        self.state.error_kind = None

    def dismiss_success(self) -> None:
        self.state.success = ""

    # ---------- actions ----------

    def load(self) -> Result:
        """Fetch all QR codes (newest first). On failure the previous list is kept."""
        self.state.loading = True
        try:
            resp = self.client.get(self.base_path)
            if resp.is_error:
                err = _error_from_response(resp, "Failed to load QR codes")
                logger.error("Error loading QR codes: %s", err.message)
                return self._fail(Err(err.kind, "Failed to load QR codes"))
            self.state.qr_codes = [QRCodeItem.from_json(x) for x in resp.json()]
            return Ok(self.state.qr_codes)
        except httpx.HTTPError as e:
            logger.error("Error loading QR codes: %s", e)
            return self._fail(Err(ErrorKind.UNEXPECTED, "Failed to load QR codes"))
        finally:
            self.state.loading = False

    def select_file(self, file: SelectedFile) -> Result:
        """Keep the file only if it is an image of at most 5 MB. No network call."""
        if file.size > self.max_upload_bytes:
            return self._fail(Err(ErrorKind.INVALID_INPUT, "File size must be less than 5MB"))
        if not file.content_type.startswith("image/"):
            return self._fail(Err(ErrorKind.INVALID_INPUT, "Please select an image file"))
        self.state.selected_file = file
        self.dismiss_error()
        return Ok(file)

    def set_name(self, name: str) -> None:
        self.state.name = name

    def upload(self) -> Result:
        """Upload the selected file under the entered name, then reload the list."""
        file, name = self.state.selected_file, self.state.name.strip()
        if file is None or not name:
            return self._fail(Err(ErrorKind.MISSING_INPUT, "Please select a file and enter a name"))
        if self.state.uploading:
            return Err(ErrorKind.INVALID_INPUT, "Upload already in progress")

        self.state.uploading = True
        self.dismiss_error()
        try:
            resp = self.client.post(
                self.base_path,
                data={"name": name},
                files={"file": (file.name, file.data, file.content_type)},
            )
            if resp.is_error:
                err = _error_from_response(resp, "Failed to upload QR code")
                logger.error("Upload error: %s", err.message)
                return self._fail(err)
            created = QRCodeItem.from_json(resp.json())
        except httpx.HTTPError as e:
            logger.error("Upload error: %s", e)
            return self._fail(Err(ErrorKind.UNEXPECTED, "Failed to upload QR code"))
        finally:
            self.state.uploading = False

        self._succeed("QR code uploaded successfully!")
        self.state.selected_file = None
        self.state.name = ""
        self.load()
        return Ok(created)

    def delete(self, qr_id: str, confirm: Callable[[str], bool]) -> Result | None:
        """Delete after confirm(prompt) returns True. Returns None when the user cancels."""
        if not confirm(CONFIRM_DELETE_PROMPT):
            return None
        try:
            resp = self.client.delete(f"{self.base_path}/{qr_id}")
            if resp.is_error:
                err = _error_from_response(resp, "Failed to delete QR code")
                logger.error("Delete error: %s", err.message)
                return self._fail(Err(err.kind, "Failed to delete QR code"))
        except httpx.HTTPError as e:
            logger.error("Delete error: %s", e)
            return self._fail(Err(ErrorKind.UNEXPECTED, "Failed to delete QR code"))
        self._succeed("QR code deleted successfully!")
        self.load()
        return Ok(qr_id)

    def toggle_active(self, qr_id: str) -> Result:
        """Make qr_id the active QR code (one server-side transaction), then reload."""
        try:
            resp = self.client.post(f"{self.base_path}/{qr_id}/activate")
            if resp.is_error:
                err = _error_from_response(resp, "Failed to update QR code status")
                logger.error("Toggle error: %s", err.message)
                return self._fail(Err(err.kind, "Failed to update QR code status"))
        except httpx.HTTPError as e:
            logger.error("Toggle error: %s", e)
            return self._fail(Err(ErrorKind.UNEXPECTED, "Failed to update QR code status"))
        self._succeed("QR code status updated!")
        self.load()
        return Ok(qr_id)

    # ---------- download ----------

    @staticmethod
    def download_link(qr: QRCodeItem) -> DownloadLink:
        """Link to the stored image with a suggested filename. No request is made."""
        return DownloadLink(href=qr.image_url, filename=f"{qr.name}.png")

    def download(self, qr: QRCodeItem, directory: str | Path) -> Result:
        """Fetch the public image and save it as <directory>/<name>.png (path parts of the name are dropped)."""
        link = self.download_link(qr)
        base = Path(directory).resolve()
        path = (base / Path(link.filename).name).resolve()
        try:
            path.relative_to(base)
        except ValueError:
            return self._fail(Err(ErrorKind.INVALID_INPUT, "Invalid download filename"))
        try:
            resp = self.client.get(link.href)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Download error for %s: %s", link.href, e)
            return self._fail(Err(ErrorKind.STORAGE, "Failed to download QR code"))
        try:
            path.write_bytes(resp.content)
        except OSError as e:
            logger.error("Download error writing %s: %s", path, e)
            return self._fail(Err(ErrorKind.UNEXPECTED, "Failed to download QR code"))
        return Ok(path)
