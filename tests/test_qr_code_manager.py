import httpx
import pytest
from app.clients.qr_code_manager import (
    CONFIRM_DELETE_PROMPT,
    DownloadLink,
    QRCodeItem,
    QRCodeManager,
    SelectedFile,
)
from app.services.result import ErrorKind
from tests.conftest import png_bytes

MiB = 1024 * 1024


def _png(name="qr.png", size=1024) -> SelectedFile:
    return SelectedFile(name=name, content_type="image/png", data=png_bytes(size))


@pytest.fixture
def offline():
    """Manager whose transport records requests and answers 500."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(500, json={"error": "boom", "kind": "database"})

    manager = QRCodeManager(httpx.Client(transport=httpx.MockTransport(handler), base_url="http://admin.test"))
    return manager, requests


@pytest.fixture
def manager(client):
    return QRCodeManager(client)


def _by_name(manager, name) -> QRCodeItem:
    return next(x for x in manager.state.qr_codes if x.name == name)


class TestSelectFile:
    def test_accepts_image(self, offline):
        m, requests = offline
        m.state.error = "old"
        result = m.select_file(_png())
        assert result.ok
        assert m.state.selected_file.name == "qr.png"
        assert m.state.error == ""
        assert requests == []

    def test_rejects_over_5mb(self, offline):
        m, requests = offline
        result = m.select_file(_png(size=5 * MiB + 1))
        assert not result.ok
        assert m.state.selected_file is None
        assert m.state.error == "File size must be less than 5MB"
        assert m.state.error_kind is ErrorKind.INVALID_INPUT
        assert requests == []

    def test_rejects_non_image_type(self, offline):
        m, requests = offline
        m.select_file(SelectedFile(name="qr.png", content_type="application/pdf", data=b"%PDF"))
        assert m.state.selected_file is None
        assert m.state.error == "Please select an image file"
        assert requests == []

    def test_from_path_declares_type_from_extension(self, tmp_path):
        path = tmp_path / "code.png"
        path.write_bytes(png_bytes())
        file = SelectedFile.from_path(path)
        assert file.content_type == "image/png"
        assert file.size == 1024


class TestUploadPrecondition:
    def test_requires_file_and_name(self, offline):
        m, requests = offline
        m.set_name("Payment QR")
        assert m.upload().kind is ErrorKind.MISSING_INPUT

        m.set_name("   ")
        m.select_file(_png())
        assert m.upload().kind is ErrorKind.MISSING_INPUT
        assert m.state.error == "Please select a file and enter a name"
        assert requests == []

    def test_ignored_while_uploading(self, offline):
        m, requests = offline
        m.set_name("Payment QR")
        m.select_file(_png())
        m.state.uploading = True
        assert not m.upload().ok
        assert requests == []


class TestLoad:
    def test_failure_keeps_previous_list(self, offline):
        m, _ = offline
        previous = [QRCodeItem("1", "A", "http://x/a.png", True, "t", "t")]
        m.state.qr_codes = list(previous)
        result = m.load()
        assert not result.ok
        assert m.state.qr_codes == previous
        assert m.state.error == "Failed to load QR codes"
        assert m.state.loading is False

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        m = QRCodeManager(httpx.Client(transport=httpx.MockTransport(handler), base_url="http://admin.test"))
        assert m.load().kind is ErrorKind.UNEXPECTED
        assert m.state.loading is False


class TestManagerScenario:
    """Manager against the real API"""

    def test_upload_toggle_delete(self, manager):
        manager.set_name("Payment QR")
        manager.select_file(_png("payment.png", size=2 * MiB))
        assert manager.upload().ok
        assert manager.state.success == "QR code uploaded successfully!"
        assert manager.state.selected_file is None
        assert manager.state.name == ""
        assert _by_name(manager, "Payment QR").is_active is True

        manager.set_name("Backup QR")
        manager.select_file(_png("backup.png"))
        assert manager.upload().ok
        assert _by_name(manager, "Backup QR").is_active is False
        assert _by_name(manager, "Payment QR").is_active is True

        backup = _by_name(manager, "Backup QR")
        assert manager.toggle_active(backup.id).ok
        assert manager.state.success == "QR code status updated!"
        assert [x.name for x in manager.state.qr_codes if x.is_active] == ["Backup QR"]

        prompts = []
        assert manager.delete(backup.id, confirm=lambda p: prompts.append(p) or False) is None
        assert prompts == [CONFIRM_DELETE_PROMPT]
        assert len(manager.state.qr_codes) == 2

        assert manager.delete(backup.id, confirm=lambda p: True).ok
        assert manager.state.success == "QR code deleted successfully!"
        assert [x.name for x in manager.state.qr_codes] == ["Payment QR"]

    def test_upload_storage_error_is_reported(self, failing_storage_client):
        m = QRCodeManager(failing_storage_client)
        m.set_name("Payment QR")
        m.select_file(_png())
        result = m.upload()
        assert result.kind is ErrorKind.STORAGE
        assert m.state.error == "Failed to upload image"
        assert m.state.uploading is False
        # selection is kept so the user can retry
        assert m.state.selected_file is not None

    def test_toggle_unknown_id(self, manager):
        result = manager.toggle_active("missing")
        assert result.kind is ErrorKind.NOT_FOUND
        assert manager.state.error == "Failed to update QR code status"

    def test_dismiss_banners(self, manager):
        manager.toggle_active("missing")
        manager.dismiss_error()
        assert manager.state.error == ""
        assert manager.state.error_kind is None


class TestDownload:
    def test_download_link_is_local(self, offline):
        m, requests = offline
        qr = QRCodeItem("1", "Payment QR", "http://cdn.test/qr-codes/1.png", True, "t", "t")
        assert m.download_link(qr) == DownloadLink(href="http://cdn.test/qr-codes/1.png", filename="Payment QR.png")
        assert requests == []

    def test_download_saves_file(self, manager, tmp_path):
        manager.set_name("Payment QR")
        manager.select_file(_png())
        manager.upload()
        qr = manager.state.qr_codes[0]

        result = manager.download(qr, tmp_path)
        assert result.ok
        assert result.value == (tmp_path / "Payment QR.png").resolve()
        assert result.value.read_bytes() == png_bytes()

    @pytest.mark.parametrize("name, saved_as", [("../escaped", "escaped.png"), ("shop/front", "front.png")])
    def test_download_keeps_file_inside_directory(self, manager, tmp_path, name, saved_as):
        manager.set_name(name)
        manager.select_file(_png())
        assert manager.upload().ok
        qr = _by_name(manager, name)
        downloads = tmp_path / "downloads"
        downloads.mkdir()

        result = manager.download(qr, downloads)
        assert result.ok
        assert result.value == (downloads / saved_as).resolve()
        assert result.value.read_bytes() == png_bytes()
        assert not (tmp_path / "escaped.png").exists()

    def test_download_write_failure_is_reported(self, manager, tmp_path):
        manager.set_name("Payment QR")
        manager.select_file(_png())
        manager.upload()
        qr = manager.state.qr_codes[0]

        result = manager.download(qr, tmp_path / "missing-dir")
        assert result.kind is ErrorKind.UNEXPECTED
        assert manager.state.error == "Failed to download QR code"
