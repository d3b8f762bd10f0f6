'''
Tests for StorageService with httpx.AsyncClient patched out.
'''
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.tutor_desk_backend.services.storage_service import StorageService, build_object_path, download_name
from src.tutor_desk_backend.common.exceptions import StorageError


def make_response(method: str, status_code: int, content: bytes = b"") -> httpx.Response:
    request = httpx.Request(method, "https://storage.test/storage/v1/object/resources/x")
    return httpx.Response(status_code, content=content, request=request)


@pytest.fixture
def mock_http_client(mocker):
    """Patches httpx.AsyncClient in the storage module and returns the client instance."""
    client = MagicMock()
    client.post = AsyncMock()
    client.get = AsyncMock()
    client.delete = AsyncMock()
    client_cls = mocker.patch("src.tutor_desk_backend.services.storage_service.httpx.AsyncClient")
    client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.mark.anyio
class TestStorageService:

    async def test_upload_returns_path(self, mock_http_client):
        print("\n--- Testing StorageService.upload ---")
        mock_http_client.post.return_value = make_response("POST", 200)

        path = await StorageService().upload("resources", "t/a b.pdf", b"%PDF", "application/pdf")

        assert path == "t/a b.pdf"
        url = mock_http_client.post.await_args.args[0]
        assert url == "https://storage.test/storage/v1/object/resources/t/a%20b.pdf"
        headers = mock_http_client.post.await_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer test-service-key"
        assert headers["Content-Type"] == "application/pdf"

    async def test_upload_failure_raises_storage_error(self, mock_http_client):
        mock_http_client.post.return_value = make_response("POST", 413)
        with pytest.raises(StorageError) as e:
            await StorageService().upload("resources", "t/a.pdf", b"x")
        assert e.value.status_code == 413

    async def test_download(self, mock_http_client):
        mock_http_client.get.return_value = make_response("GET", 200, b"hello")
        assert await StorageService().download("resources", "t/a.pdf") == b"hello"

    async def test_unreachable_service(self, mock_http_client):
        mock_http_client.get.side_effect = httpx.ConnectError("refused")
        with pytest.raises(StorageError) as e:
            await StorageService().download("resources", "t/a.pdf")
        assert e.value.status_code is None

    async def test_remove_missing_object_is_not_an_error(self, mock_http_client):
        mock_http_client.delete.return_value = make_response("DELETE", 404)
        assert await StorageService().remove("resources", "t/gone.pdf") is False

        mock_http_client.delete.return_value = make_response("DELETE", 200)
        assert await StorageService().remove("resources", "t/a.pdf") is True

    async def test_remove_server_error_raises(self, mock_http_client):
        mock_http_client.delete.return_value = make_response("DELETE", 500)
        with pytest.raises(StorageError):
            await StorageService().remove("resources", "t/a.pdf")


class TestPathHelpers:

    def test_build_object_path_is_unique_and_safe(self):
        first = build_object_path("owner", "ödev 1.pdf")
        second = build_object_path("owner", "ödev 1.pdf")
        assert first != second
        assert first.startswith("owner/")
        assert first.endswith("_dev_1.pdf")

    def test_empty_filename(self):
        assert build_object_path("o", "").endswith("_file")

    def test_download_name(self):
        assert download_name("Notlar", "o/abc_notes.pdf") == "Notlar_abc_notes.pdf"
