"""Tests for SnapAsClient with a mocked requests session."""

from unittest.mock import Mock, patch

import pytest

from blog_sync.core.snapas import SnapAsClient, parse_photo
from blog_sync.errors import DecodeError, TransportError


def _response(status: int, body=None) -> Mock:
    response = Mock()
    response.status_code = status
    response.url = "https://snap.as/api/x"
    response.reason = "Reason"
    response.json.return_value = body
    return response


class TestParsePhoto:
    def test_photo(self):
        photo = parse_photo(
            {"url": "https://i.snap.as/a.png", "filename": "¬x.png", "size": "12"}
        )
        assert photo.url == "https://i.snap.as/a.png"
        assert photo.filename == "¬x.png"
        assert photo.size == 12

    def test_missing_url(self):
        with pytest.raises(DecodeError):
            parse_photo({"filename": "x"})


@patch("requests.Session.request")
class TestSnapAsClient:
    def test_bare_token_header(self, mock_request):
        client = SnapAsClient("tok")
        assert client.session.headers["Authorization"] == "tok"
        assert "Authorization" not in client.public_session.headers

    def test_list_photos(self, mock_request):
        mock_request.return_value = _response(
            200,
            {
                "code": 200,
                "data": [
                    {"url": "https://i.snap.as/a.png", "filename": "¬img¦a.png"},
                    {"url": "https://i.snap.as/b.png"},
                ],
            },
        )
        photos = SnapAsClient("tok").list_photos()

        assert [p.url for p in photos] == [
            "https://i.snap.as/a.png",
            "https://i.snap.as/b.png",
        ]
        assert mock_request.call_args[0] == ("GET", "https://snap.as/api/me/photos")

    def test_list_photos_null_data(self, mock_request):
        mock_request.return_value = _response(200, {"code": 200, "data": None})
        assert SnapAsClient("tok").list_photos() == []

    def test_upload_photo(self, mock_request, tmp_path):
        image = tmp_path / "cat.png"
        image.write_bytes(b"png")
        mock_request.return_value = _response(
            201,
            {"code": 201, "data": {"url": "https://i.snap.as/new.png", "filename": "¬cat.png"}},
        )

        photo = SnapAsClient("tok").upload_photo(image, "¬cat.png")

        assert photo.url == "https://i.snap.as/new.png"
        method, url = mock_request.call_args[0]
        assert (method, url) == ("POST", "https://snap.as/api/photos/upload")
        name, _ = mock_request.call_args[1]["files"]["file"]
        assert name == "¬cat.png"

    def test_upload_requires_created(self, mock_request, tmp_path):
        image = tmp_path / "cat.png"
        image.write_bytes(b"png")
        mock_request.return_value = _response(200, {"code": 200, "data": {}})
        with pytest.raises(TransportError):
            SnapAsClient("tok").upload_photo(image, "¬cat.png")

    def test_download(self, mock_request, tmp_path):
        response = _response(200)
        response.iter_content.return_value = [b"ab", b"", b"cd"]
        response.__enter__ = Mock(return_value=response)
        response.__exit__ = Mock(return_value=False)
        mock_request.return_value = response
        dest = tmp_path / "sub" / "a.png"

        written = SnapAsClient("tok").download("https://i.snap.as/a.png", dest)

        assert written == 4
        assert dest.read_bytes() == b"abcd"
        assert mock_request.call_args[1]["stream"] is True
