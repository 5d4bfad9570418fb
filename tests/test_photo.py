"""
Unit tests for the photo module.

Tests loading from URLs, files and data URIs, image type detection and
size reduction with mocked HTTP.
"""

import base64
import io
import os
from unittest.mock import Mock, patch

import pytest
import requests
from PIL import Image
from requests.exceptions import ConnectionError as RequestsConnectionError

from conftest import make_image_bytes
from gcontact_vcard.contacts.photo import (
    DOWNLOAD_TIMEOUT,
    MAX_PHOTO_SIZE,
    decode_data_uri,
    detect_image_type,
    download_photo,
    load_photo,
    shrink_photo,
)
from gcontact_vcard.errors import (
    NotFoundError,
    RemoteApiError,
    TransportError,
    UnsupportedMediaTypeError,
)


def _response(content=b"data", content_type="image/jpeg", status_code=200):
    response = Mock()
    response.content = content
    response.headers = {"content-type": content_type}
    if status_code >= 400:
        response.status_code = status_code
        response.raise_for_status = Mock(
            side_effect=requests.HTTPError(response=response)
        )
    else:
        response.raise_for_status = Mock()
    return response


class TestDownloadPhoto:
    """Tests for download_photo."""

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_success(self, mock_get):
        """Test a successful download."""
        mock_get.return_value = _response(b"fake image data")

        result = download_photo("https://example.com/photo.jpg")

        assert result == b"fake image data"
        mock_get.assert_called_once_with(
            "https://example.com/photo.jpg",
            timeout=DOWNLOAD_TIMEOUT,
            headers={"User-Agent": "gcontact-vcard/0.1.0"},
        )

    def test_invalid_scheme(self):
        """Test that non-http URLs are rejected without a request."""
        with pytest.raises(NotFoundError, match="Invalid photo URL"):
            download_photo("ftp://example.com/photo.jpg")

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_404(self, mock_get):
        """Test that a 404 becomes NotFoundError."""
        mock_get.return_value = _response(status_code=404)

        with pytest.raises(NotFoundError) as exc_info:
            download_photo("https://example.com/missing.jpg")
        assert exc_info.value.status_code == 404

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_server_error(self, mock_get):
        """Test that other error statuses become RemoteApiError."""
        mock_get.return_value = _response(status_code=503)

        with pytest.raises(RemoteApiError):
            download_photo("https://example.com/photo.jpg")
        mock_get.assert_called_once()

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_network_error(self, mock_get):
        """Test that connection failures become TransportError."""
        mock_get.side_effect = RequestsConnectionError("refused")

        with pytest.raises(TransportError):
            download_photo("https://example.com/photo.jpg")

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_empty_body(self, mock_get):
        """Test that an empty body is treated as missing."""
        mock_get.return_value = _response(b"")

        with pytest.raises(NotFoundError, match="Empty response"):
            download_photo("https://example.com/photo.jpg")

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_non_image_content_type(self, mock_get, caplog):
        """Test that a non-image content type only logs a warning."""
        mock_get.return_value = _response(b"<html>", content_type="text/html")

        assert download_photo("https://example.com/photo") == b"<html>"
        assert "Unexpected content type" in caplog.text


class TestLoadPhoto:
    """Tests for load_photo and data URIs."""

    def test_local_file(self, tmp_path, png_bytes):
        """Test reading a local file."""
        path = tmp_path / "me.png"
        path.write_bytes(png_bytes)

        assert load_photo(path) == png_bytes
        assert load_photo(str(path)) == png_bytes

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            load_photo(tmp_path / "missing.png")

    def test_data_uri(self, png_bytes):
        """Test decoding a base64 data URI."""
        uri = "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
        assert load_photo(uri) == png_bytes

    def test_data_uri_without_base64(self):
        """Test that non-base64 data URIs are rejected."""
        with pytest.raises(UnsupportedMediaTypeError):
            decode_data_uri("data:image/png,rawbytes")

    @patch("gcontact_vcard.contacts.photo.requests.get")
    def test_url_delegates_to_download(self, mock_get):
        """Test that URLs are downloaded."""
        mock_get.return_value = _response(b"img")
        assert load_photo("https://example.com/a.jpg") == b"img"


class TestDetectImageType:
    """Tests for detect_image_type."""

    @pytest.mark.parametrize(
        "image_format,expected",
        [("PNG", "png"), ("JPEG", "jpeg"), ("GIF", "gif"), ("BMP", "bmp")],
    )
    def test_supported(self, image_format, expected):
        """Test the accepted image types."""
        assert detect_image_type(make_image_bytes(image_format)) == expected

    def test_unsupported_image(self):
        """Test that valid but unsupported images are rejected."""
        with pytest.raises(UnsupportedMediaTypeError, match="Unsupported image"):
            detect_image_type(make_image_bytes("TIFF"))

    @pytest.mark.parametrize("data", [b"", b"not an image at all"])
    def test_not_an_image(self, data):
        """Test empty and garbage data."""
        with pytest.raises(UnsupportedMediaTypeError):
            detect_image_type(data)


class TestShrinkPhoto:
    """Tests for shrink_photo."""

    @staticmethod
    def _noise_png(size=(100, 100)):
        image = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
        output = io.BytesIO()
        image.save(output, format="PNG")
        return output.getvalue()

    def test_small_photo_unchanged(self, png_bytes):
        """Test that photos under the limit are returned as-is."""
        assert len(png_bytes) < MAX_PHOTO_SIZE
        assert shrink_photo(png_bytes) is png_bytes

    def test_large_photo_reduced(self):
        """Test that oversized photos are scaled down and re-encoded."""
        data = self._noise_png()
        assert len(data) > 20000

        result = shrink_photo(data, max_size=20000, max_dimension=50)

        assert len(result) <= 20000
        with Image.open(io.BytesIO(result)) as image:
            assert image.format == "JPEG"
            assert max(image.size) <= 50

    def test_cannot_reduce(self):
        """Test that an unreachable limit raises."""
        with pytest.raises(UnsupportedMediaTypeError, match="Unable to reduce"):
            shrink_photo(self._noise_png(), max_size=10)
