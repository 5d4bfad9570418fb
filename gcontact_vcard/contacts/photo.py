"""
Photo loading and validation for contact photos.

Provides utilities for:
- Loading photos from http(s) URLs, local files and data: URIs
- Detecting and validating the image type (JPEG, PNG, GIF, BMP)
- Shrinking photos that exceed the People API size limit
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path

import requests
from PIL import Image, UnidentifiedImageError
from requests.exceptions import RequestException

from gcontact_vcard import __version__
from gcontact_vcard.errors import (
    NotFoundError,
    RemoteApiError,
    TransportError,
    UnsupportedMediaTypeError,
)

# Image types accepted by the People API photo upload
SUPPORTED_IMAGE_TYPES = frozenset({"jpeg", "png", "gif", "bmp"})

# HTTP timeout configuration
DOWNLOAD_TIMEOUT = 30.0  # seconds

MAX_PHOTO_SIZE = 5 * 1024 * 1024  # 5MB - Google API limit
MAX_PHOTO_DIMENSION = 2048  # pixels
JPEG_QUALITY = 85

logger = logging.getLogger(__name__)


def download_photo(url: str, timeout: float = DOWNLOAD_TIMEOUT) -> bytes:
    """
    Download a photo from a URL.

    Args:
        url: http(s) URL of the photo
        timeout: Request timeout in seconds

    Returns:
        Photo data as bytes

    Raises:
        NotFoundError: If the server answers 404 or the body is empty
        RemoteApiError: For other HTTP error statuses
        TransportError: If the server cannot be reached
    """
    if not url.startswith(("http://", "https://")):
        raise NotFoundError(f"Invalid photo URL: {url}")

    logger.debug(f"Downloading photo from {url}")
    try:
        response = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": f"gcontact-vcard/{__version__}"},
        )
        response.raise_for_status()
    except requests.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else 0
        if status_code == 404:
            raise NotFoundError(f"Photo not found: {url}", status_code) from e
        raise RemoteApiError(
            f"Failed to download photo from {url}: {e}", status_code
        ) from e
    except RequestException as e:
        logger.error(f"Network error downloading photo from {url}: {e}")
        raise TransportError(f"Failed to download photo from {url}: {e}") from e

    if not response.content:
        raise NotFoundError(f"Empty response from {url}")

    content_type = response.headers.get("content-type", "").lower()
    if content_type and not content_type.startswith("image/"):
        logger.warning(f"Unexpected content type for photo: {content_type} from {url}")

    logger.debug(f"Downloaded photo: {len(response.content)} bytes from {url}")
    return response.content


def decode_data_uri(uri: str) -> bytes:
    """
    Decode a base64 data: URI (as used by vCard 4.0 PHOTO values).

    Raises:
        UnsupportedMediaTypeError: If the URI is not a base64 data URI
    """
    header, _, payload = uri.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        raise UnsupportedMediaTypeError(f"Unsupported photo URI: {header}")
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise UnsupportedMediaTypeError(f"Invalid base64 photo data: {e}") from e


def load_photo(source: str | Path) -> bytes:
    """
    Load photo data from a URL, data: URI or local file.

    Raises:
        NotFoundError: If the source does not exist
        TransportError: If a remote source cannot be reached
    """
    text = str(source)
    if text.startswith(("http://", "https://")):
        return download_photo(text)
    if text.startswith("data:"):
        return decode_data_uri(text)

    path = Path(source).expanduser()
    if not path.is_file():
        raise NotFoundError(f"Photo file not found: {path}")
    logger.debug(f"Reading photo from {path}")
    return path.read_bytes()


def detect_image_type(photo_data: bytes) -> str:
    """
    Detect the image type of photo data.

    Returns:
        Lowercase image type ("jpeg", "png", "gif" or "bmp")

    Raises:
        UnsupportedMediaTypeError: If the data is not an image or the image
            type is not supported
    """
    if not photo_data:
        raise UnsupportedMediaTypeError("Photo data is empty")
    try:
        with Image.open(io.BytesIO(photo_data)) as image:
            image_type = (image.format or "").lower()
    except UnidentifiedImageError as e:
        raise UnsupportedMediaTypeError("Photo data is not a valid image") from e

    if image_type not in SUPPORTED_IMAGE_TYPES:
        raise UnsupportedMediaTypeError(
            f"Unsupported image type '{image_type}', "
            f"expected one of {', '.join(sorted(SUPPORTED_IMAGE_TYPES))}"
        )
    return image_type


def shrink_photo(
    photo_data: bytes,
    max_size: int = MAX_PHOTO_SIZE,
    max_dimension: int = MAX_PHOTO_DIMENSION,
) -> bytes:
    """
    Reduce a photo to fit the People API size limit.

    Photos already below max_size are returned unchanged. Larger photos are
    scaled down to max_dimension and re-encoded as JPEG with decreasing
    quality.

    Raises:
        UnsupportedMediaTypeError: If the photo cannot be reduced enough
    """
    if len(photo_data) <= max_size:
        return photo_data

    logger.debug(f"Shrinking photo of {len(photo_data)} bytes")
    image = Image.open(io.BytesIO(photo_data))
    image.load()
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    quality = JPEG_QUALITY
    output_data = b""
    while quality > 20:
        output = io.BytesIO()
        image.save(output, format="JPEG", quality=quality, optimize=True)
        output_data = output.getvalue()
        if len(output_data) <= max_size:
            return output_data
        quality -= 5

    raise UnsupportedMediaTypeError(
        f"Unable to reduce photo size below {max_size} bytes "
        f"(current: {len(output_data)} bytes)"
    )
