"""
image_archive.py

Optional archiving of the photographed form to blob storage, so the
record table can keep a link to the source image.

Uses the blob store HTTP API: one PUT per image, the response JSON
carries the public "url" of the stored object.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple
import base64
import binascii
import logging
import uuid

import requests

logger = logging.getLogger(__name__)


EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def decode_data_url(image: str) -> Tuple[bytes, str]:
    """
    Decode a data URL (or bare base64) into bytes and MIME type.

    Raises:
    - ValueError if the base64 payload is invalid
    """

    mime_type = "image/jpeg"
    payload = image.strip()

    if payload.startswith("data:"):
        header, _, payload = payload.partition(",")
        mime_type = header[len("data:"):].split(";")[0] or mime_type

    try:
        return base64.b64decode(payload, validate=True), mime_type
    except (binascii.Error, ValueError) as error:
        raise ValueError("Image is not valid base64 data") from error


class ImageArchiveService:
    """Uploads image bytes to blob storage and returns their URL."""

    def __init__(self, token: Optional[str], base_url: str, timeout: int = 15):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.token)

    def archive(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> Optional[str]:
        """
        Upload one image.

        Returns:
        - public URL of the stored image, or None when archiving
          is not configured

        Raises:
        - RuntimeError if the upload fails
        """

        if not self.enabled:
            logger.info("Image archiving not configured, skipping upload")
            return None

        # weighings/20261017T101500Z-1a2b3c4d.jpg
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        extension = EXTENSIONS.get(mime_type, "jpg")
        pathname = f"weighings/{timestamp}-{uuid.uuid4().hex[:8]}.{extension}"

        try:
            response = requests.put(
                f"{self.base_url}/{pathname}",
                data=image_bytes,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "x-content-type": mime_type,
                },
                timeout=self.timeout
            )
        except requests.RequestException as error:
            logger.error(f"Image upload failed: {error}")
            raise RuntimeError(f"Image upload failed: {error}") from error

        if not 200 <= response.status_code < 300:
            raise RuntimeError(
                f"Image upload rejected ({response.status_code}): {response.text}"
            )

        try:
            body = response.json()
        except ValueError as error:
            logger.error(f"Image upload returned a non-JSON body: {error}")
            raise RuntimeError("Image upload returned an invalid response") from error

        url = body.get("url") if isinstance(body, dict) else None
        if not url:
            raise RuntimeError("Image upload response has no url")

        logger.info(f"Archived image at {url}")

        return url
