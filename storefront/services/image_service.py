"""
Relay of product images to the external image host (Cloudinary upload API)
"""
import hashlib
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional

import requests

from storefront.config import Settings
from storefront.exceptions import UnsupportedImage, UpstreamUploadFailure

logger = logging.getLogger(__name__)


def sign_params(params: Dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: sha1 of the sorted key=value pairs followed by the secret"""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] != "")
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryImageStore:
    """Uploads image bytes to Cloudinary and returns the hosted URL"""

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time
    ):
        self.settings = settings
        self.session = session or requests.Session()
        self.clock = clock

    @property
    def upload_url(self) -> str:
        return self.settings.CLOUDINARY_UPLOAD_URL.format(cloud_name=self.settings.CLOUD_NAME)

    def validate(self, filename: Optional[str], content: bytes) -> str:
        """Check extension and size, return the lower-cased extension"""
        allowed = self.settings.allowed_image_formats
        file_ext = Path(filename).suffix.lower().lstrip(".") if filename else ""
        if file_ext not in allowed:
            raise UnsupportedImage(f"Invalid file type. Allowed: {', '.join(allowed)}")
        if not content:
            raise UnsupportedImage("Empty file")
        if len(content) > self.settings.MAX_UPLOAD_SIZE:
            raise UnsupportedImage(
                f"File size exceeds maximum allowed size of {self.settings.MAX_UPLOAD_SIZE / 1024 / 1024}MB"
            )
        return file_ext

    def upload(self, filename: Optional[str], content: bytes, content_type: Optional[str] = None) -> str:
        self.validate(filename, content)

        now = self.clock()
        params = {
            "folder": self.settings.IMAGE_FOLDER,
            "public_id": f"product_{int(now * 1000)}",
            "allowed_formats": ",".join(self.settings.allowed_image_formats),
            "timestamp": str(int(now)),
        }
        params["signature"] = sign_params(params, self.settings.CLOUDINARY_API_SECRET)
        params["api_key"] = self.settings.CLOUDINARY_API_KEY

        try:
            response = self.session.post(
                self.upload_url,
                data=params,
                files={"file": (filename, content, content_type or "application/octet-stream")},
                timeout=self.settings.UPLOAD_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error("Image upload to %s failed: %s", self.upload_url, e)
            raise UpstreamUploadFailure()

        if response.status_code != 200:
            logger.error("Image host rejected upload: %s %s", response.status_code, response.text[:200])
            raise UpstreamUploadFailure()

        try:
            body = response.json()
        except ValueError:
            logger.error("Image host returned a non-JSON body")
            raise UpstreamUploadFailure()

        image_url = body.get("secure_url") or body.get("url")
        if not image_url:
            logger.error("Image host response has no URL: %s", body)
            raise UpstreamUploadFailure()

        logger.info("Uploaded %s as %s", filename, params["public_id"])
        return image_url
