"""
WebPoint - Image Storage Service
Unsigned uploads to Cloudinary for blog and portfolio images
"""
import os
import re
import logging
from typing import Optional, List, Any

import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

CLOUDINARY_URL_RE = re.compile(r'/v\d+/(.+?)(?:\.[^./]+)?$')


class StorageError(Exception):
    """Image upload failed; the content save must be aborted"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _setting(name: str, default: str = '') -> Any:
    if has_app_context():
        value = current_app.config.get(name)
        if value:
            return value
    return os.environ.get(name, default)


class StorageService:
    """Cloudinary image hosting"""

    @property
    def cloud_name(self):
        return _setting('CLOUDINARY_CLOUD_NAME')

    @property
    def upload_preset(self):
        return _setting('CLOUDINARY_UPLOAD_PRESET', 'webpoint_images')

    @property
    def api_key(self):
        return _setting('CLOUDINARY_API_KEY')

    def upload_image(self, file_storage) -> str:
        """
        Upload an image with the unsigned preset.

        Args:
            file_storage: werkzeug FileStorage from request.files

        Returns:
            secure_url of the uploaded image, or its public_id

        Raises:
            StorageError
        """
        if not self.cloud_name:
            raise StorageError('CLOUDINARY_CLOUD_NAME is not set in environment variables')

        upload_url = f'https://api.cloudinary.com/v1_1/{self.cloud_name}/image/upload'
        filename = getattr(file_storage, 'filename', None) or 'upload'
        mimetype = getattr(file_storage, 'mimetype', None) or 'application/octet-stream'
        stream = getattr(file_storage, 'stream', file_storage)

        try:
            response = requests.post(
                upload_url,
                data={'upload_preset': self.upload_preset},
                files={'file': (filename, stream, mimetype)},
                timeout=60
            )
        except requests.RequestException as e:
            logger.error(f"Error uploading image to Cloudinary: {e}")
            raise StorageError(f'Upload failed: {e}')

        if not response.ok:
            try:
                message = response.json().get('error', {}).get('message')
            except ValueError:
                message = None
            message = message or f'Upload failed: {response.reason or response.status_code}'
            logger.error(f"Cloudinary upload error ({response.status_code}): {message}")
            raise StorageError(message)

        try:
            data = response.json()
        except ValueError:
            raise StorageError('Upload failed: invalid response from image host')

        location = data.get('secure_url') or data.get('public_id')
        if not location:
            raise StorageError('Upload failed: image host returned no URL')

        logger.info(f"Image uploaded: {location}")
        return location

    def upload_images(self, files: List) -> List[str]:
        """Upload several images in order; the first failure aborts"""
        return [self.upload_image(f) for f in files if f and getattr(f, 'filename', '')]

    def get_image_url(self, image_path: str) -> str:
        """Public URL for a stored image reference (URL or public_id)"""
        if not image_path:
            return image_path
        if image_path.startswith(('http://', 'https://')):
            return image_path
        if self.cloud_name:
            return f'https://res.cloudinary.com/{self.cloud_name}/image/upload/f_auto,q_auto/{image_path}'
        return image_path

    def extract_public_id(self, image_path: str) -> Optional[str]:
        if not image_path:
            return None
        if not image_path.startswith(('http://', 'https://')):
            return image_path
        match = CLOUDINARY_URL_RE.search(image_path)
        return match.group(1) if match else None

    def delete_image(self, image_path: str) -> bool:
        """
        Deletion needs the API secret and is not performed here.
        Logs what would have been removed and returns False.
        """
        if not self.cloud_name or not self.api_key:
            logger.warning("Cloudinary credentials not configured for deletion")
            return False

        public_id = self.extract_public_id(image_path)
        if not public_id:
            logger.warning(f"Could not extract public_id from URL: {image_path}")
            return False

        logger.warning(f"Image deletion must be performed with server-side credentials; kept {public_id}")
        return False


# Singleton instance
storage_service = StorageService()
