# envoearn/services/storage.py
import logging
import os
import re
import time

import cloudinary
import cloudinary.uploader
from flask import current_app

from envoearn.errors import DependencyError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def allowed_image(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def sanitize_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9\-._]", "", filename or "")


def proof_path(owner, filename: str) -> str:
    """<owner>/<unix-ms>_<clean name>, e.g. "03001234567/1718000000000_proof.png"."""
    return f"{owner}/{int(time.time() * 1000)}_{sanitize_filename(filename)}"


class LocalStorage:
    """Files under the instance folder, served by the main blueprint."""

    def __init__(self, root: str, base_url: str):
        self.root = root
        self.base_url = base_url.rstrip("/")

    def _full_path(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, path))
        if not full.startswith(os.path.abspath(self.root) + os.sep):
            raise DependencyError("Invalid storage path.")
        return full

    def upload(self, file_storage, path: str) -> str:
        full = self._full_path(path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            file_storage.save(full)
        except OSError as e:
            raise DependencyError(f"Could not store file: {e}")
        return f"{self.base_url}/uploads/{path}"

    def delete(self, path: str) -> None:
        full = self._full_path(path)
        try:
            os.remove(full)
        except FileNotFoundError:
            return
        except OSError as e:
            raise DependencyError(f"Could not delete file: {e}")


class CloudinaryStorage:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        self.folder = folder

    def _public_id(self, path: str) -> str:
        # Cloudinary ids carry no extension
        return f"{self.folder}/{path.rsplit('.', 1)[0]}"

    def upload(self, file_storage, path: str) -> str:
        try:
            result = cloudinary.uploader.upload(file_storage, public_id=self._public_id(path))
        except Exception as e:
            raise DependencyError(f"Upload failed: {e}")
        return result.get("secure_url")

    def delete(self, path: str) -> None:
        try:
            result = cloudinary.uploader.destroy(self._public_id(path))
        except Exception as e:
            raise DependencyError(f"Delete failed: {e}")
        if result.get("result") not in {"ok", "not found"}:
            raise DependencyError(f"Delete failed: {result.get('result')}")


def build_storage(app):
    backend = (app.config.get("STORAGE_BACKEND") or "local").lower()

    if backend == "cloudinary":
        return CloudinaryStorage(
            cloud_name=app.config["CLOUDINARY_CLOUD_NAME"],
            api_key=app.config["CLOUDINARY_API_KEY"],
            api_secret=app.config["CLOUDINARY_API_SECRET"],
            folder=app.config.get("CLOUDINARY_FOLDER", "payment-proofs"),
        )

    root = app.config.get("UPLOAD_FOLDER", "payment-proofs")
    if not os.path.isabs(root):
        root = os.path.join(app.instance_path, root)
    return LocalStorage(root=root, base_url=app.config.get("APP_BASE_URL", ""))


def get_storage():
    return current_app.extensions["envoearn.storage"]
