import os
import uuid
import logging
from werkzeug.utils import secure_filename

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


class InvalidImageError(ValueError):
    pass


def _extension(filename: str) -> str:
    name = secure_filename(filename or "")
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()

def save_image(file, upload_folder: str) -> str:
    """Store an uploaded image on disk and return the URL it is served from."""
    ext = _extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidImageError(f"Unsupported image type: {ext or 'unknown'}")

    os.makedirs(upload_folder, exist_ok=True)
    stored = f"{uuid.uuid4().hex}.{ext}"
    file.save(os.path.join(upload_folder, stored))
    log.info("Stored recipe image %s", stored)
    return f"/uploads/{stored}"

def remove_image(image_url: str | None, upload_folder: str):
    # only locally stored images are ours to delete
    if not image_url or not image_url.startswith("/uploads/"):
        return
    path = os.path.join(upload_folder, os.path.basename(image_url))
    if os.path.exists(path):
        os.remove(path)
