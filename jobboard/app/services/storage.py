"""
Uploaded file storage.

Files are written under the trusted upload root and referenced in the
database by a POSIX path relative to the storage base directory, e.g.
``uploads/resumes/resume-1700000000000.pdf``. Those references are treated as
untrusted on the way back out: resolve_stored_path() only returns a path that
stays lexically inside the trusted root.
"""
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import time

from fastapi import UploadFile

from ..config import Settings
from ..utils.error_handlers import (
    InternalError,
    InvalidPathError,
    NotFoundError,
    ValidationError,
    get_error_message,
)

logger = logging.getLogger(__name__)

_CHUNK_BYTES = 1024 * 1024  # 1MB


@dataclass(frozen=True)
class UploadKind:
    field: str
    subdir: str
    extensions: frozenset[str]
    type_error: str


RESUME_UPLOAD = UploadKind(
    field="resume",
    subdir="resumes",
    extensions=frozenset({".pdf", ".doc", ".docx"}),
    type_error="Only PDF, DOC, and DOCX files are allowed",
)
LOGO_UPLOAD = UploadKind(
    field="logo",
    subdir="company-logos",
    extensions=frozenset({".jpeg", ".jpg", ".png", ".gif"}),
    type_error="Only image files are allowed (png, jpg, jpeg, gif)",
)


def resolve_stored_path(stored_path: str | None, trusted_root: Path, base_dir: Path | None = None) -> Path:
    """
    Map a stored file reference to an absolute path inside trusted_root.

    Containment is decided lexically (after normalising ``..`` segments) and
    before any filesystem access, so an escaping reference is rejected with
    InvalidPathError whether or not a file exists at the target.
    """
    if not stored_path or not isinstance(stored_path, str) or "\x00" in stored_path:
        raise InvalidPathError()

    root = os.path.normpath(os.path.abspath(trusted_root))
    base = os.path.normpath(os.path.abspath(base_dir if base_dir is not None else trusted_root))
    candidate = os.path.normpath(os.path.join(base, stored_path.replace("\\", "/")))

    try:
        contained = os.path.commonpath([root, candidate]) == root
    except ValueError:
        # Different drives on Windows.
        contained = False
    if not contained or candidate == root:
        logger.warning("Stored path %r escapes upload root", stored_path)
        raise InvalidPathError()

    resolved = Path(candidate)
    if not resolved.is_file():
        logger.error("Stored file missing on server: %s", resolved)
        raise NotFoundError(get_error_message("resume_not_found"))
    return resolved


def stored_reference(path: Path, settings: Settings) -> str:
    return Path(os.path.relpath(path, settings.storage_dir)).as_posix()


async def save_upload(upload: UploadFile | None, kind: UploadKind, settings: Settings) -> str:
    """
    Persist an uploaded file and return its stored reference.
    Named ``<field>-<epoch millis><ext>``; the extension must be in kind.extensions.
    """
    if upload is None or not upload.filename:
        raise ValidationError(f"No {kind.field} file uploaded")

    ext = Path(Path(upload.filename).name).suffix.lower()
    if ext not in kind.extensions:
        raise ValidationError(kind.type_error)

    base_dir = Path(settings.upload_dir) / kind.subdir
    millis = int(time.time() * 1000)
    try:
        base_dir.mkdir(parents=True, exist_ok=True)
        while True:
            dest = base_dir / f"{kind.field}-{millis}{ext}"
            try:
                # Exclusive create; two uploads in the same millisecond get distinct names.
                out_file = open(dest, "xb")
                break
            except FileExistsError:
                millis += 1
    except OSError as e:
        logger.error("Cannot create %s upload under %s: %s", kind.field, base_dir, e)
        await upload.close()
        raise InternalError(get_error_message("upload_failed")) from e

    size = 0
    try:
        with out_file as out:
            while True:
                chunk = await upload.read(_CHUNK_BYTES)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.max_upload_bytes:
                    raise ValidationError(get_error_message("file_too_large"))
                out.write(chunk)
    except OSError as e:
        dest.unlink(missing_ok=True)
        logger.error("Failed writing %s upload %s: %s", kind.field, dest, e)
        raise InternalError(get_error_message("upload_failed")) from e
    except BaseException:
        dest.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    logger.info("Stored %s upload %s (%d bytes)", kind.field, dest.name, size)
    return stored_reference(dest, settings)


def remove_stored_file(stored_path: str | None, settings: Settings) -> None:
    """Best-effort delete of a stored upload; invalid or missing references are ignored."""
    if not stored_path:
        return
    try:
        path = resolve_stored_path(stored_path, settings.upload_dir, settings.storage_dir)
    except (InvalidPathError, NotFoundError):
        return
    try:
        path.unlink()
    except OSError as e:
        logger.warning("Failed to remove stored file %s: %s", path, e)
