import asyncio
import io
from pathlib import Path

import pytest
from starlette.datastructures import UploadFile

from jobboard.app.services.storage import (
    LOGO_UPLOAD,
    RESUME_UPLOAD,
    resolve_stored_path,
    save_upload,
)
from jobboard.app.utils.error_handlers import InvalidPathError, NotFoundError, ValidationError


@pytest.fixture()
def storage(tmp_path: Path):
    root = tmp_path / "uploads"
    (root / "resumes").mkdir(parents=True)
    (root / "resumes" / "resume-1.pdf").write_bytes(b"%PDF")
    (tmp_path / "secrets.txt").write_text("top secret")
    return tmp_path, root


def test_resolves_reference_inside_root(storage):
    base, root = storage
    path = resolve_stored_path("uploads/resumes/resume-1.pdf", root, base)
    assert path == root / "resumes" / "resume-1.pdf"


def test_inner_dot_segments_that_stay_inside_are_allowed(storage):
    base, root = storage
    path = resolve_stored_path("uploads/resumes/../resumes/resume-1.pdf", root, base)
    assert path.name == "resume-1.pdf"


@pytest.mark.parametrize(
    "ref",
    [
        "uploads/resumes/../../secrets.txt",
        "../secrets.txt",
        "secrets.txt",
        "uploads/../secrets.txt",
        "uploads",
        "uploads/",
        "",
        "uploads/resumes/x\x00.pdf",
        "uploads\\..\\secrets.txt",
    ],
)
def test_escaping_references_are_invalid_even_if_file_exists(storage, ref):
    base, root = storage
    with pytest.raises(InvalidPathError):
        resolve_stored_path(ref, root, base)


def test_absolute_reference_outside_root_is_invalid(storage):
    base, root = storage
    with pytest.raises(InvalidPathError):
        resolve_stored_path(str(base / "secrets.txt"), root, base)


def test_sibling_directory_with_shared_prefix_is_invalid(storage):
    base, root = storage
    evil = base / "uploads-evil"
    evil.mkdir()
    (evil / "x.pdf").write_bytes(b"x")
    with pytest.raises(InvalidPathError):
        resolve_stored_path("uploads-evil/x.pdf", root, base)


def test_missing_file_inside_root_is_not_found(storage):
    base, root = storage
    with pytest.raises(NotFoundError):
        resolve_stored_path("uploads/resumes/missing.pdf", root, base)


def _upload(name: str, content: bytes) -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=name)


def test_save_upload_names_by_field_and_timestamp(settings):
    ref = asyncio.run(save_upload(_upload("CV.PDF", b"%PDF-1.4"), RESUME_UPLOAD, settings))
    assert ref.startswith("uploads/resumes/resume-")
    assert ref.endswith(".pdf")
    assert (settings.storage_dir / ref).read_bytes() == b"%PDF-1.4"


def test_save_upload_same_millisecond_does_not_overwrite(settings, monkeypatch):
    import jobboard.app.services.storage as storage_module

    monkeypatch.setattr(storage_module.time, "time", lambda: 1700000000.0)
    first = asyncio.run(save_upload(_upload("a.png", b"a"), LOGO_UPLOAD, settings))
    second = asyncio.run(save_upload(_upload("b.png", b"b"), LOGO_UPLOAD, settings))
    assert first == "uploads/company-logos/logo-1700000000000.png"
    assert second == "uploads/company-logos/logo-1700000000001.png"


@pytest.mark.parametrize("name", ["resume.txt", "resume.exe", "resume", "resume.pdf.sh"])
def test_save_upload_rejects_wrong_resume_type(settings, name):
    with pytest.raises(ValidationError):
        asyncio.run(save_upload(_upload(name, b"x"), RESUME_UPLOAD, settings))


def test_save_upload_rejects_non_image_logo(settings):
    with pytest.raises(ValidationError):
        asyncio.run(save_upload(_upload("logo.pdf", b"x"), LOGO_UPLOAD, settings))


def test_save_upload_enforces_size_limit_and_cleans_up(settings):
    too_big = b"x" * (settings.max_upload_bytes + 1)
    with pytest.raises(ValidationError):
        asyncio.run(save_upload(_upload("big.pdf", too_big), RESUME_UPLOAD, settings))
    resumes_dir = settings.upload_dir / "resumes"
    assert not resumes_dir.exists() or list(resumes_dir.iterdir()) == []


def test_save_upload_filesystem_failure_is_internal_error(settings, tmp_path):
    from dataclasses import replace

    from jobboard.app.utils.error_handlers import InternalError

    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    broken = replace(settings, upload_dir=blocker)
    with pytest.raises(InternalError) as exc:
        asyncio.run(save_upload(_upload("cv.pdf", b"%PDF"), RESUME_UPLOAD, broken))
    assert exc.value.status_code == 500
