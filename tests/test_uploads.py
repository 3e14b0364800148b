import io

import pytest
from flask import Flask
from werkzeug.datastructures import FileStorage

from app.portal.storage import LocalStorage, StorageError
from app.portal.uploads import (
    discard_uploads,
    sanitize_filename,
    save_upload,
    save_uploads,
    validate_document_file,
    validate_image_file,
    validate_upload,
)

MB = 1024 * 1024


@pytest.fixture()
def app(tmp_path):
    app = Flask(__name__)
    app.config.update(STORAGE_BACKEND="local", UPLOAD_DIR=str(tmp_path / "uploads"), MAX_FILE_SIZE=1 * MB)
    return app


def _file(data: bytes, name: str, content_type: str | None = None) -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=name, content_type=content_type)


def test_sanitize_filename():
    assert sanitize_filename("My Deed (final).PDF") == "my_deed_final_.pdf"
    assert sanitize_filename("../../etc/passwd") == ".._.._etc_passwd"
    assert sanitize_filename("") == ""


def test_validate_image_file():
    assert validate_image_file("image/png", 100, MB) is None
    assert validate_image_file("application/pdf", 100, MB) == "Invalid image type. Allowed: JPEG, PNG, GIF, WebP"
    assert validate_image_file("image/jpeg", 2 * MB, MB) == "Image size exceeds 1MB limit"


def test_validate_document_file():
    assert validate_document_file("application/pdf", 100, MB) is None
    assert validate_document_file("image/png", 100, MB) == "Invalid document type. Allowed: PDF, DOC, DOCX, XLS, XLSX"
    assert validate_document_file("application/pdf", 11 * MB, 10 * MB) == "Document size exceeds 10MB limit"


def test_validate_upload_checks_size_first():
    assert validate_upload("image/webp", 10, MB) is None
    assert validate_upload("text/html", 10, MB) == "File type not allowed"
    assert validate_upload("text/html", 2 * MB, MB) == "File size exceeds maximum allowed size of 1MB"


def test_save_upload_stores_file(app, tmp_path):
    with app.app_context():
        result = save_upload(_file(b"%PDF-1.4", "Court Order.pdf"), "reports", kind="document")

    assert result.success
    assert result.url == f"/uploads/{result.storage_key}"
    assert result.storage_key.startswith("reports/")
    assert result.storage_key.endswith(".pdf")
    assert result.original_name == "Court Order.pdf"
    assert result.content_type == "application/pdf"
    assert result.size_bytes == 8
    assert (tmp_path / "uploads" / result.storage_key).read_bytes() == b"%PDF-1.4"


def test_save_upload_guesses_type_from_extension(app):
    with app.app_context():
        result = save_upload(_file(b"\xff\xd8", "photo.jpg", "application/octet-stream"), kind="image")
    assert result.success
    assert result.content_type == "image/jpeg"
    assert result.storage_key.startswith("general/")


def test_save_upload_rejects_oversized_file(app):
    with app.app_context():
        result = save_upload(_file(b"x" * (MB + 1), "big.png", "image/png"), kind="image")
    assert not result.success
    assert result.error == "Image size exceeds 1MB limit"


def test_save_upload_sanitizes_sub_dir(app):
    with app.app_context():
        result = save_upload(_file(b"\x89PNG", "a.png", "image/png"), "../properties/../7")
    assert result.success
    assert result.storage_key.startswith("properties/7/")


def test_save_uploads_skips_empty_and_discard_removes(app, tmp_path):
    files = [_file(b"%PDF", "one.pdf"), _file(b"", ""), _file(b"%PDF", "two.pdf")]
    with app.app_context():
        results = save_uploads(files, "reports")
        assert len(results) == 2
        paths = [tmp_path / "uploads" / r.storage_key for r in results]
        assert all(p.exists() for p in paths)

        discard_uploads(results)
    assert not any(p.exists() for p in paths)


def test_local_storage_refuses_escaping_keys(tmp_path):
    storage = LocalStorage(tmp_path / "uploads")
    with pytest.raises(StorageError):
        storage.put_bytes("../outside.txt", b"x")
    assert storage.exists("../outside.txt") is False
