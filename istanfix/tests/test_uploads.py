"""
Image Store Tests
"""

import asyncio
import io

import pytest
from starlette.datastructures import Headers, UploadFile

from istanfix.errors import ValidationFailed
from istanfix.uploads import ImageStore, is_image_content_type


def _upload(data: bytes, content_type: str, filename: str = "photo.jpg") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


@pytest.fixture
def store(tmp_path):
    return ImageStore(str(tmp_path / "uploads"), max_bytes=1024)


class TestImageStore:

    def test_content_type_check(self):
        assert is_image_content_type("image/png")
        assert is_image_content_type("IMAGE/JPEG")
        assert not is_image_content_type("application/pdf")
        assert not is_image_content_type(None)

    def test_read_accepts_image_within_limit(self, store):
        data = asyncio.run(store.read_upload(_upload(b"x" * 1024, "image/jpeg")))
        assert len(data) == 1024

    def test_read_rejects_oversize(self, store):
        with pytest.raises(ValidationFailed) as exc_info:
            asyncio.run(store.read_upload(_upload(b"x" * 1025, "image/jpeg")))
        assert "too large" in exc_info.value.message

    def test_read_stops_after_limit(self, store):
        upload = _upload(b"x" * 10 * 1024, "image/jpeg")
        with pytest.raises(ValidationFailed):
            asyncio.run(store.read_upload(upload))
        assert upload.file.tell() == 1025

    def test_read_rejects_non_image(self, store):
        with pytest.raises(ValidationFailed) as exc_info:
            asyncio.run(store.read_upload(_upload(b"%PDF", "application/pdf", "doc.pdf")))
        assert exc_info.value.message == "Only image files are allowed."

    def test_save_generates_unique_names(self, store, tmp_path):
        first = store.save(b"abc", "pothole.PNG", "image/png")
        second = store.save(b"abc", "pothole.PNG", "image/png")

        assert first.filename != second.filename
        assert first.filename.endswith(".png")
        assert first.relative_path == f"uploads/{first.filename}"
        assert (tmp_path / "uploads" / first.filename).read_bytes() == b"abc"

    def test_save_falls_back_to_content_type_extension(self, store):
        stored = store.save(b"abc", "no-extension", "image/png")
        assert stored.filename.endswith(".png")

    def test_delete(self, store, tmp_path):
        stored = store.save(b"abc", "a.jpg", "image/jpeg")
        assert store.delete(stored.relative_path)
        assert not (tmp_path / "uploads" / stored.filename).exists()
        assert not store.delete(stored.relative_path)

    def test_delete_refuses_paths_outside_upload_dir(self, store, tmp_path):
        victim = tmp_path / "keep.txt"
        victim.write_text("important")
        assert not store.delete("uploads/../keep.txt")
        assert victim.exists()

    def test_delete_ignores_empty_path(self, store):
        assert not store.delete(None)
