# -*- coding: utf-8 -*-
"""
Unit тесты для сохранения загруженных изображений
"""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from pdd_trainer.config.settings import settings
from pdd_trainer.service.files import CATEGORY_MAPPING, save_image
from pdd_trainer.utils.exceptions import ValidationError


class RecordingBuffer(io.BytesIO):
    """Буфер, запоминающий запрошенные размеры чтения."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.requested = []

    def read(self, size=-1):
        self.requested.append(size)
        return super().read(size)


def make_upload(buffer, filename="photo.png", content_type="image/png") -> UploadFile:
    return UploadFile(
        file=buffer,
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))
    monkeypatch.setitem(CATEGORY_MAPPING["avatar"], "max_size", 10)
    return tmp_path


class TestSaveImage:
    """Тесты сохранения изображений"""

    @pytest.mark.asyncio
    async def test_save_image_writes_file(self, upload_dir):
        buffer = RecordingBuffer(b"png-bytes")

        filename = await save_image(make_upload(buffer), "avatar")

        assert filename.endswith(".png")
        assert (upload_dir / "avatars" / filename).read_bytes() == b"png-bytes"

    @pytest.mark.asyncio
    async def test_oversized_file_read_is_bounded(self, upload_dir):
        """Файл больше лимита читается не дальше лимита и не сохраняется"""
        # Arrange
        buffer = RecordingBuffer(b"x" * 1000)

        # Act & Assert
        with pytest.raises(ValidationError):
            await save_image(make_upload(buffer), "avatar")

        assert buffer.requested == [11]
        assert buffer.tell() == 11
        assert not (upload_dir / "avatars").exists()

    @pytest.mark.asyncio
    async def test_unknown_category(self, upload_dir):
        with pytest.raises(ValueError):
            await save_image(make_upload(RecordingBuffer(b"x")), "document")
