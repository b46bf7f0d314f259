# -*- coding: utf-8 -*-
"""
pdd_trainer/service/files.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой для загруженных изображений с централизованным маппингом категорий.

Файлы хранятся на локальном диске в ``settings.upload_dir`` и раздаются
приложением по префиксу ``/uploads``.
"""

import secrets
from pathlib import Path
from typing import Dict, Optional

from fastapi import UploadFile
from loguru import logger
from starlette.concurrency import run_in_threadpool

from pdd_trainer.config.settings import settings
from pdd_trainer.utils.exceptions import ValidationError

# Поддерживаемые типы изображений
ALLOWED_IMAGE_TYPES: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

# Централизованный маппинг категорий на каталог и лимит размера
CATEGORY_MAPPING: Dict[str, Dict[str, object]] = {
    "avatar": {"folder": "avatars", "max_size": settings.avatar_max_size},
    "question_image": {
        "folder": "questions",
        "max_size": settings.question_image_max_size,
    },
}

UPLOADS_URL_PREFIX = "/uploads"


def get_upload_root() -> Path:
    return Path(settings.upload_dir)


def get_category_folder(category: str) -> Path:
    """
    Получить каталог для категории файла.

    Raises:
        ValueError: Если категория неизвестна
    """
    if category not in CATEGORY_MAPPING:
        logger.error(f"Неизвестная категория файла: {category}")
        raise ValueError(f"Неизвестная категория файла: {category}")
    return get_upload_root() / str(CATEGORY_MAPPING[category]["folder"])


def get_max_size(category: str) -> int:
    if category not in CATEGORY_MAPPING:
        raise ValueError(f"Неизвестная категория файла: {category}")
    return int(CATEGORY_MAPPING[category]["max_size"])


def validate_image(file: UploadFile, content: bytes, category: str) -> str:
    """
    Валидировать загружаемое изображение.

    Args:
        file: Загружаемый файл
        content: Содержимое файла
        category: Категория файла (из CATEGORY_MAPPING)

    Returns:
        Расширение, под которым файл будет сохранён

    Raises:
        ValidationError: Если файл не прошёл валидацию
    """
    if not file.filename:
        raise ValidationError("Имя файла не может быть пустым")

    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Неподдерживаемый тип файла: {file.content_type}")

    extension = Path(file.filename).suffix.lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(f"Неподдерживаемое расширение файла: {extension or '-'}")

    if not content:
        raise ValidationError("Файл пустой")

    max_size = get_max_size(category)
    if len(content) > max_size:
        raise ValidationError(
            f"Размер файла превышает {max_size // (1024 * 1024)} МБ"
        )

    return ".jpg" if extension == ".jpeg" else extension


def _write_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


async def save_image(file: UploadFile, category: str) -> str:
    """
    Сохранить изображение на диск.

    Args:
        file: Загружаемый файл
        category: Категория файла (из CATEGORY_MAPPING)

    Returns:
        Имя сохранённого файла (случайное hex-имя с расширением)
    """
    # Не больше лимита плюс один байт
    content = await file.read(get_max_size(category) + 1)
    extension = validate_image(file, content, category)

    filename = f"{secrets.token_hex(16)}{extension}"
    path = get_category_folder(category) / filename

    await run_in_threadpool(_write_file, path, content)
    logger.info(f"Файл сохранён: category={category}, path={path}, size={len(content)}")
    return filename


def delete_image(filename: Optional[str], category: str) -> bool:
    """
    Удалить ранее сохранённое изображение.

    Returns:
        True если файл был удалён
    """
    if not filename:
        return False
    # Имя хранится без каталогов; всё остальное игнорируем
    path = get_category_folder(category) / Path(filename).name
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    logger.debug(f"Файл удалён: {path}")
    return True


def build_file_url(filename: Optional[str], category: str) -> Optional[str]:
    """Публичный URL сохранённого файла или None."""
    if not filename:
        return None
    if filename.startswith(("http://", "https://")):
        return filename
    folder = CATEGORY_MAPPING[category]["folder"]
    return f"{settings.base_url.rstrip('/')}{UPLOADS_URL_PREFIX}/{folder}/{filename}"
