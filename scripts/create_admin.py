#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Скрипт для создания администратора системы.

Пример:
    python scripts/create_admin.py admin@example.com "S3cure-pass"

Если пользователь с таким email уже есть, он назначается администратором
и помечается подтверждённым.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Корень репозитория в sys.path для запуска без установки пакета
sys.path.append(str(Path(__file__).parent.parent))

from pdd_trainer.clients.database_client import AsyncSessionLocal, async_engine  # noqa: E402
from pdd_trainer.service.auth import validate_email, validate_password  # noqa: E402
from pdd_trainer.utils.admin_check import create_default_admin  # noqa: E402
from pdd_trainer.utils.exceptions import ValidationError  # noqa: E402


async def create_admin_user(email: str, password: str) -> None:
    async with AsyncSessionLocal() as session:
        admin = await create_default_admin(session, email, password)
    await async_engine.dispose()
    print("✅ Администратор готов:")
    print(f"   Email: {admin.email}")
    print(f"   Role: {admin.role.value}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Создание администратора ПДД Тренажёра")
    parser.add_argument("email", help="Email администратора")
    parser.add_argument("password", help="Пароль администратора")
    args = parser.parse_args()

    try:
        email = validate_email(args.email)
        validate_password(args.password)
    except ValidationError as e:
        print(f"❌ {e.detail}")
        sys.exit(1)

    asyncio.run(create_admin_user(email, args.password))


if __name__ == "__main__":
    main()
