"""
Конфигурация базы данных.

Содержит фабрику движка, фабрику сессий и dependency для FastAPI.
"""

import sqlite3
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def _unicode_lower(value):
    if value is None:
        return None
    return str(value).lower()


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    # SQLite не проверяет внешние ключи без этого PRAGMA, каскад не сработает
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Встроенный lower() SQLite меняет регистр только у ASCII (ILIKE для кириллицы)
    dbapi_connection.create_function("lower", 1, _unicode_lower)


def build_engine(url: str, **kwargs: Any) -> Engine:
    """
    Создать движок SQLAlchemy.

    Для SQLite на каждом соединении включает проверку внешних ключей
    (нужна для ON DELETE CASCADE) и Unicode-версию lower().

    Args:
        url: URL подключения
        **kwargs: Дополнительные параметры create_engine

    Returns:
        Engine: Движок SQLAlchemy
    """
    kwargs.setdefault("pool_pre_ping", True)  # Проверка соединения перед использованием
    kwargs.setdefault("echo", bool(settings.DEBUG))  # Логирование SQL в режиме отладки
    new_engine = create_engine(url, **kwargs)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine, "connect", _configure_sqlite_connection)
    return new_engine


# Создание движка SQLAlchemy
engine = build_engine(settings.DATABASE_URL)


# Фабрика сессий базы данных
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator:
    """
    Dependency для получения сессии базы данных.

    Yields:
        Session: Сессия SQLAlchemy

    Note:
        Автоматически закрывает сессию после использования
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
