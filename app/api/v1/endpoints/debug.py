"""
Debug endpoints для диагностики подключения к хранилищу.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import get_db

router = APIRouter()

# Список таблиц для проверки
TABLES_TO_CHECK = [
    "categories",
    "products",
]


@router.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    """
    Проверка подключения к базе данных.

    Args:
        db: Сессия базы данных

    Returns:
        dict: Статус подключения, диалект и наличие таблиц каталога
    """
    try:
        ping_ok = db.execute(text("SELECT 1")).scalar() == 1

        bind = db.get_bind()
        existing = set(inspect(bind).get_table_names())
        present = [table for table in TABLES_TO_CHECK if table in existing]
        missing = [table for table in TABLES_TO_CHECK if table not in existing]

        return {
            "ok": ping_ok,
            "dialect": bind.dialect.name,
            "tables_present": present,
            "tables_missing": missing,
        }
    except SQLAlchemyError as e:
        return {"ok": False, "error": str(e)}
