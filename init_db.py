#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных каталога.

    python init_db.py           # создать таблицы
    python init_db.py --seed    # создать таблицы и добавить демо-данные
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

# Добавляем путь к модулю app
sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError

from app.db.database import SessionLocal, engine
from app.db.models import Base, Category, Product

DEMO_CATALOG = {
    "Electronics": [("Phone", "Smartphone, 128 GB", Decimal("599.00"))],
    "Books": [("Novel", "Paperback", Decimal("15.00"))],
}


def seed_demo_data() -> int:
    """Добавить демо-категории и товары, если каталог пуст."""
    db = SessionLocal()
    try:
        if db.scalar(select(Category.id).limit(1)) is not None:
            print("Каталог не пуст, демо-данные не добавлены")
            return 0

        created = 0
        for category_name, products in DEMO_CATALOG.items():
            category = Category(name=category_name)
            category.products = [
                Product(name=name, description=description, price=price)
                for name, description, price in products
            ]
            db.add(category)
            created += len(products)
        db.commit()
        return created
    finally:
        db.close()


def init_database(seed: bool = False) -> bool:
    """Создает все таблицы в базе данных."""
    print("Инициализация базы данных...")

    try:
        Base.metadata.create_all(bind=engine)
        print("Все таблицы созданы успешно!")

        tables = inspect(engine).get_table_names()
        print(f"Таблиц в БД: {len(tables)}")
        for table in tables:
            print(f"  - {table}")

        if seed:
            created = seed_demo_data()
            print(f"Добавлено демо-товаров: {created}")

        return True

    except SQLAlchemyError as e:
        print(f"Ошибка инициализации БД: {e}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Инициализация БД каталога")
    parser.add_argument("--seed", action="store_true", help="Добавить демо-данные")
    args = parser.parse_args()

    if not init_database(seed=args.seed):
        sys.exit(1)
