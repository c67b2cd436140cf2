"""
API endpoints для работы с категориями товаров.

Содержит CRUD операции над категориями. Удаление категории
каскадно удаляет ее товары (ON DELETE CASCADE в БД).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.db.models import Category, Product
from app.schemas.category import (
    CategoryCreate,
    CategoryDetail,
    CategoryMutationResult,
    CategoryOut,
    CategoryUpdate,
)
from app.schemas.common import MessageOut

logger = logging.getLogger(__name__)

router = APIRouter()


def get_category_or_404(db: Session, category_id: int) -> Category:
    """Найти категорию по ID или вернуть 404."""
    category = db.get(Category, category_id)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    """
    Получить список всех категорий.

    Используется экраном списка категорий и выпадающим
    фильтром таблицы товаров.

    Args:
        db: Сессия базы данных

    Returns:
        List[CategoryOut]: Категории, упорядоченные по id
    """
    return db.scalars(select(Category).order_by(Category.id)).all()


@router.post("", response_model=CategoryMutationResult, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    """
    Создать категорию.

    Args:
        payload: Данные формы (name)
        db: Сессия базы данных

    Returns:
        CategoryMutationResult: Подтверждение и созданная категория
    """
    category = Category(name=payload.name)
    db.add(category)
    db.commit()
    db.refresh(category)

    logger.info("Category %s created: %r", category.id, category.name)
    return CategoryMutationResult(
        message="Category added successfully!",
        category=CategoryOut.model_validate(category),
    )


@router.get("/{category_id}", response_model=CategoryDetail)
def get_category(category_id: int, db: Session = Depends(get_db)):
    """
    Получить категорию по ID.

    Raises:
        HTTPException: Если категория не найдена
    """
    category = get_category_or_404(db, category_id)
    products_count = db.scalar(
        select(func.count(Product.id)).where(Product.category_id == category.id)
    )
    detail = CategoryDetail.model_validate(category)
    detail.products_count = products_count or 0
    return detail


@router.put("/{category_id}", response_model=CategoryMutationResult)
def update_category(
    category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)
):
    """
    Обновить категорию.

    Повторное обновление теми же данными не меняет запись.

    Raises:
        HTTPException: Если категория не найдена
    """
    category = get_category_or_404(db, category_id)
    category.name = payload.name
    db.commit()
    db.refresh(category)

    logger.info("Category %s updated", category.id)
    return CategoryMutationResult(
        message="Category updated successfully!",
        category=CategoryOut.model_validate(category),
    )


@router.delete("/{category_id}", response_model=MessageOut)
def delete_category(
    category_id: int,
    confirm: bool = Query(False, description="Подтверждение удаления"),
    db: Session = Depends(get_db),
):
    """
    Удалить категорию вместе с ее товарами.

    Требует явного подтверждения (confirm=true).

    Raises:
        HTTPException: Если категория не найдена или удаление не подтверждено
    """
    category = get_category_or_404(db, category_id)
    if not confirm:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Deletion must be confirmed with confirm=true",
        )

    db.delete(category)
    db.commit()

    logger.info("Category %s deleted with its products", category_id)
    return MessageOut(message="Category deleted successfully!")
