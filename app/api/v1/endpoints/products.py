"""
API endpoints для работы с товарами.

Содержит CRUD операции для товаров и серверную таблицу
с поиском, фильтром по категории, сортировкой и пагинацией.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.db.database import get_db
from app.db.models import Category, Product
from app.schemas.common import MessageOut
from app.schemas.datatable import DataTableError, DataTableRequest, DataTableResponse
from app.schemas.product import (
    ProductBase,
    ProductCreate,
    ProductMutationResult,
    ProductOut,
    ProductUpdate,
)
from app.services.product_table import column_declarations, fetch_product_page

logger = logging.getLogger(__name__)

router = APIRouter()


def get_product_or_404(db: Session, product_id: int) -> Product:
    """Найти товар по ID (вместе с категорией) или вернуть 404."""
    product = db.scalar(
        select(Product)
        .where(Product.id == product_id)
        .options(selectinload(Product.category))
    )
    if not product:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def ensure_category_exists(db: Session, payload: ProductBase) -> None:
    """
    Проверить, что выбранная категория существует.

    Ошибка возвращается в формате ошибок валидации FastAPI (422),
    до записи в БД.
    """
    if db.get(Category, payload.category_id) is None:
        raise HTTPException(
            422,
            detail=[
                {
                    "type": "category_not_found",
                    "loc": ["body", "category_id"],
                    "msg": "The selected category id is invalid.",
                    "input": payload.category_id,
                }
            ],
        )


@router.get(
    "/data",
    response_model=DataTableResponse,
    responses={503: {"model": DataTableError}},
)
def products_data(request: Request, db: Session = Depends(get_db)):
    """
    Данные серверной таблицы товаров.

    Поддерживает:
    - Фильтр по категории (category_id)
    - Глобальный поиск (search[value]) по названию, описанию, цене и категории
    - Сортировку по name, description, price (order[i][column], order[i][dir])
    - Пагинацию (start, length; length=-1 или 0 — все строки)

    Args:
        request: HTTP запрос (источник query string)
        db: Сессия базы данных

    Returns:
        DataTableResponse: draw, recordsTotal, recordsFiltered, data
    """
    params = DataTableRequest.from_query_params(
        request.query_params, default_length=settings.DATATABLE_DEFAULT_LENGTH
    )
    try:
        return fetch_product_page(db, params)
    except SQLAlchemyError:
        logger.exception("Failed to fetch product table data (draw=%s)", params.draw)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=DataTableError(
                draw=params.draw, error="Failed to fetch products"
            ).model_dump(),
        )


@router.get("/columns", response_model=List[Dict[str, object]])
def products_columns():
    """Объявления колонок таблицы товаров (сортировка/поиск)."""
    return column_declarations()


@router.post("", response_model=ProductMutationResult, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    """
    Создать товар в существующей категории.

    Args:
        payload: Данные формы (name, description, price, category_id)
        db: Сессия базы данных

    Returns:
        ProductMutationResult: Подтверждение и созданный товар

    Raises:
        HTTPException: Если категория не существует
    """
    ensure_category_exists(db, payload)

    product = Product(**payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info("Product %s created in category %s", product.id, product.category_id)
    return ProductMutationResult(
        message="Product added successfully!",
        product=ProductOut.model_validate(product),
    )


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    """
    Получить товар по ID вместе с категорией.

    Raises:
        HTTPException: Если товар не найден
    """
    return get_product_or_404(db, product_id)


@router.put("/{product_id}", response_model=ProductMutationResult)
def update_product(
    product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)
):
    """
    Обновить товар.

    Raises:
        HTTPException: Если товар или категория не найдены
    """
    product = get_product_or_404(db, product_id)
    ensure_category_exists(db, payload)

    for field, value in payload.model_dump().items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)

    logger.info("Product %s updated", product.id)
    return ProductMutationResult(
        message="Product updated successfully!",
        product=ProductOut.model_validate(product),
    )


@router.delete("/{product_id}", response_model=MessageOut)
def delete_product(
    product_id: int,
    confirm: bool = Query(False, description="Подтверждение удаления"),
    db: Session = Depends(get_db),
):
    """
    Удалить товар.

    Требует явного подтверждения (confirm=true).
    """
    product = get_product_or_404(db, product_id)
    if not confirm:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Deletion must be confirmed with confirm=true",
        )

    db.delete(product)
    db.commit()

    logger.info("Product %s deleted", product_id)
    return MessageOut(message="Product deleted successfully!")
