"""
Сервис серверной таблицы товаров.

Строит запрос товаров с категориями, применяет фильтр по категории и
глобальный поиск, считает количество строк до и после фильтрации,
сортирует, режет страницу и формирует строки ответа.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, contains_eager

from app.db.models import Category, Product
from app.schemas.datatable import DataTableRequest, DataTableResponse, ProductRow, RowAction
from app.services.filters import EqualityFilter, FilterSpec, SubstringOrFilter, compile_filters

logger = logging.getLogger(__name__)

PLACEHOLDER_CATEGORY = "-"
ROW_OPERATIONS = ("view", "edit", "delete")
SEARCH_FIELDS = ("name", "description", "price", "category.name")

# Поля, доступные фильтрам
FIELD_MAP = {
    "category_id": Product.category_id,
    "name": Product.name,
    "description": Product.description,
    "price": Product.price,
    "category.name": Category.name,
}


@dataclass(frozen=True)
class ColumnSpec:
    """Колонка таблицы в порядке, в котором ее объявляет клиент."""

    data: str
    orderable: bool
    searchable: bool


COLUMNS = (
    ColumnSpec("id", orderable=False, searchable=False),
    ColumnSpec("name", orderable=True, searchable=True),
    ColumnSpec("description", orderable=True, searchable=True),
    ColumnSpec("price", orderable=True, searchable=True),
    ColumnSpec("category", orderable=False, searchable=True),
    ColumnSpec("actions", orderable=False, searchable=False),
)

ORDER_COLUMNS = {
    "name": Product.name,
    "description": Product.description,
    "price": Product.price,
}


def base_query() -> Select:
    """Товары вместе с категорией одним запросом (без N+1)."""
    return (
        select(Product)
        .outerjoin(Product.category)
        .options(contains_eager(Product.category))
    )


def build_product_filters(params: DataTableRequest) -> List[FilterSpec]:
    """
    Собрать упорядоченный список фильтров из параметров запроса.

    Сначала фильтр по категории, затем глобальный поиск.
    Отсутствующий или пустой параметр фильтр не добавляет.
    """
    filters: List[FilterSpec] = []
    if params.category_id:
        filters.append(EqualityFilter("category_id", params.category_id))
    if params.search_term:
        filters.append(SubstringOrFilter(SEARCH_FIELDS, params.search_term))
    return filters


def apply_ordering(stmt: Select, params: DataTableRequest) -> Select:
    """
    Применить сортировку по объявленным сортируемым колонкам.

    Запросы на несортируемые или неизвестные колонки игнорируются.
    Последним ключом всегда идет id, чтобы страницы не пересекались.
    """
    clauses = []
    for spec in params.order:
        if not 0 <= spec.column < len(COLUMNS):
            continue
        column = COLUMNS[spec.column]
        if not column.orderable or column.data not in ORDER_COLUMNS:
            continue
        target = ORDER_COLUMNS[column.data]
        clauses.append(target.desc() if spec.dir == "desc" else target.asc())
    clauses.append(Product.id.asc())
    return stmt.order_by(*clauses)


def apply_paging(stmt: Select, params: DataTableRequest) -> Select:
    """Отрезать страницу; без length возвращаются все строки."""
    if params.start:
        stmt = stmt.offset(params.start)
    if params.paginated:
        stmt = stmt.limit(params.length)
    return stmt


def count_rows(db: Session, filters: Sequence[FilterSpec]) -> int:
    """Количество товаров, прошедших фильтры (до пагинации)."""
    count_stmt = (
        select(func.count(Product.id))
        .select_from(Product)
        .outerjoin(Product.category)
    )
    return db.scalar(compile_filters(count_stmt, filters, FIELD_MAP)) or 0


def format_price(price: Optional[Decimal]) -> str:
    if price is None:
        return ""
    return f"{Decimal(price):.2f}"


def format_product_row(product: Product) -> ProductRow:
    """
    Сформировать строку ответа из товара.

    Args:
        product: Товар с загруженной категорией

    Returns:
        ProductRow: Плоская запись с названием категории и операциями
    """
    category_name = product.category.name if product.category is not None else None
    return ProductRow(
        id=product.id,
        name=product.name,
        description=product.description,
        price=format_price(product.price),
        category_id=product.category_id,
        category=category_name or PLACEHOLDER_CATEGORY,
        actions=[RowAction(operation=op, id=product.id) for op in ROW_OPERATIONS],
    )


def fetch_product_page(db: Session, params: DataTableRequest) -> DataTableResponse:
    """
    Получить страницу таблицы товаров.

    Ошибки хранилища (SQLAlchemyError) не перехватываются: частичная
    страница не формируется, решение об ответе принимает вызывающий.

    Args:
        db: Сессия базы данных
        params: Параметры запроса таблицы

    Returns:
        DataTableResponse: draw, recordsTotal, recordsFiltered и строки страницы
    """
    records_total = db.scalar(select(func.count()).select_from(Product)) or 0

    filters = build_product_filters(params)
    records_filtered = count_rows(db, filters) if filters else records_total

    stmt = compile_filters(base_query(), filters, FIELD_MAP)
    stmt = apply_paging(apply_ordering(stmt, params), params)
    products = db.scalars(stmt).all()

    logger.debug(
        "Product table draw=%s: total=%d filtered=%d returned=%d",
        params.draw,
        records_total,
        records_filtered,
        len(products),
    )

    return DataTableResponse(
        draw=params.draw,
        records_total=records_total,
        records_filtered=records_filtered,
        data=[format_product_row(product) for product in products],
    )


def column_declarations() -> List[Dict[str, object]]:
    """Объявления колонок для клиента таблицы."""
    return [
        {"data": column.data, "orderable": column.orderable, "searchable": column.searchable}
        for column in COLUMNS
    ]
