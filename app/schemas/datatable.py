"""
Схемы протокола серверной таблицы (DataTables server-side processing).

Запрос разбирается из query string явным образом в DataTableRequest,
ответ сериализуется в формат, который ожидает виджет таблицы:
draw, recordsTotal, recordsFiltered, data.
"""

import re
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# length=-1 или length=0 означает "все строки"
SHOW_ALL_LENGTHS = (-1, 0)

_ORDER_KEY = re.compile(r"^order\[(\d+)\]\[(column|dir)\]$")
_SEARCH_KEYS = ("search[value]", "search.value", "search")

# Предел BIGINT: большие start/length не доходят до БД
MAX_ROW_NUMBER = 2**63 - 1

RowOperation = Literal["view", "edit", "delete"]


def _parse_int(raw: Optional[str], default: Optional[int]) -> Optional[int]:
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def _blank_to_none(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    raw = str(raw).strip()
    return raw or None


class OrderSpec(BaseModel):
    """Запрошенная сортировка: индекс колонки и направление."""

    column: int
    dir: Literal["asc", "desc"] = "asc"


class DataTableRequest(BaseModel):
    """
    Параметры запроса таблицы товаров.

    Attributes:
        draw: Счетчик запросов клиента, возвращается без изменений
        start: Смещение первой строки страницы
        length: Размер страницы (None — без пагинации)
        search_term: Строка глобального поиска
        category_id: Фильтр по категории (сравнивается как есть)
        order: Запрошенная сортировка по колонкам
    """

    draw: Union[int, str] = 0
    start: int = Field(0, ge=0, le=MAX_ROW_NUMBER)
    length: Optional[int] = Field(10, ge=1, le=MAX_ROW_NUMBER)
    search_term: Optional[str] = None
    category_id: Optional[str] = None
    order: List[OrderSpec] = Field(default_factory=list)

    @property
    def paginated(self) -> bool:
        return self.length is not None

    @classmethod
    def from_query_params(
        cls, params: Mapping[str, Any], default_length: int = 10
    ) -> "DataTableRequest":
        """
        Разобрать параметры DataTables из query string.

        Некорректные числовые значения заменяются значениями по умолчанию,
        строки фильтров обрезаются, пустые означают отсутствие фильтра.
        start и length ограничены MAX_ROW_NUMBER.

        Args:
            params: Параметры запроса (например, request.query_params)
            default_length: Размер страницы, если length не передан

        Returns:
            DataTableRequest: Типизированные параметры запроса
        """
        raw_draw = params.get("draw")
        draw: Union[int, str] = 0
        if raw_draw is not None:
            draw = _parse_int(raw_draw, None)
            if draw is None:
                draw = str(raw_draw)

        start = min(max(_parse_int(params.get("start"), 0), 0), MAX_ROW_NUMBER)

        length: Optional[int] = _parse_int(params.get("length"), default_length)
        if length in SHOW_ALL_LENGTHS:
            length = None
        elif length < 0:
            length = default_length
        else:
            length = min(length, MAX_ROW_NUMBER)

        search_term = None
        for key in _SEARCH_KEYS:
            search_term = _blank_to_none(params.get(key))
            if search_term is not None:
                break

        category_id = _blank_to_none(params.get("category_id"))

        order_parts: dict = {}
        for key in params.keys():
            match = _ORDER_KEY.match(key)
            if match:
                index, part = int(match.group(1)), match.group(2)
                order_parts.setdefault(index, {})[part] = params.get(key)

        order: List[OrderSpec] = []
        for index in sorted(order_parts):
            part = order_parts[index]
            column = _parse_int(part.get("column"), None)
            if column is None:
                continue
            direction = str(part.get("dir") or "asc").lower()
            order.append(
                OrderSpec(column=column, dir="desc" if direction == "desc" else "asc")
            )

        return cls(
            draw=draw,
            start=start,
            length=length,
            search_term=search_term,
            category_id=category_id,
            order=order,
        )


class RowAction(BaseModel):
    """Операция над строкой таблицы (отрисовка — забота интерфейса)."""

    operation: RowOperation
    id: int


class ProductRow(BaseModel):
    """Строка таблицы товаров."""

    id: int
    name: str
    description: Optional[str] = None
    price: str
    category_id: Optional[int] = None
    category: str
    actions: List[RowAction]


class DataTableResponse(BaseModel):
    """Ответ таблицы товаров."""

    model_config = ConfigDict(populate_by_name=True)

    draw: Union[int, str]
    records_total: int = Field(..., alias="recordsTotal")
    records_filtered: int = Field(..., alias="recordsFiltered")
    data: List[ProductRow]


class DataTableError(BaseModel):
    """Ответ при невозможности получить данные."""

    draw: Union[int, str]
    error: str
