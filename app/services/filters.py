"""
Описатели фильтров и их компиляция в SQLAlchemy запрос.

Фильтры описываются явным упорядоченным списком (EqualityFilter,
SubstringOrFilter), не зависящим от хранилища. compile_filters сворачивает
список в WHERE: между фильтрами AND, внутри SubstringOrFilter — OR.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple, Union

from sqlalchemy import Numeric, Select, String, and_, cast, false, or_
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.functions import FunctionElement


@dataclass(frozen=True)
class EqualityFilter:
    """Точное совпадение значения поля."""

    field: str
    value: Any


@dataclass(frozen=True)
class SubstringOrFilter:
    """Регистронезависимое вхождение подстроки хотя бы в одно из полей."""

    fields: Tuple[str, ...]
    term: str


FilterSpec = Union[EqualityFilter, SubstringOrFilter]


class decimal_text(FunctionElement):
    """Число как текст с фиксированным количеством знаков после запятой."""

    type = String()
    name = "decimal_text"
    inherit_cache = True


def _decimal_column(element: decimal_text) -> ColumnElement:
    (column,) = element.clauses
    return column


@compiles(decimal_text)
def _compile_decimal_text(element, compiler, **kw):
    # NUMERIC(p, s) приводится к тексту с s знаками (599.00) в PostgreSQL
    return compiler.process(cast(_decimal_column(element), String), **kw)


@compiles(decimal_text, "sqlite")
def _compile_decimal_text_sqlite(element, compiler, **kw):
    # SQLite хранит 599.00 как 599, знаки после запятой восстанавливает printf
    column = _decimal_column(element)
    scale = getattr(column.type, "scale", None) or 0
    return "printf('%%.%df', %s)" % (scale, compiler.process(column, **kw))


def _as_text(column: ColumnElement) -> ColumnElement:
    if isinstance(column.type, String):
        return column
    if isinstance(column.type, Numeric) and column.type.scale:
        return decimal_text(column)
    return cast(column, String)


def _equality_clause(column: ColumnElement, value: Any) -> ColumnElement:
    # Значение, не приводимое к типу колонки, не совпадает ни с одной строкой
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return column == value
    if value is not None and not isinstance(value, python_type):
        try:
            value = python_type(value)
        except (TypeError, ValueError, ArithmeticError):
            return false()
    return column == value


def compile_filter(spec: FilterSpec, field_map: Mapping[str, ColumnElement]) -> ColumnElement:
    """
    Скомпилировать один описатель фильтра в SQL выражение.

    Args:
        spec: Описатель фильтра
        field_map: Соответствие имен полей колонкам запроса

    Returns:
        ColumnElement: Условие для WHERE

    Raises:
        KeyError: Если поле не объявлено в field_map
        TypeError: Для неизвестного типа описателя
    """
    if isinstance(spec, EqualityFilter):
        return _equality_clause(field_map[spec.field], spec.value)
    if isinstance(spec, SubstringOrFilter):
        return or_(
            *(
                _as_text(field_map[name]).icontains(spec.term, autoescape=True)
                for name in spec.fields
            )
        )
    raise TypeError(f"Unsupported filter: {spec!r}")


def compile_filters(
    stmt: Select,
    filters: Sequence[FilterSpec],
    field_map: Mapping[str, ColumnElement],
) -> Select:
    """
    Применить список фильтров к запросу.

    Пустой список возвращает запрос без изменений.
    """
    if not filters:
        return stmt
    return stmt.where(and_(*(compile_filter(spec, field_map) for spec in filters)))
