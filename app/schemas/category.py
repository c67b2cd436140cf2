"""
Схемы для категорий товаров.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def strip_text(value: Any) -> Any:
    """Обрезать пробелы у строковых значений формы."""
    if isinstance(value, str):
        return value.strip()
    return value


class CategoryBase(BaseModel):
    """Базовая схема категории."""

    name: str = Field(..., min_length=1, max_length=255, description="Название категории")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return strip_text(value)


class CategoryCreate(CategoryBase):
    """Схема для создания категории."""


class CategoryUpdate(CategoryBase):
    """Схема для обновления категории."""


class CategoryBrief(BaseModel):
    """Краткая информация о категории (для вложения в товар)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CategoryOut(CategoryBrief):
    """Схема для вывода категории."""

    created_at: datetime
    updated_at: datetime


class CategoryDetail(CategoryOut):
    """Категория с количеством товаров."""

    products_count: int = 0


class CategoryMutationResult(BaseModel):
    """Результат создания/обновления категории."""

    message: str
    category: CategoryOut
