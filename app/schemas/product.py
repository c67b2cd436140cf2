from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.category import CategoryBrief, strip_text


class ProductBase(BaseModel):
    """Базовая схема товара (поля формы)."""

    name: str = Field(..., min_length=1, max_length=255, description="Название товара")
    description: Optional[str] = Field(None, description="Описание товара")
    price: Decimal = Field(..., max_digits=8, decimal_places=2, description="Цена")
    category_id: int = Field(..., description="ID существующей категории")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return strip_text(value)

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description_to_none(cls, value: Any) -> Any:
        value = strip_text(value)
        return value or None


class ProductCreate(ProductBase):
    """Схема для создания товара."""


class ProductUpdate(ProductBase):
    """Схема для обновления товара (полная замена полей формы)."""


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: Decimal
    category_id: int
    category: Optional[CategoryBrief] = None
    created_at: datetime
    updated_at: datetime


class ProductMutationResult(BaseModel):
    """Результат создания/обновления товара."""

    message: str
    product: ProductOut
