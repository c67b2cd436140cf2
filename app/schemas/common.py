"""
Общие схемы ответов.
"""

from pydantic import BaseModel


class MessageOut(BaseModel):
    """Короткое подтверждение выполненной операции."""

    message: str
