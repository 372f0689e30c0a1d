from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from autorest.infrastructure.database.base import BaseModel


class Cat(BaseModel):
    __tablename__ = "cat"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Cat(id={self.id}, name={self.name!r})>"
