"""Car entity mapped to the ``car`` table."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from autorest.infrastructure.database.base import BaseModel


class Car(BaseModel):
    __tablename__ = "car"

    make: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __str__(self) -> str:
        return f"{self.make} {self.model} {self.year} {self.color}"

    def __repr__(self) -> str:
        return f"<Car(id={self.id}, make={self.make!r}, model={self.model!r})>"
