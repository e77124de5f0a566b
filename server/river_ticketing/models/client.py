"""Client model definition."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Client(Base):
    """Passenger or buyer, identified by national id (DNI)."""

    __tablename__ = "clients"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    dni: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    nationality: Mapped[str] = mapped_column(String(60), nullable=False, default="Peruana")

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(dni) > 0", name="ck_client_dni_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, dni='{self.dni}', name='{self.first_name} {self.last_name}')>"
