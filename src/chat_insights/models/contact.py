# src/chat_insights/models/contact.py
"""SQLAlchemy model for the client directory."""

from sqlalchemy import BigInteger, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from chat_insights.db.session import Base


class ClientContact(Base):
    """Known client, keyed by the phone number used as chat session id."""

    __tablename__ = "IA_CLIENTE"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    telefone: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    nome: Mapped[str | None] = mapped_column(Text, nullable=True)
