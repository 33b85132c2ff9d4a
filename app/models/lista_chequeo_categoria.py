"""ListaChequeoCategoria model — contract type that selects a template sheet."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class ListaChequeoCategoria(Base):
    """Contract category (SAMC, MÍNIMA CUANTÍA, ...).

    Reference data provisioned once by ``seed_lista_chequeo.py``. The
    ``hoja_excel`` value names the template worksheet that holds the
    category's checklist.

    Attributes:
        id: Primary key.
        nombre: Unique category name, e.g. "SAMC".
        descripcion: Long-form name of the contracting modality.
        hoja_excel: Worksheet title in the official template.
        orden: Display order.
        activo: Soft-delete flag.
        created_at: Record creation timestamp.
    """

    __tablename__ = "lista_chequeo_categorias"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(100), unique=True, nullable=False)
    descripcion = Column(Text, nullable=True)
    hoja_excel = Column(String(50), nullable=False)
    orden = Column(Integer, default=0, nullable=False)
    activo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    items = relationship(
        "ListaChequeoItem",
        back_populates="categoria",
        order_by="ListaChequeoItem.numero_item",
        lazy="select",
    )
    registros = relationship(
        "ListaChequeoRegistro", back_populates="categoria", lazy="select"
    )
