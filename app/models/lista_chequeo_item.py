"""ListaChequeoItem model — one checklist question within a category."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class ListaChequeoItem(Base):
    """A single checklist question numbered within its category.

    Attributes:
        id: Primary key.
        numero_item: Category-scoped logical item number.
        titulo: Question text as printed on the regulator form.
        descripcion: Optional extended description.
        etapa_id: FK to ListaChequeoEtapa.
        categoria_id: FK to ListaChequeoCategoria.
        fila_excel: Template row for this item. Authoritative when present;
            the static positional table is used only when it is NULL.
        activo: Soft-delete flag.
    """

    __tablename__ = "lista_chequeo_items"
    __table_args__ = (
        UniqueConstraint("categoria_id", "numero_item", name="uq_item_categoria_numero"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    numero_item = Column(Integer, nullable=False)
    titulo = Column(String(500), nullable=False)
    descripcion = Column(Text, nullable=True)
    etapa_id = Column(Integer, ForeignKey("lista_chequeo_etapas.id"), nullable=False)
    categoria_id = Column(Integer, ForeignKey("lista_chequeo_categorias.id"), nullable=False)
    fila_excel = Column(Integer, nullable=True)
    activo = Column(Boolean, default=True, nullable=False)

    # Relationships
    etapa = relationship("ListaChequeoEtapa", back_populates="items", lazy="joined")
    categoria = relationship("ListaChequeoCategoria", back_populates="items", lazy="select")
