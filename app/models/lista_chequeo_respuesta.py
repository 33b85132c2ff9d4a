"""ListaChequeoRespuesta model — answer to one item for one contract record."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class ListaChequeoRespuesta(Base):
    """Tri-state answer plus free-text observations.

    At most one row exists per (registro, item); writers look the row up
    before inserting and the unique constraint backs that up.

    Attributes:
        id: Primary key.
        registro_id: FK to ListaChequeoRegistro.
        item_id: FK to ListaChequeoItem.
        respuesta: "CUMPLE", "NO_CUMPLE", "NO_APLICA" or NULL (unset).
        observaciones: Free-text notes.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "lista_chequeo_respuestas"
    __table_args__ = (
        UniqueConstraint("registro_id", "item_id", name="uq_respuesta_registro_item"),
        CheckConstraint(
            "respuesta IS NULL OR respuesta IN ('CUMPLE', 'NO_CUMPLE', 'NO_APLICA')",
            name="ck_respuesta_valor",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    registro_id = Column(Integer, ForeignKey("lista_chequeo_registros.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("lista_chequeo_items.id"), nullable=False)
    respuesta = Column(String(20), nullable=True)
    observaciones = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    registro = relationship("ListaChequeoRegistro", back_populates="respuestas", lazy="select")
    item = relationship("ListaChequeoItem", lazy="select")
