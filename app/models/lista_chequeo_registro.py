"""ListaChequeoRegistro model — the audited contract."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class ListaChequeoRegistro(Base):
    """Contract record under audit; owns every response of its checklist.

    Attributes:
        id: Primary key.
        dependencia: Owning municipal area code, e.g. "planeacion".
        categoria_id: FK to ListaChequeoCategoria.
        numero_contrato: Contract number as printed on the export header.
        contratista: Contractor name.
        valor_contrato: Contract value in pesos.
        objeto: Contract object (free text).
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "lista_chequeo_registros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dependencia = Column(String(100), nullable=True)
    categoria_id = Column(Integer, ForeignKey("lista_chequeo_categorias.id"), nullable=True)
    numero_contrato = Column(String(100), nullable=False)
    contratista = Column(String(300), nullable=False)
    valor_contrato = Column(Numeric(18, 2), nullable=True)
    objeto = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    categoria = relationship("ListaChequeoCategoria", back_populates="registros", lazy="joined")
    respuestas = relationship(
        "ListaChequeoRespuesta",
        back_populates="registro",
        lazy="select",
        cascade="all, delete-orphan",
    )
