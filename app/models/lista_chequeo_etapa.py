"""ListaChequeoEtapa model — phase grouping of checklist items."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class ListaChequeoEtapa(Base):
    """Checklist stage: PRECONTRACTUAL, CONTRACTUAL, EJECUCION, CIERRE, ADICION.

    Used for grouping and ordering only; it plays no part in cell mapping.
    """

    __tablename__ = "lista_chequeo_etapas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(50), unique=True, nullable=False)
    orden = Column(Integer, default=0, nullable=False)

    items = relationship("ListaChequeoItem", back_populates="etapa", lazy="select")
