"""SQLAlchemy models package for the checklist dashboard.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
The import order follows the foreign-key dependency graph so that parent
tables are always registered before their children.

Usage from other modules:
    from app.models import ListaChequeoItem, ListaChequeoRespuesta
"""

# Reference data
from app.models.lista_chequeo_categoria import ListaChequeoCategoria  # noqa: F401
from app.models.lista_chequeo_etapa import ListaChequeoEtapa  # noqa: F401
from app.models.lista_chequeo_item import ListaChequeoItem  # noqa: F401

# Audited contracts and their answers
from app.models.lista_chequeo_registro import ListaChequeoRegistro  # noqa: F401
from app.models.lista_chequeo_respuesta import ListaChequeoRespuesta  # noqa: F401

__all__ = [
    "ListaChequeoCategoria",
    "ListaChequeoEtapa",
    "ListaChequeoItem",
    "ListaChequeoRegistro",
    "ListaChequeoRespuesta",
]
