"""Domain exceptions raised by the checklist services.

Routers translate these into ``HTTPException`` responses; the messages are
meant for logs, not for end users.
"""

from __future__ import annotations


class ListaChequeoError(Exception):
    """Base class for checklist export errors."""


class AlmacenDatosError(ListaChequeoError):
    """A data-store read or write failed. Retryable at the request level."""


class RegistroNoEncontradoError(ListaChequeoError):
    """The requested contract record does not exist."""

    def __init__(self, registro_id: int) -> None:
        super().__init__(f"Registro {registro_id} no encontrado.")
        self.registro_id = registro_id


class CategoriaDesconocidaError(ListaChequeoError):
    """A category name does not belong to the known checklist categories."""

    def __init__(self, categoria: str) -> None:
        super().__init__(f"Categoría '{categoria}' no reconocida.")
        self.categoria = categoria


class ExportacionError(ListaChequeoError):
    """Every export strategy failed for the current request."""
