"""
Pydantic v2 schemas for the checklist endpoints.

Request bodies for the multi-category export and for saving one answer,
the saved-answer response, and the shared tri-state answer enumeration.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RespuestaItem(str, Enum):
    """Tri-state checklist answer as stored in ``lista_chequeo_respuestas``."""

    CUMPLE = "CUMPLE"
    NO_CUMPLE = "NO_CUMPLE"
    NO_APLICA = "NO_APLICA"


class ContratoInfo(BaseModel):
    """Contract header data printed at the top of every exported sheet.

    Attributes:
        numero_contrato: Contract number, also used in the download filename.
        contratista: Contractor name.
        valor_contrato: Contract value in pesos.
        objeto: Contract object.
        dependencia: Owning municipal area code.
    """

    numero_contrato: str = Field(..., min_length=1, max_length=100)
    contratista: str = Field(..., min_length=1, max_length=300)
    valor_contrato: float | None = Field(default=None, ge=0)
    objeto: str | None = Field(default=None, max_length=1000)
    dependencia: str | None = Field(default=None, max_length=100)


class RespuestaEntrada(BaseModel):
    """One answer supplied directly in an export request.

    Either ``item_id`` or ``numero_item`` identifies the checklist item.
    """

    item_id: int | None = Field(default=None, ge=1)
    numero_item: int | None = Field(default=None, ge=1)
    respuesta: RespuestaItem | None = None
    observaciones: str | None = None

    @model_validator(mode="after")
    def _requiere_identificador(self) -> "RespuestaEntrada":
        if self.item_id is None and self.numero_item is None:
            raise ValueError("Se requiere item_id o numero_item.")
        return self


class ExportMultipleRequest(BaseModel):
    """Body of ``POST /api/lista-chequeo/exportar-multiple``.

    Attributes:
        contrato: Header data of the contract being exported.
        apartados: Category name → answers for that category's sheet.
    """

    contrato: ContratoInfo
    apartados: dict[str, list[RespuestaEntrada]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Saving answers
# ---------------------------------------------------------------------------


class RespuestaGuardar(BaseModel):
    """Body of ``PUT /registros/{registro_id}/respuestas/{item_id}``.

    A ``null`` answer clears the mark and keeps only the observations.
    """

    respuesta: RespuestaItem | None = None
    observaciones: str | None = Field(default=None, max_length=2000)


class RespuestaGuardadaResponse(BaseModel):
    """Stored answer of one item for one contract record."""

    id: int
    registro_id: int
    item_id: int
    respuesta: RespuestaItem | None = None
    observaciones: str | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
