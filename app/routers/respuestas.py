"""
Lista de chequeo answers router.

Mounts under ``/api/lista-chequeo`` (prefix set in ``main.py``).

Endpoints
---------
PUT /registros/{registro_id}/respuestas/{item_id}  — Save one item's answer.

The write looks the stored answer up first, so a record keeps at most one
answer per item no matter how often the form is saved.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import ErrorResponse
from app.schemas.lista_chequeo import RespuestaGuardadaResponse, RespuestaGuardar
from app.services import lista_chequeo_service
from app.services.errores import AlmacenDatosError, RegistroNoEncontradoError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Lista de Chequeo"])


@router.put(
    "/registros/{registro_id}/respuestas/{item_id}",
    response_model=RespuestaGuardadaResponse,
    summary="Guardar la respuesta de un ítem",
    description=(
        "Crea o actualiza la respuesta (CUMPLE, NO_CUMPLE, NO_APLICA o null) "
        "y las observaciones de un ítem para el registro indicado."
    ),
    responses={
        200: {"description": "Respuesta guardada exitosamente."},
        400: {"model": ErrorResponse, "description": "Ítem inexistente o de otra categoría."},
        404: {"model": ErrorResponse, "description": "Registro no encontrado."},
        503: {"model": ErrorResponse, "description": "Almacén de datos no disponible."},
    },
)
def guardar_respuesta(
    registro_id: Annotated[int, Path(description="ID del registro de lista de chequeo.", ge=1)],
    item_id: Annotated[int, Path(description="ID del ítem de la lista de chequeo.", ge=1)],
    data: RespuestaGuardar,
    db: Annotated[Session, Depends(get_db)],
) -> RespuestaGuardadaResponse:
    """Create or update the answer of ``item_id`` for a contract record.

    Raises:
        HTTPException 404: Record not found.
        HTTPException 400: Unknown item, or item of another category.
        HTTPException 503: Data store failure.
    """
    logger.info("PUT /lista-chequeo/registros/%d/respuestas/%d", registro_id, item_id)
    try:
        respuesta = lista_chequeo_service.guardar_respuesta(
            db,
            registro_id,
            item_id,
            data.respuesta.value if data.respuesta is not None else None,
            data.observaciones,
        )
    except RegistroNoEncontradoError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Registro {exc.registro_id} no encontrado.",
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AlmacenDatosError as exc:
        logger.error("guardar_respuesta: data store unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="El almacén de datos no está disponible. Intente nuevamente.",
        ) from exc
    return RespuestaGuardadaResponse.model_validate(respuesta)
