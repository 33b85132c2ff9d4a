"""
Lista de chequeo export router.

Mounts under ``/api/lista-chequeo`` (prefix set in ``main.py``).

Both endpoints build the complete ``.xlsx`` in memory and then stream it with
FastAPI's ``StreamingResponse``.  Handlers are plain ``def`` functions, so
FastAPI runs them on its worker thread pool and the blocking template
download never runs on the event loop.

Endpoints
---------
GET  /exportar/{registro_id}  — Export a stored contract record.
POST /exportar-multiple       — Export answers sent in the request body.

Every successful response carries ``Content-Disposition: attachment``,
``Content-Length`` and ``X-Export-Strategy`` (``PLANTILLA`` or ``BASICO``).
"""

from __future__ import annotations

import io
import logging
from typing import Annotated, Callable

from fastapi import APIRouter, Depends, HTTPException, Path, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.schemas.common import ErrorResponse
from app.schemas.lista_chequeo import ExportMultipleRequest
from app.services import exportacion_service
from app.services.errores import (
    AlmacenDatosError,
    CategoriaDesconocidaError,
    RegistroNoEncontradoError,
)
from app.services.exportacion_service import ResultadoExportacion, SelectorEstrategia
from app.services.plantilla_locator import PlantillaLocator
from app.utils.constants import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Lista de Chequeo"])

_MENSAJE_ALMACEN = "El almacén de datos no está disponible. Intente nuevamente."
_MENSAJE_EXPORTACION = "Error generando el archivo Excel."

_RESPONSES = {
    200: {
        "description": "Archivo Excel generado exitosamente.",
        "content": {XLSX_MEDIA_TYPE: {}},
    },
    500: {"model": ErrorResponse, "description": "Error generando el archivo."},
    503: {"model": ErrorResponse, "description": "Almacén de datos no disponible."},
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_locator() -> PlantillaLocator:
    """Template locator built from the current settings."""
    return PlantillaLocator(get_settings().plantilla_config())


def get_selector(
    locator: Annotated[PlantillaLocator, Depends(get_locator)],
) -> SelectorEstrategia:
    return SelectorEstrategia(
        locator,
        max_longitud_observaciones=get_settings().OBSERVACIONES_MAX_LONGITUD,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ejecutar(operacion: str, exportar: Callable[[], ResultadoExportacion]) -> ResultadoExportacion:
    """Run an export and translate domain errors into ``HTTPException``.

    Raises:
        HTTPException 404: Record not found.
        HTTPException 400: Unknown category in the request body.
        HTTPException 503: Data store failure.
        HTTPException 500: Any other failure.
    """
    try:
        return exportar()
    except RegistroNoEncontradoError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Registro {exc.registro_id} no encontrado.",
        ) from exc
    except CategoriaDesconocidaError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Categoría '{exc.categoria}' no soportada.",
        ) from exc
    except AlmacenDatosError as exc:
        logger.error("%s: data store unavailable: %s", operacion, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_MENSAJE_ALMACEN,
        ) from exc
    except Exception as exc:
        logger.exception("%s failed: %s", operacion, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_MENSAJE_EXPORTACION,
        ) from exc


def _respuesta_archivo(resultado: ResultadoExportacion) -> StreamingResponse:
    headers = {
        "Content-Disposition": f'attachment; filename="{resultado.nombre_archivo}"',
        "Content-Length": str(resultado.content_length),
        "X-Export-Strategy": resultado.estrategia.value,
    }
    return StreamingResponse(
        io.BytesIO(resultado.contenido),
        media_type=resultado.content_type,
        headers=headers,
    )


# ---------------------------------------------------------------------------
# GET /exportar/{registro_id}
# ---------------------------------------------------------------------------


@router.get(
    "/exportar/{registro_id}",
    summary="Exportar lista de chequeo de un registro (.xlsx)",
    description=(
        "Genera la lista de chequeo del contrato sobre la plantilla oficial. "
        "Si la plantilla no está disponible o falla, devuelve un libro básico "
        "con las mismas respuestas."
    ),
    response_class=StreamingResponse,
    responses={**_RESPONSES, 404: {"model": ErrorResponse, "description": "Registro no encontrado."}},
)
def exportar_registro(
    registro_id: Annotated[int, Path(description="ID del registro de lista de chequeo.", ge=1)],
    db: Annotated[Session, Depends(get_db)],
    selector: Annotated[SelectorEstrategia, Depends(get_selector)],
) -> StreamingResponse:
    """Stream the checklist workbook of a stored contract record.

    Args:
        registro_id: Contract record primary key.
        db: Database session.
        selector: Export strategy selector.

    Returns:
        A ``StreamingResponse`` with the ``.xlsx`` file attached.
    """
    logger.info("GET /lista-chequeo/exportar/%s", registro_id)
    resultado = _ejecutar(
        "exportar_registro",
        lambda: exportacion_service.exportar_registro(db, registro_id, selector),
    )
    return _respuesta_archivo(resultado)


# ---------------------------------------------------------------------------
# POST /exportar-multiple
# ---------------------------------------------------------------------------


@router.post(
    "/exportar-multiple",
    summary="Exportar varias categorías desde el cuerpo de la solicitud (.xlsx)",
    description=(
        "Recibe los datos del contrato y las respuestas por categoría "
        "(SAMC, MINIMA CUANTÍA, CONTRATO INTERADMINISTRATIVO, PRESTACIÓN DE "
        "SERVICIOS) y devuelve un único libro con una hoja por categoría."
    ),
    response_class=StreamingResponse,
    responses={**_RESPONSES, 400: {"model": ErrorResponse, "description": "Categoría no válida."}},
)
def exportar_multiple(
    solicitud: ExportMultipleRequest,
    db: Annotated[Session, Depends(get_db)],
    selector: Annotated[SelectorEstrategia, Depends(get_selector)],
) -> StreamingResponse:
    """Stream a workbook built from answers supplied in the body.

    Args:
        solicitud: Contract info and answers per category.
        db: Database session.
        selector: Export strategy selector.

    Returns:
        A ``StreamingResponse`` with the ``.xlsx`` file attached.
    """
    logger.info(
        "POST /lista-chequeo/exportar-multiple contrato=%s categorias=%s",
        solicitud.contrato.numero_contrato, sorted(solicitud.apartados),
    )
    resultado = _ejecutar(
        "exportar_multiple",
        lambda: exportacion_service.exportar_solicitud(db, solicitud, selector),
    )
    return _respuesta_archivo(resultado)
