"""
Checklist data aggregation service.

Loads categories, items and responses for one contract record and turns them
into the ordered, row-resolved answer set that the export writers consume.
All database access for the export endpoints lives here.

Public API
----------
- ``get_registro`` / ``get_categoria_por_nombre`` / ``list_items_por_categoria``
  / ``list_respuestas_por_registro`` — the three data-store reads plus the
  record lookup.
- ``unir_items_respuestas`` — pure left join of items to responses.
- ``agregar_categoria`` / ``agregar_registro`` — aggregation from stored data.
- ``agregar_desde_solicitud`` — aggregation from answers sent in a request body.
- ``guardar_respuesta`` — lookup-before-write upsert of a single answer.

Design notes
------------
- Every ``SQLAlchemyError`` is re-raised as ``AlmacenDatosError`` so routers
  can map it to a retryable 5xx without leaking driver messages.
- Row resolution order: the item's ``fila_excel``, then the positional table
  of the SAME category, then ``None``.  Items without a row stay in the
  result (the synthetic sheet still lists them); the template writer skips
  them.
- The reads share one ``Session`` and therefore run sequentially; a session
  is not safe to use from several threads at once.
- Responses pointing at items outside the category's item list are ignored.
  Reads are not transactional across tables, so such rows can legitimately
  appear while reference data is being edited.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.lista_chequeo_categoria import ListaChequeoCategoria
from app.models.lista_chequeo_item import ListaChequeoItem
from app.models.lista_chequeo_registro import ListaChequeoRegistro
from app.models.lista_chequeo_respuesta import ListaChequeoRespuesta
from app.schemas.lista_chequeo import ContratoInfo, ExportMultipleRequest, RespuestaEntrada
from app.services.errores import AlmacenDatosError, CategoriaDesconocidaError, RegistroNoEncontradoError
from app.utils.constants import CATEGORIAS, RESPUESTAS
from app.utils.mapeo_posicional import fila_para_item

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ItemExportado:
    """One checklist item joined with its (possibly missing) response.

    Attributes:
        item_id: Primary key of the item, ``None`` for request-only items.
        numero_item: Category-scoped logical number.
        titulo: Question text.
        etapa: Stage name, used for grouping in the synthetic sheet.
        fila: Resolved template row, ``None`` when no source defines one.
        respuesta: "CUMPLE" / "NO_CUMPLE" / "NO_APLICA" or ``None``.
        observaciones: Raw observations text (normalised by the writer).
    """

    item_id: int | None
    numero_item: int
    titulo: str
    etapa: str | None
    fila: int | None
    respuesta: str | None = None
    observaciones: str | None = None

    @property
    def respondido(self) -> bool:
        return self.respuesta is not None


@dataclass
class CategoriaExportada:
    """Aggregated answers for one category sheet."""

    categoria: str
    hoja_excel: str
    items: list[ItemExportado] = field(default_factory=list)

    @property
    def numeros_respondidos(self) -> set[int]:
        return {i.numero_item for i in self.items if i.respondido}

    @property
    def sin_fila(self) -> list[int]:
        return [i.numero_item for i in self.items if i.fila is None]


@dataclass
class RegistroExportado:
    """Everything an export needs for one contract record."""

    contrato: ContratoInfo
    categorias: list[CategoriaExportada] = field(default_factory=list)
    registro_id: int | None = None

    @property
    def items_respondidos(self) -> dict[str, set[int]]:
        return {c.categoria: c.numeros_respondidos for c in self.categorias}

    def summary(self) -> str:
        partes = ", ".join(
            f"{c.categoria}={len(c.numeros_respondidos)}/{len(c.items)}"
            for c in self.categorias
        )
        return f"registro={self.registro_id} contrato={self.contrato.numero_contrato} [{partes}]"


# ---------------------------------------------------------------------------
# Data-store reads
# ---------------------------------------------------------------------------


def _lectura_almacen(func: Callable[..., _T]) -> Callable[..., _T]:
    """Translate SQLAlchemy failures into ``AlmacenDatosError``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> _T:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("%s: data-store read failed: %s", func.__name__, exc)
            raise AlmacenDatosError(f"{func.__name__} falló") from exc

    return wrapper


@_lectura_almacen
def get_registro(db: Session, registro_id: int) -> ListaChequeoRegistro:
    """Return the contract record or raise ``RegistroNoEncontradoError``."""
    registro = db.get(ListaChequeoRegistro, registro_id)
    if registro is None:
        raise RegistroNoEncontradoError(registro_id)
    return registro


@_lectura_almacen
def get_categoria_por_nombre(db: Session, nombre: str) -> ListaChequeoCategoria | None:
    return (
        db.query(ListaChequeoCategoria)
        .filter(ListaChequeoCategoria.nombre == nombre)
        .first()
    )


@_lectura_almacen
def list_items_por_categoria(db: Session, categoria_id: int) -> list[ListaChequeoItem]:
    """Active items of a category ordered by logical item number."""
    return (
        db.query(ListaChequeoItem)
        .filter(
            ListaChequeoItem.categoria_id == categoria_id,
            ListaChequeoItem.activo.is_(True),
        )
        .order_by(ListaChequeoItem.numero_item)
        .all()
    )


@_lectura_almacen
def list_respuestas_por_registro(db: Session, registro_id: int) -> list[ListaChequeoRespuesta]:
    return (
        db.query(ListaChequeoRespuesta)
        .filter(ListaChequeoRespuesta.registro_id == registro_id)
        .all()
    )


# ---------------------------------------------------------------------------
# Pure join
# ---------------------------------------------------------------------------


def resolver_fila(categoria: str, numero_item: int, fila_excel: int | None) -> int | None:
    """Explicit ``fila_excel`` first, then the category's positional table."""
    if fila_excel is not None:
        return fila_excel
    return fila_para_item(categoria, numero_item)


def _valor_respuesta(valor: Any) -> str | None:
    if valor is None:
        return None
    if isinstance(valor, Enum):
        valor = valor.value
    if valor not in RESPUESTAS:
        logger.warning("Ignoring unknown answer value %r", valor)
        return None
    return valor


def _nombre_etapa(item: Any) -> str | None:
    etapa = getattr(item, "etapa", None)
    if etapa is None:
        return None
    return getattr(etapa, "nombre", etapa)


def unir_items_respuestas(
    categoria: str,
    items: Sequence[Any],
    respuestas: Iterable[Any],
) -> list[ItemExportado]:
    """Left-join ``items`` to ``respuestas`` by item id.

    Args:
        categoria: Category name; selects the positional fallback table.
        items: Objects exposing ``id``, ``numero_item``, ``titulo``,
            ``fila_excel`` and optionally ``etapa``.
        respuestas: Objects exposing ``item_id``, ``respuesta`` and
            ``observaciones``.

    Returns:
        One ``ItemExportado`` per item, ordered by ``numero_item``.  Items with
        no response carry ``respuesta=None``.
    """
    ids_items = {item.id for item in items}
    por_item: dict[int, Any] = {}
    for resp in respuestas:
        if resp.item_id not in ids_items:
            logger.debug(
                "unir_items_respuestas: %s ignoring response for foreign item_id=%s",
                categoria, resp.item_id,
            )
            continue
        por_item[resp.item_id] = resp

    resultado: list[ItemExportado] = []
    for item in sorted(items, key=lambda i: i.numero_item):
        resp = por_item.get(item.id)
        fila = resolver_fila(categoria, item.numero_item, item.fila_excel)
        if fila is None:
            logger.warning(
                "unir_items_respuestas: %s item %s has no template row",
                categoria, item.numero_item,
            )
        resultado.append(
            ItemExportado(
                item_id=item.id,
                numero_item=item.numero_item,
                titulo=item.titulo,
                etapa=_nombre_etapa(item),
                fila=fila,
                respuesta=_valor_respuesta(resp.respuesta) if resp is not None else None,
                observaciones=resp.observaciones if resp is not None else None,
            )
        )
    return resultado


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def contrato_desde_registro(registro: ListaChequeoRegistro) -> ContratoInfo:
    return ContratoInfo(
        numero_contrato=registro.numero_contrato,
        contratista=registro.contratista,
        valor_contrato=float(registro.valor_contrato) if registro.valor_contrato is not None else None,
        objeto=registro.objeto,
        dependencia=registro.dependencia,
    )


def agregar_categoria(
    db: Session,
    registro_id: int,
    categoria_nombre: str,
    respuestas: Sequence[ListaChequeoRespuesta] | None = None,
) -> CategoriaExportada | None:
    """Aggregate one category for a contract record.

    Args:
        db: Active SQLAlchemy session.
        registro_id: Contract record whose responses are joined.
        categoria_nombre: Category name, e.g. ``"SAMC"``.
        respuestas: Pre-loaded responses of the record; loaded when ``None``.

    Returns:
        The aggregated category, or ``None`` when the category does not exist.
        A category without items yields an empty, valid result.

    Raises:
        AlmacenDatosError: If any read fails.
    """
    categoria = get_categoria_por_nombre(db, categoria_nombre)
    if categoria is None:
        logger.warning("agregar_categoria: category '%s' not found, skipping", categoria_nombre)
        return None

    items = list_items_por_categoria(db, categoria.id)
    if respuestas is None:
        respuestas = list_respuestas_por_registro(db, registro_id)

    unidos = unir_items_respuestas(categoria.nombre, items, respuestas)
    logger.info(
        "agregar_categoria: registro=%s categoria='%s' items=%d respondidos=%d",
        registro_id, categoria.nombre, len(unidos), sum(1 for i in unidos if i.respondido),
    )
    return CategoriaExportada(
        categoria=categoria.nombre,
        hoja_excel=categoria.hoja_excel or categoria.nombre,
        items=unidos,
    )


def agregar_registro(
    db: Session,
    registro_id: int,
    categorias: Sequence[str] | None = None,
) -> RegistroExportado:
    """Aggregate every requested category of a contract record.

    Args:
        db: Active SQLAlchemy session.
        registro_id: Contract record to export.
        categorias: Category names to include; defaults to all four sheets.

    Raises:
        RegistroNoEncontradoError: If the record does not exist.
        AlmacenDatosError: If any read fails.
    """
    registro = get_registro(db, registro_id)
    respuestas = list_respuestas_por_registro(db, registro_id)

    resultado = RegistroExportado(
        contrato=contrato_desde_registro(registro),
        registro_id=registro.id,
    )
    for nombre in categorias or CATEGORIAS:
        agregada = agregar_categoria(db, registro_id, nombre, respuestas)
        if agregada is not None:
            resultado.categorias.append(agregada)

    logger.info("agregar_registro: %s", resultado.summary())
    return resultado


def _respuestas_con_item_id(
    categoria: str,
    items: Sequence[ListaChequeoItem],
    entradas: Sequence[RespuestaEntrada],
) -> list[RespuestaEntrada]:
    """Fill ``item_id`` on entries that only carry ``numero_item``."""
    por_numero = {item.numero_item: item.id for item in items}
    resueltas: list[RespuestaEntrada] = []
    for entrada in entradas:
        if entrada.item_id is None:
            item_id = por_numero.get(entrada.numero_item)
            if item_id is None:
                logger.warning(
                    "agregar_desde_solicitud: %s item number %s unknown, ignoring",
                    categoria, entrada.numero_item,
                )
                continue
            entrada = entrada.model_copy(update={"item_id": item_id})
        resueltas.append(entrada)
    return resueltas


def agregar_desde_solicitud(db: Session, solicitud: ExportMultipleRequest) -> RegistroExportado:
    """Aggregate answers sent in a multi-category export request.

    Items still come from the data store; the answers come from the body.

    Raises:
        CategoriaDesconocidaError: If the body names a category outside the
            known checklist categories.
        AlmacenDatosError: If any read fails.
    """
    for nombre in solicitud.apartados:
        if nombre not in CATEGORIAS:
            raise CategoriaDesconocidaError(nombre)

    solicitadas = [c for c in CATEGORIAS if c in solicitud.apartados] or list(CATEGORIAS)
    resultado = RegistroExportado(contrato=solicitud.contrato)

    for nombre in solicitadas:
        categoria = get_categoria_por_nombre(db, nombre)
        if categoria is None:
            logger.warning("agregar_desde_solicitud: category '%s' not found, skipping", nombre)
            continue
        items = list_items_por_categoria(db, categoria.id)
        entradas = _respuestas_con_item_id(nombre, items, solicitud.apartados.get(nombre, []))
        resultado.categorias.append(
            CategoriaExportada(
                categoria=categoria.nombre,
                hoja_excel=categoria.hoja_excel or categoria.nombre,
                items=unir_items_respuestas(categoria.nombre, items, entradas),
            )
        )

    logger.info("agregar_desde_solicitud: %s", resultado.summary())
    return resultado


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def guardar_respuesta(
    db: Session,
    registro_id: int,
    item_id: int,
    respuesta: str | None,
    observaciones: str | None = None,
) -> ListaChequeoRespuesta:
    """Create or update the single response of ``item_id`` for a record.

    Looks the row up first so a record never holds two live responses for
    the same item.

    Raises:
        RegistroNoEncontradoError: If the record does not exist.
        ValueError: If the item is unknown, belongs to another category than
            the record, or ``respuesta`` is not a valid tri-state value.
        AlmacenDatosError: If the write fails.
    """
    if respuesta is not None and _valor_respuesta(respuesta) is None:
        raise ValueError(f"Respuesta '{respuesta}' no válida.")

    registro = get_registro(db, registro_id)
    try:
        item = db.get(ListaChequeoItem, item_id)
        if item is None:
            raise ValueError(f"Ítem {item_id} no existe.")
        if registro.categoria_id is not None and item.categoria_id != registro.categoria_id:
            raise ValueError(
                f"El ítem {item_id} no pertenece a la categoría del registro {registro_id}."
            )

        existente = (
            db.query(ListaChequeoRespuesta)
            .filter(
                ListaChequeoRespuesta.registro_id == registro_id,
                ListaChequeoRespuesta.item_id == item_id,
            )
            .first()
        )
        if existente is None:
            existente = ListaChequeoRespuesta(registro_id=registro_id, item_id=item_id)
            db.add(existente)
        existente.respuesta = _valor_respuesta(respuesta)
        existente.observaciones = observaciones
        db.commit()
        db.refresh(existente)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("guardar_respuesta: write failed registro=%s item=%s: %s", registro_id, item_id, exc)
        raise AlmacenDatosError("guardar_respuesta falló") from exc

    return existente
