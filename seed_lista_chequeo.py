"""Seed script for the checklist reference data.

Provisions the four contract categories, the checklist stages and every item
the official template lays out, with ``fila_excel`` taken from the positional
table.  Optionally adds one demo contract record with a few answers.

The script is idempotent: it looks records up before inserting them.

Usage (from the backend/ directory):
    py seed_lista_chequeo.py            # reference data only
    py seed_lista_chequeo.py --demo     # reference data + demo record
"""

from __future__ import annotations

import os
import sys
from decimal import Decimal

# Ensure the backend package is importable when running from backend/
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy.orm import Session  # noqa: E402

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models import (  # noqa: E402
    ListaChequeoCategoria,
    ListaChequeoEtapa,
    ListaChequeoItem,
    ListaChequeoRegistro,
    ListaChequeoRespuesta,
)
from app.utils.constants import (  # noqa: E402
    CATEGORIA_DESCRIPCIONES,
    CATEGORIA_SAMC,
    CATEGORIAS,
    ETAPAS,
    RESPUESTA_CUMPLE,
    RESPUESTA_NO_APLICA,
    RESPUESTA_NO_CUMPLE,
)
from app.utils.mapeo_posicional import FILAS_POR_CATEGORIA, categorias_mapeadas  # noqa: E402

# ---------------------------------------------------------------------------
# Item catalogue
# ---------------------------------------------------------------------------

# numero_item -> (titulo, etapa)
ITEMS_CONOCIDOS: dict[int, tuple[str, str]] = {
    1: ("Estudio de Necesidad", "PRECONTRACTUAL"),
    2: ("Análisis del Sector", "PRECONTRACTUAL"),
    3: ("Estudios Técnicos", "PRECONTRACTUAL"),
    4: ("Estudios de Mercado", "PRECONTRACTUAL"),
    5: ("Análisis de Riesgo", "PRECONTRACTUAL"),
    6: ("Definición de Garantías", "PRECONTRACTUAL"),
    7: ("Análisis Legal", "PRECONTRACTUAL"),
    8: ("Pliego de Condiciones", "PRECONTRACTUAL"),
    9: ("Invitación a Presentar Ofertas", "PRECONTRACTUAL"),
    10: ("Evaluación de Ofertas", "PRECONTRACTUAL"),
    11: ("Adjudicación", "PRECONTRACTUAL"),
    12: ("Registro Presupuestal", "PRECONTRACTUAL"),
    13: ("Suscripción del Contrato", "EJECUCION"),
    14: ("Perfeccionamiento del Contrato", "EJECUCION"),
    15: ("Designación del Supervisor", "EJECUCION"),
    16: ("Acta de Inicio", "EJECUCION"),
    17: ("Seguimiento y Control", "EJECUCION"),
    18: ("Modificaciones Contractuales", "EJECUCION"),
    19: ("Pagos y Facturas", "EJECUCION"),
    20: ("Garantías", "EJECUCION"),
    21: ("Recibo Final", "CIERRE"),
    22: ("Liquidación", "CIERRE"),
    23: ("Paz y Salvo", "CIERRE"),
    24: ("Convenio Marco", "PRECONTRACTUAL"),
    25: ("Autorizaciones", "PRECONTRACTUAL"),
    26: ("Competencia", "PRECONTRACTUAL"),
    27: ("Plan de Trabajo", "EJECUCION"),
    28: ("Coordinación", "EJECUCION"),
    29: ("Evaluación Final", "CIERRE"),
    30: ("Análisis de Capacidad", "PRECONTRACTUAL"),
    31: ("Cronograma", "EJECUCION"),
    32: ("Entregables", "EJECUCION"),
    33: ("Control de Calidad", "EJECUCION"),
    34: ("Capacitación", "EJECUCION"),
    35: ("Manuales", "EJECUCION"),
    36: ("Soporte Técnico", "EJECUCION"),
    37: ("Pruebas", "EJECUCION"),
    38: ("Mantenimiento", "EJECUCION"),
    39: ("Documentación Final", "CIERRE"),
    40: ("Transferencia", "CIERRE"),
    41: ("Garantía de Calidad", "CIERRE"),
    42: ("Evaluación de Desempeño", "CIERRE"),
    43: ("Cierre Financiero", "CIERRE"),
    44: ("Archivo", "CIERRE"),
    45: ("Publicación SECOP", "PRECONTRACTUAL"),
    46: ("Certificaciones", "PRECONTRACTUAL"),
    47: ("Seguros", "EJECUCION"),
    48: ("Interventoría", "EJECUCION"),
    49: ("Auditoría", "CIERRE"),
    50: ("Lecciones Aprendidas", "CIERRE"),
    51: ("Cierre Administrativo", "CIERRE"),
}


def etapa_para_item(numero_item: int) -> str:
    """Stage of an item, from the catalogue or from its number range."""
    if numero_item in ITEMS_CONOCIDOS:
        return ITEMS_CONOCIDOS[numero_item][1]
    if 82 <= numero_item <= 93:
        return "ADICION"
    return "PRECONTRACTUAL"


def titulo_para_item(numero_item: int) -> str:
    if numero_item in ITEMS_CONOCIDOS:
        return ITEMS_CONOCIDOS[numero_item][0]
    return f"Ítem {numero_item}"


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_etapas(session: Session) -> dict[str, ListaChequeoEtapa]:
    """Insert the checklist stages that do not exist yet."""
    existentes = {e.nombre: e for e in session.query(ListaChequeoEtapa).all()}
    nuevas = 0
    for orden, nombre in enumerate(ETAPAS, start=1):
        if nombre in existentes:
            continue
        etapa = ListaChequeoEtapa(nombre=nombre, orden=orden)
        session.add(etapa)
        existentes[nombre] = etapa
        nuevas += 1
    session.flush()
    print(f"  [OK] ListaChequeoEtapa — {nuevas} insertadas, {len(existentes)} en total.")
    return existentes


def seed_categorias(session: Session) -> dict[str, ListaChequeoCategoria]:
    """Insert the four contract categories that do not exist yet."""
    existentes = {c.nombre: c for c in session.query(ListaChequeoCategoria).all()}
    nuevas = 0
    for orden, nombre in enumerate(CATEGORIAS, start=1):
        if nombre in existentes:
            continue
        categoria = ListaChequeoCategoria(
            nombre=nombre,
            descripcion=CATEGORIA_DESCRIPCIONES[nombre],
            hoja_excel=nombre,
            orden=orden,
            activo=True,
        )
        session.add(categoria)
        existentes[nombre] = categoria
        nuevas += 1
    session.flush()
    print(f"  [OK] ListaChequeoCategoria — {nuevas} insertadas, {len(existentes)} en total.")
    return existentes


def seed_items(
    session: Session,
    categorias: dict[str, ListaChequeoCategoria],
    etapas: dict[str, ListaChequeoEtapa],
) -> int:
    """Insert every item of every category with its template row.

    Existing items keep their data except a missing ``fila_excel``, which is
    filled from the positional table.
    """
    total = 0
    mapeadas = set(categorias_mapeadas())
    for nombre, categoria in categorias.items():
        if nombre not in mapeadas:
            print(f"  [SKIP] ListaChequeoItem '{nombre}' — sin tabla de filas.")
            continue
        filas = FILAS_POR_CATEGORIA[nombre]
        existentes = {
            i.numero_item: i
            for i in session.query(ListaChequeoItem)
            .filter(ListaChequeoItem.categoria_id == categoria.id)
            .all()
        }
        nuevos = 0
        for numero, fila in sorted(filas.items(), key=lambda par: par[1]):
            item = existentes.get(numero)
            if item is not None:
                if item.fila_excel is None:
                    item.fila_excel = fila
                continue
            session.add(
                ListaChequeoItem(
                    numero_item=numero,
                    titulo=titulo_para_item(numero),
                    etapa_id=etapas[etapa_para_item(numero)].id,
                    categoria_id=categoria.id,
                    fila_excel=fila,
                    activo=True,
                )
            )
            nuevos += 1
        session.flush()
        print(f"  [OK] ListaChequeoItem '{nombre}' — {nuevos} insertados.")
        total += nuevos
    return total


def seed_registro_demo(session: Session, categorias: dict[str, ListaChequeoCategoria]) -> ListaChequeoRegistro:
    """Insert one SAMC demo contract with a handful of answers."""
    numero = "SAMC-DEMO-001"
    registro = (
        session.query(ListaChequeoRegistro)
        .filter(ListaChequeoRegistro.numero_contrato == numero)
        .first()
    )
    if registro is not None:
        print("  [SKIP] ListaChequeoRegistro — demo record already exists.")
        return registro

    samc = categorias[CATEGORIA_SAMC]
    registro = ListaChequeoRegistro(
        dependencia="planeacion",
        categoria_id=samc.id,
        numero_contrato=numero,
        contratista="Constructora Ejemplo S.A.S.",
        valor_contrato=Decimal("125000000.00"),
        objeto="Mantenimiento de vías urbanas",
    )
    session.add(registro)
    session.flush()

    items = {
        i.numero_item: i
        for i in session.query(ListaChequeoItem)
        .filter(ListaChequeoItem.categoria_id == samc.id)
        .all()
    }
    demo = [
        (1, RESPUESTA_CUMPLE, "Documento firmado por el ordenador del gasto."),
        (2, RESPUESTA_CUMPLE, None),
        (5, RESPUESTA_NO_CUMPLE, "Falta matriz de riesgos."),
        (25, RESPUESTA_CUMPLE, None),
        (43, RESPUESTA_NO_APLICA, None),
    ]
    for numero_item, respuesta, observaciones in demo:
        session.add(
            ListaChequeoRespuesta(
                registro_id=registro.id,
                item_id=items[numero_item].id,
                respuesta=respuesta,
                observaciones=observaciones,
            )
        )
    session.flush()
    print(f"  [OK] ListaChequeoRegistro — demo record {numero} with {len(demo)} answers.")
    return registro


def seed_all(session: Session, demo: bool = False) -> None:
    """Run every seed step on ``session`` without committing."""
    print("\n[1/3] Etapas...")
    etapas = seed_etapas(session)

    print("\n[2/3] Categorías...")
    categorias = seed_categorias(session)

    print("\n[3/3] Ítems...")
    seed_items(session, categorias, etapas)

    if demo:
        print("\n[demo] Registro de ejemplo...")
        seed_registro_demo(session, categorias)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    demo = "--demo" in sys.argv[1:]

    print("=" * 60)
    print("  Dashboard Lista de Chequeo — Seed Script")
    print("=" * 60)

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        seed_all(session, demo=demo)
        session.commit()
        print("\n" + "=" * 60)
        print("  Seed completado exitosamente.")
        print("=" * 60)

    except Exception as exc:
        session.rollback()
        print("\n[ERROR] Seed fallido — se hizo rollback.")
        print(f"  Detalle: {exc}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
