"""
Application-wide constants for the checklist export engine.

Defines domain enumerations and the fixed geometry of the official
``lista-chequeo.xlsx`` template shared by every category sheet.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Contract categories (one template sheet per category, same name)
# ---------------------------------------------------------------------------

CATEGORIA_SAMC: Final[str] = "SAMC"
CATEGORIA_MINIMA_CUANTIA: Final[str] = "MINIMA CUANTÍA"
CATEGORIA_INTERADMINISTRATIVO: Final[str] = "CONTRATO INTERADMINISTRATIVO"
CATEGORIA_PRESTACION_SERVICIOS: Final[str] = "PRESTACIÓN DE SERVICIOS"

CATEGORIAS: Final[list[str]] = [
    CATEGORIA_SAMC,
    CATEGORIA_MINIMA_CUANTIA,
    CATEGORIA_INTERADMINISTRATIVO,
    CATEGORIA_PRESTACION_SERVICIOS,
]

CATEGORIA_DESCRIPCIONES: Final[dict[str, str]] = {
    CATEGORIA_SAMC: "Selección Abreviada de Menor Cuantía",
    CATEGORIA_MINIMA_CUANTIA: "Contrato de Mínima Cuantía",
    CATEGORIA_INTERADMINISTRATIVO: "Contrato Interadministrativo",
    CATEGORIA_PRESTACION_SERVICIOS: "Prestación de Servicios",
}

# ---------------------------------------------------------------------------
# Checklist stages
# ---------------------------------------------------------------------------

ETAPAS: Final[list[str]] = [
    "PRECONTRACTUAL",
    "CONTRACTUAL",
    "EJECUCION",
    "CIERRE",
    "ADICION",
]

# ---------------------------------------------------------------------------
# Tri-state answers
# ---------------------------------------------------------------------------

RESPUESTA_CUMPLE: Final[str] = "CUMPLE"
RESPUESTA_NO_CUMPLE: Final[str] = "NO_CUMPLE"
RESPUESTA_NO_APLICA: Final[str] = "NO_APLICA"

RESPUESTAS: Final[list[str]] = [
    RESPUESTA_CUMPLE,
    RESPUESTA_NO_CUMPLE,
    RESPUESTA_NO_APLICA,
]

RESPUESTA_LABELS: Final[dict[str, str]] = {
    RESPUESTA_CUMPLE: "Cumple",
    RESPUESTA_NO_CUMPLE: "No Cumple",
    RESPUESTA_NO_APLICA: "No Aplica",
}

SIN_RESPUESTA_LABEL: Final[str] = "SIN RESPUESTA"

# ---------------------------------------------------------------------------
# Template geometry (1-based rows and columns)
# ---------------------------------------------------------------------------

FILA_PRIMER_ITEM: Final[int] = 12

COLUMNA_CUMPLE: Final[int] = 3          # C
COLUMNA_NO_CUMPLE: Final[int] = 4       # D
COLUMNA_NO_APLICA: Final[int] = 5       # E
COLUMNA_OBSERVACIONES: Final[int] = 10  # J

MARCA_RESPUESTA: Final[str] = "✔"

# Contract header block
CELDA_NUMERO_CONTRATO: Final[tuple[int, int]] = (7, 1)  # A7
CELDA_CONTRATISTA: Final[tuple[int, int]] = (8, 1)      # A8
CELDA_VALOR: Final[tuple[int, int]] = (7, 4)            # D7

ETIQUETA_NUMERO_CONTRATO: Final[str] = "NUMERO DE CONTRATO:"
ETIQUETA_CONTRATISTA: Final[str] = "CONTRATISTA:"
FORMATO_MONEDA: Final[str] = '"$"#,##0.00'

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

OBSERVACIONES_MAX_LONGITUD: Final[int] = 500

XLSX_MEDIA_TYPE: Final[str] = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)
