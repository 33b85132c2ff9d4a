"""
Template locator — resolves the official ``lista-chequeo.xlsx`` bytes.

The same code runs in hosts where the template ships on disk and in hosts
where only a public object-store copy is reachable, so resolution walks an
ordered list of sources and reports which one answered.

Public API
----------
- ``PlantillaConfig`` — explicit configuration (local paths, remote URL, timeout).
- ``PlantillaLocator.localizar()`` — returns ``PlantillaDisponible`` or
  ``PlantillaNoDisponible``; never raises for a missing template.
- ``archivo_temporal(contenido)`` — scoped, uniquely named temp file.  Library
  helper for callers that need a filesystem path (e.g. tools that only open
  paths); the export endpoints keep the bytes in memory and do not use it.

Design notes
------------
- Local paths are tried in order; the first existing, readable, non-empty
  file wins and the remote URL is not contacted.
- The remote fallback is a single ``requests.get`` with a bounded timeout.
  No retries: a slow object store must not stall the export, which has its
  own synthetic fallback.
- Nothing is cached between requests. Callers hand the bytes straight to
  ``openpyxl.load_workbook(BytesIO(...))``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0


class FuentePlantilla(str, Enum):
    LOCAL = "LOCAL"
    REMOTA = "REMOTA"


@dataclass(frozen=True)
class PlantillaConfig:
    """Where to look for the template.

    Attributes:
        rutas_locales: Filesystem paths tried in order.
        url_remota: HTTP(S) URL used when no local path is usable.
        timeout_segundos: Connect/read timeout for the remote download.
    """

    rutas_locales: tuple[Path, ...] = ()
    url_remota: str | None = None
    timeout_segundos: float = _DEFAULT_TIMEOUT


@dataclass(frozen=True)
class IntentoPlantilla:
    """Outcome of one source attempt, kept for logs and diagnostics."""

    ubicacion: str
    exito: bool
    bytes_leidos: int = 0
    error: str | None = None


@dataclass(frozen=True)
class PlantillaDisponible:
    contenido: bytes
    fuente: FuentePlantilla
    ubicacion: str
    intentos: tuple[IntentoPlantilla, ...] = field(default_factory=tuple)

    disponible = True


@dataclass(frozen=True)
class PlantillaNoDisponible:
    intentos: tuple[IntentoPlantilla, ...] = field(default_factory=tuple)

    disponible = False

    def resumen(self) -> str:
        """One-line description of every failed attempt."""
        if not self.intentos:
            return "sin fuentes configuradas"
        return "; ".join(f"{i.ubicacion}: {i.error}" for i in self.intentos)


ResultadoPlantilla = PlantillaDisponible | PlantillaNoDisponible


class PlantillaLocator:
    """Resolve template bytes from local paths, then from a remote URL.

    Args:
        config: Sources and timeout. Built from ``Settings.plantilla_config()``
            in the application, or directly in tests.
        session: Optional ``requests.Session`` used for the remote download.
    """

    def __init__(
        self,
        config: PlantillaConfig,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._session = session

    @property
    def config(self) -> PlantillaConfig:
        return self._config

    def localizar(self) -> ResultadoPlantilla:
        """Try every configured source and return the first usable template."""
        intentos: list[IntentoPlantilla] = []

        for ruta in self._config.rutas_locales:
            intento, contenido = self._leer_local(Path(ruta))
            intentos.append(intento)
            if contenido is not None:
                return PlantillaDisponible(
                    contenido=contenido,
                    fuente=FuentePlantilla.LOCAL,
                    ubicacion=intento.ubicacion,
                    intentos=tuple(intentos),
                )

        if self._config.url_remota:
            intento, contenido = self._descargar(self._config.url_remota)
            intentos.append(intento)
            if contenido is not None:
                return PlantillaDisponible(
                    contenido=contenido,
                    fuente=FuentePlantilla.REMOTA,
                    ubicacion=intento.ubicacion,
                    intentos=tuple(intentos),
                )
        else:
            logger.info("localizar: no remote template URL configured")

        resultado = PlantillaNoDisponible(intentos=tuple(intentos))
        logger.warning(
            "localizar: template unavailable after %d attempt(s): %s",
            len(intentos),
            resultado.resumen(),
        )
        return resultado

    # -----------------------------------------------------------------------
    # Sources
    # -----------------------------------------------------------------------

    def _leer_local(self, ruta: Path) -> tuple[IntentoPlantilla, bytes | None]:
        ubicacion = str(ruta)
        if not ruta.is_file():
            logger.debug("localizar: local path not found '%s'", ubicacion)
            return IntentoPlantilla(ubicacion, False, error="no existe"), None

        try:
            contenido = ruta.read_bytes()
        except OSError as exc:
            logger.warning("localizar: cannot read '%s': %s", ubicacion, exc)
            return IntentoPlantilla(ubicacion, False, error=str(exc)), None

        if not contenido:
            logger.warning("localizar: local template '%s' is empty", ubicacion)
            return IntentoPlantilla(ubicacion, False, error="archivo vacío"), None

        logger.info("localizar: template loaded from '%s' (%d bytes)", ubicacion, len(contenido))
        return IntentoPlantilla(ubicacion, True, bytes_leidos=len(contenido)), contenido

    def _descargar(self, url: str) -> tuple[IntentoPlantilla, bytes | None]:
        timeout = self._config.timeout_segundos
        get = self._session.get if self._session is not None else requests.get
        try:
            response = get(url, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            logger.warning("localizar: remote download failed url=%s: %s", url, exc)
            return IntentoPlantilla(url, False, error=str(exc)), None

        contenido = response.content
        if not contenido:
            logger.warning("localizar: remote template at %s returned an empty body", url)
            return IntentoPlantilla(url, False, error="respuesta vacía"), None

        logger.info("localizar: template downloaded from %s (%d bytes)", url, len(contenido))
        return IntentoPlantilla(url, True, bytes_leidos=len(contenido)), contenido


@contextmanager
def archivo_temporal(contenido: bytes, suffix: str = ".xlsx") -> Iterator[Path]:
    """Write ``contenido`` to a uniquely named temp file, removed on exit.

    For callers that need a filesystem path instead of an in-memory buffer.
    The file is private to the calling request and never reused.
    """
    fd, nombre = tempfile.mkstemp(prefix="plantilla-", suffix=suffix)
    ruta = Path(nombre)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(contenido)
        yield ruta
    finally:
        ruta.unlink(missing_ok=True)
