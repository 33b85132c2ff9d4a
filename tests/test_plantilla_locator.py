"""
Template locator tests.

Tests cover:
  - Local paths tried in order, first usable file wins
  - Missing / empty local files are skipped
  - Remote fallback: success, HTTP error, timeout, empty body
  - Typed "unavailable" result instead of an exception
  - Scoped temporary file is removed on every exit path
"""
import pytest
import requests

from app.services import plantilla_locator
from app.services.plantilla_locator import (
    FuentePlantilla,
    PlantillaConfig,
    PlantillaDisponible,
    PlantillaLocator,
    PlantillaNoDisponible,
    archivo_temporal,
)

URL = "https://plantillas.example.org/document/lista-chequeo.xlsx"


class _FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


@pytest.fixture()
def fake_get(monkeypatch):
    """Patch ``requests.get`` and record every call."""
    llamadas = []
    estado = {"respuesta": _FakeResponse(b"remote-bytes"), "error": None}

    def _get(url, timeout=None):
        llamadas.append((url, timeout))
        if estado["error"] is not None:
            raise estado["error"]
        return estado["respuesta"]

    monkeypatch.setattr(plantilla_locator.requests, "get", _get)
    return llamadas, estado


# ═════════════════════════════════════════════════════════════════════════
# LOCAL SOURCES
# ═════════════════════════════════════════════════════════════════════════


class TestLocal:
    def test_first_existing_path_wins(self, tmp_path, fake_get):
        llamadas, _ = fake_get
        primera = tmp_path / "a.xlsx"
        segunda = tmp_path / "b.xlsx"
        segunda.write_bytes(b"segunda")
        tercera = tmp_path / "c.xlsx"
        tercera.write_bytes(b"tercera")

        locator = PlantillaLocator(
            PlantillaConfig(rutas_locales=(primera, segunda, tercera), url_remota=URL)
        )
        resultado = locator.localizar()

        assert isinstance(resultado, PlantillaDisponible)
        assert resultado.disponible is True
        assert resultado.contenido == b"segunda"
        assert resultado.fuente == FuentePlantilla.LOCAL
        assert resultado.ubicacion == str(segunda)
        assert [i.exito for i in resultado.intentos] == [False, True]
        assert resultado.intentos[1].bytes_leidos == len(b"segunda")
        # remote source never contacted
        assert llamadas == []

    def test_empty_file_and_directory_are_skipped(self, tmp_path):
        vacio = tmp_path / "vacio.xlsx"
        vacio.write_bytes(b"")
        directorio = tmp_path / "dir.xlsx"
        directorio.mkdir()
        buena = tmp_path / "buena.xlsx"
        buena.write_bytes(b"ok")

        locator = PlantillaLocator(PlantillaConfig(rutas_locales=(vacio, directorio, buena)))
        resultado = locator.localizar()

        assert resultado.contenido == b"ok"
        assert [i.error for i in resultado.intentos[:2]] == ["archivo vacío", "no existe"]

    def test_no_sources_is_unavailable(self):
        resultado = PlantillaLocator(PlantillaConfig()).localizar()
        assert isinstance(resultado, PlantillaNoDisponible)
        assert resultado.disponible is False
        assert resultado.resumen() == "sin fuentes configuradas"


# ═════════════════════════════════════════════════════════════════════════
# REMOTE SOURCE
# ═════════════════════════════════════════════════════════════════════════


class TestRemote:
    def test_download_when_no_local_file(self, tmp_path, fake_get):
        llamadas, _ = fake_get
        locator = PlantillaLocator(
            PlantillaConfig(
                rutas_locales=(tmp_path / "falta.xlsx",),
                url_remota=URL,
                timeout_segundos=3.5,
            )
        )
        resultado = locator.localizar()

        assert isinstance(resultado, PlantillaDisponible)
        assert resultado.fuente == FuentePlantilla.REMOTA
        assert resultado.ubicacion == URL
        assert resultado.contenido == b"remote-bytes"
        assert llamadas == [(URL, 3.5)]

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.Timeout("read timed out"),
            requests.exceptions.ConnectionError("connection refused"),
        ],
    )
    def test_network_error_is_unavailable(self, fake_get, error):
        llamadas, estado = fake_get
        estado["error"] = error

        resultado = PlantillaLocator(PlantillaConfig(url_remota=URL)).localizar()

        assert isinstance(resultado, PlantillaNoDisponible)
        assert len(llamadas) == 1
        assert resultado.intentos[0].ubicacion == URL
        assert str(error) in resultado.resumen()

    def test_http_error_is_unavailable(self, fake_get):
        _, estado = fake_get
        estado["respuesta"] = _FakeResponse(b"not found", status_code=404)

        resultado = PlantillaLocator(PlantillaConfig(url_remota=URL)).localizar()

        assert isinstance(resultado, PlantillaNoDisponible)
        assert "404" in resultado.intentos[0].error

    def test_empty_body_is_unavailable(self, fake_get):
        _, estado = fake_get
        estado["respuesta"] = _FakeResponse(b"")

        resultado = PlantillaLocator(PlantillaConfig(url_remota=URL)).localizar()

        assert isinstance(resultado, PlantillaNoDisponible)
        assert resultado.intentos[0].error == "respuesta vacía"

    def test_uses_injected_session(self, fake_get):
        llamadas, _ = fake_get

        class _Session:
            def __init__(self):
                self.urls = []

            def get(self, url, timeout=None):
                self.urls.append(url)
                return _FakeResponse(b"session-bytes")

        session = _Session()
        resultado = PlantillaLocator(PlantillaConfig(url_remota=URL), session=session).localizar()

        assert resultado.contenido == b"session-bytes"
        assert session.urls == [URL]
        assert llamadas == []


# ═════════════════════════════════════════════════════════════════════════
# TEMPORARY FILE
# ═════════════════════════════════════════════════════════════════════════


class TestArchivoTemporal:
    def test_file_removed_after_use(self):
        with archivo_temporal(b"contenido") as ruta:
            assert ruta.read_bytes() == b"contenido"
            assert ruta.suffix == ".xlsx"
        assert not ruta.exists()

    def test_file_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with archivo_temporal(b"x") as ruta:
                raise RuntimeError("boom")
        assert not ruta.exists()

    def test_names_are_unique(self):
        with archivo_temporal(b"a") as uno, archivo_temporal(b"b") as dos:
            assert uno != dos
            assert uno.read_bytes() == b"a"
            assert dos.read_bytes() == b"b"
