import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: report which template source is configured; exports still
    # fall back to the basic workbook when none answers at request time.
    config = settings.plantilla_config()
    locales = [str(r) for r in config.rutas_locales if r.is_file()]
    if locales:
        logger.info("Lista de chequeo template found locally: %s", locales[0])
    elif config.url_remota:
        logger.info("Lista de chequeo template will be downloaded from %s", config.url_remota)
    else:
        logger.warning("No lista de chequeo template configured; exports will use the basic workbook.")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Export-Strategy"],
)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

# Lista de chequeo (exportación Excel)
from app.routers import exportacion  # noqa: E402

app.include_router(
    exportacion.router,
    prefix=f"{settings.API_PREFIX}/lista-chequeo",
    tags=["Lista de Chequeo"],
)

# Lista de chequeo (respuestas)
from app.routers import respuestas  # noqa: E402

app.include_router(
    respuestas.router,
    prefix=f"{settings.API_PREFIX}/lista-chequeo",
    tags=["Lista de Chequeo"],
)
