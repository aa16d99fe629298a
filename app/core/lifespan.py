from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.base import Base
from app.db.init_db import create_default_roles_and_admin
from app.db.session import engine
from app.utils.logger import logger
import app.models  # noqa: F401  registra los modelos en Base.metadata


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Maneja startup/shutdown de la app: tablas en desarrollo, datos semilla y
    directorio de cargas.
    """
    try:
        # --- Startup ---
        logger.info("Iniciando aplicación RH Backend...")

        if settings.environment == "development":
            Base.metadata.create_all(bind=engine)

        settings.uploads_dir.mkdir(parents=True, exist_ok=True)

        session = Session(bind=engine)
        try:
            create_default_roles_and_admin(session)
        finally:
            session.close()

        logger.info("Startup completado correctamente")

    except Exception as e:
        logger.exception("Error en startup: %s", e)

    yield

    # --- Shutdown ---
    logger.info("Aplicación cerrada correctamente")
