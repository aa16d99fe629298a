from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.v1 import api_router
from app.core.config import settings
from app.core.error_handlers import register_error_handlers
from app.core.lifespan import lifespan
from app.core.logging_middleware import log_requests
from app.schemas.common import HealthResponse
from app.utils.cors import setup_cors


def create_app() -> FastAPI:
    app = FastAPI(
        title="RH Backend",
        version="1.0.0",
        description="Backend de Recursos Humanos: carga de horas docentes por periodo y reportes de pago",
        lifespan=lifespan,  # Startup/shutdown moderno
        contact={
            "name": "Equipo Backend",
            "email": "soporte@umx.edu.mx",
        },
    )

    # --- Configuración CORS ---
    setup_cors(app)

    # --- Bitácora de peticiones y manejo de errores ---
    app.middleware("http")(log_requests)
    register_error_handlers(app)

    # --- Rutas centralizadas ---
    app.include_router(api_router)

    @app.get("/health", response_model=HealthResponse, tags=["Root"])
    def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    # --- Archivos generados (reportes de errores de importación) ---
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(settings.uploads_dir)), name="uploads")

    return app


app = create_app()
