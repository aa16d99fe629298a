from fastapi import APIRouter

# Importa cada módulo de rutas
from app.api.v1.routers import (
    auth,
    usuarios,
    areas,
    docentes,
    periodos,
    carga_horas,
    pagos,
)

# Router principal con prefijo global
api_router = APIRouter(prefix="/api")

# Endpoint raíz para verificar que la API funciona
@api_router.get("/", tags=["Root"])
def read_root():
    return {"message": "Bienvenido a la API de Recursos Humanos UMx"}

# Registro de módulos de rutas
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(auth.me_router, tags=["Auth"])
api_router.include_router(usuarios.router, prefix="/usuarios", tags=["Usuarios"])
api_router.include_router(areas.router, prefix="/areas", tags=["Áreas"])
api_router.include_router(docentes.router, prefix="/docentes", tags=["Docentes"])
api_router.include_router(periodos.router, prefix="/periodos", tags=["Periodos"])
api_router.include_router(carga_horas.router, prefix="/carga-horas", tags=["Carga de Horas"])
api_router.include_router(pagos.router, prefix="/pagos", tags=["Pagos"])
