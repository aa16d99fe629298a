# app/utils/archivos.py
"""
Manejo del directorio compartido de archivos (``UPLOADS_DIR``).

Los nombres llevan un sufijo de marca de tiempo más un fragmento aleatorio
para que cargas concurrentes no choquen entre sí.
"""
import json
import re
import time
import unicodedata
import uuid
from pathlib import Path
from typing import Any
from urllib.parse import quote

from fastapi import UploadFile
from fastapi.responses import StreamingResponse
from fastapi.encoders import jsonable_encoder

from app.core.config import settings
from app.core.exceptions import DatosInvalidos


MEDIA_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MEDIA_ZIP = "application/zip"


def _nombre_seguro(nombre: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", Path(nombre or "archivo").name)


def _marca() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


async def leer_upload(archivo: UploadFile) -> bytes:
    """Lee un archivo subido validando que no exceda ``MAX_UPLOAD_MB``."""
    contenido = await archivo.read()
    limite = settings.max_upload_mb * 1024 * 1024
    if len(contenido) > limite:
        raise DatosInvalidos(
            f"El archivo excede el tamaño máximo de {settings.max_upload_mb} MB",
            tamano=len(contenido),
        )
    if not contenido:
        raise DatosInvalidos("El archivo está vacío")
    return contenido


def guardar_temporal(contenido: bytes, nombre_original: str) -> Path:
    directorio = Path(settings.uploads_dir)
    directorio.mkdir(parents=True, exist_ok=True)
    nombre = Path(_nombre_seguro(nombre_original))
    ruta = directorio / f"{nombre.stem}-{_marca()}{nombre.suffix}"
    ruta.write_bytes(contenido)
    return ruta


def guardar_reporte_json(prefijo: str, datos: Any) -> str:
    """Escribe ``datos`` como JSON en el directorio de uploads y regresa su URL pública."""
    directorio = Path(settings.uploads_dir)
    directorio.mkdir(parents=True, exist_ok=True)
    nombre = f"{prefijo}-{_marca()}.json"
    (directorio / nombre).write_text(
        json.dumps(jsonable_encoder(datos), ensure_ascii=False, indent=2), encoding="utf-8"
    )
    return f"/uploads/{nombre}"


def respuesta_descarga(contenido: bytes, nombre: str, media_type: str = MEDIA_XLSX) -> StreamingResponse:
    """Respuesta de descarga; el nombre ASCII va en ``filename`` y el original en ``filename*``."""
    nombre_ascii = unicodedata.normalize("NFKD", nombre).encode("ascii", "ignore").decode("ascii")
    return StreamingResponse(
        iter([contenido]),
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename=\"{nombre_ascii}\"; filename*=UTF-8''{quote(nombre)}",
        },
    )
