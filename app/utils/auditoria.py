# app/utils/auditoria.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from app.models.auditoria import Auditoria
from app.utils.logger import logger


def registrar_auditoria(
    db: Session,
    usuario_id: Optional[int],
    accion: str,
    entidad: str,
    entidad_id: Optional[int] = None,
    payload: Optional[Dict[str, Any]] = None,
    commit: bool = False,
) -> Auditoria:
    """
    Agrega una entrada a la bitácora de auditoría.

    Por omisión solo se agrega a la sesión para que la entrada quede dentro
    de la misma transacción que la operación auditada.
    """
    datos = dict(payload or {})
    datos.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    entrada = Auditoria(
        usuario_id=usuario_id,
        accion=accion,
        entidad=entidad,
        entidad_id=entidad_id,
        payload=jsonable_encoder(datos),
    )
    db.add(entrada)
    if commit:
        db.commit()
    logger.info("Auditoría %s %s id=%s usuario=%s", accion, entidad, entidad_id, usuario_id)
    return entrada
