"""
Servicio de docentes: altas, cambios, bajas e importación masiva.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import DatosInvalidos, RecursoNoEncontrado, RegistroDuplicado
from app.crud import docente as crud_docente
from app.models.docente import Docente
from app.schemas.docente import DocenteCreate, DocenteUpdate
from app.services import excel_importer
from app.utils.archivos import guardar_reporte_json
from app.utils.auditoria import registrar_auditoria
from app.utils.logger import logger
from app.utils.normalizacion import (
    a_texto,
    es_vacio,
    normalizar_codigo_docente,
    normalizar_rfc,
    parsear_pagable,
    validar_rfc,
)
from app.utils.paginacion import paginacion


def obtener_docente(db: Session, docente_id: int) -> Docente:
    docente = crud_docente.get_docente(db, docente_id)
    if not docente:
        raise RecursoNoEncontrado("Docente", docente_id)
    return docente


def listar_docentes(
    db: Session,
    texto: Optional[str] = None,
    area_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 10,
) -> Dict[str, Any]:
    total = crud_docente.count_docentes(db, texto, area_id)
    docentes = crud_docente.list_docentes(db, (page - 1) * page_size, page_size, texto, area_id)
    return {"data": docentes, "pagination": paginacion(total, page, page_size)}


def _validar_unicos(db: Session, codigo: Optional[str], rfc: Optional[str], excluir_id: Optional[int] = None):
    if rfc is not None and not validar_rfc(rfc):
        raise DatosInvalidos("El RFC no tiene un formato válido", campo="rfc", rfc=rfc)
    if codigo is not None:
        otro = crud_docente.get_docente_by_codigo(db, codigo)
        if otro and otro.id != excluir_id:
            raise RegistroDuplicado(f"Ya existe un docente con el código {codigo}", campo="codigo_interno")
    if rfc is not None:
        otro = crud_docente.get_docente_by_rfc(db, rfc)
        if otro and otro.id != excluir_id:
            raise RegistroDuplicado(f"Ya existe un docente con el RFC {rfc}", campo="rfc")


def crear_docente(db: Session, data: DocenteCreate, usuario_id: Optional[int]) -> Docente:
    _validar_unicos(db, data.codigo_interno, data.rfc)
    docente = crud_docente.create_docente(db, data)
    registrar_auditoria(
        db, usuario_id, "CREAR", "Docente", docente.id,
        {"codigo_interno": docente.codigo_interno, "rfc": docente.rfc}, commit=True,
    )
    logger.info("Docente creado: %s %s", docente.codigo_interno, docente.nombre)
    return docente


def actualizar_docente(db: Session, docente_id: int, data: DocenteUpdate, usuario_id: Optional[int]) -> Docente:
    docente = obtener_docente(db, docente_id)
    cambios = data.model_dump(exclude_unset=True, exclude_none=True)
    _validar_unicos(db, cambios.get("codigo_interno"), cambios.get("rfc"), excluir_id=docente.id)

    for campo, valor in cambios.items():
        setattr(docente, campo, valor)
    registrar_auditoria(db, usuario_id, "ACTUALIZAR", "Docente", docente.id, cambios)
    db.commit()
    db.refresh(docente)
    return docente


def eliminar_docente(db: Session, docente_id: int, usuario_id: Optional[int]) -> Dict[str, Any]:
    """Desactiva al docente si tiene cargas registradas; si no, lo borra."""
    docente = obtener_docente(db, docente_id)
    if crud_docente.tiene_cargas(db, docente.id):
        docente.activo = False
        registrar_auditoria(db, usuario_id, "DESACTIVAR", "Docente", docente.id, {"codigo_interno": docente.codigo_interno})
        db.commit()
        return {"mensaje": "Docente desactivado: tiene cargas de horas registradas",
                "eliminado": False, "desactivado": True}

    registrar_auditoria(db, usuario_id, "ELIMINAR", "Docente", docente.id, {"codigo_interno": docente.codigo_interno})
    db.delete(docente)
    db.commit()
    return {"mensaje": "Docente eliminado", "eliminado": True, "desactivado": False}


def generar_plantilla() -> bytes:
    ejemplos = [
        {"codigo_interno": "012345", "nombre": "DOCENTE EJEMPLO", "rfc": "XAXX010101000", "activo": "1"},
        {"codigo_interno": "067890", "nombre": "OTRO DOCENTE EJEMPLO", "rfc": "XEXX010101000", "activo": "1"},
    ]
    return excel_importer.generar_plantilla(excel_importer.MAPEO_DOCENTES, ejemplos)


def _normalizar_fila(fila: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Regresa ``(dato, error)``; ``error`` es None si la fila es válida."""
    dato = {
        "codigo_interno": normalizar_codigo_docente(fila.get("codigo_interno")),
        "nombre": a_texto(fila.get("nombre")),
        "rfc": normalizar_rfc(fila.get("rfc")),
        "activo": True,
    }
    if not es_vacio(fila.get("activo")):
        try:
            dato["activo"] = parsear_pagable(fila.get("activo"))
        except ValueError:
            return dato, "Valor de activo inválido"

    if not dato["codigo_interno"]:
        return dato, "Código interno requerido"
    if not dato["nombre"]:
        return dato, "Nombre requerido"
    if not dato["rfc"]:
        return dato, "RFC requerido"
    if not validar_rfc(dato["rfc"]):
        return dato, "Formato de RFC inválido"
    return dato, None


def importar_docentes(db: Session, contenido: bytes, nombre_archivo: str, usuario_id: Optional[int]) -> Dict[str, Any]:
    """
    Importa docentes desde CSV/XLSX con inserción o actualización por código.

    - Las filas con datos faltantes o RFC inválido se reportan como error.
    - Un código o RFC repetido dentro del archivo invalida la repetición.
    - Un RFC que ya pertenece a otro docente se rechaza.

    Cuando hay errores se escribe un reporte JSON en ``/uploads`` y su URL se
    regresa en ``errores_archivo``.
    """
    df = excel_importer.leer_tabla(contenido, nombre_archivo)
    filas = excel_importer.parsear_filas(df, excel_importer.MAPEO_DOCENTES)
    if not filas:
        raise DatosInvalidos("El archivo no contiene datos válidos")

    resultado: Dict[str, Any] = {"total": len(filas), "insertados": 0, "actualizados": 0, "errores": []}
    detalle: List[Dict[str, Any]] = []
    codigos_vistos, rfcs_vistos = set(), set()

    def _error(fila, dato, mensaje):
        resultado["errores"].append({
            "linea": fila["linea"],
            "codigo_interno": dato.get("codigo_interno") or None,
            "rfc": dato.get("rfc") or None,
            "error": mensaje,
        })
        detalle.append({**dato, "linea": fila["linea"], "error": mensaje})

    for fila in filas:
        dato, error = _normalizar_fila(fila)
        if error:
            _error(fila, dato, error)
            continue

        if dato["codigo_interno"] in codigos_vistos or dato["rfc"] in rfcs_vistos:
            _error(fila, dato, "Registro duplicado en el archivo")
            continue
        codigos_vistos.add(dato["codigo_interno"])
        rfcs_vistos.add(dato["rfc"])

        existente = crud_docente.get_docente_by_codigo(db, dato["codigo_interno"])
        dueno_rfc = crud_docente.get_docente_by_rfc(db, dato["rfc"])

        if existente:
            if dueno_rfc and dueno_rfc.id != existente.id:
                _error(fila, dato, "RFC ya registrado para otro docente")
                continue
            existente.nombre = dato["nombre"]
            existente.rfc = dato["rfc"]
            existente.activo = dato["activo"]
            resultado["actualizados"] += 1
        else:
            if dueno_rfc:
                _error(fila, dato, "RFC ya registrado")
                continue
            db.add(Docente(**dato))
            resultado["insertados"] += 1
        db.flush()

    registrar_auditoria(
        db, usuario_id, "IMPORTAR", "Docente", None,
        {
            "nombre_archivo": nombre_archivo,
            "total": resultado["total"],
            "insertados": resultado["insertados"],
            "actualizados": resultado["actualizados"],
            "errores": len(resultado["errores"]),
        },
    )
    db.commit()

    resultado["errores_archivo"] = guardar_reporte_json("errores-import", detalle) if detalle else None
    logger.info(
        "Importación de docentes %s: %s insertados, %s actualizados, %s errores",
        nombre_archivo, resultado["insertados"], resultado["actualizados"], len(resultado["errores"]),
    )
    return resultado
