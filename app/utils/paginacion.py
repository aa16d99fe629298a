import math
from typing import Dict


def paginacion(total: int, page: int, page_size: int) -> Dict[str, int]:
    """Metadatos de paginación con los nombres que espera el frontend."""
    return {
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": math.ceil(total / page_size) if page_size else 0,
    }
