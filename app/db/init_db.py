from sqlalchemy.orm import Session

from app.core.config import Roles, settings
from app.core.security import hash_password
from app.crud.role import get_role_by_name
from app.models.area import Area
from app.models.usuario import Role, Usuario, UsuarioRole
from app.utils.logger import logger

AREAS_INICIALES = ("Preparatoria", "Licenciaturas")


def create_default_roles_and_admin(db: Session):
	# crear roles si no existen
	roles = {}
	for nombre in Roles.TODOS:
		role = get_role_by_name(db, nombre)
		if not role:
			role = Role(nombre=nombre)
			db.add(role)
		roles[nombre] = role
	db.commit()

	# crear admin si no existe
	admin = db.query(Usuario).filter(Usuario.correo == settings.admin_correo).first()
	if not admin:
		admin = Usuario(
			nombre="Administrador",
			correo=settings.admin_correo,
			password_hash=hash_password(settings.admin_password),
			activo=True,
		)
		admin.usuario_roles.append(UsuarioRole(role=roles[Roles.ADMIN]))
		db.add(admin)
		db.commit()
		db.refresh(admin)
		logger.info("Admin creado: %s", admin.correo)

	# áreas de arranque
	if db.query(Area).count() == 0:
		for nombre in AREAS_INICIALES:
			db.add(Area(nombre=nombre, activo=True))
		db.commit()
		logger.info("Áreas iniciales creadas: %s", ", ".join(AREAS_INICIALES))
