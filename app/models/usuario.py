"""
Modelos de Usuario, Rol y la relación muchos-a-muchos entre ambos.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Usuario(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(150), nullable=False)
    correo = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    activo = Column(Boolean, default=True, nullable=False)
    creado_en = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relaciones
    usuario_roles = relationship(
        "UsuarioRole", back_populates="usuario", cascade="all, delete-orphan", lazy="selectin"
    )
    coord_areas = relationship("CoordArea", back_populates="usuario", lazy="selectin")

    @property
    def roles(self) -> list[str]:
        """Nombres de los roles asignados."""
        return [ur.role.nombre for ur in self.usuario_roles]

    def tiene_rol(self, *nombres: str) -> bool:
        return any(r in nombres for r in self.roles)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(50), unique=True, nullable=False)

    usuario_roles = relationship("UsuarioRole", back_populates="role")


class UsuarioRole(Base):
    __tablename__ = "usuario_roles"
    __table_args__ = (
        UniqueConstraint("usuario_id", "role_id", name="uq_usuario_role"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)

    usuario = relationship("Usuario", back_populates="usuario_roles")
    role = relationship("Role", back_populates="usuario_roles", lazy="joined")
