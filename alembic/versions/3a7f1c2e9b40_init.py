"""init

Revision ID: 3a7f1c2e9b40
Revises:
Create Date: 2026-10-18 10:12:31.502114
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '3a7f1c2e9b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MYSQL_OPTS = dict(mysql_engine='InnoDB', mysql_charset='utf8mb4', mysql_collate='utf8mb4_unicode_ci')

ESTADOS_PERIODO = ('BORRADOR', 'ABIERTO', 'CERRADO', 'REPORTADO')


def upgrade() -> None:
    # === roles ===
    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(50), nullable=False, unique=True),
        **MYSQL_OPTS
    )

    # === usuarios ===
    op.create_table(
        'usuarios',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(150), nullable=False),
        sa.Column('correo', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('creado_en', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        **MYSQL_OPTS
    )
    op.create_index('ix_usuarios_correo', 'usuarios', ['correo'], unique=True)

    # === usuario_roles ===
    op.create_table(
        'usuario_roles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('usuario_id', sa.Integer(), sa.ForeignKey('usuarios.id'), nullable=False),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id'), nullable=False),
        sa.UniqueConstraint('usuario_id', 'role_id', name='uq_usuario_role'),
        **MYSQL_OPTS
    )

    # === areas ===
    op.create_table(
        'areas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(150), nullable=False, unique=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        **MYSQL_OPTS
    )

    # === coord_areas ===
    op.create_table(
        'coord_areas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('usuario_id', sa.Integer(), sa.ForeignKey('usuarios.id'), nullable=False),
        sa.Column('area_id', sa.Integer(), sa.ForeignKey('areas.id'), nullable=False),
        sa.UniqueConstraint('usuario_id', 'area_id', name='uq_coord_area'),
        **MYSQL_OPTS
    )
    op.create_index('ix_coord_areas_usuario_id', 'coord_areas', ['usuario_id'])
    op.create_index('ix_coord_areas_area_id', 'coord_areas', ['area_id'])

    # === docentes ===
    op.create_table(
        'docentes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('codigo_interno', sa.String(20), nullable=False,
                  comment='Código interno de ancho fijo (relleno con ceros)'),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('rfc', sa.String(13), nullable=False, unique=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        **MYSQL_OPTS
    )
    op.create_index('ix_docentes_codigo_interno', 'docentes', ['codigo_interno'], unique=True)

    # === periodos ===
    op.create_table(
        'periodos',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(100), nullable=False, unique=True),
        sa.Column('fecha_inicio', sa.Date(), nullable=False),
        sa.Column('fecha_fin', sa.Date(), nullable=False),
        sa.Column('estado', sa.Enum(*ESTADOS_PERIODO, name='estadoperiodo'), nullable=False,
                  server_default='BORRADOR'),
        **MYSQL_OPTS
    )
    op.create_index('ix_periodos_estado', 'periodos', ['estado'])

    # === cargas_horas ===
    op.create_table(
        'cargas_horas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('periodo_id', sa.Integer(), sa.ForeignKey('periodos.id'), nullable=False),
        sa.Column('area_id', sa.Integer(), sa.ForeignKey('areas.id'), nullable=False),
        sa.Column('docente_id', sa.Integer(), sa.ForeignKey('docentes.id'), nullable=False),
        sa.Column('materia_text', sa.String(255), nullable=False),
        sa.Column('horas', sa.Numeric(10, 2), nullable=False),
        sa.Column('costo_hora', sa.Numeric(10, 2), nullable=False,
                  comment='Forzado a 0 cuando pagable es falso'),
        sa.Column('pagable', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1',
                  comment='Se incrementa en cada actualización (informativo)'),
        sa.Column('creado_por_id', sa.Integer(), sa.ForeignKey('usuarios.id'), nullable=False),
        sa.Column('creado_en', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('actualizado_en', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('periodo_id', 'area_id', 'docente_id', 'materia_text', name='uq_carga_llave_natural'),
        **MYSQL_OPTS
    )
    op.create_index('ix_cargas_horas_periodo_area_docente', 'cargas_horas', ['periodo_id', 'area_id', 'docente_id'])

    # === auditoria ===
    op.create_table(
        'auditoria',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('usuario_id', sa.Integer(), sa.ForeignKey('usuarios.id', ondelete='SET NULL'), nullable=True),
        sa.Column('accion', sa.String(50), nullable=False),
        sa.Column('entidad', sa.String(50), nullable=False),
        sa.Column('entidad_id', sa.Integer(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ts', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        **MYSQL_OPTS
    )
    op.create_index('ix_auditoria_usuario_id', 'auditoria', ['usuario_id'])
    op.create_index('ix_auditoria_accion', 'auditoria', ['accion'])


def downgrade() -> None:
    op.drop_table('auditoria')
    op.drop_table('cargas_horas')
    op.drop_table('periodos')
    op.drop_table('docentes')
    op.drop_table('coord_areas')
    op.drop_table('areas')
    op.drop_table('usuario_roles')
    op.drop_table('usuarios')
    op.drop_table('roles')
