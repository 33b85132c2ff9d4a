"""create_lista_chequeo

Crea las tablas de la lista de chequeo: categorías, etapas, ítems, registros
de contrato y respuestas.  Los datos de referencia se cargan después con
``seed_lista_chequeo.py``.

Revision ID: 5c2d8e41a7b3
Revises:
Create Date: 2026-03-02 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c2d8e41a7b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'lista_chequeo_categorias',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(100), nullable=False, unique=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('hoja_excel', sa.String(50), nullable=False),
        sa.Column('orden', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'lista_chequeo_etapas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(50), nullable=False, unique=True),
        sa.Column('orden', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'lista_chequeo_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('numero_item', sa.Integer(), nullable=False),
        sa.Column('titulo', sa.String(500), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('etapa_id', sa.Integer(), sa.ForeignKey('lista_chequeo_etapas.id'), nullable=False),
        sa.Column('categoria_id', sa.Integer(), sa.ForeignKey('lista_chequeo_categorias.id'), nullable=False),
        sa.Column('fila_excel', sa.Integer(), nullable=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint('categoria_id', 'numero_item', name='uq_item_categoria_numero'),
    )
    op.create_index('ix_lista_chequeo_items_categoria', 'lista_chequeo_items', ['categoria_id'])

    op.create_table(
        'lista_chequeo_registros',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('dependencia', sa.String(100), nullable=True),
        sa.Column('categoria_id', sa.Integer(), sa.ForeignKey('lista_chequeo_categorias.id'), nullable=True),
        sa.Column('numero_contrato', sa.String(100), nullable=False),
        sa.Column('contratista', sa.String(300), nullable=False),
        sa.Column('valor_contrato', sa.Numeric(18, 2), nullable=True),
        sa.Column('objeto', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'lista_chequeo_respuestas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('registro_id', sa.Integer(), sa.ForeignKey('lista_chequeo_registros.id'), nullable=False),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('lista_chequeo_items.id'), nullable=False),
        sa.Column('respuesta', sa.String(20), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('registro_id', 'item_id', name='uq_respuesta_registro_item'),
        sa.CheckConstraint(
            "respuesta IS NULL OR respuesta IN ('CUMPLE', 'NO_CUMPLE', 'NO_APLICA')",
            name='ck_respuesta_valor',
        ),
    )
    op.create_index('ix_lista_chequeo_respuestas_registro', 'lista_chequeo_respuestas', ['registro_id'])


def downgrade() -> None:
    op.drop_index('ix_lista_chequeo_respuestas_registro', table_name='lista_chequeo_respuestas')
    op.drop_table('lista_chequeo_respuestas')
    op.drop_table('lista_chequeo_registros')
    op.drop_index('ix_lista_chequeo_items_categoria', table_name='lista_chequeo_items')
    op.drop_table('lista_chequeo_items')
    op.drop_table('lista_chequeo_etapas')
    op.drop_table('lista_chequeo_categorias')
