"""
Initial migration - Grifo Vistorias

Revision ID: 001
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _enum(name: str, *values: str) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _empresa_fk() -> sa.Column:
    return sa.Column("empresa_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("empresas.id"), nullable=False)


def upgrade() -> None:
    # ========================
    # ENUMS (valores do Enum Python)
    # ========================
    op.execute("CREATE TYPE userrole AS ENUM ('vistoriador', 'corretor', 'admin', 'superadmin')")
    op.execute("CREATE TYPE tipoimovel AS ENUM ('apartamento', 'casa', 'comercial')")
    op.execute("CREATE TYPE tipovistoria AS ENUM ('entrada', 'saida', 'periodica')")
    op.execute("CREATE TYPE statusvistoria AS ENUM ('rascunho', 'em_andamento', 'finalizada', 'contestada')")
    op.execute("CREATE TYPE urgenciasolicitacao AS ENUM ('baixa', 'media', 'alta')")
    op.execute("""CREATE TYPE statussolicitacao AS ENUM (
        'pendente', 'aprovada', 'rejeitada', 'alteracoes_solicitadas'
    )""")
    op.execute("CREATE TYPE tipodestinatario AS ENUM ('admin', 'cliente')")
    op.execute("""CREATE TYPE tiponotificacao AS ENUM (
        'inspection_request_created', 'inspection_request_approved',
        'inspection_request_rejected', 'inspection_request_changes_requested',
        'inspection_scheduled', 'inspection_status_changed', 'report_available'
    )""")

    # ========================
    # TABELA: empresas (tenant)
    # ========================
    op.create_table(
        "empresas",
        *_timestamps(),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("cnpj", sa.String(18), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("telefone", sa.String(20), nullable=True),
        sa.Column("ativa", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("storage_mb", sa.Integer(), nullable=False, server_default="1000"),
        sa.Column("configuracoes", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        sa.PrimaryKeyConstraint("id"),
    )

    # ========================
    # TABELA: usuarios
    # ========================
    op.create_table(
        "usuarios",
        *_timestamps(),
        sa.Column("firebase_uid", sa.String(128), nullable=True, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("telefone", sa.String(20), nullable=True),
        sa.Column("role", _enum("userrole", "vistoriador", "corretor", "admin", "superadmin"), nullable=False, server_default="vistoriador"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("ultimo_login", sa.DateTime(timezone=True), nullable=True),
        # Superadmin não tem empresa
        sa.Column("empresa_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("empresas.id"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_usuarios_email", "usuarios", ["email"])
    op.create_index("ix_usuarios_firebase_uid", "usuarios", ["firebase_uid"])
    op.create_index("ix_usuarios_empresa_id", "usuarios", ["empresa_id"])

    # ========================
    # TABELA: imoveis
    # ========================
    op.create_table(
        "imoveis",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("codigo", sa.String(50), nullable=False),
        sa.Column("tipo", _enum("tipoimovel", "apartamento", "casa", "comercial"), nullable=False),
        sa.Column("endereco", sa.Text(), nullable=False),
        sa.Column("cidade", sa.String(100), nullable=True),
        sa.Column("estado", sa.String(2), nullable=True),
        sa.Column("cep", sa.String(10), nullable=True),
        sa.Column("proprietario_nome", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("empresa_id", "codigo", name="uq_imoveis_empresa_codigo"),
    )
    op.create_index("ix_imoveis_empresa_id", "imoveis", ["empresa_id"])

    # ========================
    # TABELA: clientes
    # ========================
    op.create_table(
        "clientes",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("telefone", sa.String(20), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("empresa_id", "email", name="uq_clientes_empresa_email"),
    )
    op.create_index("ix_clientes_empresa_id", "clientes", ["empresa_id"])
    op.create_index("ix_clientes_email", "clientes", ["email"])

    # ========================
    # TABELA: solicitacoes_vistoria
    # ========================
    op.create_table(
        "solicitacoes_vistoria",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("cliente_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clientes.id"), nullable=False),
        sa.Column("endereco_imovel", sa.Text(), nullable=False),
        sa.Column("tipo", _enum("tipovistoria", "entrada", "saida", "periodica"), nullable=False),
        sa.Column("urgencia", _enum("urgenciasolicitacao", "baixa", "media", "alta"), nullable=False, server_default="media"),
        sa.Column("status", _enum("statussolicitacao", "pendente", "aprovada", "rejeitada", "alteracoes_solicitadas"), nullable=False, server_default="pendente"),
        sa.Column("observacoes", sa.Text(), nullable=True),
        sa.Column("comentario_decisao", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_solicitacoes_vistoria_empresa_id", "solicitacoes_vistoria", ["empresa_id"])
    op.create_index("ix_solicitacoes_vistoria_cliente_id", "solicitacoes_vistoria", ["cliente_id"])
    op.create_index("ix_solicitacoes_vistoria_status", "solicitacoes_vistoria", ["status"])

    # ========================
    # TABELA: vistorias
    # ========================
    op.create_table(
        "vistorias",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("imovel_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("imoveis.id"), nullable=False),
        sa.Column("vistoriador_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("usuarios.id"), nullable=False),
        sa.Column("cliente_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clientes.id"), nullable=True),
        sa.Column("tipo", _enum("tipovistoria", "entrada", "saida", "periodica"), nullable=False),
        sa.Column("status", _enum("statusvistoria", "rascunho", "em_andamento", "finalizada", "contestada"), nullable=False, server_default="rascunho"),
        sa.Column("data_agendada", sa.DateTime(timezone=True), nullable=True),
        sa.Column("data_finalizacao", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pdf_url", sa.String(1000), nullable=True),
        sa.Column("drive_url", sa.String(1000), nullable=True),
        sa.Column("token_contestacao", sa.String(128), nullable=True),
        sa.Column("idempotency_key", sa.String(128), nullable=True),
        sa.Column("observacoes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("empresa_id", "idempotency_key", name="uq_vistorias_empresa_idempotency"),
    )
    op.create_index("ix_vistorias_empresa_id", "vistorias", ["empresa_id"])
    op.create_index("ix_vistorias_imovel_id", "vistorias", ["imovel_id"])
    op.create_index("ix_vistorias_vistoriador_id", "vistorias", ["vistoriador_id"])
    op.create_index("ix_vistorias_cliente_id", "vistorias", ["cliente_id"])
    op.create_index("ix_vistorias_status", "vistorias", ["status"])
    op.create_index("ix_vistorias_token_contestacao", "vistorias", ["token_contestacao"])

    # ========================
    # TABELA: ambientes
    # ========================
    op.create_table(
        "ambientes",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("vistoria_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vistorias.id"), nullable=False),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("ordem", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("observacoes", sa.Text(), nullable=True),
        sa.Column("idempotency_key", sa.String(128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("empresa_id", "idempotency_key", name="uq_ambientes_empresa_idempotency"),
    )
    op.create_index("ix_ambientes_empresa_id", "ambientes", ["empresa_id"])
    op.create_index("ix_ambientes_vistoria_id", "ambientes", ["vistoria_id"])

    # ========================
    # TABELA: fotos
    # ========================
    op.create_table(
        "fotos",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("vistoria_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vistorias.id"), nullable=False),
        sa.Column("ambiente_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("ambientes.id"), nullable=True),
        sa.Column("storage_path", sa.String(500), nullable=False),
        sa.Column("url", sa.String(1000), nullable=True),
        sa.Column("legenda", sa.String(500), nullable=True),
        sa.Column("ordem", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("idempotency_key", sa.String(128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("empresa_id", "idempotency_key", name="uq_fotos_empresa_idempotency"),
    )
    op.create_index("ix_fotos_empresa_id", "fotos", ["empresa_id"])
    op.create_index("ix_fotos_vistoria_id", "fotos", ["vistoria_id"])
    op.create_index("ix_fotos_ambiente_id", "fotos", ["ambiente_id"])

    # ========================
    # TABELAS: contestação
    # ========================
    op.create_table(
        "links_contestacao",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("vistoria_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vistorias.id"), nullable=False),
        sa.Column("token", sa.String(128), nullable=False, unique=True),
        sa.Column("expira_em", sa.DateTime(timezone=True), nullable=False),
        sa.Column("utilizado", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_links_contestacao_empresa_id", "links_contestacao", ["empresa_id"])
    op.create_index("ix_links_contestacao_vistoria_id", "links_contestacao", ["vistoria_id"])
    op.create_index("ix_links_contestacao_token", "links_contestacao", ["token"])

    op.create_table(
        "contestacoes",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("vistoria_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vistorias.id"), nullable=False),
        sa.Column("link_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("links_contestacao.id"), nullable=False),
        sa.Column("nome_contestante", sa.String(255), nullable=False),
        sa.Column("email_contestante", sa.String(255), nullable=False),
        sa.Column("motivo", sa.Text(), nullable=False),
        sa.Column("resolvida", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contestacoes_empresa_id", "contestacoes", ["empresa_id"])
    op.create_index("ix_contestacoes_vistoria_id", "contestacoes", ["vistoria_id"])

    # ========================
    # TABELA: notificacoes
    # ========================
    op.create_table(
        "notificacoes",
        *_timestamps(),
        _empresa_fk(),
        sa.Column("recipient_type", _enum("tipodestinatario", "admin", "cliente"), nullable=False),
        sa.Column("recipient_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "tipo",
            _enum(
                "tiponotificacao",
                "inspection_request_created", "inspection_request_approved",
                "inspection_request_rejected", "inspection_request_changes_requested",
                "inspection_scheduled", "inspection_status_changed", "report_available",
            ),
            nullable=False,
        ),
        sa.Column("titulo", sa.String(255), nullable=False),
        sa.Column("mensagem", sa.Text(), nullable=False),
        sa.Column("lida", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("metadados", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notificacoes_empresa_id", "notificacoes", ["empresa_id"])
    op.create_index("ix_notificacoes_recipient_id", "notificacoes", ["recipient_id"])
    op.create_index("ix_notificacoes_tipo", "notificacoes", ["tipo"])
    op.create_index("ix_notificacoes_lida", "notificacoes", ["lida"])

    # ========================
    # TABELA: registros_auditoria
    # ========================
    op.create_table(
        "registros_auditoria",
        *_timestamps(),
        sa.Column("empresa_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("empresas.id"), nullable=True),
        sa.Column("usuario_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("usuarios.id"), nullable=True),
        sa.Column("acao", sa.String(100), nullable=False),
        sa.Column("recurso_tipo", sa.String(50), nullable=False),
        sa.Column("recurso_id", sa.String(64), nullable=True),
        sa.Column("detalhes", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_registros_auditoria_empresa_id", "registros_auditoria", ["empresa_id"])
    op.create_index("ix_registros_auditoria_usuario_id", "registros_auditoria", ["usuario_id"])
    op.create_index("ix_registros_auditoria_acao", "registros_auditoria", ["acao"])


def downgrade() -> None:
    # Ordem reversa (respeitar FKs)
    op.drop_table("registros_auditoria")
    op.drop_table("notificacoes")
    op.drop_table("contestacoes")
    op.drop_table("links_contestacao")
    op.drop_table("fotos")
    op.drop_table("ambientes")
    op.drop_table("vistorias")
    op.drop_table("solicitacoes_vistoria")
    op.drop_table("clientes")
    op.drop_table("imoveis")
    op.drop_table("usuarios")
    op.drop_table("empresas")

    for enum_name in (
        "tiponotificacao",
        "tipodestinatario",
        "statussolicitacao",
        "urgenciasolicitacao",
        "statusvistoria",
        "tipovistoria",
        "tipoimovel",
        "userrole",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
