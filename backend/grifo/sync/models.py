"""
Modelos do armazenamento local do app de vistoria.

Ficam em um banco SQLite próprio do dispositivo, separado dos modelos
do servidor. As chaves são UUIDs gerados no aparelho e também servem
de chave de idempotência nas chamadas à API.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from grifo.db.base import PgEnum, utcnow
from grifo.models.vistoria import TipoVistoria


class EstadoSync(str, enum.Enum):
    """Estado de sincronização de um item local."""

    LOCAL_ONLY = "local_only"
    PENDING_SYNC = "pending_sync"
    SYNCED = "synced"
    ERROR = "error"


class TipoUpload(str, enum.Enum):
    FOTO = "foto"
    PDF = "pdf"


class SyncBase(DeclarativeBase):
    """Base dos modelos locais."""

    local_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    criado_em: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


class ItemFila:
    """Campos de controle dos itens drenados pela fila."""

    estado: Mapped[EstadoSync] = mapped_column(
        PgEnum(EstadoSync),
        default=EstadoSync.LOCAL_ONLY,
        nullable=False,
        index=True,
    )
    tentativas: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ultimo_erro: Mapped[str | None] = mapped_column(Text)


class VistoriaRascunho(ItemFila, SyncBase):
    """Vistoria criada offline, ainda não confirmada pelo servidor."""

    __tablename__ = "vistorias_rascunho"

    imovel_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tipo: Mapped[TipoVistoria] = mapped_column(PgEnum(TipoVistoria), nullable=False)
    cliente_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    data_agendada: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    observacoes: Mapped[str | None] = mapped_column(Text)

    # Preenchido quando o servidor confirma a criação
    server_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    def __repr__(self) -> str:
        return f"<VistoriaRascunho(local_id={self.local_id}, estado={self.estado.value})>"


class AmbienteRascunho(SyncBase):
    """Ambiente de uma vistoria rascunho; enviado junto com ela."""

    __tablename__ = "ambientes_rascunho"

    vistoria_local_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias_rascunho.local_id"),
        nullable=False,
        index=True,
    )
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    ordem: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    observacoes: Mapped[str | None] = mapped_column(Text)
    server_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)


class FotoLocal(SyncBase):
    """Foto capturada no aparelho."""

    __tablename__ = "fotos_locais"

    vistoria_local_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias_rascunho.local_id"),
        nullable=False,
        index=True,
    )
    ambiente_local_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("ambientes_rascunho.local_id"),
    )
    # Reescrito com o id do servidor quando o ambiente é criado
    ambiente_id_servidor: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    caminho_arquivo: Mapped[str] = mapped_column(String(1000), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), default="image/jpeg", nullable=False)
    legenda: Mapped[str | None] = mapped_column(String(500))
    ordem: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    server_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)


class ItemUpload(ItemFila, SyncBase):
    """Transferência pendente de um arquivo local (foto ou laudo)."""

    __tablename__ = "itens_upload"

    tipo: Mapped[TipoUpload] = mapped_column(PgEnum(TipoUpload), nullable=False)
    vistoria_local_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias_rascunho.local_id"),
        nullable=False,
        index=True,
    )
    # Reescrito com o id do servidor quando a vistoria é criada
    vistoria_id_servidor: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    foto_local_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("fotos_locais.local_id"),
    )

    caminho_arquivo: Mapped[str] = mapped_column(String(1000), nullable=False)
    # URL do laudo já enviado; evita reenviar o PDF se só a finalização falhou
    url_remota: Mapped[str | None] = mapped_column(String(1000))

    def __repr__(self) -> str:
        return f"<ItemUpload(local_id={self.local_id}, tipo={self.tipo.value}, estado={self.estado.value})>"
