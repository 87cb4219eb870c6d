from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, new_id


class VerifiedSender(Base):
    """Address registered as belonging to a known company (reference data)."""

    __tablename__ = "verified_senders"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    address: Mapped[str] = mapped_column(String(64))
    chain_id: Mapped[int] = mapped_column(Integer)
    company_name: Mapped[str] = mapped_column(String(255))
    official_label: Mapped[str] = mapped_column(String(255))
    logo_url: Mapped[str | None] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_verified_senders_lookup", "address", "chain_id", "is_active"),
    )


class TransactionMeta(Base):
    """User-owned metadata for an on-chain transfer.

    Transfer data itself is never stored; rows exist only once a user
    labels a transaction or links it to a verified sender.
    """

    __tablename__ = "transaction_meta"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    tx_hash: Mapped[str] = mapped_column(String(80))
    chain_id: Mapped[int] = mapped_column(Integer)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    wallet_id: Mapped[str] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"))
    user_label: Mapped[str | None] = mapped_column(String(500))
    verified_sender_id: Mapped[str | None] = mapped_column(
        ForeignKey("verified_senders.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("tx_hash", "chain_id", name="uq_transaction_meta_hash_chain"),
        Index("idx_transaction_meta_user", "user_id"),
    )
