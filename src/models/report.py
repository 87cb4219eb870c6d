from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, new_id


class Report(Base):
    """Persisted income statement draft; rendering happens elsewhere."""

    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    report_id: Mapped[str] = mapped_column(String(20), unique=True)  # PV-YYYY-XXXXXX
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    title: Mapped[str | None] = mapped_column(String(255))
    date_from: Mapped[datetime] = mapped_column(DateTime)
    date_to: Mapped[datetime] = mapped_column(DateTime)
    template: Mapped[str] = mapped_column(String(30), default="STANDARD")
    transaction_ids: Mapped[str] = mapped_column(Text, default="[]")  # JSON list of tx hashes
    # Same float arithmetic as summarize_transactions
    total_income: Mapped[float] = mapped_column(Float, default=0.0)
    total_verified: Mapped[float] = mapped_column(Float, default=0.0)
    transaction_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (Index("idx_reports_user_created", "user_id", "created_at"),)
