"""待验证记录 SQLAlchemy 数据模型"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.base import Base


class PendingVerificationModel(Base):
    """
    待验证记录数据库模型

    对应领域层的 PendingVerification 实体。
    时间统一以 naive UTC 存储。
    """

    __tablename__ = "pending_verifications"

    # 主键：每个号码最多一条记录
    destination: Mapped[str] = mapped_column(String(320), primary_key=True)
    id: Mapped[str] = mapped_column(String(36), nullable=False)

    # 验证码
    code_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    channel: Mapped[str] = mapped_column(String(16), nullable=False, default="sms")

    # 次数
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=5)

    # 时间戳
    issued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # 版本
    version: Mapped[int] = mapped_column(default=0)

    def __repr__(self) -> str:
        return (
            f"<PendingVerificationModel(destination=***{self.destination[-4:]}, "
            f"channel={self.channel}, attempts={self.attempts}/{self.max_attempts})>"
        )
