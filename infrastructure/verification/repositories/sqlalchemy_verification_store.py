"""待验证记录 SQLAlchemy 存储实现"""

from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.common.exceptions import (
    StoreUnavailableException,
    VerificationNotFoundException,
)
from domain.verification.entities.pending_verification import PendingVerification
from domain.verification.repositories.verification_store import VerificationStore
from domain.verification.value_objects.delivery_channel import DeliveryChannel
from infrastructure.verification.models.pending_verification_model import (
    PendingVerificationModel,
)


def _to_db_time(value: datetime) -> datetime:
    """转换为 naive UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


class SqlAlchemyVerificationStore(VerificationStore):
    """
    待验证记录 SQLAlchemy 存储实现

    每次操作使用独立 Session（Session 非线程安全），
    次数递增使用单条 UPDATE 语句，避免读改写丢失更新。
    数据库异常统一转换为 StoreUnavailableException。
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """
        初始化存储

        Args:
            session_factory: Session 工厂
        """
        self._session_factory = session_factory

    def put(self, record: PendingVerification) -> None:
        """保存记录（按号码覆盖）"""
        try:
            with self._session_factory() as session:
                session.merge(self._to_model(record))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableException("put failed", e) from e

    def get(self, destination: str, now: datetime) -> Optional[PendingVerification]:
        """获取有效记录"""
        try:
            with self._session_factory() as session:
                model = session.get(PendingVerificationModel, destination)
                if model is None:
                    return None
                entity = self._to_entity(model)
        except SQLAlchemyError as e:
            raise StoreUnavailableException("get failed", e) from e

        if entity.is_expired(now):
            return None
        return entity

    def increment_attempts(self, destination: str, now: datetime) -> int:
        """失败次数加一"""
        db_now = _to_db_time(now)
        try:
            with self._session_factory() as session:
                result = session.execute(
                    update(PendingVerificationModel)
                    .where(
                        PendingVerificationModel.destination == destination,
                        PendingVerificationModel.expires_at >= db_now,
                        PendingVerificationModel.attempts < PendingVerificationModel.max_attempts,
                    )
                    .values(
                        attempts=PendingVerificationModel.attempts + 1,
                        version=PendingVerificationModel.version + 1,
                        updated_at=db_now,
                    )
                )
                if result.rowcount == 0:
                    session.rollback()
                    raise VerificationNotFoundException(destination)

                attempts = session.execute(
                    select(PendingVerificationModel.attempts).where(
                        PendingVerificationModel.destination == destination
                    )
                ).scalar_one()
                session.commit()
                return attempts
        except SQLAlchemyError as e:
            raise StoreUnavailableException("increment_attempts failed", e) from e

    def delete(self, destination: str) -> bool:
        """删除记录"""
        try:
            with self._session_factory() as session:
                result = session.execute(
                    delete(PendingVerificationModel).where(
                        PendingVerificationModel.destination == destination
                    )
                )
                session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise StoreUnavailableException("delete failed", e) from e

    def purge_expired(self, now: datetime) -> int:
        """清理过期记录"""
        try:
            with self._session_factory() as session:
                result = session.execute(
                    delete(PendingVerificationModel).where(
                        PendingVerificationModel.expires_at < _to_db_time(now)
                    )
                )
                session.commit()
                return result.rowcount
        except SQLAlchemyError as e:
            raise StoreUnavailableException("purge_expired failed", e) from e

    def _to_model(self, entity: PendingVerification) -> PendingVerificationModel:
        """将领域实体转换为数据模型"""
        return PendingVerificationModel(
            destination=entity.destination,
            id=str(entity.id),
            code_hash=entity.code_hash,
            channel=entity.channel.value,
            attempts=entity.attempts,
            max_attempts=entity.max_attempts,
            issued_at=_to_db_time(entity.issued_at),
            expires_at=_to_db_time(entity.expires_at),
            updated_at=_to_db_time(entity.updated_at) if entity.updated_at else None,
            version=entity.version,
        )

    def _to_entity(self, model: PendingVerificationModel) -> PendingVerification:
        """将数据模型转换为领域实体"""
        issued_at = _from_db_time(model.issued_at)
        return PendingVerification(
            id=UUID(model.id),
            destination=model.destination,
            code_hash=model.code_hash,
            channel=DeliveryChannel(model.channel),
            issued_at=issued_at,
            expires_at=_from_db_time(model.expires_at),
            attempts=model.attempts,
            max_attempts=model.max_attempts,
            created_at=issued_at,
            updated_at=_from_db_time(model.updated_at),
            version=model.version,
        )
