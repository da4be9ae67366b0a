"""数据库引擎与 Session 工厂"""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from infrastructure.database.base import Base

logger = logging.getLogger(__name__)


class DatabaseFactory:
    """数据库工厂

    根据 URL 创建引擎：
    - SQLite 内存库使用 StaticPool，让所有线程共享同一连接
    - SQLite 文件库关闭 check_same_thread
    - 其他数据库启用 pool_pre_ping
    """

    @staticmethod
    def create_engine(database_url: str, echo: bool = False) -> Engine:
        """创建数据库引擎并建表"""
        if database_url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in database_url:
                kwargs["poolclass"] = StaticPool
            engine = create_engine(database_url, echo=echo, **kwargs)
        else:
            engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

        # 导入模型以注册到 metadata
        import infrastructure.verification.models.pending_verification_model  # noqa: F401

        Base.metadata.create_all(engine)
        logger.info(f"Database engine created ({engine.url.get_backend_name()})")
        return engine

    @staticmethod
    def create_session_factory(engine: Engine) -> sessionmaker[Session]:
        """创建 Session 工厂"""
        return sessionmaker(bind=engine, expire_on_commit=False)
