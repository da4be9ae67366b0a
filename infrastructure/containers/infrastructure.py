"""
基础设施容器（InfraContainer）

管理所有基础设施组件：数据库、验证记录存储、投递网关、用户目录。
依赖 ConfigContainer 获取配置。
"""

from dependency_injector import containers, providers
from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from infrastructure.database.database_factory import DatabaseFactory
from infrastructure.verification.directory.in_memory_user_directory import InMemoryUserDirectory
from infrastructure.verification.gateways.logging_delivery_gateway import LoggingDeliveryGateway
from infrastructure.verification.gateways.twilio_delivery_gateway import TwilioDeliveryGateway
from infrastructure.verification.repositories.in_memory_verification_store import (
    InMemoryVerificationStore,
)
from infrastructure.verification.repositories.sqlalchemy_verification_store import (
    SqlAlchemyVerificationStore,
)


class InfraContainer(containers.DeclarativeContainer):
    """基础设施容器 - 管理技术实现"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # ============ 数据库 ============

    # 数据库引擎（单例）
    db_engine: providers.Singleton[Engine] = providers.Singleton(
        DatabaseFactory.create_engine,
        database_url=config.settings.provided.database_url,
    )

    # Session 工厂（单例）
    db_session_factory: providers.Singleton[sessionmaker] = providers.Singleton(
        DatabaseFactory.create_session_factory,
        engine=db_engine,
    )

    # ============ 验证记录存储 ============

    # 按 store_backend 选择；sqlalchemy 存储每次操作自建 Session，可安全单例
    verification_store = providers.Selector(
        config.settings.provided.store_backend,
        memory=providers.Singleton(InMemoryVerificationStore),
        sqlalchemy=providers.Singleton(
            SqlAlchemyVerificationStore,
            session_factory=db_session_factory,
        ),
    )

    # ============ 投递网关 ============

    delivery_gateway = providers.Selector(
        config.settings.provided.delivery_backend,
        logging=providers.Singleton(LoggingDeliveryGateway),
        twilio=providers.Singleton(
            TwilioDeliveryGateway,
            account_sid=config.settings.provided.twilio_account_sid,
            auth_token=config.settings.provided.twilio_auth_token,
            from_number=config.settings.provided.twilio_from_number,
            app_name=config.settings.provided.app_name,
            api_base=config.settings.provided.twilio_api_base,
            timeout=config.settings.provided.delivery_timeout_seconds,
        ),
    )

    # ============ 用户目录 ============

    user_directory = providers.Singleton(InMemoryUserDirectory)
