"""
应用容器（AppContainer）

管理应用层组件：验证服务、清扫服务、命令处理器。
依赖 InfraContainer 获取基础设施。
"""

from dependency_injector import containers, providers

from application.commands.verification import (
    CheckVerificationHandler,
    IssueVerificationHandler,
)
from application.verification.services.expiry_sweep_service import ExpirySweepService
from application.verification.services.verification_service import VerificationService
from domain.verification.services.code_generator import CodeHasher, NumericCodeGenerator
from infrastructure.config.settings import Settings


class AppContainer(containers.DeclarativeContainer):
    """应用容器 - 管理应用层服务"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # 依赖基础设施容器
    infra = providers.DependenciesContainer()

    # ============ 验证策略 ============

    verification_policy = providers.Singleton(
        Settings.verification_policy,
        config.settings,
    )

    code_generator = providers.Singleton(
        NumericCodeGenerator,
        length=config.settings.provided.code_length,
    )

    code_hasher = providers.Singleton(
        CodeHasher,
        secret=config.settings.provided.code_hash_secret,
    )

    # ============ 应用服务 ============

    # 验证服务（单例：持有按号码的锁和投递线程池）
    verification_service = providers.Singleton(
        VerificationService,
        store=infra.verification_store,
        gateway=infra.delivery_gateway,
        policy=verification_policy,
        code_hasher=code_hasher,
        code_generator=code_generator,
    )

    # 过期清扫服务（单例）
    expiry_sweep_service = providers.Singleton(
        ExpirySweepService,
        store=infra.verification_store,
        interval=config.settings.provided.sweep_interval_seconds,
    )

    # ============ 命令处理器 ============

    issue_verification_handler = providers.Factory(
        IssueVerificationHandler,
        verification_service=verification_service,
    )

    check_verification_handler = providers.Factory(
        CheckVerificationHandler,
        verification_service=verification_service,
        user_directory=infra.user_directory,
    )
