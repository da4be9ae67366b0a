"""FastAPI 应用工厂"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from infrastructure.config.settings import Settings, get_settings
from infrastructure.containers import Bootstrap, bootstrap
from infrastructure.logging import configure_logging
from interfaces.api.routes.verification import (
    router as verification_router,
    set_check_handler_getter,
    set_issue_handler_getter,
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[Bootstrap] = None,
) -> FastAPI:
    """
    创建 FastAPI 应用

    1. 初始化日志
    2. 创建 DI 容器，并把 handler 获取器注册到路由
    3. 生命周期内启动/停止过期清扫服务

    Args:
        settings: 显式配置；不传则从环境变量读取
        container: 预先构建的容器（测试用）

    Returns:
        FastAPI 实例
    """
    settings = settings or get_settings()
    configure_logging(settings)
    boot = container or bootstrap(settings)

    # 注册 Handler Getters（连接 DI 容器到路由）
    set_issue_handler_getter(boot.app.issue_verification_handler)
    set_check_handler_getter(boot.app.check_verification_handler)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sweep = None
        if settings.sweep_interval_seconds > 0:
            sweep = boot.app.expiry_sweep_service()
            await sweep.start()
        logger.info(f"{settings.app_name} started (env={settings.app_env})")
        try:
            yield
        finally:
            if sweep is not None:
                await sweep.stop()
            boot.app.verification_service().close()
            logger.info(f"{settings.app_name} stopped")

    app = FastAPI(
        title=settings.app_name,
        description="手机号验证服务 - 发送一次性验证码并校验",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.container = boot

    app.include_router(verification_router, prefix="/api/v1", tags=["手机号验证"])

    @app.get("/health")
    async def health() -> dict:
        """健康检查"""
        return {"status": "healthy"}

    return app
