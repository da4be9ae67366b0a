"""
依赖注入容器

用法：
    from infrastructure.containers import bootstrap

    boot = bootstrap()
    handler = boot.app.issue_verification_handler()
"""

from typing import Optional

from dependency_injector import containers, providers

from infrastructure.config.settings import Settings
from .application import AppContainer
from .config import ConfigContainer
from .infrastructure import InfraContainer


class Bootstrap(containers.DeclarativeContainer):
    """根容器：组装 config / infra / app 三层"""

    config = providers.Container(ConfigContainer)
    infra = providers.Container(InfraContainer, config=config)
    app = providers.Container(AppContainer, config=config, infra=infra)


def bootstrap(settings: Optional[Settings] = None) -> Bootstrap:
    """
    创建根容器

    Args:
        settings: 显式配置；不传则从环境变量/.env 读取

    Returns:
        Bootstrap 容器
    """
    boot = Bootstrap()
    if settings is not None:
        boot.config.settings.override(providers.Object(settings))
    return boot


__all__ = ["AppContainer", "Bootstrap", "ConfigContainer", "InfraContainer", "bootstrap"]
