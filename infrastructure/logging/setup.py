"""日志配置

使用标准 logging：控制台输出 + 可选的滚动文件。
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from infrastructure.config.settings import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """
    根据配置初始化根日志记录器

    重复调用会替换之前安装的处理器。

    Args:
        settings: 应用配置（log_level, log_file）
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())

    for handler in list(root.handlers):
        if getattr(handler, "_phone_verify", False):
            root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    console._phone_verify = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if settings.log_file:
        log_dir = os.path.dirname(settings.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler._phone_verify = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    # 第三方库日志降噪
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
