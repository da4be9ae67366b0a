"""
应用配置管理

使用 pydantic-settings 管理环境变量和配置
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.verification.value_objects.verification_policy import VerificationPolicy


class Settings(BaseSettings):
    """
    应用配置类

    自动从环境变量和 .env 文件读取配置
    """

    # ========== 应用环境 ==========
    app_env: Literal["test", "dev", "staging", "prod"] = "dev"
    app_name: str = "PhoneVerify"
    app_version: str = "1.0.0"
    debug: bool = False

    # ========== 验证策略 ==========
    code_length: int = Field(default=6, ge=4, le=10)
    ttl_seconds: int = Field(default=600, gt=0)
    max_attempts: int = Field(default=5, ge=1)
    reissue_interval_seconds: int = Field(default=60, ge=0)
    delivery_timeout_seconds: float = Field(default=10.0, gt=0)
    # <= 0 表示不启动后台清扫
    sweep_interval_seconds: float = 60.0
    # 验证码摘要密钥，生产环境必须设置
    code_hash_secret: str = "change-me"

    # ========== 存储配置 ==========
    store_backend: Literal["memory", "sqlalchemy"] = "memory"
    dev_db_path: str = "data/dev.db"
    staging_database_url: str = ""
    prod_database_url: str = ""

    # ========== 投递配置 ==========
    delivery_backend: Literal["logging", "twilio"] = "logging"
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""
    twilio_api_base: str = "https://api.twilio.com/2010-04-01"

    # ========== 日志配置 ==========
    log_level: str = "INFO"
    log_file: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # 忽略未定义的环境变量
    )

    @property
    def is_test(self) -> bool:
        """是否为测试环境"""
        return self.app_env == "test"

    @property
    def is_dev(self) -> bool:
        """是否为开发环境"""
        return self.app_env == "dev"

    @property
    def database_url(self) -> str:
        """获取当前环境的数据库 URL"""
        if self.is_test:
            return "sqlite:///:memory:"
        elif self.is_dev:
            return f"sqlite:///{self.dev_db_path}"
        elif self.app_env == "staging":
            return self.staging_database_url
        else:  # prod
            return self.prod_database_url

    def verification_policy(self) -> VerificationPolicy:
        """构造验证策略值对象"""
        return VerificationPolicy(
            code_length=self.code_length,
            ttl_seconds=self.ttl_seconds,
            max_attempts=self.max_attempts,
            reissue_interval_seconds=self.reissue_interval_seconds,
            delivery_timeout_seconds=self.delivery_timeout_seconds,
        )


# 全局配置实例（单例），只在组装根（容器）中读取
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    获取配置实例（单例模式）

    Returns:
        Settings 实例
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
