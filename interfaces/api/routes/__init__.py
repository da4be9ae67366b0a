"""
REST API 路由

定义 REST API 端点。
"""

from interfaces.api.routes.verification import router as verification_router

__all__ = ["verification_router"]
