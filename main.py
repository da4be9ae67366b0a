"""
Phone Verify - 手机号验证服务 API 入口

运行：
    uv run python main.py

或使用 uvicorn：
    uv run uvicorn main:app --host 0.0.0.0 --port 8000 --reload

API 文档：
    http://localhost:8000/docs
"""

import uvicorn

from interfaces.api import create_app

# 导出 FastAPI app (用于 uvicorn)
app = create_app()


if __name__ == "__main__":
    print("=" * 50)
    print("启动 Phone Verify")
    print("=" * 50)
    print()
    print("API 端点:")
    print("  POST /api/v1/verifications        - 发送验证码")
    print("  POST /api/v1/verifications/check  - 校验验证码")
    print()
    print("文档: http://localhost:8000/docs")
    print("=" * 50)

    uvicorn.run(app, host="0.0.0.0", port=8000)
