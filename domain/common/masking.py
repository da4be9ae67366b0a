"""日志脱敏工具"""


def mask_destination(destination: str) -> str:
    """只保留号码/地址最后 4 位

    Args:
        destination: 手机号或邮箱地址

    Returns:
        脱敏后的字符串，例如 "***4567"
    """
    if len(destination) <= 4:
        return "****"
    return f"***{destination[-4:]}"
