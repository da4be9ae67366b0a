"""SQLAlchemy 声明式基类"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """所有数据模型的基类，确保所有表在同一 metadata 中"""
