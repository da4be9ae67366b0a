"""领域层公共基类"""

from domain.common.base_entity import BaseEntity
from domain.common.base_value_object import BaseValueObject

__all__ = ["BaseEntity", "BaseValueObject"]
