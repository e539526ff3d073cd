import enum
from typing import Any


class BaseEnum(str, enum.Enum):
    @classmethod
    def has(cls, item: Any) -> bool:
        return item in cls._value2member_map_

    def __str__(self) -> str:
        return str(self.value)
