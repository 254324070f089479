from enum import Enum


class BaseEnumModel(str, Enum):
    """String enum rendered on the wire as its value."""

    def to_wire(self) -> str:
        return self.value

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.name}"
