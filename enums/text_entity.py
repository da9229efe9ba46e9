from enum import Enum


class TextEntity(Enum):
    USER = "user"
    COMMON = "common"
