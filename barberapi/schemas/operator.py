from enum import Enum

from pydantic import BaseModel


class OperatorRole(str, Enum):
    STAFF = "staff"  # 점원
    ADMIN = "admin"  # 관리자


class Operator(BaseModel):
    """요청을 수행하는 점원"""

    name: str
    role: OperatorRole = OperatorRole.STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == OperatorRole.ADMIN
