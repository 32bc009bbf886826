# ORM models - importing this package registers every table on Base.metadata

from .base import Base, BaseModel
from .member import Member
from .recharge import RechargeRecord, RechargeRule
from .consumption import ConsumptionItem, ConsumptionRecord
from .service_item import ServiceItem

__all__ = [
    "Base",
    "BaseModel",
    "Member",
    "RechargeRule",
    "RechargeRecord",
    "ConsumptionRecord",
    "ConsumptionItem",
    "ServiceItem",
]
