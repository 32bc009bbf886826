# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .member_repository import MemberRepository
from .recharge_repository import RechargeRecordRepository, RechargeRuleRepository
from .consumption_repository import ConsumptionRepository
from .service_item_repository import ServiceItemRepository

__all__ = [
    "BaseRepository",
    "MemberRepository",
    "RechargeRuleRepository",
    "RechargeRecordRepository",
    "ConsumptionRepository",
    "ServiceItemRepository",
]
