from .member import Member, MemberCreate, MemberUpdate, MemberDetail
from .ledger import ConsumptionItemSchema, ConsumptionRecordSchema, RechargeRecordSchema
from .recharge import RechargeRequest, RechargeResponse, RechargeRuleSchema
from .checkout import CartLineRequest, CheckoutRequest, CheckoutResponse
from .service_item import ServiceItemSchema
from .operator import Operator, OperatorRole
