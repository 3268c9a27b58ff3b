from .user import User
from .activity import DailyActivity
from .dev_flow_score import DevFlowScore
from .xp_transaction import XpTransaction
from .verdict import DailyVerdict
from .freeze_event import FreezeEvent

__all__ = [
    "User",
    "DailyActivity",
    "DevFlowScore",
    "XpTransaction",
    "DailyVerdict",
    "FreezeEvent",
]
