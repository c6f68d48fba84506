"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Money columns are integer cents; credits are integer units

Design Decisions:
    - One file per aggregate (user, community, prompt, marketplace, dispute, ledger, ...)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.community import (  # noqa: F401
    Community, UserCommunity, CommunityAdmin, CommunityInvite,
)
from app.models.prompt import (  # noqa: F401
    Collection, Prompt, PromptLike, PromptFavorite,
)
from app.models.character_preset import CharacterPreset  # noqa: F401
from app.models.achievement import Achievement, UserAchievement  # noqa: F401
from app.models.credits import UserCredits, CreditTransaction, DailyReward  # noqa: F401
from app.models.marketplace import (  # noqa: F401
    SellerProfile, MarketplaceListing, MarketplaceOrder,
)
from app.models.dispute import MarketplaceDispute, DisputeMessage  # noqa: F401
from app.models.ledger import TransactionLedger, PayoutBatch, PlatformSetting  # noqa: F401
from app.models.note import Note  # noqa: F401
