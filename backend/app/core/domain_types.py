"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - PromptId is a 10-char URL-safe string (shareable in links)
    - Money is always integer cents (Cents); commission rates are integer percents
    - Valid states encoded as Enums; DB columns store their .value

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to DB string columns
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

PromptId = NewType("PromptId", str)


# ─── Value Types ─────────────────────────────────────────────────

Cents = NewType("Cents", int)
CommissionRate = NewType("CommissionRate", int)   # percent, 0-100


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Platform-wide role. SUPER_ADMIN passes every role check."""
    USER = "user"
    COMMUNITY_ADMIN = "community_admin"
    SUPER_ADMIN = "super_admin"
    DEVELOPER = "developer"


class OnboardingStatus(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    COMPLETED = "completed"


class PayoutBatchStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class DisputeStatus(str, Enum):
    """Dispute lifecycle: open -> in_progress -> escalated -> resolved | closed."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    ESCALATED = "escalated"
    RESOLVED = "resolved"
    CLOSED = "closed"


class CreditTransactionType(str, Enum):
    EARN = "earn"
    SPEND = "spend"
    ADJUSTMENT = "adjustment"


class AISource(str, Enum):
    """Generator detected from image metadata."""
    MIDJOURNEY = "midjourney"
    COMFYUI = "comfyui"
    STABLE_DIFFUSION = "stable-diffusion"
    UNKNOWN = "unknown"
