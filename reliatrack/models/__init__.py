"""
Database models for ReliaTrack.

Importing this package registers every table on ``Base.metadata``.
"""

from reliatrack.models.user import MemberRole, SubscriptionTier, User
from reliatrack.models.organization import Organization
from reliatrack.models.asset import Asset, AssetCondition, AssetStatus
from reliatrack.models.analysis import (
    AnalysisStatus,
    Criticality,
    FMEAEntry,
    RCAEntry,
    RCMEntry,
)
from reliatrack.models.maintenance import (
    MaintenanceTask,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from reliatrack.models.provider import Provider, ProviderTier, ServiceCategory
from reliatrack.models.procedure import Procedure, ProcedurePriority, ProcedureType
from reliatrack.models.invitation import InvitationStatus, TeamInvitation

__all__ = [
    "AnalysisStatus",
    "Asset",
    "AssetCondition",
    "AssetStatus",
    "Criticality",
    "FMEAEntry",
    "InvitationStatus",
    "MaintenanceTask",
    "MemberRole",
    "Organization",
    "Procedure",
    "ProcedurePriority",
    "ProcedureType",
    "Provider",
    "ProviderTier",
    "RCAEntry",
    "RCMEntry",
    "ServiceCategory",
    "SubscriptionTier",
    "TaskPriority",
    "TaskStatus",
    "TaskType",
    "TeamInvitation",
    "User",
]
