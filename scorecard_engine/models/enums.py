"""
Enumerations shared by models, schemas and services.
"""
import enum


class UserRole(str, enum.Enum):
    """User role enumeration, ordered by breadth of visibility."""
    AGENT = "AGENT"
    TEAM_LEADER = "TEAM_LEADER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class MetricScheme(str, enum.Enum):
    """Metric representation stored on a scorecard record."""
    LEGACY = "legacy"  # eight 1-5 ratings
    RAW = "raw"        # eight 0-100 ratios derived from raw counters
