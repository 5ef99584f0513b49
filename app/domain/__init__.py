"""
app/domain package marker.
"""

from app.domain.quote_record import (
    GccSpecification,
    GroupType,
    QuoteOutcome,
    QuoteRecord,
    RawValues,
)
from app.domain.quote_statistics import (
    NO_DATA_LABEL,
    OTHER_UNKNOWN_LABEL,
    BucketStats,
    CategoryCount,
    EidChassisSummary,
    GroupStats,
    MakeModelChassisSummary,
    ModelChassisSummary,
    OutcomeBreakdown,
    QuoteStatistics,
    SalesConversionStats,
    TrendPoint,
    UniqueChassisSummary,
    UniqueRequestSummary,
)

__all__ = [
    "BucketStats",
    "CategoryCount",
    "EidChassisSummary",
    "GccSpecification",
    "GroupStats",
    "GroupType",
    "MakeModelChassisSummary",
    "ModelChassisSummary",
    "NO_DATA_LABEL",
    "OTHER_UNKNOWN_LABEL",
    "OutcomeBreakdown",
    "QuoteOutcome",
    "QuoteRecord",
    "QuoteStatistics",
    "RawValues",
    "SalesConversionStats",
    "TrendPoint",
    "UniqueChassisSummary",
    "UniqueRequestSummary",
]
