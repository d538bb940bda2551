"""
ドメイン層

検索タスク列挙・データ正規化・統合・フィルタ・集計ロジックを提供します。
"""

from .models import (
    UNCLASSIFIED,
    SourceVariant,
    Region,
    SearchTask,
    MapItem,
    GraphQLItem,
    PageResult,
    CanonicalRecord,
    ReconciliationResult,
    PipelineStatistics,
)
from .enumerator import RegionKeywordEnumerator
from .normalizer import RecordNormalizer
from .reconciler import Reconciler
from .filters import ExclusionFilter, ExclusionResult, Cleaner, DataValidationError
from .statistics import StatisticsCalculator

__all__ = [
    "UNCLASSIFIED",
    "SourceVariant",
    "Region",
    "SearchTask",
    "MapItem",
    "GraphQLItem",
    "PageResult",
    "CanonicalRecord",
    "ReconciliationResult",
    "PipelineStatistics",
    "RegionKeywordEnumerator",
    "RecordNormalizer",
    "Reconciler",
    "ExclusionFilter",
    "ExclusionResult",
    "Cleaner",
    "DataValidationError",
    "StatisticsCalculator",
]
