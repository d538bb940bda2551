"""
オーケストレーション層

ページ取得・取得元ごとの収集・パイプライン全体の実行を提供します。
"""

from .paginated_fetcher import PaginatedFetcher, RetryPolicy, AttemptResult, AttemptStatus
from .events import ProgressEvent, TaskReport, TaskFailure, SourceCollection
from .source_collector import SourceCollector
from .pipeline_service import PipelineService, PipelineResult, PipelineFinished, EmptyResultError

__all__ = [
    "PaginatedFetcher",
    "RetryPolicy",
    "AttemptResult",
    "AttemptStatus",
    "ProgressEvent",
    "TaskReport",
    "TaskFailure",
    "SourceCollection",
    "SourceCollector",
    "PipelineService",
    "PipelineResult",
    "PipelineFinished",
    "EmptyResultError",
]
