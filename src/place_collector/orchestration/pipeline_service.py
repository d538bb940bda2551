"""収集・統合パイプラインのオーケストレーション"""

import logging
import time
import uuid
from typing import Iterable, Iterator, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from .events import ProgressEvent, SourceCollection, TaskFailure, TaskReport
from .source_collector import SourceCollector
from ..domain.enumerator import RegionKeywordEnumerator
from ..domain.filters import Cleaner, DataValidationError, ExclusionFilter
from ..domain.models import CanonicalRecord, PipelineStatistics, Region, SearchTask
from ..domain.normalizer import RecordNormalizer
from ..domain.reconciler import Reconciler
from ..domain.statistics import StatisticsCalculator


class EmptyResultError(Exception):
    """
    空結果例外

    両方の取得元からデータが得られなかった場合、または
    フィルタ・整理の後に有効なデータが残らなかった場合を表します。
    """


class PipelineResult(BaseModel):
    """
    パイプライン実行結果

    Attributes:
        success: 実行が成功したか
        records: 最終データ（列挙順）
        statistics: 集計値（成功時のみ）
        errors: エラーメッセージリスト
        failed_tasks: スキップしたタスク
        execution_id: 実行 ID
        execution_time_seconds: 実行時間（秒）
    """
    success: bool
    records: List[CanonicalRecord] = []
    statistics: Optional[PipelineStatistics] = None
    errors: List[str] = []
    failed_tasks: List[TaskFailure] = []
    execution_id: str = ""
    execution_time_seconds: float = 0.0


class PipelineFinished(BaseModel):
    """パイプライン完了イベント（イベント列の最後に1回だけ発行）"""
    kind: Literal["finished"] = "finished"
    result: PipelineResult


PipelineEvent = Union[ProgressEvent, PipelineFinished]


class PipelineService:
    """
    収集・統合パイプライン全体のオーケストレーション

    Responsibilities:
    - 検索タスクの列挙
    - primary → secondary の順で取得元ごとに収集（primary 完了後に secondary を開始）
    - 正規化・統合・重複除去・除外キーワードフィルタ・整理・集計の調整
    - 致命的エラーを失敗結果 (PipelineResult) として返す
    """

    # 全体進捗に占める各段階の範囲 (%)
    PRIMARY_PROGRESS_RANGE: Tuple[float, float] = (0.0, 40.0)
    SECONDARY_PROGRESS_RANGE: Tuple[float, float] = (40.0, 80.0)
    PROCESSING_PROGRESS = 80.0

    def __init__(
        self,
        primary_collector: SourceCollector,
        secondary_collector: SourceCollector,
        enumerator: Optional[RegionKeywordEnumerator] = None,
        normalizer: Optional[RecordNormalizer] = None,
        reconciler: Optional[Reconciler] = None,
        exclusion_filter: Optional[ExclusionFilter] = None,
        cleaner: Optional[Cleaner] = None,
        statistics_calculator: Optional[StatisticsCalculator] = None,
    ):
        """
        PipelineService を初期化

        Args:
            primary_collector: 優先する取得元 (baseline) の収集
            secondary_collector: 追加する取得元 (incoming) の収集
            enumerator: 検索タスク列挙
            normalizer: データ正規化
            reconciler: 取得元統合・重複除去
            exclusion_filter: 除外キーワードフィルタ
            cleaner: データ整理
            statistics_calculator: 集計
        """
        self.primary_collector = primary_collector
        self.secondary_collector = secondary_collector
        self.enumerator = enumerator or RegionKeywordEnumerator()
        self.normalizer = normalizer or RecordNormalizer()
        self.reconciler = reconciler or Reconciler()
        self.exclusion_filter = exclusion_filter or ExclusionFilter()
        self.cleaner = cleaner or Cleaner()
        self.statistics_calculator = statistics_calculator or StatisticsCalculator()
        self.logger = logging.getLogger(__name__)

    def run_pipeline(
        self,
        regions: Sequence[Region],
        keywords: Sequence[str],
        exclude_keywords: Sequence[str] = (),
        selected_provinces: Optional[Iterable[str]] = None,
    ) -> PipelineResult:
        """
        パイプラインを実行して結果を返す

        進捗イベントはデバッグログに出力されます。

        Args:
            regions: 地域一覧
            keywords: 検索キーワード
            exclude_keywords: 除外キーワード
            selected_provinces: 対象とする市・道名（空の場合は全地域）

        Returns:
            PipelineResult: 実行結果
        """
        result = None
        for event in self.iter_run(regions, keywords, exclude_keywords, selected_provinces):
            if isinstance(event, PipelineFinished):
                result = event.result
            else:
                self.logger.debug(f"Progress {event.percent:.1f}%: {event.message}")
        return result

    def iter_run(
        self,
        regions: Sequence[Region],
        keywords: Sequence[str],
        exclude_keywords: Sequence[str] = (),
        selected_provinces: Optional[Iterable[str]] = None,
    ) -> Iterator[PipelineEvent]:
        """
        パイプラインを実行し、進捗イベントと完了イベントを順に返す

        Yields:
            ProgressEvent | PipelineFinished（最後に1回）

        Invariants: 致命的エラー時も例外を送出せず PipelineFinished を返す
        """
        start_time = time.time()
        execution_id = self._generate_execution_id()
        primary = SourceCollection(source=self.primary_collector.source)
        secondary = SourceCollection(source=self.secondary_collector.source)

        try:
            self.logger.info(
                f"Starting pipeline with keywords: {', '.join(keywords)}",
                extra={
                    "execution_id": execution_id,
                    "exclude_keywords": list(exclude_keywords),
                    "selected_provinces": list(selected_provinces or []),
                }
            )

            tasks = self.enumerator.enumerate_tasks(regions, keywords, selected_provinces)
            self.logger.info(f"Enumerated {len(tasks)} search tasks")
            yield ProgressEvent(percent=0.0, message="preparing")

            # primary を完了してから secondary を開始する
            yield from self._collect(self.primary_collector, tasks, primary, self.PRIMARY_PROGRESS_RANGE)
            self.logger.info(f"Primary source collected {len(primary.items)} raw items")

            yield from self._collect(self.secondary_collector, tasks, secondary, self.SECONDARY_PROGRESS_RANGE)
            self.logger.info(f"Secondary source collected {len(secondary.items)} raw items")

            if not primary.items and not secondary.items:
                raise EmptyResultError("両方の取得元からデータを取得できませんでした")

            yield ProgressEvent(percent=self.PROCESSING_PROGRESS, message="processing")

            primary_records = [self.normalizer.normalize(item, primary.source) for item in primary.items]
            secondary_records = [self.normalizer.normalize(item, secondary.source) for item in secondary.items]

            reconciliation = self.reconciler.combine_data_sources(primary_records, secondary_records)
            self.logger.info(
                f"Combined data: {len(primary_records)} baseline + "
                f"{reconciliation.added_count} added = {len(reconciliation.merged_records)} "
                f"({reconciliation.duplicate_count} duplicates)"
            )

            deduplicated = self.reconciler.deduplicate_data(reconciliation.merged_records)

            exclusion = self.exclusion_filter.filter_by_exclude_keywords(deduplicated, exclude_keywords)
            self.logger.info(
                f"Exclusion filter kept {len(exclusion.kept)} records (excluded {exclusion.excluded_count})"
            )

            cleaned = self.cleaner.clean_data(exclusion.kept)
            self.logger.info(f"Cleaned data: {len(cleaned)} records")

            if not cleaned:
                raise EmptyResultError("処理後に有効なデータがありません")

            self.cleaner.validate_data(cleaned)

            statistics = self.statistics_calculator.calculate(
                cleaned,
                excluded_count=exclusion.excluded_count,
                added_count=reconciliation.added_count,
                duplicate_count=reconciliation.duplicate_count,
            )

            execution_time = time.time() - start_time
            self.logger.info(
                "Pipeline completed",
                extra={
                    "execution_id": execution_id,
                    "total_count": statistics.total_count,
                    "per_source_counts": statistics.per_source_counts,
                    "failed_task_count": len(primary.failed_tasks) + len(secondary.failed_tasks),
                    "execution_time_seconds": execution_time,
                }
            )

            yield ProgressEvent(percent=100.0, message="completed")
            yield PipelineFinished(
                result=PipelineResult(
                    success=True,
                    records=cleaned,
                    statistics=statistics,
                    failed_tasks=primary.failed_tasks + secondary.failed_tasks,
                    execution_id=execution_id,
                    execution_time_seconds=execution_time,
                )
            )

        except (EmptyResultError, DataValidationError) as e:
            self.logger.error(f"Pipeline failed: {str(e)}", extra={"execution_id": execution_id})
            yield self._failure(e, primary, secondary, execution_id, start_time)

        except Exception as e:
            self.logger.error(f"Pipeline failed unexpectedly: {str(e)}", exc_info=True)
            yield self._failure(e, primary, secondary, execution_id, start_time)

    def _collect(
        self,
        collector: SourceCollector,
        tasks: List[SearchTask],
        collection: SourceCollection,
        progress_range: Tuple[float, float],
    ) -> Iterator[ProgressEvent]:
        """収集イベントを取り込み、進捗を全体の範囲に換算して返す"""
        low, high = progress_range
        for event in collector.stream(tasks):
            if isinstance(event, TaskReport):
                collection.absorb(event)
            else:
                yield ProgressEvent(
                    percent=low + event.percent * (high - low) / 100,
                    message=f"[{event.source.value}] {event.message}",
                    source=event.source,
                )

    def _failure(
        self,
        error: Exception,
        primary: SourceCollection,
        secondary: SourceCollection,
        execution_id: str,
        start_time: float,
    ) -> PipelineFinished:
        return PipelineFinished(
            result=PipelineResult(
                success=False,
                errors=[str(error)],
                failed_tasks=primary.failed_tasks + secondary.failed_tasks,
                execution_id=execution_id,
                execution_time_seconds=time.time() - start_time,
            )
        )

    def _generate_execution_id(self) -> str:
        """
        実行 ID 生成（UUID）

        Returns:
            str: UUID 形式の実行 ID
        """
        return str(uuid.uuid4())
