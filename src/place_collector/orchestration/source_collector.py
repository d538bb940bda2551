"""取得元ごとの収集処理"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional, Sequence

from .events import CollectorEvent, ProgressEvent, SourceCollection, TaskFailure, TaskReport
from .paginated_fetcher import PaginatedFetcher
from ..adapters.search_source import RemoteError, describe_remote_error
from ..domain.models import RawItem, SearchTask, SourceVariant


class SourceCollector:
    """
    1つの取得元に対する全タスクの収集

    Responsibilities:
    - タスクを列挙順に逐次実行（ページ間・タスク間の待機で負荷を抑える）
    - 1ページ目の失敗はタスク単位でスキップ、2ページ目以降の失敗はページ単位でスキップ
    - 取得した生データへのタスク情報・収集日時・取得元の付与
    - 進捗イベントの発行
    """

    # ページ間の待機時間（秒）
    PAGE_DELAY_SECONDS = 0.5

    # タスク間の待機時間（秒）
    TASK_DELAY_SECONDS = 1.0

    def __init__(
        self,
        fetcher: PaginatedFetcher,
        page_delay_seconds: Optional[float] = None,
        task_delay_seconds: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            fetcher: ページ取得
            page_delay_seconds: ページ間の待機時間（秒）
            task_delay_seconds: タスク間の待機時間（秒）
            sleep: 待機関数。None の場合は fetcher と同じもの
            clock: 収集日時の取得関数
        """
        self.fetcher = fetcher
        self.page_delay_seconds = (
            page_delay_seconds if page_delay_seconds is not None else self.PAGE_DELAY_SECONDS
        )
        self.task_delay_seconds = (
            task_delay_seconds if task_delay_seconds is not None else self.TASK_DELAY_SECONDS
        )
        self.sleep = sleep or fetcher.sleep
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logging.getLogger(__name__)

    @property
    def source(self) -> SourceVariant:
        return self.fetcher.source.source

    def collect(self, tasks: Sequence[SearchTask]) -> SourceCollection:
        """
        全タスクを実行して結果をまとめる

        Args:
            tasks: 列挙順の検索タスク

        Returns:
            SourceCollection: 収集結果
        """
        collection = SourceCollection(source=self.source)
        for event in self.stream(tasks):
            if isinstance(event, TaskReport):
                collection.absorb(event)
        return collection

    def stream(self, tasks: Sequence[SearchTask]) -> Iterator[CollectorEvent]:
        """
        全タスクを実行し、進捗イベントとタスク結果イベントを順に返す

        Args:
            tasks: 列挙順の検索タスク

        Yields:
            ProgressEvent | TaskReport
        """
        total = len(tasks)
        last_percent = 0.0

        self.logger.info(
            f"Starting collection of {total} queries",
            extra={"source": self.source.value}
        )

        for completed, task in enumerate(tasks):
            if completed > 0:
                self.sleep(self.task_delay_seconds)

            self.logger.info(
                f"==== Collecting {task.query_string} ====",
                extra={"source": self.source.value, "task_index": task.index}
            )

            items: List[RawItem] = []
            failure: Optional[TaskFailure] = None
            failed_pages = 0

            try:
                first_page = self.fetcher.fetch(task, 1)
            except RemoteError as e:
                self.logger.error(
                    f"Skipping query after first page failure: {task.query_string}",
                    extra={"source": self.source.value, "status_code": e.status_code, "error": str(e)}
                )
                failure = TaskFailure(
                    task=task,
                    source=self.source,
                    status_code=e.status_code,
                    message=str(e),
                    user_message=describe_remote_error(e),
                )
            else:
                items.extend(first_page.items)
                total_available = first_page.total_available

                for offset in self.fetcher.next_offsets(total_available):
                    self.sleep(self.page_delay_seconds)
                    try:
                        page = self.fetcher.fetch(task, offset)
                        items.extend(page.items)
                    except RemoteError as e:
                        failed_pages += 1
                        self.logger.warning(
                            f"Failed to fetch page at {offset} for {task.query_string}",
                            extra={"source": self.source.value, "status_code": e.status_code, "error": str(e)}
                        )

                    page_progress = min(offset / total_available * 100, 100)
                    percent = (completed / total) * 100 + (page_progress / 100) * (1 / total) * 100
                    last_percent = max(last_percent, min(percent, 100.0))
                    yield ProgressEvent(
                        percent=last_percent,
                        message=f"{task.query_string} - {offset}/{total_available}",
                        source=self.source,
                    )

                self.logger.info(
                    f"{task.query_string}: collected {len(items)} items",
                    extra={"source": self.source.value, "failed_pages": failed_pages}
                )

            yield TaskReport(
                task=task,
                source=self.source,
                items=self._stamp(items, task),
                failure=failure,
                failed_pages=failed_pages,
            )

            last_percent = max(last_percent, (completed + 1) / total * 100)
            yield ProgressEvent(
                percent=last_percent,
                message=f"completed {completed + 1}/{total}",
                source=self.source,
            )

    def _stamp(self, items: List[RawItem], task: SearchTask) -> List[RawItem]:
        """生データにタスク情報・収集日時・取得元を付与 (新しいインスタンスを返す)"""
        collected_at = self.clock().isoformat()
        return [
            item.model_copy(
                update={
                    "province": task.province,
                    "district": task.district,
                    "keyword": task.keyword,
                    "search_query": task.query_string,
                    "collected_at": collected_at,
                    "source": self.source,
                }
            )
            for item in items
        ]
