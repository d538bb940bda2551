"""ページ単位の取得とリトライ制御"""

import logging
import time
from enum import Enum
from typing import Callable, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..adapters.search_source import (
    RemoteError,
    RemoteTransientError,
    SearchSource,
)
from ..domain.models import PageResult, SearchTask


class AttemptStatus(str, Enum):
    """1回のリクエスト試行の結果区分"""
    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    FATAL_FAILURE = "fatal_failure"


class AttemptResult(BaseModel):
    """
    1回のリクエスト試行の結果

    Attributes:
        status: 結果区分
        page: 成功時の取得結果
        error: 失敗時の例外
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: AttemptStatus
    page: Optional[PageResult] = None
    error: Optional[RemoteError] = None


class RetryPolicy(BaseModel):
    """
    リトライ方針

    Attributes:
        max_attempts: 最大試行回数
        base_delay_seconds: 初回リトライまでの待機時間（秒）。以降は倍々に増加
    """

    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0)

    def delay_for(self, attempt: int) -> float:
        """attempt 回目の失敗後の待機時間（秒）"""
        return self.base_delay_seconds * (2 ** (attempt - 1))


class PaginatedFetcher:
    """
    1つの取得元に対するページ取得

    Responsibilities:
    - 1ページ分のリクエスト試行と結果の区分け
    - 503 応答時の指数バックオフ付きリトライ
    - タスクごとに走査するオフセットの上限管理
    """

    # 1タスクあたりの最大取得件数
    MAX_ITEMS = 1000

    def __init__(
        self,
        source: SearchSource,
        retry_policy: Optional[RetryPolicy] = None,
        max_items: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            source: 検索 API クライアント
            retry_policy: リトライ方針。None の場合は既定値
            max_items: 1タスクあたりの最大取得件数
            sleep: 待機関数（テスト時に差し替え）
        """
        self.source = source
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_items = max_items if max_items is not None else self.MAX_ITEMS
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    @property
    def page_size(self) -> int:
        return self.source.page_size

    def attempt(self, task: SearchTask, page_offset: int) -> AttemptResult:
        """
        リクエストを1回試行し、結果を区分して返す

        RemoteError 以外の例外はそのまま送出されます。
        """
        try:
            page = self.source.fetch_page(task.query_string, page_offset)
        except RemoteTransientError as e:
            return AttemptResult(status=AttemptStatus.RETRYABLE_FAILURE, error=e)
        except RemoteError as e:
            return AttemptResult(status=AttemptStatus.FATAL_FAILURE, error=e)
        return AttemptResult(status=AttemptStatus.SUCCESS, page=page)

    def fetch(self, task: SearchTask, page_offset: int) -> PageResult:
        """
        リトライ付きで1ページ取得

        Args:
            task: 検索タスク
            page_offset: 開始位置 (1始まり)

        Returns:
            PageResult: 取得結果

        Raises:
            RemoteTransientError: 最大試行回数まで 503 が続いた場合
            RemoteFatalError: リトライ対象外のエラー（即座に送出）
        """
        max_attempts = self.retry_policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            result = self.attempt(task, page_offset)

            if result.status == AttemptStatus.SUCCESS:
                return result.page

            if result.status == AttemptStatus.FATAL_FAILURE:
                raise result.error

            if attempt == max_attempts:
                self.logger.error(
                    f"Max retries exceeded for query: {task.query_string}",
                    extra={"start": page_offset, "error": str(result.error)}
                )
                raise RemoteTransientError(
                    f"最大リトライ回数({max_attempts})を超えました: {result.error}",
                    status_code=result.error.status_code,
                    query=task.query_string,
                ) from result.error

            delay = self.retry_policy.delay_for(attempt)
            self.logger.warning(
                f"Transient error, retrying in {delay}s (attempt {attempt}/{max_attempts})",
                extra={"query": task.query_string, "start": page_offset, "error": str(result.error)}
            )
            self.sleep(delay)

    def next_offsets(self, total_available: int) -> Iterator[int]:
        """
        2ページ目以降の開始位置を順に返す

        min(total_available, max_items) を超える開始位置は返しません。
        """
        limit = min(total_available, self.max_items)
        offset = 1 + self.page_size
        while offset <= limit:
            yield offset
            offset += self.page_size
