"""
検索 API 抽象基底クラス

取得元ごとのリクエスト形式・レスポンス形状の差異を吸収するための
抽象インターフェースを定義します。新しい取得元を追加する場合は、
このクラスを継承して具象クラスを実装します。
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Type

import requests
from pydantic import ValidationError

from ..domain.models import PageResult, RawPlaceItem, SourceVariant

# リトライ対象の HTTP ステータス (サーバー過負荷)
RETRYABLE_STATUS_CODES = frozenset({503})


class RemoteError(Exception):
    """
    検索 API エラー例外

    HTTP エラー、接続タイムアウト、レスポンス解析失敗などを表します。
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        query: Optional[str] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            status_code: HTTP ステータスコード（該当する場合）
            query: エラーが発生した検索語
        """
        super().__init__(message)
        self.status_code = status_code
        self.query = query


class RemoteTransientError(RemoteError):
    """一時的なエラー (503 など)。リトライ対象です。"""


class RemoteFatalError(RemoteError):
    """リトライしないエラー (503 以外の HTTP エラー、ネットワークエラーなど)"""


def describe_remote_error(error: Exception) -> str:
    """
    エラーを利用者向けメッセージに変換

    Args:
        error: 発生した例外

    Returns:
        str: 利用者向けメッセージ
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(error, RemoteError) and status_code is None:
        return "ネットワーク接続を確認してください。接続が不安定な可能性があります。"
    if status_code == 503:
        return "サーバーが一時的に過負荷状態です。しばらくしてから再試行してください。"
    if status_code == 429:
        return "リクエストが多すぎます。しばらくしてから再試行してください。"
    if status_code is not None:
        return "サーバーからデータを取得中にエラーが発生しました。"
    return "予期しないエラーが発生しました。"


class SearchSource(ABC):
    """
    検索 API クライアント抽象基底クラス

    取得元ごとに異なるリクエスト・レスポンス形式を吸収し、
    統一的なインターフェースで1ページ分の検索結果を取得します。
    リクエストヘッダーなどの固定メタデータは生成時に外部から渡します。
    """

    # リクエストタイムアウト（秒）
    TIMEOUT = 30

    DEFAULT_HEADERS: Dict[str, str] = {
        "accept": "application/json, text/plain, */*",
        "accept-language": "ko-KR,ko;q=0.8,en-US;q=0.6,en;q=0.4",
        "user-agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
        ),
    }

    def __init__(
        self,
        source: SourceVariant,
        source_name: str,
        page_size: int,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            source: 取得元区分
            source_name: 取得元名（ログ用）
            page_size: 1リクエストあたりの取得件数
            headers: 既定ヘッダーに上書きするリクエストヘッダー
            session: HTTP セッション。None の場合は新規作成
            timeout: リクエストタイムアウト（秒）
        """
        self.source = source
        self.source_name = source_name
        self.page_size = page_size
        self.headers = {**self.DEFAULT_HEADERS, **(headers or {})}
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else self.TIMEOUT
        self.logger = logging.getLogger(__name__)

    @abstractmethod
    def fetch_page(self, query: str, start: int) -> PageResult:
        """
        検索結果を1ページ取得

        Args:
            query: 検索語
            start: 開始位置 (1始まり)

        Returns:
            PageResult: 取得した生データと検索結果の総件数

        Raises:
            RemoteTransientError: 503 応答時
            RemoteFatalError: その他の HTTP エラー・ネットワークエラー・解析失敗時
        """
        pass

    def _request_json(self, method: str, url: str, query: str, **kwargs: Any) -> Any:
        """
        HTTP リクエストを送信し JSON を返す

        requests の例外を RemoteError 系の例外に変換します。
        """
        response = None
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = response.status_code if response is not None else None
            error_class = (
                RemoteTransientError
                if status_code in RETRYABLE_STATUS_CODES
                else RemoteFatalError
            )
            raise error_class(
                f"HTTP エラー ({self.source_name}): {e}",
                status_code=status_code,
                query=query,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteFatalError(
                f"ネットワークエラー ({self.source_name}): {e}",
                query=query,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteFatalError(
                f"レスポンスの JSON 解析に失敗しました ({self.source_name}): {e}",
                status_code=response.status_code,
                query=query,
            )

    def _parse_items(
        self, raw_items: Iterable[Any], model: Type[RawPlaceItem]
    ) -> List[RawPlaceItem]:
        """
        生データの辞書リストをモデルに変換

        変換できない要素は警告ログを出してスキップします。
        """
        items = []
        for raw in raw_items or []:
            if not isinstance(raw, dict):
                self.logger.warning(
                    f"Skipping non-object item from {self.source_name}",
                    extra={"item_type": type(raw).__name__}
                )
                continue
            try:
                items.append(model.model_validate(raw))
            except ValidationError as e:
                self.logger.warning(
                    f"Skipping malformed item from {self.source_name}",
                    extra={"error": str(e)}
                )
        return items

    @staticmethod
    def _safe_int(value: Any) -> int:
        """総件数を0以上の整数に変換 (変換できない場合は0)"""
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return 0
