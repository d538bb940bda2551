"""
地図検索 API クライアント (primary)

ネイバー地図の統合検索 API (allSearch) から事業所情報を取得します。
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .search_source import SearchSource
from ..domain.models import MapItem, PageResult, SourceVariant


class NaverMapSource(SearchSource):
    """
    地図検索 API 向けクライアント実装

    キー・バリュー形式のクエリパラメータで検索し、
    result.place.list を MapItem に変換します。
    """

    BASE_URL = "https://map.naver.com/p/api/search/allSearch"

    # 検索の基準座標 (経度;緯度)
    SEARCH_COORD = "126.99760199999827;37.56384299999955"

    # 1リクエストあたりの取得件数
    PAGE_SIZE = 50

    def __init__(
        self,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        search_coord: Optional[str] = None,
    ):
        """
        Args:
            headers: 追加のリクエストヘッダー
            session: HTTP セッション
            timeout: リクエストタイムアウト（秒）
            search_coord: 検索の基準座標。None の場合は SEARCH_COORD
        """
        super().__init__(
            source=SourceVariant.PRIMARY,
            source_name="map",
            page_size=self.PAGE_SIZE,
            headers=headers,
            session=session,
            timeout=timeout,
        )
        self.search_coord = search_coord or self.SEARCH_COORD

    def build_params(self, query: str, start: int) -> Dict[str, Any]:
        """検索リクエストのクエリパラメータを組み立てる"""
        return {
            "query": query,
            "type": "all",
            "searchCoord": self.search_coord,
            "boundary": "",
            "start": start,
            "display": self.page_size,
        }

    def build_headers(self, query: str) -> Dict[str, str]:
        """検索語に応じた referer を付与したヘッダー"""
        referer = f"https://map.naver.com/p/search/{quote(query)}?c=12.00,0,0,0,dh"
        return {**self.headers, "referer": referer}

    def fetch_page(self, query: str, start: int) -> PageResult:
        """
        地図検索 API から検索結果を1ページ取得

        Args:
            query: 検索語
            start: 開始位置 (1始まり)

        Returns:
            PageResult: 取得結果。result.place がない場合は空

        Raises:
            RemoteTransientError: 503 応答時
            RemoteFatalError: その他のエラー時
        """
        data = self._request_json(
            "GET",
            self.BASE_URL,
            query,
            params=self.build_params(query, start),
            headers=self.build_headers(query),
        )

        result = data.get("result") if isinstance(data, dict) else None
        place = result.get("place") if isinstance(result, dict) else None
        if not place:
            self.logger.warning(f"No place results for query: {query}")
            return PageResult(items=[], total_available=0)

        return PageResult(
            items=self._parse_items(place.get("list") or [], MapItem),
            total_available=self._safe_int(place.get("totalCount")),
        )

