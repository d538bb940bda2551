"""
GraphQL 検索 API クライアント (secondary)

ネイバー プレイスの GraphQL API から事業所情報を取得します。
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .search_source import SearchSource
from ..domain.models import GraphQLItem, PageResult, SourceVariant


class NaverGraphQLSource(SearchSource):
    """
    GraphQL 検索 API 向けクライアント実装

    単一エンドポイントに operationName・クエリ文書・変数を POST し、
    data.businesses.items を GraphQLItem に変換します。
    """

    BASE_URL = "https://pcmap-api.place.naver.com/graphql"

    OPERATION_NAME = "getPlacesList"

    QUERY = """
      query getPlacesList($input: PlacesInput) {
        businesses: places(input: $input) {
          total
          items {
            id
            name
            normalizedName
            category
            roadAddress
            address
            fullAddress
            commonAddress
            phone
            virtualPhone
            businessHours
            imageUrl
            imageCount
            x
            y
            visitorReviewCount
            visitorReviewScore
            __typename
          }
          __typename
        }
      }
    """

    # 検索の基準座標・クライアント座標・検索範囲 (ソウル中心)
    SEARCH_COORD = {"x": "126.97838799999755", "y": "37.566610000000395"}
    CLIENT_COORD = {"x": "126.960025", "y": "37.550192"}
    BOUNDS = "126.66012780712356;37.4026058227488;127.30351464794438;37.72482300100256"

    DEVICE_TYPE = "pcmap"

    # 1リクエストあたりの取得件数
    PAGE_SIZE = 70

    def __init__(
        self,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            headers: 追加のリクエストヘッダー
            session: HTTP セッション
            timeout: リクエストタイムアウト（秒）
        """
        super().__init__(
            source=SourceVariant.SECONDARY,
            source_name="graphql",
            page_size=self.PAGE_SIZE,
            headers={
                "accept": "*/*",
                "content-type": "application/json",
                "origin": "https://pcmap.place.naver.com",
                **(headers or {}),
            },
            session=session,
            timeout=timeout,
        )

    def build_payload(self, query: str, start: int) -> List[Dict[str, Any]]:
        """GraphQL のバッチリクエスト本文を組み立てる"""
        variables = {
            "input": {
                "query": query,
                "start": start,
                "display": self.page_size,
                "adult": False,
                "spq": False,
                "queryRank": "",
                "x": self.SEARCH_COORD["x"],
                "y": self.SEARCH_COORD["y"],
                "clientX": self.CLIENT_COORD["x"],
                "clientY": self.CLIENT_COORD["y"],
                "bounds": self.BOUNDS,
                "deviceType": self.DEVICE_TYPE,
            }
        }
        return [
            {
                "operationName": self.OPERATION_NAME,
                "query": self.QUERY,
                "variables": variables,
            }
        ]

    def build_headers(self, query: str) -> Dict[str, str]:
        """検索語に応じた referer を付与したヘッダー"""
        referer = (
            f"https://pcmap.place.naver.com/place/list?query={quote(query)}"
            f"&x={self.SEARCH_COORD['x']}&y={self.SEARCH_COORD['y']}"
            f"&display={self.page_size}&locale=ko"
        )
        return {**self.headers, "referer": referer}

    def fetch_page(self, query: str, start: int) -> PageResult:
        """
        GraphQL API から検索結果を1ページ取得

        Args:
            query: 検索語
            start: 開始位置 (1始まり)

        Returns:
            PageResult: 取得結果。businesses がない場合は空

        Raises:
            RemoteTransientError: 503 応答時
            RemoteFatalError: その他のエラー時
        """
        data = self._request_json(
            "POST",
            self.BASE_URL,
            query,
            json=self.build_payload(query, start),
            headers=self.build_headers(query),
        )

        businesses = self._extract_businesses(data)
        if businesses is None:
            self.logger.warning(f"No businesses in GraphQL response for query: {query}")
            return PageResult(items=[], total_available=0)

        return PageResult(
            items=self._parse_items(businesses.get("items") or [], GraphQLItem),
            total_available=self._safe_int(businesses.get("total")),
        )

    @staticmethod
    def _extract_businesses(data: Any) -> Optional[Dict[str, Any]]:
        # バッチ応答の先頭要素の data.businesses
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            return None
        inner = data.get("data")
        businesses = inner.get("businesses") if isinstance(inner, dict) else None
        return businesses if isinstance(businesses, dict) else None
