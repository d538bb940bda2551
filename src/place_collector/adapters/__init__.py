"""
アダプター層

取得元ごとの検索 API 呼び出し・レスポンス変換ロジックを提供します。
"""

from .search_source import (
    SearchSource,
    RemoteError,
    RemoteTransientError,
    RemoteFatalError,
    describe_remote_error,
)
from .naver_map_source import NaverMapSource
from .naver_graphql_source import NaverGraphQLSource

__all__ = [
    "SearchSource",
    "RemoteError",
    "RemoteTransientError",
    "RemoteFatalError",
    "describe_remote_error",
    "NaverMapSource",
    "NaverGraphQLSource",
]
