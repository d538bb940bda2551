"""
SearchSource 抽象基底クラスのユニットテスト

HTTP エラーの分類 (503 はリトライ対象、その他は致命的) と
生データの変換を検証します。
"""
import pytest
import requests
from unittest.mock import Mock

from src.place_collector.adapters.search_source import (
    RemoteError,
    RemoteFatalError,
    RemoteTransientError,
    SearchSource,
    describe_remote_error,
)
from src.place_collector.domain.models import MapItem, PageResult, SourceVariant


class DummySource(SearchSource):
    """テスト用の具象クラス"""

    def __init__(self, session):
        super().__init__(
            source=SourceVariant.PRIMARY,
            source_name="dummy",
            page_size=10,
            headers={"x-test": "1"},
            session=session,
            timeout=5,
        )

    def fetch_page(self, query, start):
        data = self._request_json("GET", "https://example.com/search", query, params={"q": query})
        return PageResult(
            items=self._parse_items(data.get("items"), MapItem),
            total_available=self._safe_int(data.get("total")),
        )


def make_response(status_code=200, json_data=None, json_error=None):
    response = Mock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error"
        )
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    return Mock()


class TestSearchSourceInterface:
    """抽象インターフェースのテスト"""

    def test_cannot_instantiate_abstract_class(self):
        with pytest.raises(TypeError):
            SearchSource(SourceVariant.PRIMARY, "x", 10)

    def test_headers_merged_with_defaults(self, session):
        source = DummySource(session)
        assert source.headers["x-test"] == "1"
        assert "user-agent" in source.headers

    def test_timeout_passed_to_request(self, session):
        session.request.return_value = make_response(json_data={"items": [], "total": 0})

        DummySource(session).fetch_page("검색어", 1)

        session.request.assert_called_once_with(
            "GET", "https://example.com/search", timeout=5, params={"q": "검색어"}
        )


class TestRequestErrors:
    """HTTP エラー分類のテスト"""

    def test_503_is_transient(self, session):
        """503 はリトライ対象のエラー"""
        session.request.return_value = make_response(status_code=503)

        with pytest.raises(RemoteTransientError) as exc_info:
            DummySource(session).fetch_page("검색어", 1)

        assert exc_info.value.status_code == 503
        assert exc_info.value.query == "검색어"

    @pytest.mark.parametrize("status_code", [400, 403, 429, 500])
    def test_other_status_is_fatal(self, session, status_code):
        """503 以外の HTTP エラーは致命的"""
        session.request.return_value = make_response(status_code=status_code)

        with pytest.raises(RemoteFatalError) as exc_info:
            DummySource(session).fetch_page("검색어", 1)

        assert exc_info.value.status_code == status_code

    def test_network_error_is_fatal(self, session):
        """ネットワークエラーはステータスなしの致命的エラー"""
        session.request.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(RemoteFatalError) as exc_info:
            DummySource(session).fetch_page("검색어", 1)

        assert exc_info.value.status_code is None

    def test_timeout_is_fatal(self, session):
        session.request.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(RemoteFatalError):
            DummySource(session).fetch_page("검색어", 1)

    def test_invalid_json_is_fatal(self, session):
        session.request.return_value = make_response(json_error=ValueError("bad json"))

        with pytest.raises(RemoteFatalError) as exc_info:
            DummySource(session).fetch_page("검색어", 1)

        assert exc_info.value.status_code == 200

    def test_transient_and_fatal_are_remote_errors(self):
        assert issubclass(RemoteTransientError, RemoteError)
        assert issubclass(RemoteFatalError, RemoteError)


class TestParseItems:
    """生データ変換のテスト"""

    def test_non_object_items_skipped(self, session):
        """オブジェクト以外の要素はスキップされること"""
        session.request.return_value = make_response(
            json_data={"items": [{"id": "1", "name": "A"}, "broken", None], "total": "3"}
        )

        page = DummySource(session).fetch_page("검색어", 1)

        assert [item.name for item in page.items] == ["A"]
        assert page.total_available == 3

    def test_missing_items(self, session):
        session.request.return_value = make_response(json_data={"total": None})

        page = DummySource(session).fetch_page("검색어", 1)

        assert page.items == []
        assert page.total_available == 0


class TestSafeInt:

    def test_safe_int(self):
        assert SearchSource._safe_int("120") == 120
        assert SearchSource._safe_int(7) == 7
        assert SearchSource._safe_int(None) == 0
        assert SearchSource._safe_int("abc") == 0
        assert SearchSource._safe_int(-5) == 0


class TestDescribeRemoteError:
    """利用者向けメッセージのテスト"""

    def test_network_error_message(self):
        assert "ネットワーク" in describe_remote_error(RemoteFatalError("x"))

    def test_overload_message(self):
        assert "過負荷" in describe_remote_error(RemoteTransientError("x", status_code=503))

    def test_rate_limit_message(self):
        assert "リクエストが多すぎます" in describe_remote_error(RemoteFatalError("x", status_code=429))

    def test_other_status_message(self):
        assert describe_remote_error(RemoteFatalError("x", status_code=500)) == (
            "サーバーからデータを取得中にエラーが発生しました。"
        )

    def test_unknown_error_message(self):
        assert describe_remote_error(RuntimeError("x")) == "予期しないエラーが発生しました。"
