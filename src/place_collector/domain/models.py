"""
データモデル定義

このモジュールは place-collector のドメイン層のデータモデルを定義します:
- Region / SearchTask: 収集対象の地域と検索タスク
- MapItem / GraphQLItem: 検索 API から取得した正規化前の生データ
- CanonicalRecord: 統一スキーマに正規化された事業所データ
- ReconciliationResult / PipelineStatistics: 統合結果と集計値
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 地域が判別できない場合の値
UNCLASSIFIED = "미분류"


class SourceVariant(str, Enum):
    """データ取得元"""
    PRIMARY = "primary"
    SECONDARY = "secondary"


class Region(BaseModel):
    """
    収集対象の地域（市・道と区・郡の一覧）

    1回の実行中は変更されません。
    """

    model_config = ConfigDict(frozen=True)

    province: str = Field(..., description="市・道名")
    districts: List[str] = Field(default_factory=list, description="区・郡名一覧")


class SearchTask(BaseModel):
    """
    1件の検索単位 (市・道 × 区・郡 × キーワード)

    index は列挙順序を表し、後段の重複除去での優先順位になります。
    """

    model_config = ConfigDict(frozen=True)

    province: str
    district: str
    keyword: str
    query_string: str = Field(..., description="検索 API に渡す検索語")
    index: int = Field(default=0, ge=0, description="列挙順序")


def _coerce_text(value: Any) -> str:
    """None・数値・リストを文字列に揃える"""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value if v is not None)
    return str(value)


def _coerce_text_list(value: Any) -> List[str]:
    """None・単一文字列を文字列リストに揃える"""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


class RawPlaceItem(BaseModel):
    """
    検索 API から取得した正規化前の生データの基底クラス

    取得元ごとにフィールド名・形状が異なるため、サブクラスで定義します。
    SourceCollector がタスク情報（地域・キーワード・収集日時・取得元）を
    付与してから RecordNormalizer に渡します。
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # タスク情報 (SourceCollector が付与)
    province: str = ""
    district: str = ""
    keyword: str = ""
    search_query: str = ""
    collected_at: str = ""
    source: Optional[SourceVariant] = None

    @field_validator(
        "province", "district", "keyword", "search_query", "collected_at",
        mode="before",
    )
    @classmethod
    def _text_fields(cls, v: Any) -> str:
        return _coerce_text(v)


class MapItem(RawPlaceItem):
    """地図検索 API (primary) の検索結果1件"""

    id: str = ""
    name: str = ""
    tel: str = ""
    address: str = ""
    road_address: str = Field(default="", alias="roadAddress")
    short_address: List[str] = Field(default_factory=list, alias="shortAddress")
    home_page: str = Field(default="", alias="homePage")
    menu_info: str = Field(default="", alias="menuInfo")
    description: str = ""
    bizhour_info: str = Field(default="", alias="bizhourInfo")
    category: str = ""
    review_count: str = Field(default="", alias="reviewCount")
    rating: str = ""

    @field_validator(
        "id", "name", "tel", "address", "road_address", "home_page",
        "menu_info", "description", "bizhour_info", "category",
        "review_count", "rating",
        mode="before",
    )
    @classmethod
    def _coerce_fields(cls, v: Any) -> str:
        return _coerce_text(v)

    @field_validator("short_address", mode="before")
    @classmethod
    def _coerce_short_address(cls, v: Any) -> List[str]:
        return _coerce_text_list(v)


class GraphQLItem(RawPlaceItem):
    """GraphQL API (secondary) の検索結果1件"""

    id: str = ""
    name: str = ""
    normalized_name: str = Field(default="", alias="normalizedName")
    category: str = ""
    road_address: str = Field(default="", alias="roadAddress")
    address: str = ""
    full_address: str = Field(default="", alias="fullAddress")
    common_address: List[str] = Field(default_factory=list, alias="commonAddress")
    phone: str = ""
    virtual_phone: str = Field(default="", alias="virtualPhone")
    business_hours: str = Field(default="", alias="businessHours")
    image_url: str = Field(default="", alias="imageUrl")
    x: str = ""
    y: str = ""
    visitor_review_count: str = Field(default="", alias="visitorReviewCount")
    visitor_review_score: str = Field(default="", alias="visitorReviewScore")

    @field_validator(
        "id", "name", "normalized_name", "category", "road_address",
        "address", "full_address", "phone", "virtual_phone",
        "business_hours", "image_url", "x", "y", "visitor_review_count",
        "visitor_review_score",
        mode="before",
    )
    @classmethod
    def _coerce_fields(cls, v: Any) -> str:
        return _coerce_text(v)

    @field_validator("common_address", mode="before")
    @classmethod
    def _coerce_common_address(cls, v: Any) -> List[str]:
        return _coerce_text_list(v)


RawItem = Union[MapItem, GraphQLItem]


class PageResult(BaseModel):
    """検索 API 1ページ分の取得結果"""

    items: List[Union[MapItem, GraphQLItem]] = Field(default_factory=list)
    total_available: int = Field(default=0, ge=0, description="検索結果の総件数")


class CanonicalRecord(BaseModel):
    """
    統一された事業所データモデル

    取得元に依存しない出力スキーマです。文字列フィールドは None を取らず、
    値がない場合は空文字列になります。
    """

    region: str = Field(default=UNCLASSIFIED, description="市・道")
    district: str = Field(default=UNCLASSIFIED, description="区・郡")
    business_name: str = Field(default="", description="商号")
    phone: str = Field(default="", description="電話番号 (ハイフン含む)")
    lot_address: str = Field(default="", description="地番住所")
    road_address: str = Field(default="", description="道路名住所")
    homepage: str = Field(default="", description="ホームページ")
    price_info: str = Field(default="", description="価格情報")
    category: str = Field(default="", description="業種")
    business_hours: str = Field(default="", description="営業時間")
    rating: str = Field(default="", description="評価")
    review_count: str = Field(default="", description="レビュー数")
    place_id: str = Field(default="", description="取得元での ID")
    keyword: str = Field(default="", description="検索キーワード")
    search_query: str = Field(default="", description="検索語")
    collected_at: str = Field(default="", description="収集日時 (ISO 8601)")
    source: SourceVariant = Field(..., description="取得元")

    @property
    def preferred_address(self) -> str:
        """道路名住所を優先し、なければ地番住所"""
        return self.road_address or self.lot_address

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "region": "서울특별시",
                "district": "강남구",
                "business_name": "패스트오피스 강남점",
                "phone": "02-123-4567",
                "lot_address": "서울특별시 강남구 역삼동 123-4",
                "road_address": "서울특별시 강남구 테헤란로 123",
                "homepage": "https://example.com",
                "price_info": "1인실 월 30만원",
                "keyword": "공유오피스",
                "search_query": "서울특별시 강남구 공유오피스",
                "collected_at": "2026-01-05T09:00:00+00:00",
                "source": "primary",
            }
        }
    )


class ReconciliationResult(BaseModel):
    """取得元間の統合結果"""

    merged_records: List[CanonicalRecord] = Field(default_factory=list)
    added_count: int = Field(default=0, description="incoming から追加された件数")
    duplicate_count: int = Field(default=0, description="商号重複で除外された件数")


class PipelineStatistics(BaseModel):
    """最終データセットの集計値"""

    total_count: int = 0
    with_phone_count: int = 0
    with_homepage_count: int = 0
    excluded_count: int = 0
    added_count: int = 0
    duplicate_count: int = 0
    per_source_counts: Dict[str, int] = Field(default_factory=dict)
    per_region_counts: Dict[str, int] = Field(default_factory=dict)
