"""
データ正規化ロジック

検索 API から取得した生データ (MapItem / GraphQLItem) を統一スキーマ
(CanonicalRecord) に変換します。地域判定、電話番号、価格情報、営業時間の
正規化ルールを提供します。
"""

import re
from typing import List, Optional, Tuple

from .models import (
    UNCLASSIFIED,
    CanonicalRecord,
    GraphQLItem,
    RawItem,
    SourceVariant,
)


class RecordNormalizer:
    """
    データ正規化クラス

    取得元ごとに異なる形式のデータを統一スキーマに正規化する静的メソッドを
    提供します。normalize は例外を送出せず、判別できない値は空文字列
    (地域は "미분류") になります。
    """

    # 価格情報と判定する語
    _PRICE_TOKENS = ["원", "₩", "만원", "시간", "일", "월", "년", "무료", "할인"]
    _PRICE_SEPARATOR = " | "
    _PRICE_MAX_LENGTH = 200

    _BUSINESS_HOURS_MAX_LENGTH = 100

    _MOBILE_PREFIX = "010"

    @staticmethod
    def normalize(raw_item: RawItem, source: SourceVariant) -> CanonicalRecord:
        """
        生データを統一スキーマに正規化

        Args:
            raw_item: 検索 API から取得した生データ (タスク情報付与済み)
            source: 取得元

        Returns:
            CanonicalRecord: 正規化済みデータ
        """
        if isinstance(raw_item, GraphQLItem):
            phone = raw_item.phone or raw_item.virtual_phone
            short_address = raw_item.common_address
            homepage = ""
            description = ""
            business_hours = raw_item.business_hours
            rating = raw_item.visitor_review_score
            review_count = raw_item.visitor_review_count
        else:
            phone = raw_item.tel
            short_address = raw_item.short_address
            homepage = raw_item.home_page
            description = raw_item.menu_info or raw_item.description
            business_hours = raw_item.bizhour_info
            rating = raw_item.rating
            review_count = raw_item.review_count

        region, district = RecordNormalizer._resolve_region(
            raw_item.province,
            raw_item.district,
            short_address,
            raw_item.road_address,
            raw_item.address,
        )

        return CanonicalRecord(
            region=region,
            district=district,
            business_name=raw_item.name,
            phone=RecordNormalizer._format_phone(phone),
            lot_address=raw_item.address,
            road_address=raw_item.road_address,
            homepage=homepage,
            price_info=RecordNormalizer._extract_price_info(description),
            category=raw_item.category,
            business_hours=RecordNormalizer._format_business_hours(business_hours),
            rating=rating,
            review_count=review_count,
            place_id=raw_item.id,
            keyword=raw_item.keyword,
            search_query=raw_item.search_query,
            collected_at=raw_item.collected_at,
            source=source,
        )

    @staticmethod
    def _resolve_region(
        province: str,
        district: str,
        short_address: List[str],
        road_address: str,
        lot_address: str,
    ) -> Tuple[str, str]:
        """
        地域 (市・道, 区・郡) を判定

        優先順位:
        1. タスクの市・道と区・郡
        2. 短縮住所リストの先頭要素
        3. 道路名住所の先頭2語
        4. 地番住所の先頭2語

        Returns:
            Tuple[str, str]: (市・道, 区・郡)。判別できない場合は "미분류"
        """
        if province and district:
            return province, district

        if short_address and short_address[0].strip():
            tokens = short_address[0].split()
            if len(tokens) >= 2:
                return tokens[0], tokens[1]
            return tokens[0], UNCLASSIFIED

        for address in (road_address, lot_address):
            tokens = RecordNormalizer._leading_tokens(address)
            if tokens:
                return tokens

        return UNCLASSIFIED, UNCLASSIFIED

    @staticmethod
    def _leading_tokens(address: str) -> Optional[Tuple[str, str]]:
        tokens = address.split()
        if len(tokens) >= 2:
            return tokens[0], tokens[1]
        return None

    @staticmethod
    def _format_phone(raw_phone: Optional[str]) -> str:
        """
        電話番号をハイフン区切りに整形

        対応形式:
        - 11桁 (010 で始まる携帯番号) → XXX-XXXX-XXXX
        - 10桁 → XXX-XXX-XXXX
        - 9桁 → XX-XXX-XXXX
        - 8桁 → XXXX-XXXX
        - それ以外の桁数 → 元の文字列をそのまま返す

        Args:
            raw_phone: 正規化前の電話番号

        Returns:
            str: ハイフン付き電話番号 (値がない場合は空文字列)
        """
        if not raw_phone:
            return ""

        digits = re.sub(r"\D", "", raw_phone)
        if not digits:
            return ""

        if len(digits) == 11 and digits.startswith(RecordNormalizer._MOBILE_PREFIX):
            return f"{digits[0:3]}-{digits[3:7]}-{digits[7:11]}"
        if len(digits) == 10:
            return f"{digits[0:3]}-{digits[3:6]}-{digits[6:10]}"
        if len(digits) == 9:
            return f"{digits[0:2]}-{digits[2:5]}-{digits[5:9]}"
        if len(digits) == 8:
            return f"{digits[0:4]}-{digits[4:8]}"

        return raw_phone

    @staticmethod
    def _extract_price_info(description: Optional[str]) -> str:
        """
        説明文から価格に関する行だけを抽出

        Args:
            description: メニュー情報などの説明文

        Returns:
            str: " | " で連結した価格情報 (最大200文字)
        """
        if not description:
            return ""

        lines = [
            line for line in description.splitlines()
            if any(token in line for token in RecordNormalizer._PRICE_TOKENS)
        ]
        joined = RecordNormalizer._PRICE_SEPARATOR.join(lines)
        return joined[:RecordNormalizer._PRICE_MAX_LENGTH]

    @staticmethod
    def _format_business_hours(business_hours: Optional[str]) -> str:
        """営業時間を1行にまとめ、100文字で切り詰める"""
        if not business_hours:
            return ""
        flattened = re.sub(r"\r?\n", " ", business_hours)
        return flattened[:RecordNormalizer._BUSINESS_HOURS_MAX_LENGTH]
