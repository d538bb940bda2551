"""
取得元統合・重複除去ロジック

2つの取得元の正規化済みデータを商号で統合し (Stage A)、
商号・住所・電話番号の複合キーで重複を除去します (Stage B)。
"""

import logging
from typing import List, Sequence

from .models import CanonicalRecord, ReconciliationResult


class Reconciler:
    """
    取得元統合・重複除去

    Note:
        Stage A は商号のみで同一性を判定します。別の区・郡にある同名の
        事業所は1件にまとめられます。
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def combine_data_sources(
        self,
        baseline: Sequence[CanonicalRecord],
        incoming: Sequence[CanonicalRecord],
    ) -> ReconciliationResult:
        """
        baseline に incoming を商号基準で統合

        Args:
            baseline: 優先する取得元のデータ (そのまま残る)
            incoming: 追加する取得元のデータ

        Returns:
            ReconciliationResult: baseline + 追加分、追加件数、重複件数

        Note:
            - 商号は前後空白を除き小文字化して比較
            - 追加した商号は即座に既知集合へ入れるため、incoming 内の重複も除外
        """
        known_names = {self._identity(record) for record in baseline}

        added: List[CanonicalRecord] = []
        duplicate_count = 0
        for record in incoming:
            name = self._identity(record)
            if name in known_names:
                duplicate_count += 1
                continue
            known_names.add(name)
            added.append(record)

        self.logger.info(
            "Combined data sources",
            extra={
                "baseline_count": len(baseline),
                "added_count": len(added),
                "duplicate_count": duplicate_count,
            }
        )

        return ReconciliationResult(
            merged_records=list(baseline) + added,
            added_count=len(added),
            duplicate_count=duplicate_count,
        )

    def deduplicate_data(self, records: Sequence[CanonicalRecord]) -> List[CanonicalRecord]:
        """
        複合キー (商号|住所|電話番号) で重複を除去

        住所は道路名住所を優先し、なければ地番住所を使います。
        同じキーでは最初に出現したレコードを残します。

        Args:
            records: 統合済みデータ (列挙順)

        Returns:
            List[CanonicalRecord]: 重複除去後のデータ
        """
        seen = set()
        deduplicated: List[CanonicalRecord] = []

        for record in records:
            key = self.composite_key(record)
            if key in seen:
                continue
            seen.add(key)
            deduplicated.append(record)

        self.logger.info(
            f"Deduplicated records: {len(records)} -> {len(deduplicated)}"
        )
        return deduplicated

    @staticmethod
    def composite_key(record: CanonicalRecord) -> str:
        return f"{record.business_name}|{record.preferred_address}|{record.phone}"

    @staticmethod
    def _identity(record: CanonicalRecord) -> str:
        return record.business_name.strip().lower()
