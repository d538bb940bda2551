"""収集結果の集計"""

from typing import Dict, Sequence

from .models import UNCLASSIFIED, CanonicalRecord, PipelineStatistics, SourceVariant


class StatisticsCalculator:
    """最終データセットから件数を集計する"""

    @staticmethod
    def calculate(
        records: Sequence[CanonicalRecord],
        excluded_count: int = 0,
        added_count: int = 0,
        duplicate_count: int = 0,
    ) -> PipelineStatistics:
        """
        集計値を算出

        Args:
            records: 最終データ
            excluded_count: 除外キーワードで除外した件数
            added_count: secondary から追加した件数
            duplicate_count: secondary のうち商号重複で除外した件数

        Returns:
            PipelineStatistics: 集計結果
        """
        per_source: Dict[str, int] = {variant.value: 0 for variant in SourceVariant}
        per_region: Dict[str, int] = {}

        for record in records:
            per_source[record.source.value] = per_source.get(record.source.value, 0) + 1
            key = StatisticsCalculator.region_key(record)
            per_region[key] = per_region.get(key, 0) + 1

        return PipelineStatistics(
            total_count=len(records),
            with_phone_count=sum(1 for r in records if r.phone.strip()),
            with_homepage_count=sum(1 for r in records if r.homepage.strip()),
            excluded_count=excluded_count,
            added_count=added_count,
            duplicate_count=duplicate_count,
            per_source_counts=per_source,
            per_region_counts=per_region,
        )

    @staticmethod
    def region_key(record: CanonicalRecord) -> str:
        """地域別集計のキー ("市・道 区・郡"、区・郡が不明なら市・道のみ)"""
        region = record.region or UNCLASSIFIED
        if not record.district or record.district == UNCLASSIFIED:
            return region
        return f"{region} {record.district}"
