"""
検索タスク列挙

地域 (市・道 × 区・郡) とキーワードの組み合わせから検索タスクを生成します。
生成順序は後段の重複除去での優先順位になるため、以降並べ替えません。
"""

from typing import Iterable, List, Optional, Sequence

from .models import Region, SearchTask


class RegionKeywordEnumerator:
    """地域 × キーワードの検索タスク列挙"""

    @staticmethod
    def build_query(province: str, district: str, keyword: str) -> str:
        """検索語を組み立てる (例: "서울특별시 강남구 공유오피스")"""
        return f"{province} {district} {keyword}"

    def enumerate_tasks(
        self,
        regions: Sequence[Region],
        keywords: Sequence[str],
        selected_provinces: Optional[Iterable[str]] = None,
    ) -> List[SearchTask]:
        """
        検索タスクを地域一覧 → 区・郡一覧 → キーワード一覧の順に生成

        Args:
            regions: 地域一覧
            keywords: 検索キーワード一覧
            selected_provinces: 対象とする市・道名。空または None の場合は全地域

        Returns:
            List[SearchTask]: 列挙順の検索タスク
        """
        allowed = {p for p in (selected_provinces or []) if p}
        active_keywords = self._dedupe_keywords(keywords)

        tasks: List[SearchTask] = []
        for region in regions:
            if allowed and region.province not in allowed:
                continue
            for district in region.districts:
                for keyword in active_keywords:
                    tasks.append(
                        SearchTask(
                            province=region.province,
                            district=district,
                            keyword=keyword,
                            query_string=self.build_query(region.province, district, keyword),
                            index=len(tasks),
                        )
                    )
        return tasks

    @staticmethod
    def _dedupe_keywords(keywords: Sequence[str]) -> List[str]:
        # 空白キーワードを除き、重複は最初の出現を残す
        seen = set()
        result = []
        for keyword in keywords:
            keyword = keyword.strip()
            if keyword and keyword not in seen:
                seen.add(keyword)
                result.append(keyword)
        return result
