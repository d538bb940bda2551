"""JSON 出力コンポーネント"""

from typing import List, Optional
from pathlib import Path
import json
from datetime import datetime, timezone

from ..domain.models import CanonicalRecord, PipelineStatistics


class OutputWriter:
    """
    最終データを JSON ファイルとして出力

    Responsibilities:
    - CanonicalRecord リストと集計値を JSON エンベロープに書き込み
    - 出力先ディレクトリ管理
    """

    FORMAT_VERSION = "1.0.0"

    def write_output(
        self,
        records: List[CanonicalRecord],
        statistics: Optional[PipelineStatistics],
        output_path: Path,
    ) -> Path:
        """
        最終データを JSON ファイルに出力

        Args:
            records: 最終データ
            statistics: 集計値（メタデータとして含める）
            output_path: 出力ファイルパス

        Returns:
            Path: 出力ファイルパス

        Postconditions: 親ディレクトリが存在しない場合は作成される
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        output_data = {
            "metadata": {
                "exportDate": self._get_current_timestamp(),
                "totalCount": len(records),
                "version": self.FORMAT_VERSION,
            },
            "statistics": statistics.model_dump(mode="json") if statistics else None,
            "data": [record.model_dump(mode="json") for record in records],
        }

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output_data, f, ensure_ascii=False, indent=2)

        return output_path

    def _get_current_timestamp(self) -> str:
        """
        現在時刻を ISO 8601 形式で取得

        Returns:
            str: ISO 8601 形式のタイムスタンプ（UTC、Z サフィックス付き）
        """
        return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"
