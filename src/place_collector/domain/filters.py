"""
除外キーワードフィルタ・データ整理

商号に除外キーワードを含むレコードの除外、文字列フィールドの空白整理、
および最終データのバリデーションを提供します。
"""

import re
from enum import Enum
from typing import List, Sequence

from pydantic import BaseModel, Field

from .models import CanonicalRecord

_WHITESPACE = re.compile(r"\s+")


def _collapse_whitespace(text: str) -> str:
    """前後空白を除き、連続空白を1つにまとめる"""
    return _WHITESPACE.sub(" ", text).strip()


class DataValidationError(Exception):
    """
    データバリデーション例外

    最終データが空、または必須フィールド (商号) が欠損している場合を表します。
    """

    def __init__(self, message: str, invalid_count: int = 0):
        """
        Args:
            message: エラーメッセージ
            invalid_count: 必須フィールドが欠損しているレコード数
        """
        super().__init__(message)
        self.invalid_count = invalid_count


class ExclusionResult(BaseModel):
    """除外キーワードフィルタの結果"""

    kept: List[CanonicalRecord] = Field(default_factory=list)
    excluded_count: int = 0


class ExclusionFilter:
    """商号による除外キーワードフィルタ"""

    @staticmethod
    def filter_by_exclude_keywords(
        records: Sequence[CanonicalRecord],
        exclude_terms: Sequence[str],
    ) -> ExclusionResult:
        """
        商号に除外キーワードを含むレコードを除外

        Args:
            records: 対象データ
            exclude_terms: 除外キーワード (大文字小文字を区別しない部分一致)

        Returns:
            ExclusionResult: 残ったレコードと除外件数

        Note:
            商号とキーワードは Cleaner と同じ空白整理をしてから比較します。
            空白だけのキーワードは無視します。順序は維持されます。
        """
        terms = [_collapse_whitespace(t).casefold() for t in exclude_terms if t and t.strip()]
        if not terms:
            return ExclusionResult(kept=list(records), excluded_count=0)

        kept = []
        for record in records:
            name = _collapse_whitespace(record.business_name).casefold()
            if any(term in name for term in terms):
                continue
            kept.append(record)

        return ExclusionResult(kept=kept, excluded_count=len(records) - len(kept))


class Cleaner:
    """データ整理と最終バリデーション"""

    @staticmethod
    def clean_data(records: Sequence[CanonicalRecord]) -> List[CanonicalRecord]:
        """
        全文字列フィールドの前後空白を除き、連続空白を1つにまとめる

        整理後に商号が空になったレコードは除外します。

        Args:
            records: 対象データ

        Returns:
            List[CanonicalRecord]: 整理済みデータ (新しいインスタンス)
        """
        cleaned = []
        for record in records:
            # SourceVariant は str のサブクラスなので対象外にする
            updates = {
                name: _collapse_whitespace(value)
                for name, value in record.__dict__.items()
                if isinstance(value, str) and not isinstance(value, Enum)
            }
            item = record.model_copy(update=updates)
            if item.business_name:
                cleaned.append(item)
        return cleaned

    @staticmethod
    def validate_data(records: Sequence[CanonicalRecord]) -> None:
        """
        最終データのバリデーション

        Raises:
            DataValidationError: データが空、または商号が空のレコードがある場合
        """
        if not records:
            raise DataValidationError("データが空です")

        invalid = [r for r in records if not r.business_name.strip()]
        if invalid:
            raise DataValidationError(
                f"{len(invalid)}件のレコードで必須フィールド(商号)が欠損しています",
                invalid_count=len(invalid),
            )
