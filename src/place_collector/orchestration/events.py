"""
収集処理のイベント定義

収集処理は進捗・タスク結果をイベントとして順に返します。
呼び出し側はイベント列を消費して進捗表示や集計を行います。
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..domain.models import GraphQLItem, MapItem, SearchTask, SourceVariant


class ProgressEvent(BaseModel):
    """
    進捗イベント

    Attributes:
        percent: 進捗率 (0-100、単調非減少)
        message: 進捗メッセージ
        source: 取得元（取得元に依存しない段階では None）
    """
    kind: Literal["progress"] = "progress"
    percent: float = Field(..., ge=0, le=100)
    message: str = ""
    source: Optional[SourceVariant] = None


class TaskFailure(BaseModel):
    """
    スキップしたタスクの記録

    Attributes:
        task: 対象タスク
        source: 取得元
        status_code: HTTP ステータスコード（該当する場合）
        message: 技術的なエラーメッセージ
        user_message: 利用者向けメッセージ
    """
    task: SearchTask
    source: SourceVariant
    status_code: Optional[int] = None
    message: str
    user_message: str = ""


class TaskReport(BaseModel):
    """
    1タスク分の収集結果イベント

    Attributes:
        task: 対象タスク
        source: 取得元
        items: タスク情報付与済みの生データ
        failure: 1ページ目の取得に失敗した場合の記録
        failed_pages: 取得に失敗した2ページ目以降のページ数
    """
    kind: Literal["task"] = "task"
    task: SearchTask
    source: SourceVariant
    items: List[Union[MapItem, GraphQLItem]] = Field(default_factory=list)
    failure: Optional[TaskFailure] = None
    failed_pages: int = 0


CollectorEvent = Union[ProgressEvent, TaskReport]


class SourceCollection(BaseModel):
    """
    1つの取得元の収集結果

    Attributes:
        source: 取得元
        items: 全タスクの生データ（列挙順）
        failed_tasks: スキップしたタスク
        task_count: 実行したタスク数
    """
    source: SourceVariant
    items: List[Union[MapItem, GraphQLItem]] = Field(default_factory=list)
    failed_tasks: List[TaskFailure] = Field(default_factory=list)
    task_count: int = 0

    def absorb(self, report: TaskReport) -> None:
        """タスク結果を取り込む"""
        self.items.extend(report.items)
        if report.failure is not None:
            self.failed_tasks.append(report.failure)
        self.task_count += 1
