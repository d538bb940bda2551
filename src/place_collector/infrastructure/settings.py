"""
収集設定

環境変数から収集処理の設定値を読み込みます。地域一覧は JSON ファイルで
差し替えることができます。

環境変数:
- PLACE_COLLECTOR_KEYWORDS: 検索キーワード (カンマ区切り)
- PLACE_COLLECTOR_EXCLUDE_KEYWORDS: 除外キーワード (カンマ区切り)
- PLACE_COLLECTOR_PROVINCES: 対象とする市・道 (カンマ区切り)
- PLACE_COLLECTOR_REGIONS_FILE: 地域一覧 JSON ファイルのパス
- PLACE_COLLECTOR_PAGE_DELAY: ページ間の待機時間（秒）
- PLACE_COLLECTOR_TASK_DELAY: タスク間の待機時間（秒）
- PLACE_COLLECTOR_MAX_ATTEMPTS: 503 応答時の最大試行回数
- PLACE_COLLECTOR_BACKOFF_BASE: 初回リトライまでの待機時間（秒）
- PLACE_COLLECTOR_MAX_ITEMS: 1タスクあたりの最大取得件数
- PLACE_COLLECTOR_TIMEOUT: リクエストタイムアウト（秒）
"""

import json
import os
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, TypeAdapter

from ..domain.models import Region
from ..domain.regions import (
    DEFAULT_EXCLUDE_KEYWORDS,
    DEFAULT_KEYWORDS,
    DEFAULT_REGIONS,
    DEFAULT_SELECTED_PROVINCES,
)

ENV_PREFIX = "PLACE_COLLECTOR_"


class CollectorSettings(BaseModel):
    """収集処理の設定値"""

    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    exclude_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_KEYWORDS))
    selected_provinces: List[str] = Field(default_factory=lambda: list(DEFAULT_SELECTED_PROVINCES))
    regions_file: Optional[Path] = None

    page_delay_seconds: float = Field(default=0.5, ge=0)
    task_delay_seconds: float = Field(default=1.0, ge=0)
    max_attempts: int = Field(default=3, ge=1)
    backoff_base_seconds: float = Field(default=1.0, ge=0)
    max_items_per_task: int = Field(default=1000, ge=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0)


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def load_settings(environ: Optional[Mapping[str, str]] = None) -> CollectorSettings:
    """
    環境変数から設定を読み込む

    Args:
        environ: 環境変数。None の場合は os.environ

    Returns:
        CollectorSettings: 設定値（未設定の項目は既定値）

    Raises:
        pydantic.ValidationError: 数値項目が不正な場合
    """
    env = os.environ if environ is None else environ

    list_fields = {
        "KEYWORDS": "keywords",
        "EXCLUDE_KEYWORDS": "exclude_keywords",
        "PROVINCES": "selected_provinces",
    }
    scalar_fields = {
        "REGIONS_FILE": "regions_file",
        "PAGE_DELAY": "page_delay_seconds",
        "TASK_DELAY": "task_delay_seconds",
        "MAX_ATTEMPTS": "max_attempts",
        "BACKOFF_BASE": "backoff_base_seconds",
        "MAX_ITEMS": "max_items_per_task",
        "TIMEOUT": "request_timeout_seconds",
    }

    values = {}
    for suffix, field in list_fields.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None:
            values[field] = _split_list(raw)
    for suffix, field in scalar_fields.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw:
            values[field] = raw.strip()

    return CollectorSettings(**values)


def load_regions(path: Optional[Path] = None) -> List[Region]:
    """
    地域一覧を読み込む

    Args:
        path: 地域一覧 JSON ファイル ([{"province": ..., "districts": [...]}])。
              None の場合は既定の地域一覧

    Returns:
        List[Region]: 地域一覧

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        json.JSONDecodeError: JSON パースに失敗した場合
        pydantic.ValidationError: 形式が不正な場合
    """
    if path is None:
        return list(DEFAULT_REGIONS)

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return TypeAdapter(List[Region]).validate_python(data)
