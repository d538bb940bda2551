"""設定読み込みのユニットテスト"""

import json
import pytest
from pathlib import Path
from pydantic import ValidationError

from src.place_collector.domain.regions import (
    DEFAULT_EXCLUDE_KEYWORDS,
    DEFAULT_KEYWORDS,
    DEFAULT_REGIONS,
)
from src.place_collector.infrastructure.settings import (
    CollectorSettings,
    load_regions,
    load_settings,
)


class TestLoadSettings:
    """環境変数からの設定読み込みのテスト"""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.keywords == DEFAULT_KEYWORDS
        assert settings.exclude_keywords == DEFAULT_EXCLUDE_KEYWORDS
        assert settings.selected_provinces == ["서울특별시"]
        assert settings.page_delay_seconds == 0.5
        assert settings.task_delay_seconds == 1.0
        assert settings.max_attempts == 3
        assert settings.backoff_base_seconds == 1.0
        assert settings.max_items_per_task == 1000
        assert settings.regions_file is None

    def test_comma_separated_lists(self):
        settings = load_settings({
            "PLACE_COLLECTOR_KEYWORDS": "공유오피스, 소호사무실 ,",
            "PLACE_COLLECTOR_EXCLUDE_KEYWORDS": "카페",
            "PLACE_COLLECTOR_PROVINCES": "서울특별시,경기도",
        })

        assert settings.keywords == ["공유오피스", "소호사무실"]
        assert settings.exclude_keywords == ["카페"]
        assert settings.selected_provinces == ["서울특별시", "경기도"]

    def test_empty_list_value(self):
        """空文字列は空リスト (全地域・除外なし)"""
        settings = load_settings({
            "PLACE_COLLECTOR_PROVINCES": "",
            "PLACE_COLLECTOR_EXCLUDE_KEYWORDS": "",
        })

        assert settings.selected_provinces == []
        assert settings.exclude_keywords == []

    def test_numeric_values(self):
        settings = load_settings({
            "PLACE_COLLECTOR_PAGE_DELAY": "0",
            "PLACE_COLLECTOR_TASK_DELAY": "2.5",
            "PLACE_COLLECTOR_MAX_ATTEMPTS": "5",
            "PLACE_COLLECTOR_BACKOFF_BASE": "0.2",
            "PLACE_COLLECTOR_MAX_ITEMS": "300",
            "PLACE_COLLECTOR_TIMEOUT": "10",
            "PLACE_COLLECTOR_REGIONS_FILE": "regions.json",
        })

        assert settings.page_delay_seconds == 0.0
        assert settings.task_delay_seconds == 2.5
        assert settings.max_attempts == 5
        assert settings.backoff_base_seconds == 0.2
        assert settings.max_items_per_task == 300
        assert settings.request_timeout_seconds == 10.0
        assert settings.regions_file == Path("regions.json")

    def test_invalid_value_raises(self):
        with pytest.raises(ValidationError):
            load_settings({"PLACE_COLLECTOR_MAX_ATTEMPTS": "0"})

        with pytest.raises(ValidationError):
            load_settings({"PLACE_COLLECTOR_PAGE_DELAY": "abc"})

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("PLACE_COLLECTOR_KEYWORDS", "비상주사무실")
        assert load_settings().keywords == ["비상주사무실"]

    def test_settings_model_defaults_not_shared(self):
        first = CollectorSettings()
        first.keywords.append("x")
        assert CollectorSettings().keywords == DEFAULT_KEYWORDS


class TestLoadRegions:
    """地域一覧読み込みのテスト"""

    def test_default_regions(self):
        regions = load_regions(None)

        assert regions == DEFAULT_REGIONS
        assert regions[0].province == "서울특별시"
        assert "강남구" in regions[0].districts

    def test_regions_from_file(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(
            json.dumps(
                [{"province": "제주특별자치도", "districts": ["제주시", "서귀포시"]}],
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )

        regions = load_regions(path)

        assert len(regions) == 1
        assert regions[0].province == "제주특별자치도"
        assert regions[0].districts == ["제주시", "서귀포시"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_regions(tmp_path / "missing.json")

    def test_invalid_shape_raises(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps([{"districts": ["a"]}]), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_regions(path)
