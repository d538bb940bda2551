"""CLI エントリーポイントのテスト"""

import pytest
from pathlib import Path
from unittest.mock import Mock, patch

from src.place_collector.__main__ import build_service, main, parse_args
from src.place_collector.domain.models import (
    CanonicalRecord,
    PipelineStatistics,
    SearchTask,
    SourceVariant,
)
from src.place_collector.infrastructure.settings import CollectorSettings
from src.place_collector.orchestration.events import TaskFailure
from src.place_collector.orchestration.pipeline_service import PipelineResult, PipelineService


def success_result():
    task = SearchTask(
        province="서울특별시", district="강남구", keyword="공유오피스",
        query_string="서울특별시 강남구 공유오피스",
    )
    return PipelineResult(
        success=True,
        records=[CanonicalRecord(business_name="오피스", source=SourceVariant.PRIMARY)],
        statistics=PipelineStatistics(total_count=1),
        failed_tasks=[
            TaskFailure(
                task=task,
                source=SourceVariant.SECONDARY,
                status_code=503,
                message="busy",
                user_message="サーバーが一時的に過負荷状態です。",
            )
        ],
        execution_time_seconds=1.0,
    )


class TestParseArgs:
    """引数解析のテスト"""

    def test_defaults(self):
        args = parse_args([])

        assert args.keywords == []
        assert args.exclude is None
        assert args.province is None
        assert args.output is None

    def test_all_options(self):
        args = parse_args([
            "공유오피스", "소호사무실",
            "--exclude", "카페", "부동산",
            "--province", "경기도",
            "--output", "out/places.json",
        ])

        assert args.keywords == ["공유오피스", "소호사무실"]
        assert args.exclude == ["카페", "부동산"]
        assert args.province == ["경기도"]
        assert args.output == "out/places.json"

    def test_empty_province_means_all(self):
        assert parse_args(["--province"]).province == []


class TestBuildService:

    def test_build_service_from_settings(self):
        settings = CollectorSettings(
            page_delay_seconds=0.1,
            task_delay_seconds=0.2,
            max_attempts=4,
            backoff_base_seconds=0.5,
            max_items_per_task=200,
            request_timeout_seconds=7,
        )

        service = build_service(settings)

        assert isinstance(service, PipelineService)
        assert service.primary_collector.source == SourceVariant.PRIMARY
        assert service.secondary_collector.source == SourceVariant.SECONDARY
        assert service.primary_collector.page_delay_seconds == 0.1
        assert service.secondary_collector.task_delay_seconds == 0.2
        fetcher = service.primary_collector.fetcher
        assert fetcher.retry_policy.max_attempts == 4
        assert fetcher.retry_policy.base_delay_seconds == 0.5
        assert fetcher.max_items == 200
        assert fetcher.source.timeout == 7


class TestCLI:
    """CLI エントリーポイントのテストケース"""

    @patch('src.place_collector.__main__.OutputWriter')
    @patch('src.place_collector.__main__.build_service')
    @patch('src.place_collector.__main__.load_settings')
    def test_main_success_exits_with_zero(
        self, mock_load_settings, mock_build_service, mock_output_writer_class
    ):
        """成功時に終了コード 0 で終了することを確認"""
        mock_load_settings.return_value = CollectorSettings()
        mock_service = Mock()
        mock_service.run_pipeline.return_value = success_result()
        mock_build_service.return_value = mock_service

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 0
        mock_output_writer_class.assert_not_called()

    @patch('src.place_collector.__main__.build_service')
    @patch('src.place_collector.__main__.load_settings')
    def test_main_failure_exits_with_one(self, mock_load_settings, mock_build_service):
        """失敗時に終了コード 1 で終了することを確認"""
        mock_load_settings.return_value = CollectorSettings()
        mock_service = Mock()
        mock_service.run_pipeline.return_value = PipelineResult(
            success=False,
            errors=["両方の取得元からデータを取得できませんでした"],
        )
        mock_build_service.return_value = mock_service

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1

    @patch('src.place_collector.__main__.build_service')
    @patch('src.place_collector.__main__.load_settings')
    def test_main_unexpected_exception_exits_with_one(self, mock_load_settings, mock_build_service):
        """予期しない例外時に終了コード 1 で終了することを確認"""
        mock_load_settings.return_value = CollectorSettings()
        mock_build_service.side_effect = Exception("Unexpected error")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1

    @patch('src.place_collector.__main__.build_service')
    @patch('src.place_collector.__main__.load_settings')
    def test_main_uses_settings_when_no_arguments(self, mock_load_settings, mock_build_service):
        """引数がなければ設定値のキーワード・除外キーワード・対象地域を使うこと"""
        mock_load_settings.return_value = CollectorSettings(
            keywords=["공유오피스"],
            exclude_keywords=["카페"],
            selected_provinces=["경기도"],
        )
        mock_service = Mock()
        mock_service.run_pipeline.return_value = success_result()
        mock_build_service.return_value = mock_service

        with pytest.raises(SystemExit):
            main([])

        args, kwargs = mock_service.run_pipeline.call_args
        assert args[1] == ["공유오피스"]
        assert kwargs["exclude_keywords"] == ["카페"]
        assert kwargs["selected_provinces"] == ["경기도"]

    @patch('src.place_collector.__main__.build_service')
    @patch('src.place_collector.__main__.load_settings')
    def test_main_arguments_override_settings(self, mock_load_settings, mock_build_service):
        mock_load_settings.return_value = CollectorSettings()
        mock_service = Mock()
        mock_service.run_pipeline.return_value = success_result()
        mock_build_service.return_value = mock_service

        with pytest.raises(SystemExit):
            main(["비상주사무실", "--exclude", "--province"])

        args, kwargs = mock_service.run_pipeline.call_args
        assert args[1] == ["비상주사무실"]
        assert kwargs["exclude_keywords"] == []
        assert kwargs["selected_provinces"] == []

    @patch('src.place_collector.__main__.build_service')
    @patch('src.place_collector.__main__.load_settings')
    def test_main_writes_output(self, mock_load_settings, mock_build_service, tmp_path):
        """--output 指定時に JSON を出力すること"""
        mock_load_settings.return_value = CollectorSettings()
        mock_service = Mock()
        mock_service.run_pipeline.return_value = success_result()
        mock_build_service.return_value = mock_service
        output_path = tmp_path / "places.json"

        with pytest.raises(SystemExit) as exc_info:
            main(["--output", str(output_path)])

        assert exc_info.value.code == 0
        assert output_path.exists()


class TestPackaging:
    """パッケージ設定のテスト"""

    def test_console_script_target_is_discoverable(self):
        """__init__.py のない src/place_collector がパッケージとして収集されること"""
        root = Path(__file__).resolve().parents[1]
        pyproject = (root / "pyproject.toml").read_text(encoding="utf-8")

        assert 'place-collector = "place_collector.__main__:main"' in pyproject
        assert "namespaces = true" in pyproject
        assert (root / "src" / "place_collector" / "__main__.py").exists()
        assert not (root / "src" / "place_collector" / "__init__.py").exists()
