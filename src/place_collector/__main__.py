"""CLI エントリーポイント"""

import argparse
import sys
import logging
from typing import List, Optional

from .adapters.naver_map_source import NaverMapSource
from .adapters.naver_graphql_source import NaverGraphQLSource
from .infrastructure.output_writer import OutputWriter
from .infrastructure.settings import CollectorSettings, load_regions, load_settings
from .orchestration.paginated_fetcher import PaginatedFetcher, RetryPolicy
from .orchestration.pipeline_service import PipelineService
from .orchestration.source_collector import SourceCollector


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="place_collector",
        description="地図検索 API と GraphQL API から事業所情報を収集します",
    )
    parser.add_argument("keywords", nargs="*", help="検索キーワード (省略時は設定値)")
    parser.add_argument(
        "--exclude", nargs="*", default=None,
        help="除外キーワード (省略時は設定値)",
    )
    parser.add_argument(
        "--province", nargs="*", default=None,
        help="対象とする市・道 (省略時は設定値、空指定で全地域)",
    )
    parser.add_argument("--output", default=None, help="JSON 出力ファイルパス")
    return parser.parse_args(argv)


def build_service(settings: CollectorSettings) -> PipelineService:
    """
    設定値から PipelineService を組み立てる

    Args:
        settings: 収集設定

    Returns:
        PipelineService: primary = 地図検索、secondary = GraphQL
    """
    retry_policy = RetryPolicy(
        max_attempts=settings.max_attempts,
        base_delay_seconds=settings.backoff_base_seconds,
    )

    collectors = []
    for source in (
        NaverMapSource(timeout=settings.request_timeout_seconds),
        NaverGraphQLSource(timeout=settings.request_timeout_seconds),
    ):
        fetcher = PaginatedFetcher(
            source,
            retry_policy=retry_policy,
            max_items=settings.max_items_per_task,
        )
        collectors.append(
            SourceCollector(
                fetcher,
                page_delay_seconds=settings.page_delay_seconds,
                task_delay_seconds=settings.task_delay_seconds,
            )
        )

    return PipelineService(primary_collector=collectors[0], secondary_collector=collectors[1])


def main(argv: Optional[List[str]] = None):
    """
    CLI エントリーポイント

    Usage:
        python -m place_collector [keywords ...] [--exclude ...] [--province ...] [--output PATH]

    Exit codes:
        0: 成功
        1: 失敗
    """
    # ロギング設定
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger(__name__)

    try:
        args = parse_args(argv)
        settings = load_settings()
        regions = load_regions(settings.regions_file)

        keywords = args.keywords or settings.keywords
        exclude_keywords = args.exclude if args.exclude is not None else settings.exclude_keywords
        provinces = args.province if args.province is not None else settings.selected_provinces

        service = build_service(settings)

        logger.info("Starting place collection...")
        result = service.run_pipeline(
            regions,
            keywords,
            exclude_keywords=exclude_keywords,
            selected_provinces=provinces,
        )

        if not result.success:
            logger.error(f"Collection failed: {', '.join(result.errors)}")
            sys.exit(1)

        statistics = result.statistics
        logger.info(
            f"Collection completed successfully: "
            f"{statistics.total_count} records, "
            f"{statistics.with_phone_count} with phone, "
            f"{statistics.with_homepage_count} with homepage, "
            f"{statistics.excluded_count} excluded, "
            f"{len(result.failed_tasks)} failed tasks"
        )
        for failure in result.failed_tasks:
            logger.warning(
                f"Skipped [{failure.source.value}] {failure.task.query_string}: {failure.user_message}"
            )

        if args.output:
            path = OutputWriter().write_output(result.records, statistics, args.output)
            logger.info(f"Output written to {path}")

        sys.exit(0)

    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
