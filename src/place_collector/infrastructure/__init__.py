"""
インフラストラクチャ層

設定読み込み・ファイル出力などの外部システム依存を提供します。
"""

from .settings import CollectorSettings, load_settings, load_regions
from .output_writer import OutputWriter

__all__ = ["CollectorSettings", "load_settings", "load_regions", "OutputWriter"]
