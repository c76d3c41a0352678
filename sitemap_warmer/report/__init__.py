"""sitemap_warmer.report: Сохранение отчёта о прогреве (JSON)."""

from .json_report import render_json

__all__ = ["render_json"]
