# File: site_snapshot/report/__init__.py
"""site_snapshot.report: отчёты об обходе (JSON и HTML) для CLI и тестов."""

from site_snapshot.report.html_report import render_html
from site_snapshot.report.json_report import render_json

__all__ = ["render_json", "render_html"]
