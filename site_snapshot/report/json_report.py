# site_snapshot/report/json_report.py

"""
Генерация JSON-отчёта для проекта SiteSnapshot.

Сериализация объекта CrawlResult в файл.
"""
import json
from pathlib import Path
from typing import Any, Dict

from site_snapshot.crawler.models import CrawlResult


def report_data(result: CrawlResult) -> Dict[str, Any]:
    """Словарь с итогами обхода, пригодный для JSON и шаблонов."""
    return {
        'site': result.site.url,
        'duration': round(result.duration, 3),
        'stored': [{'url': p.url, 'path': str(p.path)} for p in result.stored],
        'failures': [
            {'url': f.url, 'kind': f.kind.value, 'reason': f.reason} for f in result.failures
        ],
    }


def render_json(result: CrawlResult, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт об обходе в формате JSON по указанному пути.

    :param result: объект CrawlResult с данными обхода
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_snapshot.report.json_report import render_json
    report_path = render_json(result, 'reports/snapshot.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report_data(result), f, ensure_ascii=False, indent=2)

    return output
