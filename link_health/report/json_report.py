# link_health/report/json_report.py

"""
Генерация JSON-отчёта для link_health.

Сериализация объекта CrawlSummary в файл.
"""
import json
from pathlib import Path

from link_health.aggregator import CrawlSummary


def render_json(summary: CrawlSummary, output_path: Path | str) -> Path:
    """
    Сохраняет сводку summary в формате JSON по указанному пути.

    :param summary: объект CrawlSummary с результатами обхода
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(summary.as_dict(), f, ensure_ascii=False, indent=2)

    return output
