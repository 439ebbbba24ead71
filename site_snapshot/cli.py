# === FILE: site_snapshot/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SiteSnapshot: снимок сайта в локальный каталог.

Использование:
  snapshot [OPTIONS] SITE_URL

Аргумент SITE_URL обязателен и единственен; иначе печатается usage и
процесс завершается с ненулевым кодом.

В stdout печатается URL каждой сохранённой страницы (корень первым), а для
пропущенной страницы строка ``url<TAB>ошибка``. Логи идут в stderr.

Опции:
  --config PATH        YAML/JSON конфиг (по умолчанию configs/default.yaml, если есть)
  --output-dir DIR     Каталог, в котором создаётся дерево <hostname>/
  --parallelism N      Макс. число одновременно сканируемых страниц
  --timeout SEC        Таймаут одного запроса
  --user-agent UA      Заголовок User-Agent
  --serve              После обхода раздавать снимок по HTTP
  --port INT           Порт для --serve (default: 7000)
  --json PATH          Сохранить JSON-отчёт в файл
  --html PATH          Сохранить HTML-отчёт в файл
  --log-level LEVEL    Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH      Файл для логов
  --log-format FORMAT  Формат логирования
  --version, -v        Показать версию SiteSnapshot

Пример:
  snapshot https://www.whitehouse.gov --parallelism 20 --serve
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_snapshot import __version__
from site_snapshot.config import load_config
from site_snapshot.crawler.models import StoredPage
from site_snapshot.engine import start_snapshot
from site_snapshot.errors import SnapshotError
from site_snapshot.logger import init_logging
from site_snapshot.report.html_report import render_html
from site_snapshot.report.json_report import render_json
from site_snapshot.server import serve_snapshot

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _echo_stored(page: StoredPage) -> None:
    click.echo(page.url)


def _echo_failed(url: str, error: SnapshotError) -> None:
    click.echo(f'{url}\t{error}')


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteSnapshot, version %(version)s')
@click.argument('site_url')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для дерева снимка (default: текущий)'
)
@click.option(
    '--parallelism', '-p', 'parallelism',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число одновременно сканируемых страниц (без ограничения, если не указано)'
)
@click.option('--timeout', 'timeout', type=float, default=None, help='Таймаут одного запроса (секунд)')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent')
@click.option('--serve', is_flag=True, help='После обхода раздавать снимок по HTTP')
@click.option('--port', 'port', type=click.IntRange(1, 65535), default=None, help='Порт для --serve')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
def cli(site_url, config_path, output_dir, parallelism, timeout, user_agent, serve, port,
        json_output, html_output, log_level, log_file, log_format):
    """Сохранить снимок сайта SITE_URL в локальный каталог."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(
            config_path,
            site_url=site_url,
            output_dir=output_dir,
            parallelism=parallelism,
            timeout=timeout,
            user_agent=user_agent,
            serve_port=port,
        )
    except ValidationError as e:
        print_error(f'Неверные параметры: {e}')
    except (OSError, TypeError, ValueError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    try:
        result = asyncio.run(start_snapshot(cfg, on_stored=_echo_stored, on_failed=_echo_failed))
    except SnapshotError as e:
        print_error(f'{e.url}\t{e}')

    if json_output:
        try:
            click.echo(f'JSON report: {render_json(result, json_output)}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            click.echo(f'HTML report: {render_html(result, html_output)}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

    if serve:
        click.echo(f'listening at http://{cfg.serve_host}:{cfg.serve_port}')
        serve_snapshot(cfg)


if __name__ == "__main__":
    cli()
