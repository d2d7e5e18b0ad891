#!/usr/bin/env python3
"""
Точка входа для запуска link_health через командную строку.

Команды:
  check     Обойти сайт от стартового URL и вывести состояние каждой ссылки
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (необязательно)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда check опции:
  --url, -u URL       Стартовый URL
  --depth, -d INT     Максимальная глубина (2)
  --threads, -t INT   Число параллельных запросов (4)
  --user-agent, -a    Заголовок User-Agent (Simple_Link_Health_BOT)
  --jitter SEC        Случайная задержка перед запросом, верхняя граница (1.0)
  --timeout SEC       Таймаут одного запроса (10)
  --crawl-timeout SEC Таймаут всего обхода
  --json PATH         Сохранить JSON-отчёт в файл
  --no-color          Вывод без цветов

Дополнительно:
  --version, -v       Показать версию

Пример:
  link-health check --url https://example.com --depth 1 --threads 8
"""
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from link_health import __version__
from link_health.config import DEFAULT_USER_AGENT, resolve_config
from link_health.engine import run_crawl
from link_health.logger import DEFAULT_FORMAT, configure
from link_health.report import ConsoleReporter, render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.echo(f"{click.style('Error:', fg='red')} {message}", err=True)


def print_fatal(message: str):
    click.echo(f"{click.style('Fatal:', fg='bright_red')} {message}", err=True)
    sys.exit(1)


def describe_error(exc: Exception) -> str:
    """Короткое описание ошибки конфигурации для вывода пользователю."""
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
    return str(exc)


def _load(ctx, **overrides):
    try:
        return resolve_config(ctx.obj['config_path'], **overrides)
    except (ValueError, TypeError, OSError) as e:
        print_fatal(describe_error(e))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='link-health, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML или JSON.'
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
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Поиск нерабочих ссылок на сайте."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'url', default=None, help='Стартовый URL (http или https).')
@click.option('--depth', '-d', 'depth', type=int, default=None, help='Максимальная глубина обхода  [default: 2]')
@click.option('--threads', '-t', 'threads', type=int, default=None, help='Число параллельных запросов  [default: 4]')
@click.option('--user-agent', '-a', 'user_agent', default=None,
              help=f'Заголовок User-Agent  [default: {DEFAULT_USER_AGENT}]')
@click.option('--jitter', 'jitter', type=float, default=None,
              help='Верхняя граница случайной задержки перед запросом, секунд  [default: 1.0]')
@click.option('--timeout', 'timeout', type=float, default=None, help='Таймаут одного запроса, секунд  [default: 10]')
@click.option('--crawl-timeout', 'crawl_timeout', type=float, default=None, help='Таймаут всего обхода, секунд')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option('--no-color', is_flag=True, help='Вывод без цветов')
@click.pass_context
def check(ctx, url, depth, threads, user_agent, jitter, timeout, crawl_timeout, json_output, no_color):
    """Обойти сайт и проверить все найденные ссылки."""
    cfg = _load(
        ctx,
        seed_url=url,
        max_depth=depth,
        parallelism=threads,
        user_agent=user_agent,
        jitter=jitter,
        timeout=timeout,
        crawl_timeout=crawl_timeout,
    )
    reporter = ConsoleReporter(color=not no_color)
    try:
        summary = run_crawl(cfg, reporter)
    except Exception as e:
        print_fatal(f'Ошибка при обходе: {e}')

    click.echo(
        f'Checked {summary.total} links: {summary.healthy} healthy, {summary.down} down',
        err=True,
    )

    if json_output:
        try:
            saved_json = render_json(summary, json_output)
            click.echo(f'JSON report: {saved_json}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'url', default=None, help='Стартовый URL (переопределяет конфиг).')
@click.pass_context
def show_config(ctx, url):
    """Показать итоговую конфигурацию в JSON."""
    cfg = _load(ctx, seed_url=url)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
