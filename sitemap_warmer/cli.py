#!/usr/bin/env python3
"""
Точка входа для запуска прогрева SitemapWarmer через командную строку.

Команды:
  warm      Обойти sitemap, запросить каждый URL, повторить ошибки, пингануть поисковик
  resolve   Только вывести список URL из sitemap
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда warm опции:
  --sitemap-url URL   Корневой sitemap (override sitemap_url)
  --concurrency INT   Число параллельных воркеров
  --limit INT         Макс. число документов (0 = все)
  --retry/--no-retry  Повторить упавшие запросы
  --notify/--no-notify  Пинг поисковика после завершения
  --json PATH         Сохранить JSON-отчёт в файл
  --fail-on-errors    Код выхода 2, если ошибки остались после повтора
  --run-timeout SEC   Таймаут всего прогона (секунд)

Пример:
  sitemap-warmer warm --sitemap-url https://www.example.com/sitemap.xml --concurrency 50 --notify
"""
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from sitemap_warmer import __version__
from sitemap_warmer.config import WarmerConfig, build_config
from sitemap_warmer.engine import resolve_urls, run_warmup
from sitemap_warmer.errors import FatalResolutionError
from sitemap_warmer.logger import init_logging
from sitemap_warmer.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])

EXIT_FAILURES = 2


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _load(ctx: click.Context, overrides: Dict[str, Any]) -> WarmerConfig:
    try:
        return build_config(ctx.obj['config_path'], overrides)
    except ValidationError as e:
        print_error(f'Некорректная конфигурация: {e}')
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


def sitemap_option(f):
    return click.option(
        '--sitemap-url', '-u', 'sitemap_url',
        default=None,
        help='Корневой sitemap (override sitemap_url)'
    )(f)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SitemapWarmer, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Прогрев кэша/CDN по sitemap сайта."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('warm', context_settings=CONTEXT_SETTINGS)
@sitemap_option
@click.option('--concurrency', '-n', type=click.IntRange(min=1), default=None,
              help='Число параллельных воркеров')
@click.option('--limit', '-l', type=click.IntRange(min=0), default=None,
              help='Макс. число документов (0 = все)')
@click.option('--retry/--no-retry', default=None, help='Повторить упавшие запросы один раз')
@click.option('--notify/--no-notify', default=None, help='Пинг поисковика после завершения')
@click.option('--timeout', type=float, default=None, help='Таймаут одного запроса (секунд)')
@click.option('--seed', type=int, default=None, help='Seed перемешивания URL')
@click.option('--fail-on-errors', 'fail_on_errors', is_flag=True, default=None,
              help='Код выхода 2, если ошибки остались после повтора')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option('--pretty', is_flag=True, help='Вывести JSON-отчёт в stdout с отступами')
@click.option('--run-timeout', 'run_timeout', default=None,
              type=click.FloatRange(min=0, min_open=True),
              help='Таймаут всего прогона (секунд)')
@click.pass_context
def warm(ctx, sitemap_url, concurrency, limit, retry, notify, timeout, seed,
         fail_on_errors, json_output, pretty, run_timeout):
    """Запустить прогрев и вывести сводку."""
    cfg = _load(ctx, dict(
        sitemap_url=sitemap_url,
        concurrency=concurrency,
        limit=limit,
        retry=retry,
        notify=notify,
        timeout=timeout,
        seed=seed,
        fail_on_errors=fail_on_errors or None,
    ))
    click.echo(f'Warming {cfg.sitemap_url} with {cfg.concurrency} workers')
    try:
        if run_timeout is not None:
            report = asyncio.run(
                asyncio.wait_for(run_warmup(cfg), timeout=run_timeout)
            )
        else:
            report = asyncio.run(run_warmup(cfg))
    except asyncio.TimeoutError:
        print_error(f'Прогрев не завершён за {run_timeout} секунд')
    except FatalResolutionError as e:
        print_error(f'Ошибка резолва sitemap: {e}')

    if pretty:
        click.echo(report.json(pretty=True))
    click.echo(report.summary())

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if cfg.fail_on_errors and not report.ok:
        print_error(f'{len(report.remaining_failures)} URL с ошибками', code=EXIT_FAILURES)


@cli.command('resolve', context_settings=CONTEXT_SETTINGS)
@sitemap_option
@click.option('--limit', '-l', type=click.IntRange(min=0), default=None,
              help='Макс. число документов (0 = все)')
@click.option('--seed', type=int, default=None, help='Seed перемешивания URL')
@click.pass_context
def resolve(ctx, sitemap_url, limit, seed):
    """Вывести URL из sitemap, по одному на строку, без прогрева."""
    cfg = _load(ctx, dict(sitemap_url=sitemap_url, limit=limit, seed=seed))
    try:
        urls = asyncio.run(resolve_urls(cfg))
    except FatalResolutionError as e:
        print_error(f'Ошибка резолва sitemap: {e}')
    for url in urls:
        click.echo(url)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@sitemap_option
@click.pass_context
def show_config(ctx, sitemap_url: Optional[str]):
    """Показать итоговую конфигурацию в JSON."""
    cfg = _load(ctx, dict(sitemap_url=sitemap_url))
    click.echo(cfg.model_dump_json(indent=2))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
