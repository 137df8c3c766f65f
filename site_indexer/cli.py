#!/usr/bin/env python3
"""
Точка входа для запуска индексатора SiteIndexer через командную строку.

Команды:
  index     Выполнить полный прогон индексации всех сайтов и вывести статусы
  serve     Запустить HTTP-интерфейс (/api/startIndexing, /api/indexing)
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию SiteIndexer

Пример:
  site-indexer --config configs/default.yaml index --pretty
"""
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

import click
from aiohttp import web

from site_indexer import __version__
from site_indexer.config import IndexerConfig, load_config
from site_indexer.engine import IndexingService, unique_sites
from site_indexer.logger import DEFAULT_FORMAT, init_logging
from site_indexer.storage.sqlite import open_stores
from site_indexer.web import create_app

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def build_service(cfg: IndexerConfig) -> IndexingService:
    site_store, page_store = open_stores(cfg.database)
    return IndexingService(cfg, site_store, page_store)


def run_indexing(cfg: IndexerConfig) -> List[Dict[str, Any]]:
    """Один синхронный прогон; возвращает статусы сайтов для вывода."""
    service = build_service(cfg)
    if not service.start_indexing():
        raise RuntimeError('Индексация уже запущена')
    stats = asyncio.run(service.perform_indexing())

    results = []
    for site_config in unique_sites(cfg.sites):
        site = service.site_store.find_by_url(site_config.url)
        crawl = stats.get(site_config.url)
        results.append({
            'url': site_config.url,
            'name': site_config.name,
            'status': site.status.value if site else None,
            'last_error': site.last_error if site else None,
            'stats': asdict(crawl) if crawl else None,
        })
    return results


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteIndexer, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
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
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteIndexer CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('index', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def index(ctx, pretty):
    """Проиндексировать все сайты из конфигурации."""
    cfg = ctx.obj['config']
    try:
        results = run_indexing(cfg)
    except Exception as e:
        print_error(f'Ошибка при индексации: {e}')
    click.echo(json.dumps(results, ensure_ascii=False, indent=2 if pretty else None))


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес (override host из конфига)')
@click.option('--port', default=None, type=int, help='Порт (override port из конфига)')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP-интерфейс управления индексацией."""
    cfg = ctx.obj['config']
    app = create_app(build_service(cfg))
    web.run_app(app, host=host or cfg.host, port=port or cfg.port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
