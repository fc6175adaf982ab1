"""CLI commands for the pwa_discovery module"""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Any, Coroutine, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from pwaland.configs import settings as config
from pwaland.exceptions import (
    CandidateFileError,
    EntryValidationError,
    NoDomainsError,
    RecordStoreError,
)
from pwaland.jobs.pwa_discovery.extractors import get_extractor
from pwaland.jobs.pwa_discovery.io import DirectoryFile, DiscoverHistory, NotionRecordStore
from pwaland.jobs.pwa_discovery.models import (
    BatchSummary,
    DirectoryEntry,
    ItemStatus,
    PwaCheckResponse,
    SkipReason,
)
from pwaland.jobs.pwa_discovery.modes import (
    run_add_mode,
    run_check_mode,
    run_crawl_mode,
    run_descriptions_mode,
    run_discover_mode,
    run_duplicates_mode,
    run_import_mode,
)
from pwaland.jobs.pwa_discovery.processing import DedupGate, create_runner
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher
from pwaland.jobs.pwa_discovery.sources import (
    DomainSourceAggregator,
    MarkdownListSource,
    TrancoSource,
)
from pwaland.jobs.pwa_discovery.strategies import GatingPolicy, PwaCheckStrategy, create_strategy
from pwaland.jobs.pwa_discovery.validators import validate_entry
from pwaland.jobs.utils.system_monitor import SystemMonitor
from pwaland.utils.metrics import configure_metrics

logger = logging.getLogger(__name__)
console = Console()

T = TypeVar("T")

check_settings = config.pwa_check
discovery_settings = config.discovery
crawl_settings = config.crawl
import_settings = config.importer
descriptions_settings = config.descriptions
source_settings = config.sources
store_settings = config.record_store

# CLI Options
strategy_option = typer.Option(
    check_settings.strategy,
    "--strategy",
    help="PWA check strategy: 'static-heuristic' or 'rendered' (needs the rendered extra)",
)

extractor_option = typer.Option(
    check_settings.extractor,
    "--extractor",
    help="Page source extractor used by the check: 'regex' or 'soup'",
)

dry_run_option = typer.Option(
    False,
    "--dry-run",
    help="Classify and log everything but don't write to the record store or files",
)

monitor_option = typer.Option(
    False,
    "--monitor",
    help="Log memory, open files and connections after each batch",
)

source_option = typer.Option(
    discovery_settings.source,
    "--source",
    help="Where to get candidate domains: 'tranco', 'github' or 'all'",
)

limit_option = typer.Option(
    discovery_settings.limit,
    "--limit",
    help="Number of candidate domains to check",
)

offset_option = typer.Option(
    discovery_settings.offset,
    "--offset",
    help="Number of candidate domains to skip",
)

discovery_concurrency_option = typer.Option(
    discovery_settings.concurrency,
    "--concurrency",
    help="Number of domains checked at the same time",
)

discovery_delay_option = typer.Option(
    discovery_settings.batch_delay_sec,
    "--batch-delay",
    help="Seconds to wait between batches",
)

runner_option = typer.Option(
    discovery_settings.runner,
    "--runner",
    help="Batch runner: 'chunked' (with a delay between chunks) or 'pool' (fixed workers)",
)

history_file_option = typer.Option(
    discovery_settings.history_file,
    "--history-file",
    help="JSON file the discovery summaries are appended to",
)

sources_file_option = typer.Option(
    crawl_settings.sources_file,
    "--sources-file",
    help="File with candidate URLs, one per line or as a JSON array",
)

crawl_directory_file_option = typer.Option(
    crawl_settings.directory_file,
    "--directory-file",
    help="JSON directory file to extend with the accepted sites",
)

crawl_concurrency_option = typer.Option(
    crawl_settings.concurrency,
    "--concurrency",
    help="Number of workers checking candidates",
)

import_directory_file_option = typer.Option(
    import_settings.directory_file,
    "--directory-file",
    help="JSON directory file to import into the record store",
)

import_concurrency_option = typer.Option(
    import_settings.concurrency,
    "--concurrency",
    help="Number of entries imported at the same time",
)

descriptions_concurrency_option = typer.Option(
    descriptions_settings.concurrency,
    "--concurrency",
    help="Number of records updated at the same time",
)

json_option = typer.Option(
    False,
    "--json",
    help="Print the full check result as JSON",
)

# Create CLI app
pwa_discovery_cmd = typer.Typer(
    name="pwa-discovery",
    help="Commands for discovering Progressive Web Apps and maintaining the PWA directory",
)


def build_strategy(fetcher: PageFetcher, strategy: str, extractor: str) -> PwaCheckStrategy:
    """Build the configured PWA check strategy."""
    return create_strategy(
        strategy,
        fetcher,
        extractor=get_extractor(extractor),
        policy=GatingPolicy.from_names(check_settings.required_checks),
        timeout_sec=check_settings.timeout_sec,
    )


def build_store() -> NotionRecordStore:
    """Build the record store from the configured credentials."""
    return NotionRecordStore(
        database_id=store_settings.database_id,
        api_key=store_settings.api_key,
    )


def run_job(job: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning the job's fatal errors into a non-zero exit."""
    try:
        return asyncio.run(job)
    except EntryValidationError as e:
        raise typer.BadParameter(str(e))
    except (CandidateFileError, NoDomainsError, RecordStoreError) as e:
        logger.error(f"Job failed: {e}")
        raise typer.Exit(code=1)


def print_summary(title: str, summary: BatchSummary) -> None:
    """Print the run totals."""
    table = Table(title=title, show_header=False, box=None)
    table.add_row("Total", str(summary.total))
    table.add_row("Added", str(summary.added))
    table.add_row("Updated", str(summary.updated))
    table.add_row("Skipped", str(summary.skipped))
    table.add_row("Failed", str(summary.failed))
    for reason, count in summary.skip_reasons.items():
        table.add_row(f"  {reason}", str(count))
    console.print(table)


def print_check(response: PwaCheckResponse) -> None:
    """Print the sub-checks of a PWA check."""
    console.print(f"\nChecked: {response.url}")
    console.print("✅ PWA" if response.is_pwa else "❌ Not a PWA")
    table = Table(show_header=False, box=None)
    for name, result in response.checks:
        table.add_row(name, "pass" if result.passed else "fail", result.detail)
    console.print(table)
    if response.is_pwa:
        console.print(f"Suggested title: {response.suggestion.title or 'N/A'}")
        console.print(f"Suggested icon: {response.suggestion.icon or 'N/A'}")


@pwa_discovery_cmd.command()
def check(
    url: str = typer.Argument(..., help="URL or bare domain to check"),
    strategy: str = strategy_option,
    extractor: str = extractor_option,
    as_json: bool = json_option,
):
    """Check whether a single site is a Progressive Web App."""
    response = run_job(_check(url, strategy, extractor))
    if as_json:
        console.print_json(response.model_dump_json(by_alias=True))
    else:
        print_check(response)


async def _check(url: str, strategy: str, extractor: str) -> PwaCheckResponse:
    async with PageFetcher(timeout=check_settings.timeout_sec) as fetcher:
        pwa_strategy = build_strategy(fetcher, strategy, extractor)
        try:
            return await run_check_mode(url, pwa_strategy)
        finally:
            await pwa_strategy.close()


@pwa_discovery_cmd.command()
def add(
    title: str = typer.Option("", "--title", help="Name of the app"),
    link: str = typer.Option("", "--link", help="URL of the app"),
    icon: str = typer.Option("", "--icon", help="Absolute URL of the app icon"),
    description: str = typer.Option("", "--description", help="Short description"),
    tags: Optional[list[str]] = typer.Option(None, "--tag", help="Tag, repeatable"),
    dry_run: bool = dry_run_option,
):
    """Add one entry to the record store unless its link is already there."""
    entry = DirectoryEntry(
        title=title, link=link, icon=icon, description=description, tags=tags or None
    )
    try:
        validate_entry(entry)
    except EntryValidationError as e:
        raise typer.BadParameter(str(e))
    outcome = run_job(_add(entry, dry_run))
    if outcome.status == ItemStatus.SKIPPED:
        console.print(f"Not added ({outcome.reason}): {link}")
        if outcome.reason != SkipReason.DRY_RUN:
            raise typer.Exit(code=1)
    else:
        console.print(f"Added {title}: record {outcome.result}")


async def _add(entry: DirectoryEntry, dry_run: bool):
    store = build_store()
    try:
        return await run_add_mode(entry, DedupGate(store), dry_run=dry_run)
    finally:
        await store.close()


@pwa_discovery_cmd.command()
def discover(
    source: str = source_option,
    limit: int = limit_option,
    offset: int = offset_option,
    concurrency: int = discovery_concurrency_option,
    batch_delay: float = discovery_delay_option,
    runner: str = runner_option,
    history_file: str = history_file_option,
    strategy: str = strategy_option,
    extractor: str = extractor_option,
    dry_run: bool = dry_run_option,
    enable_monitoring: bool = monitor_option,
):
    """Discover PWAs among top domains and curated lists and add them to the record store."""
    summary = run_job(
        _discover(
            source=source,
            limit=limit,
            offset=offset,
            concurrency=concurrency,
            batch_delay=batch_delay,
            runner=runner,
            history_file=history_file,
            strategy=strategy,
            extractor=extractor,
            dry_run=dry_run,
            enable_monitoring=enable_monitoring,
        )
    )
    table = Table(title="Discovery", show_header=False, box=None)
    for field in ("total_domains", "checked", "found", "added", "skipped", "failed"):
        table.add_row(field.replace("_", " ").capitalize(), str(getattr(summary, field)))
    console.print(table)


async def _discover(
    source: str,
    limit: int,
    offset: int,
    concurrency: int,
    batch_delay: float,
    runner: str,
    history_file: str,
    strategy: str,
    extractor: str,
    dry_run: bool,
    enable_monitoring: bool,
):
    metrics_client = await configure_metrics()
    async with AsyncExitStack() as stack:
        fetcher = await stack.enter_async_context(
            PageFetcher(timeout=check_settings.timeout_sec)
        )
        pwa_strategy = build_strategy(fetcher, strategy, extractor)
        stack.push_async_callback(pwa_strategy.close)
        # Dry runs stop before the duplicate check and never need the store.
        store = None if dry_run else build_store()
        if store is not None:
            stack.push_async_callback(store.close)

        aggregator = DomainSourceAggregator(
            tranco=TrancoSource(
                fetcher,
                list_url=source_settings.tranco_url,
                download_url=source_settings.tranco_download_url,
                fallback_url=source_settings.tranco_fallback_url,
            ),
            markdown_lists=MarkdownListSource(fetcher, list(source_settings.awesome_pwa_urls)),
        )
        batch_runner = create_runner(
            runner,
            concurrency,
            delay_sec=batch_delay,
            metrics_client=metrics_client,
            monitor=SystemMonitor() if enable_monitoring else None,
        )
        return await run_discover_mode(
            aggregator,
            pwa_strategy,
            DedupGate(store),
            batch_runner,
            DiscoverHistory(history_file),
            source=source,
            limit=limit,
            offset=offset,
            dry_run=dry_run,
            tags=list(discovery_settings.tags),
            save_every_batches=discovery_settings.save_every_batches,
            metrics_client=metrics_client,
        )


@pwa_discovery_cmd.command()
def crawl(
    sources_file: str = sources_file_option,
    directory_file: str = crawl_directory_file_option,
    concurrency: int = crawl_concurrency_option,
    strategy: str = strategy_option,
    extractor: str = extractor_option,
    dry_run: bool = dry_run_option,
    enable_monitoring: bool = monitor_option,
):
    """Check the URLs of a sources file and add the PWAs found to the directory file."""
    summary = run_job(
        _crawl(
            sources_file=sources_file,
            directory_file=directory_file,
            concurrency=concurrency,
            strategy=strategy,
            extractor=extractor,
            dry_run=dry_run,
            enable_monitoring=enable_monitoring,
        )
    )
    print_summary("Crawl", summary)


async def _crawl(
    sources_file: str,
    directory_file: str,
    concurrency: int,
    strategy: str,
    extractor: str,
    dry_run: bool,
    enable_monitoring: bool,
):
    metrics_client = await configure_metrics()
    async with PageFetcher(timeout=crawl_settings.timeout_sec) as fetcher:
        pwa_strategy = build_strategy(fetcher, strategy, extractor)
        try:
            return await run_crawl_mode(
                pwa_strategy,
                create_runner(
                    "pool",
                    concurrency,
                    metrics_client=metrics_client,
                    monitor=SystemMonitor() if enable_monitoring else None,
                ),
                DirectoryFile(directory_file),
                sources_file,
                dry_run=dry_run,
            )
        finally:
            await pwa_strategy.close()


@pwa_discovery_cmd.command()
def import_entries(
    directory_file: str = import_directory_file_option,
    concurrency: int = import_concurrency_option,
    dry_run: bool = dry_run_option,
):
    """Import the entries of the directory file into the record store."""
    summary = run_job(_import_entries(directory_file, concurrency, dry_run))
    print_summary("Import", summary)


async def _import_entries(directory_file: str, concurrency: int, dry_run: bool):
    metrics_client = await configure_metrics()
    store = build_store()
    try:
        return await run_import_mode(
            DirectoryFile(directory_file),
            DedupGate(store),
            create_runner(
                "chunked",
                concurrency,
                delay_sec=import_settings.batch_delay_sec,
                metrics_client=metrics_client,
            ),
            dry_run=dry_run,
            tags=list(import_settings.tags),
        )
    finally:
        await store.close()


@pwa_discovery_cmd.command()
def update_descriptions(
    concurrency: int = descriptions_concurrency_option,
    extractor: str = extractor_option,
    dry_run: bool = dry_run_option,
):
    """Replace empty, placeholder and non-English descriptions in the record store."""
    summary = run_job(_update_descriptions(concurrency, extractor, dry_run))
    print_summary("Descriptions", summary)


async def _update_descriptions(concurrency: int, extractor: str, dry_run: bool):
    metrics_client = await configure_metrics()
    store = build_store()
    try:
        async with PageFetcher(timeout=descriptions_settings.timeout_sec) as fetcher:
            return await run_descriptions_mode(
                store,
                fetcher,
                get_extractor(extractor),
                create_runner(
                    "chunked",
                    concurrency,
                    delay_sec=descriptions_settings.batch_delay_sec,
                    metrics_client=metrics_client,
                ),
                dry_run=dry_run,
                item_delay_sec=descriptions_settings.item_delay_sec,
            )
    finally:
        await store.close()


@pwa_discovery_cmd.command()
def remove_duplicates(dry_run: bool = dry_run_option):
    """Archive records whose title repeats an earlier record."""
    summary = run_job(_remove_duplicates(dry_run))
    print_summary("Duplicates", summary)


async def _remove_duplicates(dry_run: bool):
    store = build_store()
    try:
        return await run_duplicates_mode(store, create_runner("chunked", 3), dry_run=dry_run)
    finally:
        await store.close()
