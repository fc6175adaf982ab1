"""Configuration for pwaland"""

from pathlib import Path

from dynaconf import Dynaconf, Validator

# Validators for pwaland settings.
_validators = [
    Validator("logging.format", is_in=["mozlog", "pretty"]),
    Validator("logging.level", is_in=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    Validator("logging.can_propagate", is_type_of=bool),
    Validator("metrics.dev_logger", is_type_of=bool),
    Validator("metrics.host", is_type_of=str),
    Validator("metrics.port", gte=0, is_type_of=int),
    # Remote sites get at most 15 seconds per request, anything slower is a per-item failure.
    Validator("pwa_check.timeout_sec", is_type_of=float, gt=0, lte=15.0),
    Validator("pwa_check.strategy", is_in=["static-heuristic", "rendered"]),
    Validator("pwa_check.extractor", is_in=["regex", "soup"]),
    Validator("pwa_check.required_checks", is_type_of=list, must_exist=True),
    Validator("discovery.source", is_in=["tranco", "github", "all"]),
    Validator("discovery.limit", is_type_of=int, gte=1),
    Validator("discovery.offset", is_type_of=int, gte=0),
    Validator("discovery.concurrency", is_type_of=int, gte=1, lte=50),
    Validator("discovery.batch_delay_sec", is_type_of=float, gte=0),
    Validator("discovery.runner", is_in=["chunked", "pool"]),
    Validator("discovery.history_file", is_type_of=str, must_exist=True),
    Validator("discovery.save_every_batches", is_type_of=int, gte=1),
    Validator("discovery.tags", is_type_of=list),
    Validator("sources.tranco_url", is_type_of=str, must_exist=True),
    Validator("sources.tranco_download_url", is_type_of=str, must_exist=True),
    Validator("sources.tranco_fallback_url", is_type_of=str, must_exist=True),
    Validator("sources.awesome_pwa_urls", is_type_of=list, must_exist=True),
    Validator("crawl.concurrency", is_type_of=int, gte=1, lte=50),
    Validator("crawl.timeout_sec", is_type_of=float, gt=0),
    Validator("crawl.directory_file", is_type_of=str, must_exist=True),
    Validator("crawl.sources_file", is_type_of=str, must_exist=True),
    Validator("importer.concurrency", is_type_of=int, gte=1, lte=50),
    Validator("importer.batch_delay_sec", is_type_of=float, gte=0),
    Validator("importer.directory_file", is_type_of=str, must_exist=True),
    Validator("importer.tags", is_type_of=list),
    Validator("descriptions.concurrency", is_type_of=int, gte=1, lte=50),
    Validator("descriptions.batch_delay_sec", is_type_of=float, gte=0),
    Validator("descriptions.item_delay_sec", is_type_of=float, gte=0),
    Validator("descriptions.timeout_sec", is_type_of=float, gt=0),
    Validator("record_store.api_url", is_type_of=str, must_exist=True),
    Validator("record_store.api_key", is_type_of=str),
    Validator("record_store.database_id", is_type_of=str),
    Validator("record_store.notion_version", is_type_of=str, must_exist=True),
    Validator("record_store.page_size", is_type_of=int, gte=1, lte=100),
    Validator("record_store.retry_count", is_type_of=int, gte=1),
    Validator("record_store.retry_wait_initial_sec", is_type_of=float, gte=0),
    Validator("record_store.retry_wait_jitter_sec", is_type_of=float, gte=0),
    Validator("record_store.timeout_sec", is_type_of=float, gt=0),
]

# `root_path` = The directory holding the settings files below.
# `envvar_prefix` = Export envvars with `export PWALAND_FOO=bar`.
# `settings_files` = Load these files in the order.
# `environments` = Enable layered environments such as `development`, `production`, `testing` etc.
# `env_switcher` = Switch environments by `export PWALAND_ENV=production`. Default: `development`.
# `validators` = Define validators for pwaland settings.

settings = Dynaconf(
    root_path=str(Path(__file__).parent),
    envvar_prefix="PWALAND",
    settings_files=[
        "default.toml",
        "development.toml",
        "production.toml",
        "testing.toml",
    ],
    environments=True,
    env_switcher="PWALAND_ENV",
    validators=_validators,
)
