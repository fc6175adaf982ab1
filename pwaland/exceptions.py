"""pwaland specific exceptions."""


class FetchError(Exception):
    """Raised when a remote page, manifest or list cannot be fetched."""


class EntryValidationError(ValueError):
    """Raised when a unit of work is missing a required field (url, title, link, icon)."""


class BrowserLaunchError(Exception):
    """Raised when the headless browser used by the rendered check cannot be started."""


class NoDomainsError(Exception):
    """Raised when no candidate domains could be fetched from any source."""


class RecordStoreError(Exception):
    """Raised when the record store rejects a request or cannot be reached."""


class CandidateFileError(Exception):
    """Raised when the local candidate or directory file cannot be read."""
