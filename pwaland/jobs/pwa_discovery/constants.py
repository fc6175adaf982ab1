"""Constants for the PWA discovery job"""

import re

# HTTP request configuration
REQUEST_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

TIMEOUT: float = 15.0

PARSER: str = "html.parser"

MANIFEST_SELECTOR: str = 'link[rel="manifest" i][href]'

META_DESCRIPTION_SELECTORS: list[str] = [
    'meta[name="description" i][content]',
    'meta[property="og:description" i][content]',
]

# Both attribute orders are tried for every tag
MANIFEST_LINK_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"""<link[^>]*rel\s*=\s*["']manifest["'][^>]*href\s*=\s*["']([^"']+)["'][^>]*/?>""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<link[^>]*href\s*=\s*["']([^"']+)["'][^>]*rel\s*=\s*["']manifest["'][^>]*/?>""",
        re.IGNORECASE,
    ),
]

META_DESCRIPTION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"""<meta[^>]*name\s*=\s*["']description["'][^>]*content\s*=\s*["']([^"']+)["'][^>]*/?>""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<meta[^>]*content\s*=\s*["']([^"']+)["'][^>]*name\s*=\s*["']description["'][^>]*/?>""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<meta[^>]*property\s*=\s*["']og:description["'][^>]*content\s*=\s*["']([^"']+)["'][^>]*/?>""",  # noqa: E501
        re.IGNORECASE,
    ),
    re.compile(
        r"""<meta[^>]*content\s*=\s*["']([^"']+)["'][^>]*property\s*=\s*["']og:description["'][^>]*/?>""",  # noqa: E501
        re.IGNORECASE,
    ),
]

# Signatures of a service worker registration in static page source
SERVICE_WORKER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"navigator\s*\.\s*serviceWorker\s*\.\s*register"),
    re.compile(r"serviceWorker\s*in\s*navigator"),
    re.compile(r"""navigator\s*\[\s*['"]serviceWorker['"]\s*\]"""),
    re.compile(r"workbox", re.IGNORECASE),
    re.compile(r"sw\.js", re.IGNORECASE),
    re.compile(r"service-worker\.js", re.IGNORECASE),
    re.compile(r"service_worker\.js", re.IGNORECASE),
    re.compile(r"sw-register", re.IGNORECASE),
    re.compile(r"registerSW", re.IGNORECASE),
    re.compile(r"__precacheManifest"),
]

# Icon sizes in order of preference, largest first
PREFERRED_ICON_SIZES: list[str] = [
    "512x512",
    "384x384",
    "256x256",
    "192x192",
    "144x144",
    "128x128",
    "96x96",
    "72x72",
]

INSTALLABLE_DISPLAY_MODES: frozenset[str] = frozenset({"standalone", "fullscreen", "minimal-ui"})

CHECK_NAMES: tuple[str, ...] = ("https", "manifest", "service_worker", "icons", "display")

DEFAULT_REQUIRED_CHECKS: frozenset[str] = frozenset({"https", "manifest", "service_worker"})

COULD_NOT_ANALYZE: str = "Could not analyze page"

# Tranco list discovery
TRANCO_LIST_ID_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"/list/([A-Z0-9]+)", re.IGNORECASE),
    re.compile(r"/download/([A-Z0-9]+)", re.IGNORECASE),
    re.compile(r"""list_id["']?\s*[:=]\s*["']?([A-Z0-9]+)""", re.IGNORECASE),
]

FALLBACK_TOP_DOMAINS: list[str] = [
    "google.com",
    "youtube.com",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "wikipedia.org",
    "yahoo.com",
    "reddit.com",
    "amazon.com",
    "netflix.com",
    "microsoft.com",
    "apple.com",
    "linkedin.com",
    "pinterest.com",
    "tumblr.com",
    "ebay.com",
    "paypal.com",
    "github.com",
    "stackoverflow.com",
    "adobe.com",
    "spotify.com",
    "twitch.tv",
    "discord.com",
    "zoom.us",
    "slack.com",
    "notion.so",
    "figma.com",
    "canva.com",
    "trello.com",
    "asana.com",
]

# Markdown link extraction
MARKDOWN_LINK_PATTERN: re.Pattern[str] = re.compile(r"\[([^\]]*)\]\((https?://[^)]+)\)")
BARE_URL_PATTERN: re.Pattern[str] = re.compile(r"""(?<!\()(https?://[^\s<>\[\](),"']+)""")
TRAILING_PUNCTUATION_PATTERN: re.Pattern[str] = re.compile(r"[.,;:!?]+$")

# Links in curated lists that point at code, packages, docs or badges rather than apps
EXCLUDED_URL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"github\.com/.*/(issues|pull|blob|tree|commit|raw)"),
    re.compile(r"github\.com/[^/]+/[^/]+$"),
    re.compile(r"npmjs\.(com|org)"),
    re.compile(r"developer\.mozilla\.org"),
    re.compile(r"web\.dev/"),
    re.compile(r"caniuse\.com"),
    re.compile(r"shields\.io"),
    re.compile(r"badge"),
    re.compile(r"img\.shields"),
    re.compile(r"travis-ci"),
    re.compile(r"circleci"),
    re.compile(r"coveralls"),
    re.compile(r"codecov"),
    re.compile(r"\.md$"),
    re.compile(r"\.json$"),
    re.compile(r"raw\.githubusercontent\.com"),
]

# Descriptions considered placeholders by the description updater
PLACEHOLDER_DESCRIPTIONS: frozenset[str] = frozenset({"hello"})

ENGLISH_TEXT_PATTERN: re.Pattern[str] = re.compile(
    r"""^[a-zA-Z0-9\s\-.,!?()'":;%$/@#&*+=<>\[\]{}|^~`\\\u00c0-\u024f]+$"""
)

FALLBACK_DESCRIPTION_TEMPLATE: str = (
    "{title} is a powerful web application offering excellent functionality and user experience."
)

DEFAULT_TAG: str = "Uncategorized"

# Save the discovery history after this many chunks
DEFAULT_SAVE_EVERY_BATCHES: int = 10
