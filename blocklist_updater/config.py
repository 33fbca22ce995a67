"""
Configuration: defaults, built-in source and rule tables, and the ``Config``
object populated from the command line.
"""

import os
import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from .fetcher import DEFAULT_FETCH_ATTEMPTS, DEFAULT_FETCH_DELAY, DEFAULT_TIMEOUT
from .resolver import DEFAULT_RESOLVE_ATTEMPTS, DEFAULT_RESOLVE_DELAY, DEFAULT_RESOLVER_URL
from .validators import DomainListRule, HostLineRule, LineRule, parse_rule
from .whitelist import ContainsRule, EqualRule, RegexRule, SuffixRule

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_OUTPUT_DIR = "."
DEFAULT_LOG_FILE = "blocklist_updater.log"

TLDS_URL = "http://data.iana.org/TLD/tlds-alpha-by-domain.txt"
EFFECTIVE_TLDS_URL = "https://publicsuffix.org/list/effective_tld_names.dat"

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 200
DEFAULT_CONCURRENCY = 50
DEFAULT_QUEUE_SIZE = 20

BLOCKLIST = "toblock.lst"
BLOCKLIST_WITHOUT_SHORTLINKS = "toblock-without-shorturl.lst"
BLOCKLIST_OPTIMIZED = "toblock-optimized.lst"
BLOCKLIST_WITHOUT_SHORTLINKS_OPTIMIZED = "toblock-without-shorturl-optimized.lst"

# ============================================================================
# BUILT-IN TABLES
# ============================================================================


@dataclass(frozen=True)
class Source:
    """A remote list and the rule its lines are validated with."""
    url: str
    rule: LineRule


SOURCES = [
    Source("https://raw.githubusercontent.com/notracking/hosts-blocklists/master/hostnames.txt", HostLineRule("0.0.0.0")),
    Source("http://dn-mwsl-hosts.qbox.me/hosts", HostLineRule("191.101.231.96")),
    Source("https://adaway.org/hosts.txt", HostLineRule("127.0.0.1")),
    Source("http://sysctl.org/cameleon/hosts", HostLineRule("127.0.0.1")),
    Source("http://www.hostsfile.org/Downloads/hosts.txt", HostLineRule("127.0.0.1")),
    Source("https://raw.githubusercontent.com/yous/YousList/master/hosts.txt", HostLineRule("0.0.0.0")),
    Source("https://download.dnscrypt.info/blacklists/domains/mybase.txt", DomainListRule()),
    Source("https://raw.githubusercontent.com/koala0529/adhost/master/adhosts", HostLineRule("127.0.0.1")),
    Source("http://mirror1.malwaredomains.com/files/justdomains", DomainListRule()),
    Source("http://ransomwaretracker.abuse.ch/downloads/RW_DOMBL.txt", DomainListRule()),
    Source("https://s3.amazonaws.com/lists.disconnect.me/simple_tracking.txt", DomainListRule()),
    Source("https://raw.githubusercontent.com/azet12/KADhosts/master/KADhosts.txt", HostLineRule("0.0.0.0")),
    Source("https://raw.githubusercontent.com/lack006/Android-Hosts-L/master/hosts_files/2016_hosts/AD", HostLineRule("127.0.0.1")),
    Source("https://gitlab.com/ZeroDot1/CoinBlockerLists/raw/master/hosts", HostLineRule("0.0.0.0")),
]

SHORTLINK_DOMAINS = [
    "db.tt",
    "www.db.tt",
    "j.mp",
    "www.j.mp",
    "bit.ly",
    "www.bit.ly",
    "pix.bit.ly",
    "goo.gl",
    "www.goo.gl",
]

WHITELIST_RULES = [
    ContainsRule("google-analytics"),
    SuffixRule("msedge.net"),
    EqualRule("amazonaws.com"),
    EqualRule("mp.weixin.qq.com"),
    EqualRule("url.cn"),
    RegexRule(r"^s3[\d\w\-]*.amazonaws.com"),
    SuffixRule("internetdownloadmanager.com"),
    SuffixRule(".alcohol-soft.com"),
    EqualRule("scootersoftware.com"),
    RegexRule(r"[^ad]\.mail\.ru"),
    RegexRule(r"[^ad]\.daum\.net"),
    RegexRule(r"^\w{1,10}\.yandex\."),
    SuffixRule(".googlevideo.com"),
    RegexRule(r"^[^\.]+\.elb\.amazonaws\.com"),
    SuffixRule(".in-addr.arpa"),
    SuffixRule(".url.cn"),
    EqualRule("qq.com"),
    EqualRule("www.qq.com"),
    EqualRule("analytics.163.com"),
    EqualRule("163.com"),
    EqualRule("behance.net"),
    SuffixRule(".verisign.com"),
    ContainsRule("mozilla"),
]

# ============================================================================
# RUNTIME CONFIGURATION
# ============================================================================


@dataclass
class Config:
    """Configuration for a blocklist update run."""
    sources_file: Optional[str] = None
    whitelist_file: Optional[str] = None
    output_dir: str = DEFAULT_OUTPUT_DIR
    tlds_url: str = TLDS_URL
    effective_tlds_url: str = EFFECTIVE_TLDS_URL
    resolver_url: str = DEFAULT_RESOLVER_URL
    timeout: int = DEFAULT_TIMEOUT
    fetch_attempts: int = DEFAULT_FETCH_ATTEMPTS
    fetch_delay: float = DEFAULT_FETCH_DELAY
    resolve_attempts: int = DEFAULT_RESOLVE_ATTEMPTS
    resolve_delay: float = DEFAULT_RESOLVE_DELAY
    max_concurrent_checks: int = DEFAULT_CONCURRENCY
    queue_size: int = DEFAULT_QUEUE_SIZE
    skip_verify: bool = False
    dry_run: bool = False
    quiet: bool = False
    verbose: bool = False

    def __post_init__(self):
        self.max_concurrent_checks = max(MIN_CONCURRENCY, min(self.max_concurrent_checks, MAX_CONCURRENCY))
        self.fetch_attempts = max(1, self.fetch_attempts)
        self.resolve_attempts = max(1, self.resolve_attempts)
        self.fetch_delay = max(0.0, self.fetch_delay)
        self.resolve_delay = max(0.0, self.resolve_delay)
        self.queue_size = max(1, self.queue_size)
        if self.timeout <= 0:
            self.timeout = DEFAULT_TIMEOUT


def load_sources(path: str) -> List[Source]:
    """
    Load sources from a file.

    Each line is ``url | hosts | <address>`` or ``url | domains``; blank
    lines and ``#`` comments are skipped.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    sources: List[Source] = []
    with open(path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            parts = [p.strip() for p in line.split('|')]
            if len(parts) not in (2, 3):
                logger.warning(f"Invalid format in line {line_num}: {line}")
                continue

            url = parts[0]
            result = urlparse(url)
            if result.scheme not in ('http', 'https') or not result.netloc:
                logger.warning(f"Invalid URL in line {line_num}: {url}")
                continue

            try:
                rule = parse_rule(parts[1], parts[2] if len(parts) == 3 else None)
            except ValueError as e:
                logger.warning(f"Invalid rule in line {line_num}: {e}")
                continue

            sources.append(Source(url=url, rule=rule))

    logger.info(f"Loaded {len(sources)} sources from {path}")
    return sources
