"""
Top-level domain reference data.

Two lists are combined into one immutable snapshot: the IANA list of
top-level labels and the public suffix list. The snapshot is built once,
before any source is processed, and only read afterwards.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Set, Tuple

from .fetcher import FetchError, HTTPClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TLDReference:
    tlds: FrozenSet[str] = frozenset()
    suffixes: Tuple[str, ...] = ()

    def matches(self, domain: str) -> bool:
        """True if the domain ends in a known TLD or effective TLD."""
        if domain.rsplit('.', 1)[-1] in self.tlds:
            return True
        return domain.endswith(self.suffixes)

    def __len__(self) -> int:
        return len(self.tlds) + len(self.suffixes)


def parse_tld_list(lines: Iterable[str]) -> Set[str]:
    """Parse the IANA ``tlds-alpha-by-domain.txt`` format."""
    tlds: Set[str] = set()
    for line in lines:
        line = line.strip().lower()
        if not line or line.startswith('#'):
            continue
        tlds.add(line)
    return tlds


def parse_effective_tld_names(lines: Iterable[str]) -> Tuple[Set[str], List[str]]:
    """Parse ``effective_tld_names.dat``.

    Returns the single-label entries and the multi-label entries, the latter
    prefixed with a dot so they can be matched with ``str.endswith``.
    """
    tlds: Set[str] = set()
    suffixes: List[str] = []
    for line in lines:
        line = line.strip().lower()
        if not line or not (line[0].isascii() and line[0].isalnum()):
            continue
        if '.' not in line:
            tlds.add(line)
        else:
            suffixes.append('.' + line)
    return tlds, suffixes


def _load_tld_list(http_client: HTTPClient, url: str) -> Set[str]:
    try:
        return parse_tld_list(http_client.fetch_lines(url))
    except FetchError as e:
        logger.error(f"Failed to load TLD list: {e}")
        return set()


def _load_effective_tld_names(http_client: HTTPClient, url: str) -> Tuple[Set[str], List[str]]:
    try:
        return parse_effective_tld_names(http_client.fetch_lines(url))
    except FetchError as e:
        logger.error(f"Failed to load effective TLD names: {e}")
        return set(), []


def bootstrap_tlds(http_client: HTTPClient, tlds_url: str, effective_tlds_url: str) -> TLDReference:
    """Fetch both reference lists concurrently and merge them."""
    logger.info("Loading TLD reference data...")

    with ThreadPoolExecutor(max_workers=2) as executor:
        tld_future = executor.submit(_load_tld_list, http_client, tlds_url)
        etld_future = executor.submit(_load_effective_tld_names, http_client, effective_tlds_url)
        tlds = tld_future.result()
        etld_labels, suffixes = etld_future.result()

    reference = TLDReference(
        tlds=frozenset(tlds | etld_labels),
        suffixes=tuple(suffixes),
    )
    logger.info(f"Loaded {len(reference.tlds):,} TLDs and {len(reference.suffixes):,} effective TLDs")
    return reference
