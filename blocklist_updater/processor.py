"""Turn the raw lines of one source into a set of candidate domains."""

import logging
from contextlib import closing
from dataclasses import dataclass, field
from typing import Set

from .tlds import TLDReference
from .validators import LineRule, validate_line
from .whitelist import Whitelist

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Domains accepted from a source plus rejection counters."""
    domains: Set[str] = field(default_factory=set)
    invalid: int = 0
    unknown_tld: int = 0
    whitelisted: int = 0


def process_stream(stream, rule: LineRule, tlds: TLDReference,
                   whitelist: Whitelist) -> ProcessResult:
    """
    Validate and filter every line of ``stream``.

    ``stream`` is anything exposing ``iter_lines()`` and ``close()``, normally
    a streaming ``requests.Response``. It is closed once this returns or
    raises.
    """
    result = ProcessResult()

    with closing(stream):
        for raw in stream.iter_lines():
            if isinstance(raw, bytes):
                raw = raw.decode('utf-8', errors='ignore')

            domain = validate_line(rule, raw.strip().lower())
            if domain is None:
                result.invalid += 1
                continue

            if not tlds.matches(domain):
                logger.debug(f"don't match TLDs: {domain}")
                result.unknown_tld += 1
                continue

            if whitelist.is_whitelisted(domain):
                logger.debug(f"in whitelist: {domain}")
                result.whitelisted += 1
                continue

            result.domains.add(domain)

    return result
