"""
Line validators for blocklist sources.

A source is either a hosts file (``<address> <domain>``) or a plain list with
one domain per line. Each format is described by a rule object and all rules
are evaluated through :func:`validate_line`.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Applied to lower-cased input only
DOMAIN_PATTERN = re.compile(r'^(?:(?:xn--)?[a-z0-9][a-z0-9\-_]*\.)+[a-z0-9]{2,}$')


@dataclass(frozen=True)
class HostLineRule:
    """Hosts file line: the address must equal ``address`` exactly."""
    address: str
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = re.compile(rf'^({re.escape(self.address)})\s+([\w\-.]+)')
        object.__setattr__(self, 'pattern', compiled)


@dataclass(frozen=True)
class DomainListRule:
    """Plain domain list line."""


LineRule = Union[HostLineRule, DomainListRule]


def is_valid_domain(domain: str) -> bool:
    return bool(DOMAIN_PATTERN.match(domain))


def validate_line(rule: LineRule, line: str) -> Optional[str]:
    """Return the domain carried by ``line`` or None when the line is rejected."""
    if isinstance(rule, HostLineRule):
        match = rule.pattern.match(line)
        if not match:
            logger.debug(f"invalid line: {line}")
            return None
        domain = match.group(2)
        if not is_valid_domain(domain):
            logger.debug(f"invalid domain in line: {line}")
            return None
        return domain

    if isinstance(rule, DomainListRule):
        if not is_valid_domain(line):
            logger.debug(f"invalid domain: {line}")
            return None
        return line

    raise TypeError(f"Unsupported line rule: {rule!r}")


def parse_rule(kind: str, address: Optional[str] = None) -> LineRule:
    """Build a rule from its textual form (``hosts <address>`` or ``domains``)."""
    kind = kind.strip().lower()
    if kind == 'hosts':
        if not address:
            raise ValueError("hosts rule requires an address")
        return HostLineRule(address.strip())
    if kind == 'domains':
        return DomainListRule()
    raise ValueError(f"Unknown line rule: {kind}")
