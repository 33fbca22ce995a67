"""
Whitelist rules.

Every rule kind is a small frozen dataclass and all of them are evaluated by
:func:`rule_matches`. A domain matching any rule is never blocked.
"""

import os
import re
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainsRule:
    pattern: str


@dataclass(frozen=True)
class PrefixRule:
    pattern: str


@dataclass(frozen=True)
class SuffixRule:
    pattern: str


@dataclass(frozen=True)
class EqualRule:
    pattern: str


@dataclass(frozen=True)
class RegexRule:
    pattern: str
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern))


WhitelistRule = Union[ContainsRule, PrefixRule, SuffixRule, EqualRule, RegexRule]

RULE_KINDS = {
    'contains': ContainsRule,
    'prefix': PrefixRule,
    'suffix': SuffixRule,
    'equal': EqualRule,
    'regex': RegexRule,
}


def rule_matches(rule: WhitelistRule, domain: str) -> bool:
    if isinstance(rule, ContainsRule):
        return rule.pattern in domain
    if isinstance(rule, PrefixRule):
        return domain.startswith(rule.pattern)
    if isinstance(rule, SuffixRule):
        return domain.endswith(rule.pattern)
    if isinstance(rule, EqualRule):
        return domain == rule.pattern
    if isinstance(rule, RegexRule):
        return rule.compiled.search(domain) is not None
    raise TypeError(f"Unsupported whitelist rule: {rule!r}")


def rule_label(rule: WhitelistRule) -> str:
    kind = next(name for name, cls in RULE_KINDS.items() if isinstance(rule, cls))
    return f"{kind}:{rule.pattern}"


class Whitelist:
    """Ordered whitelist rules with per-rule hit counters.

    Rules are checked in order and the first match wins. Counters are
    updated from the source worker threads and are guarded by a lock.
    """

    def __init__(self, rules: Iterable[WhitelistRule] = ()):
        self.rules: List[WhitelistRule] = list(rules)
        self.hits: Counter = Counter()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.rules)

    def match(self, domain: str) -> Optional[WhitelistRule]:
        for rule in self.rules:
            if rule_matches(rule, domain):
                with self._lock:
                    self.hits[rule] += 1
                return rule
        return None

    def is_whitelisted(self, domain: str) -> bool:
        return self.match(domain) is not None

    def hit_report(self) -> Dict[str, int]:
        """Hits per rule, most frequent first."""
        with self._lock:
            return {rule_label(rule): count for rule, count in self.hits.most_common()}


def load_whitelist_rules(path: str) -> List[WhitelistRule]:
    """
    Load whitelist rules from a file.

    One ``kind:pattern`` entry per line where kind is one of contains,
    prefix, suffix, equal or regex. Text after ``#`` is ignored except in
    regex rules, where ``#`` may be part of the pattern.
    """
    if not os.path.exists(path):
        logger.debug(f"Whitelist file not found: {path}")
        return []

    rules: List[WhitelistRule] = []
    with open(path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            kind, sep, pattern = line.partition(':')
            kind = kind.strip().lower()
            if not sep or kind not in RULE_KINDS:
                logger.warning(f"Invalid whitelist entry on line {line_num}: {line}")
                continue

            if kind != 'regex' and '#' in pattern:
                pattern = pattern[:pattern.index('#')]
            pattern = pattern.strip()
            if not pattern:
                logger.warning(f"Empty whitelist pattern on line {line_num}: {line}")
                continue

            try:
                rules.append(RULE_KINDS[kind](pattern))
            except re.error as e:
                logger.warning(f"Invalid regex pattern on line {line_num}: {pattern} - {e}")

    logger.info(f"Loaded {len(rules)} whitelist rules from {path}")
    return rules
