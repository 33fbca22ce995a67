"""Hierarchical reduction and the four published blocklist variants."""

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Iterator, List, Set


def parent_domains(domain: str) -> Iterator[str]:
    """Yield every dot-boundary ancestor, nearest first.

    ``a.b.example.com`` yields ``b.example.com``, ``example.com`` and ``com``.
    """
    labels = domain.split('.')
    for i in range(1, len(labels)):
        yield '.'.join(labels[i:])


def optimize(domains: AbstractSet[str]) -> Set[str]:
    """Drop every domain that has an ancestor in ``domains``.

    Blocking a domain blocks its subdomains too, so those entries are
    redundant. The result is a fixed point: optimizing it again changes
    nothing.
    """
    return {
        domain for domain in domains
        if not any(parent in domains for parent in parent_domains(domain))
    }


@dataclass
class BlocklistVariants:
    plain: List[str]
    without_shortlinks: List[str]
    optimized: List[str]
    optimized_without_shortlinks: List[str]


def build_variants(final_domains: AbstractSet[str], shortlinks: Iterable[str]) -> BlocklistVariants:
    """Build the sorted output lists.

    Shortlink domains are removed from the "without" lists and always
    present in the others, whether or not they were verified.
    """
    shortlinks = set(shortlinks)
    without = set(final_domains) - shortlinks
    optimized_without = optimize(without)

    return BlocklistVariants(
        plain=sorted(without | shortlinks),
        without_shortlinks=sorted(without),
        optimized=sorted(optimized_without | shortlinks),
        optimized_without_shortlinks=sorted(optimized_without),
    )
