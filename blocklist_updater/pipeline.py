"""
Blocklist update pipeline.

A run has four phases:

1. load the TLD reference data,
2. fetch and filter every source in parallel into the candidate set,
3. check every candidate against the resolver, at most
   ``max_concurrent_checks`` at a time,
4. optimize and write the four blocklist files.
"""

import os
import time
import queue
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from tqdm import tqdm

from .config import (
    BLOCKLIST, BLOCKLIST_OPTIMIZED, BLOCKLIST_WITHOUT_SHORTLINKS,
    BLOCKLIST_WITHOUT_SHORTLINKS_OPTIMIZED, SHORTLINK_DOMAINS, SOURCES,
    WHITELIST_RULES, Config, Source, load_sources,
)
from .fetcher import FetchError, HTTPClient
from .optimizer import BlocklistVariants, build_variants
from .processor import process_stream
from .resolver import ExistenceVerifier
from .tlds import TLDReference, bootstrap_tlds
from .whitelist import Whitelist, load_whitelist_rules

logger = logging.getLogger(__name__)

_SENTINEL = object()


@dataclass
class FailedSource:
    """A source that could not be downloaded."""
    url: str
    error: str


class BlocklistUpdater:
    """Main orchestrator for a blocklist update run."""

    def __init__(self, config: Config,
                 sources: Optional[Iterable[Source]] = None,
                 whitelist: Optional[Whitelist] = None,
                 shortlinks: Optional[Iterable[str]] = None,
                 http_client: Optional[HTTPClient] = None,
                 verifier: Optional[ExistenceVerifier] = None):
        self.config = config
        self.sources: List[Source] = list(sources) if sources is not None else self._load_sources()
        self.whitelist = whitelist if whitelist is not None else self._load_whitelist()
        self.shortlinks: List[str] = list(shortlinks) if shortlinks is not None else list(SHORTLINK_DOMAINS)

        self.http_client = http_client or HTTPClient(
            timeout=config.timeout,
            attempts=config.fetch_attempts,
            delay=config.fetch_delay,
            pool_size=config.max_concurrent_checks,
        )
        self.verifier = verifier or ExistenceVerifier(
            self.http_client,
            resolver_url=config.resolver_url,
            attempts=config.resolve_attempts,
            delay=config.resolve_delay,
        )

        self.tlds = TLDReference()
        self.failed_sources: List[FailedSource] = []
        self._candidates_lock = threading.Lock()

        self.stats: Dict[str, Any] = {
            'total_sources': len(self.sources),
            'successful': 0,
            'failed': 0,
            'candidate_domains': 0,
            'nonexistent_domains': 0,
            'final_domains': 0,
            'optimized_domains': 0,
            'whitelist_hits': {},
            'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        }

    def _load_sources(self) -> List[Source]:
        if not self.config.sources_file:
            return list(SOURCES)
        try:
            return load_sources(self.config.sources_file)
        except FileNotFoundError:
            logger.error(f"Sources file '{self.config.sources_file}' not found, using built-in sources.")
            return list(SOURCES)

    def _load_whitelist(self) -> Whitelist:
        rules = list(WHITELIST_RULES)
        if self.config.whitelist_file:
            if not os.path.exists(self.config.whitelist_file):
                logger.error(f"Whitelist file '{self.config.whitelist_file}' not found, using built-in rules.")
            rules.extend(load_whitelist_rules(self.config.whitelist_file))
        return Whitelist(rules)

    # ------------------------------------------------------------------------
    # Stage A: sources
    # ------------------------------------------------------------------------

    def collect_source(self, source: Source, candidates: Set[str]) -> bool:
        """Download and filter one source, merging its domains into ``candidates``."""
        try:
            stream = self.http_client.fetch(source.url)
        except FetchError as e:
            logger.error(f"Error downloading {source.url}: {e}")
            with self._candidates_lock:
                self.failed_sources.append(FailedSource(url=source.url, error=str(e.error)))
            return False

        result = process_stream(stream, source.rule, self.tlds, self.whitelist)
        with self._candidates_lock:
            candidates.update(result.domains)

        logger.info(f"  {source.url}: {len(result.domains):,} domains "
                    f"({result.invalid:,} invalid, {result.unknown_tld:,} unknown TLD, "
                    f"{result.whitelisted:,} whitelisted)")
        return True

    def collect_candidates(self) -> Set[str]:
        """Process every source in parallel and return the merged candidate set."""
        candidates: Set[str] = set()
        if not self.sources:
            logger.warning("No sources configured.")
            return candidates

        logger.info(f"Downloading {len(self.sources)} sources...")

        with ThreadPoolExecutor(max_workers=len(self.sources)) as executor:
            futures = {executor.submit(self.collect_source, src, candidates): src for src in self.sources}

            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Downloading", disable=self.config.quiet):
                source = futures[future]
                try:
                    if future.result():
                        self.stats['successful'] += 1
                    else:
                        self.stats['failed'] += 1
                except Exception as e:
                    logger.error(f"Error processing {source.url}: {e}")
                    with self._candidates_lock:
                        self.failed_sources.append(FailedSource(url=source.url, error=str(e)))
                    self.stats['failed'] += 1

        self.stats['candidate_domains'] = len(candidates)
        logger.info(f"Collected {len(candidates):,} candidate domains")
        return candidates

    # ------------------------------------------------------------------------
    # Stage B: existence verification
    # ------------------------------------------------------------------------

    @staticmethod
    def _aggregate(channel: queue.Queue, final_domains: Set[str]) -> None:
        """Sole writer of ``final_domains``; runs until the sentinel arrives."""
        while True:
            domain = channel.get()
            if domain is _SENTINEL:
                return
            final_domains.add(domain)

    def _check_domain(self, domain: str, channel: queue.Queue, semaphore: threading.BoundedSemaphore) -> None:
        try:
            try:
                exists = self.verifier.exists(domain)
            except Exception as e:
                logger.error(f"Error verifying {domain}, keeping it: {e}")
                exists = True
            if exists:
                channel.put(domain)
        finally:
            semaphore.release()

    def verify_domains(self, candidates: Iterable[str]) -> Set[str]:
        """Return the candidates the resolver does not report as non-existent."""
        candidates = sorted(candidates)
        final_domains: Set[str] = set()
        limit = self.config.max_concurrent_checks

        channel: queue.Queue = queue.Queue(maxsize=self.config.queue_size)
        aggregator = threading.Thread(target=self._aggregate, args=(channel, final_domains),
                                      name="domain-aggregator", daemon=True)
        aggregator.start()

        logger.info(f"Verifying {len(candidates):,} domains ({limit} concurrent checks)...")
        semaphore = threading.BoundedSemaphore(limit)
        progress = tqdm(total=len(candidates), desc="Verifying", disable=self.config.quiet)
        try:
            with ThreadPoolExecutor(max_workers=limit) as executor:
                for domain in candidates:
                    semaphore.acquire()
                    future = executor.submit(self._check_domain, domain, channel, semaphore)
                    future.add_done_callback(lambda _: progress.update(1))
        finally:
            channel.put(_SENTINEL)
            aggregator.join()
            progress.close()

        self.stats['nonexistent_domains'] = len(candidates) - len(final_domains)
        logger.info(f"{len(final_domains):,} domains verified, "
                    f"{self.stats['nonexistent_domains']:,} reported as non-existent")
        return final_domains

    # ------------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------------

    def write_blocklists(self, variants: BlocklistVariants) -> None:
        if self.config.dry_run:
            logger.info(f"[DRY RUN] Would write blocklists to {self.config.output_dir}")
            return

        os.makedirs(self.config.output_dir, exist_ok=True)
        self._write_blocklist(BLOCKLIST_WITHOUT_SHORTLINKS, variants.without_shortlinks)
        self._write_blocklist(BLOCKLIST, variants.plain)
        self._write_blocklist(BLOCKLIST_WITHOUT_SHORTLINKS_OPTIMIZED, variants.optimized_without_shortlinks)
        self._write_blocklist(BLOCKLIST_OPTIMIZED, variants.optimized)

    def _write_blocklist(self, filename: str, domains: List[str]) -> None:
        """Write (or replace) one blocklist file."""
        filepath = os.path.join(self.config.output_dir, filename)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write('\n'.join(domains))
        logger.info(f"Created {filename}: {len(domains):,} domains")

    # ------------------------------------------------------------------------

    def run(self) -> Dict[str, Any]:
        """Run the full update pipeline."""
        start_time = time.time()

        self.tlds = bootstrap_tlds(self.http_client, self.config.tlds_url, self.config.effective_tlds_url)

        candidates = self.collect_candidates()

        if self.config.skip_verify:
            logger.info("Skipping existence verification")
            final_domains = candidates
        else:
            final_domains = self.verify_domains(candidates)
        self.stats['final_domains'] = len(final_domains)

        variants = build_variants(final_domains, self.shortlinks)
        self.stats['optimized_domains'] = len(variants.optimized_without_shortlinks)
        self.write_blocklists(variants)

        self.stats['whitelist_hits'] = self.whitelist.hit_report()
        elapsed_time = time.time() - start_time
        self.stats['elapsed_time'] = f"{elapsed_time:.2f} seconds"

        return self.stats
