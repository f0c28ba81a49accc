# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: run_ingest.py
# -----------------------------------------------------------------------------
"""
Embed entity datasets into the local embedding store.

Usage:
    navigate-embed --data ./data/entities
    navigate-embed --cpc-dir ./data/cpc_domain --force
    navigate-embed --data ./data/entities --domain navigate --dry-run
"""
import argparse
import signal
import sys
import threading
import time
from typing import List, Optional

from config.Config import Config
from embedding.OpenAIEmbedder import OpenAIEmbedder
from entity.Entity import Entity
from ingestion.CPCDomainLoader import CPCDomainLoader
from ingestion.EntityFileLoader import EntityFileLoader
from services.EntityIngestService import BatchReport, EntityIngestService
from utility.errors import NavigateAIError, StoreError
from utility.logging_utils import get_logger
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore

logger = get_logger(__name__)


class ProgressPrinter:
    """Single-line progress with throughput and ETA."""

    def __init__(self, every: int = 1, stream=None):
        self.every = max(1, every)
        self.stream = stream or sys.stdout
        self.start = time.time()

    def __call__(self, done: int, total: int) -> None:
        if done % self.every and done != total:
            return
        elapsed = max(time.time() - self.start, 1e-6)
        rate = done / elapsed
        eta = (total - done) / rate if rate > 0 else 0.0
        pct = (100.0 * done / total) if total else 100.0
        self.stream.write(
            f"\r  {done}/{total} ({pct:5.1f}%)  {rate:6.2f} entities/s  ETA {eta:6.1f}s"
        )
        if done == total:
            self.stream.write("\n")
        self.stream.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="navigate-embed",
        description="Embed entity datasets into the local embedding store",
    )
    parser.add_argument("--data", action="append", default=[],
                        help="Entity JSON/JSONL file or directory (repeatable)")
    parser.add_argument("--cpc-dir", help="CPC internal dataset directory (focus areas, milestones, stages)")
    parser.add_argument("--domain", help="Only ingest entities from this domain")
    parser.add_argument("--store", help="Embedding store path (defaults to NAV_STORE_PATH)")
    parser.add_argument("--force", action="store_true", help="Re-embed even when the text is unchanged")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be embedded and exit")
    parser.add_argument("--reset-store", action="store_true",
                        help="Drop every stored embedding first (model / dimension migration)")
    parser.add_argument("--prune", action="store_true",
                        help="Remove stored embeddings for entities no longer in the dataset")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent embedding requests")
    return parser


def load_entities(args: argparse.Namespace) -> List[Entity]:
    entities: List[Entity] = []
    file_loader = EntityFileLoader()
    for path in args.data:
        entities.extend(file_loader.load_entities(path, domain=args.domain))

    if args.cpc_dir:
        cpc = CPCDomainLoader(args.cpc_dir).load_entities()
        entities.extend(e for e in cpc if not args.domain or e.domain == args.domain)
    return entities


def print_report(report: BatchReport) -> None:
    print()
    print("Ingestion Complete!" if not report.cancelled else "Ingestion Cancelled")
    print(f"  Embedded:      {len(report.embedded)}")
    print(f"  Skipped:       {len(report.skipped)}")
    print(f"  Failed:        {len(report.failed)}")
    if report.cancelled:
        print(f"  Not attempted: {report.not_attempted}")
    print(f"  Elapsed:       {report.elapsed_s:.1f}s")
    for eid in report.failed:
        print(f"    - {eid}: {report.errors.get(eid, '')}")


def _prune(store: JsonEntityVectorStore, entities: List[Entity], domain: Optional[str]) -> List[str]:
    keep = {e.id for e in entities}
    if domain:
        # Leave other domains alone when only one was loaded
        snap = store.snapshot()
        keep.update(eid for eid, rec in snap.records.items() if rec.summary.domain != domain)
    with store.writer():
        removed = store.prune(keep)
        store.flush()
    return removed


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if not args.data and not args.cpc_dir:
        print("Error: give at least one --data path or --cpc-dir")
        return 2

    entities = load_entities(args)
    print("NAVIGATE Embedding Ingestion")
    print("=" * 50)
    print(f"Entities:  {len(entities)}")
    print(f"Domain:    {args.domain or '(all)'}")
    print(f"Force:     {args.force}")

    store_path = args.store or Config.env_value("store_path")
    model = Config.env_value("openai_embed_model")
    store = JsonEntityVectorStore(store_path, model=model)

    try:
        if args.dry_run:
            plan = EntityIngestService(store=store).plan(entities, force=args.force)
            print(f"Would embed: {len(plan.to_embed)}")
            print(f"Would skip:  {len(plan.skipped)}")
            print(f"Invalid:     {len(plan.invalid)}")
            for eid in plan.to_embed:
                print(f"  + {eid}")
            for eid, reason in plan.invalid.items():
                print(f"  ! {eid}: {reason}")
            return 0

        cfg = Config.from_env()
        logger.info("Config: %s", cfg.summary())
        embedder = OpenAIEmbedder(cfg, cache_size=0)
        service = EntityIngestService(store=store, embedder=embedder, max_workers=args.workers)

        if args.reset_store:
            store.clear()
            print("Store reset.")

        # Ctrl-C stops new submissions; finished embeddings are still saved
        cancel = threading.Event()
        in_main = threading.current_thread() is threading.main_thread()
        previous = signal.signal(signal.SIGINT, lambda *_: cancel.set()) if in_main else None
        try:
            report = service.embed_all(
                entities,
                force=args.force,
                on_progress=ProgressPrinter(every=max(1, len(entities) // 100)),
                cancel_event=cancel,
            )
        finally:
            if in_main:
                signal.signal(signal.SIGINT, previous)
        print_report(report)

        if args.prune and not report.cancelled:
            removed = _prune(store, entities, args.domain)
            print(f"  Pruned:        {len(removed)}")

        stats = store.get_stats()
        print(f"  Store:         {stats.count} record(s), {stats.size_mb:.2f} MB at {stats.path}")
        return 1 if report.failed else 0

    except StoreError as e:
        logger.error("Embedding store error: %s", e)
        print(f"Store error: {e}")
        return 2
    except (NavigateAIError, ValueError) as e:
        logger.error("Ingestion failed: %s", e)
        print(f"Ingestion failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
