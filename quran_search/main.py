#!/usr/bin/env python3
"""
CLI interface for Quran verse search.
"""

import argparse
import asyncio
import logging
import sys
import time
from typing import List, Optional

from dotenv import load_dotenv

from .manager import EmptyQueryError, SearchFailedError, SearchManager, create_manager
from .search import HybridSearchEngine
from .utils.metrics import calculate_search_metrics
from .utils.types import FormattedSearchResult, JsonDict

HELP_TEXT = """Commands:
  /clear   - clear cached surahs and terms
  /config  - show the hybrid search config
  /surahs  - list all surahs
  /quit    - exit"""


def print_results(results: List[FormattedSearchResult], limit: int) -> None:
    if not results:
        print("No verses found.")
        return
    print(f"Found {len(results)} verses:")
    for r in results[:limit]:
        print(f"\n[{r.surah_name} {r.surah_number}:{r.ayat.id}] score={r.score:.2f} matches={r.match_count}")
        print(f"  {r.ayat.arab}")
        print(f"  {r.ayat.latin}")
        print(f"  {r.ayat.terjemahan}")
    if len(results) > limit:
        print(f"\n... and {len(results) - limit} more")


def print_surah_list(surahs: List[JsonDict]) -> None:
    for s in surahs:
        print(
            f"{s['number']:>3}. {s['transliteration']} ({s['translation']}) "
            f"- {s['number_of_verses']} verses, {s['revelation']}"
        )


async def print_stats(manager: SearchManager, term: str, surah_number: int) -> None:
    """Run the bare hybrid engine on one surah and print channel statistics."""
    surah = await manager.get_surah(surah_number)
    engine = HybridSearchEngine(surah.verses, manager.get_config(), embedding=manager.embedding)
    start = time.perf_counter()
    hits = engine.search(manager.normalize_term(term), manager.engine_top_k)
    metrics = calculate_search_metrics(hits, time.perf_counter() - start)
    print(
        f"\nEngine: {metrics.total_results} hits "
        f"(keyword={metrics.keyword_matches}, semantic={metrics.semantic_matches}, both={metrics.hybrid_matches}) "
        f"avg bm25={metrics.average_bm25_score:.2f} semantic={metrics.average_semantic_score:.2f} "
        f"hybrid={metrics.average_hybrid_score:.2f} in {metrics.execution_time * 1000:.1f} ms"
    )


async def run_query(manager: SearchManager, term: str, surah_number: Optional[int], limit: int, stats: bool) -> None:
    reference = await manager.lookup_reference(term)
    if reference is not None:
        surah, ayat = reference
        print(f"[{surah.name_short} {surah.number}:{ayat.id}]")
        print(f"  {ayat.arab}\n  {ayat.latin}\n  {ayat.terjemahan}")
        if ayat.tafsir:
            print(f"\n  {ayat.tafsir}")
        return

    if surah_number is not None:
        surah = await manager.get_surah(surah_number)
        results = manager.search_local(term, surah)
    else:
        results = await manager.search_global(term)
    print_results(results, limit)

    if stats and surah_number is not None:
        await print_stats(manager, term, surah_number)


async def interactive_mode(manager: SearchManager, surah_number: Optional[int], limit: int, stats: bool) -> None:
    """Run interactive search mode."""
    print("=" * 60)
    print("Quran Verse Search")
    print("=" * 60)
    scope = f"surah {surah_number}" if surah_number else "all surahs"
    print(f"Searching {scope}. Type a word in Arabic, Latin or Indonesian,")
    print("or a reference such as Al-Fatihah:7.")
    print(HELP_TEXT)
    print()

    while True:
        try:
            user_input = input("search> ").strip()
        except (KeyboardInterrupt, EOFError):
            print()
            break

        if not user_input:
            continue

        if user_input.startswith("/"):
            cmd = user_input.lower()
            if cmd in ["/quit", "/exit", "/q"]:
                break
            elif cmd == "/clear":
                manager.clear_cache()
                print("Cache cleared.")
            elif cmd == "/config":
                for key, value in manager.get_config().to_dict().items():
                    print(f"  {key}: {value}")
            elif cmd == "/surahs":
                try:
                    print_surah_list(await manager.list_surahs())
                except Exception as e:
                    print(f"Error: {e}")
            elif cmd == "/help":
                print(HELP_TEXT)
            else:
                print(f"Unknown command: {user_input}")
            continue

        print()
        try:
            await run_query(manager, user_input, surah_number, limit, stats)
        except Exception as e:
            print(f"Error: {e}")
        print()


async def _run(args: argparse.Namespace) -> int:
    manager = create_manager(data_file=args.data_file, show_progress=not args.query or args.progress)
    try:
        if args.query:
            try:
                await run_query(manager, args.query, args.surah, args.top, args.stats)
            except (EmptyQueryError, SearchFailedError) as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        else:
            await interactive_mode(manager, args.surah, args.top, args.stats)
    finally:
        await manager.aclose()
    return 0


def main():
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Hybrid keyword and semantic search over Quran verses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-q", "--query", type=str, help="Single query to process (non-interactive mode)")
    parser.add_argument("-s", "--surah", type=int, help="Search only this surah (1-114)")
    parser.add_argument("--data-file", type=str, help="Corpus file written by quran-build-index")
    parser.add_argument("--top", type=int, default=10, help="Number of results to print (default: 10)")
    parser.add_argument("--stats", action="store_true", help="Print engine statistics (with --surah)")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar for global search")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.surah is not None and not 1 <= args.surah <= 114:
        parser.error("--surah must be between 1 and 114")

    try:
        sys.exit(asyncio.run(_run(args)))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
