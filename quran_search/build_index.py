from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Sequence

from dotenv import load_dotenv
from tqdm.asyncio import tqdm_asyncio

from .client import QuranClient
from .utils.loaders import save_corpus
from .utils.surah_names import SURAH_COUNT
from .utils.types import Surah


async def download_surahs(
    client: QuranClient,
    numbers: Sequence[int],
    *,
    concurrency: int = 8,
) -> List[Surah]:
    """
    Fetch surahs with bounded concurrency.

    Unlike global search, a failed surah aborts the download: a corpus file
    with holes would silently hide verses from every later search.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def fetch(number: int) -> Surah:
        async with semaphore:
            return await client.fetch_surah(number)

    return await tqdm_asyncio.gather(*(fetch(n) for n in numbers), desc="Downloading surahs")


async def build_corpus(out_path: Path, concurrency: int) -> List[Surah]:
    async with QuranClient() as client:
        surahs = await download_surahs(client, range(1, SURAH_COUNT + 1), concurrency=concurrency)
    save_corpus(surahs, out_path)
    return surahs


def main() -> None:
    load_dotenv()

    ap = argparse.ArgumentParser(description="Download all surahs into a local corpus file for offline search.")
    ap.add_argument("--out", required=True, help="Output corpus file (JSON).")
    ap.add_argument("--concurrency", type=int, default=8, help="Parallel requests (default: 8)")
    args = ap.parse_args()

    logging.basicConfig(level=logging.WARNING)

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    surahs = asyncio.run(build_corpus(out_path, args.concurrency))

    total_verses = sum(s.number_of_verses for s in surahs)
    print("Built corpus successfully:")
    print(f"- {out_path} ({len(surahs)} surahs, {total_verses} verses)")


if __name__ == "__main__":
    main()
