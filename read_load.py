"""
read_load.py - async load script that follows short codes concurrently

Resolves random codes from a write_load.py output file, then compares the
number of successful redirects per code with the `clicks` reported by the
stats endpoint. Any difference means increments were lost.

Usage:
  python read_load.py --base http://127.0.0.1:5000 --in codes_created.jsonl --count 15000 --concurrency 200
"""
import argparse
import asyncio
import json
import random
import time
from collections import Counter
from datetime import datetime, timezone

import httpx


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _load_codes(path):
    codes = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                codes.append(json.loads(line)["code"])
    return codes


async def _hit_one(client: httpx.AsyncClient, base: str, code: str) -> bool:
    try:
        r = await client.get(f"{base}/{code}", follow_redirects=False, timeout=10)
    except httpx.HTTPError:
        return False
    return r.status_code == 302


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:5000")
    parser.add_argument("--in", dest="codes_file", default="codes_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    codes = _load_codes(args.codes_file)
    if not codes:
        print(f"No codes found in {args.codes_file}. Run write_load.py first.")
        return

    # Baseline so the script can be re-run against the same codes.
    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        before = {}
        for code in set(codes):
            r = await client.get(f"{args.base}/api/v1/url/{code}/stats", timeout=10)
            before[code] = r.json()["clicks"] if r.status_code == 200 else 0

        start_iso = _now_iso()
        t0 = time.perf_counter()
        hits: Counter = Counter()
        sem = asyncio.Semaphore(args.concurrency)

        async def _task():
            code = random.choice(codes)
            async with sem:
                if await _hit_one(client, args.base, code):
                    hits[code] += 1

        await asyncio.gather(*(_task() for _ in range(args.count)))
        dt = time.perf_counter() - t0

        lost = 0
        for code, n in hits.items():
            r = await client.get(f"{args.base}/api/v1/url/{code}/stats", timeout=10)
            lost += before[code] + n - r.json()["clicks"]

    success = sum(hits.values())
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   reads={args.count}, ok={success}, fail={args.count - success}")
    print(f"CLICKS: lost={lost}")
    if dt > 0:
        print(f"RPS:   {success/dt:.1f} req/s")


if __name__ == "__main__":
    asyncio.run(main())
