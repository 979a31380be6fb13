"""
write_load.py - async load script that shortens many URLs concurrently

Every created code is written as a JSON line, then the script checks that
no two creations came back with the same short code.

Usage:
  python write_load.py --base http://127.0.0.1:5000 --count 2000 --concurrency 100 --out codes_created.jsonl
"""
import argparse
import asyncio
import json
import random
import string
import time
from datetime import datetime, timezone

import httpx


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _rand_url(idx: int) -> str:
    host = random.choice(["example", "sample", "demo"]) + "." + random.choice(["com", "org", "io"])
    path = "".join(random.choice(string.ascii_letters + string.digits) for _ in range(8))
    return f"https://{host}/{path}?q={idx}"


async def _create_one(client: httpx.AsyncClient, base: str, idx: int):
    url = _rand_url(idx)
    try:
        r = await client.post(f"{base}/api/v1/url/shorten", json={"originalUrl": url}, timeout=10)
        r.raise_for_status()
    except httpx.HTTPError as exc:
        print(f"create #{idx} failed: {exc}")
        return None
    return {"code": r.json()["shortCode"], "url": url}


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:5000")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--out", default="codes_created.jsonl")
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            async with sem:
                return await _create_one(client, args.base, i)

        results = await asyncio.gather(*(_task(i) for i in range(args.count)))

    created = [r for r in results if r]
    with open(args.out, "w", encoding="utf-8") as out_f:
        for row in created:
            out_f.write(json.dumps(row) + "\n")

    dt = time.perf_counter() - t0
    unique = len({row["code"] for row in created})
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   writes={args.count}, ok={len(created)}, fail={args.count - len(created)}")
    print(f"CODES: unique={unique}, duplicates={len(created) - unique}")
    if dt > 0:
        print(f"TPS:   {len(created)/dt:.1f} req/s")


if __name__ == "__main__":
    asyncio.run(main())
