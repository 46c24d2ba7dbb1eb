"""
load_links.py - simple async load script against a running clicklink server

Usage:
  python load_links.py write --base http://127.0.0.1:8000 --count 2000 --concurrency 100 --out links_created.jsonl
  python load_links.py read  --base http://127.0.0.1:8000 --in links_created.jsonl --count 15000 --concurrency 200

`write` registers one user and creates links with the given click limit;
`read` redeems random codes from that file and reports how many were opened,
gone (410) or already evicted (404).
"""
import argparse
import asyncio
import collections
import json
import random
import string
import time
from datetime import datetime, timezone

import httpx


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _rand_url(idx):
    alphabet = string.ascii_letters + string.digits
    path = "".join(random.choice(alphabet) for _ in range(8))
    return f"https://example.com/{path}?q={idx}"


def _load_codes(path):
    codes = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                code = json.loads(line).get("code")
            except json.JSONDecodeError:
                continue
            if code:
                codes.append(code)
    return codes


async def _run(count, concurrency, job):
    sem = asyncio.Semaphore(concurrency)

    async def _task(i):
        async with sem:
            return await job(i)

    return await asyncio.gather(*(_task(i) for i in range(count)))


async def write(args):
    limits = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(base_url=args.base, limits=limits, timeout=10) as client:
        r = await client.post("/users")
        r.raise_for_status()
        headers = {"X-User-Id": r.json()["user_id"]}

        with open(args.out, "w", encoding="utf-8") as out_f:

            async def _create_one(idx):
                payload = {"url": _rand_url(idx), "clicks_limit": args.clicks, "lifetime_hours": args.hours}
                try:
                    r = await client.post("/links", json=payload, headers=headers)
                    r.raise_for_status()
                except httpx.HTTPError:
                    return "error"
                out_f.write(json.dumps({"code": r.json()["short_code"], "url": payload["url"]}) + "\n")
                return "created"

            return await _run(args.count, args.concurrency, _create_one)


async def read(args):
    codes = _load_codes(args.codes_file)
    if not codes:
        print(f"No codes found in {args.codes_file}. Run the write command first.")
        return []

    limits = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(base_url=args.base, limits=limits, timeout=10) as client:

        async def _hit_one(_):
            try:
                r = await client.get(f"/links/{random.choice(codes)}")
            except httpx.HTTPError:
                return "error"
            return {200: "opened", 404: "not_found", 410: "gone"}.get(r.status_code, "error")

        return await _run(args.count, args.concurrency, _hit_one)


def main():
    parser = argparse.ArgumentParser()
    sub = parser.add_subparsers(dest="command", required=True)

    w = sub.add_parser("write")
    w.add_argument("--count", type=int, default=2000)
    w.add_argument("--clicks", type=int, default=6)
    w.add_argument("--hours", type=int, default=24)
    w.add_argument("--out", default="links_created.jsonl")

    r = sub.add_parser("read")
    r.add_argument("--in", dest="codes_file", default="links_created.jsonl")
    r.add_argument("--count", type=int, default=15000)

    for p in (w, r):
        p.add_argument("--base", default="http://127.0.0.1:8000")
        p.add_argument("--concurrency", type=int, default=100)
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()
    outcomes = asyncio.run(write(args) if args.command == "write" else read(args))
    dt = time.perf_counter() - t0

    tally = collections.Counter(outcomes)
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   {args.command}s={len(outcomes)}, " + ", ".join(f"{k}={v}" for k, v in sorted(tally.items())))
    if dt > 0 and outcomes:
        print(f"RPS:   {len(outcomes)/dt:.1f} req/s")


if __name__ == "__main__":
    main()
