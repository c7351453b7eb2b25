#!/usr/bin/env python
"""Fetch Showdown replays for a team into a JSONL file."""
import argparse
import json
import logging
from pathlib import Path

import requests
from dotenv import load_dotenv
from tqdm import tqdm

from vsrecorder.config import FetchConfig, config
from vsrecorder.data.correlator import parse_match_info
from vsrecorder.data.fetcher import ReplayFetcher

def main():
    parser = argparse.ArgumentParser(description="Fetch Pokemon Showdown replays")
    parser.add_argument("urls", help="Text file with one replay URL per line")
    parser.add_argument("--output", default="data/replays.jsonl", help="Output JSONL file")
    parser.add_argument("--user", action="append", help="Your Showdown username (repeatable)")
    parser.add_argument("--rate", type=float, default=1.0, help="Requests per second")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    user_names = args.user or config.showdown_usernames
    fetcher = ReplayFetcher(FetchConfig(requests_per_second=args.rate))

    urls = [u.strip() for u in Path(args.urls).read_text().splitlines() if u.strip()]
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    success = 0
    failed = 0

    with open(output_path, "w") as f_out:
        for url in tqdm(urls, desc="Fetching"):
            try:
                data = fetcher.fetch_replay_data(url, user_names)
            except (ValueError, requests.RequestException) as e:
                logging.warning(f"Failed to fetch {url}: {e}")
                failed += 1
                continue

            if data.result is None:
                logging.warning(f"No winner in {url}, skipping")
                failed += 1
                continue

            info = parse_match_info(data.battle_log)
            record = data.model_dump(mode="json")
            record["id"] = url.rstrip("/").rsplit("/", 1)[-1]
            record["match_id"] = info.match_id
            record["game_number"] = info.game_number
            f_out.write(json.dumps(record) + "\n")
            success += 1

    print(f"Fetched {success} replays, {failed} failed")

if __name__ == "__main__":
    main()
