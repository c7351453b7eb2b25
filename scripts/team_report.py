#!/usr/bin/env python
"""Compute team statistics from fetched replays."""
import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from vsrecorder.analytics import TeamAnalytics, group_match_sets, team_match_stats
from vsrecorder.config import config
from vsrecorder.data.validation import FactsValidator

def main():
    parser = argparse.ArgumentParser(description="Team usage, matchup and move statistics")
    parser.add_argument("input", help="Replays JSONL from fetch_replays.py")
    parser.add_argument("--user", action="append", help="Your Showdown username (repeatable)")
    parser.add_argument("--against", nargs="+", help="4-6 opponent Pokemon for a custom matchup")
    parser.add_argument("--output", help="Output JSON file")
    args = parser.parse_args()

    if args.against and not 4 <= len(args.against) <= 6:
        parser.error("--against takes 4 to 6 Pokemon")

    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    user_names = args.user or config.showdown_usernames
    analytics = TeamAnalytics(config=config.analytics)
    games = analytics.load_from_jsonl(Path(args.input), user_names)

    validator = FactsValidator()
    for record in analytics.records:
        result = validator.validate(record.facts, battle_id=record.replay_id or "unknown")
        if not result.valid:
            logging.warning(f"{result.battle_id}: {', '.join(result.errors)}")

    usage = analytics.usage_stats()
    report = {
        "usage": usage.to_dict(),
        "matchups": analytics.matchup_stats().to_dict(),
        "moves": analytics.move_usage_stats().to_dict(),
        "matches": vars(team_match_stats(group_match_sets(games))),
    }
    if args.against:
        report["custom_matchup"] = analytics.custom_matchup(args.against).to_dict()

    print(f"\n=== Team Report ===")
    print(f"Games: {usage.total_games}  Win rate: {usage.average_win_rate}%")
    print(f"\nTop Pokemon:")
    for stats in usage.pokemon_stats[:6]:
        print(f"  {stats.pokemon}: {stats.usage} games, {stats.overall_win_rate}% wins")
    print(f"\nTop lead pairs:")
    for pair in usage.lead_pair_stats:
        print(f"  {pair.pair}: {pair.usage} games, {pair.win_rate}% wins")

    if args.output:
        Path(args.output).write_text(json.dumps(report, indent=2))
        print(f"\nSaved full report to {args.output}")

if __name__ == "__main__":
    main()
