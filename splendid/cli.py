"""
Splendid CLI - Command-line interface for the engine.

Usage:
    splendid simulate [--players N] [--seed S]   Play a bot-vs-bot match
    splendid serve [--host H] [--port P]         Run the HTTP API
    splendid catalog [--tier T]                  Show and check the card catalog

Log level comes from SPLENDID_LOG_LEVEL (default WARNING), or --verbose.
"""

import argparse
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Splendid - Gem-trading card game engine",
        prog="splendid",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a bot-vs-bot match")
    simulate_parser.add_argument("--players", type=int, default=2, help="Number of bot seats (2-4)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    simulate_parser.add_argument("--target-points", type=int, default=15, help="Points to end the game")
    simulate_parser.add_argument("--max-actions", type=int, default=None, help="Safety cap on actions")
    simulate_parser.add_argument("--show-actions", action="store_true", help="Print every action")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    # Catalog command
    catalog_parser = subparsers.add_parser("catalog", help="Show and check the card catalog")
    catalog_parser.add_argument("--tier", type=int, choices=[1, 2, 3], help="List one tier")

    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    elif args.command == "catalog":
        return cmd_catalog(args)
    else:
        parser.print_help()
        return 1


def configure_logging(verbose: bool = False):
    """Configure root logging once for the process."""
    level_name = "DEBUG" if verbose else os.getenv("SPLENDID_LOG_LEVEL", "WARNING")
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_simulate(args):
    """Play a bot-vs-bot match and print the result."""
    from .engine_core import MatchConfig, initialize_match
    from .bots import SplendorBot
    from .session import GameLoop, DEFAULT_MAX_ACTIONS

    if not 2 <= args.players <= 4:
        print(f"Error: --players must be 2-4, got {args.players}")
        return 1

    seats = [(f"bot_{i + 1}", f"Bot {i + 1}", True) for i in range(args.players)]
    state = initialize_match(
        seats,
        random_seed=args.seed,
        config=MatchConfig(target_points=args.target_points),
    )
    bots = {seat_id: SplendorBot() for seat_id, _, _ in seats}

    print(f"Game {state.game_id} (seed {state.random_seed})")
    loop = GameLoop(max_actions=args.max_actions or DEFAULT_MAX_ACTIONS)
    result = loop.play_to_end(state, bots)

    if args.show_actions:
        for i, action in enumerate(result.actions):
            print(f"{i + 1:4d}. {action.payload.player_id}: {action.describe()}")

    final = result.state
    print(f"\nStopped: {result.loop_state.value} after {len(result.actions)} actions")
    print(f"Turns: {final.turn_number}")
    for player in final.ordered_players():
        print(
            f"  {player.name}: {player.points} points, "
            f"{len(player.cards)} cards, {len(player.nobles)} nobles"
        )

    if final.winner:
        print(f"\nWinner: {final.get_player(final.winner).name}")
    elif final.co_leaders:
        print(f"\nTied: {', '.join(final.co_leaders)}")

    for error in result.errors:
        print(f"Error: {error}")
    return 0 if result.success else 1


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


def cmd_catalog(args):
    """Print catalog counts, optionally a tier listing, and any problems."""
    from .catalog import NOBLES, TIERS, cards_for_tier, validate_catalog

    for tier in TIERS:
        print(f"Tier {tier}: {len(cards_for_tier(tier))} cards")
    print(f"Nobles: {len(NOBLES)}")

    if args.tier:
        print()
        for card in cards_for_tier(args.tier):
            cost = ", ".join(f"{count} {gem.value}" for gem, count in card.cost.items())
            print(f"  {card.id}: {card.points}pt {card.bonus.value} <- {cost}")

    problems = validate_catalog()
    if problems:
        print("\nProblems:")
        for problem in problems:
            print(f"  - {problem}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
