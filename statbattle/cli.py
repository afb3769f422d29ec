"""
Stat Battle CLI - Command-line interface for the room server.

Usage:
    statbattle serve [--host H] [--port P]    Run the WebSocket server
    statbattle catalog                        Print the card catalog
    statbattle simulate [--seed N]            Play one match with random picks
"""

import argparse
import logging
import random
import sys

from . import config


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Stat Battle - two-player card comparison rooms",
        prog="statbattle",
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the WebSocket server")
    serve_parser.add_argument("--host", default=config.HOST)
    serve_parser.add_argument("--port", type=int, default=config.PORT)

    subparsers.add_parser("catalog", help="Print the card catalog")

    simulate_parser = subparsers.add_parser("simulate", help="Play one match with random picks")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for dealing and picks")
    simulate_parser.add_argument("--max-rounds", type=int, default=5000, help="Stop after this many rounds")

    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "catalog":
        cmd_catalog(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run("statbattle.api.app:app", host=args.host, port=args.port)


def cmd_catalog(args):
    """Print every card and its stats."""
    from .engine_core.state import Stat
    from .games.animals import ANIMAL_CARDS

    header = ["card"] + [stat.value for stat in Stat]
    print("  ".join(f"{h:>14}" for h in header))
    for card in ANIMAL_CARDS:
        row = [card.name] + [str(card.value_of(stat)) for stat in Stat]
        print("  ".join(f"{c:>14}" for c in row))


def cmd_simulate(args):
    """Play a full match locally, picking stats at random."""
    from .engine_core import Action, Reducer, RoomPhase, RoomState, Stat
    from .games.animals import ANIMAL_CARDS

    rng = random.Random(args.seed)
    reducer = Reducer(catalog=ANIMAL_CARDS, rng=random.Random(args.seed))
    connections = {"P1": "sim-p1", "P2": "sim-p2"}

    state = RoomState(room_code="simulation")
    for seat, connection_id in connections.items():
        state = reducer.apply(state, Action.join(connection_id, f"Bot {seat}")).new_state
    state = reducer.apply(state, Action.start(connections["P1"])).new_state

    stats = list(Stat)
    while state.phase == RoomPhase.CHOOSE and state.round_count < args.max_rounds:
        chooser = connections[state.turn.value]
        result = reducer.apply(state, Action.choose_stat(chooser, rng.choice(stats).value))
        state = result.new_state

    if state.phase != RoomPhase.GAME_OVER:
        print(f"No winner after {state.round_count} rounds "
              f"({len(state.deck_p1)} vs {len(state.deck_p2)} cards)")
        sys.exit(1)

    ties = sum(1 for event in state.log if event.stat is not None and event.winner is None)
    print(f"Winner: {state.winner.value} ({state.players[state.winner]})")
    print(f"Rounds: {state.round_count} ({ties} ties)")


if __name__ == "__main__":
    main()
