"""
Echoes CLI - Command-line interface for the engine.

Usage:
    echoes simulate [--agent1 random] [--agent2 forward]   Play one headless game
    echoes tournament [--games 100] [--workers 4]          Compare two agents
    echoes serve [--host 127.0.0.1] [--port 8000]          Run the HTTP API
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    from .agents import AGENT_TYPES

    parser = argparse.ArgumentParser(
        description="Echoes - Turn-based tactical game engine",
        prog="echoes",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    agents = sorted(AGENT_TYPES)

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play one headless game")
    simulate_parser.add_argument("--agent1", default="random", choices=agents, help="Agent for player1")
    simulate_parser.add_argument("--agent2", default="random", choices=agents, help="Agent for player2")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--max-turns", type=int, default=None, help="Turn ceiling")
    simulate_parser.add_argument("--extended", action="store_true", help="Enable dash, fire, mine and shield")
    simulate_parser.add_argument("--quiet", "-q", action="store_true", help="Only print the result")

    # Tournament command
    tournament_parser = subparsers.add_parser("tournament", help="Compare two agents over many games")
    tournament_parser.add_argument("--first", default="random", choices=agents)
    tournament_parser.add_argument("--second", default="forward", choices=agents)
    tournament_parser.add_argument("--games", type=int, default=100)
    tournament_parser.add_argument("--workers", type=int, default=1)
    tournament_parser.add_argument("--seed", type=int, default=0)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "tournament":
        cmd_tournament(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _config(args):
    from dataclasses import replace
    from .engine_core.config import GameConfig

    config = GameConfig.from_env()
    if getattr(args, "max_turns", None):
        config = replace(config, max_turns=args.max_turns)
    if getattr(args, "extended", False):
        config = replace(config, extended_instructions=True)
    return config


def cmd_simulate(args):
    """Play one game and print its trace."""
    from .agents import build_agent
    from .engine_core.events import format_history
    from .session import HeadlessGameRunner

    runner = HeadlessGameRunner(config=_config(args), seed=args.seed)
    result = runner.run_game(
        build_agent(args.agent1, "player1", seed=args.seed),
        build_agent(args.agent2, "player2", seed=None if args.seed is None else args.seed + 1),
    )

    if not args.quiet:
        for line in result.log:
            print(line)
        print()
        for line in format_history(result.final_state):
            print(line)
        print()

    scores = result.final_state.scores
    print(f"Winner: {result.winner or 'none'} ({result.reason})")
    print(f"Turns: {result.turns}")
    print(f"Scores: player1 {scores.get('player1', 0)}, player2 {scores.get('player2', 0)}")


def cmd_tournament(args):
    """Run a tournament and print win rates."""
    from .session import run_tournament

    result = run_tournament(
        args.first,
        args.second,
        games=args.games,
        workers=args.workers,
        seed=args.seed,
        config=_config(args),
    )

    print(f"Games: {result.games}")
    for name, rate in result.win_rates.items():
        print(f"  {name}: {result.wins[name]} wins ({rate:.1%})")
    print(f"Draws: {result.draws}")
    print(f"Stalls: {result.stalls}")
    print(f"Average turns: {result.avg_turns:.1f}")


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("echoes.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
