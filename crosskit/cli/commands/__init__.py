"""
crosskit CLI commands.

Each module exposes a run(args) -> int function dispatched by the CLI parser.
"""
