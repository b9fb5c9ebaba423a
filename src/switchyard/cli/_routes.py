"""``switchyard routes`` and ``switchyard match`` — inspect a route table."""

import argparse
import sys

from switchyard.cli._resolve import resolve_router
from switchyard.router import Router


def _load(import_string: str) -> Router:
    try:
        return resolve_router(import_string)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of KIND, TARGET, METHODS, and DISPATCH for every route."""
    router = _load(args.router)
    routes = router.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        methods = route.methods
        methods_str = ", ".join(methods) if methods else "ANY"
        rows.append((route.kind.name, route.target, methods_str, route.dispatchable.describe()))

    widths = [
        max(len("KIND"), *(len(r[0]) for r in rows)),
        max(len("TARGET"), *(len(r[1]) for r in rows)),
        max(len("METHODS"), *(len(r[2]) for r in rows)),
    ]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format("KIND", "TARGET", "METHODS", "DISPATCH"))
    sep_len = sum(widths) + 6 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))


def run_match(args: argparse.Namespace) -> None:
    """Print the route selected for ``args.path`` and its path variables."""
    router = _load(args.router)
    found = router.match(args.path)
    if found is None:
        print(f"No route matches {args.path!r}")
        raise SystemExit(1)

    route = found.route
    print(f"{route.kind.name}  {route.target}  -> {route.dispatchable.describe()}")
    for name, value in found.path_variables.items():
        print(f"  {name} = {value}")
