"""CLI entry point for the painter matching service."""

import argparse
import json
import logging
import sys
from typing import Any

from src.core.config import Settings
from src.core.db import import_csv, init_db
from src.core.documents import DOCUMENT_KINDS, DocumentStore
from src.core.errors import InputError, StoreUnavailable
from src.core.schemas import ALL_FACETS
from src.tools.registry import ToolContext, call_tool, list_tools


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser = argparse.ArgumentParser(
        description="Painter matching service - rank painters and analyze job descriptions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- rank ---
    rank = subparsers.add_parser("rank", parents=[common], help="Rank painters for a location")
    rank.add_argument("--postcode")
    rank.add_argument("--suburb")
    rank.add_argument("--area")
    rank.add_argument("--region")
    rank.add_argument("--limit", type=int, default=5, help="Painters to return (1-10)")
    rank.add_argument("--quality", type=float, help="Weight for quality")
    rank.add_argument("--reliability", type=float, help="Weight for reliability")
    rank.add_argument("--value", type=float, help="Weight for value")

    # --- analyze ---
    analyze = subparsers.add_parser(
        "analyze", parents=[common], help="Analyze a job description against past jobs",
    )
    analyze.add_argument("description")
    analyze.add_argument(
        "--known",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Detail already known (repeatable), e.g. --known category=interior_painting",
    )
    analyze.add_argument(
        "--facet",
        action="append",
        choices=ALL_FACETS,
        help="Facet to return (repeatable; default: next_question and classification)",
    )
    analyze.add_argument("--sample-size", type=int, help="Historical sample size (5-50)")

    # --- lookups ---
    painter = subparsers.add_parser("painter", parents=[common], help="Show one painter")
    painter.add_argument("id")
    job = subparsers.add_parser("job", parents=[common], help="Show one historical job")
    job.add_argument("id")

    jobs = subparsers.add_parser("jobs", parents=[common], help="Browse historical jobs")
    jobs.add_argument("--category")
    jobs.add_argument("--subtype")
    jobs.add_argument("--size")
    jobs.add_argument("--min-price", type=float)
    jobs.add_argument("--max-price", type=float)
    jobs.add_argument("--q", help="Search text in job descriptions")
    jobs.add_argument("--limit", type=int, default=10)
    jobs.add_argument("--offset", type=int, default=0)

    # --- estimates ---
    estimate = subparsers.add_parser(
        "estimate", parents=[common], help="Rough price estimate from a description",
    )
    estimate.add_argument("description")
    estimate.add_argument("--postcode")

    calc = subparsers.add_parser(
        "paint-calc", parents=[common], help="Litres of paint for a room",
    )
    calc.add_argument("length", type=float)
    calc.add_argument("width", type=float)
    calc.add_argument("height", type=float)

    # --- job request ---
    request = subparsers.add_parser(
        "request", parents=[common], help="Record a customer's quote request",
    )
    request.add_argument("--name", required=True, dest="customer_name")
    request.add_argument("--email", required=True, dest="customer_email")
    request.add_argument("--mobile", required=True, dest="customer_mobile")
    request.add_argument("--dealname", required=True)
    request.add_argument("--description", required=True, dest="job_description")
    request.add_argument("--postcode")
    request.add_argument("--budget")
    request.add_argument("--timing")
    request.add_argument("--notes")

    # --- documents / photos ---
    doc = subparsers.add_parser("doc", parents=[common], help="Print a reference document")
    doc.add_argument("category")
    doc.add_argument("--kind", choices=DOCUMENT_KINDS, default="knowledge_base")

    photo = subparsers.add_parser(
        "describe-photo", parents=[common], help="Describe a job photo with a vision model",
    )
    photo.add_argument("image", help="Image URL or local path")
    photo.add_argument("--question")
    photo.add_argument(
        "--analyze",
        action="store_true",
        help="Feed the description into job analysis",
    )

    # --- generic tool access ---
    subparsers.add_parser("tools", parents=[common], help="List available tools")
    call = subparsers.add_parser("call", parents=[common], help="Call a tool by name")
    call.add_argument("name")
    call.add_argument("--args", default="{}", help="Tool arguments as a JSON object")

    # --- data loading ---
    load = subparsers.add_parser("import", parents=[common], help="Load painters or jobs CSV")
    load.add_argument("table", choices=["painters", "jobs"])
    load.add_argument("path")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_known(pairs: list[str]) -> dict[str, str]:
    """Turn ["key=value", ...] into a dict."""
    known: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            msg = f"--known expects KEY=VALUE, got '{pair}'"
            raise InputError(msg)
        known[key.strip()] = value.strip()
    return known


def tool_call_for(args: argparse.Namespace) -> tuple[str, dict[str, Any]]:
    """Map a parsed subcommand onto a (tool name, arguments) pair."""
    if args.command == "rank":
        preferences = {
            k: getattr(args, k)
            for k in ("quality", "reliability", "value")
            if getattr(args, k) is not None
        }
        return "rank_painters", {
            "postcode": args.postcode,
            "suburb": args.suburb,
            "area": args.area,
            "region": args.region,
            "limit": args.limit,
            "preferences": preferences,
        }
    if args.command == "analyze":
        return "analyze_job_description", {
            "description": args.description,
            "known_details": parse_known(args.known),
            "facets": args.facet,
            "sample_size": args.sample_size,
        }
    if args.command == "painter":
        return "get_painter", {"id": args.id}
    if args.command == "job":
        return "get_job", {"id": args.id}
    if args.command == "jobs":
        return "browse_jobs", {
            "category": args.category,
            "subtype": args.subtype,
            "size": args.size,
            "min_price": args.min_price,
            "max_price": args.max_price,
            "q": args.q,
            "limit": args.limit,
            "offset": args.offset,
        }
    if args.command == "estimate":
        return "estimate_price", {"description": args.description, "postcode": args.postcode}
    if args.command == "paint-calc":
        return "calculate_room_paint", {
            "length": args.length, "width": args.width, "height": args.height,
        }
    if args.command == "request":
        fields = (
            "customer_name", "customer_email", "customer_mobile", "dealname",
            "job_description", "postcode", "budget", "timing", "notes",
        )
        return "create_job_request", {f: getattr(args, f) for f in fields}
    if args.command == "doc":
        return "read_document", {"category": args.category, "kind": args.kind}
    if args.command == "describe-photo":
        return "describe_job_photo", {"image": args.image, "question": args.question}
    if args.command == "call":
        try:
            arguments = json.loads(args.args)
        except json.JSONDecodeError as e:
            msg = f"--args is not valid JSON: {e}"
            raise InputError(msg) from e
        if not isinstance(arguments, dict):
            msg = "--args must be a JSON object"
            raise InputError(msg)
        return args.name, arguments
    msg = f"Unknown command '{args.command}'"
    raise InputError(msg)


def run(args: argparse.Namespace, settings: Settings) -> Any:
    """Execute one subcommand and return a JSON-serialisable result."""
    if args.command == "tools":
        return list_tools()

    conn = init_db(settings.database.path)
    try:
        if args.command == "import":
            count = import_csv(conn, args.table, args.path)
            return {"table": args.table, "imported": count}

        ctx = ToolContext(
            conn=conn,
            settings=settings,
            documents=DocumentStore(settings.documents.root),
        )
        name, arguments = tool_call_for(args)
        result = call_tool(name, arguments, ctx)

        if args.command == "describe-photo" and args.analyze:
            result["analysis"] = call_tool(
                "analyze_job_description",
                {"description": result["description"], "facets": list(ALL_FACETS)},
                ctx,
            )
        return result
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        result = run(args, settings)
    except StoreUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (InputError, FileNotFoundError, ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
