"""Console tools: python -m estatedesk {filter,search} ..."""

import argparse
import asyncio
import sys

from estatedesk.domains import DOMAINS, get_domain
from estatedesk.runner import bootstrap, build_backend, build_orchestrator, criteria_from_url
from estatedesk.search.builder import FilterExpressionBuilder


def _filter(args: argparse.Namespace) -> int:
    criteria = criteria_from_url(args.domain, args.url_query)
    builder = FilterExpressionBuilder(get_domain(args.domain).schema)
    print(builder.build(criteria))
    if args.describe:
        print(builder.describe(criteria) or "(no filters)")
    return 0


async def _search(args: argparse.Namespace) -> int:
    settings = bootstrap()
    backend = build_backend(settings)
    orchestrator = build_orchestrator(args.domain, settings, backend)
    criteria = criteria_from_url(args.domain, args.url_query)
    orchestrator.query = args.text if args.text is not None else criteria.get("search", "")
    orchestrator.sort = args.sort or criteria.get("sort")
    orchestrator.criteria = orchestrator.domain.schema.normalize(criteria)
    orchestrator.page = args.page
    try:
        result = await orchestrator.refresh()
    finally:
        await orchestrator.close()
        await backend.aclose()
    print(f"filters: {orchestrator.last_expression or '(none)'}")
    if result is None:
        print(f"search failed: {orchestrator.last_error}")
        return 1
    print(f"{orchestrator.total_count} hits, page {orchestrator.page}/{orchestrator.page_count}")
    for name, value in orchestrator.metrics.items():
        print(f"{name}: {value:g}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(prog="estatedesk", description="Faceted search tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    filter_parser = subparsers.add_parser("filter", help="Print the filter expression for a URL query")
    filter_parser.add_argument("domain", choices=sorted(DOMAINS))
    filter_parser.add_argument("url_query", nargs="?", default="", help="e.g. 'status=active,paused&kam=Asha'")
    filter_parser.add_argument("--describe", action="store_true", help="Also print a readable summary")

    search_parser = subparsers.add_parser("search", help="Run one search with the configured backend")
    search_parser.add_argument("domain", choices=sorted(DOMAINS))
    search_parser.add_argument("url_query", nargs="?", default="")
    search_parser.add_argument("--text", default=None, help="Free-text query (overrides ?search=)")
    search_parser.add_argument("--page", type=int, default=1)
    search_parser.add_argument("--sort", default=None)

    args = parser.parse_args()
    if args.command == "search" and args.page < 1:
        parser.error("--page must be >= 1")
    if args.command == "filter":
        return _filter(args)
    try:
        return asyncio.run(_search(args))
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
