"""Terminal client that drives the same search session as the HTTP API."""
import argparse
import asyncio
import logging
from typing import Iterable

from pricecompass.config import settings
from pricecompass.schemas.platform import Currency
from pricecompass.services.model_invoker import ModelInvoker, build_client
from pricecompass.services.price_compass import PriceCompassService
from pricecompass.viewmodels.search_vm import SearchSession, SearchViewModel

GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"


def pretty_print_result(vm: SearchViewModel) -> None:
    if vm.error:
        print(f"{RED}{vm.error}{RESET}")
        if vm.credential_hint:
            print(vm.credential_hint)

    analysis = vm.analysis
    if analysis:
        print(f"{analysis.name} [{analysis.category}]  est. {analysis.estimated_value}")
        print(f"  {analysis.description}")
        if analysis.search_tips:
            print(f"  Try also: {', '.join(analysis.search_tips)}")
        for version in analysis.versions:
            print(f"  {version.region:<5} {version.languages}  {DIM}{version.source_url}{RESET}")

    insight = vm.price_insight
    if insight:
        print(f"\nPrices ({vm.currency}, AI estimates from web search):")
        for row in vm.rows:
            if row.price is None:
                continue
            color = GREEN if row.is_available else DIM
            print(f"  {color}{row.platform.name:<16} {row.price.price:<16} {row.price.status}{RESET}")
        print(f"  {insight.overview}")
        sources = list(insight.sources) + (list(analysis.sources) if analysis else [])
        if sources:
            print("\nSources:")
            for source in sources:
                print(f"  - {source.title}: {source.uri}")

    print("\nSearch directly:")
    for row in vm.rows:
        print(f"  {row.platform.name:<16} {row.url}")


async def _run(args: argparse.Namespace) -> int:
    client = build_client(settings)
    invoker = ModelInvoker(client, web_search_max_uses=settings.web_search_max_uses)
    session = SearchSession(PriceCompassService(invoker, settings), args.currency, debounce=0)
    try:
        if args.command == "suggest":
            for suggestion in await session.suggest(args.query) or []:
                print(suggestion)
            return 0

        vm = await session.submit(args.query)
        if vm is None:
            print("Nothing to search for.")
            return 1
        pretty_print_result(vm)
        return 1 if vm.error else 0
    finally:
        await client.close()


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compare marketplace prices with a web-searching model")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Analyze an item and look up prices")
    search_parser.add_argument("query")
    search_parser.add_argument(
        "--currency",
        choices=[c.value for c in Currency],
        default=settings.default_currency.value,
    )

    suggest_parser = subparsers.add_parser("suggest", help="Autocomplete a partial item name")
    suggest_parser.add_argument("query")
    suggest_parser.set_defaults(currency=settings.default_currency.value)

    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
