"""Command line entry point.

Usage:
    pins resolve "Today is {{date}}"
    pins check-due

With PINS_MONGO_URI set, pins, groups, tags and engine state are read from
MongoDB; otherwise the commands run against empty in-memory stores.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pins.config import EngineSettings, get_settings
from pins.core.directives import build_default_registry
from pins.core.models import Group, Pin, Tag
from pins.core.runtime import EngineServices, Resolver, assemble_context
from pins.core.scheduling import DeferredEvaluationScheduler, check_expirations
from pins.llm import LLMCompletionProvider
from pins.storage import InMemoryCollectionStore, InMemoryKeyValueStore
from pins_mongodb import MongoDBCollectionStore, MongoDBKeyValueStore
from pins_mongodb.base import MongoDBStore

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for the CLI process."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # Reduce noise from third-party libraries unless DEBUG
    if level > logging.DEBUG:
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


class ConsoleNotifier:
    """NotificationSurface printing to the terminal."""

    async def show_message(self, text: str) -> None:
        print(text)

    async def show_alert(self, title: str, message: str) -> None:
        print(f"{title}: {message}" if message else title)

    async def show_toast(self, title: str, message: str = "") -> None:
        print(f"{title} - {message}" if message else title)

    async def prompt_user(self, text: str, title: str = "", default: str = "") -> Optional[str]:
        prompt = f"{title}: {text}" if title else text
        try:
            answer = await asyncio.to_thread(input, f"{prompt} ")
        except EOFError:
            return None
        return answer or default

    async def confirm(self, text: str, title: str = "") -> bool:
        answer = await self.prompt_user(f"{text} [y/N]", title)
        return (answer or "").strip().lower() in ("y", "yes")


async def _build_services(settings: EngineSettings) -> EngineServices:
    if settings.mongo_uri:
        pins = MongoDBCollectionStore(settings.mongo_uri, settings.mongo_db, "pins", Pin)
        groups = MongoDBCollectionStore(settings.mongo_uri, settings.mongo_db, "groups", Group)
        tags = MongoDBCollectionStore(settings.mongo_uri, settings.mongo_db, "tags", Tag)
        storage = MongoDBKeyValueStore(settings.mongo_uri, settings.mongo_db)
        started: List[MongoDBStore] = []
        try:
            for store in (pins, groups, tags, storage):
                await store.startup()
                started.append(store)
        except Exception:
            for store in started:
                await store.shutdown()
            raise
    else:
        logger.warning("PINS_MONGO_URI is not set; using empty in-memory stores")
        pins = InMemoryCollectionStore()
        groups = InMemoryCollectionStore()
        tags = InMemoryCollectionStore()
        storage = InMemoryKeyValueStore()

    return EngineServices(
        pins=pins,
        groups=groups,
        tags=tags,
        storage=storage,
        notifier=ConsoleNotifier(),
        llm=LLMCompletionProvider(settings=settings),
        settings=settings,
    )


async def _shutdown(services: EngineServices) -> None:
    for store in (services.pins, services.groups, services.tags, services.storage):
        shutdown = getattr(store, "shutdown", None)
        if shutdown is not None:
            await shutdown()


async def run_resolve(target: str, settings: EngineSettings) -> str:
    """Resolve one target string and return the result."""
    services = await _build_services(settings)
    try:
        resolver = Resolver(build_default_registry(), settings)
        return await resolver.resolve(target, assemble_context(services))
    finally:
        await _shutdown(services)


async def run_check_due(settings: EngineSettings) -> str:
    """Run due deferred evaluations, then pin expirations."""
    services = await _build_services(settings)
    try:
        resolver = Resolver(build_default_registry(), settings)
        scheduler = DeferredEvaluationScheduler(services.storage)
        due = await scheduler.check_due(resolver, services)
        summary = await check_expirations(services, resolver)
        return f"Ran {len(due)} deferred evaluation(s); {summary.total} pin(s) expired"
    finally:
        await _shutdown(services)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pins", description="Directive expansion for pinned shortcuts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve a target string and print the result")
    resolve.add_argument("target", type=str, help="Target text, e.g. 'Today is {{date}}'")

    subparsers.add_parser("check-due", help="Run due deferred evaluations and pin expirations")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    settings = get_settings()

    try:
        if args.command == "resolve":
            output = asyncio.run(run_resolve(args.target, settings))
        else:
            output = asyncio.run(run_check_due(settings))
    except ConnectionError as e:
        logger.error(f"Storage unavailable: {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
