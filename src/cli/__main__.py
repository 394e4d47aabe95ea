"""
Terminal SOS: compose an alert and open WhatsApp in the browser.
Run: python -m cli (from repo root, with .env or env vars set).
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Repo root: from src/cli/__main__.py go up to repo root
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent
# Load .env from repo root or current dir
for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
    if path.exists():
        load_dotenv(path)
        break

from api.flow_adapter import DispatchFlow, DispatchState
from sosalert.application import HandoffOpened, LocationProvider, Notify, RequestContact
from sosalert.config import STORE_NEO4J, AlertSettings
from sosalert.domain import InvalidInput
from sosalert.infrastructure import BrowserOpener, ChannelHandoff
from sosalert.infrastructure.factory import (
    build_contact_store,
    build_location_source,
    create_neo4j_driver,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.WARNING,
)
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m cli",
        description="Send an SOS to your primary emergency contact via WhatsApp.",
    )
    parser.add_argument("--note", default="", help="Additional message (injury, danger, etc.)")
    parser.add_argument(
        "--no-location", action="store_true", help="Do not include your location"
    )
    parser.add_argument(
        "--set-contact", metavar="PHONE", help="Change the primary contact and exit"
    )
    parser.add_argument("--show-contact", action="store_true", help="Print the primary contact")
    return parser.parse_args(argv)


def _render(actions: list) -> None:
    for action in actions:
        if isinstance(action, Notify):
            stream = sys.stderr if action.level == "error" else sys.stdout
            print(action.text, file=stream)
        elif isinstance(action, HandoffOpened):
            print(f"Link: {action.uri}")


async def _run(flow: DispatchFlow, args: argparse.Namespace) -> int:
    flow.set_note(args.note)
    flow.set_share_location(not args.no_location)
    actions = await flow.send()
    while any(isinstance(a, RequestContact) for a in actions):
        request = next(a for a in actions if isinstance(a, RequestContact))
        try:
            phone = input(request.prompt + "\n> ")
        except EOFError:
            phone = ""
        actions = await flow.supply_contact(phone)
    _render(actions)
    if flow.state is DispatchState.SENT:
        print("Press SEND in WhatsApp to notify your contact.")
        return 0
    return 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = AlertSettings.from_env()
    driver = create_neo4j_driver(settings) if settings.contact_store == STORE_NEO4J else None
    try:
        store = build_contact_store(settings, driver=driver)
        flow = DispatchFlow(
            store,
            LocationProvider(build_location_source(settings)),
            ChannelHandoff(BrowserOpener(), base_url=settings.channel_url),
            location_timeout=settings.location_timeout,
            settle_delay=settings.settle_delay,
            map_url=settings.map_url,
        )
        if args.set_contact is not None:
            try:
                _render(flow.edit_contact(args.set_contact))
            except InvalidInput as e:
                print(str(e), file=sys.stderr)
                return 2
            return 0
        if args.show_contact:
            contact = flow.stored_contact()
            print(contact.phone if contact else "Not set")
            return 0
        return asyncio.run(_run(flow, args))
    finally:
        if driver is not None:
            driver.close()


if __name__ == "__main__":
    sys.exit(main())
