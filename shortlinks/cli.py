#!/usr/bin/env python3
"""
Command-line interface for the short link service.

Usage:
    shortlinks [--data-file PATH] [--user ID] [--no-reaper] [-v]
    shortlinks serve [--host HOST] [--port PORT]

Without a subcommand an interactive shell is started; type 'help' inside it
for the list of commands.
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional

from .browser import open_in_browser
from .common.logging_config import setup_logging
from .config import Config, load_config
from .database.json_store import JsonFileStore
from .database.models import ShortLink
from .errors import ShortLinkError
from .reaper import Reaper
from .service import LinkService, OpenStatus
from .shortcode import ShortCodeGenerator
from .terminal_render import TerminalRenderer
from .users import UserService

COMMANDS = [
    ("help", "Show this help"),
    ("whoami", "Show your owner id"),
    ("setuid <id-prefix>", "Switch to another known owner"),
    ("create <url> [max_clicks] [ttl_seconds]", "Create a short link (0 = unbounded)"),
    ("open <code>", "Follow a short link in the browser"),
    ("info <code>", "Show link details"),
    ("edit <code> limit|ttl <value>", "Change click limit or TTL (owner only)"),
    ("delete <code>", "Delete a link (owner only)"),
    ("list", "List all links"),
    ("clear", "Clear the terminal"),
    ("exit", "Quit"),
]


class ShortLinksShell:
    """Interactive command shell over the link service.

    The session's identity is held here and passed explicitly to every
    service call.
    """

    def __init__(
        self,
        service: LinkService,
        users: UserService,
        config: Config,
        renderer: Optional[TerminalRenderer] = None,
        owner_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.service = service
        self.users = users
        self.config = config
        self.renderer = renderer or TerminalRenderer()
        self.logger = logger or logging.getLogger(__name__)
        self.current_user = users.ensure_user(owner_id)

        self._handlers = {
            "help": self.cmd_help,
            "whoami": self.cmd_whoami,
            "setuid": self.cmd_setuid,
            "create": self.cmd_create,
            "open": self.cmd_open,
            "info": self.cmd_info,
            "edit": self.cmd_edit,
            "delete": self.cmd_delete,
            "list": self.cmd_list,
            "clear": self.cmd_clear,
        }

    def run(self, read_line: Callable[[str], str] = input) -> None:
        """Read and execute commands until 'exit' or end of input."""
        self.renderer.info("Welcome to the short link shell!")
        self.renderer.info(f"Your id: {self.current_user}")
        self.renderer.info("Type 'help' to see the available commands\n")

        while True:
            try:
                line = read_line("> ")
            except (EOFError, KeyboardInterrupt):
                break
            if not self.handle_line(line):
                break

        self.renderer.info("Shutting down...")

    def handle_line(self, line: str) -> bool:
        """Execute one command line.

        Returns:
            False when the shell should exit
        """
        parts = line.strip().split()
        if not parts:
            return True

        cmd, args = parts[0].lower(), parts[1:]
        if cmd == "exit":
            return False

        handler = self._handlers.get(cmd)
        if handler is None:
            self.renderer.warning("Unknown command. Type 'help' to see the available commands")
            return True

        try:
            handler(args)
        except ShortLinkError as e:
            self.renderer.error(f"Error: {e}")
        except Exception as e:
            self.logger.exception(f"Command '{cmd}' failed")
            self.renderer.error(f"Unexpected error: {e}")
        return True

    def cmd_help(self, args: List[str]) -> None:
        self.renderer.render_help(COMMANDS)

    def cmd_whoami(self, args: List[str]) -> None:
        self.renderer.info(f"Your id: {self.current_user}")

    def cmd_setuid(self, args: List[str]) -> None:
        if not args:
            self.renderer.info("Usage: setuid <id-prefix>")
            return

        match = self.users.resolve_prefix(args[0])
        if match is None:
            self.renderer.warning("No owner with that id was found")
            return

        self.current_user = self.users.ensure_user(match)
        self.renderer.success(f"Switched to owner: {match}")

    def cmd_create(self, args: List[str]) -> None:
        if not args:
            self.renderer.info("Usage: create <url> [max_clicks] [ttl_seconds]")
            return

        url = args[0]
        max_clicks = self.config.default_max_clicks
        ttl_seconds = self.config.default_ttl_seconds

        if len(args) >= 2:
            try:
                max_clicks = int(args[1])
            except ValueError:
                self.renderer.warning("max_clicks must be a number")
                return

        if len(args) >= 3:
            try:
                ttl_seconds = int(args[2])
            except ValueError:
                self.renderer.warning("ttl_seconds must be a number")
                return

        link = self.service.create(self.current_user, url, max_clicks, ttl_seconds)
        self.renderer.success(
            f"Created short link: {link.code} -> {link.original_url} "
            f"(max clicks: {max_clicks or '∞'}, TTL: {f'{ttl_seconds}s' if ttl_seconds else '∞'})"
        )

    def cmd_open(self, args: List[str]) -> None:
        if not args:
            self.renderer.info("Usage: open <code>")
            return

        code = args[0]
        result = self.service.open(code)

        if result.status == OpenStatus.NOT_FOUND:
            self.renderer.warning(f"Link {code} not found")
            return
        if result.status == OpenStatus.EXPIRED:
            self.renderer.warning(f"Link {code} has expired and was removed")
            return
        if result.status == OpenStatus.DEPLETED:
            self.renderer.warning(f"Link {code} has no clicks left and was removed")
            return

        self.renderer.success(f"Opening {result.url}")
        if result.status == OpenStatus.LAST_CLICK:
            self.renderer.warning(f"Link {code} reached its click limit and was removed")
        if result.browser_opened is False:
            self.renderer.error("Could not open a browser on this device")

    def cmd_info(self, args: List[str]) -> None:
        if not args:
            self.renderer.info("Usage: info <code>")
            return

        link = self.service.info(args[0])
        if link is None:
            self.renderer.warning("Link not found")
            return
        self.renderer.render_link(link, self.service.remaining_ttl(link), self.current_user)

    def cmd_edit(self, args: List[str]) -> None:
        if len(args) < 3:
            self.renderer.info("Usage: edit <code> limit|ttl <value>")
            return

        code, field, raw = args[0], args[1].lower(), args[2]
        if field not in ("limit", "ttl"):
            self.renderer.info("Usage: edit <code> limit|ttl <value>")
            return

        try:
            value = int(raw)
        except ValueError:
            self.renderer.warning(f"'{field}' value must be a number")
            return

        if field == "limit":
            ok = self.service.edit_limit(code, self.current_user, value)
            message = "Click limit changed" if ok else "Could not change the click limit"
        else:
            ok = self.service.edit_ttl(code, self.current_user, value)
            message = "TTL changed" if ok else "Could not change the TTL"

        if ok:
            self.renderer.success(message)
        else:
            self.renderer.warning(message)

    def cmd_delete(self, args: List[str]) -> None:
        if not args:
            self.renderer.info("Usage: delete <code>")
            return

        code = args[0]
        if self.service.delete(code, self.current_user):
            self.renderer.success(f"Link {code} deleted")
        else:
            self.renderer.warning(f"Could not delete {code} (not found or not yours)")

    def cmd_list(self, args: List[str]) -> None:
        self.renderer.render_links(
            self.service.list_links(),
            self.service.remaining_ttl,
            self.current_user,
        )

    def cmd_clear(self, args: List[str]) -> None:
        self.renderer.console.clear()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlinks",
        description="Short links with TTL and click-limit expiry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive shell with a fresh identity
  %(prog)s

  # Interactive shell as an existing owner, custom data file
  %(prog)s --user 0f8c2b9e --data-file ~/links.json

  # HTTP API
  %(prog)s serve --port 9200
        """
    )

    parser.add_argument(
        "--data-file",
        help="JSON data file (default: from DATA_FILE env or ./data.json)"
    )

    parser.add_argument(
        "--user",
        help="Owner id to act as (a new one is generated when omitted)"
    )

    parser.add_argument(
        "--no-reaper",
        action="store_true",
        help="Do not sweep expired links in the background"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, help="Port to listen on")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.data_file:
        overrides["data_file"] = args.data_file
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    config = load_config(**overrides)

    if args.verbose:
        level = "DEBUG"
    elif args.command == "serve":
        level = config.log_level
    else:
        # Keep the interactive prompt readable
        level = "WARNING"
    logger = setup_logging(level=level, log_file=config.log_file, json_format=config.log_json)

    store = JsonFileStore(config.data_file, logger=logger)
    service = LinkService(
        store=store,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        logger=logger,
        browser=open_in_browser,
        max_collision_retries=config.max_collision_retries,
    )

    if args.command == "serve":
        return serve(store, service, config, logger, reaper_enabled=not args.no_reaper)

    renderer = TerminalRenderer()

    def notify_evicted(link: ShortLink) -> None:
        renderer.warning(f"\nLink {link.code} expired and was removed (owner: {link.owner_id})")

    reaper = None
    if not args.no_reaper:
        reaper = Reaper(
            store,
            interval=config.reaper_interval_seconds,
            logger=logger,
            lock=service.lock,
            on_evict=notify_evicted,
        )
        reaper.start()

    try:
        shell = ShortLinksShell(
            service=service,
            users=UserService(store, logger=logger),
            config=config,
            renderer=renderer,
            owner_id=args.user,
            logger=logger,
        )
        shell.run()
    finally:
        if reaper is not None:
            reaper.stop(timeout=config.reaper_interval_seconds * 2)

    return 0


def serve(
    store: JsonFileStore,
    service: LinkService,
    config: Config,
    logger: logging.Logger,
    reaper_enabled: bool = True,
) -> int:
    """Run the HTTP API under uvicorn until interrupted."""
    import uvicorn

    from .web_app import create_app

    reaper = None
    if reaper_enabled:
        reaper = Reaper(
            store,
            interval=config.reaper_interval_seconds,
            logger=logger,
            lock=service.lock,
        )

    app = create_app(store=store, service=service, config=config, reaper=reaper)

    logger.info(f"Starting server on {config.host}:{config.port}")
    try:
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            access_log=False,
        )
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
