#!/usr/bin/env python3
"""
RecordKeeper -- Terminal client for the RecordKeeper records API.

Start the API first (python asgi.py), then:

Usage:
  python main.py                        interactive shell
  python main.py --list                 print all records and exit
  python main.py --list --filter rust   print matching records and exit
  python main.py --list --json          records as JSON
  python main.py --no-color

Environment variables:
  RECORDKEEPER_API_BASE_URL     API address (default http://localhost:3001)
  RECORDKEEPER_STATE_PATH       where the session is kept (default ~/.recordkeeper/state.json)
  NO_COLOR                      disable ANSI colors
"""

import argparse
import getpass
import json
import logging
import shlex
import sys
from typing import Callable, Optional

from client.app import App, Route
from client.config import get_client_settings
from client.render import (
    disable_color,
    render_errors,
    render_header,
    render_not_found,
    render_notification,
    render_profile,
    render_record_form,
    render_records,
)
from client.screens import LoginScreen, ProfileScreen, RecordFormScreen

HELP = """
  Commands:
    login                 log in with email and password
    list [filter]         show records, optionally filtered by text
    create                add a record
    edit <id>             change a record
    delete <id>           remove a record (asks first)
    profile               show and edit your profile
    theme                 switch between light and dark
    logout                end the session
    help                  this list
    quit                  leave
"""


class Shell:
    """Interactive loop. Each command maps to a route and a screen action."""

    def __init__(
        self,
        app: App,
        ask: Callable[[str], str] = input,
        ask_secret: Callable[[str], str] = getpass.getpass,
        out: Callable[[str], None] = print,
    ) -> None:
        self.app = app
        self.ask = ask
        self.ask_secret = ask_secret
        self.out = out

    @property
    def palette(self) -> dict[str, str]:
        return self.app.theme.palette

    def show_notification(self, note) -> None:
        self.out(render_notification(note, self.palette))

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        route = self.app.start()
        self.out(render_header(self.app.session.user, self.palette))
        self.out(HELP)
        self._enter(route)
        while True:
            try:
                line = self.ask(f"recordkeeper {self.app.path}> ")
            except (EOFError, KeyboardInterrupt):
                self.out("")
                break
            if not self.handle(line):
                break

    def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the shell should exit."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.out(f"  [!] {e}")
            return True
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command in ("quit", "exit"):
            return False
        if command == "help":
            self.out(HELP)
        elif command == "login":
            self._enter(self.app.navigate("/login"))
        elif command == "list":
            self._enter(self.app.navigate("/read"), query=" ".join(args))
        elif command == "create":
            self._enter(self.app.navigate("/create"))
        elif command == "edit":
            self._enter(self.app.navigate(f"/update/{args[0]}" if args else "/update"))
        elif command == "delete":
            self._delete(args)
        elif command == "profile":
            self._enter(self.app.navigate("/profile"))
        elif command == "theme":
            self.out(f"  Theme is now {self.app.theme.toggle()}.")
        elif command == "logout":
            self._enter(self.app.logout())
        else:
            self.out(f"  [!] Unknown command '{command}'. Type 'help'.")
        return True

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    def _enter(self, route: Route, query: str = "") -> None:
        if route.name == "login":
            self._login()
        elif route.name == "read":
            self._list(query)
        elif route.name == "create":
            self._form(None)
        elif route.name == "update":
            self._form(route.params["id"])
        elif route.name == "profile":
            self._profile()
        else:
            self.out(render_not_found(route.params.get("requested", route.path)))

    def _login(self) -> None:
        screen = LoginScreen(self.app.session, self.app.notifications)
        email = self.ask("  Email: ")
        password = self.ask_secret("  Password: ")
        next_path = screen.submit(email, password)
        if screen.errors:
            self.out(render_errors(screen.errors, self.palette))
        if next_path is None:
            return
        self.out(render_header(self.app.session.user, self.palette))
        self._enter(self.app.navigate(next_path))

    def _list(self, query: str = "") -> None:
        records = self.app.records
        if records.load():
            self.out(render_records(records.visible(query), self.palette, query))
        elif records.message:
            self._after_failure()

    def _form(self, record_id: Optional[int]) -> None:
        screen = RecordFormScreen(
            self.app.api,
            self.app.notifications,
            record_id=record_id,
            on_saved=self.app.records.upsert,
        )
        if not screen.load():
            if screen.message:
                self.out(f"  [!] {screen.message}")
            self._after_failure()
            return
        if screen.is_edit:
            self.out(render_record_form(screen.title, screen.description, {}, self.palette))
            self.out("  Leave a field empty to keep its current value.")
        title = self.ask("  Title: ") or screen.title
        description = self.ask("  Description: ") or screen.description
        saved = screen.submit(title, description)
        if screen.errors:
            self.out(render_record_form(title, description, screen.errors, self.palette))
        if saved is None:
            self._after_failure()

    def _delete(self, args: list[str]) -> None:
        if not args or not args[0].isdigit():
            self.out("  [!] Usage: delete <id>")
            return
        route = self.app.navigate("/read")
        if route.name != "read":
            self._enter(route)
            return
        records = self.app.records
        if not records.records and not records.load():
            self._after_failure()
            return

        def confirm(record: dict) -> bool:
            answer = self.ask(f"  Delete \"{record.get('title')}\"? [y/N] ")
            return answer.strip().lower() in ("y", "yes")

        records.delete(int(args[0]), confirm)
        if records.message == "Record not found":
            self.out(f"  [!] No record with id {args[0]}.")
        self._after_failure()

    def _profile(self) -> None:
        screen = ProfileScreen(self.app.api, self.app.session, self.app.theme, self.app.notifications)
        if not screen.load():
            self._after_failure()
            return
        self.out(render_profile(screen.profile, self.app.theme.mode, self.palette))
        if self.ask("  Edit profile? [y/N] ").strip().lower() not in ("y", "yes"):
            return
        name = self.ask("  Name: ") or screen.profile.get("name", "")
        theme = self.ask(f"  Theme (light/dark) [{self.app.theme.mode}]: ").strip() or self.app.theme.mode
        current_password = new_password = confirm_password = ""
        if self.ask("  Change password? [y/N] ").strip().lower() in ("y", "yes"):
            current_password = self.ask_secret("  Current password: ")
            new_password = self.ask_secret("  New password: ")
            confirm_password = self.ask_secret("  Confirm new password: ")
        screen.submit(name, theme, current_password, new_password, confirm_password)
        if screen.errors:
            self.out(render_errors(screen.errors, self.palette))
        self._after_failure()

    def _after_failure(self) -> None:
        """A 401 during the last action ends the session: go back to login."""
        if self.app.session.user is None and self.app.path != "/login":
            route = self.app.navigate(self.app.path)
            if route.name == "login":
                self._enter(route)


def _print_list(app: App, query: str, as_json: bool) -> int:
    route = app.start()
    if route.name != "read":
        print("  [!] Not logged in. Run the interactive shell and use 'login' first.", file=sys.stderr)
        return 1
    if not app.records.load():
        print(f"  [!] {app.records.message}", file=sys.stderr)
        return 1
    records = app.records.visible(query)
    if as_json:
        print(json.dumps(records, indent=2))
    else:
        print(render_records(records, app.theme.palette, query))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="recordkeeper",
        description="Terminal client for the RecordKeeper records API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --list
  python main.py --list --filter rust
  RECORDKEEPER_API_BASE_URL=http://127.0.0.1:3001 python main.py
        """,
    )
    parser.add_argument("--list", action="store_true", help="Print the records and exit")
    parser.add_argument("--filter", metavar="TEXT", default="", help="Only show records containing TEXT")
    parser.add_argument("--json", action="store_true", help="With --list, print the records as JSON")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI color codes in terminal output")
    parser.add_argument("--verbose", action="store_true", help="Log requests and session changes to stderr")
    args = parser.parse_args()

    if args.no_color:
        disable_color()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = get_client_settings()
    if args.list:
        app = App(settings)
        try:
            sys.exit(_print_list(app, args.filter, args.json))
        finally:
            app.close()

    app = App(settings)
    shell = Shell(app)
    app.notifications.sink = shell.show_notification
    try:
        shell.run()
    finally:
        app.close()


if __name__ == "__main__":
    main()
