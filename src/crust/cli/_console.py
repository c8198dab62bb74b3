"""``crust console``: interactive admin console over the shop records.

Read-only. Commands are matched case-insensitively by prefix::

    >> recent orders
    >> order detail --k3j2h1g0f9e8d7c6b5a4
    >> user --jane@example.com
"""

import argparse
import pprint
import shutil
import sys
from datetime import timedelta
from typing import Any, TextIO

import anyio
import anyio.to_thread

from crust._internal import clock
from crust.config import AppConfig
from crust.shop import Shop
from crust.shop.users import public
from crust.site import build_shop

PROMPT = ">> "
WELCOME = "Welcome to the admin console of the pizza delivery service"
UNKNOWN_COMMAND = "Undefined command. Type 'man' to list the commands."
RECENT = timedelta(hours=24)

COMMANDS: dict[str, str] = {
    "man": "Show help",
    "exit": "Stop the console",
    "menu": "View all current menu items",
    "recent orders": "View the orders placed in the last 24 hours",
    "order detail --{orderId}": "Look up the details of one order by id",
    "users": "View the users who signed up in the last 24 hours",
    "user --{email}": "Look up the details of one user by e-mail address",
}


def truncate(value: Any, width: int) -> str:
    """*value* as text, cut to *width* with a trailing ``...``."""
    text = "" if value is None else str(value)
    if len(text) > width:
        return text[: max(width - 3, 0)] + "..."
    return text


def _argument(command: str) -> str:
    """The text after ``--`` in *command*, or ``""``."""
    _, _, arg = command.partition("--")
    return arg.strip()


class Console:
    """Command interpreter over a ``Shop``.

    Output goes to *out*; *width* is the line width in columns.
    """

    __slots__ = ("_out", "_shop", "_width")

    def __init__(self, shop: Shop, *, out: TextIO | None = None, width: int | None = None) -> None:
        self._shop = shop
        self._out = out or sys.stdout
        self._width = width or shutil.get_terminal_size().columns

    # -- Output --

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def line(self) -> None:
        self._print("-" * self._width)

    def header(self, title: str, *, center: bool = False) -> None:
        self.line()
        self._print(title.center(self._width).rstrip() if center else title)
        self.line()

    def row(self, values: list[Any]) -> None:
        cell = max(self._width // max(len(values), 1) - 2, 4)
        self._print("".join(truncate(value, cell).ljust(cell) + "| " for value in values))

    def table(self, records: list[dict[str, Any]]) -> None:
        """Print *records* with the keys of the first as column heads."""
        if not records:
            self._print("(none)")
            return
        columns = list(records[0])
        self.row(columns)
        self.line()
        for record in records:
            self.row([record.get(column, "") for column in columns])

    def detail(self, record: Any) -> None:
        self._print(pprint.pformat(record, width=self._width))

    # -- Commands --

    async def handle(self, command: str) -> bool:
        """Run one command line. Returns False when the console should stop."""
        cmd = command.strip().lower()
        if not cmd:
            return True
        if cmd.startswith(("man", "help")):
            self.help()
        elif cmd.startswith("exit"):
            return False
        elif cmd.startswith("menu"):
            await self.menu()
        elif cmd.startswith("recent orders"):
            await self.recent_orders()
        elif cmd.startswith("order detail"):
            await self.order_detail(_argument(command))
        elif cmd.startswith("users"):
            await self.recent_users()
        elif cmd.startswith("user"):
            await self.user_detail(_argument(command))
        else:
            self._print(UNKNOWN_COMMAND)
        return True

    def help(self) -> None:
        self.header("Help menu", center=True)
        for name, description in COMMANDS.items():
            self._print(f"{name:<30}{description}")
        self.line()

    async def menu(self) -> None:
        pizzas = await self._shop.pizzas.find()
        self.header("The list of menu items")
        self.table(pizzas)
        self.line()

    async def recent_orders(self) -> None:
        orders = await self._shop.orders.recent(clock.now() - RECENT)
        self.header("The list of orders in the last 24 hours")
        self.table(
            [
                {"id": order.get("id"), "status": order.get("status"), "user": order.get("userId")}
                for order in orders
            ]
        )
        self.line()

    async def order_detail(self, order_id: str) -> None:
        if not order_id:
            self._print("Usage: order detail --{orderId}")
            return
        order = await self._shop.orders.get(order_id)
        self.header("Details of a specific order")
        self.detail(order if order is not None else "No such order")
        self.line()

    async def recent_users(self) -> None:
        users = await self._shop.users.recent(clock.now() - RECENT)
        self.header("The list of users who signed up in the last 24 hours")
        self.table([public(user) for user in users])
        self.line()

    async def user_detail(self, email: str) -> None:
        if not email:
            self._print("Usage: user --{email}")
            return
        user = await self._shop.users.find_one(email)
        self.header("Details of a specific user")
        self.detail(public(user) if user is not None else "No such user")
        self.line()

    async def loop(self) -> None:
        """Read commands from stdin until ``exit`` or end of input."""
        self._print(WELCOME)
        while True:
            try:
                command = await anyio.to_thread.run_sync(input, PROMPT)
            except EOFError:
                return
            if not await self.handle(command):
                return


def run_console(args: argparse.Namespace) -> None:
    """Open the console over the shop configured by the environment."""
    shop = build_shop(AppConfig.from_env())
    try:
        anyio.run(Console(shop).loop)
    except KeyboardInterrupt:
        print(file=sys.stderr)
