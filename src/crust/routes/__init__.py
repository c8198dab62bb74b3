"""HTTP surface of the shop.

Each module exposes ``register(app, shop)``; all paths are exact.
"""

from crust.app import App
from crust.routes import account, carts, orders, pages, pizzas, users
from crust.shop import Shop

MODULES = (pages, account, users, pizzas, carts, orders)


def register_routes(app: App, shop: Shop) -> None:
    """Register every shop route on *app*."""
    for module in MODULES:
        module.register(app, shop)
