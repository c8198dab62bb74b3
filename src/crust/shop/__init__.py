"""The pizza shop: users, tokens, menu, carts and orders.

``Shop`` bundles the domain services one app instance works with::

    shop = Shop.build(config, payments=payments, mailer=mailer)
    await shop.orders.place(user)
"""

from dataclasses import dataclass
from pathlib import Path

from crust.config import AppConfig
from crust.data.store import FileStore
from crust.services.base import Mailer, PaymentGateway
from crust.shop.carts import Carts
from crust.shop.orders import Orders
from crust.shop.pizzas import Pizzas
from crust.shop.tokens import Tokens
from crust.shop.users import Users

__all__ = ["Carts", "Orders", "Pizzas", "Shop", "Tokens", "Users"]


@dataclass(frozen=True, slots=True)
class Shop:
    """The domain services of one app instance."""

    users: Users
    tokens: Tokens
    pizzas: Pizzas
    carts: Carts
    orders: Orders

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        payments: PaymentGateway,
        mailer: Mailer,
    ) -> "Shop":
        """Wire every service over one store directory per collection."""
        root = Path(config.data_dir)
        users = Users(FileStore(root, "users"))
        carts = Carts(FileStore(root, "carts"))
        return cls(
            users=users,
            tokens=Tokens(
                FileStore(root, "tokens"),
                users,
                config.token_expiration,
                cookie_name=config.token_cookie,
            ),
            pizzas=Pizzas(FileStore(root, "pizzas")),
            carts=carts,
            orders=Orders(FileStore(root, "orders"), users, carts, payments, mailer),
        )
