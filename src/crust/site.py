"""Application factory for the pizza shop."""

import logging

from crust.app import App
from crust.config import AppConfig
from crust.routes import register_routes
from crust.services.base import Mailer, PaymentGateway
from crust.services.mailgun import MailgunMailer
from crust.services.stripe import StripePayments
from crust.shop import Shop

logger = logging.getLogger("crust.server")


def build_shop(
    config: AppConfig,
    *,
    payments: PaymentGateway | None = None,
    mailer: Mailer | None = None,
) -> Shop:
    """Domain services over ``config.data_dir`` with the configured providers."""
    if payments is None:
        if not config.stripe_secret:
            logger.warning("STRIPE_SECRET is not set; payments will be rejected")
        payments = StripePayments(
            config.stripe_secret,
            base_url=config.stripe_url,
            currency=config.currency,
        )
    if mailer is None:
        mailer = MailgunMailer(
            config.mailgun_domain,
            config.mailgun_api_key,
            config.mailgun_from,
            base_url=config.mailgun_url,
        )
    return Shop.build(config, payments=payments, mailer=mailer)


def create_app(
    config: AppConfig | None = None,
    *,
    payments: PaymentGateway | None = None,
    mailer: Mailer | None = None,
) -> App:
    """Build the shop app: stores, services, providers and every route.

    Usage::

        app = create_app(AppConfig.from_env())
        app.run()
    """
    config = config or AppConfig()
    app = App(config)
    shop = build_shop(config, payments=payments, mailer=mailer)
    register_routes(app, shop)
    return app
