"""Outbound provider clients: payments (Stripe) and e-mail (Mailgun)."""

from crust.services.base import Mailer, PaymentGateway
from crust.services.mailgun import MailgunMailer
from crust.services.stripe import StripePayments

__all__ = ["Mailer", "MailgunMailer", "PaymentGateway", "StripePayments"]
