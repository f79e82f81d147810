"""HTML rendering for payment notification emails.

Metadata values come from the checkout form, so every template is rendered
with autoescaping on.
"""

from datetime import datetime
from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape

from payhook.models.events import FIELD_DEFAULTS, PaymentRecord
from payhook.utils.formatting import format_major_units, format_minor_units


def _format_paid_at(value: datetime | None) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%d %b %Y, %H:%M %Z").strip()


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Get the shared Jinja2 environment over the packaged templates."""
    env = Environment(
        loader=PackageLoader("payhook", "templates"),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["minor_units"] = format_minor_units
    env.filters["major_units"] = format_major_units
    env.filters["paid_at"] = _format_paid_at
    return env


def _template_context(payment: PaymentRecord) -> dict:
    return {
        "payment": payment,
        "fields": {name: payment.metadata.field(name) for name in FIELD_DEFAULTS},
    }


def render_operator_summary(payment: PaymentRecord) -> tuple[str, str]:
    """Render the operator notification.

    Returns:
        Tuple of (subject, html).
    """
    product = payment.metadata.field("product_title")
    amount = format_minor_units(payment.amount, payment.currency)
    subject = f"New payment: {product} ({amount})"

    template = get_environment().get_template("operator_summary.html")
    html = template.render(
        subject=subject,
        heading="New payment received",
        **_template_context(payment),
    )
    return subject, html


def render_customer_receipt(payment: PaymentRecord) -> tuple[str, str]:
    """Render the confirmation sent to the paying customer.

    Returns:
        Tuple of (subject, html).
    """
    product = payment.metadata.field("product_title")
    subject = f"Payment confirmed: {product}"

    template = get_environment().get_template("customer_receipt.html")
    html = template.render(
        subject=subject,
        heading="Thank you for your payment",
        **_template_context(payment),
    )
    return subject, html
