# pricing_api/cli.py
from datetime import datetime

import click

from .utils.money import D
from .model import DiscountType, MinimumOrderType, Promotion
from .services.pricing_service import PricingInputError, get_discount_message, resolve_price, validate_amount


@click.command("price-quote")
@click.option("--price", required=True)
@click.option("--quantity", default="1", show_default=True)
@click.option("--deal", default=None, help='Deal string, e.g. "10%" or "$5".')
@click.option("--promo-percent", type=float, default=None)
@click.option("--promo-fixed", type=float, default=None)
@click.option("--minimum", type=float, default=None, help="Minimum order subtotal for the promotion.")
def price_quote(price, quantity, deal, promo_percent, promo_fixed, minimum):
    """Resolve one price the same way the cart and invoices do."""
    if promo_percent is not None and promo_fixed is not None:
        raise click.UsageError("use either --promo-percent or --promo-fixed, not both")

    try:
        promotion = None
        if promo_percent is not None or promo_fixed is not None:
            # ad-hoc promotion, open for the duration of the command
            promotion = Promotion(
                discount_type=DiscountType.PERCENTAGE if promo_percent is not None else DiscountType.FIXED,
                discount_value=validate_amount(
                    "promo", promo_percent if promo_percent is not None else promo_fixed
                ),
                valid_from=datetime.min,
                valid_to=datetime.max,
                minimum_order_type=(
                    MinimumOrderType.DOLLAR_AMOUNT if minimum is not None else MinimumOrderType.NO_MINIMUM
                ),
                minimum_amount=validate_amount("minimum", minimum) if minimum is not None else D(0),
            )
        res = resolve_price(price, quantity, promotion, deal)
    except PricingInputError as e:
        raise click.BadParameter(str(e))

    applied = res.applied_discount
    click.echo(f"base price:  ${res.base_price:.2f}")
    click.echo(f"final price: ${res.final_price_per_unit:.2f}")
    click.echo(f"line total:  ${res.line_total:.2f}")
    if applied.is_applicable:
        click.echo(f"discount:    {applied.discount_display} ({applied.source.value})")
        click.echo(get_discount_message(applied))


def register_cli(app):
    app.cli.add_command(price_quote)
