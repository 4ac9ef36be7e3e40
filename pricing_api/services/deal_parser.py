# pricing_api/services/deal_parser.py
"""
Parser for the per-product deal strings shown on catalog cards.

Two forms are understood: ``"<N>%"`` (percentage off) and ``"$<N>"``
(fixed amount off each unit). Anything else is "no deal".
"""
import re

from ..model import Deal, DiscountType
from ..utils.money import D, MAX_AMOUNT, format_money, format_number

_PERCENT_RE = re.compile(r"^\s*(\d+(\.\d+)?)\s*%\s*$")
_FIXED_RE = re.compile(r"^\s*\$\s*(\d+(\.\d+)?)\s*$")


def parse_deal(deal):
    if isinstance(deal, Deal):
        return deal
    if not isinstance(deal, str) or not deal:
        return None

    for pattern, dtype in ((_PERCENT_RE, DiscountType.PERCENTAGE), (_FIXED_RE, DiscountType.FIXED)):
        m = pattern.match(deal)
        if m:
            value = D(m.group(1))
            # absurd figures are typos, not deals
            return Deal(type=dtype, value=value) if value <= MAX_AMOUNT else None
    return None


def format_deal(deal: Deal) -> str:
    if deal.type == DiscountType.PERCENTAGE:
        return f"{format_number(deal.value)}%"
    return format_money(deal.value)
