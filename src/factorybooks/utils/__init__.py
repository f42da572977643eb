"""Utility functions for factorybooks."""

from factorybooks.utils.date_parser import parse_date, parse_period
from factorybooks.utils.amount_parser import parse_amount
from factorybooks.utils.money import round_currency

__all__ = ["parse_date", "parse_period", "parse_amount", "round_currency"]
