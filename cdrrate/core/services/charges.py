"""Charge calculation with block rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from cdrrate.core.config.settings import BillingConfig
from cdrrate.core.exceptions.base import ConfigurationError
from cdrrate.core.models.call import ChargeResult
from cdrrate.core.models.rates import RateEntry

_CENTS = Decimal("0.01")
_SECONDS_PER_MINUTE = Decimal(60)


def round_up_to_block(seconds: int, block_seconds: int = 60) -> int:
    """Round ``seconds`` up to the next multiple of ``block_seconds``; zero stays zero."""

    if block_seconds <= 0:
        raise ConfigurationError("block_seconds must be a positive integer", setting="billing.block_seconds")
    if seconds <= 0:
        return 0
    return -(-seconds // block_seconds) * block_seconds


class ChargeCalculator:
    """Prices tier durations against a rate entry.

    Rates are per minute. Each tier is rounded up to ``block_seconds``
    independently before pricing, and the sum is rounded to cents.
    """

    def __init__(self, block_seconds: int = 60, rounding: str = ROUND_HALF_UP) -> None:
        if block_seconds <= 0:
            raise ConfigurationError("block_seconds must be a positive integer", setting="billing.block_seconds")
        self.block_seconds = block_seconds
        self.rounding = rounding

    @classmethod
    def from_config(cls, config: BillingConfig) -> "ChargeCalculator":
        return cls(block_seconds=config.block_seconds, rounding=config.rounding_mode)

    def tier_charge(self, seconds: int, rate: Decimal) -> Decimal:
        rounded = round_up_to_block(seconds, self.block_seconds)
        return Decimal(rounded) / _SECONDS_PER_MINUTE * rate

    def charge(self, standard_seconds: int, reduced_seconds: int, rate: RateEntry) -> ChargeResult:
        standard_charge = self.tier_charge(standard_seconds, rate.standard_rate)
        reduced_charge = self.tier_charge(reduced_seconds, rate.reduced_rate)
        amount = (standard_charge + reduced_charge).quantize(_CENTS, rounding=self.rounding)
        billed = round_up_to_block(standard_seconds, self.block_seconds) + round_up_to_block(
            reduced_seconds, self.block_seconds
        )
        return ChargeResult(
            standard_seconds=standard_seconds,
            reduced_seconds=reduced_seconds,
            billed_seconds=billed,
            amount=amount,
        )


def charge(
    standard_seconds: int,
    reduced_seconds: int,
    rate: RateEntry,
    block_seconds: int = 60,
) -> ChargeResult:
    """Functional shortcut for :meth:`ChargeCalculator.charge`."""

    return ChargeCalculator(block_seconds=block_seconds).charge(standard_seconds, reduced_seconds, rate)


__all__ = ["ChargeCalculator", "charge", "round_up_to_block"]
