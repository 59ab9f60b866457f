"""Destination resolution by longest matching dial-plan prefix."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

import phonenumbers
from phonenumbers import NumberParseException

from cdrrate.core.config.settings import RoutingConfig
from cdrrate.core.logging import logger
from cdrrate.core.models.rates import RateTable

DEFAULT_COUNTRY: Literal["default"] = "default"

CountryCode = int | Literal["default"]
ResolutionMethod = Literal["rate_table", "classifier", "default"]


@runtime_checkable
class CallingCodeClassifier(Protocol):
    """Derives a calling code from a number in international form (no prefix)."""

    def classify(self, number: str) -> int | None: ...


class PhoneNumbersClassifier:
    """Calling-code classifier backed by the ``phonenumbers`` metadata."""

    def classify(self, number: str) -> int | None:
        digits = "".join(ch for ch in number if ch.isdigit())
        if not digits:
            return None
        try:
            parsed = phonenumbers.parse(f"+{digits}", None)
        except NumberParseException:
            return None
        return parsed.country_code or None


class _CallableClassifier:
    def __init__(self, func: Callable[[str], int | None]) -> None:
        self._func = func

    def classify(self, number: str) -> int | None:
        return self._func(number)


@dataclass(frozen=True)
class Resolution:
    """Detailed outcome of resolving one destination number."""

    destination: str
    country_code: CountryCode
    method: ResolutionMethod
    outbound_prefix: str | None = None
    dial_plan: str | None = None
    ambiguous_lengths: tuple[int, ...] = ()

    @property
    def is_default(self) -> bool:
        return self.country_code == DEFAULT_COUNTRY

    @property
    def ambiguous(self) -> bool:
        return bool(self.ambiguous_lengths)


class DestinationResolver:
    """Maps dialed numbers to country codes using the rate table's dial plans.

    Candidate dial plans are tried longest first (``max_dial_plan_length`` down
    to one digit). A length where matching rows disagree on country code is
    skipped. Numbers the table cannot resolve are handed to the classifier.
    """

    def __init__(
        self,
        rate_table: RateTable,
        routing: RoutingConfig | None = None,
        classifier: CallingCodeClassifier | Callable[[str], int | None] | None = None,
    ) -> None:
        self._rate_table = rate_table
        self._routing = routing or RoutingConfig()
        if classifier is None:
            classifier = PhoneNumbersClassifier()
        elif not isinstance(classifier, CallingCodeClassifier):
            classifier = _CallableClassifier(classifier)
        self._classifier: CallingCodeClassifier = classifier
        # longest prefix first so "0950" style overlaps stay deterministic
        self._prefixes: tuple[str, ...] = tuple(
            sorted(
                {self._routing.international_prefix, *self._routing.economic_prefixes},
                key=lambda prefix: (-len(prefix), prefix),
            )
        )

    @property
    def outbound_prefixes(self) -> Sequence[str]:
        return self._prefixes

    def match_outbound_prefix(self, number: str) -> str | None:
        for prefix in self._prefixes:
            if number.startswith(prefix):
                return prefix
        return None

    def is_economic(self, number: str) -> bool:
        """Economic access applies to operator-access prefixes, never to the international prefix."""

        number = number.strip()
        if number.startswith(self._routing.international_prefix):
            return False
        return any(number.startswith(prefix) for prefix in self._routing.economic_prefixes)

    def resolve(self, destination: str) -> CountryCode:
        return self.resolve_detailed(destination).country_code

    def resolve_detailed(self, destination: str) -> Resolution:
        number = destination.strip()
        prefix = self.match_outbound_prefix(number) if number else None
        if prefix is None:
            return Resolution(destination=destination, country_code=DEFAULT_COUNTRY, method="default")

        remainder = number[len(prefix):]
        ambiguous: list[int] = []
        for length in range(min(self._routing.max_dial_plan_length, len(remainder)), 0, -1):
            candidate = remainder[:length]
            matches = self._rate_table.by_dial_plan(candidate)
            if not matches:
                continue
            codes = {entry.country_code for entry in matches}
            if len(codes) == 1:
                return Resolution(
                    destination=destination,
                    country_code=matches[0].country_code,
                    method="rate_table",
                    outbound_prefix=prefix,
                    dial_plan=candidate,
                    ambiguous_lengths=tuple(ambiguous),
                )
            logger.bind(stage="resolve").debug(
                "Ambiguous dial plan, trying shorter prefix",
                dial_plan=candidate,
                country_codes=sorted(codes),
            )
            ambiguous.append(length)

        calling_code = self._classifier.classify(remainder)
        if calling_code is not None:
            return Resolution(
                destination=destination,
                country_code=calling_code,
                method="classifier",
                outbound_prefix=prefix,
                ambiguous_lengths=tuple(ambiguous),
            )
        return Resolution(
            destination=destination,
            country_code=DEFAULT_COUNTRY,
            method="default",
            outbound_prefix=prefix,
            ambiguous_lengths=tuple(ambiguous),
        )


__all__ = [
    "DEFAULT_COUNTRY",
    "CallingCodeClassifier",
    "CountryCode",
    "DestinationResolver",
    "PhoneNumbersClassifier",
    "Resolution",
]
