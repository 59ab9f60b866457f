"""Rate selection for a resolved destination."""

from __future__ import annotations

from cdrrate.core.config.settings import TariffConfig
from cdrrate.core.models.call import CallClass
from cdrrate.core.models.rates import ECONOMIC_ACCESS_CODE, STANDARD_ACCESS_CODE, RateEntry, RateTable
from cdrrate.core.services.resolver import DEFAULT_COUNTRY, CountryCode


def _flat_rate(rate_id: str, description: str, standard: object, reduced: object) -> RateEntry:
    return RateEntry(
        rate_id=rate_id,
        country_code=0,
        standard_rate=standard,
        reduced_rate=reduced,
        description=description,
        access_code=STANDARD_ACCESS_CODE,
    )


class RateSelector:
    """Picks the :class:`RateEntry` that prices a call.

    Landline and mobile traffic is rated by class with flat override rates.
    International and unknown traffic is rated by country code, preferring the
    economic (``"95"``) or standard (``"0"``) access-code variant as requested.
    """

    def __init__(self, rate_table: RateTable, tariffs: TariffConfig | None = None) -> None:
        tariffs = tariffs or TariffConfig()
        self._rate_table = rate_table
        self.default_rate = _flat_rate(
            "default", "Default Rate", tariffs.rate("default_standard"), tariffs.rate("default_reduced")
        )
        self._class_overrides: dict[CallClass, RateEntry] = {
            CallClass.LANDLINE: _flat_rate(
                "landline", "Domestic landline", tariffs.rate("landline_standard"), tariffs.rate("landline_reduced")
            ),
            CallClass.MOBILE: _flat_rate(
                "mobile", "Domestic mobile", tariffs.rate("mobile_standard"), tariffs.rate("mobile_reduced")
            ),
        }

    def select_rate(self, country_code: CountryCode, call_class: CallClass, economic_requested: bool) -> RateEntry:
        override = self._class_overrides.get(call_class)
        if override is not None:
            return override
        if country_code == DEFAULT_COUNTRY:
            return self.default_rate

        matched = self._rate_table.by_country(country_code)
        if not matched:
            return self.default_rate
        wanted = ECONOMIC_ACCESS_CODE if economic_requested else STANDARD_ACCESS_CODE
        for entry in matched:
            if entry.access_code == wanted:
                return entry
        return matched[0]


__all__ = ["RateSelector"]
