"""Rating pipeline: decode, resolve, select, segment and charge each record."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from cdrrate.core.config.settings import RatingConfig
from cdrrate.core.logging import log_context, logger
from cdrrate.core.models.call import RatedCall
from cdrrate.core.models.rates import RateTable
from cdrrate.core.services.charges import ChargeCalculator
from cdrrate.core.services.decoder import Clock, decode_line, to_call_record
from cdrrate.core.services.resolver import DEFAULT_COUNTRY, CallingCodeClassifier, DestinationResolver
from cdrrate.core.services.segmentation import RatePeriodPolicy, policy_from_config, split
from cdrrate.core.services.selector import RateSelector


@dataclass(frozen=True)
class RatingSummary:
    """Diagnostic counters for one batch."""

    records: int = 0
    blank_lines: int = 0
    defaulted_destinations: int = 0
    classifier_resolutions: int = 0
    ambiguous_matches: int = 0
    timestamp_fallbacks: int = 0
    total_charges: Decimal = Decimal("0.00")

    @classmethod
    def from_results(cls, results: Sequence[RatedCall], blank_lines: int = 0) -> "RatingSummary":
        return cls(
            records=len(results),
            blank_lines=blank_lines,
            defaulted_destinations=sum(1 for item in results if item.resolution_method == "default"),
            classifier_resolutions=sum(1 for item in results if item.resolution_method == "classifier"),
            ambiguous_matches=sum(1 for item in results if item.ambiguous_match),
            timestamp_fallbacks=sum(1 for item in results if item.timestamp_fallback),
            total_charges=sum((item.total_charges for item in results), Decimal("0.00")),
        )


@dataclass(frozen=True)
class RatingBatch:
    results: list[RatedCall] = field(default_factory=list)
    summary: RatingSummary = field(default_factory=RatingSummary)


class RatingPipeline:
    """Rates CDR lines against an immutable rate table.

    The pipeline holds no per-record state, so records can be rated in any
    order or concurrently; batch helpers always return results in input order.
    """

    def __init__(
        self,
        rate_table: RateTable,
        config: RatingConfig | None = None,
        classifier: CallingCodeClassifier | Callable[[str], int | None] | None = None,
        policy: RatePeriodPolicy | None = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.config = config or RatingConfig()
        self.rate_table = rate_table
        self.resolver = DestinationResolver(rate_table, self.config.routing, classifier)
        self.selector = RateSelector(rate_table, self.config.tariffs)
        self.policy = policy or policy_from_config(self.config.periods)
        self.calculator = ChargeCalculator.from_config(self.config.billing)
        self._clock = clock

    def rate_record(self, fields: Mapping[str, str]) -> RatedCall:
        """Rate one decoded record."""

        record = to_call_record(fields, clock=self._clock)
        resolution = self.resolver.resolve_detailed(record.destination)
        economic = self.resolver.is_economic(record.destination)
        rate = self.selector.select_rate(resolution.country_code, record.call_class, economic)
        segmentation = split(record.answer_time, record.end_time, self.policy)
        result = self.calculator.charge(segmentation.standard_seconds, segmentation.reduced_seconds, rate)

        if record.end_time < record.answer_time:
            logger.bind(stage="segment").warning(
                "End time precedes answer time, rating as zero duration",
                subscriber=record.subscriber,
                destination=record.destination,
            )

        logger.bind(stage="rate").debug(
            "Rated call",
            destination=record.destination,
            country_code=resolution.country_code,
            rate_id=rate.rate_id,
            amount=str(result.amount),
        )
        return RatedCall(
            net_type=fields.get("NETTYPE", ""),
            bill_type=fields.get("BILLTYPE", ""),
            subscriber=record.subscriber,
            destination=record.destination,
            call_class=record.call_class,
            economical=economic,
            country_code=None if resolution.country_code == DEFAULT_COUNTRY else resolution.country_code,
            ans_date=fields.get("ANSDATE", ""),
            ans_time=fields.get("ANSTIME", ""),
            end_date=fields.get("ENDDATE", ""),
            end_time=fields.get("ENDTIME", ""),
            conversation_time=fields.get("CONVERSATIONTIME", ""),
            calculated_conversation_time=segmentation.total_seconds,
            standard_seconds=result.standard_seconds,
            reduced_seconds=result.reduced_seconds,
            total_charges=result.amount,
            resolution_method=resolution.method,
            ambiguous_match=resolution.ambiguous,
            timestamp_fallback=record.timestamp_fallback,
            rate_id=rate.rate_id,
        )

    def rate_line(self, line: str) -> RatedCall:
        return self.rate_record(decode_line(line))

    def rate_lines(self, lines: Iterable[str], workers: int = 1) -> list[RatedCall]:
        """Rate every non-blank line, preserving input order."""

        return self.rate_batch(lines, workers=workers).results

    def rate_batch(self, lines: Iterable[str], workers: int = 1) -> RatingBatch:
        """Rate every non-blank line and summarise the run."""

        all_lines = list(lines)
        records = [line for line in all_lines if line.strip()]
        blank = len(all_lines) - len(records)

        with log_context(stage="batch") as trace_id:
            logger.info("Rating batch started", records=len(records), workers=workers)
            if workers > 1 and len(records) > 1:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    results = list(executor.map(self._rate_in_context(trace_id), records))
            else:
                results = [self.rate_line(line) for line in records]

            summary = RatingSummary.from_results(results, blank_lines=blank)
            logger.info(
                "Rating batch finished",
                records=summary.records,
                defaulted=summary.defaulted_destinations,
                ambiguous=summary.ambiguous_matches,
                timestamp_fallbacks=summary.timestamp_fallbacks,
                total_charges=str(summary.total_charges),
            )
        return RatingBatch(results=results, summary=summary)

    def _rate_in_context(self, trace_id: str) -> Callable[[str], RatedCall]:
        def _rate(line: str) -> RatedCall:
            # worker threads do not inherit the caller's context variables
            with log_context(trace_id=trace_id, stage="batch"):
                return self.rate_line(line)

        return _rate


__all__ = ["RatingBatch", "RatingPipeline", "RatingSummary"]
