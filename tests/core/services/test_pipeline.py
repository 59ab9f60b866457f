"""End-to-end tests for the rating pipeline."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from cdrrate.core.config import RatingConfig
from cdrrate.core.models.call import CallClass
from cdrrate.core.models.rates import RateTable
from cdrrate.core.services.pipeline import RatingPipeline, RatingSummary
from cdrrate.core.services.segmentation import night_window_policy


@pytest.fixture
def pipeline(rate_table: RateTable, no_classifier) -> RatingPipeline:
    return RatingPipeline(rate_table, classifier=no_classifier)


def test_sample_international_call(pipeline: RatingPipeline, line_builder) -> None:
    rated = pipeline.rate_line(line_builder())

    assert rated.country_code == 6088
    assert rated.call_class is CallClass.INTERNATIONAL
    assert rated.economical is False
    assert rated.standard_seconds == 25
    assert rated.reduced_seconds == 0
    assert rated.calculated_conversation_time == 25
    assert rated.total_charges == Decimal("0.06")
    assert rated.rate_id == "MY-SABAH"


def test_output_record_shape(pipeline: RatingPipeline, line_builder) -> None:
    output = pipeline.rate_line(line_builder()).to_output()

    assert list(output) == [
        "NETTYPE",
        "BILLTYPE",
        "SUBSCRIBER",
        "DESTINATION",
        "CTYPE",
        "ECONOMICAL",
        "COUNTRYCODE",
        "ANSDATE",
        "ANSTIME",
        "ENDDATE",
        "ENDTIME",
        "CONVERSATIONTIME",
        "CALCULATEDCONVERSATIONTIME",
        "STANDARDSECONDS",
        "REDUCEDSECONDS",
        "TOTALCHARGES",
    ]
    assert output["NETTYPE"] == "11"
    assert output["SUBSCRIBER"] == "2330142"
    assert output["CTYPE"] == "international"
    assert output["CONVERSATIONTIME"] == "25"


def test_json_output_renders_charge_as_text(pipeline: RatingPipeline, line_builder) -> None:
    output = pipeline.rate_line(line_builder()).to_output(mode="json")

    assert output["TOTALCHARGES"] == "0.06"
    assert output["COUNTRYCODE"] == 6088


def test_domestic_landline_standard_hours(pipeline: RatingPipeline, line_builder) -> None:
    line = line_builder(
        CALLEDADDRESSNATURE="0", CALLEDNUMBER="0388881234", ANSTIME="100000", ENDTIME="100500"
    )

    rated = pipeline.rate_line(line)

    assert rated.call_class is CallClass.LANDLINE
    assert rated.country_code is None
    assert rated.standard_seconds == 300
    assert rated.total_charges == Decimal("0.15")


def test_domestic_landline_reduced_hours(pipeline: RatingPipeline, line_builder) -> None:
    line = line_builder(
        CALLEDADDRESSNATURE="0", CALLEDNUMBER="0388881234", ANSTIME="030000", ENDTIME="030500"
    )

    rated = pipeline.rate_line(line)

    assert rated.reduced_seconds == 300
    assert rated.total_charges == Decimal("0.15")


def test_evening_boundary_bills_each_tier(pipeline: RatingPipeline, line_builder) -> None:
    line = line_builder(ANSTIME="185500", ENDTIME="190500")

    rated = pipeline.rate_line(line)

    assert (rated.standard_seconds, rated.reduced_seconds) == (300, 300)
    assert rated.total_charges == Decimal("0.55")


def test_night_window_policy_can_be_injected(rate_table: RateTable, no_classifier, line_builder) -> None:
    pipeline = RatingPipeline(rate_table, classifier=no_classifier, policy=night_window_policy())

    rated = pipeline.rate_line(line_builder(ANSTIME="075500", ENDTIME="080500"))

    assert (rated.standard_seconds, rated.reduced_seconds) == (300, 300)
    assert rated.total_charges == Decimal("0.55")


def test_unresolved_destination_uses_default_rate(pipeline: RatingPipeline, line_builder) -> None:
    rated = pipeline.rate_line(line_builder(CALLEDNUMBER="00999123", ANSTIME="100000", ENDTIME="100500"))

    assert rated.country_code is None
    assert rated.resolution_method == "default"
    assert rated.rate_id == "default"
    assert rated.total_charges == Decimal("0.50")


def test_economic_prefix_selects_discounted_rate(pipeline: RatingPipeline, line_builder) -> None:
    rated = pipeline.rate_line(line_builder(CALLEDNUMBER="0956088265386"))

    assert rated.economical is True
    assert rated.rate_id == "MY-SABAH-ECO"
    assert rated.total_charges == Decimal("0.04")


def test_classifier_code_without_rate_uses_default_rate(rate_table: RateTable, line_builder) -> None:
    pipeline = RatingPipeline(rate_table, classifier=lambda number: 81)

    rated = pipeline.rate_line(line_builder(CALLEDNUMBER="0081312345678"))

    assert rated.country_code == 81
    assert rated.resolution_method == "classifier"
    assert rated.rate_id == "default"
    assert rated.total_charges == Decimal("0.10")


def test_end_before_answer_rates_zero(pipeline: RatingPipeline, line_builder) -> None:
    rated = pipeline.rate_line(line_builder(ANSTIME="100500", ENDTIME="100000"))

    assert rated.calculated_conversation_time == 0
    assert rated.total_charges == Decimal("0.00")


def test_unparsable_timestamp_degrades_to_zero_charge(rate_table: RateTable, no_classifier, line_builder) -> None:
    pipeline = RatingPipeline(rate_table, classifier=no_classifier, clock=lambda: datetime(2025, 1, 1))

    rated = pipeline.rate_line(line_builder(ANSDATE="garbage", ENDDATE=""))

    assert rated.timestamp_fallback is True
    assert rated.total_charges == Decimal("0.00")
    assert rated.ans_date == "garbage"


def test_short_line_is_rated_with_defaults(pipeline: RatingPipeline) -> None:
    rated = pipeline.rate_line("11|01")

    assert rated.destination == ""
    assert rated.call_class is CallClass.UNKNOWN
    assert rated.country_code is None
    assert rated.total_charges == Decimal("0.00")


def test_block_size_comes_from_config(rate_table: RateTable, no_classifier, line_builder) -> None:
    config = RatingConfig.from_dict({"billing": {"block_seconds": 30}})
    pipeline = RatingPipeline(rate_table, config=config, classifier=no_classifier)

    rated = pipeline.rate_line(line_builder())

    assert rated.total_charges == Decimal("0.03")


def test_rate_lines_skips_blank_lines_and_keeps_order(pipeline: RatingPipeline, line_builder) -> None:
    lines = [
        line_builder(CALLERNUMBER="1"),
        "",
        "   ",
        line_builder(CALLERNUMBER="2"),
        line_builder(CALLERNUMBER="3"),
    ]

    rated = pipeline.rate_lines(lines)

    assert [item.subscriber for item in rated] == ["1", "2", "3"]


def test_parallel_rating_preserves_input_order(pipeline: RatingPipeline, line_builder) -> None:
    lines = [line_builder(CALLERNUMBER=str(index), ENDTIME=f"0924{index % 60:02d}") for index in range(40)]

    sequential = pipeline.rate_lines(lines)
    parallel = pipeline.rate_lines(lines, workers=4)

    assert [item.subscriber for item in parallel] == [str(index) for index in range(40)]
    assert [item.to_output() for item in parallel] == [item.to_output() for item in sequential]


def test_batch_summary_counts(pipeline: RatingPipeline, line_builder) -> None:
    lines = [
        line_builder(),
        "",
        line_builder(CALLEDNUMBER="00999123"),
        line_builder(ENDDATE="bad"),
    ]

    batch = pipeline.rate_batch(lines)

    assert batch.summary == RatingSummary(
        records=3,
        blank_lines=1,
        defaulted_destinations=1,
        classifier_resolutions=0,
        ambiguous_matches=0,
        timestamp_fallbacks=1,
        total_charges=Decimal("0.16"),
    )


def test_empty_batch(pipeline: RatingPipeline) -> None:
    batch = pipeline.rate_batch([])

    assert batch.results == []
    assert batch.summary.records == 0
    assert batch.summary.total_charges == Decimal("0.00")
