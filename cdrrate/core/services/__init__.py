"""Services module - rating business logic."""

from cdrrate.core.services.charges import ChargeCalculator, charge, round_up_to_block
from cdrrate.core.services.decoder import (
    FIELD_DEFINITIONS,
    FieldDefinition,
    call_class_for,
    decode_line,
    parse_timestamp,
    to_call_record,
)
from cdrrate.core.services.pipeline import RatingBatch, RatingPipeline, RatingSummary
from cdrrate.core.services.rate_loader import load_rate_table, load_rate_table_from_rows
from cdrrate.core.services.resolver import (
    DEFAULT_COUNTRY,
    CallingCodeClassifier,
    DestinationResolver,
    PhoneNumbersClassifier,
    Resolution,
)
from cdrrate.core.services.segmentation import (
    RatePeriodPolicy,
    evening_weekend_policy,
    iter_segments,
    night_window_policy,
    policy_from_config,
    split,
)
from cdrrate.core.services.selector import RateSelector

__all__ = [
    "DEFAULT_COUNTRY",
    "FIELD_DEFINITIONS",
    "CallingCodeClassifier",
    "ChargeCalculator",
    "DestinationResolver",
    "FieldDefinition",
    "PhoneNumbersClassifier",
    "RatePeriodPolicy",
    "RateSelector",
    "RatingBatch",
    "RatingPipeline",
    "RatingSummary",
    "Resolution",
    "call_class_for",
    "charge",
    "decode_line",
    "evening_weekend_policy",
    "iter_segments",
    "load_rate_table",
    "load_rate_table_from_rows",
    "night_window_policy",
    "parse_timestamp",
    "policy_from_config",
    "round_up_to_block",
    "split",
    "to_call_record",
]
