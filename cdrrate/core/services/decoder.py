"""Record decoder for pipe-delimited CDR (DLV) lines."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from cdrrate.core.exceptions.base import TimestampParseError
from cdrrate.core.logging import logger
from cdrrate.core.models.call import CallClass, CallRecord

Clock = Callable[[], datetime]

FIELD_DELIMITER = "|"


@dataclass(frozen=True)
class FieldDefinition:
    """Name and declared size of one record field. Sizes are informational."""

    name: str
    size: int


FIELD_DEFINITIONS: tuple[FieldDefinition, ...] = tuple(
    FieldDefinition(name, size)
    for name, size in (
        ("NETTYPE", 3),
        ("BILLTYPE", 3),
        ("PARTIALRECORDINDICATOR", 2),
        ("CHARGEPARTYINDICATOR", 2),
        ("ANSDATE", 8),
        ("ANSTIME", 6),
        ("ENDDATE", 8),
        ("ENDTIME", 6),
        ("CONVERSATIONTIME", 8),
        ("CALLERDNSET", 5),
        ("CALLERADDRESSNATURE", 3),
        ("CALLERNUMBER", 20),
        ("CALLEDDNSET", 5),
        ("CALLEDADDRESSNATURE", 3),
        ("CALLEDNUMBER", 20),
        ("CENTREXGROUPNUMBER", 6),
        ("CALLERCTXNUMBER", 6),
        ("CALLEDCTXNUMBER", 6),
        ("TRUNKGROUPIN", 6),
        ("TRUNKGROUPOUT", 6),
        ("CALLERDID", 4),
        ("CALLEDDID", 4),
        ("CALLERCATEGORY", 3),
        ("CALLTYPE", 2),
        ("CONNECTEDNUM", 1),
        ("BERTYPE", 2),
        ("GSVN", 3),
        ("TERMINATIONCODE", 3),
        ("TERMINATINGREASON", 2),
        ("CALLCHARGEAMOUNT", 1),
        ("CALLERSRC", 5),
        ("CALLEDSRC", 5),
        ("SUPPLEMENTARYSERVICETYPE", 5),
        ("CHARGINGCASE", 5),
        ("CONNECTEDADDRESSNATURE", 3),
        ("CONNECTEDNUMBER", 20),
        ("CHARGEDNSET", 5),
        ("CHARGEADDRESSNATURE", 3),
        ("CHARGENUMBER", 20),
        ("BEARERSERVICE", 3),
        ("BEARERMODE", 3),
        ("ISUPINDICATION1", 2),
        ("DIALNUMBER", 32),
        ("PARTIALCOUNTER", 3),
        ("SERVICEID", 3),
        ("CALLEREQUIPMENTTYPE", 3),
        ("CODETYPEVIDEO", 4),
        ("CALLERROAMMODE", 2),
        ("CALLEDROAMMODE", 2),
        ("CALLERNUMBERBEFORECHANGE", 21),
        ("CALLEDNUMBERBEFORECHANGE", 21),
        ("OPC", 10),
        ("DPC", 10),
        ("INCOMINGROUTEID", 33),
        ("OUTGOINGROUTEID", 33),
        ("SWITCHID", 13),
        ("LOCALTIMEZONE", 3),
        ("CALLERTIMEZONE", 3),
        ("CALLEDTIMEZONE", 3),
        ("CALLERPORTNUMBER", 5),
        ("CALLEDPORTNUMBER", 5),
        ("OUTGOINGTRAFFICDISPERSIONID", 5),
        ("INCOMINGTRAFFICDISPERSIONID", 5),
        ("TELESERVICE", 3),
        ("PSTNINDICATOR", 3),
        ("ORGNUMBER", 21),
    )
)

_CALL_CLASS_BY_NATURE: Mapping[str, CallClass] = {
    "0": CallClass.LANDLINE,
    "2": CallClass.MOBILE,
    "3": CallClass.INTERNATIONAL,
}


def decode_line(line: str, schema: Sequence[FieldDefinition] = FIELD_DEFINITIONS) -> dict[str, str]:
    """Split ``line`` on ``|`` and map each token onto the schema, trimmed.

    Tokens missing from short lines become empty strings; extra tokens are
    ignored.
    """
    tokens = line.rstrip("\r\n").split(FIELD_DELIMITER)
    return {
        definition.name: tokens[index].strip() if index < len(tokens) else ""
        for index, definition in enumerate(schema)
    }


def call_class_for(address_nature: str) -> CallClass:
    return _CALL_CLASS_BY_NATURE.get(address_nature.strip(), CallClass.UNKNOWN)


def parse_timestamp(date_text: str, time_text: str) -> datetime:
    """Parse ``DDMMYYYY`` (or ``DDMMYY``) and ``HHMMSS`` into a naive datetime.

    Raises:
        TimestampParseError: when the parts do not form a valid date/time.
    """
    date_text = date_text.strip()
    time_text = time_text.strip()
    if not (date_text.isdigit() and time_text.isdigit()) or len(time_text) != 6:
        raise TimestampParseError("Timestamp fields are not numeric", date_text, time_text)

    if len(date_text) == 8:
        day, month, year = int(date_text[0:2]), int(date_text[2:4]), int(date_text[4:8])
    elif len(date_text) == 6:
        day, month, year = int(date_text[0:2]), int(date_text[2:4]), 2000 + int(date_text[4:6])
    else:
        raise TimestampParseError("Unsupported date length", date_text, time_text)

    hour, minute, second = int(time_text[0:2]), int(time_text[2:4]), int(time_text[4:6])
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError as exc:
        raise TimestampParseError(str(exc), date_text, time_text) from exc


def _try_parse(date_text: str, time_text: str) -> datetime | None:
    try:
        return parse_timestamp(date_text, time_text)
    except TimestampParseError as error:
        logger.bind(stage="decode", error_code=error.error_code).warning(
            "Unparsable timestamp, substituting sentinel", date=error.date_text, time=error.time_text
        )
        return None


def to_call_record(fields: Mapping[str, str], clock: Clock = datetime.now) -> CallRecord:
    """Build a :class:`CallRecord` from decoded fields.

    An unparsable timestamp is replaced by the call's other timestamp, or by
    ``clock()`` when both are unusable, so the call rates as zero seconds.
    """
    answer = _try_parse(fields.get("ANSDATE", ""), fields.get("ANSTIME", ""))
    end = _try_parse(fields.get("ENDDATE", ""), fields.get("ENDTIME", ""))
    fallback = answer is None or end is None
    if answer is None and end is None:
        answer = end = clock()
    elif answer is None:
        answer = end
    elif end is None:
        end = answer

    return CallRecord(
        answer_time=answer,
        end_time=end,
        subscriber=fields.get("CALLERNUMBER", ""),
        destination=fields.get("CALLEDNUMBER", ""),
        call_class=call_class_for(fields.get("CALLEDADDRESSNATURE", "")),
        fields=fields,
        timestamp_fallback=fallback,
    )


__all__ = [
    "FIELD_DEFINITIONS",
    "FIELD_DELIMITER",
    "FieldDefinition",
    "call_class_for",
    "decode_line",
    "parse_timestamp",
    "to_call_record",
]
