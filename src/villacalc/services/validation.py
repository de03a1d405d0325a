# src/villacalc/services/validation.py

import re
from typing import Any

from villacalc.adapters.currency import FALLBACK_IDR_RATES, SYMBOLS
from villacalc.domain.assumptions import RentalAssumptions
from villacalc.domain.errors import InvalidAssumptionsError

# Core fields that are truly required to reason about each calculator
REQUIRED_INVESTMENT_FIELDS = [
    "total_price",
    "purchase_date",
    "handover_date",
    "projected_sales_price",
]
REQUIRED_RENTAL_FIELDS = [
    "initial_investment",
    "purchase_date",
]

INVESTMENT_NUMERIC_FIELDS = [
    "total_price",
    "down_payment_percent",
    "projected_sales_price",
    "closing_cost_percent",
]

# draft keys saved by older front-ends that don't follow the camel -> snake rule
_RENTAL_ALIASES = {
    "y1_oods": "y1_other",
}
_RENTAL_NON_NUMERIC = {"purchase_date", "property_ready_date", "is_property_ready", "occupancy_increases", "keys"}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _currency_prefix() -> re.Pattern:
    tokens = set(FALLBACK_IDR_RATES) | set(SYMBOLS.values())
    alternation = "|".join(re.escape(t) for t in sorted(tokens, key=len, reverse=True))
    return re.compile(rf"^(?:{alternation})\s*", re.IGNORECASE)


_CURRENCY_PREFIX = _currency_prefix()
_PLAIN_NUMBER = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_decimal_input(value: str) -> float:
    """
    Parse user-typed numbers, accepting "," as either thousands or decimal
    separator:

      - "15,087,472,000" -> 15087472000  (several commas: thousands)
      - "1,234.56"       -> 1234.56      (comma + period: comma is thousands)
      - "1,234"          -> 1234         (single comma, 3 digits after)
      - "5,5" / "5,25"   -> 5.5 / 5.25   (otherwise: decimal comma)
      - "3.5e9"          -> 3500000000

    A leading "-", a leading currency code or symbol ("Rp", "USD", "$") and a
    trailing "%" are allowed. Anything else left over is a ValueError.
    """
    s = str(value).strip()
    negative = s.startswith("-")
    if negative:
        s = s[1:].lstrip()
    s = _CURRENCY_PREFIX.sub("", s)
    if not negative and s.startswith("-"):
        negative = True
        s = s[1:].lstrip()
    if s.endswith("%"):
        s = s[:-1].rstrip()
    if not s:
        raise ValueError(f"empty number: {value!r}")

    commas = s.count(",")
    periods = s.count(".")

    if commas > 1 or (commas == 1 and periods > 0):
        s = s.replace(",", "")
    elif commas == 1:
        idx = s.index(",")
        after = s[idx + 1:]
        if len(after) == 3 and after.isdigit() and idx > 0:
            s = s.replace(",", "")
        else:
            s = s.replace(",", ".")

    if not _PLAIN_NUMBER.fullmatch(s):
        raise ValueError(f"not a number: {value!r}")
    number = float(s)
    return -number if negative else number


def _to_num(val: Any, field_name: str) -> float:
    """
    Coerce 3500000000, "3,500,000,000", "2.5%", "5,5" into float.
    """
    if val is None:
        raise InvalidAssumptionsError(f"Missing required numeric field: {field_name}", field=field_name)
    if isinstance(val, bool):
        raise InvalidAssumptionsError(f"Invalid type for {field_name}: bool", field=field_name)
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        try:
            return parse_decimal_input(val)
        except ValueError as err:
            raise InvalidAssumptionsError(f"Invalid number for {field_name}: {val!r}", field=field_name) from err
    raise InvalidAssumptionsError(f"Invalid type for {field_name}: {type(val)}", field=field_name)


def _to_int(val: Any, field_name: str) -> int:
    f = _to_num(val, field_name)
    if f != int(f):
        raise InvalidAssumptionsError(f"{field_name} must be a whole number, got {val!r}", field=field_name)
    return int(f)


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _check_required(raw: dict[str, Any], required: list[str]) -> None:
    for field in required:
        if field not in raw or raw[field] in (None, ""):
            raise InvalidAssumptionsError(f"Missing required field: {field}", field=field)


def prepare_investment_payload(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize an XIRR calculator payload (from a form, a JSON draft or the API).

    Accepts camelCase keys, localized number strings and the front-end's
    {"type": "outflow"|"inflow"} spelling for additional cash flows.
    """
    cleaned: dict[str, Any] = {_snake(k): v for k, v in raw.items()}
    _check_required(cleaned, REQUIRED_INVESTMENT_FIELDS)

    for field in INVESTMENT_NUMERIC_FIELDS:
        if field in cleaned and cleaned[field] is not None:
            cleaned[field] = _to_num(cleaned[field], field)

    if cleaned.get("installment_months") is not None:
        cleaned["installment_months"] = _to_int(cleaned["installment_months"], "installment_months")

    if cleaned.get("exit_date") in ("", None):
        cleaned.pop("exit_date", None)

    flows = []
    for i, entry in enumerate(cleaned.get("additional_cash_flows") or []):
        item = {_snake(k): v for k, v in dict(entry).items()}
        if "type" in item and "flow_type" not in item:
            item["flow_type"] = item.pop("type")
        item.pop("id", None)
        item["amount"] = _to_num(item.get("amount"), f"additional_cash_flows[{i}].amount")
        flows.append(item)
    cleaned["additional_cash_flows"] = flows

    return cleaned


def prepare_rental_payload(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a rental pro-forma payload: camelCase -> snake_case, legacy
    aliases, localized numbers. Unknown keys are dropped by the model.
    """
    cleaned: dict[str, Any] = {}
    for k, v in raw.items():
        key = _snake(k)
        cleaned[_RENTAL_ALIASES.get(key, key)] = v

    _check_required(cleaned, REQUIRED_RENTAL_FIELDS)

    numeric = set(RentalAssumptions.model_fields) - _RENTAL_NON_NUMERIC
    for field in numeric:
        if field in cleaned and cleaned[field] is not None:
            cleaned[field] = _to_num(cleaned[field], field)

    if cleaned.get("keys") is not None:
        cleaned["keys"] = _to_int(cleaned["keys"], "keys")

    if "occupancy_increases" in cleaned and cleaned["occupancy_increases"] is not None:
        cleaned["occupancy_increases"] = tuple(
            _to_num(v, f"occupancy_increases[{i}]") for i, v in enumerate(cleaned["occupancy_increases"])
        )

    if cleaned.get("property_ready_date") == "":
        cleaned["property_ready_date"] = None

    return cleaned
