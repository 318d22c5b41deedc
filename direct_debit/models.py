"""Value objects for a SEPA direct-debit collection.

``CollectionSettings`` holds the collection-wide attributes and is frozen once
built. ``PaymentRecord`` holds one debit instruction. Absent optional inputs
are ``None`` and are omitted from the generated document.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, condecimal, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import InvalidFieldValue, MissingRequiredField
from .validation import contains_any_key, missing_keys

__all__ = [
    "SequenceType",
    "CollectionSettings",
    "PaymentRecord",
    "DEFAULT_CURRENCY",
    "SCHEME_PROPRIETARY",
    "SMNDA",
    "MAX_NAME_LENGTH",
    "MAX_REMITTANCE_LENGTH",
    "SETTINGS_REQUIRED",
    "PAYMENT_REQUIRED",
    "ORIGINAL_MANDATE_FIELDS",
]

DEFAULT_CURRENCY = "EUR"
SCHEME_PROPRIETARY = "SEPA"
SMNDA = "SMNDA"  # same mandate, new debtor agent
MAX_NAME_LENGTH = 70
MAX_REMITTANCE_LENGTH = 140

SETTINGS_REQUIRED: Tuple[str, ...] = (
    "payment_info_id",
    "local_instrument",
    "sequence_type",
    "creditor_name",
    "creditor_iban",
    "creditor_bic",
    "creditor_scheme_id",
)

PAYMENT_REQUIRED: Tuple[str, ...] = (
    "end_to_end_id",
    "instructed_amount",
    "mandate_id",
    "signature_date",
    "debtor_bic",
    "debtor_name",
    "debtor_iban",
)

ORIGINAL_MANDATE_FIELDS: Tuple[str, ...] = (
    "original_mandate_id",
    "original_creditor_scheme_name",
    "original_creditor_scheme_id",
    "original_debtor_iban",
    "original_debtor_agent",
)


class SequenceType(str, Enum):
    FRST = "FRST"  # first collection of a recurring mandate
    RCUR = "RCUR"  # recurring
    FNAL = "FNAL"  # final
    OOFF = "OOFF"  # one-off


_M = TypeVar("_M", bound=BaseModel)


def _present(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _validate(model: Type[_M], data: Mapping[str, Any]) -> _M:
    """Run pydantic validation, translating its errors to ``InvalidFieldValue``."""
    try:
        return model.model_validate(_present(data))
    except PydanticValidationError as exc:
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise InvalidFieldValue(str(exc), fields) from exc


class CollectionSettings(BaseModel):
    """Collection-wide creditor, scheme and sequencing attributes."""

    model_config = ConfigDict(frozen=True)

    payment_info_id: str = Field(..., min_length=1)
    local_instrument: str = Field(..., min_length=1)  # CORE, COR1, B2B
    sequence_type: SequenceType
    creditor_name: str
    creditor_iban: str
    creditor_bic: str
    creditor_scheme_id: str

    currency: Optional[str] = None
    # "true" / "false"; any other string is kept but never emitted
    batch_booking: Optional[str] = None
    category_purpose: Optional[str] = None
    ultimate_creditor: Optional[str] = None
    requested_collection_date: Optional[date] = None

    @field_validator("local_instrument")
    @classmethod
    def _upper_instrument(cls, v: str) -> str:
        return v.upper()

    @field_validator("sequence_type", mode="before")
    @classmethod
    def _upper_sequence(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("requested_collection_date", mode="before")
    @classmethod
    def _date_only(cls, v: Any) -> Any:
        # datetimes keep their calendar date, the time of day is dropped
        return v.date() if isinstance(v, datetime) else v

    @field_validator("batch_booking", mode="before")
    @classmethod
    def _booking_literal(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return "true" if v else "false"
        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CollectionSettings":
        """Build settings from raw input, reporting every missing required key."""
        missing = missing_keys(data, SETTINGS_REQUIRED)
        if missing:
            raise MissingRequiredField(missing)
        return _validate(cls, data)

    def resolved_currency(self) -> str:
        if self.currency is not None and len(self.currency) == 3:
            return self.currency.upper()
        return DEFAULT_CURRENCY


class PaymentRecord(BaseModel):
    """A single direct-debit instruction.

    ``instructed_amount`` must already be at cent precision: a float that
    drifted (``0.1 + 0.2``) is rejected rather than rounded.
    """

    model_config = ConfigDict(frozen=True)

    end_to_end_id: str = Field(..., min_length=1)
    instructed_amount: condecimal(gt=Decimal("0.00"), decimal_places=2)
    mandate_id: str
    signature_date: date
    debtor_bic: str
    debtor_name: str
    debtor_iban: str
    amendment: bool = False

    # only meaningful when ``amendment`` is true
    original_mandate_id: Optional[str] = None
    original_creditor_scheme_name: Optional[str] = None
    original_creditor_scheme_id: Optional[str] = None
    original_debtor_iban: Optional[str] = None
    original_debtor_agent: Optional[str] = None

    electronic_signature: Optional[str] = None
    ultimate_debtor: Optional[str] = None
    purpose: Optional[str] = None
    remittance_info: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PaymentRecord":
        missing = missing_keys(data, PAYMENT_REQUIRED)
        if missing:
            raise MissingRequiredField(missing)
        return _validate(cls, data)

    def has_original_mandate_details(self) -> bool:
        return contains_any_key(self.model_dump(), ORIGINAL_MANDATE_FIELDS)

    def requests_new_debtor_agent(self) -> bool:
        return self.original_debtor_agent == SMNDA
