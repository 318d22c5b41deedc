"""SEPA direct-debit collections rendered as ISO 20022 pain.008 ``PmtInf`` blocks."""
from .builder import NS, DocumentBuilder, ElementTreeBuilder  # noqa: F401
from .clock import Clock, SystemClock  # noqa: F401
from .collection import BasePaymentCollection, DirectDebitCollection  # noqa: F401
from .errors import (  # noqa: F401
    InconsistentSequenceType,
    InvalidFieldValue,
    MissingConditionalField,
    MissingRequiredField,
    ValidationError,
)
from .models import (  # noqa: F401
    DEFAULT_CURRENCY,
    SMNDA,
    CollectionSettings,
    PaymentRecord,
    SequenceType,
)
