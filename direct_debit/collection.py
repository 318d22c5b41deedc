"""Direct-debit payment collection and its pain.008 ``PmtInf`` generator.

A collection owns one frozen ``CollectionSettings`` and an append-only list of
``PaymentRecord``. Every payment is validated before it is stored, so
``generate`` cannot fail on stored data. The enclosing ``Document`` /
``CstmrDrctDbtInitn`` envelope and the group header belong to the caller, who
passes a builder anchored at an (empty) ``PmtInf`` element.

No internal locking: callers serialize ``add_payment`` and ``generate``.
"""
from __future__ import annotations

import abc
import logging
import time
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Tuple, Union

from common.datetime import iso_date
from debit_observability.metrics import (
    collections_generated_total,
    generate_latency_seconds,
    payments_added_total,
    payments_rejected_total,
)

from .builder import DocumentBuilder
from .clock import Clock, SystemClock, today_iso
from .errors import InconsistentSequenceType, MissingConditionalField, ValidationError
from .models import (
    MAX_NAME_LENGTH,
    MAX_REMITTANCE_LENGTH,
    ORIGINAL_MANDATE_FIELDS,
    SCHEME_PROPRIETARY,
    SMNDA,
    CollectionSettings,
    PaymentRecord,
    SequenceType,
)
from .validation import sanitize_length

__all__ = ["BasePaymentCollection", "DirectDebitCollection"]

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

PaymentInput = Union[PaymentRecord, Mapping[str, Any]]
SettingsInput = Union[CollectionSettings, Mapping[str, Any]]


def _amount(value: Decimal) -> str:
    # locale-independent, always two fractional digits
    return f"{value.quantize(_CENT):.2f}"


class BasePaymentCollection(abc.ABC):
    """Contract shared by collections that render into a ``PmtInf`` block."""

    @abc.abstractmethod
    def add_payment(self, payment: PaymentInput) -> PaymentRecord:
        """Validate *payment* and append it, or raise ``ValidationError``."""

    @abc.abstractmethod
    def total_amount(self) -> Decimal:
        """Control sum of all stored payments."""

    @abc.abstractmethod
    def payment_count(self) -> int:
        """Number of stored payments."""

    @abc.abstractmethod
    def generate(self, builder: DocumentBuilder) -> None:
        """Emit the collection subtree through *builder*."""


class DirectDebitCollection(BasePaymentCollection):
    """SEPA direct-debit collection (pain.008.002.02 ``PmtInf``)."""

    def __init__(self, settings: SettingsInput, *, clock: Optional[Clock] = None) -> None:
        if not isinstance(settings, CollectionSettings):
            settings = CollectionSettings.from_mapping(settings)
        self._settings = settings
        self._payments: List[PaymentRecord] = []
        self._clock: Clock = clock or SystemClock()

    @property
    def settings(self) -> CollectionSettings:
        return self._settings

    @property
    def payments(self) -> Tuple[PaymentRecord, ...]:
        return tuple(self._payments)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_payment(self, payment: PaymentInput) -> PaymentRecord:
        try:
            record = self._validate(payment)
        except ValidationError as exc:
            payments_rejected_total.labels(reason=type(exc).__name__).inc()
            raise

        self._payments.append(record)
        payments_added_total.labels(sequence_type=self._settings.sequence_type.value).inc()
        logger.debug(
            "payment %s added to %s (%d in collection)",
            record.end_to_end_id,
            self._settings.payment_info_id,
            len(self._payments),
            extra={
                "payment_info_id": self._settings.payment_info_id,
                "end_to_end_id": record.end_to_end_id,
            },
        )
        return record

    def _validate(self, payment: PaymentInput) -> PaymentRecord:
        if isinstance(payment, PaymentRecord):
            record = payment
        else:
            record = PaymentRecord.from_mapping(payment)

        if record.amendment and not record.has_original_mandate_details():
            raise MissingConditionalField(ORIGINAL_MANDATE_FIELDS)

        sequence_type = self._settings.sequence_type
        if (
            record.amendment
            and record.requests_new_debtor_agent()
            and sequence_type is not SequenceType.FRST
        ):
            raise InconsistentSequenceType(sequence_type.value)
        return record

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def total_amount(self) -> Decimal:
        total = sum((p.instructed_amount for p in self._payments), Decimal("0.00"))
        return total.quantize(_CENT)

    def payment_count(self) -> int:
        return len(self._payments)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, builder: DocumentBuilder) -> None:
        start = time.perf_counter()
        s = self._settings
        payments = tuple(self._payments)
        ccy = s.resolved_currency()

        if s.requested_collection_date is not None:
            reqd_colltn_dt = iso_date(s.requested_collection_date)
        else:
            reqd_colltn_dt = today_iso(self._clock)

        builder.add_child("PmtInfId", s.payment_info_id)
        builder.add_child("PmtMtd", "DD")
        if s.batch_booking in ("true", "false"):
            builder.add_child("BtchBookg", s.batch_booking)
        builder.add_child("NbOfTxs", str(len(payments)))
        builder.add_child("CtrlSum", _amount(self.total_amount()))

        pmt_tp_inf = builder.add_child("PmtTpInf")
        pmt_tp_inf.add_child("SvcLvl").add_child("Cd", SCHEME_PROPRIETARY)
        pmt_tp_inf.add_child("LclInstrm").add_child("Cd", s.local_instrument)
        pmt_tp_inf.add_child("SeqTp", s.sequence_type.value)
        if s.category_purpose is not None:
            pmt_tp_inf.add_child("CtgyPurp").add_child("Cd", s.category_purpose)

        builder.add_child("ReqdColltnDt", reqd_colltn_dt)
        builder.add_child("Cdtr").add_child("Nm", s.creditor_name)

        cdtr_acct = builder.add_child("CdtrAcct")
        cdtr_acct.add_child("Id").add_child("IBAN", s.creditor_iban)
        cdtr_acct.add_child("Ccy", ccy)

        builder.add_child("CdtrAgt").add_child("FinInstnId").add_child("BIC", s.creditor_bic)

        if s.ultimate_creditor is not None:
            builder.add_child("UltmtCdtr").add_child(
                "Nm", sanitize_length(s.ultimate_creditor, MAX_NAME_LENGTH)
            )

        builder.add_child("ChrgBr", "SLEV")

        othr = builder.add_child("CdtrSchmeId").add_child("Id").add_child("PrvtId").add_child("Othr")
        othr.add_child("Id", s.creditor_scheme_id)
        othr.add_child("SchmeNm").add_child("Prtry", SCHEME_PROPRIETARY)

        for record in payments:
            _generate_payment(builder.add_child("DrctDbtTxInf"), record, ccy)

        collections_generated_total.inc()
        generate_latency_seconds.observe(time.perf_counter() - start)
        logger.info(
            "generated PmtInf %s with %d transactions",
            s.payment_info_id,
            len(payments),
            extra={"payment_info_id": s.payment_info_id, "sequence_type": s.sequence_type.value},
        )


def _generate_payment(tx: DocumentBuilder, p: PaymentRecord, ccy: str) -> None:
    """Emit one ``DrctDbtTxInf`` body in schema order."""

    tx.add_child("PmtId").add_child("EndToEndId", p.end_to_end_id)
    tx.add_child("InstdAmt", _amount(p.instructed_amount), {"Ccy": ccy})

    mndt = tx.add_child("DrctDbtTx").add_child("MndtRltdInf")
    mndt.add_child("MndtId", p.mandate_id)
    mndt.add_child("DtOfSgntr", iso_date(p.signature_date))
    mndt.add_child("AmdmntInd", "true" if p.amendment else "false")

    if p.amendment:
        dtls = mndt.add_child("AmdmntInfDtls")
        if p.original_mandate_id is not None:
            dtls.add_child("OrgnlMndtId", p.original_mandate_id)
        if p.original_creditor_scheme_name is not None or p.original_creditor_scheme_id is not None:
            schme = dtls.add_child("OrgnlCdtrSchmeId")
            if p.original_creditor_scheme_name is not None:
                schme.add_child("Nm", sanitize_length(p.original_creditor_scheme_name, MAX_NAME_LENGTH))
            if p.original_creditor_scheme_id is not None:
                othr = schme.add_child("Id").add_child("PrvtId").add_child("Othr")
                othr.add_child("Id", p.original_creditor_scheme_id)
                othr.add_child("SchmeNm").add_child("Prtry", SCHEME_PROPRIETARY)
        if p.original_debtor_iban is not None:
            dtls.add_child("OrgnlDbtrAcct").add_child("Id").add_child("IBAN", p.original_debtor_iban)
        if p.original_debtor_agent is not None:
            # the stored value is informational; SMNDA is the only code written
            dtls.add_child("OrgnlDbtrAgt").add_child("FinInstnId").add_child("Othr").add_child("Id", SMNDA)

    if p.electronic_signature is not None:
        mndt.add_child("ElctrncSgntr", p.electronic_signature)

    tx.add_child("DbtrAgt").add_child("FinInstnId").add_child("BIC", p.debtor_bic)
    tx.add_child("Dbtr").add_child("Nm", sanitize_length(p.debtor_name, MAX_NAME_LENGTH))
    tx.add_child("DbtrAcct").add_child("Id").add_child("IBAN", p.debtor_iban)
    if p.ultimate_debtor is not None:
        tx.add_child("UltmtDbtr").add_child("Nm", p.ultimate_debtor)
    if p.purpose is not None:
        tx.add_child("Purp").add_child("Cd", p.purpose)
    if p.remittance_info is not None:
        tx.add_child("RmtInf").add_child("Ustrd", sanitize_length(p.remittance_info, MAX_REMITTANCE_LENGTH))
