from decimal import Decimal

import pytest
from prometheus_client import REGISTRY

from direct_debit import (
    CollectionSettings,
    DirectDebitCollection,
    InconsistentSequenceType,
    InvalidFieldValue,
    MissingConditionalField,
    MissingRequiredField,
    PaymentRecord,
)
from direct_debit.models import ORIGINAL_MANDATE_FIELDS


def _payment(payment_data, **overrides):
    data = dict(payment_data)
    data.update(overrides)
    return data


def test_empty_collection(settings_data):
    collection = DirectDebitCollection(settings_data)
    assert collection.payment_count() == 0
    assert collection.total_amount() == Decimal("0.00")
    assert collection.payments == ()


def test_accepts_settings_object(settings_data):
    settings = CollectionSettings.from_mapping(settings_data)
    collection = DirectDebitCollection(settings)
    assert collection.settings is settings


def test_settings_mapping_is_validated(settings_data):
    del settings_data["payment_info_id"]
    with pytest.raises(MissingRequiredField):
        DirectDebitCollection(settings_data)


@pytest.mark.parametrize("n", [1, 2, 5])
def test_payment_count_tracks_additions(settings_data, payment_data, n):
    collection = DirectDebitCollection(settings_data)
    for i in range(n):
        collection.add_payment(_payment(payment_data, end_to_end_id=f"E2E-{i}"))
    assert collection.payment_count() == n


def test_total_amount_is_exact(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    for amount in ("10.10", "20.20", "5.05"):
        collection.add_payment(_payment(payment_data, instructed_amount=amount))
    assert collection.total_amount() == Decimal("35.35")
    assert str(collection.total_amount()) == "35.35"


def test_add_payment_returns_record_and_preserves_order(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    first = collection.add_payment(_payment(payment_data, end_to_end_id="A"))
    record = PaymentRecord.from_mapping(_payment(payment_data, end_to_end_id="B"))
    second = collection.add_payment(record)

    assert isinstance(first, PaymentRecord)
    assert second is record
    assert [p.end_to_end_id for p in collection.payments] == ["A", "B"]


def test_missing_required_fields_leave_collection_unchanged(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    collection.add_payment(payment_data)

    bad = _payment(payment_data)
    del bad["mandate_id"]
    del bad["debtor_bic"]
    with pytest.raises(MissingRequiredField) as exc:
        collection.add_payment(bad)

    assert exc.value.fields == ("mandate_id", "debtor_bic")
    assert collection.payment_count() == 1


def test_invalid_value_leaves_collection_unchanged(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    with pytest.raises(InvalidFieldValue):
        collection.add_payment(_payment(payment_data, signature_date="someday"))
    assert collection.payment_count() == 0


def test_amendment_without_original_details(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    with pytest.raises(MissingConditionalField) as exc:
        collection.add_payment(_payment(payment_data, amendment=True))

    assert exc.value.fields == ORIGINAL_MANDATE_FIELDS
    assert collection.payment_count() == 0


@pytest.mark.parametrize("field", ORIGINAL_MANDATE_FIELDS)
def test_amendment_with_any_original_detail(settings_data, payment_data, field):
    collection = DirectDebitCollection(settings_data)
    collection.add_payment(_payment(payment_data, amendment="true", **{field: "X"}))
    assert collection.payment_count() == 1


def test_original_details_without_amendment_are_accepted(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    collection.add_payment(_payment(payment_data, original_mandate_id="OLD-1"))
    assert collection.payment_count() == 1


@pytest.mark.parametrize("sequence_type", ["RCUR", "FNAL", "OOFF"])
def test_smnda_requires_first_sequence(settings_data, payment_data, sequence_type):
    settings_data["sequence_type"] = sequence_type
    collection = DirectDebitCollection(settings_data)

    with pytest.raises(InconsistentSequenceType) as exc:
        collection.add_payment(
            _payment(payment_data, amendment=True, original_debtor_agent="SMNDA")
        )

    assert exc.value.sequence_type == sequence_type
    assert collection.payment_count() == 0


def test_smnda_on_first_sequence(settings_data, payment_data):
    collection = DirectDebitCollection(settings_data)
    collection.add_payment(_payment(payment_data, amendment=True, original_debtor_agent="SMNDA"))
    assert collection.payment_count() == 1


def test_other_debtor_agent_value_on_recurring(settings_data, payment_data):
    settings_data["sequence_type"] = "RCUR"
    collection = DirectDebitCollection(settings_data)
    collection.add_payment(_payment(payment_data, amendment=True, original_debtor_agent="OTHER"))
    assert collection.payment_count() == 1


def test_rejections_are_counted(settings_data, payment_data):
    def sample():
        return REGISTRY.get_sample_value(
            "dd_payments_rejected_total", {"reason": "MissingConditionalField"}
        ) or 0.0

    before = sample()
    collection = DirectDebitCollection(settings_data)
    with pytest.raises(MissingConditionalField):
        collection.add_payment(_payment(payment_data, amendment=True))
    assert sample() == before + 1


def test_smnda_without_amendment_on_recurring(settings_data, payment_data):
    settings_data["sequence_type"] = "RCUR"
    collection = DirectDebitCollection(settings_data)
    collection.add_payment(_payment(payment_data, original_debtor_agent="SMNDA"))
    assert collection.payment_count() == 1
