from datetime import date

import pytest


class FixedClock:
    def __init__(self, ts: str = "2025-08-06T10:37:01Z") -> None:
        self.ts = ts

    def now_iso(self) -> str:  # type: ignore[override]
        return self.ts


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def settings_data() -> dict:
    return {
        "payment_info_id": "PMT-INF-0001",
        "local_instrument": "core",
        "sequence_type": "FRST",
        "creditor_name": "Stadtwerke Musterstadt",
        "creditor_iban": "DE87200500001234567890",
        "creditor_bic": "BANKDEFFXXX",
        "creditor_scheme_id": "DE98ZZZ09999999999",
        "requested_collection_date": date(2025, 9, 1),
    }


@pytest.fixture()
def payment_data() -> dict:
    return {
        "end_to_end_id": "E2E-0001",
        "instructed_amount": "42.00",
        "mandate_id": "MNDT-0001",
        "signature_date": "2024-03-15",
        "debtor_bic": "COBADEFFXXX",
        "debtor_name": "Max Mustermann",
        "debtor_iban": "DE02120300000000202051",
    }
