"""Unit tests for invoice sanitizing, totals and data URL sizing."""

from datetime import datetime

from freyn.models.invoice import InvoiceStatus
from freyn.services.invoicing import (
    calculate_totals,
    coerce_status,
    estimate_data_url_bytes,
    format_invoice_date,
    parse_invoice_date,
    sanitize_items,
    sanitize_party,
    sanitize_payment_method,
)


def test_items_without_service_are_dropped():
    items = sanitize_items([
        {"serviceId": "s1", "serviceName": "Logo", "quantity": 2, "price": 100},
        {"serviceId": "", "serviceName": "Ghost", "quantity": 1, "price": 5},
        {"serviceName": "No id"},
        "not a dict",
    ])
    assert len(items) == 1
    assert items[0] == {
        "service_id": "s1",
        "service_name": "Logo",
        "deliverables": "",
        "quantity": 2,
        "price": 100,
        "subtotal": 200,
    }


def test_item_numbers_are_clamped():
    [item] = sanitize_items([
        {"serviceId": "s1", "serviceName": "Logo", "quantity": -3, "price": -10},
    ])
    assert item["quantity"] == 1
    assert item["price"] == 0
    assert item["subtotal"] == 0

    [item] = sanitize_items([
        {"serviceId": "s1", "serviceName": "Logo", "quantity": "abc", "price": "12.5"},
    ])
    assert item["quantity"] == 1
    assert item["price"] == 12.5


def test_non_list_items_become_empty():
    assert sanitize_items(None) == []
    assert sanitize_items({"serviceId": "s1"}) == []


def test_totals_sum_subtotals():
    items = sanitize_items([
        {"serviceId": "a", "serviceName": "A", "quantity": 2, "price": 150},
        {"serviceId": "b", "serviceName": "B", "quantity": 1, "price": 50.5},
    ])
    totals = calculate_totals(items)
    assert totals.subtotal == 350.5
    assert totals.total == 350.5


def test_party_accepts_camel_case_client_id():
    party = sanitize_party({"name": " Acme ", "clientId": "C1", "extra": "x"})
    assert party["name"] == "Acme"
    assert party["client_id"] == "C1"
    assert "extra" not in party
    assert sanitize_party("junk")["name"] == ""


def test_payment_method_variants():
    wallet = sanitize_payment_method({
        "type": "e_wallet",
        "ewallet": {"provider": "OVO", "accountName": "Jane", "phoneNumber": "0812"},
    })
    assert wallet == {
        "type": "e_wallet",
        "ewallet": {"provider": "OVO", "account_name": "Jane", "phone_number": "0812"},
    }

    bank = sanitize_payment_method(None)
    assert bank["type"] == "bank_transfer"
    assert bank["bank"] == {"name": "", "account_name": "", "account_number": ""}


def test_status_coercion_defaults_to_draft():
    assert coerce_status("paid") == InvoiceStatus.PAID
    assert coerce_status("archived") == InvoiceStatus.DRAFT
    assert coerce_status(None) == InvoiceStatus.DRAFT


def test_data_url_size_estimate():
    assert estimate_data_url_bytes("") == 0
    assert estimate_data_url_bytes("data:image/png;base64,") == 0
    # "aGVsbG8=" is base64 for "hello"
    assert estimate_data_url_bytes("data:text/plain;base64,aGVsbG8=") == 5


def test_invoice_date_format():
    assert format_invoice_date(datetime(2026, 3, 7)) == "07032026"


def test_parse_invoice_date():
    assert parse_invoice_date("2026-03-07T10:00:00+07:00") == datetime(2026, 3, 7, 3, 0)
    assert parse_invoice_date("not a date") is None
    assert isinstance(parse_invoice_date(""), datetime)


def test_totals_of_no_items_are_zero():
    totals = calculate_totals([])
    assert totals.subtotal == 0
    assert totals.total == 0
