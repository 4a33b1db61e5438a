from hvacdesk.schemas.invoice import InvoiceCreate
from hvacdesk.schemas.job import JobCreate
from hvacdesk.services.numbering_services import NumberingService


def test_job_number_format():
    numbering = NumberingService(job_prefix="ZL")
    assert numbering.job_number(15, 2026) == "ZL-2026-015"
    assert numbering.job_number(1234, 2026) == "ZL-2026-1234"
    assert numbering.job_pattern.match("ZL-2026-015")
    assert not numbering.job_pattern.match("ZL-26-015")


def test_invoice_number_format():
    numbering = NumberingService(invoice_prefix="FV")
    assert numbering.invoice_number(42, 2026) == "FV/2026/0042"
    assert numbering.invoice_pattern.match("FV/2026/0042")
    assert not numbering.invoice_pattern.match("FV/2026/42")


def test_prefixes_are_configurable():
    numbering = NumberingService(job_prefix="JOB", invoice_prefix="INV")
    assert numbering.job_number(3, 2025) == "JOB-2025-003"
    assert numbering.invoice_number(3, 2025) == "INV/2025/0003"
    assert not numbering.job_pattern.match("ZL-2025-003")


def test_created_jobs_get_distinct_numbers_from_their_ids(db, actors, job_service, numbering):
    first = job_service.create_job(actors.client, JobCreate(title="AC repair"), db)
    second = job_service.create_job(actors.client, JobCreate(title="Heat pump check"), db)

    assert first.external_number == numbering.job_number(first.id, first.created_at.year)
    assert first.external_number != second.external_number
    assert numbering.job_pattern.match(second.external_number)


def test_created_invoices_get_numbers_from_their_ids(db, actors, invoice_service, numbering):
    invoice = invoice_service.create_invoice(actors.admin, InvoiceCreate(client_id=actors.client.id, amount="150.00"), db)
    assert invoice.external_number == numbering.invoice_number(invoice.id, invoice.issued_at.year)
    assert numbering.invoice_pattern.match(invoice.external_number)
