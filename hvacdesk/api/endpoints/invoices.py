from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from hvacdesk.api.router import create_router
from hvacdesk.api.dependencies.auth import get_current_actor
from hvacdesk.api.dependencies.database import get_db
from hvacdesk.api.dependencies.services import get_invoice_service
from hvacdesk.core.config import settings
from hvacdesk.schemas.actor import ActorContext
from hvacdesk.schemas.invoice import (
	InvoiceCreate,
	InvoiceListParams,
	InvoicePage,
	InvoicePatch,
	InvoiceRead,
	InvoiceStatus,
	PaymentReport,
)
from hvacdesk.services.invoice_services import InvoiceService

router = create_router(name="invoices")


@router.post("", status_code=201, response_model=InvoiceRead)
def create_invoice(
	payload: InvoiceCreate,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	return invoice_service.create_invoice(actor, payload, db)


@router.get("", response_model=InvoicePage)
def list_invoices(
	client_id: Optional[int] = None,
	status: Optional[InvoiceStatus] = None,
	job_id: Optional[int] = None,
	q: Optional[str] = Query(default=None, max_length=100),
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1),
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	params = InvoiceListParams(client_id=client_id, status=status, job_id=job_id, q=q, page=page, limit=limit)
	return invoice_service.list_invoices(actor, params)


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
	invoice_id: int,
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	return invoice_service.get_invoice(actor, invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceRead)
def patch_invoice(
	invoice_id: int,
	changes: InvoicePatch,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	return invoice_service.patch_invoice(actor, invoice_id, changes, db)


@router.delete("/{invoice_id}", status_code=204)
def delete_invoice(
	invoice_id: int,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	invoice_service.delete_invoice(actor, invoice_id, db)


@router.post("/{invoice_id}/pay", response_model=InvoiceRead)
def report_payment(
	invoice_id: int,
	payment: PaymentReport,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	"""
	Client declares the invoice paid; it waits for admin confirmation.
	"""
	return invoice_service.report_payment(actor, invoice_id, payment, db)


@router.post("/{invoice_id}/confirm-pay", response_model=InvoiceRead)
def confirm_payment(
	invoice_id: int,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	invoice_service: InvoiceService = Depends(get_invoice_service),
):
	return invoice_service.confirm_payment(actor, invoice_id, db)
