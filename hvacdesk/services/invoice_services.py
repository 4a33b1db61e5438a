"""Invoice registry: issuing invoices and moving them through payment.

ISSUED -> PENDING_CONFIRMATION (client reports payment) -> PAID (admin
confirms). Moves are checked against ``INVOICE_TRANSITIONS``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from hvacdesk.core.config import settings
from hvacdesk.db.models.invoice import Invoice
from hvacdesk.repositories.invoice import InvoiceRepository
from hvacdesk.repositories.job import JobRepository
from hvacdesk.repositories.user import UserRepository
from hvacdesk.schemas.actor import ActorContext, Role
from hvacdesk.schemas.invoice import (
	InvoiceCreate,
	InvoiceListParams,
	InvoicePage,
	InvoicePatch,
	InvoiceRead,
	InvoiceStatus,
	PaymentReport,
)
from hvacdesk.schemas.mixin import PageMeta
from hvacdesk.services.base import BaseService
from hvacdesk.services.exceptions import (
	ConflictError,
	ForbiddenError,
	InvalidTransitionError,
	InvoiceNotFoundError,
	ValidationError,
)
from hvacdesk.services.numbering_services import NumberingService
from hvacdesk.services.transitions import can_move_invoice

NON_NULLABLE_PATCH_FIELDS = ("client_id", "amount", "currency", "status")


class InvoiceService(BaseService):
	def __init__(
		self,
		invoice_repo: InvoiceRepository,
		job_repo: JobRepository,
		user_repo: UserRepository,
		numbering: NumberingService,
		correlation_id: Optional[str] = None,
	):
		super().__init__(correlation_id)
		self._set_repositories(invoice_repo=invoice_repo, job_repo=job_repo, user_repo=user_repo)
		self.numbering = numbering

	def _get_or_404(self, invoice_id: int) -> Invoice:
		invoice = self.invoice_repo.get_by_id(invoice_id)
		if not invoice:
			raise InvoiceNotFoundError(invoice_id, correlation_id=self.correlation_id)
		return invoice

	def _forbid(self, actor: ActorContext, action: str, invoice_id: Optional[int] = None) -> ForbiddenError:
		self.log_operation("forbidden", action=action, invoice_id=invoice_id, actor_id=actor.id, role=actor.role.value)
		return ForbiddenError(
			action, "Invoice", invoice_id, actor_id=actor.id, role=actor.role.value, correlation_id=self.correlation_id
		)

	def _require_client(self, client_id: int) -> None:
		role = self.user_repo.get_role(client_id)
		if role is None:
			raise ValidationError("client_id", f"user {client_id} does not exist", correlation_id=self.correlation_id)
		if role != Role.CLIENT.value:
			raise ValidationError("client_id", f"user {client_id} is not a client", correlation_id=self.correlation_id)

	def _require_job(self, job_id: int) -> None:
		if not self.job_repo.exists(job_id):
			raise ValidationError("job_id", f"job {job_id} does not exist", correlation_id=self.correlation_id)

	def _transition(self, actor: ActorContext, invoice: Invoice, target: InvoiceStatus) -> None:
		current = InvoiceStatus(invoice.status)
		if not can_move_invoice(actor.role, current, target):
			raise InvalidTransitionError(
				"Invoice", invoice.id, current.value, target.value, actor.role.value, correlation_id=self.correlation_id
			)

	def create_invoice(self, actor: ActorContext, payload: InvoiceCreate, db: Session) -> Invoice:
		"""Issue an invoice to a client. The external number is assigned on insert
		unless the admin supplies one."""
		self.require_role(actor, "create", "Invoice", Role.ADMIN)

		if payload.client_id is None:
			raise ValidationError("client_id", "is required", correlation_id=self.correlation_id)
		if payload.amount is None:
			raise ValidationError("amount", "is required", correlation_id=self.correlation_id)
		self._require_client(payload.client_id)
		if payload.job_id is not None:
			self._require_job(payload.job_id)

		if payload.external_number:
			if self.numbering.invoice_pattern.match(payload.external_number):
				raise ValidationError(
					"external_number",
					"numbers in the automatic format are reserved",
					correlation_id=self.correlation_id
				)
			if self.invoice_repo.get_by_external_number(payload.external_number):
				raise ConflictError(
					f"Invoice number {payload.external_number} already exists",
					error_code="DUPLICATE_EXTERNAL_NUMBER",
					correlation_id=self.correlation_id,
					details={"external_number": payload.external_number}
				)

		data: Dict[str, Any] = payload.model_dump()
		data["currency"] = payload.currency or settings.DEFAULT_CURRENCY
		data["status"] = InvoiceStatus.ISSUED.value

		def op():
			invoice = self.invoice_repo.create(data)
			self.numbering.assign_invoice_number(invoice)
			self.invoice_repo.db.flush()
			return invoice

		invoice = self.run_in_transaction(db, op)
		self.log_operation("create_invoice", invoice_id=invoice.id, external_number=invoice.external_number, client_id=invoice.client_id)
		return invoice

	def get_invoice(self, actor: ActorContext, invoice_id: int) -> Invoice:
		self.require_role(actor, "view", "Invoice", Role.CLIENT, Role.ADMIN)
		invoice = self._get_or_404(invoice_id)
		if actor.is_client and invoice.client_id != actor.id:
			raise self._forbid(actor, "view", invoice_id)
		return invoice

	def list_invoices(self, actor: ActorContext, params: InvoiceListParams) -> InvoicePage:
		self.require_role(actor, "list", "Invoice", Role.CLIENT, Role.ADMIN)
		filters: Dict[str, Any] = {
			"client_id": actor.id if actor.is_client else params.client_id,
			"status": params.status.value if params.status else None,
			"job_id": params.job_id,
		}
		limit = min(params.limit, settings.INVOICE_PAGE_LIMIT_MAX)
		q = params.q.strip() if params.q else None

		invoices, total = self.invoice_repo.search(filters, q, params.page, limit)
		self.log_operation("list_invoices", actor_id=actor.id, role=actor.role.value, total=total, page=params.page)
		return InvoicePage(
			meta=PageMeta(total=total, page=params.page, limit=limit),
			invoices=[InvoiceRead.model_validate(i) for i in invoices],
		)

	def patch_invoice(self, actor: ActorContext, invoice_id: int, changes: InvoicePatch, db: Session) -> Invoice:
		"""Admin edit. Status moves follow the transition table and amount and
		currency are frozen once the invoice is PAID."""
		self.require_role(actor, "update", "Invoice", Role.ADMIN)
		invoice = self._get_or_404(invoice_id)

		fields = changes.model_dump(exclude_unset=True)
		for key in NON_NULLABLE_PATCH_FIELDS:
			if key in fields and fields[key] is None:
				fields.pop(key)

		if "client_id" in fields and fields["client_id"] != invoice.client_id:
			self._require_client(fields["client_id"])
		if fields.get("job_id") is not None:
			self._require_job(fields["job_id"])

		if invoice.status == InvoiceStatus.PAID.value:
			amount_changed = "amount" in fields and Decimal(fields["amount"]) != Decimal(invoice.amount)
			currency_changed = "currency" in fields and fields["currency"] != invoice.currency
			if amount_changed or currency_changed:
				raise ConflictError(
					f"Invoice {invoice_id} is paid; amount and currency are frozen",
					error_code="INVOICE_PAID",
					correlation_id=self.correlation_id,
					details={"invoice_id": invoice_id},
					user_message="A paid invoice's amount cannot be changed."
				)

		if "status" in fields:
			target = InvoiceStatus(fields["status"])
			if target.value == invoice.status:
				fields.pop("status")
			else:
				self._transition(actor, invoice, target)
				fields["status"] = target.value
				if target == InvoiceStatus.PAID:
					fields["paid_at"] = datetime.now(timezone.utc)

		if not fields:
			return invoice

		invoice = self.run_in_transaction(db, lambda: self.invoice_repo.update(invoice_id, fields))
		self.log_operation("patch_invoice", invoice_id=invoice_id, fields=list(fields.keys()), status=invoice.status)
		return invoice

	def delete_invoice(self, actor: ActorContext, invoice_id: int, db: Session) -> None:
		self.require_role(actor, "delete", "Invoice", Role.ADMIN)
		self._get_or_404(invoice_id)
		self.run_in_transaction(db, lambda: self.invoice_repo.delete(invoice_id))
		self.log_operation("delete_invoice", invoice_id=invoice_id)

	def report_payment(self, actor: ActorContext, invoice_id: int, payment: PaymentReport, db: Session) -> Invoice:
		"""The owning client declares the invoice paid; an admin confirms later."""
		self.require_role(actor, "report payment for", "Invoice", Role.CLIENT)
		invoice = self._get_or_404(invoice_id)
		if invoice.client_id != actor.id:
			raise self._forbid(actor, "report payment for", invoice_id)
		self._transition(actor, invoice, InvoiceStatus.PENDING_CONFIRMATION)

		invoice = self.run_in_transaction(db, lambda: self.invoice_repo.update(invoice_id, {
			"status": InvoiceStatus.PENDING_CONFIRMATION.value,
			"payment_method": payment.method,
			"payment_note": payment.note,
			"payment_reported_at": datetime.now(timezone.utc),
		}))
		self.log_operation("report_payment", invoice_id=invoice_id, method=payment.method)
		return invoice

	def confirm_payment(self, actor: ActorContext, invoice_id: int, db: Session) -> Invoice:
		"""Mark a pending invoice PAID. A PAID invoice is returned unchanged."""
		self.require_role(actor, "confirm payment for", "Invoice", Role.ADMIN)
		invoice = self._get_or_404(invoice_id)
		if invoice.status == InvoiceStatus.PAID.value:
			self.log_operation("confirm_payment_noop", invoice_id=invoice_id)
			return invoice
		self._transition(actor, invoice, InvoiceStatus.PAID)

		invoice = self.run_in_transaction(db, lambda: self.invoice_repo.update(invoice_id, {
			"status": InvoiceStatus.PAID.value,
			"paid_at": datetime.now(timezone.utc),
		}))
		self.log_operation("confirm_payment", invoice_id=invoice_id)
		return invoice
