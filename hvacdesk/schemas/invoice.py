from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from .mixin import PageMeta, blank_to_none


class InvoiceStatus(str, Enum):
	ISSUED = "ISSUED"
	PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
	PAID = "PAID"


def _normalize_currency(v: Optional[str]) -> Optional[str]:
	if v is None:
		return None
	v = v.strip().upper()
	if len(v) != 3 or not v.isalpha():
		raise ValueError("Currency must be a 3-letter code")
	return v


class InvoiceCreate(BaseModel):
	client_id: Optional[int] = None
	job_id: Optional[int] = None
	amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
	currency: Optional[str] = None
	description: Optional[str] = None
	due_date: Optional[date] = None
	external_number: Optional[str] = Field(default=None, max_length=50)

	@field_validator("currency")
	@classmethod
	def validate_currency(cls, v):
		return _normalize_currency(v)

	@field_validator("description", "external_number")
	@classmethod
	def strip_blank(cls, v):
		return blank_to_none(v)


class InvoicePatch(BaseModel):
	"""Partial update; only fields present in the request are applied."""
	client_id: Optional[int] = None
	job_id: Optional[int] = None
	amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
	currency: Optional[str] = None
	description: Optional[str] = None
	status: Optional[InvoiceStatus] = None
	due_date: Optional[date] = None

	@field_validator("currency")
	@classmethod
	def validate_currency(cls, v):
		return _normalize_currency(v)


class PaymentReport(BaseModel):
	method: str = Field(..., min_length=1, max_length=64, description="e.g. BANK_TRANSFER, CARD, CASH")
	note: Optional[str] = Field(default=None, max_length=2000)

	@field_validator("method")
	@classmethod
	def validate_method(cls, v: str) -> str:
		v = v.strip()
		if not v:
			raise ValueError("Payment method cannot be blank")
		return v.upper()


class InvoiceRead(BaseModel):
	id: int
	external_number: str
	client_id: int
	job_id: Optional[int] = None
	amount: Decimal
	currency: str
	description: Optional[str] = None
	status: InvoiceStatus
	issued_at: datetime
	due_date: Optional[date] = None
	paid_at: Optional[datetime] = None
	updated_at: datetime
	payment_method: Optional[str] = None
	payment_note: Optional[str] = None
	payment_reported_at: Optional[datetime] = None

	class Config:
		from_attributes = True


class InvoiceListParams(BaseModel):
	client_id: Optional[int] = None
	status: Optional[InvoiceStatus] = None
	job_id: Optional[int] = None
	q: Optional[str] = None
	page: int = Field(default=1, ge=1)
	limit: int = Field(default=50, ge=1)


class InvoicePage(BaseModel):
	meta: PageMeta
	invoices: List[InvoiceRead]
