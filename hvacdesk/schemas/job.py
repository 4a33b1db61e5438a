from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from .mixin import TimestampModel, PageMeta, blank_to_none


class JobStatus(str, Enum):
	WAITING = "WAITING"
	TO_ASSIGN = "TO_ASSIGN"
	ASSIGNED = "ASSIGNED"
	IN_PROGRESS = "IN_PROGRESS"
	DONE = "DONE"
	CANCELLED = "CANCELLED"


class JobCreate(BaseModel):
	# Required for admins; implied by identity for clients
	client_id: Optional[int] = None
	technician_id: Optional[int] = None
	service_type: Optional[str] = None
	title: Optional[str] = Field(default=None, max_length=255)
	description: Optional[str] = None
	priority: int = Field(default=2, ge=1, le=5)
	scheduled_date: Optional[date] = None
	address: Optional[str] = None

	@field_validator("title", "description", "address", "service_type")
	@classmethod
	def strip_blank(cls, v: Optional[str]) -> Optional[str]:
		return blank_to_none(v)


class JobUpdate(BaseModel):
	"""Partial update; only fields present in the request are applied."""
	client_id: Optional[int] = None
	technician_id: Optional[int] = None
	title: Optional[str] = Field(default=None, max_length=255)
	description: Optional[str] = None
	status: Optional[JobStatus] = None
	priority: Optional[int] = Field(default=None, ge=1, le=5)
	scheduled_date: Optional[date] = None
	address: Optional[str] = None
	completed_at: Optional[datetime] = None


class JobAssign(BaseModel):
	technician_id: Optional[int] = None


class JobRead(TimestampModel):
	id: int
	external_number: str
	client_id: int
	technician_id: Optional[int] = None
	service_type: Optional[str] = None
	title: Optional[str] = None
	description: Optional[str] = None
	status: JobStatus
	priority: int
	scheduled_date: Optional[date] = None
	address: Optional[str] = None
	completed_at: Optional[datetime] = None

	class Config:
		from_attributes = True


class JobListParams(BaseModel):
	status: Optional[JobStatus] = None
	technician_id: Optional[int] = None
	client_id: Optional[int] = None
	q: Optional[str] = None
	page: int = Field(default=1, ge=1)
	limit: int = Field(default=50, ge=1)
	sort: str = "created_at"
	order: str = "desc"


class JobPage(BaseModel):
	meta: PageMeta
	jobs: List[JobRead]


class ServiceTypeRead(BaseModel):
	code: str
	label: str
	default_title: str
	default_description: str
