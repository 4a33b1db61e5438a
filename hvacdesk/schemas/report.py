from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .job import JobStatus
from .mixin import TimestampModel


class PhotoUpload(BaseModel):
	"""An uploaded photo, already read from the request."""
	filename: str = Field(..., min_length=1)
	content_type: Optional[str] = None
	data: bytes


class ReportPhotoRead(BaseModel):
	id: int
	report_id: int
	file_path: str
	original_name: Optional[str] = None
	url: Optional[str] = None

	class Config:
		from_attributes = True


class ReportRead(TimestampModel):
	id: int
	job_id: int
	technician_id: int
	description: Optional[str] = None
	photos: List[ReportPhotoRead] = []
	job_external_number: Optional[str] = None
	job_title: Optional[str] = None
	job_status: Optional[JobStatus] = None


class ReportDescriptionUpdate(BaseModel):
	description: Optional[str] = None


class ReportList(BaseModel):
	reports: List[ReportRead]


class PhotoList(BaseModel):
	report_id: int
	photos: List[ReportPhotoRead]
