from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TimestampModel(BaseModel):
	created_at: datetime
	updated_at: datetime


class PageMeta(BaseModel):
	total: int
	page: int
	limit: int


def blank_to_none(v: Optional[str]) -> Optional[str]:
	if v is None:
		return None
	v = v.strip()
	return v or None


class ErrorBody(BaseModel):
	"""Body of every non-2xx response rendered from a ServiceError."""
	error_code: str
	message: str
	severity: str
	category: str
	http_status: int
	correlation_id: Optional[str] = None
