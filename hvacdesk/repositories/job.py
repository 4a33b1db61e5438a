"""Job repository for job-related database operations."""

from typing import Optional, Dict, Any, List, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session

from hvacdesk.repositories.base import BaseRepository
from hvacdesk.db.models.job import Job
from hvacdesk.db.models.invoice import Invoice

SORTABLE_FIELDS = ("created_at", "scheduled_date", "priority", "id")


class JobRepository(BaseRepository[Job]):
	"""Repository for Job entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Job, correlation_id)

	def update_fields(self, job_id: int, fields: Dict[str, Any]) -> Optional[Job]:
		"""Update arbitrary job fields and return the job."""
		job = self.get_by_id(job_id)
		if not job:
			return None
		for k, v in fields.items():
			if hasattr(job, k):
				setattr(job, k, v)
		self.db.flush()
		self.db.refresh(job)
		self._log_operation("update_fields", job_id=job_id, fields=list(fields.keys()))
		return job

	def search(
		self,
		filters: Dict[str, Any],
		q: Optional[str],
		page: int,
		limit: int,
		sort: str = "created_at",
		order: str = "desc",
	) -> Tuple[List[Job], int]:
		"""Filtered, sorted page of jobs.

		Unknown sort fields fall back to created_at; ties are broken by id so
		pages are stable.
		"""
		query = self._apply_filters(self.db.query(self.model), filters)
		if q:
			pattern = f"%{q}%"
			query = query.filter(or_(self.model.external_number.ilike(pattern), self.model.title.ilike(pattern)))

		column = getattr(self.model, sort if sort in SORTABLE_FIELDS else "created_at")
		if order == "asc":
			query = query.order_by(column.asc(), self.model.id.asc())
		else:
			query = query.order_by(column.desc(), self.model.id.desc())

		return self.paginate(query, page, limit)

	def detach_invoices(self, job_id: int) -> int:
		"""Clear job_id on invoices that reference the job."""
		count = (
			self.db.query(Invoice)
			.filter(Invoice.job_id == job_id)
			.update({Invoice.job_id: None}, synchronize_session=False)
		)
		self._log_operation("detach_invoices", job_id=job_id, count=count)
		return count
