"""Invoice repository for billing records."""

from typing import Optional, Dict, Any, List, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session

from hvacdesk.repositories.base import BaseRepository
from hvacdesk.db.models.invoice import Invoice


class InvoiceRepository(BaseRepository[Invoice]):
	"""Repository for Invoice entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Invoice, correlation_id)

	def get_by_external_number(self, external_number: str) -> Optional[Invoice]:
		result = self.db.query(self.model).filter(self.model.external_number == external_number).first()
		self._log_operation("get_by_external_number", external_number=external_number, found=result is not None)
		return result

	def search(self, filters: Dict[str, Any], q: Optional[str], page: int, limit: int) -> Tuple[List[Invoice], int]:
		"""Newest-first page of invoices matching the filters."""
		query = self._apply_filters(self.db.query(self.model), filters)
		if q:
			pattern = f"%{q}%"
			query = query.filter(or_(self.model.external_number.ilike(pattern), self.model.description.ilike(pattern)))
		query = query.order_by(self.model.issued_at.desc(), self.model.id.desc())
		return self.paginate(query, page, limit)
