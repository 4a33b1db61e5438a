from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from hvacdesk.db.models.request_log import RequestLog

# Column -> max length for the string columns of request_logs
_STRING_LIMITS = {
	"correlation_id": 64,
	"method": 16,
	"path_template": 512,
	"raw_path": 512,
	"client_ip": 64,
	"auth_type": 16,
	"actor_role": 16,
	"provider": 64,
	"operation": 64,
	"target": 256,
	"error_code": 64,
}

INBOUND_COLUMNS = (
	"correlation_id", "method", "path_template", "raw_path", "status_code",
	"client_ip", "auth_type", "actor_id", "actor_role",
)
OUTBOUND_COLUMNS = ("correlation_id", "status_code", "provider", "operation", "target", "error_code")


class RequestLogRepository:
	"""Write-only telemetry inserts. Each insert commits on its own session."""

	def __init__(self, db: Session):
		self.db = db

	@staticmethod
	def _clip(column: str, value: Any) -> Any:
		limit = _STRING_LIMITS.get(column)
		if limit is None or value is None:
			return value
		return str(value)[:limit]

	def _insert(self, direction: str, columns, payload: Dict[str, Any]) -> RequestLog:
		values = {c: self._clip(c, payload.get(c)) for c in columns}
		values["correlation_id"] = values.get("correlation_id") or "unknown"
		log = RequestLog(direction=direction, duration_ms=int(payload.get("duration_ms") or 0), **values)
		self.db.add(log)
		self.db.commit()
		return log

	def insert_inbound(self, payload: Dict[str, Any]) -> RequestLog:
		return self._insert("inbound", INBOUND_COLUMNS, payload)

	def insert_outbound(self, payload: Dict[str, Any]) -> RequestLog:
		return self._insert("outbound", OUTBOUND_COLUMNS, payload)

	def for_correlation_id(self, correlation_id: str, direction: Optional[str] = None):
		"""All rows of one request, inbound first, in insertion order."""
		query = self.db.query(RequestLog).filter(RequestLog.correlation_id == correlation_id)
		if direction:
			query = query.filter(RequestLog.direction == direction)
		return query.order_by(RequestLog.direction, RequestLog.id).all()
