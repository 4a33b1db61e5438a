"""Job registry: creation, reads, status changes, assignment and deletion.

Every public method takes the acting user's ``ActorContext`` and fails fast
with a ``ServiceError`` subclass. Status changes are checked against the
transition table in ``hvacdesk.services.transitions``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from hvacdesk.core.catalog import get_service_type
from hvacdesk.core.config import settings
from hvacdesk.db.models.job import Job
from hvacdesk.repositories.job import JobRepository
from hvacdesk.repositories.report import ReportPhotoRepository
from hvacdesk.repositories.user import UserRepository
from hvacdesk.schemas.actor import ActorContext, Role
from hvacdesk.schemas.job import JobCreate, JobUpdate, JobListParams, JobPage, JobRead, JobStatus
from hvacdesk.schemas.mixin import PageMeta
from hvacdesk.services.base import BaseService
from hvacdesk.services.exceptions import (
	ConflictError,
	ForbiddenError,
	InvalidTransitionError,
	JobNotFoundError,
	ValidationError,
)
from hvacdesk.services.file_services import FileService
from hvacdesk.services.numbering_services import NumberingService
from hvacdesk.services.transitions import (
	STAFFED_JOB_STATUSES,
	TECHNICIAN_TARGETS,
	TERMINAL_JOB_STATUSES,
	can_move_job,
)

# Statuses a job may only hold while no technician is set
UNSTAFFED_OPEN_STATUSES = frozenset({JobStatus.WAITING, JobStatus.TO_ASSIGN})

# Columns that cannot be cleared through an update
NON_NULLABLE_UPDATE_FIELDS = ("status", "priority")


class JobService(BaseService):
	def __init__(
		self,
		job_repo: JobRepository,
		user_repo: UserRepository,
		photo_repo: ReportPhotoRepository,
		numbering: NumberingService,
		file_service: FileService,
		correlation_id: Optional[str] = None,
	):
		super().__init__(correlation_id)
		self._set_repositories(job_repo=job_repo, user_repo=user_repo, photo_repo=photo_repo)
		self.numbering = numbering
		self.file_service = file_service

	# ------------------------------------------------------------------
	# helpers
	# ------------------------------------------------------------------

	def _get_or_404(self, job_id: int) -> Job:
		job = self.job_repo.get_by_id(job_id)
		if not job:
			raise JobNotFoundError(job_id, correlation_id=self.correlation_id)
		return job

	def _forbid(self, actor: ActorContext, action: str, job_id: Optional[int] = None) -> ForbiddenError:
		self.log_operation("forbidden", action=action, job_id=job_id, actor_id=actor.id, role=actor.role.value)
		return ForbiddenError(
			action, "Job", job_id, actor_id=actor.id, role=actor.role.value, correlation_id=self.correlation_id
		)

	def _require_user_with_role(self, user_id: int, role: Role, field: str) -> None:
		stored = self.user_repo.get_role(user_id)
		if stored is None:
			raise ValidationError(field, f"user {user_id} does not exist", correlation_id=self.correlation_id)
		if stored != role.value:
			raise ValidationError(field, f"user {user_id} is not a {role.value.lower()}", correlation_id=self.correlation_id)

	def can_view(self, actor: ActorContext, job: Job) -> bool:
		if actor.is_admin:
			return True
		if actor.is_client:
			return job.client_id == actor.id
		return job.technician_id == actor.id

	# ------------------------------------------------------------------
	# operations
	# ------------------------------------------------------------------

	def create_job(self, actor: ActorContext, payload: JobCreate, db: Session) -> Job:
		"""Create a job and give it its external number in the same transaction.

		Clients create jobs for themselves (status TO_ASSIGN). Admins create
		jobs for any client; supplying a technician starts the job ASSIGNED,
		otherwise WAITING.
		"""
		self.require_role(actor, "create", "Job", Role.CLIENT, Role.ADMIN)

		data: Dict[str, Any] = payload.model_dump(exclude={"client_id", "technician_id"})

		if actor.is_client:
			if payload.client_id is not None and payload.client_id != actor.id:
				raise self._forbid(actor, "create a job for another client")
			if payload.technician_id is not None:
				raise self._forbid(actor, "assign a technician")
			data["client_id"] = actor.id
			data["technician_id"] = None
			data["status"] = JobStatus.TO_ASSIGN.value
		else:
			if payload.client_id is None:
				raise ValidationError("client_id", "is required", correlation_id=self.correlation_id)
			self._require_user_with_role(payload.client_id, Role.CLIENT, "client_id")
			if payload.technician_id is not None:
				self._require_user_with_role(payload.technician_id, Role.TECHNICIAN, "technician_id")
			data["client_id"] = payload.client_id
			data["technician_id"] = payload.technician_id
			data["status"] = (JobStatus.ASSIGNED if payload.technician_id else JobStatus.WAITING).value

		if payload.service_type:
			service = get_service_type(payload.service_type)
			if service is None:
				raise ValidationError("service_type", f"unknown service type '{payload.service_type}'", correlation_id=self.correlation_id)
			data["service_type"] = service.code
			data["title"] = data.get("title") or service.default_title
			data["description"] = data.get("description") or service.default_description

		if not data.get("title"):
			raise ValidationError("title", "is required", correlation_id=self.correlation_id)

		def op():
			job = self.job_repo.create(data)
			self.numbering.assign_job_number(job)
			self.job_repo.db.flush()
			return job

		job = self.run_in_transaction(db, op)
		self.log_operation("create_job", job_id=job.id, external_number=job.external_number, actor_id=actor.id, status=job.status)
		return job

	def get_job(self, actor: ActorContext, job_id: int) -> Job:
		job = self._get_or_404(job_id)
		if not self.can_view(actor, job):
			raise self._forbid(actor, "view", job_id)
		return job

	def update_job(self, actor: ActorContext, job_id: int, changes: JobUpdate, db: Session) -> Job:
		"""Apply a partial update.

		Admins may change any field, with status moves checked against the
		transition table. The assigned technician may change only the status,
		and only to IN_PROGRESS, DONE or CANCELLED.
		"""
		if actor.is_client:
			raise self._forbid(actor, "update", job_id)

		job = self._get_or_404(job_id)
		fields = changes.model_dump(exclude_unset=True)

		if actor.is_technician:
			fields = self._technician_fields(actor, job, fields)
		else:
			fields = self._admin_fields(actor, job, fields)

		if not fields:
			self.log_operation("update_job_noop", job_id=job_id, actor_id=actor.id)
			return job

		job = self.run_in_transaction(db, lambda: self.job_repo.update_fields(job_id, fields))
		self.log_operation("update_job", job_id=job_id, actor_id=actor.id, fields=list(fields.keys()), status=job.status)
		return job

	def _technician_fields(self, actor: ActorContext, job: Job, fields: Dict[str, Any]) -> Dict[str, Any]:
		if job.technician_id != actor.id:
			raise self._forbid(actor, "update", job.id)
		if set(fields) - {"status"}:
			raise self._forbid(actor, "change fields other than status on", job.id)
		if fields.get("status") is None:
			raise ValidationError("status", "is required", correlation_id=self.correlation_id)

		current = JobStatus(job.status)
		target = JobStatus(fields["status"])
		if current in TERMINAL_JOB_STATUSES:
			raise InvalidTransitionError("Job", job.id, current.value, target.value, actor.role.value, correlation_id=self.correlation_id)
		if target not in TECHNICIAN_TARGETS:
			raise ValidationError(
				"status",
				"technicians may only set " + ", ".join(sorted(s.value for s in TECHNICIAN_TARGETS)),
				correlation_id=self.correlation_id
			)
		if target == current:
			return {}
		if not can_move_job(Role.TECHNICIAN, current, target):
			raise InvalidTransitionError("Job", job.id, current.value, target.value, actor.role.value, correlation_id=self.correlation_id)

		out: Dict[str, Any] = {"status": target.value}
		if target == JobStatus.DONE:
			out["completed_at"] = datetime.now(timezone.utc)
		return out

	def _admin_fields(self, actor: ActorContext, job: Job, fields: Dict[str, Any]) -> Dict[str, Any]:
		for key in NON_NULLABLE_UPDATE_FIELDS:
			if key in fields and fields[key] is None:
				fields.pop(key)

		if "client_id" in fields:
			if fields["client_id"] != job.client_id:
				raise ConflictError(
					f"Job {job.id}: client_id cannot be changed",
					error_code="CLIENT_IMMUTABLE",
					correlation_id=self.correlation_id,
					details={"job_id": job.id, "client_id": job.client_id},
					user_message="The client of a job cannot be changed."
				)
			fields.pop("client_id")

		if fields.get("technician_id") is not None:
			self._require_user_with_role(fields["technician_id"], Role.TECHNICIAN, "technician_id")

		current = JobStatus(job.status)
		target = JobStatus(fields["status"]) if "status" in fields else current
		if target != current and not can_move_job(Role.ADMIN, current, target):
			raise InvalidTransitionError("Job", job.id, current.value, target.value, actor.role.value, correlation_id=self.correlation_id)

		technician_id = fields.get("technician_id", job.technician_id)
		if technician_id is not None and target in UNSTAFFED_OPEN_STATUSES:
			# a staffed job is at least ASSIGNED, as with create_job and assign_technician
			target = JobStatus.ASSIGNED
			fields["status"] = target.value
		if target in STAFFED_JOB_STATUSES and technician_id is None:
			raise ValidationError(
				"technician_id",
				f"a technician is required while the job is {target.value}",
				correlation_id=self.correlation_id
			)

		if "status" in fields:
			if target == current:
				fields.pop("status")
			else:
				fields["status"] = target.value
				if target == JobStatus.DONE and fields.get("completed_at") is None:
					fields["completed_at"] = datetime.now(timezone.utc)
		return fields

	def assign_technician(self, actor: ActorContext, job_id: int, technician_id: Optional[int], db: Session) -> Job:
		"""Set the technician and force status ASSIGNED, whatever the prior status."""
		self.require_role(actor, "assign a technician to", "Job", Role.ADMIN)
		if technician_id is None:
			raise ValidationError("technician_id", "is required", correlation_id=self.correlation_id)

		job = self._get_or_404(job_id)
		self._require_user_with_role(technician_id, Role.TECHNICIAN, "technician_id")
		previous = job.status

		job = self.run_in_transaction(db, lambda: self.job_repo.update_fields(job_id, {
			"technician_id": technician_id,
			"status": JobStatus.ASSIGNED.value,
			"completed_at": None,
		}))
		self.log_operation("assign_technician", job_id=job_id, technician_id=technician_id, previous_status=previous)
		return job

	def delete_job(self, actor: ActorContext, job_id: int, db: Session) -> None:
		"""Delete a job with its reports and photos; invoices keep existing without it."""
		self.require_role(actor, "delete", "Job", Role.ADMIN)
		self._get_or_404(job_id)
		keys = self.photo_repo.keys_for_job(job_id)

		def op():
			self.job_repo.detach_invoices(job_id)
			return self.job_repo.delete(job_id)

		self.run_in_transaction(db, op)
		removed = self.file_service.delete_quietly(keys)
		self.log_operation("delete_job", job_id=job_id, photos=len(keys), files_removed=removed)

	def list_jobs(self, actor: ActorContext, params: JobListParams) -> JobPage:
		"""Role-scoped, filtered and paginated job listing."""
		filters: Dict[str, Any] = {
			"status": params.status.value if params.status else None,
			"client_id": params.client_id,
			"technician_id": params.technician_id,
		}
		# Party filters are admin-only; other roles are pinned to their own jobs
		if actor.is_client:
			filters["client_id"] = actor.id
			filters["technician_id"] = None
		elif actor.is_technician:
			filters["technician_id"] = actor.id
			filters["client_id"] = None

		limit = min(params.limit, settings.JOB_PAGE_LIMIT_MAX)
		order = "asc" if params.order.lower() == "asc" else "desc"
		q = params.q.strip() if params.q else None

		jobs, total = self.job_repo.search(filters, q, params.page, limit, params.sort, order)
		self.log_operation("list_jobs", actor_id=actor.id, role=actor.role.value, total=total, page=params.page)
		return JobPage(
			meta=PageMeta(total=total, page=params.page, limit=limit),
			jobs=[JobRead.model_validate(j) for j in jobs],
		)
