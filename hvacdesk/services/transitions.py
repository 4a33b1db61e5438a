"""Status transition tables for jobs and invoices.

Each table maps ``(role, from_status)`` to the set of statuses that role may
move a record into. Anything not listed is rejected. Re-applying the current
status is not a transition and is handled by callers as a no-op.
"""

from typing import Dict, FrozenSet, Tuple

from hvacdesk.schemas.actor import Role
from hvacdesk.schemas.job import JobStatus
from hvacdesk.schemas.invoice import InvoiceStatus


JOB_FLOW = (
	JobStatus.WAITING,
	JobStatus.TO_ASSIGN,
	JobStatus.ASSIGNED,
	JobStatus.IN_PROGRESS,
	JobStatus.DONE,
)

TERMINAL_JOB_STATUSES: FrozenSet[JobStatus] = frozenset({JobStatus.DONE, JobStatus.CANCELLED})

# technician_id must be set while a job sits in one of these
STAFFED_JOB_STATUSES: FrozenSet[JobStatus] = frozenset({
	JobStatus.ASSIGNED,
	JobStatus.IN_PROGRESS,
	JobStatus.DONE,
})

TECHNICIAN_TARGETS: FrozenSet[JobStatus] = frozenset({
	JobStatus.IN_PROGRESS,
	JobStatus.DONE,
	JobStatus.CANCELLED,
})


def _admin_job_transitions() -> Dict[Tuple[Role, JobStatus], FrozenSet[JobStatus]]:
	table = {}
	for idx, status in enumerate(JOB_FLOW):
		if status in TERMINAL_JOB_STATUSES:
			continue
		forward = set(JOB_FLOW[idx + 1:])
		forward.add(JobStatus.CANCELLED)
		table[(Role.ADMIN, status)] = frozenset(forward)
	return table


JOB_TRANSITIONS: Dict[Tuple[Role, JobStatus], FrozenSet[JobStatus]] = {
	**_admin_job_transitions(),
	(Role.TECHNICIAN, JobStatus.ASSIGNED): TECHNICIAN_TARGETS,
	(Role.TECHNICIAN, JobStatus.IN_PROGRESS): TECHNICIAN_TARGETS - {JobStatus.IN_PROGRESS},
}

INVOICE_TRANSITIONS: Dict[Tuple[Role, InvoiceStatus], FrozenSet[InvoiceStatus]] = {
	(Role.CLIENT, InvoiceStatus.ISSUED): frozenset({InvoiceStatus.PENDING_CONFIRMATION}),
	(Role.ADMIN, InvoiceStatus.ISSUED): frozenset({InvoiceStatus.PENDING_CONFIRMATION}),
	(Role.ADMIN, InvoiceStatus.PENDING_CONFIRMATION): frozenset({InvoiceStatus.PAID}),
}


def allowed_job_targets(role: Role, current: JobStatus) -> FrozenSet[JobStatus]:
	return JOB_TRANSITIONS.get((role, current), frozenset())


def can_move_job(role: Role, current: JobStatus, target: JobStatus) -> bool:
	return target in allowed_job_targets(role, current)


def allowed_invoice_targets(role: Role, current: InvoiceStatus) -> FrozenSet[InvoiceStatus]:
	return INVOICE_TRANSITIONS.get((role, current), frozenset())


def can_move_invoice(role: Role, current: InvoiceStatus, target: InvoiceStatus) -> bool:
	return target in allowed_invoice_targets(role, current)
