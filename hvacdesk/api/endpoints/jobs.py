from typing import List, Optional

from fastapi import Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from hvacdesk.api.router import create_router
from hvacdesk.api.dependencies.auth import get_current_actor
from hvacdesk.api.dependencies.database import get_db
from hvacdesk.api.dependencies.services import get_job_service, get_report_service
from hvacdesk.core.config import settings
from hvacdesk.api.uploads import read_photo_uploads
from hvacdesk.schemas.actor import ActorContext
from hvacdesk.schemas.job import JobAssign, JobCreate, JobListParams, JobPage, JobRead, JobStatus, JobUpdate
from hvacdesk.schemas.report import ReportList, ReportRead
from hvacdesk.services.job_services import JobService
from hvacdesk.services.report_services import ReportService

router = create_router(name="jobs")


@router.post("", status_code=201, response_model=JobRead)
def create_job(
	payload: JobCreate,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	job_service: JobService = Depends(get_job_service),
):
	"""
	Create a job. Clients create jobs for themselves; admins for any client.
	"""
	return job_service.create_job(actor, payload, db)


@router.get("", response_model=JobPage)
def list_jobs(
	status: Optional[JobStatus] = None,
	technician_id: Optional[int] = None,
	client_id: Optional[int] = None,
	q: Optional[str] = Query(default=None, max_length=100),
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1),
	sort: str = "created_at",
	order: str = "desc",
	actor: ActorContext = Depends(get_current_actor),
	job_service: JobService = Depends(get_job_service),
):
	params = JobListParams(
		status=status,
		technician_id=technician_id,
		client_id=client_id,
		q=q,
		page=page,
		limit=limit,
		sort=sort,
		order=order,
	)
	return job_service.list_jobs(actor, params)


@router.get("/{job_id}", response_model=JobRead)
def get_job(
	job_id: int,
	actor: ActorContext = Depends(get_current_actor),
	job_service: JobService = Depends(get_job_service),
):
	return job_service.get_job(actor, job_id)


@router.patch("/{job_id}", response_model=JobRead)
def update_job(
	job_id: int,
	changes: JobUpdate,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	job_service: JobService = Depends(get_job_service),
):
	"""
	Admins may change any field; the assigned technician may change the status only.
	"""
	return job_service.update_job(actor, job_id, changes, db)


@router.post("/{job_id}/assign", response_model=JobRead)
def assign_technician(
	job_id: int,
	payload: JobAssign,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	job_service: JobService = Depends(get_job_service),
):
	return job_service.assign_technician(actor, job_id, payload.technician_id, db)


@router.delete("/{job_id}", status_code=204)
def delete_job(
	job_id: int,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	job_service: JobService = Depends(get_job_service),
):
	job_service.delete_job(actor, job_id, db)


@router.get("/{job_id}/reports", response_model=ReportList)
def list_job_reports(
	job_id: int,
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	return report_service.list_reports_for_job(actor, job_id)


@router.post("/{job_id}/reports", status_code=201, response_model=ReportRead)
def create_report(
	job_id: int,
	description: Optional[str] = Form(default=None),
	photos: Optional[List[UploadFile]] = File(default=None),
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	"""
	File a completion report with an optional description and photos.
	"""
	return report_service.create_report(actor, job_id, description, read_photo_uploads(photos), db)
