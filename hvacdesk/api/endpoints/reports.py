from typing import List, Optional

from fastapi import Depends, File, UploadFile
from sqlalchemy.orm import Session

from hvacdesk.api.router import create_router
from hvacdesk.api.dependencies.auth import get_current_actor
from hvacdesk.api.dependencies.database import get_db
from hvacdesk.api.dependencies.services import get_report_service
from hvacdesk.api.uploads import read_photo_uploads
from hvacdesk.schemas.actor import ActorContext
from hvacdesk.schemas.report import PhotoList, ReportDescriptionUpdate, ReportList, ReportRead
from hvacdesk.services.report_services import ReportService

router = create_router(name="reports")


@router.get("", response_model=ReportList)
def list_reports(
	technician_id: Optional[int] = None,
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	"""
	Technicians get their own reports; admins get all, optionally for one technician.
	"""
	return report_service.list_reports_for_technician(actor, technician_id)


@router.delete("/photos/{photo_id}", response_model=PhotoList)
def delete_photo(
	photo_id: int,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	return report_service.delete_photo(actor, photo_id, db)


@router.get("/{report_id}", response_model=ReportRead)
def get_report(
	report_id: int,
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	return report_service.get_report(actor, report_id)


@router.patch("/{report_id}", response_model=ReportRead)
def update_report_description(
	report_id: int,
	payload: ReportDescriptionUpdate,
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	return report_service.update_description(actor, report_id, payload.description, db)


@router.post("/{report_id}/photos", status_code=201, response_model=PhotoList)
def add_photos(
	report_id: int,
	photos: List[UploadFile] = File(...),
	db: Session = Depends(get_db),
	actor: ActorContext = Depends(get_current_actor),
	report_service: ReportService = Depends(get_report_service),
):
	return report_service.add_photos(actor, report_id, read_photo_uploads(photos), db)
