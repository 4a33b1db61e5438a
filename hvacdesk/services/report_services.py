"""Report registry: technician completion reports and their photos."""

from __future__ import annotations

from typing import Optional, List

from sqlalchemy.orm import Session

from hvacdesk.db.models.job import Job
from hvacdesk.db.models.report import Report, ReportPhoto
from hvacdesk.repositories.job import JobRepository
from hvacdesk.repositories.report import ReportRepository, ReportPhotoRepository
from hvacdesk.schemas.actor import ActorContext, Role
from hvacdesk.schemas.mixin import blank_to_none
from hvacdesk.schemas.report import PhotoList, PhotoUpload, ReportList, ReportPhotoRead, ReportRead
from hvacdesk.services.base import BaseService
from hvacdesk.services.exceptions import (
    ForbiddenError,
    JobNotFoundError,
    PhotoNotFoundError,
    ReportNotFoundError,
    ValidationError,
)
from hvacdesk.services.file_services import FileService


class ReportService(BaseService):
    """Service for technician reports and photo attachments.

    Ownership rules:
    - A report is created by the technician currently assigned to the job
    - Only that technician may edit the report or its photos afterwards,
      even if the job is later reassigned
    - Photo access is always checked against the parent report

    Binaries are written before the rows that reference them; when the
    database write fails the stored files are removed again.
    """

    def __init__(
        self,
        report_repo: ReportRepository,
        photo_repo: ReportPhotoRepository,
        job_repo: JobRepository,
        file_service: FileService,
        correlation_id: Optional[str] = None
    ):
        """Initialize report service with repositories and file service.

        Args:
            report_repo: Report repository
            photo_repo: Report photo repository
            job_repo: Job repository, for assignment checks
            file_service: Validates and stores photo binaries
            correlation_id: Optional request correlation ID for logging
        """
        super().__init__(correlation_id)
        self._set_repositories(report_repo=report_repo, photo_repo=photo_repo, job_repo=job_repo)
        self.file_service = file_service

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _forbid(self, actor: ActorContext, action: str, resource_type: str, resource_id: Optional[int]) -> ForbiddenError:
        self.log_operation("forbidden", action=action, resource_type=resource_type, resource_id=resource_id, actor_id=actor.id)
        return ForbiddenError(
            action, resource_type, resource_id, actor_id=actor.id, role=actor.role.value, correlation_id=self.correlation_id
        )

    def _get_job(self, job_id: int) -> Job:
        job = self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id, correlation_id=self.correlation_id)
        return job

    def _get_report(self, report_id: int) -> Report:
        report = self.report_repo.get_with_photos(report_id)
        if not report:
            raise ReportNotFoundError(report_id, correlation_id=self.correlation_id)
        return report

    def _get_owned_report(self, actor: ActorContext, report_id: int, action: str) -> Report:
        self.require_role(actor, action, "Report", Role.TECHNICIAN)
        report = self._get_report(report_id)
        if report.technician_id != actor.id:
            raise self._forbid(actor, action, "Report", report_id)
        return report

    def _photo_read(self, photo: ReportPhoto) -> ReportPhotoRead:
        return ReportPhotoRead(
            id=photo.id,
            report_id=photo.report_id,
            file_path=photo.file_path,
            original_name=photo.original_name,
            url=self.file_service.public_url(photo.file_path),
        )

    def _report_read(self, report: Report) -> ReportRead:
        job = report.job
        return ReportRead(
            id=report.id,
            job_id=report.job_id,
            technician_id=report.technician_id,
            description=report.description,
            created_at=report.created_at,
            updated_at=report.updated_at,
            photos=[self._photo_read(p) for p in report.photos],
            job_external_number=job.external_number if job else None,
            job_title=job.title if job else None,
            job_status=job.status if job else None,
        )

    def _store_and_insert(self, db: Session, report_id_or_new, photos: List[PhotoUpload]) -> int:
        """Store binaries and insert their rows in one transaction.

        ``report_id_or_new`` is either an existing report id or a callable that
        inserts the report and returns it.
        """
        stored: List[dict] = []

        def op():
            if callable(report_id_or_new):
                report_id = report_id_or_new().id
            else:
                report_id = report_id_or_new
            if photos:
                stored.extend(self.file_service.store_report_photos(report_id, photos))
                self.photo_repo.add_many(report_id, stored)
            return report_id

        try:
            return self.run_in_transaction(db, op)
        except Exception:
            if stored:
                self.file_service.delete_quietly(s["file_path"] for s in stored)
            raise

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def create_report(
        self,
        actor: ActorContext,
        job_id: int,
        description: Optional[str],
        photos: List[PhotoUpload],
        db: Session
    ) -> ReportRead:
        """File a report on a job assigned to the calling technician.

        Args:
            actor: Calling technician
            job_id: Job the report is about
            description: Free text, may be empty when photos are attached
            photos: Uploaded images, may be empty when a description is given
            db: Database session

        Returns:
            The new report with its photos

        Raises:
            ForbiddenError: Caller is not the job's assigned technician
            ValidationError: Neither description nor photos, or a bad photo
        """
        self.require_role(actor, "create", "Report", Role.TECHNICIAN)
        job = self._get_job(job_id)
        if job.technician_id != actor.id:
            raise self._forbid(actor, "report on", "Job", job_id)

        description = blank_to_none(description)
        if description is None and not photos:
            raise ValidationError(
                field="description",
                message="a description or at least one photo is required",
                correlation_id=self.correlation_id
            )
        self.file_service.validate_photos(photos)

        def insert_report():
            return self.report_repo.create({
                "job_id": job_id,
                "technician_id": actor.id,
                "description": description,
            })

        report_id = self._store_and_insert(db, insert_report, photos)
        self.log_operation("create_report", report_id=report_id, job_id=job_id, photos=len(photos))
        return self._report_read(self._get_report(report_id))

    def get_report(self, actor: ActorContext, report_id: int) -> ReportRead:
        report = self._get_report(report_id)
        allowed = (
            actor.is_admin
            or (actor.is_technician and report.technician_id == actor.id)
            or (actor.is_client and report.job is not None and report.job.client_id == actor.id)
        )
        if not allowed:
            raise self._forbid(actor, "view", "Report", report_id)
        return self._report_read(report)

    def update_description(self, actor: ActorContext, report_id: int, description: Optional[str], db: Session) -> ReportRead:
        report = self._get_owned_report(actor, report_id, "edit")
        description = blank_to_none(description)
        if description is None and not report.photos:
            raise ValidationError(
                field="description",
                message="cannot be empty on a report without photos",
                correlation_id=self.correlation_id
            )

        self.run_in_transaction(db, lambda: self.report_repo.update(report_id, {"description": description}))
        self.log_operation("update_description", report_id=report_id)
        return self._report_read(self._get_report(report_id))

    def add_photos(self, actor: ActorContext, report_id: int, photos: List[PhotoUpload], db: Session) -> PhotoList:
        """Append photos to an existing report."""
        self._get_owned_report(actor, report_id, "add photos to")
        if not photos:
            raise ValidationError(field="photos", message="at least one photo is required", correlation_id=self.correlation_id)
        self.file_service.validate_photos(photos)

        self._store_and_insert(db, report_id, photos)
        self.log_operation("add_photos", report_id=report_id, count=len(photos))
        return self.list_photos(report_id)

    def delete_photo(self, actor: ActorContext, photo_id: int, db: Session) -> PhotoList:
        """Remove the stored binary (best-effort) and then the photo row.

        Returns:
            The photos that remain on the parent report
        """
        self.require_role(actor, "delete", "Photo", Role.TECHNICIAN)
        photo = self.photo_repo.get_by_id(photo_id)
        if not photo:
            raise PhotoNotFoundError(photo_id, correlation_id=self.correlation_id)
        report = self.report_repo.get_by_id(photo.report_id)
        if report is None or report.technician_id != actor.id:
            raise self._forbid(actor, "delete", "Photo", photo_id)

        report_id = report.id
        self.file_service.delete_quietly([photo.file_path])
        self.run_in_transaction(db, lambda: self.photo_repo.delete(photo_id))
        self.log_operation("delete_photo", photo_id=photo_id, report_id=report_id)
        return self.list_photos(report_id)

    def list_photos(self, report_id: int) -> PhotoList:
        photos = self.photo_repo.list_for_report(report_id)
        return PhotoList(report_id=report_id, photos=[self._photo_read(p) for p in photos])

    def list_reports_for_job(self, actor: ActorContext, job_id: int) -> ReportList:
        """Reports on a job.

        Admins, the job's client and its assigned technician see every report.
        A technician who has since been replaced still sees the reports they
        authored on the job.
        """
        job = self._get_job(job_id)
        reports = self.report_repo.list_for_job(job_id)
        if actor.is_technician and job.technician_id != actor.id:
            reports = [r for r in reports if r.technician_id == actor.id]
            allowed = bool(reports)
        else:
            allowed = actor.is_admin or (actor.is_client and job.client_id == actor.id) or actor.is_technician
        if not allowed:
            raise self._forbid(actor, "list reports of", "Job", job_id)

        return ReportList(reports=[self._report_read(r) for r in reports])

    def list_reports_for_technician(self, actor: ActorContext, technician_id: Optional[int] = None) -> ReportList:
        """A technician's own reports; admins see all or filter by technician."""
        self.require_role(actor, "list", "Report", Role.TECHNICIAN, Role.ADMIN)
        if actor.is_technician:
            if technician_id is not None and technician_id != actor.id:
                raise self._forbid(actor, "list reports of", "Technician", technician_id)
            technician_id = actor.id

        reports = self.report_repo.list_for_technician(technician_id)
        self.log_operation("list_reports_for_technician", technician_id=technician_id, count=len(reports))
        return ReportList(reports=[self._report_read(r) for r in reports])
