"""Report and photo repositories."""

from typing import Optional, List
from sqlalchemy.orm import Session, joinedload, selectinload

from hvacdesk.repositories.base import BaseRepository
from hvacdesk.db.models.report import Report, ReportPhoto


class ReportRepository(BaseRepository[Report]):
    """Repository for Report entity operations."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, Report, correlation_id)

    def _with_relationships(self):
        return self.db.query(self.model).options(
            joinedload(self.model.job),
            selectinload(self.model.photos),
        )

    def get_with_photos(self, report_id: int) -> Optional[Report]:
        """Get a report with its job and photos loaded.

        Args:
            report_id: Report ID

        Returns:
            Report instance or None if not found
        """
        result = self._with_relationships().filter(self.model.id == report_id).first()
        self._log_operation("get_with_photos", report_id=report_id, found=result is not None)
        return result

    def list_for_job(self, job_id: int) -> List[Report]:
        """Reports on one job, oldest first."""
        results = (
            self._with_relationships()
            .filter(self.model.job_id == job_id)
            .order_by(self.model.created_at.asc(), self.model.id.asc())
            .all()
        )
        self._log_operation("list_for_job", job_id=job_id, count=len(results))
        return results

    def list_for_technician(self, technician_id: Optional[int] = None) -> List[Report]:
        """Reports newest first, optionally restricted to one technician."""
        query = self._with_relationships()
        if technician_id is not None:
            query = query.filter(self.model.technician_id == technician_id)
        results = query.order_by(self.model.created_at.desc(), self.model.id.desc()).all()
        self._log_operation("list_for_technician", technician_id=technician_id, count=len(results))
        return results


class ReportPhotoRepository(BaseRepository[ReportPhoto]):
    """Repository for ReportPhoto entity operations."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, ReportPhoto, correlation_id)

    def add_many(self, report_id: int, files: List[dict]) -> List[ReportPhoto]:
        """Insert one row per stored file.

        Args:
            report_id: Parent report ID
            files: Dicts with file_path and original_name

        Returns:
            Created ReportPhoto instances
        """
        photos = [ReportPhoto(report_id=report_id, **f) for f in files]
        self.db.add_all(photos)
        self.db.flush()
        self._log_operation("add_many", report_id=report_id, count=len(photos))
        return photos

    def list_for_report(self, report_id: int) -> List[ReportPhoto]:
        results = (
            self.db.query(self.model)
            .filter(self.model.report_id == report_id)
            .order_by(self.model.id.asc())
            .all()
        )
        self._log_operation("list_for_report", report_id=report_id, count=len(results))
        return results

    def keys_for_job(self, job_id: int) -> List[str]:
        """Storage keys of every photo attached to any report of the job."""
        rows = (
            self.db.query(self.model.file_path)
            .join(Report, Report.id == self.model.report_id)
            .filter(Report.job_id == job_id)
            .all()
        )
        self._log_operation("keys_for_job", job_id=job_id, count=len(rows))
        return [row[0] for row in rows]
