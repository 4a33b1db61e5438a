"""Service dependency providers for FastAPI dependency injection."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import Optional

from hvacdesk.api.dependencies.database import get_db
from hvacdesk.api.dependencies.storage import get_file_storage
from hvacdesk.core.observability import generate_correlation_id
from hvacdesk.services.file_services import FileService, FileStorage
from hvacdesk.services.invoice_services import InvoiceService
from hvacdesk.services.job_services import JobService
from hvacdesk.services.numbering_services import NumberingService
from hvacdesk.services.report_services import ReportService
from hvacdesk.repositories.invoice import InvoiceRepository
from hvacdesk.repositories.job import JobRepository
from hvacdesk.repositories.report import ReportRepository, ReportPhotoRepository
from hvacdesk.repositories.user import UserRepository


def get_correlation_id(request: Request) -> Optional[str]:
	"""Extract or generate correlation ID for logging and tracing."""
	cid = getattr(request.state, "correlation_id", None)
	if not cid:
		cid = generate_correlation_id(request.headers.get("X-Correlation-ID"))
		request.state.correlation_id = cid
	return cid


# Repository Dependencies
def get_user_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> UserRepository:
    """Provide UserRepository instance."""
    return UserRepository(db=db, correlation_id=correlation_id)


def get_job_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> JobRepository:
    """Provide JobRepository instance."""
    return JobRepository(db=db, correlation_id=correlation_id)


def get_invoice_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> InvoiceRepository:
    """Provide InvoiceRepository instance."""
    return InvoiceRepository(db=db, correlation_id=correlation_id)


def get_report_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> ReportRepository:
    """Provide ReportRepository instance."""
    return ReportRepository(db=db, correlation_id=correlation_id)


def get_report_photo_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> ReportPhotoRepository:
    """Provide ReportPhotoRepository instance."""
    return ReportPhotoRepository(db=db, correlation_id=correlation_id)


# Service Dependencies
def get_numbering_service(
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> NumberingService:
    """Provide NumberingService instance configured from settings."""
    return NumberingService(correlation_id=correlation_id)


def get_file_service(
    storage: FileStorage = Depends(get_file_storage),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> FileService:
    """Provide FileService instance bound to the configured storage backend.

    FileService doesn't require repository dependencies as it only
    talks to the storage backend. It needs the correlation ID for
    structured logging and request tracing.

    Args:
        storage: Storage backend from dependency injection
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured FileService instance
    """
    return FileService(storage=storage, correlation_id=correlation_id)


def get_job_service(
    job_repo: JobRepository = Depends(get_job_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    photo_repo: ReportPhotoRepository = Depends(get_report_photo_repository),
    numbering: NumberingService = Depends(get_numbering_service),
    file_service: FileService = Depends(get_file_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> JobService:
    """Provide JobService instance with required repositories.

    Args:
        job_repo: Job repository from dependency injection
        user_repo: User repository, for role checks on referenced users
        photo_repo: Photo repository, for file cleanup on delete
        numbering: Numbering service for external numbers
        file_service: File service for file cleanup on delete
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured JobService instance
    """
    return JobService(
        job_repo=job_repo,
        user_repo=user_repo,
        photo_repo=photo_repo,
        numbering=numbering,
        file_service=file_service,
        correlation_id=correlation_id
    )


def get_invoice_service(
    invoice_repo: InvoiceRepository = Depends(get_invoice_repository),
    job_repo: JobRepository = Depends(get_job_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    numbering: NumberingService = Depends(get_numbering_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> InvoiceService:
    """Provide InvoiceService instance with required repositories."""
    return InvoiceService(
        invoice_repo=invoice_repo,
        job_repo=job_repo,
        user_repo=user_repo,
        numbering=numbering,
        correlation_id=correlation_id
    )


def get_report_service(
    report_repo: ReportRepository = Depends(get_report_repository),
    photo_repo: ReportPhotoRepository = Depends(get_report_photo_repository),
    job_repo: JobRepository = Depends(get_job_repository),
    file_service: FileService = Depends(get_file_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> ReportService:
    """Provide ReportService instance with required repositories."""
    return ReportService(
        report_repo=report_repo,
        photo_repo=photo_repo,
        job_repo=job_repo,
        file_service=file_service,
        correlation_id=correlation_id
    )
