"""Human-facing external numbers for jobs and invoices.

Both sequences derive from the primary key, so a number is never reused and
two records can never collide. Numbers are assigned inside the insert
transaction: the caller flushes the row, asks for its number and commits
once.
"""

import re
from datetime import datetime, timezone
from typing import Optional, Pattern

from hvacdesk.core.config import settings
from hvacdesk.db.models.invoice import Invoice
from hvacdesk.db.models.job import Job
from hvacdesk.services.base import BaseService


class NumberingService(BaseService):

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        job_prefix: Optional[str] = None,
        invoice_prefix: Optional[str] = None,
    ):
        super().__init__(correlation_id)
        self.job_prefix = job_prefix or settings.JOB_NUMBER_PREFIX
        self.invoice_prefix = invoice_prefix or settings.INVOICE_NUMBER_PREFIX

    @property
    def job_pattern(self) -> Pattern[str]:
        """Regex matched by every job number, e.g. ``ZL-2026-015``."""
        return re.compile(rf"^{re.escape(self.job_prefix)}-\d{{4}}-\d{{3,}}$")

    @property
    def invoice_pattern(self) -> Pattern[str]:
        """Regex matched by every invoice number, e.g. ``FV/2026/0042``."""
        return re.compile(rf"^{re.escape(self.invoice_prefix)}/\d{{4}}/\d{{4,}}$")

    def job_number(self, job_id: int, year: int) -> str:
        return f"{self.job_prefix}-{year}-{job_id:03d}"

    def invoice_number(self, invoice_id: int, year: int) -> str:
        return f"{self.invoice_prefix}/{year}/{invoice_id:04d}"

    @staticmethod
    def _year_of(stamp: Optional[datetime]) -> int:
        return (stamp or datetime.now(timezone.utc)).year

    def assign_job_number(self, job: Job) -> str:
        """Set external_number on a flushed job that does not have one yet."""
        if job.external_number:
            return job.external_number
        job.external_number = self.job_number(job.id, self._year_of(job.created_at))
        self.log_operation("assign_job_number", job_id=job.id, external_number=job.external_number)
        return job.external_number

    def assign_invoice_number(self, invoice: Invoice) -> str:
        """Set external_number on a flushed invoice that does not have one yet."""
        if invoice.external_number:
            return invoice.external_number
        invoice.external_number = self.invoice_number(invoice.id, self._year_of(invoice.issued_at))
        self.log_operation("assign_invoice_number", invoice_id=invoice.id, external_number=invoice.external_number)
        return invoice.external_number
