from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from hvacdesk.db.base_class import TimestampMixin, Base


class Report(Base, TimestampMixin):
	__tablename__ = "reports"

	id = Column(Integer, primary_key=True, index=True)
	job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
	technician_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
	description = Column(Text, nullable=True)

	job = relationship("Job", back_populates="reports")
	technician = relationship("User")
	photos = relationship(
		"ReportPhoto",
		back_populates="report",
		cascade="all, delete-orphan",
		order_by="ReportPhoto.id",
	)


class ReportPhoto(Base):
	__tablename__ = "report_photos"

	id = Column(Integer, primary_key=True, index=True)
	report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
	file_path = Column(String(512), nullable=False)  # storage-relative key
	original_name = Column(String(255), nullable=True)

	report = relationship("Report", back_populates="photos")
