from sqlalchemy import Column, ForeignKey, Integer, String, Text, SmallInteger, Date, DateTime
from sqlalchemy.orm import relationship
from hvacdesk.db.base_class import TimestampMixin, Base


class Job(Base, TimestampMixin):
	__tablename__ = "jobs"

	id = Column(Integer, primary_key=True, index=True)
	external_number = Column(String(50), unique=True, nullable=True, index=True)  # set once, inside the insert transaction
	client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	technician_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
	service_type = Column(String(32), nullable=True)
	title = Column(String(255), nullable=True)
	description = Column(Text, nullable=True)
	status = Column(String(16), nullable=False, index=True, default="WAITING")  # WAITING, TO_ASSIGN, ASSIGNED, IN_PROGRESS, DONE, CANCELLED
	priority = Column(SmallInteger, nullable=False, default=2)
	scheduled_date = Column(Date, nullable=True)
	address = Column(Text, nullable=True)
	completed_at = Column(DateTime(timezone=True), nullable=True)

	client = relationship("User", back_populates="client_jobs", foreign_keys=[client_id])
	technician = relationship("User", back_populates="assigned_jobs", foreign_keys=[technician_id])
	reports = relationship("Report", back_populates="job", cascade="all, delete-orphan")
	invoices = relationship("Invoice", back_populates="job")
