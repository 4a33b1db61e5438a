from sqlalchemy import Column, ForeignKey, Integer, String, Text, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hvacdesk.db.base_class import Base


class Invoice(Base):
	__tablename__ = "invoices"

	id = Column(Integer, primary_key=True, index=True)
	external_number = Column(String(50), unique=True, nullable=True, index=True)
	client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	job_id = Column(Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, index=True)
	amount = Column(Numeric(12, 2), nullable=False)
	currency = Column(String(3), nullable=False)
	description = Column(Text, nullable=True)
	status = Column(String(24), nullable=False, index=True, default="ISSUED")  # ISSUED, PENDING_CONFIRMATION, PAID
	issued_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
	due_date = Column(Date, nullable=True)
	paid_at = Column(DateTime(timezone=True), nullable=True)
	updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

	# Client-reported payment details
	payment_method = Column(String(64), nullable=True)
	payment_note = Column(Text, nullable=True)
	payment_reported_at = Column(DateTime(timezone=True), nullable=True)

	client = relationship("User")
	job = relationship("Job", back_populates="invoices")
