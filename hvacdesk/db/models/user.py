from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from hvacdesk.db.base_class import TimestampMixin, Base

class User(Base, TimestampMixin):
	__tablename__ = "users"

	id = Column(Integer, primary_key=True, index=True)
	email = Column(String, unique=True, index=True, nullable=False)
	name = Column(String, nullable=False)
	role = Column(String(16), nullable=False, index=True)  # CLIENT, TECHNICIAN, ADMIN
	hashed_password = Column(String, nullable=False)
	is_active = Column(Boolean, default=True)

	client_jobs = relationship("Job", back_populates="client", foreign_keys="Job.client_id")
	assigned_jobs = relationship("Job", back_populates="technician", foreign_keys="Job.technician_id")
