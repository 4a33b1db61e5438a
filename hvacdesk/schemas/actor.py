"""Caller identity as seen by the registries."""

from enum import Enum
from pydantic import BaseModel


class Role(str, Enum):
	CLIENT = "CLIENT"
	TECHNICIAN = "TECHNICIAN"
	ADMIN = "ADMIN"


class ActorContext(BaseModel):
	"""Who is performing an operation. Passed explicitly into every registry call."""
	id: int
	role: Role

	class Config:
		frozen = True

	@property
	def is_admin(self) -> bool:
		return self.role == Role.ADMIN

	@property
	def is_client(self) -> bool:
		return self.role == Role.CLIENT

	@property
	def is_technician(self) -> bool:
		return self.role == Role.TECHNICIAN
