from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from hvacdesk.core.security import decode_access_token
from hvacdesk.schemas.actor import ActorContext
from hvacdesk.services.exceptions import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_actor(
	request: Request,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> ActorContext:
	"""Resolve the caller from a bearer JWT carrying `sub` and `role` claims."""
	correlation_id = getattr(request.state, "correlation_id", None)
	if credentials is None or not credentials.credentials:
		raise AuthenticationError("Missing bearer credential", correlation_id=correlation_id)

	try:
		payload = decode_access_token(credentials.credentials)
		actor = ActorContext(id=int(payload.get("sub")), role=payload.get("role"))
	except (JWTError, TypeError, ValueError) as e:
		raise AuthenticationError(f"Invalid credential: {type(e).__name__}", correlation_id=correlation_id)

	request.state.actor_id = actor.id
	request.state.actor_role = actor.role.value
	return actor
