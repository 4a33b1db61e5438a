from typing import List

from hvacdesk.api.router import create_router
from hvacdesk.core.catalog import SERVICE_CATALOG
from hvacdesk.schemas.job import ServiceTypeRead

router = create_router(name="catalog")


@router.get("", response_model=List[ServiceTypeRead])
def list_service_types():
	"""
	HVAC service types a job can be created for.
	"""
	return [ServiceTypeRead(**s._asdict()) for s in SERVICE_CATALOG.values()]
