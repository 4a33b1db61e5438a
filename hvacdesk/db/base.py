# Import all models so Base.metadata and relationship() targets are complete
from hvacdesk.db.base_class import Base  # noqa: F401
from hvacdesk.db.models.user import User  # noqa: F401
from hvacdesk.db.models.job import Job  # noqa: F401
from hvacdesk.db.models.invoice import Invoice  # noqa: F401
from hvacdesk.db.models.report import Report, ReportPhoto  # noqa: F401
from hvacdesk.db.models.request_log import RequestLog  # noqa: F401
