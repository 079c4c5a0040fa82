# Leoni Gate — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User                           # noqa
from app.models.worker import Worker                       # noqa
from app.models.supplier import Supplier                   # noqa
from app.models.leoni_personnel import LeoniPersonnel      # noqa
from app.models.vehicle import Vehicle                     # noqa
from app.models.presence_entry import PresenceEntry        # noqa
from app.models.vehicle_presence import VehiclePresence    # noqa
from app.models.monthly_visit import MonthlyVisit          # noqa
from app.models.incident import Incident                   # noqa
from app.models.schedule_presence import SchedulePresence  # noqa
