# Visitor Parking — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.parking_policy import ParkingPolicy   # noqa
from app.models.vehicle import Vehicle                 # noqa
from app.models.parking_pass import ParkingPass, PassStatus   # noqa
from app.models.violation import Violation, ViolationSeverity   # noqa
