# Occupancy Tracker — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User, UserRole                    # noqa
from app.models.entry_exit_log import EntryExitLog, LogType   # noqa
from app.models.system_config import SystemConfig             # noqa
