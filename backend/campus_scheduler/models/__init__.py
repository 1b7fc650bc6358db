from campus_scheduler.models.activity_log import ActivityLog  # noqa: F401
from campus_scheduler.models.attendance import AttendanceRecord, AttendanceStatus  # noqa: F401
from campus_scheduler.models.course import Course  # noqa: F401
from campus_scheduler.models.registration import Registration, RegistrationStatus  # noqa: F401
from campus_scheduler.models.schedule import ClassSchedule, Department, ScheduleStatus  # noqa: F401
from campus_scheduler.models.user import User, UserRole  # noqa: F401
