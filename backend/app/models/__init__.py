from app.models.job import Job
from app.models.resume import Resume
from app.models.user import User

__all__ = ["User", "Job", "Resume"]
