"""Import every model so `Base.metadata` knows all tables."""

from database.models.users import User, UserRole
from database.models.jobs import Job, JobStatus, JobType, ExperienceLevel
from database.models.applications import Application, ApplicationStatus
from database.models.notifications import Notification, NotificationType
from database.models.saved_jobs import SavedJob
from database.models.companies import Company, company_admins, company_followers
from database.models.profiles import Profile, ProfileExperience, ProfileEducation

__all__ = [
    "User",
    "UserRole",
    "Job",
    "JobStatus",
    "JobType",
    "ExperienceLevel",
    "Application",
    "ApplicationStatus",
    "Notification",
    "NotificationType",
    "SavedJob",
    "Company",
    "company_admins",
    "company_followers",
    "Profile",
    "ProfileExperience",
    "ProfileEducation",
]
