"""Database models."""
from .profile import Profile
from .user_settings import UserSettings
from .service import Service
from .notification import Notification
from .monitoring_log import MonitoringLog
from .ntfy_config import NtfyConfig

__all__ = ["Profile", "UserSettings", "Service", "Notification", "MonitoringLog", "NtfyConfig"]
