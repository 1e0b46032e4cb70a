"""Shared plumbing for the business services API: settings, logging, DB."""

from core.config import get_settings
from core.logger import get_logger
from core.wide_event import record_entity, record_fields

__all__ = ["get_logger", "get_settings", "record_entity", "record_fields"]
