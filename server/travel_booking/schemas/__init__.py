"""Pydantic schemas for request/response validation."""

from .booking import *  # noqa: F403
from .health import *  # noqa: F403
from .payment import *  # noqa: F403
from .tour import *  # noqa: F403
