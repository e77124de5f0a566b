"""Pydantic schemas for request/response validation."""

from .assignment import *  # noqa: F403
from .boarding import *  # noqa: F403
from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .operator import *  # noqa: F403
from .route import *  # noqa: F403
from .sale import *  # noqa: F403
from .vessel import *  # noqa: F403
