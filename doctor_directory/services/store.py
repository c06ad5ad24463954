"""Translation of persistence failures into the directory error taxonomy."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from doctor_directory.core.exceptions import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures raised inside the block as ``StoreError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("store operation failed", extra={"operation": operation})
        raise StoreError(
            f"Store failure during {operation}", details={"operation": operation}
        ) from exc
