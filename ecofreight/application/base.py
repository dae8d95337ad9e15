from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecofreight.core.logging_config import get_logger
from ecofreight.domain.errors import PersistenceError
from ecofreight.domain.models import utcnow
from ecofreight.infrastructure.verification import VerificationClient

logger = get_logger(__name__)

Clock = Callable[[], datetime]

class ServiceBase:
    def __init__(self, db: Session, verifier: Optional[VerificationClient] = None, clock: Clock = utcnow):
        self.db = db
        self.verifier = verifier
        self.clock = clock

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Persistence failure while trying to {action}", exc_info=True)
            raise PersistenceError(f"Could not {action}. Please try again.") from e

    def _attach_reference(self, record, reference: Optional[str]) -> None:
        """Store a verification reference on an already persisted record.

        A failed write is logged and the record stays without a reference.
        """
        if not reference:
            return
        record.verification_ref = reference
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning(
                "Could not attach verification reference",
                exc_info=True,
                extra={'extra_fields': {'table': record.__tablename__, 'record_id': record.id}}
            )
