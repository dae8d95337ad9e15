from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ecofreight.core.logging_config import get_logger
from ecofreight.domain import lifecycle
from ecofreight.domain.errors import NotEligible, NotFound, ValidationError
from ecofreight.domain.lifecycle import ShipmentStatus
from ecofreight.domain.models import Review, utcnow
from ecofreight.infrastructure.verification import UpdateOperation, VerificationClient, try_submit
from .base import Clock, ServiceBase
from .shipment_service import ShipmentService

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5

class ReviewService(ServiceBase):
    def __init__(self, db: Session, verifier: Optional[VerificationClient] = None, clock: Clock = utcnow):
        super().__init__(db, verifier, clock)
        self.shipments = ShipmentService(db, verifier, clock)

    def _find(self, shipment_id: str, user_id: str) -> Optional[Review]:
        return (
            self.db.query(Review)
            .filter(Review.shipment_id == shipment_id, Review.user_id == user_id)
            .first()
        )

    def submit_review(self, shipment_id: str, user_id: str, rating: int, comment: Optional[str] = None) -> tuple[Review, bool]:
        """Create or overwrite the user's review of a delivered shipment.

        Returns the review and True when a new row was inserted.
        """
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError("Rating must be a whole number")
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        comment = (comment or "").strip() or None

        shipment = self.shipments.get(shipment_id)
        if not lifecycle.can_review(shipment, user_id):
            if shipment.customer_id != user_id:
                raise NotEligible("Only the shipment's customer can review it")
            raise NotEligible(
                f"Reviews open once the shipment is {ShipmentStatus.DELIVERED.value} (currently {shipment.status})"
            )

        review = self._find(shipment_id, user_id)
        created = review is None
        if created:
            review = Review(shipment_id=shipment_id, user_id=user_id, rating=rating, comment=comment, approved=False)
            self.db.add(review)
            try:
                self.db.flush()
            except IntegrityError:
                # a concurrent submission inserted first; overwrite it instead
                self.db.rollback()
                review = self._find(shipment_id, user_id)
                created = False
        if not created:
            review.rating = rating
            review.comment = comment
        self._commit("save the review")
        logger.info(
            "Review submitted",
            extra={'extra_fields': {
                'shipment_id': shipment_id,
                'review_id': review.id,
                'rating': rating,
                'created': created,
            }}
        )

        reference = try_submit(self.verifier, UpdateOperation(
            shipment_id=shipment_id,
            status="reviewed",
            metadata={
                'review_id': review.id,
                'user_id': user_id,
                'rating': rating,
                'timestamp': self.clock().isoformat(),
            },
        ))
        self._attach_reference(review, reference)
        return review, created

    def list_reviews(self, approved: Optional[bool] = None, shipment_id: Optional[str] = None) -> list[Review]:
        query = self.db.query(Review)
        if approved is not None:
            query = query.filter(Review.approved == approved)
        if shipment_id is not None:
            query = query.filter(Review.shipment_id == shipment_id)
        return query.order_by(Review.created_at.desc()).all()

    def approve(self, review_id: str) -> Review:
        review = self.db.get(Review, review_id)
        if review is None:
            raise NotFound(f"Review {review_id} not found")
        review.approved = True
        self._commit("approve the review")
        logger.info("Review approved", extra={'extra_fields': {'review_id': review_id}})
        return review
