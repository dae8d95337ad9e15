from collections import defaultdict
from datetime import datetime
from typing import Optional

from ecofreight.core.logging_config import get_logger
from ecofreight.domain.actors import Actor, Role
from ecofreight.domain.carbon import ESTIMATED_SAVINGS_RATIO, recommendation_rules, sustainability_score
from ecofreight.domain.errors import NotFound, ValidationError
from ecofreight.domain.models import Shipment, SustainabilitySuggestion, as_utc
from .base import ServiceBase
from .schemas import CarbonReport
from .shipment_service import ShipmentService

logger = get_logger(__name__)

class SustainabilityService(ServiceBase):
    def carbon_report(
        self,
        actor: Actor,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> CarbonReport:
        start_date = as_utc(start_date) if start_date else None
        end_date = as_utc(end_date) if end_date else None
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")

        query = self.db.query(Shipment.transport_type, Shipment.carbon_footprint)
        if actor.role is Role.CUSTOMER:
            query = query.filter(Shipment.customer_id == actor.user_id)
        elif actor.role is Role.DRIVER:
            query = query.filter(Shipment.assigned_driver_id == actor.user_id)
        if start_date:
            query = query.filter(Shipment.created_at >= start_date)
        if end_date:
            query = query.filter(Shipment.created_at <= end_date)
        rows = query.all()

        by_mode: dict[str, float] = defaultdict(float)
        for transport_type, footprint in rows:
            by_mode[transport_type or "unknown"] += footprint or 0.0
        total = sum(by_mode.values())

        return CarbonReport(
            shipment_count=len(rows),
            total_carbon_footprint=round(total, 2),
            estimated_carbon_saved=round(total * ESTIMATED_SAVINGS_RATIO, 2),
            by_transport_type={mode: round(value, 2) for mode, value in by_mode.items()},
            sustainability_score=sustainability_score(t for t, _ in rows),
            start_date=start_date,
            end_date=end_date,
        )

    def generate_suggestions(self, shipment_id: str, actor: Actor) -> list[SustainabilitySuggestion]:
        shipment = ShipmentService(self.db, clock=self.clock).get_visible(shipment_id, actor)
        suggestions = [
            SustainabilitySuggestion(
                shipment_id=shipment.id,
                user_id=actor.user_id,
                title=rule.title,
                description=rule.description,
                carbon_savings=rule.carbon_savings(shipment.carbon_footprint),
                cost_savings=rule.cost_savings(shipment.distance_km),
            )
            for rule in recommendation_rules(shipment.transport_type)
        ]
        self.db.add_all(suggestions)
        self._commit("save sustainability suggestions")
        logger.info(
            "Sustainability suggestions generated",
            extra={'extra_fields': {'shipment_id': shipment.id, 'count': len(suggestions)}}
        )
        return suggestions

    def list_suggestions(self, implemented: Optional[bool] = None) -> list[SustainabilitySuggestion]:
        query = self.db.query(SustainabilitySuggestion)
        if implemented is not None:
            query = query.filter(SustainabilitySuggestion.implemented == implemented)
        return query.order_by(SustainabilitySuggestion.created_at.desc()).all()

    def mark_implemented(self, suggestion_id: str) -> SustainabilitySuggestion:
        suggestion = self.db.get(SustainabilitySuggestion, suggestion_id)
        if suggestion is None:
            raise NotFound(f"Suggestion {suggestion_id} not found")
        suggestion.implemented = True
        self._commit("update the suggestion")
        return suggestion
