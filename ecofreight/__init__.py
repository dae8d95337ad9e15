"""EcoFreight shipment tracking service."""
