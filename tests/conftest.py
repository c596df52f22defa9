"""Shared fixtures: purchases in known shapes, a service and an HTTP client."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from fulfillment.domain.purchase import Purchase, VehicleInfo
from fulfillment.main import create_app
from fulfillment.repositories.purchase import PurchaseRepository
from fulfillment.services.purchase_workflow import PurchaseWorkflowService


def _vehicle() -> VehicleInfo:
    return VehicleInfo(
        make="Toyota",
        model="Land Cruiser",
        year=2019,
        vin="JTMHV05J604123456",
        mileage=42000,
        color="White",
    )


@pytest.fixture
def make_purchase():
    """Factory for purchases; total is 12000 unless the costs are overridden."""

    def _make(**overrides) -> Purchase:
        data = {
            "vehicle_info": _vehicle(),
            "winner_name": "Amani Otieno",
            "winner_email": "amani@example.com",
            "destination_port": "Mombasa",
            "winning_bid": Decimal("10000"),
            "shipping_cost": Decimal("1500"),
            "insurance_fee": Decimal("500"),
        }
        data.update(overrides)
        return Purchase.create(**data)

    return _make


@pytest.fixture
def purchase(make_purchase) -> Purchase:
    """Registered vehicle, repair and DHL stages required."""
    return make_purchase()


@pytest.fixture
def service() -> PurchaseWorkflowService:
    return PurchaseWorkflowService(PurchaseRepository())


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def purchase_payload() -> dict:
    return {
        "vehicleInfo": {
            "make": "Nissan",
            "model": "Patrol",
            "year": 2020,
            "vin": "JN1TESY61U0123456",
            "mileage": 31000,
            "color": "Black",
        },
        "winnerName": "Keisha Brown",
        "winnerEmail": "keisha@example.com",
        "destinationPort": "Kingston",
        "winningBid": "20000",
        "shippingCost": "2500",
        "insuranceFee": "500",
    }
