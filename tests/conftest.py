import pytest
from fastapi.testclient import TestClient

from helpdesk_sla.config import SLASource
from helpdesk_sla.main import create_app
from helpdesk_sla.sla.application import SLAService
from helpdesk_sla.sla.domain import (
    CompanySLADefinition,
    CustomSLAConfiguration,
    SLAConfig,
    SLATarget,
)
from helpdesk_sla.sla.infrastructure import StaticConfigProvider

from tests.factories import at


@pytest.fixture
def target_24h():
    """Resolution target of 24 business hours (response 4h)."""
    return SLATarget(
        response_time_hours=4,
        resolution_time_hours=24,
        source=SLASource.GLOBAL_FALLBACK,
    )


@pytest.fixture
def sla_config():
    """
    Company 1 / department 3 / incident type 7 has:
    - 101: priority "Alta", any category
    - 102: priority "Alta", category 42
    - 103: department default (no priority)
    - 104: custom priority id 55
    Company 1 also has a legacy "high" default (12).
    """
    return SLAConfig(
        configurations=[
            CustomSLAConfiguration(
                id=101, company_id=1, department_id=3, incident_type_id=7,
                priority="Alta", response_time_hours=2, resolution_time_hours=6,
            ),
            CustomSLAConfiguration(
                id=102, company_id=1, department_id=3, incident_type_id=7, category_id=42,
                priority="Alta", response_time_hours=1, resolution_time_hours=4,
            ),
            CustomSLAConfiguration(
                id=103, company_id=1, department_id=3, incident_type_id=7,
                response_time_hours=6, resolution_time_hours=30,
            ),
            CustomSLAConfiguration(
                id=104, company_id=1, department_id=3, incident_type_id=7,
                priority_id=55, response_time_hours=3, resolution_time_hours=9,
            ),
            CustomSLAConfiguration(
                id=105, company_id=1, department_id=4, incident_type_id=7,
                priority="Alta", response_time_hours=1, resolution_time_hours=2,
                is_active=False,
            ),
        ],
        company_defaults=[
            CompanySLADefinition(
                id=12, company_id=1, priority="high",
                response_time_hours=4, resolution_time_hours=24,
            ),
        ],
    )


@pytest.fixture
def sla_service(sla_config):
    return SLAService(StaticConfigProvider(sla_config), clock=lambda: at(1, 14))


@pytest.fixture
def app(sla_service):
    return create_app(sla_service=sla_service)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
