import os

os.environ.setdefault("DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

import pytest
import boto3
from moto import mock_aws
from fastapi.testclient import TestClient
from vpc_context.main import app
from vpc_context.models import RawSubnetRecord, RouteCharacteristics, VpcDiscovery

NAME_TAG = "aws-cdk:subnet-name"

PUBLIC_ROUTES = RouteCharacteristics(has_internet_gateway_route=True)
PRIVATE_ROUTES = RouteCharacteristics(has_nat_route=True)
ISOLATED_ROUTES = RouteCharacteristics()


def make_record(subnet_id, az, group, routes=ISOLATED_ROUTES, **overrides):
    """Build a raw subnet record with the usual defaults."""
    fields = {
        "subnet_id": subnet_id,
        "availability_zone": az,
        "route_table_id": f"rtb-{subnet_id.split('-', 1)[-1]}",
        "cidr": None,
        "tags": {NAME_TAG: group} if group else {},
        "routes": routes,
    }
    fields.update(overrides)
    return RawSubnetRecord(**fields)


def make_discovery(records, **overrides):
    fields = {
        "vpc_id": "vpc-1234",
        "vpc_cidr_block": "10.0.0.0/16",
        "owner_account_id": "123456789012",
        "region": "us-east-1",
        "subnets": records,
    }
    fields.update(overrides)
    return VpcDiscovery(**fields)


@pytest.fixture
def symmetric_records():
    """Two public and one private group spread over two AZs."""
    return [
        make_record("subnet-pa1", "us-east-1a", "Ingress", PUBLIC_ROUTES),
        make_record("subnet-pb1", "us-east-1a", "Bastion", PUBLIC_ROUTES),
        make_record("subnet-app1", "us-east-1a", "App", PRIVATE_ROUTES),
        make_record("subnet-pa2", "us-east-1b", "Ingress", PUBLIC_ROUTES),
        make_record("subnet-pb2", "us-east-1b", "Bastion", PUBLIC_ROUTES),
        make_record("subnet-app2", "us-east-1b", "App", PRIVATE_ROUTES),
    ]


@pytest.fixture(scope="function")
def aws_mock():
    """Mock AWS services EC2 & STS."""
    with mock_aws():
        yield boto3.client("ec2", region_name="us-east-1")


@pytest.fixture(scope="function")
def test_client(aws_mock):
    """FastAPI TestClient with AWS mocks applied."""
    return TestClient(app)
