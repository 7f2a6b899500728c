import pytest
from vpc_context.errors import MalformedSubnetRecord
from vpc_context.models import RawSubnetRecord
from vpc_context.normalizer import normalize_subnet


def test_normalize_passes_fields_through():
    record = RawSubnetRecord(
        subnet_id="subnet-1",
        availability_zone="eu-west-1c",
        route_table_id="rtb-9",
        cidr="10.0.8.0/21",
        tags={"Name": "ignored"},
    )
    subnet = normalize_subnet(record)
    assert subnet.subnet_id == "subnet-1"
    assert subnet.availability_zone == "eu-west-1c"
    assert subnet.route_table_id == "rtb-9"
    assert subnet.cidr == "10.0.8.0/21"


def test_normalize_keeps_missing_cidr_absent():
    record = RawSubnetRecord(subnet_id="subnet-1", availability_zone="eu-west-1c", route_table_id="rtb-9")
    assert normalize_subnet(record).cidr is None


@pytest.mark.parametrize("missing", ["subnet_id", "availability_zone", "route_table_id"])
def test_normalize_rejects_missing_mandatory_field(missing):
    fields = {"subnet_id": "subnet-1", "availability_zone": "eu-west-1c", "route_table_id": "rtb-9"}
    fields[missing] = None

    with pytest.raises(MalformedSubnetRecord) as exc_info:
        normalize_subnet(RawSubnetRecord(**fields))
    assert exc_info.value.missing_fields == [missing]


def test_normalize_reports_all_missing_fields():
    with pytest.raises(MalformedSubnetRecord) as exc_info:
        normalize_subnet(RawSubnetRecord(subnet_id="subnet-7"))
    assert exc_info.value.subnet_id == "subnet-7"
    assert exc_info.value.missing_fields == ["availability_zone", "route_table_id"]
    assert "subnet-7" in str(exc_info.value)
