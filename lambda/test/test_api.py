import pytest

NAME_TAG = "aws-cdk:subnet-name"


def create_tagged_subnet(ec2, vpc_id, cidr, az, group):
    subnet_id = ec2.create_subnet(VpcId=vpc_id, CidrBlock=cidr, AvailabilityZone=az)["Subnet"]["SubnetId"]
    ec2.create_tags(Resources=[subnet_id], Tags=[{"Key": NAME_TAG, "Value": group}])
    return subnet_id


@pytest.fixture
def isolated_vpc(aws_mock):
    """A VPC with one isolated group in two AZs and a lone group in one AZ."""
    ec2 = aws_mock
    vpc_id = ec2.create_vpc(CidrBlock="10.50.0.0/16")["Vpc"]["VpcId"]
    ec2.create_tags(Resources=[vpc_id], Tags=[{"Key": "Name", "Value": "api-vpc"}])
    data_a = create_tagged_subnet(ec2, vpc_id, "10.50.0.0/24", "us-east-1a", "Data")
    data_b = create_tagged_subnet(ec2, vpc_id, "10.50.1.0/24", "us-east-1b", "Data")
    return {"vpc_id": vpc_id, "data": [data_a, data_b]}


@pytest.mark.asyncio
async def test_get_vpc_context_api(test_client, aws_mock, isolated_vpc):
    response = test_client.get(f"/vpc-context/{isolated_vpc['vpc_id']}?region=us-east-1")
    assert response.status_code == 200
    data = response.json()
    assert data["vpcId"] == isolated_vpc["vpc_id"]
    assert data["vpcCidrBlock"] == "10.50.0.0/16"
    assert data["availabilityZones"] == ["us-east-1a", "us-east-1b"]
    assert data["isolatedSubnetIds"] == isolated_vpc["data"]
    assert data["isolatedSubnetNames"] == ["Data"]
    assert "publicSubnetIds" not in data
    assert "subnetGroups" not in data


def test_get_vpc_context_api_asymmetric(test_client, aws_mock, isolated_vpc):
    create_tagged_subnet(aws_mock, isolated_vpc["vpc_id"], "10.50.2.0/24", "us-east-1a", "Cache")

    response = test_client.get(f"/vpc-context/{isolated_vpc['vpc_id']}")
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "AsymmetricSubnetsUnsupported"

    response = test_client.get(
        f"/vpc-context/{isolated_vpc['vpc_id']}?return_asymmetric_subnets=true"
    )
    assert response.status_code == 200
    data = response.json()
    assert "isolatedSubnetIds" not in data
    groups = {g["name"]: g for g in data["subnetGroups"]}
    assert sorted(groups) == ["Cache", "Data"]
    assert groups["Cache"]["type"] == "Isolated"
    assert groups["Cache"]["subnets"][0]["availabilityZone"] == "us-east-1a"
    assert len(groups["Data"]["subnets"]) == 2


def test_lookup_vpc_context_by_filter(test_client, isolated_vpc):
    payload = {"filter": {"tag:Name": "api-vpc"}, "region": "us-east-1"}
    response = test_client.post("/vpc-context", json=payload)
    assert response.status_code == 200
    assert response.json()["vpcId"] == isolated_vpc["vpc_id"]


def test_get_vpc_context_api_not_found(test_client):
    """GET should return 404 if the VPC does not exist."""
    response = test_client.get("/vpc-context/vpc-00000000")
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "VpcNotFound"


def test_get_vpc_context_api_untagged_subnet(test_client, aws_mock, isolated_vpc):
    """GET should return 422 when a subnet has no group name tag."""
    aws_mock.create_subnet(
        VpcId=isolated_vpc["vpc_id"], CidrBlock="10.50.9.0/24", AvailabilityZone="us-east-1a"
    )
    response = test_client.get(f"/vpc-context/{isolated_vpc['vpc_id']}")
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "UnclassifiableSubnet"


def test_lookup_vpc_context_invalid_payload(test_client):
    """POST should fail with 422 if neither vpc_id nor filter is given."""
    response = test_client.post("/vpc-context", json={"region": "us-east-1"})
    assert response.status_code == 422
