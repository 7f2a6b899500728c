from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


DEFAULT_SUBNET_GROUP_NAME_TAG = "aws-cdk:subnet-name"
DEFAULT_SUBNET_TYPE_TAG = "aws-cdk:subnet-type"


class Tag(BaseModel):
    """
    Represents an AWS resource tag.

    Attributes:
        Key (str): The tag key (e.g., "Name").
        Value (str): The tag value associated with the key.
    """
    Key: str
    Value: str


def tags_to_dict(tags: Optional[List[dict]]) -> Dict[str, str]:
    """Flatten an EC2 ``[{"Key": ..., "Value": ...}]`` tag list into a dict."""
    return {tag.Key: tag.Value for tag in (Tag(**t) for t in tags or [])}


class ContextModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SubnetGroupType(str, Enum):
    """The type of a subnet group, with an Outpost variant for each base type."""

    PUBLIC = "Public"
    PRIVATE = "Private"
    ISOLATED = "Isolated"
    PUBLIC_OUTPOST = "PublicOutpost"
    PRIVATE_OUTPOST = "PrivateOutpost"
    ISOLATED_OUTPOST = "IsolatedOutpost"

    @property
    def is_outpost(self) -> bool:
        return self.value.endswith("Outpost")

    @property
    def field_prefix(self) -> str:
        """Prefix of the flat response fields, e.g. ``private_outpost``."""
        return self.name.lower()

    def outpost_variant(self) -> "SubnetGroupType":
        if self.is_outpost:
            return self
        return SubnetGroupType(f"{self.value}Outpost")


class Subnet(ContextModel):
    """A single subnet as reported by the VPC provider."""

    subnet_id: str = Field(..., description="Identifier of the subnet")
    availability_zone: str = Field(
        ..., description="Availability zone code (e.g. us-west-2a)"
    )
    route_table_id: str = Field(
        ..., description="Route table associated with the subnet"
    )
    cidr: Optional[str] = Field(
        None, description="CIDR range of the subnet, when available"
    )


class SubnetGroup(ContextModel):
    """
    A named, typed group of subnets. The subnets do NOT have to be
    symmetric across availability zones.
    """

    name: str = Field(..., description="Group name taken from the subnet tags")
    type: SubnetGroupType
    subnets: List[Subnet] = Field(..., min_length=1)


class VpcContextResponse(ContextModel):
    """
    Normalized description of a discovered VPC.

    The flat ``*_subnet_ids`` and ``*_subnet_route_table_ids`` arrays hold
    #(availability_zones) * #(groups of that type) elements, ordered by
    availability zone first and group second. ``*_subnet_names`` holds one
    element per group.
    """

    vpc_id: str = Field(..., description="VPC id")
    vpc_cidr_block: Optional[str] = Field(None, description="VPC CIDR")
    availability_zones: List[str] = Field(default_factory=list)

    public_subnet_ids: Optional[List[str]] = None
    public_subnet_names: Optional[List[str]] = None
    public_subnet_route_table_ids: Optional[List[str]] = None

    private_subnet_ids: Optional[List[str]] = None
    private_subnet_names: Optional[List[str]] = None
    private_subnet_route_table_ids: Optional[List[str]] = None

    isolated_subnet_ids: Optional[List[str]] = None
    isolated_subnet_names: Optional[List[str]] = None
    isolated_subnet_route_table_ids: Optional[List[str]] = None

    public_outpost_subnet_ids: Optional[List[str]] = None
    public_outpost_subnet_names: Optional[List[str]] = None
    public_outpost_subnet_route_table_ids: Optional[List[str]] = None

    private_outpost_subnet_ids: Optional[List[str]] = None
    private_outpost_subnet_names: Optional[List[str]] = None
    private_outpost_subnet_route_table_ids: Optional[List[str]] = None

    isolated_outpost_subnet_ids: Optional[List[str]] = None
    isolated_outpost_subnet_names: Optional[List[str]] = None
    isolated_outpost_subnet_route_table_ids: Optional[List[str]] = None

    vpn_gateway_id: Optional[str] = Field(None, description="The VPN gateway ID")
    subnet_groups: Optional[List[SubnetGroup]] = Field(
        None,
        description="All subnet groups, including asymmetric ones. Only "
        "populated when asymmetric subnets were requested",
    )
    region: Optional[str] = Field(None, description="Region the VPC is in")
    owner_account_id: Optional[str] = Field(
        None, description="ID of the AWS account that owns the VPC"
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class VpcContextQuery(ContextModel):
    """
    Request for a VPC context lookup.
    """

    vpc_id: Optional[str] = Field(None, description="ID of the VPC to look up")
    filter: Dict[str, str] = Field(
        default_factory=dict,
        description="EC2 describe-vpcs filters that must match exactly one VPC",
    )
    region: Optional[str] = Field(None, description="AWS region (e.g. us-east-1)")
    account_id: Optional[str] = Field(None, description="Account of the caller")
    lookup_role_arn: Optional[str] = Field(
        None, description="Role to assume for the lookup"
    )
    return_asymmetric_subnets: bool = False
    subnet_group_name_tag: str = DEFAULT_SUBNET_GROUP_NAME_TAG
    return_vpn_gateways: bool = True

    @model_validator(mode="after")
    def _require_selector(self) -> "VpcContextQuery":
        if not self.vpc_id and not self.filter:
            raise ValueError("Either vpc_id or filter must be provided")
        return self


# Discovery collaborator contract


class RouteCharacteristics(ContextModel):
    """Routing facts about the route table of one subnet."""

    has_internet_gateway_route: bool = False
    has_nat_route: bool = False


class RawSubnetRecord(ContextModel):
    """
    A subnet as the discovery step reported it. Mandatory fields may be
    missing here; the normalizer rejects such records.
    """

    subnet_id: Optional[str] = None
    availability_zone: Optional[str] = None
    route_table_id: Optional[str] = None
    cidr: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    outpost_arn: Optional[str] = None
    routes: RouteCharacteristics = Field(default_factory=RouteCharacteristics)


class VpcDiscovery(ContextModel):
    """Everything the discovery step found out about one VPC."""

    vpc_id: str
    vpc_cidr_block: Optional[str] = None
    vpn_gateway_id: Optional[str] = None
    owner_account_id: Optional[str] = None
    region: Optional[str] = None
    subnets: List[RawSubnetRecord] = Field(default_factory=list)
    availability_zone_order: Optional[List[str]] = Field(
        None, description="Provider-canonical ordering of availability zones"
    )
