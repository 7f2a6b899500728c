import logging
from typing import Dict, List, Optional

import boto3  # type: ignore

from vpc_context.classifier import SubnetClassifier
from vpc_context.errors import AmbiguousVpcLookup, VpcNotFound
from vpc_context.models import (
    RawSubnetRecord,
    RouteCharacteristics,
    VpcContextQuery,
    VpcContextResponse,
    VpcDiscovery,
    tags_to_dict,
)
from vpc_context.pipeline import build_vpc_context


# Setup logging
logger = logging.getLogger("VpcContextProvider")

logger.setLevel(logging.INFO)

if not logger.handlers:
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
    )
    logger.addHandler(stream_handler)

logger.propagate = True


def _route_table_for_subnet(subnet_id: Optional[str], route_tables: List[dict]) -> Optional[dict]:
    """
    Find the route table that governs a subnet: its explicitly associated
    table, or else the VPC's main route table.
    """
    main_table = None
    for route_table in route_tables:
        for assoc in route_table.get("Associations", []):
            if subnet_id and assoc.get("SubnetId") == subnet_id:
                return route_table
            if assoc.get("Main"):
                main_table = route_table
    return main_table


def _route_characteristics(route_table: Optional[dict]) -> RouteCharacteristics:
    routes = route_table.get("Routes", []) if route_table else []
    return RouteCharacteristics(
        has_internet_gateway_route=any(
            (route.get("GatewayId") or "").startswith("igw-") for route in routes
        ),
        has_nat_route=any(
            route.get("NatGatewayId") or route.get("InstanceId") for route in routes
        ),
    )


class VpcContextProvider:
    """
    Looks up an existing VPC through EC2 and builds its VPC context.

    Discovery only reads from EC2 (describe calls); nothing is created or
    modified. The normalization itself is delegated to ``build_vpc_context``.
    """

    def __init__(self, region_name: str, lookup_role_arn: Optional[str] = None):
        """
        Initialize the provider with an EC2 client.

        Args:
            region_name (str): The AWS region to look the VPC up in.
            lookup_role_arn (Optional[str]): Role to assume before calling EC2,
                for lookups in another account.
        """
        self.region_name = region_name
        logger.info("Initializing VpcContextProvider in region: %s", region_name)

        credentials: Dict[str, str] = {}
        if lookup_role_arn:
            sts = boto3.client("sts", region_name=region_name)
            assumed = sts.assume_role(
                RoleArn=lookup_role_arn, RoleSessionName="vpc-context-lookup"
            )["Credentials"]
            credentials = {
                "aws_access_key_id": assumed["AccessKeyId"],
                "aws_secret_access_key": assumed["SecretAccessKey"],
                "aws_session_token": assumed["SessionToken"],
            }
            logger.info("Assumed role %s for lookup", lookup_role_arn)

        self.ec2 = boto3.client("ec2", region_name=region_name, **credentials)

    def _paginate(self, operation: str, key: str, **kwargs) -> List[dict]:
        items: List[dict] = []
        for page in self.ec2.get_paginator(operation).paginate(**kwargs):
            items.extend(page.get(key, []))
        return items

    def _find_vpc(self, query: VpcContextQuery) -> dict:
        """
        Resolve the query to exactly one VPC.

        Raises:
            VpcNotFound: If no VPC matches.
            AmbiguousVpcLookup: If more than one VPC matches.
        """
        filters = [
            {"Name": name, "Values": [value]}
            for name, value in sorted(query.filter.items())
        ]
        if query.vpc_id:
            filters.append({"Name": "vpc-id", "Values": [query.vpc_id]})

        vpcs = self._paginate("describe_vpcs", "Vpcs", Filters=filters)
        described = query.vpc_id or query.filter
        if not vpcs:
            raise VpcNotFound(f"Could not find any VPCs matching {described}")
        if len(vpcs) > 1:
            raise AmbiguousVpcLookup(
                f"Found {len(vpcs)} VPCs matching {described}; "
                "please narrow the search criteria"
            )
        return vpcs[0]

    def _find_vpn_gateway(self, vpc_id: str) -> Optional[str]:
        """Return the VPN gateway attached to the VPC, if there is exactly one."""
        response = self.ec2.describe_vpn_gateways(
            Filters=[{"Name": "attachment.vpc-id", "Values": [vpc_id]}]
        )
        gateway_ids = [
            gateway["VpnGatewayId"]
            for gateway in response.get("VpnGateways", [])
            if gateway.get("State") == "available"
            and any(
                attachment.get("VpcId") == vpc_id and attachment.get("State") == "attached"
                for attachment in gateway.get("VpcAttachments", [])
            )
        ]
        if len(gateway_ids) == 1:
            return gateway_ids[0]
        if gateway_ids:
            logger.warning(
                "VPC %s has %d VPN gateways attached; not reporting any",
                vpc_id,
                len(gateway_ids),
            )
        return None

    def _to_raw_record(self, subnet: dict, route_tables: List[dict]) -> RawSubnetRecord:
        route_table = _route_table_for_subnet(subnet.get("SubnetId"), route_tables)
        return RawSubnetRecord(
            subnet_id=subnet.get("SubnetId"),
            availability_zone=subnet.get("AvailabilityZone"),
            route_table_id=route_table.get("RouteTableId") if route_table else None,
            cidr=subnet.get("CidrBlock"),
            tags=tags_to_dict(subnet.get("Tags")),
            outpost_arn=subnet.get("OutpostArn"),
            routes=_route_characteristics(route_table),
        )

    async def discover(self, query: VpcContextQuery) -> VpcDiscovery:
        """
        Collect the VPC scalars and raw subnet records for the queried VPC.

        Subnets are returned sorted by availability zone and subnet id, so the
        same VPC always yields the same record order.

        Args:
            query (VpcContextQuery): The lookup request.

        Returns:
            VpcDiscovery: Raw data for the normalization pipeline.
        """
        vpc = self._find_vpc(query)
        vpc_id = vpc["VpcId"]
        logger.info("Discovering subnets of VPC %s", vpc_id)

        vpc_filter = [{"Name": "vpc-id", "Values": [vpc_id]}]
        route_tables = self._paginate("describe_route_tables", "RouteTables", Filters=vpc_filter)
        subnets = sorted(
            self._paginate("describe_subnets", "Subnets", Filters=vpc_filter),
            key=lambda s: (s.get("AvailabilityZone") or "", s.get("SubnetId") or ""),
        )
        logger.info(
            "Found %d subnet(s) and %d route table(s) in %s",
            len(subnets),
            len(route_tables),
            vpc_id,
        )

        vpn_gateway_id = None
        if query.return_vpn_gateways:
            vpn_gateway_id = self._find_vpn_gateway(vpc_id)

        return VpcDiscovery(
            vpc_id=vpc_id,
            vpc_cidr_block=vpc.get("CidrBlock"),
            vpn_gateway_id=vpn_gateway_id,
            owner_account_id=vpc.get("OwnerId"),
            region=self.region_name,
            subnets=[self._to_raw_record(s, route_tables) for s in subnets],
        )

    async def get_vpc_context(
        self,
        query: VpcContextQuery,
        classifier: Optional[SubnetClassifier] = None,
    ) -> VpcContextResponse:
        """
        Look up a VPC and return its normalized context.

        Raises:
            VpcLookupError: If the VPC cannot be resolved to exactly one VPC.
            VpcContextError: If the subnet topology cannot be normalized.
        """
        discovery = await self.discover(query)
        return build_vpc_context(discovery, query, classifier)
