from typing import Any, Dict, Iterable, List, Optional, Sequence

from vpc_context.models import Subnet, VpcContextQuery, VpcContextResponse, VpcDiscovery
from vpc_context.projector import SubnetProjection


def order_availability_zones(
    subnets: Iterable[Subnet], canonical_order: Optional[Sequence[str]] = None
) -> List[str]:
    """
    Return the distinct availability zones of ``subnets``.

    Zones follow ``canonical_order`` when the provider supplied one; zones it
    does not list, or all zones when there is no such order, are sorted by name
    and placed after the known ones.
    """
    zones = {subnet.availability_zone for subnet in subnets}
    ordered = [az for az in dict.fromkeys(canonical_order or []) if az in zones]
    ordered.extend(sorted(zones.difference(ordered)))
    return ordered


def assemble_response(
    discovery: VpcDiscovery,
    query: VpcContextQuery,
    availability_zones: List[str],
    projection: SubnetProjection,
) -> VpcContextResponse:
    """Merge VPC metadata and the subnet projection into the final response."""
    fields: Dict[str, Any] = {}
    for group_type, arrays in projection.flat.items():
        prefix = group_type.field_prefix
        fields[f"{prefix}_subnet_ids"] = arrays.subnet_ids
        fields[f"{prefix}_subnet_names"] = arrays.names
        fields[f"{prefix}_subnet_route_table_ids"] = arrays.route_table_ids

    return VpcContextResponse(
        vpc_id=discovery.vpc_id,
        vpc_cidr_block=discovery.vpc_cidr_block,
        availability_zones=availability_zones,
        vpn_gateway_id=discovery.vpn_gateway_id,
        subnet_groups=projection.subnet_groups,
        region=discovery.region or query.region,
        owner_account_id=discovery.owner_account_id or query.account_id,
        **fields,
    )
