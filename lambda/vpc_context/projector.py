"""
Symmetry Projector

Turns subnet groups into the legacy flat per-type arrays. The flat shape
only makes sense when every group of a type has exactly one subnet in every
availability zone; that is checked here, never assumed.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from vpc_context.errors import AsymmetricSubnetsUnsupported
from vpc_context.models import Subnet, SubnetGroup, SubnetGroupType

logger = logging.getLogger(__name__)


class FlatSubnetArrays(BaseModel):
    """
    The flat arrays for one group type.

    ``subnet_ids`` and ``route_table_ids`` are ordered by availability zone
    first and group second; ``names`` lists the groups in that same order.
    """

    model_config = ConfigDict(frozen=True)

    names: List[str]
    subnet_ids: List[str]
    route_table_ids: List[str]


class SubnetProjection(BaseModel):
    """
    Result of projecting subnet groups.

    Attributes:
        flat: Validated-symmetric arrays, keyed by group type. A type is
            absent if it has no groups or its groups are asymmetric.
        subnet_groups: The unmodified groups, only set when asymmetric
            subnets were requested.
    """

    model_config = ConfigDict(frozen=True)

    flat: Dict[SubnetGroupType, FlatSubnetArrays]
    subnet_groups: Optional[List[SubnetGroup]] = None


def find_asymmetry(
    groups: Sequence[SubnetGroup], availability_zones: Sequence[str]
) -> Optional[Tuple[str, str, int]]:
    """
    Return the first ``(group name, availability zone, subnet count)`` where a
    group does not have exactly one subnet, or None if all groups are symmetric.

    Groups are checked in order, and zones in ``availability_zones`` order.
    A subnet in a zone outside ``availability_zones`` also counts as asymmetric.
    """
    zone_set = set(availability_zones)
    for group in groups:
        counts: Dict[str, int] = {}
        for subnet in group.subnets:
            counts[subnet.availability_zone] = counts.get(subnet.availability_zone, 0) + 1

        for az in availability_zones:
            if counts.get(az, 0) != 1:
                return group.name, az, counts.get(az, 0)

        for az, count in counts.items():
            if az not in zone_set:
                return group.name, az, count
    return None


def flatten_groups(
    groups: Sequence[SubnetGroup], availability_zones: Sequence[str]
) -> FlatSubnetArrays:
    """Flatten symmetric groups AZ-major, group-minor."""
    by_zone: List[Dict[str, Subnet]] = [
        {subnet.availability_zone: subnet for subnet in group.subnets}
        for group in groups
    ]
    ordered = [zones[az] for az in availability_zones for zones in by_zone]
    return FlatSubnetArrays(
        names=[group.name for group in groups],
        subnet_ids=[subnet.subnet_id for subnet in ordered],
        route_table_ids=[subnet.route_table_id for subnet in ordered],
    )


def project_subnets(
    groups: Sequence[SubnetGroup],
    availability_zones: Sequence[str],
    return_asymmetric_subnets: bool = False,
) -> SubnetProjection:
    """
    Project subnet groups into flat arrays and, optionally, raw groups.

    Args:
        groups (Sequence[SubnetGroup]): Groups in aggregation order.
        availability_zones (Sequence[str]): All availability zones of the VPC,
            in canonical order.
        return_asymmetric_subnets (bool): When False, any asymmetric group is an
            error. When True, asymmetric types simply get no flat arrays and
            the groups are returned as they are.

    Raises:
        AsymmetricSubnetsUnsupported: If a group is asymmetric and
            ``return_asymmetric_subnets`` is False.
    """
    flat: Dict[SubnetGroupType, FlatSubnetArrays] = {}

    for group_type in SubnetGroupType:
        typed = [group for group in groups if group.type == group_type]
        if not typed:
            continue

        asymmetry = find_asymmetry(typed, availability_zones)
        if asymmetry is not None:
            if not return_asymmetric_subnets:
                raise AsymmetricSubnetsUnsupported(*asymmetry)
            logger.info(
                "%s subnets are asymmetric (group '%s' in %s); omitting flat arrays",
                group_type.value,
                asymmetry[0],
                asymmetry[1],
            )
            continue

        flat[group_type] = flatten_groups(typed, availability_zones)

    return SubnetProjection(
        flat=flat,
        subnet_groups=list(groups) if return_asymmetric_subnets else None,
    )
