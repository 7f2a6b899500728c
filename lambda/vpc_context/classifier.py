"""
Assigns each subnet to a named subnet group and a SubnetGroupType.

The group name always comes from a tag. How the type is decided is a
pluggable policy, because tagging conventions differ between VPCs: the
default honours an explicit type tag and otherwise looks at the subnet's
routes.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from vpc_context.errors import UnclassifiableSubnet
from vpc_context.models import (
    DEFAULT_SUBNET_GROUP_NAME_TAG,
    DEFAULT_SUBNET_TYPE_TAG,
    RawSubnetRecord,
    RouteCharacteristics,
    Subnet,
    SubnetGroupType,
)

logger = logging.getLogger(__name__)

GroupTypePolicy = Callable[[Dict[str, str], RouteCharacteristics], SubnetGroupType]

_BASE_TYPES = {
    "public": SubnetGroupType.PUBLIC,
    "private": SubnetGroupType.PRIVATE,
    "isolated": SubnetGroupType.ISOLATED,
}


def route_policy(
    tags: Dict[str, str], routes: RouteCharacteristics
) -> SubnetGroupType:
    """Decide the type from routing alone: IGW => Public, NAT => Private, else Isolated."""
    if routes.has_internet_gateway_route:
        return SubnetGroupType.PUBLIC
    if routes.has_nat_route:
        return SubnetGroupType.PRIVATE
    return SubnetGroupType.ISOLATED


def make_tag_then_route_policy(type_tag: str = DEFAULT_SUBNET_TYPE_TAG) -> GroupTypePolicy:
    """
    Build a policy that reads ``type_tag`` first and falls back to routing.

    The tag value is matched case-insensitively against Public, Private and
    Isolated. Any other value raises ValueError, which the classifier turns
    into UnclassifiableSubnet.
    """

    def policy(tags: Dict[str, str], routes: RouteCharacteristics) -> SubnetGroupType:
        tagged = tags.get(type_tag)
        if tagged:
            try:
                return _BASE_TYPES[tagged.strip().lower()]
            except KeyError:
                raise ValueError(f"unknown value '{tagged}' for tag '{type_tag}'")
        return route_policy(tags, routes)

    return policy


tag_then_route_policy = make_tag_then_route_policy()


class SubnetClassifier:
    """
    Classifies subnets into (group name, group type) pairs.

    Args:
        name_tag (str): Tag key holding the logical group name.
        type_policy (Optional[GroupTypePolicy]): Decides the base group type
            from the tags and route characteristics. Defaults to
            ``tag_then_route_policy``.
    """

    def __init__(
        self,
        name_tag: str = DEFAULT_SUBNET_GROUP_NAME_TAG,
        type_policy: Optional[GroupTypePolicy] = None,
    ):
        self.name_tag = name_tag
        self.type_policy = type_policy or tag_then_route_policy

    def classify(
        self, subnet: Subnet, record: RawSubnetRecord
    ) -> Tuple[str, SubnetGroupType]:
        name = (record.tags.get(self.name_tag) or "").strip()
        if not name:
            raise UnclassifiableSubnet(
                subnet.subnet_id, f"no '{self.name_tag}' tag to name its subnet group"
            )

        try:
            group_type = self.type_policy(record.tags, record.routes)
        except ValueError as exc:
            raise UnclassifiableSubnet(subnet.subnet_id, str(exc)) from exc

        if record.outpost_arn:
            group_type = group_type.outpost_variant()

        logger.debug("Subnet %s classified as %s/%s", subnet.subnet_id, name, group_type.value)
        return name, group_type
