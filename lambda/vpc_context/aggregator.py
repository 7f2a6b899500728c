import logging
from typing import Dict, Iterable, List, Set, Tuple

from vpc_context.errors import DuplicateGroupMember, InconsistentGroupType
from vpc_context.models import Subnet, SubnetGroup, SubnetGroupType

logger = logging.getLogger(__name__)

ClassifiedSubnet = Tuple[Subnet, str, SubnetGroupType]


def aggregate_subnet_groups(classified: Iterable[ClassifiedSubnet]) -> List[SubnetGroup]:
    """
    Collect classified subnets into subnet groups.

    Groups come out in the order their name was first seen, and members keep
    their discovery order, so identical input always yields identical output.
    Symmetry across availability zones is not enforced here.

    Args:
        classified (Iterable[ClassifiedSubnet]): ``(subnet, group name, group type)``
            triples in discovery order.

    Returns:
        List[SubnetGroup]: One group per distinct name.

    Raises:
        InconsistentGroupType: If one group name is seen with two types.
        DuplicateGroupMember: If the same subnet id is reported twice.
    """
    types: Dict[str, SubnetGroupType] = {}
    members: Dict[str, List[Subnet]] = {}
    seen: Set[str] = set()

    for subnet, name, group_type in classified:
        known_type = types.get(name)
        if known_type is None:
            types[name] = group_type
            members[name] = []
        elif known_type != group_type:
            raise InconsistentGroupType(
                name,
                f"Subnet group '{name}' has subnets of type {known_type.value} "
                f"and {group_type.value} (subnet {subnet.subnet_id})",
            )

        if subnet.subnet_id in seen:
            raise DuplicateGroupMember(name, subnet.subnet_id)
        seen.add(subnet.subnet_id)

        members[name].append(subnet)

    groups = [
        SubnetGroup(name=name, type=types[name], subnets=subnets)
        for name, subnets in members.items()
    ]
    logger.debug("Aggregated %d subnet(s) into %d group(s)", len(seen), len(groups))
    return groups
