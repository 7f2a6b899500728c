import logging
from typing import List, Optional

from vpc_context.aggregator import ClassifiedSubnet, aggregate_subnet_groups
from vpc_context.assembler import assemble_response, order_availability_zones
from vpc_context.classifier import SubnetClassifier
from vpc_context.models import VpcContextQuery, VpcContextResponse, VpcDiscovery
from vpc_context.normalizer import normalize_subnet
from vpc_context.projector import project_subnets

logger = logging.getLogger(__name__)


def build_vpc_context(
    discovery: VpcDiscovery,
    query: VpcContextQuery,
    classifier: Optional[SubnetClassifier] = None,
) -> VpcContextResponse:
    """
    Build the VPC context response from what discovery reported.

    This is a pure transformation: it performs no I/O and any error from a
    stage is raised unchanged, so a partial response is never returned.

    Args:
        discovery (VpcDiscovery): VPC scalars and raw subnet records.
        query (VpcContextQuery): The lookup request.
        classifier (Optional[SubnetClassifier]): Classification policy. Defaults
            to a tag/route classifier using ``query.subnet_group_name_tag``.

    Returns:
        VpcContextResponse: The normalized VPC description.
    """
    classifier = classifier or SubnetClassifier(name_tag=query.subnet_group_name_tag)

    classified: List[ClassifiedSubnet] = []
    for record in discovery.subnets:
        subnet = normalize_subnet(record)
        name, group_type = classifier.classify(subnet, record)
        classified.append((subnet, name, group_type))

    groups = aggregate_subnet_groups(classified)
    availability_zones = order_availability_zones(
        (subnet for subnet, _, _ in classified), discovery.availability_zone_order
    )
    projection = project_subnets(
        groups, availability_zones, query.return_asymmetric_subnets
    )

    logger.info(
        "Built context for %s: %d subnet(s), %d group(s), %d AZ(s)",
        discovery.vpc_id,
        len(classified),
        len(groups),
        len(availability_zones),
    )
    return assemble_response(discovery, query, availability_zones, projection)
