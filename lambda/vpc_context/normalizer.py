import logging

from vpc_context.errors import MalformedSubnetRecord
from vpc_context.models import RawSubnetRecord, Subnet

logger = logging.getLogger(__name__)

_MANDATORY_FIELDS = ("subnet_id", "availability_zone", "route_table_id")


def normalize_subnet(record: RawSubnetRecord) -> Subnet:
    """
    Convert a raw subnet record into a canonical Subnet.

    Args:
        record (RawSubnetRecord): The record reported by the discovery step.

    Returns:
        Subnet: The subnet with id, availability zone and route table copied
        verbatim. ``cidr`` is only set if the record reported one.

    Raises:
        MalformedSubnetRecord: If the id, availability zone or route table id
            is missing.
    """
    missing = [name for name in _MANDATORY_FIELDS if not getattr(record, name)]
    if missing:
        raise MalformedSubnetRecord(record.subnet_id, missing)

    subnet = Subnet(
        subnet_id=record.subnet_id,
        availability_zone=record.availability_zone,
        route_table_id=record.route_table_id,
        cidr=record.cidr or None,
    )
    logger.debug("Normalized subnet %s in %s", subnet.subnet_id, subnet.availability_zone)
    return subnet
