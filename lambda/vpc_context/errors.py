from typing import Iterable, Optional


class VpcContextError(Exception):
    """Base class for every error raised while building a VPC context."""


class MalformedSubnetRecord(VpcContextError):
    """
    A raw subnet record is missing one of its mandatory fields.

    Attributes:
        subnet_id (Optional[str]): The subnet id, when the record carried one.
        missing_fields (List[str]): Names of the absent mandatory fields.
    """

    def __init__(self, subnet_id: Optional[str], missing_fields: Iterable[str]):
        self.subnet_id = subnet_id
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Subnet record {subnet_id or '<unknown>'} is missing required "
            f"field(s): {', '.join(self.missing_fields)}"
        )


class UnclassifiableSubnet(VpcContextError):
    """A subnet cannot be assigned a group name or group type."""

    def __init__(self, subnet_id: str, reason: str):
        self.subnet_id = subnet_id
        super().__init__(f"Subnet {subnet_id} cannot be classified: {reason}")


class InconsistentGroupType(VpcContextError):
    """The subnets of one logical group disagree about the group."""

    def __init__(self, group_name: str, message: str):
        self.group_name = group_name
        super().__init__(message)


class DuplicateGroupMember(InconsistentGroupType):
    """The same subnet was reported more than once."""

    def __init__(self, group_name: str, subnet_id: str):
        self.subnet_id = subnet_id
        super().__init__(
            group_name,
            f"Subnet {subnet_id} was reported more than once "
            f"(group '{group_name}')",
        )


class AsymmetricSubnetsUnsupported(VpcContextError):
    """
    A subnet group does not have exactly one subnet in every availability zone,
    so it cannot be expressed in the flat per-type arrays.
    """

    def __init__(self, group_name: str, availability_zone: str, count: int):
        self.group_name = group_name
        self.availability_zone = availability_zone
        self.count = count
        super().__init__(
            f"Subnet group '{group_name}' has {count} subnet(s) in "
            f"{availability_zone}; exactly one per availability zone is required. "
            "Fix the VPC layout or request asymmetric subnets."
        )


class VpcLookupError(VpcContextError):
    """The discovery step could not resolve the requested VPC."""


class VpcNotFound(VpcLookupError):
    pass


class AmbiguousVpcLookup(VpcLookupError):
    pass
