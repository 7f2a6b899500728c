import logging
import os
from typing import Optional

from mangum import Mangum
from fastapi import FastAPI, HTTPException, Query
from vpc_context.errors import AmbiguousVpcLookup, VpcContextError, VpcNotFound
from vpc_context.models import (
    DEFAULT_SUBNET_GROUP_NAME_TAG,
    VpcContextQuery,
    VpcContextResponse,
)
from vpc_context.provider import VpcContextProvider

# Configure global logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s"
)
logger = logging.getLogger("vpc_context_api")

app = FastAPI(title="AWS VPC Context API", version="1.0.0")
handler = Mangum(app)

DEFAULT_REGION = os.environ["DEFAULT_REGION"]
SUBNET_GROUP_NAME_TAG = os.environ.get("SUBNET_GROUP_NAME_TAG", DEFAULT_SUBNET_GROUP_NAME_TAG)


def _status_for(exc: VpcContextError) -> int:
    if isinstance(exc, VpcNotFound):
        return 404
    if isinstance(exc, AmbiguousVpcLookup):
        return 409
    return 422


async def _lookup(query: VpcContextQuery) -> VpcContextResponse:
    provider = VpcContextProvider(
        region_name=query.region or DEFAULT_REGION,
        lookup_role_arn=query.lookup_role_arn,
    )
    try:
        return await provider.get_vpc_context(query)
    except VpcContextError as exc:
        logger.error("VPC context lookup failed: %s", exc)
        raise HTTPException(
            status_code=_status_for(exc),
            detail={"error": type(exc).__name__, "message": str(exc)},
        )


# VPC Context Lookup API Endpoints

@app.get(
    "/vpc-context/{vpc_id}",
    response_model=VpcContextResponse,
    response_model_exclude_none=True,
)
async def get_vpc_context(
    vpc_id: str,
    region: Optional[str] = Query(None, description="AWS region, e.g., ap-south-1"),
    account_id: Optional[str] = Query(None, description="Account of the caller"),
    return_asymmetric_subnets: bool = Query(False),
    subnet_group_name_tag: str = Query(SUBNET_GROUP_NAME_TAG),
    return_vpn_gateways: bool = Query(True),
):
    """Look up a VPC by its ID and return its subnet topology."""
    logger.info("API: Get VPC context | %s", vpc_id)

    query = VpcContextQuery(
        vpc_id=vpc_id,
        region=region,
        account_id=account_id,
        return_asymmetric_subnets=return_asymmetric_subnets,
        subnet_group_name_tag=subnet_group_name_tag,
        return_vpn_gateways=return_vpn_gateways,
    )
    return await _lookup(query)


@app.post(
    "/vpc-context",
    response_model=VpcContextResponse,
    response_model_exclude_none=True,
)
async def lookup_vpc_context(payload: VpcContextQuery):
    """Look up a VPC by ID and/or filters and return its subnet topology."""
    logger.info(
        "API: Lookup VPC context | vpc_id=%s, filter=%s",
        payload.vpc_id,
        payload.filter,
    )
    if "subnet_group_name_tag" not in payload.model_fields_set:
        payload = payload.model_copy(update={"subnet_group_name_tag": SUBNET_GROUP_NAME_TAG})
    return await _lookup(payload)
