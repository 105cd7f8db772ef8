"""Construction of the gateway for one invocation."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..exceptions import ConfigurationError
from .base import Gateway

__all__ = ["create_gateway"]

logger = logging.getLogger(__name__)


def create_gateway(config: Dict[str, Any]) -> Gateway:
    """Return the fixture gateway when ``demo`` is set, else the boto3 one.

    The fixture module is only imported in the demo branch.
    """
    if config.get("demo"):
        from .demo import DemoGateway

        logger.info("Using demo gateway")
        return DemoGateway()

    import boto3
    from botocore.exceptions import NoRegionError, ProfileNotFound

    from .aws import AwsGateway

    aws_cfg = config.get("aws") or {}
    profile = aws_cfg.get("profile")
    region = aws_cfg.get("region")
    try:
        session = boto3.Session(profile_name=profile, region_name=region)
        gateway = AwsGateway(session)
    except ProfileNotFound as exc:
        raise ConfigurationError(f"AWS profile '{profile}' not found") from exc
    except NoRegionError as exc:
        raise ConfigurationError(
            "no AWS region configured; set AWS_REGION or pass --region"
        ) from exc
    logger.info(
        "Using AWS gateway",
        extra={"region": gateway.region, "profile": profile},
    )
    return gateway
