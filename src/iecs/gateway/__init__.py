"""Access to ECS and CloudWatch Logs."""

from iecs.gateway.base import Gateway
from iecs.gateway.factory import create_gateway

__all__ = ["Gateway", "create_gateway"]
