# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

from typing import Optional

import httpx

from ..config import get_auth_context, get_gateway_context, get_mode
from .direct import HeliconeClient
from .gateway import GatewayClient
from .interface import AnalyticsClient


def create_client(
    api_key: Optional[str] = None,
    region: Optional[str] = None,
    mode: Optional[str] = None,
    gateway_url: Optional[str] = None,
    gateway_token: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AnalyticsClient:
    """
    Build the backend selected by the resolved connection mode.

    Raises:
        ConfigError: If the selected backend's credentials are missing
    """
    if get_mode(mode) == "gateway":
        ctx = get_gateway_context(gateway_url, gateway_token)
        return GatewayClient(ctx.base_url, ctx.token, transport=transport)

    auth = get_auth_context(api_key, region)
    return HeliconeClient(auth.api_key, auth.region, transport=transport)
