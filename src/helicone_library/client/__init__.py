# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

from .direct import HeliconeClient
from .factory import create_client
from .gateway import GatewayClient
from .interface import AnalyticsClient
from .transport import RetryingTransport

__all__ = [
    "AnalyticsClient",
    "GatewayClient",
    "HeliconeClient",
    "RetryingTransport",
    "create_client",
]
