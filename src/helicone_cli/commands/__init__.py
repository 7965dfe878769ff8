# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

from .auth import auth_group
from .metrics import metrics_group
from .requests import requests_group
from .sessions import sessions_group

__all__ = ["auth_group", "metrics_group", "requests_group", "sessions_group"]
