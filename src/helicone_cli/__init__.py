# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

__version__ = "0.1.0"
