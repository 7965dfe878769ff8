# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..client.interface import AnalyticsClient
from ..core.types import ApiResult, FilterNode, QueryParams, Record

lib_logger = logging.getLogger("helicone_library")


@dataclass
class Sample:
    records: List[Record]
    reported_count: Optional[int]


async def fetch_sample(
    client: AnalyticsClient,
    filter_node: FilterNode,
    sample_limit: int,
    with_count: bool = True,
) -> ApiResult[Sample]:
    """
    Fetch the reported count, then the newest ``sample_limit`` records.

    The two calls run one after the other. The first error is returned.
    """
    reported: Optional[int] = None
    if with_count:
        count_result = await client.count_requests(filter_node)
        if count_result.error:
            return ApiResult.failure(count_result.error)
        reported = count_result.data

    page = await client.query_requests(
        QueryParams(filter=filter_node, limit=sample_limit, sort={"created_at": "desc"})
    )
    if page.error:
        return ApiResult.failure(page.error)

    records = page.data or []
    lib_logger.debug(
        f"Sampled {len(records)} records (limit {sample_limit}, reported count {reported})"
    )
    return ApiResult.success(Sample(records=records, reported_count=reported))
