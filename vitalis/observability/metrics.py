"""Prometheus metrics for Vitalis.

Counts service operations by outcome, authorization denials, group sizes
and search result sizes.
"""

from prometheus_client import Counter, Histogram

OBSERVATION_OPERATIONS = Counter(
    "vitalis_observation_operations_total",
    "Total number of observation service operations",
    labelnames=["operation", "outcome"],
)

AUTHORIZATION_DENIALS = Counter(
    "vitalis_authorization_denials_total",
    "Total number of operations rejected for a missing privilege",
    labelnames=["operation", "privilege"],
)

OBSERVATION_GROUP_SIZE = Histogram(
    "vitalis_observation_group_size",
    "Number of members persisted per observation group",
    buckets=(1, 2, 3, 5, 10, 20, 50),
)

SEARCH_RESULTS = Histogram(
    "vitalis_search_results",
    "Number of observations found per search strategy",
    labelnames=["strategy"],
    buckets=(0, 1, 2, 5, 10, 25, 50, 100, 500),
)
