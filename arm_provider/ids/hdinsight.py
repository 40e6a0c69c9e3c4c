"""Resource identifiers for Microsoft.HDInsight."""

from dataclasses import dataclass

from .base import RESOURCE_GROUP_SEGMENTS, ResourceId, provider, static, user


@dataclass(frozen=True)
class HDInsightClusterId(ResourceId):
    subscription_id: str
    resource_group_name: str
    cluster_name: str

    DISPLAY_NAME = "HDInsight Cluster"
    SEGMENTS = RESOURCE_GROUP_SEGMENTS + (
        static("providers"),
        provider("Microsoft.HDInsight"),
        static("clusters"),
        user("cluster_name", "Cluster Name"),
    )
