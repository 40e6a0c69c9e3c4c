"""Handler for azurerm_hdinsight_hadoop_cluster.

Most of the cluster definition is fixed at creation. In place, only tags, the
worker node count (a resize) and the gateway credentials can change.
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Set

from azure.core.exceptions import HttpResponseError
from azure.mgmt.hdinsight.models import (
    ClusterCreateParametersExtended,
    ClusterCreateProperties,
    ClusterDefinition,
    ClusterPatchParameters,
    ClusterResizeParameters,
    ComputeProfile,
    HardwareProfile,
    LinuxOperatingSystemProfile,
    OsProfile,
    Role,
    SshProfile,
    SshPublicKey,
    StorageAccount,
    StorageProfile,
    UpdateGatewaySettingsParameters,
    VirtualNetworkProfile,
)
from pydantic import Field, model_validator

from ...ids import HDInsightClusterId, StorageContainerId
from ...resource_data import ResourceData
from ...schema import (
    Block,
    Computed,
    ForceNew,
    HDInsightClusterName,
    HDInsightClusterVersion,
    Location,
    NonEmptyString,
    ResourceConfig,
    ResourceGroupName,
    Sensitive,
    StorageContainerIdString,
    requires_replacement,
)
from ...timeout_config import ResourceTimeouts
from .. import resource
from ..base_handler import ResourceHandler, enum_value, is_not_found

logger = logging.getLogger(__name__)

CLUSTER_KIND = "hadoop"

HEAD_NODE = "headnode"
WORKER_NODE = "workernode"
ZOOKEEPER_NODE = "zookeepernode"

HEAD_NODE_COUNT = 2
ZOOKEEPER_NODE_COUNT = 3

WRITE_ONLY_FIELDS = ("storage_account",)

GATEWAY_ENABLED = "restAuthCredential.isEnabled"
GATEWAY_USERNAME = "restAuthCredential.username"
GATEWAY_PASSWORD = "restAuthCredential.password"


class ComponentVersionBlock(Block):
    hadoop: NonEmptyString


class GatewayBlock(Block):
    enabled: bool = True
    username: NonEmptyString
    password: Annotated[NonEmptyString, Sensitive]

    @model_validator(mode="after")
    def must_be_enabled(self) -> "GatewayBlock":
        if not self.enabled:
            raise ValueError("the gateway can only be enabled")
        return self


class StorageAccountBlock(Block):
    storage_container_id: StorageContainerIdString
    storage_account_key: Annotated[NonEmptyString, Sensitive]
    is_default: bool


class NodeBlock(Block):
    vm_size: NonEmptyString
    username: NonEmptyString
    password: Annotated[Optional[str], Sensitive] = None
    ssh_keys: Optional[Set[NonEmptyString]] = None
    subnet_id: Optional[str] = None
    virtual_network_id: Optional[str] = None

    @model_validator(mode="after")
    def credentials_and_network(self) -> "NodeBlock":
        if bool(self.password) == bool(self.ssh_keys):
            raise ValueError("exactly one of password and ssh_keys must be specified")
        if bool(self.subnet_id) != bool(self.virtual_network_id):
            raise ValueError(
                "subnet_id and virtual_network_id must be specified together"
            )
        return self


class WorkerNodeBlock(NodeBlock):
    target_instance_count: Annotated[int, Field(ge=1)]


class RolesBlock(Block):
    head_node: NodeBlock
    worker_node: WorkerNodeBlock
    zookeeper_node: NodeBlock


class HadoopClusterConfig(ResourceConfig):
    name: Annotated[HDInsightClusterName, ForceNew]
    resource_group_name: Annotated[ResourceGroupName, ForceNew]
    location: Annotated[Location, ForceNew]
    cluster_version: Annotated[HDInsightClusterVersion, ForceNew]
    tier: Annotated[Literal["Standard", "Premium"], ForceNew]
    tls_min_version: Annotated[Optional[Literal["1.0", "1.1", "1.2"]], ForceNew] = None
    component_version: Annotated[ComponentVersionBlock, ForceNew]
    gateway: GatewayBlock
    storage_account: Annotated[
        List[StorageAccountBlock], ForceNew, Field(min_length=1)
    ]
    roles: RolesBlock
    tags: Optional[Dict[str, str]] = None
    https_endpoint: Annotated[Optional[str], Computed] = None
    ssh_endpoint: Annotated[Optional[str], Computed] = None

    @model_validator(mode="after")
    def one_default_storage_account(self) -> "HadoopClusterConfig":
        defaults = [a for a in self.storage_account if a.is_default]
        if len(defaults) != 1:
            raise ValueError("exactly one storage_account must have is_default set")
        return self


def expand_gateway_configuration(gateway: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        GATEWAY_ENABLED: gateway.get("enabled", True),
        GATEWAY_USERNAME: gateway["username"],
        GATEWAY_PASSWORD: gateway["password"],
    }


def expand_storage_accounts(blocks: List[Mapping[str, Any]]) -> List[StorageAccount]:
    accounts = []
    for block in blocks:
        container = StorageContainerId.parse(block["storage_container_id"])
        accounts.append(
            StorageAccount(
                name=container.blob_endpoint,
                is_default=block["is_default"],
                container=container.container_name,
                key=block["storage_account_key"],
            )
        )
    return accounts


def expand_role(name: str, node: Mapping[str, Any], target_instance_count: int) -> Role:
    linux_profile = LinuxOperatingSystemProfile(username=node["username"])
    if node.get("password"):
        linux_profile.password = node["password"]
    if node.get("ssh_keys"):
        linux_profile.ssh_profile = SshProfile(
            public_keys=[
                SshPublicKey(certificate_data=key) for key in sorted(node["ssh_keys"])
            ]
        )

    role = Role(
        name=name,
        target_instance_count=target_instance_count,
        hardware_profile=HardwareProfile(vm_size=node["vm_size"]),
        os_profile=OsProfile(linux_operating_system_profile=linux_profile),
    )
    if node.get("subnet_id"):
        role.virtual_network_profile = VirtualNetworkProfile(
            id=node["virtual_network_id"], subnet=node["subnet_id"]
        )
    return role


def expand_roles(roles: Mapping[str, Any]) -> List[Role]:
    worker = roles["worker_node"]
    return [
        expand_role(HEAD_NODE, roles["head_node"], HEAD_NODE_COUNT),
        expand_role(WORKER_NODE, worker, worker["target_instance_count"]),
        expand_role(ZOOKEEPER_NODE, roles["zookeeper_node"], ZOOKEEPER_NODE_COUNT),
    ]


def flatten_role(role: Any, configured: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Role DTO -> node block.

    Credentials are write-only in the API, so password and ssh_keys keep their
    configured values.
    """
    configured = configured or {}
    node: Dict[str, Any] = {
        "vm_size": configured.get("vm_size"),
        "username": configured.get("username"),
        "password": configured.get("password"),
        "ssh_keys": configured.get("ssh_keys"),
        "subnet_id": None,
        "virtual_network_id": None,
    }
    hardware = getattr(role, "hardware_profile", None)
    if hardware is not None and hardware.vm_size:
        node["vm_size"] = hardware.vm_size
    os_profile = getattr(role, "os_profile", None)
    linux = getattr(os_profile, "linux_operating_system_profile", None)
    if linux is not None and linux.username:
        node["username"] = linux.username
    network = getattr(role, "virtual_network_profile", None)
    if network is not None:
        node["subnet_id"] = network.subnet
        node["virtual_network_id"] = network.id
    return node


def flatten_roles(
    roles: Optional[List[Any]], configured: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    configured = configured or {}
    by_name = {role.name: role for role in roles or []}
    result: Dict[str, Any] = {}
    for key, role_name in (
        ("head_node", HEAD_NODE),
        ("worker_node", WORKER_NODE),
        ("zookeeper_node", ZOOKEEPER_NODE),
    ):
        role = by_name.get(role_name)
        if role is None:
            continue
        result[key] = flatten_role(role, configured.get(key))
        if key == "worker_node":
            result[key]["target_instance_count"] = role.target_instance_count
    return result


def find_connectivity_endpoint(name: str, endpoints: Optional[List[Any]]) -> Optional[str]:
    for endpoint in endpoints or []:
        if (endpoint.name or "").lower() == name.lower():
            return endpoint.location
    return None


def cluster_version_matches(configured: Optional[str], remote: Optional[str]) -> bool:
    """The API reports full versions (``3.6.1000.67``) for a requested ``3.6``."""
    if not configured or not remote:
        return False
    return remote == configured or remote.startswith(configured + ".")


def _without_mutable_role_fields(roles: Any, prior: Any = None) -> Any:
    """Drop what changes in place, and ssh_keys where prior credentials are unknown."""
    if not isinstance(roles, dict):
        return roles
    prior = prior if isinstance(prior, dict) else {}
    stripped = {}
    for key, node in roles.items():
        node = dict(node or {})
        node.pop("target_instance_count", None)
        node.pop("password", None)
        known = prior.get(key) or {}
        if known.get("password") is None and known.get("ssh_keys") is None:
            node.pop("ssh_keys", None)
        stripped[key] = node
    return stripped


@resource
class HadoopClusterHandler(ResourceHandler):
    TYPE_NAME = "azurerm_hdinsight_hadoop_cluster"
    SCHEMA = HadoopClusterConfig
    ID_TYPE = HDInsightClusterId
    TIMEOUTS = ResourceTimeouts(
        create=60 * 60, read=5 * 60, update=60 * 60, delete=60 * 60
    )

    def get_remote(self, resource_id: HDInsightClusterId) -> Any:
        return self.clients.hdinsight.clusters.get(
            resource_id.resource_group_name, resource_id.cluster_name
        )

    def replacement_fields(
        self, prior: Mapping[str, Any], planned: Mapping[str, Any]
    ) -> List[str]:
        """Force-new fields plus role changes other than worker count and passwords.

        The API never returns storage account keys or node credentials, so an
        imported prior has them unset; unset write-only values never force a
        replacement.
        """
        fields = [
            name
            for name in requires_replacement(self.SCHEMA, prior, planned)
            if not (name in WRITE_ONLY_FIELDS and prior.get(name) is None)
        ]
        if "cluster_version" in fields and cluster_version_matches(
            planned.get("cluster_version"), prior.get("cluster_version")
        ):
            fields.remove("cluster_version")
        if prior:
            prior_roles = prior.get("roles")
            if _without_mutable_role_fields(
                prior_roles, prior_roles
            ) != _without_mutable_role_fields(planned.get("roles"), prior_roles):
                fields.append("roles")
        return fields

    def create(self, d: ResourceData) -> None:
        id = HDInsightClusterId(
            self.subscription_id, d.get("resource_group_name"), d.get("name")
        )
        self.ensure_absent(id)

        properties = ClusterCreateProperties(
            cluster_version=d.get("cluster_version"),
            os_type="Linux",
            tier=d.get("tier"),
            cluster_definition=ClusterDefinition(
                kind=CLUSTER_KIND,
                component_version=dict(d.get("component_version")),
                configurations={"gateway": expand_gateway_configuration(d.get("gateway"))},
            ),
            compute_profile=ComputeProfile(roles=expand_roles(d.get("roles"))),
            storage_profile=StorageProfile(
                storageaccounts=expand_storage_accounts(d.get("storage_account"))
            ),
        )
        if d.get("tls_min_version"):
            properties.min_supported_tls_version = d.get("tls_min_version")

        parameters = ClusterCreateParametersExtended(
            location=d.get("location"),
            tags=d.get("tags"),
            properties=properties,
        )
        with self.calling(id, "create"):
            poller = self.clients.hdinsight.clusters.begin_create(
                id.resource_group_name, id.cluster_name, parameters
            )
        self.wait_for(poller, d, "create", id)

        d.set_id(id.id())
        self.refresh(d, "create")

    def update(self, d: ResourceData) -> None:
        id = HDInsightClusterId.parse(d.id)
        clusters = self.clients.hdinsight.clusters

        if d.has_change("tags"):
            with self.calling(id, "update"):
                result = clusters.update(
                    id.resource_group_name,
                    id.cluster_name,
                    ClusterPatchParameters(tags=d.get("tags") or {}),
                )
            self.wait_for(result, d, "update", id)

        prior_count = ((d.prior.get("roles") or {}).get("worker_node") or {}).get(
            "target_instance_count"
        )
        target_count = d.get("roles")["worker_node"]["target_instance_count"]
        if prior_count != target_count:
            logger.info(f"Resizing {WORKER_NODE} of {id} to {target_count}")
            with self.calling(id, "update"):
                poller = clusters.begin_resize(
                    id.resource_group_name,
                    id.cluster_name,
                    WORKER_NODE,
                    ClusterResizeParameters(target_instance_count=target_count),
                )
            self.wait_for(poller, d, "update", id)

        if d.has_change("gateway"):
            gateway = d.get("gateway")
            with self.calling(id, "update"):
                poller = clusters.begin_update_gateway_settings(
                    id.resource_group_name,
                    id.cluster_name,
                    UpdateGatewaySettingsParameters(
                        is_credential_enabled=gateway.get("enabled", True),
                        user_name=gateway["username"],
                        password=gateway["password"],
                    ),
                )
            self.wait_for(poller, d, "update", id)

        self.refresh(d, "update")

    def read(self, d: ResourceData) -> None:
        id = HDInsightClusterId.parse(d.id)
        try:
            cluster = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e

        with self.calling(id, "read"):
            gateway = self.clients.hdinsight.clusters.get_gateway_settings(
                id.resource_group_name, id.cluster_name
            )

        d.set("name", id.cluster_name)
        d.set("resource_group_name", id.resource_group_name)
        if cluster.location:
            d.set("location", cluster.location.replace(" ", "").lower())
        d.set("tags", cluster.tags or None)

        configured_gateway = d.get("gateway") or {}
        d.set(
            "gateway",
            {
                "enabled": bool(gateway.is_credential_enabled),
                "username": gateway.user_name,
                "password": gateway.password or configured_gateway.get("password"),
            },
        )

        props = cluster.properties
        if props is None:
            return
        if not cluster_version_matches(d.get("cluster_version"), props.cluster_version):
            d.set("cluster_version", props.cluster_version)
        d.set("tier", enum_value(props.tier))
        d.set("tls_min_version", props.min_supported_tls_version)

        definition = props.cluster_definition
        if definition is not None and definition.component_version:
            versions = {k.lower(): v for k, v in definition.component_version.items()}
            d.set("component_version", {"hadoop": versions.get("hadoop")})

        compute = props.compute_profile
        d.set("roles", flatten_roles(compute.roles if compute else None, d.get("roles")))

        d.set("https_endpoint", find_connectivity_endpoint("HTTPS", props.connectivity_endpoints))
        d.set("ssh_endpoint", find_connectivity_endpoint("SSH", props.connectivity_endpoints))

    def delete(self, d: ResourceData) -> None:
        id = HDInsightClusterId.parse(d.id)
        self.delete_tolerating_not_found(
            lambda: self.clients.hdinsight.clusters.begin_delete(
                id.resource_group_name, id.cluster_name
            ),
            d,
            id,
        )
