"""Server value objects and wire records."""

from datetime import datetime
from enum import IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from orbit.domain.base.enum_model import BaseEnumModel


class ServerStatus(BaseEnumModel):
    """
    Server status as reported by the compute API.

    Values the client does not know about map to ``UNKNOWN`` and are
    treated as transient.
    """

    ACTIVE = "ACTIVE"
    BUILD = "BUILD"
    DELETED = "DELETED"
    ERROR = "ERROR"
    HARD_REBOOT = "HARD_REBOOT"
    MIGRATING = "MIGRATING"
    PASSWORD = "PASSWORD"
    PAUSED = "PAUSED"
    REBOOT = "REBOOT"
    REBUILD = "REBUILD"
    RESCUE = "RESCUE"
    RESIZE = "RESIZE"
    REVERT_RESIZE = "REVERT_RESIZE"
    SHELVED = "SHELVED"
    SHELVED_OFFLOADED = "SHELVED_OFFLOADED"
    SHUTOFF = "SHUTOFF"
    SOFT_DELETED = "SOFT_DELETED"
    SUSPENDED = "SUSPENDED"
    VERIFY_RESIZE = "VERIFY_RESIZE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return cls.UNKNOWN


# Status from which no awaited transition can succeed.
TERMINAL_FAILURE_STATUS = ServerStatus.ERROR


class ServerPowerState(IntEnum):
    """Hypervisor power state."""

    NO_STATE = 0
    RUNNING = 1
    PAUSED = 3
    SHUTDOWN = 4
    CRASHED = 6
    SUSPENDED = 7

    @classmethod
    def _missing_(cls, value):
        return cls.NO_STATE

    def __str__(self):
        return self.name


class RebootType(BaseEnumModel):
    SOFT = "SOFT"
    HARD = "HARD"


class AddressType(BaseEnumModel):
    FIXED = "fixed"
    FLOATING = "floating"


class ServerSortKey(BaseEnumModel):
    """Keys servers can be sorted by."""

    ACCESS_IP_V4 = "access_ip_v4"
    ACCESS_IP_V6 = "access_ip_v6"
    AUTO_DISK_CONFIG = "auto_disk_config"
    AVAILABILITY_ZONE = "availability_zone"
    CONFIG_DRIVE = "config_drive"
    CREATED_AT = "created_at"
    DISPLAY_DESCRIPTION = "display_description"
    DISPLAY_NAME = "display_name"
    HOST = "host"
    HOSTNAME = "hostname"
    IMAGE_REF = "image_ref"
    INSTANCE_TYPE_ID = "instance_type_id"
    KEY_NAME = "key_name"
    LAUNCHED_AT = "launched_at"
    POWER_STATE = "power_state"
    PROJECT_ID = "project_id"
    TASK_STATE = "task_state"
    TERMINATED_AT = "terminated_at"
    UPDATED_AT = "updated_at"
    USER_ID = "user_id"
    UUID = "uuid"
    VM_STATE = "vm_state"


class ServerAddress(BaseModel):
    """A fixed or floating address attached to a server."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    addr: Union[IPv4Address, IPv6Address]
    version: Optional[int] = None
    addr_type: Optional[AddressType] = Field(
        default=None, validation_alias=AliasChoices("OS-EXT-IPS:type", "addr_type")
    )
    mac_addr: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("OS-EXT-IPS-MAC:mac_addr", "mac_addr")
    )


class ServerFlavor(BaseModel):
    """Flavor specs captured when the server object was built."""

    model_config = ConfigDict(frozen=True)

    original_name: str
    vcpu_count: int
    ram_size: int
    root_size: int
    ephemeral_size: int = 0
    swap_size: int = 0
    extra_specs: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_flavor(cls, flavor: dict[str, Any]) -> "ServerFlavor":
        """Build from a flavor record as returned by the flavor lookup."""
        swap = flavor.get("swap") or 0
        return cls(
            original_name=flavor.get("name") or flavor.get("original_name") or "",
            vcpu_count=flavor.get("vcpus", 0),
            ram_size=flavor.get("ram", 0),
            root_size=flavor.get("disk", 0),
            ephemeral_size=flavor.get("OS-FLV-EXT-DATA:ephemeral", flavor.get("ephemeral", 0)) or 0,
            swap_size=int(swap) if swap != "" else 0,
            extra_specs=flavor.get("extra_specs") or {},
        )


class ResourceLink(BaseModel):
    """Reference to another resource embedded in a server record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str


def _empty_to_none(value: Any) -> Any:
    if value == "" or value == {}:
        return None
    return value


class ServerRecord(BaseModel):
    """
    Detailed server snapshot.

    Instances are frozen; refreshing a server swaps in a whole new record.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str
    name: str = ""
    status: ServerStatus = ServerStatus.UNKNOWN
    power_state: ServerPowerState = Field(
        default=ServerPowerState.NO_STATE,
        validation_alias=AliasChoices("OS-EXT-STS:power_state", "power_state"),
    )
    access_ipv4: Optional[IPv4Address] = Field(
        default=None, validation_alias=AliasChoices("accessIPv4", "access_ipv4")
    )
    access_ipv6: Optional[IPv6Address] = Field(
        default=None, validation_alias=AliasChoices("accessIPv6", "access_ipv6")
    )
    addresses: dict[str, list[ServerAddress]] = Field(default_factory=dict)
    availability_zone: str = Field(
        default="",
        validation_alias=AliasChoices("OS-EXT-AZ:availability_zone", "availability_zone"),
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created", "created_at")
    )
    updated_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("updated", "updated_at")
    )
    description: Optional[str] = None
    flavor: dict[str, Any] = Field(default_factory=dict)
    has_config_drive: bool = Field(
        default=False, validation_alias=AliasChoices("config_drive", "has_config_drive")
    )
    image: Optional[ResourceLink] = None
    key_pair_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("key_name", "key_pair_name")
    )
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> ServerStatus:
        return ServerStatus.UNKNOWN if value is None else ServerStatus(value)

    @field_validator("power_state", mode="before")
    @classmethod
    def _parse_power_state(cls, value: Any) -> ServerPowerState:
        return ServerPowerState.NO_STATE if value is None else ServerPowerState(value)

    @field_validator("access_ipv4", "access_ipv6", "image", mode="before")
    @classmethod
    def _blank_is_missing(cls, value: Any) -> Any:
        return _empty_to_none(value)

    @field_validator("has_config_drive", mode="before")
    @classmethod
    def _parse_config_drive(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    @field_validator("availability_zone", "name", mode="before")
    @classmethod
    def _none_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("metadata", "addresses", "flavor", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class ServerSummaryRecord(BaseModel):
    """Id and name of a server as returned by the summary listing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""


class NetworkNIC(BaseModel):
    """A NIC allocated from the given network."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["network"] = "network"
    network: str


class PortNIC(BaseModel):
    """A NIC bound to an existing port."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["port"] = "port"
    port: str


class FixedIpNIC(BaseModel):
    """A NIC with a caller supplied fixed IPv4 address."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed_ip"] = "fixed_ip"
    fixed_ip: IPv4Address


ServerNIC = Annotated[Union[NetworkNIC, PortNIC, FixedIpNIC], Field(discriminator="kind")]


class ServerCreateRequest(BaseModel):
    """Verified server creation payload."""

    model_config = ConfigDict(frozen=True)

    name: str
    flavor_ref: str
    image_ref: Optional[str] = None
    key_name: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)
    networks: list[dict[str, str]] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": self.name,
            "flavorRef": self.flavor_ref,
            "metadata": dict(self.metadata),
            "networks": [dict(item) for item in self.networks],
        }
        if self.image_ref is not None:
            body["imageRef"] = self.image_ref
        if self.key_name is not None:
            body["key_name"] = self.key_name
        return {"server": body}
