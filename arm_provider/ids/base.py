"""Segment-table driven Azure resource identifiers.

Every Resource Manager ID is a fixed sequence of path segments. Some are
literal (``subscriptions``, ``resourceGroups``, ``providers``), one names the
resource provider namespace (``Microsoft.DocumentDB``) and the rest carry
user-supplied values (subscription ID, resource group, account name, ...).

Subclasses declare that sequence in ``SEGMENTS`` and one dataclass field per
user segment. Parsing and rendering are driven entirely by the table, which
keeps ``parse(x.id()) == x`` true for every identifier type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Tuple, Type, TypeVar

from ..exceptions import ResourceIdParseError

T = TypeVar("T", bound="ResourceId")


class SegmentType(Enum):
    """Kinds of path segment in a resource ID."""

    STATIC = "static"
    PROVIDER = "provider"
    USER = "user"


@dataclass(frozen=True)
class Segment:
    """One path segment.

    For STATIC and PROVIDER segments ``value`` is the literal text. For USER
    segments ``value`` is the dataclass field name and ``label`` the
    human-readable name used in messages.
    """

    kind: SegmentType
    value: str
    label: str = ""


def static(value: str) -> Segment:
    return Segment(SegmentType.STATIC, value)


def provider(namespace: str) -> Segment:
    return Segment(SegmentType.PROVIDER, namespace)


def user(field_name: str, label: str) -> Segment:
    return Segment(SegmentType.USER, field_name, label)


SUBSCRIPTION_SEGMENTS: Tuple[Segment, ...] = (
    static("subscriptions"),
    user("subscription_id", "Subscription"),
)

RESOURCE_GROUP_SEGMENTS: Tuple[Segment, ...] = SUBSCRIPTION_SEGMENTS + (
    static("resourceGroups"),
    user("resource_group_name", "Resource Group Name"),
)


@dataclass(frozen=True)
class ResourceId:
    """Base class for structured resource identifiers."""

    SEGMENTS: ClassVar[Tuple[Segment, ...]] = ()
    DISPLAY_NAME: ClassVar[str] = "Resource"

    @classmethod
    def parse(cls: Type[T], value: str) -> T:
        """Parse ``value``, matching literal segments exactly."""
        return cls._parse(value, insensitively=False)

    @classmethod
    def parse_insensitively(cls: Type[T], value: str) -> T:
        """Parse ``value``, matching literal segments case-insensitively.

        The Resource Manager API is inconsistent about casing in the IDs it
        returns (``resourcegroups`` vs ``resourceGroups``); use this when
        parsing IDs that came back from the API rather than from a user.
        """
        return cls._parse(value, insensitively=True)

    @classmethod
    def _parse(cls: Type[T], value: str, insensitively: bool) -> T:
        if not isinstance(value, str) or not value.strip():
            raise ResourceIdParseError(
                f"{cls.DISPLAY_NAME} ID must be a non-empty string",
                value=value if isinstance(value, str) else repr(value),
                expected=cls.format(),
            )
        if not value.startswith("/"):
            raise ResourceIdParseError(
                f"{cls.DISPLAY_NAME} ID must start with '/'",
                value=value,
                expected=cls.format(),
            )

        parts = value[1:].split("/")
        if parts and parts[-1] == "":
            parts = parts[:-1]

        if len(parts) != len(cls.SEGMENTS):
            raise ResourceIdParseError(
                f"parsing {value!r} as a {cls.DISPLAY_NAME} ID: expected "
                f"{len(cls.SEGMENTS)} segments but got {len(parts)}",
                value=value,
                expected=cls.format(),
            )

        values: Dict[str, str] = {}
        for index, (segment, part) in enumerate(zip(cls.SEGMENTS, parts)):
            if segment.kind is SegmentType.USER:
                if not part:
                    raise ResourceIdParseError(
                        f"parsing {value!r} as a {cls.DISPLAY_NAME} ID: "
                        f"segment {segment.label!r} was empty",
                        value=value,
                        expected=cls.format(),
                    )
                values[segment.value] = part
                continue

            matches = part == segment.value or (
                insensitively and part.lower() == segment.value.lower()
            )
            if not matches:
                raise ResourceIdParseError(
                    f"parsing {value!r} as a {cls.DISPLAY_NAME} ID: segment "
                    f"{index + 1} should be {segment.value!r} but got {part!r}",
                    value=value,
                    expected=cls.format(),
                )

        return cls(**values)

    @classmethod
    def format(cls) -> str:
        """Return the ID template, e.g. ``/subscriptions/{subscription_id}/...``."""
        rendered = []
        for segment in cls.SEGMENTS:
            if segment.kind is SegmentType.USER:
                rendered.append("{" + segment.value + "}")
            else:
                rendered.append(segment.value)
        return "/" + "/".join(rendered)

    @classmethod
    def validate(cls, value: str) -> str:
        """Validator form of ``parse``: returns ``value`` unchanged or raises."""
        cls.parse(value)
        return value

    def id(self) -> str:
        """Render the canonical ID string."""
        rendered = []
        for segment in self.SEGMENTS:
            if segment.kind is SegmentType.USER:
                rendered.append(getattr(self, segment.value))
            else:
                rendered.append(segment.value)
        return "/" + "/".join(rendered)

    def components(self) -> List[Tuple[str, str]]:
        return [
            (segment.label, getattr(self, segment.value))
            for segment in self.SEGMENTS
            if segment.kind is SegmentType.USER
        ]

    def __str__(self) -> str:
        parts = ", ".join(f"{label}: {value!r}" for label, value in self.components())
        return f"{self.DISPLAY_NAME} ({parts})"


@dataclass(frozen=True)
class ResourceGroupId(ResourceId):
    subscription_id: str
    resource_group_name: str

    DISPLAY_NAME = "Resource Group"
    SEGMENTS = RESOURCE_GROUP_SEGMENTS
