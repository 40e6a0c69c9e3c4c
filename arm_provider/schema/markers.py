"""Field markers carried as ``Annotated`` metadata on configuration models.

    name: Annotated[CosmosEntityName, ForceNew]
    throughput: Annotated[Optional[CosmosThroughput], Computed] = None
"""


class FieldMarker:
    """Opaque marker object; pydantic keeps unknown metadata in ``FieldInfo.metadata``."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"FieldMarker({self.name!r})"


# Changing the value destroys and recreates the remote object.
ForceNew = FieldMarker("force_new")

# Value may be left unset and is then filled in from the remote state.
Computed = FieldMarker("computed")

# Value is never logged or echoed back in plain text.
Sensitive = FieldMarker("sensitive")
