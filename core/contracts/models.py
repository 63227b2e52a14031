from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator
from typing import Dict, List, Literal, Optional

# Statuses whose components take part in conflict detection
CONFLICT_STATUSES = ("added", "modified")
FILE_STATUSES = ("added", "modified", "deleted")


class ComponentDescriptor(BaseModel):
    """A named, typed structural unit reported by a classifier."""
    name: str
    type: str


class ConflictRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    change_id: str = Field(alias="prNumber")
    color: str

    @field_validator("change_id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return str(value)


class Component(BaseModel):
    name: str
    type: str
    conflicts: List[ConflictRef] = Field(default_factory=list)

    @property
    def identity(self) -> tuple:
        return (self.name, self.type)


class PackageBuckets(BaseModel):
    added: List[Component] = Field(default_factory=list)
    modified: List[Component] = Field(default_factory=list)
    deleted: List[Component] = Field(default_factory=list)

    def bucket(self, status: str) -> List[Component]:
        return getattr(self, status)


class ChangeFiles(BaseModel):
    added: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)


class Change(BaseModel):
    """
    A pull request under comparison. Attributes the tool does not use
    (title, author, links...) are kept as-is and written back out.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    files: Optional[ChangeFiles] = None
    metadata: Dict[str, PackageBuckets] = Field(default_factory=dict)
    # Which side of the report the change was loaded from; never serialized
    _state: Literal["open", "closed"] = PrivateAttr(default="open")

    @property
    def state(self) -> str:
        return self._state


class ChangeReport(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    open_prs: Dict[str, Change] = Field(default_factory=dict, alias="openPrs")
    closed_prs: Dict[str, Change] = Field(default_factory=dict, alias="closedPrs")

    @model_validator(mode="after")
    def _mark_status(self) -> "ChangeReport":
        for change in self.open_prs.values():
            change._state = "open"
        for change in self.closed_prs.values():
            change._state = "closed"
        return self

    def all_changes(self) -> Dict[str, Change]:
        """Open changes followed by closed ones, keyed by change id."""
        return {**self.open_prs, **self.closed_prs}
