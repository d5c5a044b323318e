"""Parent resources that own properties."""

from __future__ import annotations

from typing import Optional


class Resource:
    """
    A managed system object.

    Subclasses fix `container`, the category the backend files the object
    under (e.g. "users"). The core only reads these attributes.
    """

    type_name = "resource"
    container = ""

    def __init__(self, name: str, noop: bool = False, loglevel: Optional[str] = "notice"):
        if not name:
            raise ValueError("Resource requires a name")
        self.name = name
        self.noop = noop
        self.loglevel = loglevel

    @property
    def path(self) -> str:
        return f"/{self.type_name}[{self.name}]"

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class User(Resource):
    type_name = "user"
    container = "users"


class Group(Resource):
    type_name = "group"
    container = "groups"
