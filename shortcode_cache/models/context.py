"""
Invocation context handed to the cache by the generation dispatcher
"""
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .sources import SourceKind


class ContentEntity(BaseModel):
    """The content item (post, page, ...) a shortcode is rendered in"""
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    modified_gmt: Union[datetime, str, None] = None


class InvocationContext(BaseModel):
    """Raw content plus the request state external data is read from"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: Optional[str] = None
    globals: Dict[str, Any] = Field(default_factory=dict)
    query: Dict[str, Any] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)
    request: Optional[Dict[str, Any]] = None
    session: Dict[str, Any] = Field(default_factory=dict)
    current_entity: Optional[ContentEntity] = None
    principal_id: Optional[Union[int, str]] = None

    @property
    def request_params(self) -> Dict[str, Any]:
        """Merged request parameters, body taking precedence over query"""
        if self.request is not None:
            return self.request
        return {**self.query, **self.body}

    @property
    def is_authenticated(self) -> bool:
        if self.principal_id is None:
            return False
        if isinstance(self.principal_id, int):
            return self.principal_id > 0
        return bool(self.principal_id)

    def lookup(self, kind: SourceKind, name: str) -> Tuple[bool, Any]:
        """Read ``name`` from the table matching ``kind``; returns (found, value)"""
        tables = {
            SourceKind.GLOBAL: self.globals,
            SourceKind.REQUEST: self.request_params,
            SourceKind.QUERY_GET: self.query,
            SourceKind.QUERY_POST: self.body,
            SourceKind.SESSION: self.session,
        }
        table = tables.get(kind)
        if table is None or name not in table or table[name] is None:
            return False, None
        return True, table[name]
