"""Bookmark and folder records shared by the search and clustering engines."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ItemKind(str, Enum):
    """Discriminant for searchable items."""
    BOOKMARK = "bookmark"
    FOLDER = "folder"


def _str_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value if v is not None]


@dataclass
class BookmarkMetadata:
    """Page metadata scraped for a bookmark. Every field is optional."""
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_site_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["BookmarkMetadata"]:
        """Build metadata from a loose dict.

        Accepts both camelCase (``ogSiteName``) and snake_case keys. Fields of
        the wrong type are ignored rather than rejected.
        """
        if not isinstance(data, dict):
            return None

        def pick(*keys: str) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        keywords = pick("keywords")
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(",") if k.strip()]

        return cls(
            title=_str_or_none(pick("title")),
            description=_str_or_none(pick("description")),
            keywords=_str_list(keywords),
            og_title=_str_or_none(pick("og_title", "ogTitle")),
            og_description=_str_or_none(pick("og_description", "ogDescription")),
            og_site_name=_str_or_none(pick("og_site_name", "ogSiteName")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "keywords": list(self.keywords),
            "og_title": self.og_title,
            "og_description": self.og_description,
            "og_site_name": self.og_site_name,
        }


@dataclass
class Bookmark:
    """A saved link."""
    id: str
    title: str
    url: str
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    metadata: Optional[BookmarkMetadata] = None
    folder_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    cluster_id: Optional[str] = None

    @property
    def kind(self) -> ItemKind:
        return ItemKind.BOOKMARK

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bookmark":
        """Build a bookmark from a dict, accepting camelCase field names."""
        created = data.get("created_at") or data.get("createdAt")
        if isinstance(created, str):
            try:
                created = datetime.fromisoformat(created)
            except ValueError:
                created = None
        if not isinstance(created, datetime):
            created = datetime.utcnow()

        return cls(
            id=str(data.get("id") or ""),
            title=data.get("title") or "",
            url=data.get("url") or "",
            description=_str_or_none(data.get("description")),
            tags=_str_list(data.get("tags")),
            metadata=BookmarkMetadata.from_dict(data.get("metadata")),
            folder_id=data.get("folder_id", data.get("folderId")),
            created_at=created,
            cluster_id=data.get("cluster_id", data.get("clusterId")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "tags": list(self.tags),
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "folder_id": self.folder_id,
            "created_at": self.created_at.isoformat(),
            "cluster_id": self.cluster_id,
        }


@dataclass
class Folder:
    """A folder, either user-created or generated from a cluster."""
    id: str
    name: str
    parent_id: Optional[str] = None
    cluster_id: Optional[str] = None
    is_auto_generated: bool = False

    @property
    def kind(self) -> ItemKind:
        return ItemKind.FOLDER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Folder":
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            parent_id=data.get("parent_id", data.get("parentId")),
            cluster_id=data.get("cluster_id", data.get("clusterId")),
            is_auto_generated=bool(data.get("is_auto_generated", data.get("isAutoGenerated", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "cluster_id": self.cluster_id,
            "is_auto_generated": self.is_auto_generated,
        }


Item = Union[Bookmark, Folder]
