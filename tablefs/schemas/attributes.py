"""条目属性模型：文件与目录两种带标签的变体，各自只携带有效字段。"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from tablefs.core.timezone import format_timestamp


class _AttributesBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    last_modified: Optional[int] = None
    visibility: Optional[str] = None

    def is_file(self) -> bool:
        return False

    def is_dir(self) -> bool:
        return False

    @property
    def last_modified_display(self) -> Optional[str]:
        return format_timestamp(self.last_modified)


class FileAttributes(_AttributesBase):
    type: Literal["file"] = "file"
    file_size: Optional[int] = None
    mime_type: Optional[str] = None

    def is_file(self) -> bool:
        return True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FileAttributes":
        return cls(
            path=row["path"],
            file_size=row.get("size"),
            last_modified=row.get("timestamp"),
            mime_type=row.get("mimetype"),
        )


class DirectoryAttributes(_AttributesBase):
    type: Literal["dir"] = "dir"

    def is_dir(self) -> bool:
        return True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DirectoryAttributes":
        return cls(path=row["path"], last_modified=row.get("timestamp"))


StorageAttributes = Annotated[
    Union[FileAttributes, DirectoryAttributes],
    Field(discriminator="type"),
]
