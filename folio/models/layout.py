"""Declarative layout tree used to compose OG preview cards."""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator

from folio.errors import LayoutError

NodeKind = Literal["container", "text"]
FlexDirection = Literal["row", "column"]


class LayoutNode(BaseModel):
    """A container (ordered child nodes) or a text leaf (a literal string).

    Construction fails fast with :class:`LayoutError` when a container holding
    more than one child does not say which way its children flow.
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    style: Dict[str, Any] = {}
    children: Union[str, List["LayoutNode"]] = []
    key: Optional[str] = None

    @model_validator(mode="after")
    def _check_structure(self) -> "LayoutNode":
        if self.kind == "text":
            if not isinstance(self.children, str):
                raise LayoutError("text nodes must hold a string")
            return self

        if isinstance(self.children, str):
            raise LayoutError("container nodes must hold child nodes, not a string")
        if len(self.children) > 1 and self.style.get("flex_direction") not in ("row", "column"):
            raise LayoutError(
                f"container {self.key or '<anonymous>'} has {len(self.children)} children "
                "but no flex_direction"
            )
        keys = [child.key for child in self.children if child.key is not None]
        if len(keys) != len(set(keys)):
            raise LayoutError(f"duplicate child keys under {self.key or '<anonymous>'}: {keys}")
        return self

    @property
    def direction(self) -> FlexDirection:
        return self.style.get("flex_direction", "column")


LayoutNode.model_rebuild()
