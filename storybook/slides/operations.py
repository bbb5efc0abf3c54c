"""
Layout operations understood by the presentation renderer.

Each operation serializes to one Google Slides ``batchUpdate`` request. Update
requests carry a ``fields`` mask naming exactly the properties they set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

UNIT = "PT"
BLANK_LAYOUT = "BLANK"

# Object id of the placeholder slide every new presentation starts with.
DEFAULT_PLACEHOLDER_ID = "p"


@dataclass(frozen=True)
class RgbColor:
    """Linear 0..1 RGB triple."""

    red: float
    green: float
    blue: float

    def as_dict(self) -> dict[str, float]:
        return {"red": self.red, "green": self.green, "blue": self.blue}


WHITE = RgbColor(1.0, 1.0, 1.0)


@dataclass(frozen=True)
class SolidFill:
    color: RgbColor
    alpha: float = 1.0

    def as_dict(self) -> dict[str, Any]:
        return {"alpha": self.alpha, "color": {"rgbColor": self.color.as_dict()}}


@dataclass(frozen=True)
class Outline:
    """Shape outline; ``rendered=False`` hides it entirely."""

    color: RgbColor | None = None
    weight: float = 1.0
    dash_style: str = "SOLID"
    rendered: bool = True

    def as_dict(self) -> dict[str, Any]:
        if not self.rendered:
            return {"propertyState": "NOT_RENDERED"}
        outline: dict[str, Any] = {
            "weight": _dimension(self.weight),
            "dashStyle": self.dash_style,
        }
        if self.color is not None:
            outline["outlineFill"] = {"solidFill": {"color": {"rgbColor": self.color.as_dict()}}}
        return outline


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def as_dict(self) -> dict[str, Any]:
        return {"width": _dimension(self.width), "height": _dimension(self.height)}


@dataclass(frozen=True)
class Transform:
    scale_x: float = 1.0
    scale_y: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "scaleX": self.scale_x,
            "scaleY": self.scale_y,
            "translateX": self.translate_x,
            "translateY": self.translate_y,
            "unit": UNIT,
        }


class LayoutOperation:
    """
    Base class for renderer operations.

    ``declared_id`` is the object an operation creates (if any);
    ``referenced_ids`` are objects it requires to exist already.
    """

    kind = ""

    @property
    def declared_id(self) -> str | None:
        return None

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return ()

    def to_request(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class CreateSlide(LayoutOperation):
    object_id: str
    insertion_index: int | None = None
    layout: str = BLANK_LAYOUT

    kind = "createSlide"

    @property
    def declared_id(self) -> str:
        return self.object_id

    def to_request(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "objectId": self.object_id,
            "slideLayoutReference": {"predefinedLayout": self.layout},
        }
        if self.insertion_index is not None:
            body["insertionIndex"] = self.insertion_index
        return {self.kind: body}


@dataclass(frozen=True)
class DeleteObject(LayoutOperation):
    object_id: str

    kind = "deleteObject"

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.object_id,)

    def to_request(self) -> dict[str, Any]:
        return {self.kind: {"objectId": self.object_id}}


@dataclass(frozen=True)
class CreateImage(LayoutOperation):
    object_id: str
    url: str
    page_object_id: str
    transform: Transform

    kind = "createImage"

    @property
    def declared_id(self) -> str:
        return self.object_id

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.page_object_id,)

    def to_request(self) -> dict[str, Any]:
        return {
            self.kind: {
                "objectId": self.object_id,
                "url": self.url,
                "elementProperties": {
                    "pageObjectId": self.page_object_id,
                    "transform": self.transform.as_dict(),
                },
            }
        }


@dataclass(frozen=True)
class CreateShape(LayoutOperation):
    object_id: str
    shape_type: str
    page_object_id: str
    size: Size
    transform: Transform | None = None

    kind = "createShape"

    @property
    def declared_id(self) -> str:
        return self.object_id

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.page_object_id,)

    def to_request(self) -> dict[str, Any]:
        element: dict[str, Any] = {
            "pageObjectId": self.page_object_id,
            "size": self.size.as_dict(),
        }
        if self.transform is not None:
            element["transform"] = self.transform.as_dict()
        return {
            self.kind: {
                "objectId": self.object_id,
                "shapeType": self.shape_type,
                "elementProperties": element,
            }
        }


@dataclass(frozen=True)
class UpdateShapeStyle(LayoutOperation):
    object_id: str
    fill: SolidFill | None = None
    outline: Outline | None = None
    content_alignment: str | None = None
    link_url: str | None = None

    kind = "updateShapeProperties"

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.object_id,)

    def to_request(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        fields: list[str] = []
        if self.fill is not None:
            properties["shapeBackgroundFill"] = {"solidFill": self.fill.as_dict()}
            fields.append("shapeBackgroundFill")
        if self.outline is not None:
            properties["outline"] = self.outline.as_dict()
            fields.append("outline")
        if self.content_alignment is not None:
            properties["contentAlignment"] = self.content_alignment
            fields.append("contentAlignment")
        if self.link_url is not None:
            properties["link"] = {"url": self.link_url}
            fields.append("link")
        return {
            self.kind: {
                "objectId": self.object_id,
                "shapeProperties": properties,
                "fields": ",".join(fields),
            }
        }


@dataclass(frozen=True)
class InsertText(LayoutOperation):
    object_id: str
    text: str

    kind = "insertText"

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.object_id,)

    def to_request(self) -> dict[str, Any]:
        return {self.kind: {"objectId": self.object_id, "text": self.text}}


@dataclass(frozen=True)
class UpdateParagraphStyle(LayoutOperation):
    object_id: str
    alignment: str

    kind = "updateParagraphStyle"

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.object_id,)

    def to_request(self) -> dict[str, Any]:
        return {
            self.kind: {
                "objectId": self.object_id,
                "style": {"alignment": self.alignment},
                "fields": "alignment",
            }
        }


@dataclass(frozen=True)
class UpdateTextStyle(LayoutOperation):
    object_id: str
    bold: bool
    font_size: float
    font_family: str | None = None
    foreground: RgbColor | None = None

    kind = "updateTextStyle"

    @property
    def referenced_ids(self) -> tuple[str, ...]:
        return (self.object_id,)

    def to_request(self) -> dict[str, Any]:
        style: dict[str, Any] = {"bold": self.bold, "fontSize": _dimension(self.font_size)}
        fields = ["bold", "fontSize"]
        if self.foreground is not None:
            style["foregroundColor"] = {"opaqueColor": {"rgbColor": self.foreground.as_dict()}}
            fields.append("foregroundColor")
        if self.font_family is not None:
            style["fontFamily"] = self.font_family
            fields.append("fontFamily")
        return {
            self.kind: {
                "objectId": self.object_id,
                "style": style,
                "fields": ",".join(fields),
            }
        }


def validate_operations(
    operations: Sequence[LayoutOperation],
    *,
    preexisting_ids: Iterable[str] = (DEFAULT_PLACEHOLDER_ID,),
) -> None:
    """
    Check identifier invariants of an operation sequence.

    No identifier may be declared twice, and every referenced identifier must
    be declared by an earlier operation or already exist in the renderer.
    Violations are programming errors and raise :class:`ValueError`.
    """
    declared: set[str] = set()
    available = set(preexisting_ids)
    for position, operation in enumerate(operations):
        for ref in operation.referenced_ids:
            if ref not in available:
                raise ValueError(
                    f"Operation {position} ({operation.kind}) references undefined object {ref!r}."
                )
        if isinstance(operation, DeleteObject):
            available.discard(operation.object_id)
        new_id = operation.declared_id
        if new_id is not None:
            if new_id in declared or new_id in available:
                raise ValueError(f"Operation {position} redeclares object {new_id!r}.")
            declared.add(new_id)
            available.add(new_id)


def _dimension(magnitude: float) -> dict[str, Any]:
    return {"magnitude": magnitude, "unit": UNIT}
