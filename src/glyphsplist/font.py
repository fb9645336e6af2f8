"""Glyphs 3 document model.

Every record is a ``PlistModel``; the schema engine derives the wire format
from the field declarations below. Records that Glyphs.app extends often
carry an ``other_stuff`` rest field, so keys this model does not know yet
survive a load/save round trip unchanged.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path as FilePath
from typing import Annotated, Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import Field

from .codes import ErrorCode
from .kernel import plist
from .kernel.errors import (
    ConversionError,
    ElementError,
    ExtraElementsError,
    MissingElementError,
    NotNumericError,
    PlistError,
    WrongVariantError,
)
from .kernel.scalars import (
    Codepoints,
    Color,
    GlyphName,
    Kerning,
    Point,
    Scale,
    U16,
    encode_float,
    get_converter,
    register_converter,
)
from .kernel.schema import ALWAYS_SERIALISE, REST, PlistModel
from .kernel.transform import IDENTITY, AffineTransform, decompose, recompose
from .kernel.values import PlistDict, is_number

logger = logging.getLogger(__name__)

Rest = Annotated[Dict[str, Any], REST]


class UnsupportedFormatError(PlistError):
    """The document is not a Glyphs 3 file."""
    code = ErrorCode.UNSUPPORTED_FORMAT

    def __init__(self, message: str = "Glyphs 2 files are not supported"):
        super().__init__(message)


class ShapeError(ConversionError):
    """A layer shape failed to decode as a component or a path."""
    code = ErrorCode.BAD_SHAPE

    def __init__(self, kind: str, cause: ConversionError):
        self.kind = kind
        self.cause = cause
        super().__init__(f"bad {kind}: {cause}")

    @property
    def root_cause(self) -> ConversionError:
        return self.cause.root_cause


# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------

class NodeType(str, Enum):
    LINE = "l"
    LINE_SMOOTH = "ls"
    OFF_CURVE = "o"
    CURVE = "c"
    CURVE_SMOOTH = "cs"
    QCURVE = "q"
    QCURVE_SMOOTH = "qs"


class Direction(str, Enum):
    BIDI = "BIDI"
    LTR = "LTR"
    RTL = "RTL"
    VTL = "VTL"
    VTR = "VTR"


class Case(str, Enum):
    NONE = "noCase"
    UPPER = "upper"
    LOWER = "lower"
    SMALL_CAPS = "smallCaps"
    OTHER = "other"


class MetricType(str, Enum):
    ASCENDER = "ascender"
    BASELINE = "baseline"
    BODY_HEIGHT = "bodyHeight"
    CAP_HEIGHT = "cap height"
    DESCENDER = "descender"
    ITALIC_ANGLE = "italic angle"
    MID_HEIGHT = "midHeight"
    SLANT_HEIGHT = "slant height"
    TOP_HEIGHT = "topHeight"
    X_HEIGHT = "x-height"


class InstanceType(str, Enum):
    VARIABLE = "variable"


class AnchorOrientation(str, Enum):
    CENTER = "center"
    RIGHT = "right"


# ---------------------------------------------------------------------------
# Paths and nodes
# ---------------------------------------------------------------------------

class NodeAttrs(PlistModel):
    name: Optional[str] = None

    other_stuff: Rest = Field(default_factory=dict)


@dataclass(frozen=True)
class Node:
    """One outline point, stored as ``(x, y, tag[, attrs])``."""
    pt: Point
    node_type: NodeType
    attr: Optional[NodeAttrs] = None


_NODE_COORDINATES = ("x coordinate", "y coordinate")


def decode_node(value: Any) -> Node:
    if not isinstance(value, list):
        raise WrongVariantError("node array", value)
    if len(value) > 4:
        raise ExtraElementsError("node", len(value), 4)

    coordinates = []
    for index, name in enumerate(_NODE_COORDINATES):
        if index >= len(value):
            raise MissingElementError("node", name)
        if not is_number(value[index]):
            raise NotNumericError("node", name, value[index])
        coordinates.append(float(value[index]))

    if len(value) < 3:
        raise MissingElementError("node", "type")
    node_type = _NODE_TYPE.decode(value[2])

    attr = None
    if len(value) == 4:
        try:
            attr = NodeAttrs.from_plist(value[3])
        except ConversionError as exc:
            raise ElementError(3, exc) from exc

    return Node(Point(*coordinates), node_type, attr)


def encode_node(node: Node) -> List[Any]:
    # Three elements without attributes, four with.
    result = [encode_float(node.pt.x), encode_float(node.pt.y), node.node_type.value]
    if node.attr is not None:
        result.append(node.attr.to_plist())
    return result


register_converter(Node, decode_node, encode_node)

_NODE_TYPE = get_converter(NodeType)


class PathShadow(PlistModel):
    blur: str
    color: List[int]
    offset_x: str
    offset_y: str


class PathGradient(PlistModel):
    colors: List[List[Color]]
    start: Point
    end: Point
    gradient_type: str = Field(alias="type")


class PathAttrs(PlistModel):
    line_cap_start: Optional[float] = None
    line_cap_end: Optional[float] = None
    stroke_pos: Optional[int] = None
    stroke_height: Optional[float] = None
    stroke_width: Optional[float] = None
    stroke_color: Optional[List[int]] = None
    mask: Optional[int] = None
    fill: Optional[int] = None
    fill_color: Optional[List[int]] = None
    shadow: Optional[PathShadow] = None
    gradient: Optional[PathGradient] = None


class Path(PlistModel):
    attr: Optional[PathAttrs] = None
    # Glyphs.app treats a missing "closed" as closed, and always writes it.
    closed: Annotated[bool, ALWAYS_SERIALISE] = True
    nodes: List[Node]

    @classmethod
    def new(cls, closed: bool = True) -> "Path":
        return cls(closed=closed, nodes=[])

    def add(self, pt: Tuple[float, float], node_type: NodeType) -> None:
        self.nodes.append(Node(Point(*pt), node_type))

    def rotate_left(self, delta: int) -> None:
        if self.nodes:
            delta %= len(self.nodes)
            self.nodes[:] = self.nodes[delta:] + self.nodes[:delta]

    def reverse(self) -> None:
        self.nodes.reverse()


# ---------------------------------------------------------------------------
# Components, anchors, guides
# ---------------------------------------------------------------------------

class Component(PlistModel):
    reference: Annotated[str, ALWAYS_SERIALISE] = Field(alias="ref")
    rotation: Optional[float] = Field(None, alias="angle")
    pos: Optional[Point] = None
    scale: Optional[Scale] = None
    slant: Optional[Scale] = None

    other_stuff: Rest = Field(default_factory=dict)

    @classmethod
    def from_transform(cls, reference: str, transform: AffineTransform) -> "Component":
        """Component placed by an affine matrix.

        The identity leaves every placement field unset. Shear is dropped.
        """
        if transform == IDENTITY:
            return cls(reference=reference)
        s_x, s_y, rotation = decompose(transform)
        return cls(
            reference=reference,
            rotation=rotation,
            pos=Point(transform.x_offset, transform.y_offset),
            scale=Scale(s_x, s_y),
        )

    def to_transform(self) -> AffineTransform:
        """Affine matrix equivalent of this component's placement."""
        return recompose(
            offset=self.pos or (0.0, 0.0),
            rotation=self.rotation or 0.0,
            scale_xy=self.scale or (1.0, 1.0),
            skew_xy=self.slant or (0.0, 0.0),
        )


Shape = Union[Path, Component]


def decode_shape(value: Any) -> Shape:
    if not isinstance(value, dict):
        raise WrongVariantError("dictionary", value)
    if "ref" in value:
        try:
            return Component.from_plist(value)
        except ConversionError as exc:
            raise ShapeError("component", exc) from exc
    try:
        return Path.from_plist(value)
    except ConversionError as exc:
        raise ShapeError("path", exc) from exc


def encode_shape(shape: Shape) -> PlistDict:
    return shape.to_plist()


register_converter(Shape, decode_shape, encode_shape, name="Shape")


class Anchor(PlistModel):
    name: Annotated[str, ALWAYS_SERIALISE]
    orientation: Optional[AnchorOrientation] = None
    pos: Point = Field(default_factory=Point)
    user_data: Dict[str, Any] = Field(default_factory=dict)


class GuideLine(PlistModel):
    name: Optional[str] = None
    angle: float = 0.0
    pos: Point = Field(default_factory=Point)
    locked: bool = False
    lock_angle: float = 0.0
    show_measurement: bool = False
    orientation: Optional[AnchorOrientation] = None
    filter: Optional[str] = None


# ---------------------------------------------------------------------------
# Layers and glyphs
# ---------------------------------------------------------------------------

class AxisRules(PlistModel):
    min: Optional[float] = None
    max: Optional[float] = None


class LayerAttr(PlistModel):
    axis_rules: Optional[List[AxisRules]] = None
    coordinates: Optional[List[float]] = None

    other_stuff: Rest = Field(default_factory=dict)


class BackgroundLayer(PlistModel):
    anchors: Optional[List[Anchor]] = None
    shapes: List[Shape] = Field(default_factory=list)

    other_stuff: Rest = Field(default_factory=dict)


class Layer(PlistModel):
    attr: Optional[LayerAttr] = None
    name: Optional[str] = None
    background: Optional[BackgroundLayer] = None
    associated_master_id: Optional[str] = None
    layer_id: Annotated[str, ALWAYS_SERIALISE]
    width: Annotated[float, ALWAYS_SERIALISE]
    vert_width: Optional[float] = None
    vert_origin: Optional[float] = None
    shapes: List[Shape] = Field(default_factory=list)
    anchors: Optional[List[Anchor]] = None
    guides: Optional[List[GuideLine]] = None
    metric_top: Optional[str] = None
    metric_bottom: Optional[str] = None
    metric_left: Optional[str] = None
    metric_right: Optional[str] = None
    metric_width: Optional[str] = None
    metric_vert_width: Optional[str] = None
    user_data: Dict[str, Any] = Field(default_factory=dict)
    color: Optional[Color] = None

    other_stuff: Rest = Field(default_factory=dict)

    @classmethod
    def new(cls, layer_id: str, associated_master_id: Optional[str] = None) -> "Layer":
        """An empty layer, 600 units wide."""
        return cls(layer_id=layer_id, associated_master_id=associated_master_id, width=600.0)

    def is_master_layer(self) -> bool:
        return self.associated_master_id is None

    def is_intermediate_layer(self) -> bool:
        return self.attr is not None and self.attr.coordinates is not None

    def is_alternate_layer(self) -> bool:
        return self.attr is not None and self.attr.axis_rules is not None

    def _has_attr_key(self, key: str) -> bool:
        return self.attr is not None and key in self.attr.other_stuff

    def is_color_layer(self) -> bool:
        return self._has_attr_key("color")

    def is_color_palette_layer(self) -> bool:
        return self._has_attr_key("colorPalette")

    def is_svg_layer(self) -> bool:
        return self._has_attr_key("svg")

    def is_icolor_layer(self) -> bool:
        return self._has_attr_key("sbixSize")

    def coordinates(self) -> Optional[List[float]]:
        """Design-space location of an intermediate layer."""
        if self.attr is None:
            return None
        return self.attr.coordinates


class Glyph(PlistModel):
    glyphname: Annotated[GlyphName, ALWAYS_SERIALISE]
    unicode: Optional[Codepoints] = None
    layers: Annotated[List[Layer], ALWAYS_SERIALISE]
    production: Optional[str] = None
    script: Optional[str] = None
    direction: Optional[Direction] = None
    case: Optional[Case] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    # Right-side kerning group ("public.kern1." in UFO terms).
    kern_right: Optional[GlyphName] = None
    # Left-side kerning group ("public.kern2.").
    kern_left: Optional[GlyphName] = None
    kern_top: Optional[GlyphName] = None
    kern_bottom: Optional[GlyphName] = None
    metric_top: Optional[str] = None
    metric_bottom: Optional[str] = None
    metric_left: Optional[str] = None
    metric_right: Optional[str] = None
    metric_width: Optional[str] = None
    user_data: Dict[str, Any] = Field(default_factory=dict)
    export: bool = True
    color: Optional[Color] = None
    note: Optional[str] = None
    locked: bool = False

    other_stuff: Rest = Field(default_factory=dict)

    @classmethod
    def new(cls, glyphname: str, unicodes: Optional[Codepoints] = None) -> "Glyph":
        """A glyph with no layers yet."""
        return cls(glyphname=glyphname, unicode=unicodes, layers=[])

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.layer_id == layer_id:
                return layer
        return None


# ---------------------------------------------------------------------------
# Font-level records
# ---------------------------------------------------------------------------

class Axis(PlistModel):
    name: Annotated[str, ALWAYS_SERIALISE]
    tag: Annotated[str, ALWAYS_SERIALISE]
    hidden: bool = False


class Metric(PlistModel):
    filter: Optional[str] = None
    name: Optional[str] = None
    metric_type: Optional[MetricType] = Field(None, alias="type")


class FontNumbers(PlistModel):
    name: str


class FontStems(PlistModel):
    name: str
    filter: Optional[str] = None
    horizontal: bool = False


class Settings(PlistModel):
    disables_automatic_alignment: bool = False
    disables_nice_names: bool = False

    other_stuff: Rest = Field(default_factory=dict)


class MasterMetric(PlistModel):
    pos: float = 0.0
    over: float = 0.0


class FontMaster(PlistModel):
    id: Annotated[str, ALWAYS_SERIALISE]
    name: Annotated[str, ALWAYS_SERIALISE]
    metric_values: Annotated[List[MasterMetric], ALWAYS_SERIALISE]
    number_values: Optional[List[float]] = None
    stem_values: Optional[List[float]] = None
    axes_values: Optional[List[float]] = None
    visible: bool = True
    user_data: Dict[str, Any] = Field(default_factory=dict)

    other_stuff: Rest = Field(default_factory=dict)

    @classmethod
    def new(cls, id: str, name: str) -> "FontMaster":
        return cls(id=id, name=name, metric_values=[])

    def iter_metrics(self, font: "Font") -> Iterator[Tuple[Metric, MasterMetric]]:
        """Pair the font's metric keys with this master's values.

        Stops at the shorter of the two lists.
        """
        return zip(font.metrics, self.metric_values)


class Instance(PlistModel):
    name: Annotated[str, ALWAYS_SERIALISE]
    axes_values: Optional[List[float]] = None
    exports: bool = True
    is_bold: bool = False
    is_italic: bool = False
    link_style: Optional[str] = None
    instance_type: Optional[InstanceType] = Field(None, alias="type")
    user_data: Dict[str, Any] = Field(default_factory=dict)
    visible: bool = True
    weight_class: int = 400
    width_class: int = 5

    other_stuff: Rest = Field(default_factory=dict)

    @classmethod
    def new(cls, name: str) -> "Instance":
        return cls(name=name)


class Font(PlistModel):
    app_version: Annotated[str, ALWAYS_SERIALISE] = Field(alias=".appVersion")
    # Only Glyphs 3 files carry a format version.
    format_version: Annotated[Optional[int], ALWAYS_SERIALISE] = Field(None, alias=".formatVersion")
    date: Annotated[str, ALWAYS_SERIALISE]
    family_name: Annotated[str, ALWAYS_SERIALISE]
    version_major: Annotated[int, ALWAYS_SERIALISE]
    version_minor: Annotated[int, ALWAYS_SERIALISE]
    # Glyphs.app allows 16-16384.
    units_per_em: Annotated[U16, ALWAYS_SERIALISE]
    glyphs: Annotated[List[Glyph], ALWAYS_SERIALISE]
    font_master: Annotated[List[FontMaster], ALWAYS_SERIALISE]
    metrics: Annotated[List[Metric], ALWAYS_SERIALISE]
    axes: Optional[List[Axis]] = None
    numbers: Optional[List[FontNumbers]] = None
    stems: Optional[List[FontStems]] = None
    settings: Optional[Settings] = None
    instances: Optional[List[Instance]] = None
    kerning_ltr: Optional[Kerning] = Field(None, alias="kerningLTR")
    kerning_rtl: Optional[Kerning] = Field(None, alias="kerningRTL")
    kerning_vertical: Optional[Kerning] = None
    user_data: Optional[Dict[str, Any]] = None

    other_stuff: Rest = Field(default_factory=dict)

    @classmethod
    def new(cls) -> "Font":
        """The document Glyphs.app creates for File > New."""
        return cls(
            app_version="3259",
            format_version=3,
            date="2024-04-25 08:35:58 +0000",
            family_name="New Font",
            version_major=1,
            version_minor=0,
            units_per_em=1000,
            glyphs=[
                Glyph(
                    glyphname="space",
                    unicode=(0x20,),
                    layers=[Layer(layer_id="m01", width=200.0)],
                ),
            ],
            font_master=[
                FontMaster(
                    id="m01",
                    name="Regular",
                    metric_values=[
                        MasterMetric(pos=800.0, over=16.0),
                        MasterMetric(pos=0.0, over=-16.0),
                        MasterMetric(pos=-200.0, over=-16.0),
                    ],
                ),
            ],
            metrics=[
                Metric(metric_type=MetricType.ASCENDER),
                Metric(metric_type=MetricType.BASELINE),
                Metric(metric_type=MetricType.DESCENDER),
            ],
        )

    @classmethod
    def loads(cls, text: str, options=None) -> "Font":
        """Parse and decode a Glyphs 3 document.

        Args:
            text: Document text
            options: Optional ``ParseOptions``

        Raises:
            ParseError: If the text is not a valid plist
            UnsupportedFormatError: If the document has no ``.formatVersion``
                (Glyphs 2 and older)
            ConversionError: If the document does not match the model
        """
        tree = plist.parse(text, options)
        if isinstance(tree, dict) and ".formatVersion" not in tree:
            raise UnsupportedFormatError()
        return cls.from_plist(tree)

    @classmethod
    def load(cls, path: Union[str, os.PathLike], options=None) -> "Font":
        """Read and decode a ``.glyphs`` file (UTF-8)."""
        path = FilePath(path)
        logger.debug("Loading %s", path)
        font = cls.loads(path.read_text(encoding="utf-8"), options)
        logger.debug("Loaded %s: %d glyphs, %d masters", path, len(font.glyphs), len(font.font_master))
        return font

    def dumps(self) -> str:
        """Canonical plist text for this font."""
        return plist.dumps(self.to_plist())

    def save(self, path: Union[str, os.PathLike]) -> None:
        """Write this font to ``path`` (UTF-8, trailing newline)."""
        path = FilePath(path)
        logger.debug("Saving %s", path)
        path.write_text(self.dumps() + "\n", encoding="utf-8")

    def get_glyph(self, glyphname: str) -> Optional[Glyph]:
        for glyph in self.glyphs:
            if glyph.glyphname == glyphname:
                return glyph
        return None
