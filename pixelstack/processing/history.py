"""
Edit records and edit history management for PixelStack.

An Edit is an immutable, parameterized transformation (crop, rotate,
filter or adjustment). An EditHistory is the ordered list of edits applied
to one image; replay order is always creation time ascending, with ties
kept in insertion order.
"""

import json
import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from pixelstack.errors import EditParseError
from pixelstack.processing.filters import FilterType, coerce_filter_type, get_filter_name


logger = logging.getLogger(__name__)


class EditKind(Enum):
    """Kinds of edits the composition engine can replay."""
    CROP = "crop"
    ROTATE = "rotate"
    FILTER = "filter"
    ADJUSTMENT = "adjustment"


def _number(data: Dict[str, Any], key: str, cast: Callable = float,
            default: Any = None) -> Any:
    """Read an optional numeric field, rejecting values that are not numbers."""
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise EditParseError(f"Parameter '{key}' must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise EditParseError(f"Parameter '{key}' must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise EditParseError(f"Parameter '{key}' must be finite, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise EditParseError(f"Parameter '{key}' must be a number, got {value!r}") from e


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def _format_number(value: float) -> str:
    """Render 90.0 as '90' and 12.5 as '12.5'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class CropParameters:
    """Crop rectangle in the coordinate space of the buffer it is applied to."""
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            'cropX': self.x,
            'cropY': self.y,
            'cropWidth': self.width,
            'cropHeight': self.height,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CropParameters':
        return cls(
            x=_number(data, 'cropX', int),
            y=_number(data, 'cropY', int),
            width=_number(data, 'cropWidth', int),
            height=_number(data, 'cropHeight', int),
        )


@dataclass(frozen=True)
class RotateParameters:
    """Rotation in degrees, positive = clockwise."""
    angle_degrees: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({'angle': self.angle_degrees})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RotateParameters':
        return cls(angle_degrees=_number(data, 'angle'))


@dataclass(frozen=True)
class FilterParameters:
    """Color filter and blend intensity (0-100)."""
    filter_type: Optional[Union[FilterType, str]] = None
    intensity: float = 100.0

    def to_dict(self) -> Dict[str, Any]:
        filter_type = self.filter_type
        if isinstance(filter_type, FilterType):
            filter_type = filter_type.value
        return _drop_none({'filterType': filter_type, 'intensity': self.intensity})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilterParameters':
        raw_type = data.get('filterType')
        filter_type = coerce_filter_type(raw_type)
        return cls(
            filter_type=filter_type if filter_type is not None else raw_type,
            intensity=_number(data, 'intensity', default=100.0),
        )


@dataclass(frozen=True)
class AdjustmentParameters:
    """Tonal adjustments; each defaults to 0 (no change)."""
    brightness: float = 0.0  # -100 to +100
    contrast: float = 0.0  # -100 to +100
    saturation: float = 0.0  # -100 to +100
    blur: float = 0.0  # 0 to 20

    def has_adjustments(self) -> bool:
        return any(v != 0 for v in (self.brightness, self.contrast, self.saturation, self.blur))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'brightness': self.brightness,
            'contrast': self.contrast,
            'saturation': self.saturation,
            'blur': self.blur,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdjustmentParameters':
        return cls(
            brightness=_number(data, 'brightness', default=0.0),
            contrast=_number(data, 'contrast', default=0.0),
            saturation=_number(data, 'saturation', default=0.0),
            blur=_number(data, 'blur', default=0.0),
        )


EditParameters = Union[CropParameters, RotateParameters, FilterParameters,
                       AdjustmentParameters, Dict[str, Any]]

PARAMETER_TYPES = {
    EditKind.CROP: CropParameters,
    EditKind.ROTATE: RotateParameters,
    EditKind.FILTER: FilterParameters,
    EditKind.ADJUSTMENT: AdjustmentParameters,
}


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise EditParseError(f"Timestamp must be an ISO-8601 string, got {value!r}")
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise EditParseError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def now_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def coerce_kind(kind: Union[EditKind, str]) -> Union[EditKind, str]:
    """Resolve a known kind to EditKind; unknown kinds are kept as strings."""
    if isinstance(kind, EditKind):
        return kind
    try:
        return EditKind(str(kind).lower())
    except ValueError:
        return str(kind)


def coerce_parameters(kind: Union[EditKind, str],
                      parameters: Optional[EditParameters]) -> EditParameters:
    """Turn a parameter mapping into the dataclass matching ``kind``."""
    if not isinstance(kind, EditKind):
        return dict(parameters or {})
    param_cls = PARAMETER_TYPES[kind]
    if parameters is None:
        return param_cls()
    if isinstance(parameters, param_cls):
        return parameters
    if isinstance(parameters, dict):
        return param_cls.from_dict(parameters)
    raise EditParseError(
        f"Parameters for {kind.value} edit must be {param_cls.__name__} or dict, "
        f"got {type(parameters).__name__}"
    )


@dataclass(frozen=True)
class Edit:
    """A single recorded edit."""
    id: str
    kind: Union[EditKind, str]
    parameters: EditParameters
    created_at: str
    description: str = ""
    timestamp: datetime = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        kind = coerce_kind(self.kind)
        object.__setattr__(self, 'kind', kind)
        object.__setattr__(self, 'parameters', coerce_parameters(kind, self.parameters))
        object.__setattr__(self, 'timestamp', parse_timestamp(self.created_at))

    @property
    def is_known_kind(self) -> bool:
        return isinstance(self.kind, EditKind)

    @property
    def kind_name(self) -> str:
        return self.kind.value if isinstance(self.kind, EditKind) else str(self.kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the interchange dictionary format."""
        parameters = self.parameters
        if hasattr(parameters, 'to_dict'):
            parameters = parameters.to_dict()
        return {
            'id': self.id,
            'type': self.kind_name,
            'parameters': dict(parameters),
            'createdAt': self.created_at,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Edit':
        """Create from the interchange dictionary format."""
        if not isinstance(data, dict):
            raise EditParseError(f"Edit record must be an object, got {type(data).__name__}")
        for key in ('id', 'type', 'createdAt'):
            if key not in data:
                raise EditParseError(f"Edit record is missing '{key}'")

        kind = coerce_kind(data['type'])
        if not isinstance(kind, EditKind):
            logger.debug(f"Loaded edit {data['id']} with unrecognized kind {kind!r}")
        parameters = data.get('parameters')
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            raise EditParseError(f"Parameters of edit {data['id']} must be an object")

        return cls(
            id=str(data['id']),
            kind=kind,
            parameters=coerce_parameters(kind, parameters),
            created_at=data['createdAt'],
            description=data.get('description', ''),
        )


def create_edit(kind: Union[EditKind, str], parameters: Optional[EditParameters],
                description: str, created_at: Optional[str] = None) -> Edit:
    """
    Create a new edit with a fresh id and creation timestamp.

    Args:
        kind: Edit kind
        parameters: Kind-specific parameters (dataclass or interchange dict)
        description: Human-readable description
        created_at: ISO-8601 timestamp, defaults to now (UTC)
    """
    kind = coerce_kind(kind)
    return Edit(
        id=str(uuid.uuid4()),
        kind=kind,
        parameters=coerce_parameters(kind, parameters),
        created_at=created_at or now_timestamp(),
        description=description,
    )


def crop_edit(x: int, y: int, width: int, height: int,
              created_at: Optional[str] = None) -> Edit:
    return create_edit(
        EditKind.CROP,
        CropParameters(x=int(x), y=int(y), width=int(width), height=int(height)),
        f"Crop ({width}x{height} from {x},{y})",
        created_at,
    )


def rotate_edit(angle_degrees: float, created_at: Optional[str] = None) -> Edit:
    return create_edit(
        EditKind.ROTATE,
        RotateParameters(angle_degrees=float(angle_degrees)),
        f"Rotate ({_format_number(angle_degrees)}°)",
        created_at,
    )


def filter_edit(filter_type: Union[FilterType, str], intensity: float = 100.0,
                created_at: Optional[str] = None) -> Edit:
    resolved = coerce_filter_type(filter_type)
    return create_edit(
        EditKind.FILTER,
        FilterParameters(filter_type=resolved if resolved is not None else filter_type,
                         intensity=float(intensity)),
        f"Filter: {get_filter_name(filter_type)} ({_format_number(intensity)}%)",
        created_at,
    )


def adjustment_edit(brightness: float = 0.0, contrast: float = 0.0,
                    saturation: float = 0.0, blur: float = 0.0,
                    created_at: Optional[str] = None) -> Optional[Edit]:
    """
    Create an adjustment edit, or None when every value is zero.
    """
    params = AdjustmentParameters(
        brightness=float(brightness),
        contrast=float(contrast),
        saturation=float(saturation),
        blur=float(blur),
    )
    if not params.has_adjustments():
        return None

    parts = []
    for label, value in (("Brightness", brightness), ("Contrast", contrast),
                         ("Saturation", saturation), ("Blur", blur)):
        if value != 0:
            parts.append(f"{label}: {_format_number(value)}")
    return create_edit(EditKind.ADJUSTMENT, params, f"Adjustments: {', '.join(parts)}", created_at)


class EditHistory:
    """
    Ordered record of the edits applied to one image.

    Edits are kept in insertion order; ``ordered_for_replay`` sorts them by
    creation time. Removal and clearing never fail.
    """

    def __init__(self, edits: Optional[Iterable[Edit]] = None):
        self._edits: List[Edit] = []
        for edit in edits or ():
            self.append(edit)

    def append(self, edit: Edit) -> None:
        """
        Append an edit.

        Raises:
            ValueError: If an edit with the same id is already present
        """
        if not isinstance(edit, Edit):
            raise TypeError(f"Expected Edit, got {type(edit).__name__}")
        if edit.id in self:
            raise ValueError(f"Duplicate edit id: {edit.id}")
        if self._edits and edit.timestamp < self._edits[-1].timestamp:
            logger.debug(f"Edit {edit.id} predates the last edit; replay will re-sort")
        self._edits.append(edit)
        logger.debug(f"Added edit: {edit.kind_name} - {edit.description}")

    def remove(self, edit_id: str) -> bool:
        """Remove an edit by id. Returns False (and does nothing) if absent."""
        for index, edit in enumerate(self._edits):
            if edit.id == edit_id:
                del self._edits[index]
                logger.debug(f"Removed edit {edit_id}")
                return True
        logger.debug(f"Edit not found for removal: {edit_id}")
        return False

    def clear(self) -> None:
        self._edits.clear()

    def get(self, edit_id: str) -> Optional[Edit]:
        for edit in self._edits:
            if edit.id == edit_id:
                return edit
        return None

    def update(self, edit_id: str, **changes: Any) -> Optional[Edit]:
        """
        Replace an edit with a modified copy.

        Accepts the Edit field names (``kind``, ``parameters``, ``created_at``,
        ``description``). The original record is left untouched.

        Returns:
            The new edit, or None if no edit has that id
        """
        if 'id' in changes:
            raise ValueError("Edit ids cannot be changed")
        for index, edit in enumerate(self._edits):
            if edit.id == edit_id:
                kind = coerce_kind(changes.pop('kind', edit.kind))
                parameters = changes.pop('parameters', edit.parameters)
                updated = replace(edit, kind=kind,
                                  parameters=coerce_parameters(kind, parameters),
                                  **changes)
                self._edits[index] = updated
                return updated
        return None

    def ordered_for_replay(self) -> List[Edit]:
        """Edits sorted by creation time; equal times keep insertion order."""
        return sorted(self._edits, key=lambda edit: edit.timestamp)

    def truncate(self, count: int) -> List[Edit]:
        """
        Keep only the first ``count`` edits in replay order.

        Returns:
            The removed edits, in replay order
        """
        count = max(0, count)
        ordered = self.ordered_for_replay()
        removed = ordered[count:]
        removed_ids = {edit.id for edit in removed}
        self._edits = [edit for edit in self._edits if edit.id not in removed_ids]
        return removed

    def pop(self) -> Optional[Edit]:
        """Remove and return the last edit in replay order."""
        removed = self.truncate(len(self._edits) - 1)
        return removed[-1] if removed else None

    @property
    def is_edited(self) -> bool:
        return bool(self._edits)

    def copy(self) -> 'EditHistory':
        clone = EditHistory()
        clone._edits = list(self._edits)
        return clone

    def fingerprint(self) -> tuple:
        """Value identifying the replay sequence, for cache validation."""
        return tuple(
            (edit.id, edit.kind_name, edit.created_at, json.dumps(edit.to_dict()['parameters'],
                                                                  sort_keys=True, default=str))
            for edit in self.ordered_for_replay()
        )

    def __len__(self) -> int:
        return len(self._edits)

    def __iter__(self) -> Iterator[Edit]:
        return iter(list(self._edits))

    def __contains__(self, edit_id: object) -> bool:
        return any(edit.id == edit_id for edit in self._edits)

    def to_list(self) -> List[Dict[str, Any]]:
        return [edit.to_dict() for edit in self._edits]

    def to_json(self) -> str:
        """Serialize history to JSON"""
        return json.dumps(self.to_list(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'EditHistory':
        """
        Deserialize history from JSON.

        Accepts a bare list of edits or an object with an ``editHistory`` list.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise EditParseError(f"Invalid edit history JSON: {e}") from e
        if isinstance(data, dict):
            data = data.get('editHistory', [])
        if not isinstance(data, list):
            raise EditParseError("Edit history must be a list of edits")
        return cls(Edit.from_dict(item) for item in data)

    def save(self, path: Path) -> None:
        """Save history to file"""
        with open(path, 'w') as f:
            f.write(self.to_json())
        logger.info(f"Saved {len(self)} edits to {path}")

    @classmethod
    def load(cls, path: Path) -> 'EditHistory':
        """Load history from file"""
        with open(path, 'r') as f:
            return cls.from_json(f.read())
