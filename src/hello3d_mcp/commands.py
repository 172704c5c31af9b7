from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping


class CommandType(str, Enum):
    """Every command tag the browser client understands."""

    # model
    CHANGE_COLOR = "changeColor"
    CHANGE_SIZE = "changeSize"
    SCALE_MODEL = "scaleModel"
    SET_MODEL_ROTATION = "setModelRotation"
    ROTATE_MODEL_CLOCKWISE = "rotateModelClockwise"
    ROTATE_MODEL_COUNTERCLOCKWISE = "rotateModelCounterclockwise"
    NUDGE_MODEL_PITCH_UP = "nudgeModelPitchUp"
    NUDGE_MODEL_PITCH_DOWN = "nudgeModelPitchDown"
    NUDGE_MODEL_ROLL = "nudgeModelRoll"

    # scene
    CHANGE_BACKGROUND_COLOR = "changeBackgroundColor"

    # key light
    SET_KEY_LIGHT_INTENSITY = "setKeyLightIntensity"
    SET_KEY_LIGHT_COLOR = "setKeyLightColor"
    SWING_KEY_LIGHT_UP = "swingKeyLightUp"
    SWING_KEY_LIGHT_DOWN = "swingKeyLightDown"
    SWING_KEY_LIGHT_LEFT = "swingKeyLightLeft"
    SWING_KEY_LIGHT_RIGHT = "swingKeyLightRight"
    WALK_KEY_LIGHT_IN = "walkKeyLightIn"
    WALK_KEY_LIGHT_OUT = "walkKeyLightOut"
    SET_KEY_LIGHT_POSITION_SPHERICAL = "setKeyLightPositionSpherical"
    SET_KEY_LIGHT_DISTANCE = "setKeyLightDistance"
    ROTATE_KEY_LIGHT_CLOCKWISE = "rotateKeyLightClockwise"
    ROTATE_KEY_LIGHT_COUNTERCLOCKWISE = "rotateKeyLightCounterclockwise"
    NUDGE_KEY_LIGHT_ELEVATION_UP = "nudgeKeyLightElevationUp"
    NUDGE_KEY_LIGHT_ELEVATION_DOWN = "nudgeKeyLightElevationDown"
    MOVE_KEY_LIGHT_TOWARD_DIRECTION = "moveKeyLightTowardDirection"

    # fill light
    SET_FILL_LIGHT_INTENSITY = "setFillLightIntensity"
    SET_FILL_LIGHT_COLOR = "setFillLightColor"
    SWING_FILL_LIGHT_UP = "swingFillLightUp"
    SWING_FILL_LIGHT_DOWN = "swingFillLightDown"
    SWING_FILL_LIGHT_LEFT = "swingFillLightLeft"
    SWING_FILL_LIGHT_RIGHT = "swingFillLightRight"
    WALK_FILL_LIGHT_IN = "walkFillLightIn"
    WALK_FILL_LIGHT_OUT = "walkFillLightOut"
    SET_FILL_LIGHT_POSITION_SPHERICAL = "setFillLightPositionSpherical"
    SET_FILL_LIGHT_DISTANCE = "setFillLightDistance"
    ROTATE_FILL_LIGHT_CLOCKWISE = "rotateFillLightClockwise"
    ROTATE_FILL_LIGHT_COUNTERCLOCKWISE = "rotateFillLightCounterclockwise"
    NUDGE_FILL_LIGHT_ELEVATION_UP = "nudgeFillLightElevationUp"
    NUDGE_FILL_LIGHT_ELEVATION_DOWN = "nudgeFillLightElevationDown"
    MOVE_FILL_LIGHT_TOWARD_DIRECTION = "moveFillLightTowardDirection"

    # camera
    DOLLY_CAMERA = "dollyCamera"
    DOLLY_CAMERA_IN = "dollyCameraIn"
    DOLLY_CAMERA_OUT = "dollyCameraOut"
    SET_CAMERA_FOV = "setCameraFOV"
    INCREASE_CAMERA_FOV = "increaseCameraFOV"
    DECREASE_CAMERA_FOV = "decreaseCameraFOV"

    # notifications
    TOOL_CALL = "toolCall"


_NO_FIELDS: tuple[str, ...] = ()
_XYZ = ("x", "y", "z")
_DEGREES = ("degrees",)
_AMOUNT = ("amount",)
_SPHERICAL = ("azimuth", "elevation")
_TOWARD = ("direction", "degrees")

COMMAND_FIELDS: Dict[CommandType, tuple[str, ...]] = {
    CommandType.CHANGE_COLOR: ("color",),
    CommandType.CHANGE_SIZE: ("size",),
    CommandType.SCALE_MODEL: _XYZ,
    CommandType.SET_MODEL_ROTATION: _XYZ,
    CommandType.ROTATE_MODEL_CLOCKWISE: _DEGREES,
    CommandType.ROTATE_MODEL_COUNTERCLOCKWISE: _DEGREES,
    CommandType.NUDGE_MODEL_PITCH_UP: _DEGREES,
    CommandType.NUDGE_MODEL_PITCH_DOWN: _DEGREES,
    CommandType.NUDGE_MODEL_ROLL: _DEGREES,
    CommandType.CHANGE_BACKGROUND_COLOR: ("color",),
    CommandType.SET_KEY_LIGHT_INTENSITY: ("intensity",),
    CommandType.SET_KEY_LIGHT_COLOR: ("color",),
    CommandType.SWING_KEY_LIGHT_UP: _NO_FIELDS,
    CommandType.SWING_KEY_LIGHT_DOWN: _NO_FIELDS,
    CommandType.SWING_KEY_LIGHT_LEFT: _NO_FIELDS,
    CommandType.SWING_KEY_LIGHT_RIGHT: _NO_FIELDS,
    CommandType.WALK_KEY_LIGHT_IN: _NO_FIELDS,
    CommandType.WALK_KEY_LIGHT_OUT: _NO_FIELDS,
    CommandType.SET_KEY_LIGHT_POSITION_SPHERICAL: _SPHERICAL,
    CommandType.SET_KEY_LIGHT_DISTANCE: ("distance",),
    CommandType.ROTATE_KEY_LIGHT_CLOCKWISE: _DEGREES,
    CommandType.ROTATE_KEY_LIGHT_COUNTERCLOCKWISE: _DEGREES,
    CommandType.NUDGE_KEY_LIGHT_ELEVATION_UP: _DEGREES,
    CommandType.NUDGE_KEY_LIGHT_ELEVATION_DOWN: _DEGREES,
    CommandType.MOVE_KEY_LIGHT_TOWARD_DIRECTION: _TOWARD,
    CommandType.SET_FILL_LIGHT_INTENSITY: ("intensity",),
    CommandType.SET_FILL_LIGHT_COLOR: ("color",),
    CommandType.SWING_FILL_LIGHT_UP: _NO_FIELDS,
    CommandType.SWING_FILL_LIGHT_DOWN: _NO_FIELDS,
    CommandType.SWING_FILL_LIGHT_LEFT: _NO_FIELDS,
    CommandType.SWING_FILL_LIGHT_RIGHT: _NO_FIELDS,
    CommandType.WALK_FILL_LIGHT_IN: _NO_FIELDS,
    CommandType.WALK_FILL_LIGHT_OUT: _NO_FIELDS,
    CommandType.SET_FILL_LIGHT_POSITION_SPHERICAL: _SPHERICAL,
    CommandType.SET_FILL_LIGHT_DISTANCE: ("distance",),
    CommandType.ROTATE_FILL_LIGHT_CLOCKWISE: _DEGREES,
    CommandType.ROTATE_FILL_LIGHT_COUNTERCLOCKWISE: _DEGREES,
    CommandType.NUDGE_FILL_LIGHT_ELEVATION_UP: _DEGREES,
    CommandType.NUDGE_FILL_LIGHT_ELEVATION_DOWN: _DEGREES,
    CommandType.MOVE_FILL_LIGHT_TOWARD_DIRECTION: _TOWARD,
    CommandType.DOLLY_CAMERA: ("distance",),
    CommandType.DOLLY_CAMERA_IN: _AMOUNT,
    CommandType.DOLLY_CAMERA_OUT: _AMOUNT,
    CommandType.SET_CAMERA_FOV: ("fov",),
    CommandType.INCREASE_CAMERA_FOV: _AMOUNT,
    CommandType.DECREASE_CAMERA_FOV: _AMOUNT,
    CommandType.TOOL_CALL: ("toolName", "timestamp"),
}


@dataclass(frozen=True)
class Command:
    """One outbound command: a tag plus the fields that tag allows."""

    type: CommandType
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        allowed = COMMAND_FIELDS[self.type]
        unexpected = sorted(set(self.fields) - set(allowed))
        if unexpected:
            raise ValueError(f"{self.type.value} does not accept fields: {', '.join(unexpected)}")

    @staticmethod
    def of(command_type: CommandType, **fields: Any) -> "Command":
        return Command(type=command_type, fields=fields)

    @staticmethod
    def tool_call(tool_name: str) -> "Command":
        return Command.of(CommandType.TOOL_CALL, toolName=tool_name, timestamp=int(time.time() * 1000))

    def to_message(self) -> Dict[str, Any]:
        # Optional fields left as None are omitted so the client applies its own defaults.
        message: Dict[str, Any] = {"type": self.type.value}
        message.update({key: value for key, value in self.fields.items() if value is not None})
        return message
