import pytest

from hello3d_mcp.commands import COMMAND_FIELDS, Command, CommandType


def test_every_command_type_declares_its_fields():
    assert set(COMMAND_FIELDS) == set(CommandType)


def test_to_message_carries_tag_and_fields():
    command = Command.of(CommandType.CHANGE_COLOR, color="#ff0000")
    assert command.to_message() == {"type": "changeColor", "color": "#ff0000"}


def test_to_message_omits_unset_optional_fields():
    command = Command.of(CommandType.DOLLY_CAMERA_IN, amount=None)
    assert command.to_message() == {"type": "dollyCameraIn"}


def test_unexpected_field_is_rejected():
    with pytest.raises(ValueError):
        Command.of(CommandType.SWING_KEY_LIGHT_UP, degrees=5)


def test_tool_call_notification():
    message = Command.tool_call("change_model_color").to_message()
    assert message["type"] == "toolCall"
    assert message["toolName"] == "change_model_color"
    assert isinstance(message["timestamp"], int)
