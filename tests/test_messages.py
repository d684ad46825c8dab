"""Tests for transcript types."""

import pytest

from chatfn.messages import Conversation, FunctionCall, Message, Role


def test_conversation_must_start_with_system():
    conv = Conversation()
    with pytest.raises(ValueError):
        conv.append(Message.user("hi"))
    assert len(conv) == 0


def test_conversation_single_system_message():
    conv = Conversation()
    conv.append(Message.system("sys"))
    with pytest.raises(ValueError):
        conv.append(Message.system("again"))


def test_conversation_append_order_and_last():
    conv = Conversation()
    assert conv.last is None
    conv.append(Message.system("sys"))
    conv.append(Message.user("hi"))
    conv.append(Message.assistant("hello"))
    assert [m.role for m in conv] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
    assert conv.last.content == "hello"
    assert conv[1].content == "hi"


def test_messages_snapshot_is_immutable():
    conv = Conversation()
    conv.append(Message.system("sys"))
    snapshot = conv.messages
    conv.append(Message.user("hi"))
    assert len(snapshot) == 1
    assert len(conv) == 2


def test_function_message_requires_name():
    with pytest.raises(ValueError):
        Message(Role.FUNCTION, "result")


def test_function_call_only_on_assistant():
    with pytest.raises(ValueError):
        Message(Role.USER, "hi", function_call=FunctionCall("f", "{}"))


def test_to_dict_wire_shape():
    assert Message.user("hi").to_dict() == {"role": "user", "content": "hi"}
    assert Message.function("get_current_weather", "{}").to_dict() == {
        "role": "function",
        "content": "{}",
        "name": "get_current_weather",
    }
    call = FunctionCall("get_current_weather", '{"location": "NYC"}')
    assert Message.assistant("...", function_call=call).to_dict() == {
        "role": "assistant",
        "content": "...",
        "function_call": {"name": "get_current_weather", "arguments": '{"location": "NYC"}'},
    }

