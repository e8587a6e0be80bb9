import pytest

from ethnode.messages import ErrorObject, Message, Request, new_request


def test_new_request_ids_increase():
    first = new_request("eth_blockNumber")
    second = new_request("eth_blockNumber")
    assert second.id > first.id
    assert first.version == "2.0"


def test_request_to_dict_without_params():
    request = new_request("net_version")
    body = request.to_dict()
    assert "params" not in body
    assert body["jsonrpc"] == "2.0"
    assert body["method"] == "net_version"
    assert body["id"] == request.id


def test_request_to_dict_with_params():
    request = new_request("eth_getBlockByNumber", "0x1", True)
    assert request.to_dict()["params"] == ["0x1", True]


def test_request_zero_id_omitted():
    assert "id" not in Request(id=0, method="eth_subscription").to_dict()


def test_message_round_trip_with_result():
    data = {"id": 7, "jsonrpc": "2.0", "result": "0x10"}
    message = Message.from_dict(data)
    assert message.result == "0x10"
    assert message.has_result
    assert message.to_dict() == data


def test_message_null_result_kept():
    data = {"id": 3, "jsonrpc": "2.0", "result": None}
    message = Message.from_dict(data)
    assert message.has_result
    assert message.to_dict() == data


def test_message_error_parsed():
    data = {"id": 4, "jsonrpc": "2.0", "error": {"code": -32601, "message": "method not found"}}
    message = Message.from_dict(data)
    assert message.error == ErrorObject(code=-32601, message="method not found")
    assert message.to_dict() == data


def test_notification_has_zero_id():
    data = {"jsonrpc": "2.0", "method": "eth_subscription", "params": {"subscription": "0xab"}}
    message = Message.from_dict(data)
    assert message.id == 0
    assert message.params == {"subscription": "0xab"}
    assert message.to_dict() == data


def test_message_reset():
    message = Message.from_dict({"id": 9, "jsonrpc": "1.0", "method": "x", "result": 1})
    message.reset()
    assert message == Message()
    assert message.version == "2.0"


def test_error_object_with_data():
    error = ErrorObject.from_dict({"code": 3, "message": "execution reverted", "data": "0x08"})
    assert error.data == "0x08"
    assert error.code == 3


def test_from_dict_rejects_non_object():
    with pytest.raises(TypeError):
        Message.from_dict(["not", "an", "object"])
    with pytest.raises(TypeError):
        ErrorObject.from_dict("boom")