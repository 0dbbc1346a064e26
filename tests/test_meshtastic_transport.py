"""Tests for the MeshtasticTransport module."""

import pytest
from unittest.mock import Mock, MagicMock, patch
from mesh_navigator.interfaces import ControlEvent, Page
from mesh_navigator.transport.meshtastic_transport import MeshtasticTransport


@pytest.fixture
def mock_serial():
    with patch("mesh_navigator.transport.meshtastic_transport.serial_interface") as mock_serial:
        mock_serial.SerialInterface.return_value = MagicMock()
        yield mock_serial


@pytest.fixture
def connected(mock_serial):
    """Connected transport whose frames are recorded instead of sent."""
    transport = MeshtasticTransport(hint="<=prev >=next")
    transport.connect()
    transport.send_with_retry = Mock(return_value=True)
    yield transport
    transport.disconnect()


def sent_frames(transport):
    return [(c[0][0], c[0][1]) for c in transport.send_with_retry.call_args_list]


class TestConnection:
    """Tests for connecting and sending."""

    def test_init_defaults(self):
        transport = MeshtasticTransport()
        assert transport.connection_type == "serial"
        assert transport.device is None
        assert transport.max_message_size == 230

    def test_connect_serial(self, mock_serial):
        """Connect creates serial interface."""
        transport = MeshtasticTransport(connection_type="serial", device="/dev/ttyUSB0")
        transport.connect()

        mock_serial.SerialInterface.assert_called_once_with(devPath="/dev/ttyUSB0")
        assert transport._interface is mock_serial.SerialInterface.return_value
        transport.disconnect()

    @patch("mesh_navigator.transport.meshtastic_transport.ble_interface")
    def test_connect_ble(self, mock_ble):
        transport = MeshtasticTransport(connection_type="ble", device="AA:BB:CC:DD:EE:FF")
        transport.connect()

        mock_ble.BLEInterface.assert_called_once_with(address="AA:BB:CC:DD:EE:FF")
        transport.disconnect()

    @patch("mesh_navigator.transport.meshtastic_transport.tcp_interface")
    def test_connect_tcp(self, mock_tcp):
        transport = MeshtasticTransport(connection_type="tcp", device="192.168.1.100")
        transport.connect()

        mock_tcp.TCPInterface.assert_called_once_with(hostname="192.168.1.100")
        transport.disconnect()

    def test_connect_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown connection type"):
            MeshtasticTransport(connection_type="carrier-pigeon").connect()

    def test_disconnect(self, mock_serial):
        """Disconnect closes interface."""
        transport = MeshtasticTransport()
        transport.connect()
        assert transport.is_connected() is True

        transport.disconnect()

        mock_serial.SerialInterface.return_value.close.assert_called_once()
        assert transport.is_connected() is False

    def test_disconnect_when_not_connected(self):
        """Disconnect does nothing when not connected."""
        MeshtasticTransport().disconnect()

    def test_send_message(self, mock_serial):
        """send transmits message to node."""
        transport = MeshtasticTransport()
        transport.connect()
        transport.send("!abcd1234", "Hello mesh!")

        call_args = mock_serial.SerialInterface.return_value.sendText.call_args
        assert call_args[0][0] == "Hello mesh!"
        assert call_args[1]["destinationId"] == "!abcd1234"
        transport.disconnect()

    def test_send_not_connected_raises(self):
        with pytest.raises(RuntimeError):
            MeshtasticTransport().send("!abcd1234", "Hello")

    def test_send_and_wait_for_ack(self, mock_serial):
        """The ACK callback reports delivery."""
        interface = mock_serial.SerialInterface.return_value

        def respond(message, **kwargs):
            kwargs["onResponse"]({"decoded": {"routing": {"errorReason": "NONE"}}})

        interface.sendText.side_effect = respond
        transport = MeshtasticTransport()
        transport.connect()

        assert transport.send_and_wait_for_ack("!abcd1234", "Hi", timeout=1) is True
        transport.disconnect()

    def test_send_with_retry_on_nak(self, mock_serial):
        """A NAK is retried once."""
        interface = mock_serial.SerialInterface.return_value

        def respond(message, **kwargs):
            kwargs["onResponse"]({"decoded": {"routing": {"errorReason": "MAX_RETRANSMIT"}}})

        interface.sendText.side_effect = respond
        transport = MeshtasticTransport()
        transport.connect()

        assert transport.send_with_retry("!abcd1234", "Hi", timeout=1) is False
        assert interface.sendText.call_count == 2
        transport.disconnect()


class TestPostAndEdit:
    """Tests for posting and editing pages."""

    def test_post_renders_page(self, connected):
        message_id = connected.post("!abcd1234", Page(title="Docs", body="1. a.txt", footer="page 1 / 2"))

        assert message_id == "!abcd1234#1"
        assert sent_frames(connected) == [
            ("!abcd1234", "[Docs]\n1. a.txt\n(page 1 / 2 | <=prev >=next)"),
        ]

    def test_post_ids_are_unique(self, connected):
        first = connected.post("!abcd1234", Page(body="a"))
        second = connected.post("!abcd1234", Page(body="b"))
        assert first != second

    def test_post_not_connected_raises(self):
        with pytest.raises(RuntimeError):
            MeshtasticTransport().post("!abcd1234", Page(body="a"))

    def test_long_page_sent_in_frames(self, connected):
        connected.max_message_size = 50
        body = "\n".join(f"line {i}" for i in range(20))

        connected.post("!abcd1234", Page(body=body))

        frames = [text for _, text in sent_frames(connected)]
        assert len(frames) > 1
        assert all(len(frame) <= 50 for frame in frames)

    def test_edit_resends_to_node(self, connected):
        message_id = connected.post("!abcd1234", Page(body="first"))
        connected.edit(message_id, Page(body="second"))

        node_id, text = sent_frames(connected)[-1]
        assert node_id == "!abcd1234"
        assert text.startswith("second")

    def test_edit_superseded_message_raises(self, connected):
        """Only a node's most recent message can be edited."""
        old_id = connected.post("!abcd1234", Page(body="old"))
        connected.post("!abcd1234", Page(body="new"))

        with pytest.raises(RuntimeError, match="superseded"):
            connected.edit(old_id, Page(body="again"))

    def test_edit_unknown_message_raises(self, connected):
        with pytest.raises(RuntimeError):
            connected.edit("!nobody#7", Page(body="x"))

    def test_other_nodes_unaffected(self, connected):
        first = connected.post("!node1", Page(body="a"))
        connected.post("!node2", Page(body="b"))
        connected.edit(first, Page(body="c"))


class TestDelivery:
    """Tests for routing received text."""

    def test_handle_received_message(self, mock_serial):
        """Received messages trigger callbacks."""
        transport = MeshtasticTransport()
        callback = Mock()
        transport.on_message(callback)

        packet = {"fromId": "!abcd1234", "decoded": {"text": "Hello server!"}}
        transport._handle_receive(packet, mock_serial.SerialInterface.return_value)

        callback.assert_called_once_with("!abcd1234", "Hello server!")

    def test_non_text_message_ignored(self):
        """Non-text messages are ignored."""
        transport = MeshtasticTransport()
        callback = Mock()
        transport.on_message(callback)

        packet = {"fromId": "!abcd1234", "decoded": {"position": {"latitude": 0, "longitude": 0}}}
        transport._handle_receive(packet, None)

        callback.assert_not_called()

    def test_handlers_get_event_on_latest_message(self, connected):
        """Text becomes a control event on the node's live message."""
        message_id = connected.post("!abcd1234", Page(body="a"))
        handler = Mock(return_value=True)
        connected.subscribe(handler)

        connected.deliver("!abcd1234", " > ")

        handler.assert_called_once_with(ControlEvent(message_id=message_id, actor="!abcd1234", symbol=">"))

    def test_event_without_message(self):
        """Nodes that were never posted to produce events with no message."""
        transport = MeshtasticTransport()
        handler = Mock(return_value=False)
        transport.subscribe(handler)

        transport.deliver("!abcd1234", "ls")

        assert handler.call_args[0][0].message_id is None

    def test_consumed_text_skips_callbacks(self):
        transport = MeshtasticTransport()
        callback = Mock()
        transport.subscribe(Mock(return_value=True))
        transport.on_message(callback)

        transport.deliver("!abcd1234", ">")

        callback.assert_not_called()

    def test_unconsumed_text_reaches_all_callbacks(self):
        transport = MeshtasticTransport()
        cb1, cb2 = Mock(), Mock()
        transport.subscribe(Mock(return_value=False))
        transport.on_message(cb1)
        transport.on_message(cb2)

        transport.deliver("!abcd1234", "ls /docs")

        cb1.assert_called_once_with("!abcd1234", "ls /docs")
        cb2.assert_called_once_with("!abcd1234", "ls /docs")

    def test_failing_handler_does_not_block_others(self):
        transport = MeshtasticTransport()
        callback = Mock()
        transport.subscribe(Mock(side_effect=RuntimeError("boom")))
        transport.on_message(callback)

        transport.deliver("!abcd1234", "hello")

        callback.assert_called_once_with("!abcd1234", "hello")

    def test_unsubscribe(self):
        transport = MeshtasticTransport()
        handler = Mock(return_value=True)
        transport.subscribe(handler)
        transport.unsubscribe(handler)
        transport.unsubscribe(handler)

        transport.deliver("!abcd1234", ">")

        handler.assert_not_called()
