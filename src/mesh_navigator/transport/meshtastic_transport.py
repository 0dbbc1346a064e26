"""Meshtastic-based control event source."""

import itertools
import logging
import threading
from typing import Callable
from pubsub import pub

from meshtastic import serial_interface, tcp_interface, ble_interface

from ..core.menu_renderer import PageRenderer
from ..interfaces import ControlEvent, ControlEventSource, Page
from ..interfaces.control_source import ControlHandler
from .frames import split_frames

logger = logging.getLogger(__name__)

RECEIVE_TOPIC = "meshtastic.receive.text"

MessageCallback = Callable[[str, str], None]


class MeshtasticTransport(ControlEventSource):
    """Control event source over the Meshtastic mesh network.

    Radio messages cannot be edited, so an edit re-sends the page to the
    node it was posted to. Each node only has one live message: its most
    recent post. Text from a node is first offered to control handlers as
    an event on that message; text nobody consumes goes to the plain
    message callbacks.
    """

    def __init__(
        self,
        connection_type: str = "serial",
        device: str | None = None,
        max_message_size: int = 230,
        ack_timeout: float = 30.0,
        hint: str | None = None,
    ):
        """
        Args:
            connection_type: "serial", "ble" or "tcp".
            device: Serial port, BLE address or TCP host. A serial port of
                    None lets meshtastic pick the first radio it finds.
            max_message_size: Radio payload limit in characters.
            ack_timeout: Seconds to wait for each frame's ACK.
            hint: Control hint shown under every posted page.
        """
        self.connection_type = connection_type
        self.device = device
        self.max_message_size = max_message_size
        self.ack_timeout = ack_timeout
        self.hint = hint
        self.renderer = PageRenderer()
        self._interface = None
        self._callbacks: list[MessageCallback] = []
        self._handlers: list[ControlHandler] = []
        self._latest: dict[str, str] = {}
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    def _radio(self):
        if self._interface is None:
            raise RuntimeError("Transport is not connected")
        return self._interface

    # Sending

    def send(self, node_id: str, message: str, want_ack: bool = False) -> None:
        """
        Send one radio message to a node, without waiting.

        Raises:
            RuntimeError: If not connected.
        """
        self._radio().sendText(message, destinationId=node_id, wantAck=want_ack)

    def send_and_wait_for_ack(self, node_id: str, message: str, timeout: float = 30.0) -> bool:
        """
        Send one radio message and block until the node answers.

        Returns:
            True on ACK; False on NAK or when nothing arrives in time.

        Raises:
            RuntimeError: If not connected.
        """
        radio = self._radio()
        answered = threading.Event()
        outcome = {"acked": False}

        # meshtastic only routes plain ACKs to a handler with this name
        def onAckNak(packet):
            reason = packet.get("decoded", {}).get("routing", {}).get("errorReason", "NONE")
            outcome["acked"] = reason == "NONE"
            if outcome["acked"]:
                logger.debug(f"[{node_id}] Delivered")
            else:
                logger.warning(f"[{node_id}] Rejected by radio: {reason}")
            answered.set()

        radio.sendText(message, destinationId=node_id, wantAck=True, onResponse=onAckNak)

        if not answered.wait(timeout=timeout):
            logger.warning(f"[{node_id}] No ACK within {timeout}s")
        return outcome["acked"]

    def send_with_retry(self, node_id: str, message: str, timeout: float = 30.0) -> bool:
        """Send with ACK, trying a second time if the first attempt fails."""
        for attempt in (1, 2):
            if self.send_and_wait_for_ack(node_id, message, timeout):
                return True
            if attempt == 1:
                logger.info(f"[{node_id}] Resending")
        return False

    def send_text(self, node_id: str, text: str) -> bool:
        """
        Send text of any length as a sequence of frames.

        Each frame waits for its ACK before the next one goes out.

        Returns:
            True if every frame was acknowledged.
        """
        frames = split_frames(text, self.max_message_size)
        logger.info(f"[{node_id}] Sending {len(frames)} frame(s)")
        delivered = True
        for i, frame in enumerate(frames, 1):
            if not self.send_with_retry(node_id, frame, timeout=self.ack_timeout):
                logger.warning(f"[{node_id}] Frame {i}/{len(frames)} failed after retry")
                delivered = False
        return delivered

    # ControlEventSource

    def post(self, destination: str, page: Page) -> str:
        """Send a page to a node, making it the node's live message."""
        self._radio()

        with self._lock:
            message_id = f"{destination}#{next(self._sequence)}"
            self._latest[destination] = message_id

        self.send_text(destination, self.renderer.render(page, self.hint))
        return message_id

    def edit(self, message_id: str, page: Page) -> None:
        """
        Re-send a page in place of a posted message.

        Raises:
            RuntimeError: If not connected, or a newer message was posted
                          to the same node.
        """
        self._radio()

        node_id = message_id.rsplit("#", 1)[0]
        with self._lock:
            latest = self._latest.get(node_id)
        if latest != message_id:
            raise RuntimeError(f"Message {message_id} was superseded by {latest}")

        self.send_text(node_id, self.renderer.render(page, self.hint))

    def subscribe(self, handler: ControlHandler) -> None:
        """Register a control event handler."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: ControlHandler) -> None:
        """Remove a control event handler if registered."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def on_message(self, callback: MessageCallback) -> None:
        """Register a (node_id, text) callback for text no handler consumed."""
        self._callbacks.append(callback)

    # Connection

    def connect(self) -> None:
        """
        Open the radio interface and start listening for text packets.

        Raises:
            ValueError: If connection_type is not serial, ble or tcp.
        """
        if self.connection_type == "serial":
            radio = serial_interface.SerialInterface(devPath=self.device)
        elif self.connection_type == "ble":
            radio = ble_interface.BLEInterface(address=self.device)
        elif self.connection_type == "tcp":
            radio = tcp_interface.TCPInterface(hostname=self.device)
        else:
            raise ValueError(f"Unknown connection type: {self.connection_type}")

        logger.info(f"Connected over {self.connection_type}" + (f" to {self.device}" if self.device else ""))
        self._interface = radio
        pub.subscribe(self._handle_receive, RECEIVE_TOPIC)

    def disconnect(self) -> None:
        """Stop listening and close the radio interface. No-op when closed."""
        if self._interface is None:
            return
        pub.unsubscribe(self._handle_receive, RECEIVE_TOPIC)
        radio, self._interface = self._interface, None
        radio.close()

    def is_connected(self) -> bool:
        return self._interface is not None

    # Receiving

    def _handle_receive(self, packet: dict, interface) -> None:
        """pubsub listener for text packets; interface is unused."""
        sender = packet.get("fromId")
        text = packet.get("decoded", {}).get("text")
        if sender and text:
            self.deliver(sender, text)

    def deliver(self, node_id: str, text: str) -> None:
        """Route incoming text to control handlers, then to message callbacks."""
        with self._lock:
            message_id = self._latest.get(node_id)
        event = ControlEvent(message_id=message_id, actor=node_id, symbol=text.strip())

        consumed = False
        for handler in list(self._handlers):
            try:
                consumed = bool(handler(event)) or consumed
            except Exception as e:
                logger.error(f"[{node_id}] Control handler failed: {e}")
        if consumed:
            return

        for callback in list(self._callbacks):
            try:
                callback(node_id, text)
            except Exception as e:
                logger.error(f"[{node_id}] Message callback failed: {e}")
