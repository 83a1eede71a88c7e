"""Transports that carry JSON-RPC requests: HTTP, IPC sockets and websockets."""

from __future__ import annotations

import abc
import codecs
import functools
import itertools
import json
import os
import queue
import socket
import threading
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol, Union

import websocket

from ..codec import Request, Response, Subscription
from ..types import Address, Hash

__all__ = [
    "Transport",
    "RequestTimeout",
    "HTTPTransport",
    "IPCCodec",
    "WebsocketCodec",
    "StreamTransport",
    "new_transport",
]

WS_PREFIX = "ws://"
WSS_PREFIX = "wss://"
DEFAULT_TIMEOUT = 5.0
_RECV_SIZE = 65536


class RequestTimeout(TimeoutError):
    """Raised when a request sent over a stream gets no answer in time."""


def _jsonable(value: Any) -> Any:
    """Turn a request parameter into a value the json module can write."""
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, (Address, Hash)):
        return str(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return json.loads(to_json())
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    raise TypeError(f"cannot encode {type(value).__name__} as a request parameter")


def _encode_request(method: str, ident: int, args: tuple[Any, ...]) -> str:
    params = [_jsonable(arg) for arg in args] if args else None
    return Request(method=method, id=ident, params=params).to_json()


def _unwrap(response: Response) -> Any:
    if response.error is not None:
        raise response.error
    return response.result


class Transport(abc.ABC):
    """A channel that sends JSON-RPC requests and returns their results."""

    @abc.abstractmethod
    def call(self, method: str, *args: Any) -> Any:
        """Send a request and return the decoded result."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the connection, if any."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class HTTPTransport(Transport):
    """Sends each request as an HTTP POST."""

    def __init__(self, addr: str, timeout: Optional[float] = None):
        self.addr = addr
        self._timeout = timeout

    def call(self, method: str, *args: Any) -> Any:
        body = _encode_request(method, 0, args).encode("utf-8")
        request = urllib.request.Request(
            self.addr,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        options = {} if self._timeout is None else {"timeout": self._timeout}
        try:
            with urllib.request.urlopen(request, **options) as reply:
                raw = reply.read()
        except urllib.error.HTTPError as exc:
            raw = exc.read()
        return _unwrap(Response.from_json(raw))

    def close(self) -> None:
        """HTTP requests hold no connection between calls, so there is nothing to release."""
        return None


class _Codec(Protocol):
    def read(self) -> str: ...

    def write(self, data: Union[str, bytes]) -> None: ...

    def close(self) -> None: ...


class IPCCodec:
    """Reads and writes JSON messages over a stream socket."""

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._decoder = json.JSONDecoder()
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    @classmethod
    def connect(cls, path: str) -> "IPCCodec":
        """Open a Unix domain socket at ``path``."""
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(path)
        except OSError:
            sock.close()
            raise
        return cls(sock)

    def read(self) -> str:
        """Return the text of the next complete JSON value on the stream."""
        while True:
            text = self._buffer.lstrip()
            if text:
                try:
                    _, end = self._decoder.raw_decode(text)
                except json.JSONDecodeError:
                    pass
                else:
                    self._buffer = text[end:]
                    return text[:end]
            chunk = self._sock.recv(_RECV_SIZE)
            if not chunk:
                raise EOFError("connection closed")
            self._buffer = text + self._text.decode(chunk)

    def write(self, data: Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._sock.sendall(data)

    def close(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()


class WebsocketCodec:
    """Reads and writes JSON messages as websocket text frames."""

    def __init__(self, conn: Any):
        self._conn = conn

    @classmethod
    def dial(cls, url: str) -> "WebsocketCodec":
        """Open a websocket connection to ``url``."""
        return cls(websocket.create_connection(url))

    def read(self) -> str:
        data = self._conn.recv()
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        return data

    def write(self, data: Union[str, bytes]) -> None:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        self._conn.send(data)

    def close(self) -> None:
        self._conn.close()


class StreamTransport(Transport):
    """A transport over a persistent connection that also supports subscriptions.

    A background thread reads messages, hands responses to the waiting calls
    by id and passes subscription notifications to their callbacks. Each
    callback receives the decoded ``result`` of the notification.
    """

    def __init__(self, codec: _Codec, timeout: float = DEFAULT_TIMEOUT):
        self._codec = codec
        self._timeout = timeout
        self._seq = itertools.count(1)
        self._seq_lock = threading.Lock()
        self._handlers: dict[int, queue.Queue] = {}
        self._handler_lock = threading.Lock()
        self._subs: dict[str, Callable[[Any], Any]] = {}
        self._subs_lock = threading.Lock()
        self._closed = threading.Event()
        self._dead = threading.Event()
        self._callbacks = ThreadPoolExecutor(max_workers=1)
        self._listener = threading.Thread(target=self._listen, daemon=True)
        self._listener.start()

    def _listen(self) -> None:
        try:
            while True:
                try:
                    raw = self._codec.read()
                    response = Response.from_json(raw)
                except Exception:
                    return
                if response.id != 0:
                    self._deliver(response)
                else:
                    self._notify(raw)
        finally:
            self._dead.set()
            self._fail_pending(ConnectionError("connection closed"))

    def _deliver(self, response: Response) -> None:
        with self._handler_lock:
            reply = self._handlers.pop(response.id, None)
        if reply is not None:
            reply.put((response.result, response.error))

    def _notify(self, raw: str) -> None:
        try:
            message = json.loads(raw)
            if message.get("method") != "eth_subscription":
                return
            params = message.get("params")
            if not isinstance(params, dict):
                return
            sub = Subscription.from_json(json.dumps(params))
        except ValueError:
            return
        with self._subs_lock:
            callback = self._subs.get(sub.id)
        if callback is None:
            return
        try:
            self._callbacks.submit(callback, sub.result)
        except RuntimeError:
            pass

    def _fail_pending(self, error: Exception) -> None:
        with self._handler_lock:
            pending = list(self._handlers.values())
            self._handlers.clear()
        for reply in pending:
            reply.put((None, error))

    def call(self, method: str, *args: Any) -> Any:
        if self._closed.is_set():
            raise ConnectionError("transport is closed")
        with self._seq_lock:
            ident = next(self._seq)
        raw = _encode_request(method, ident, args)

        reply: queue.Queue = queue.Queue(maxsize=1)
        with self._handler_lock:
            self._handlers[ident] = reply
        try:
            if self._dead.is_set():
                raise ConnectionError("connection closed")
            self._codec.write(raw)
            try:
                result, error = reply.get(timeout=self._timeout)
            except queue.Empty:
                raise RequestTimeout("timeout") from None
        finally:
            with self._handler_lock:
                self._handlers.pop(ident, None)

        if error is not None:
            raise error
        return result

    def subscribe(self, method: str, callback: Callable[[Any], Any]) -> Callable[[], None]:
        """Start a subscription; return a function that cancels it."""
        sub_id = self.call("eth_subscribe", method)
        if not isinstance(sub_id, str):
            raise ValueError(f"invalid subscription id: {sub_id!r}")
        with self._subs_lock:
            self._subs[sub_id] = callback
        return functools.partial(self._unsubscribe, sub_id)

    def _unsubscribe(self, sub_id: str) -> None:
        with self._subs_lock:
            if sub_id not in self._subs:
                raise ValueError(f"subscription {sub_id} not found")
            del self._subs[sub_id]
        if self.call("eth_unsubscribe", sub_id) is not True:
            raise ValueError("failed to unsubscribe")

    def close(self) -> None:
        self._closed.set()
        try:
            self._codec.close()
        finally:
            self._callbacks.shutdown(wait=False)


def new_transport(url: str) -> Transport:
    """Pick a transport for ``url``: websocket, IPC socket path or HTTP."""
    if url.startswith(WS_PREFIX) or url.startswith(WSS_PREFIX):
        return StreamTransport(WebsocketCodec.dial(url))
    if os.path.exists(url):
        return StreamTransport(IPCCodec.connect(url))
    return HTTPTransport(url)