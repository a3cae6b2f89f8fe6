"""
Bounded frame hand-off between the transport callback and frame processing.

The transport side calls FrameQueue.put and never blocks: when the queue is
full the oldest pending frame is evicted. A single FrameDispatcher thread
drains the queue into the IngestionController, so on_frame never overlaps
with itself and frames are processed in capture order.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Optional

from ring_registration import constants
from ring_registration.frontend.scan.ingestion_controller import (
    Dispatched,
    Frame,
    IngestionController,
)


class FrameQueue:
    """Drop-oldest queue of depth 1..FRAME_QUEUE_DEPTH_MAX."""

    def __init__(self, depth: int = constants.FRAME_QUEUE_DEPTH_DEFAULT) -> None:
        if not 1 <= int(depth) <= constants.FRAME_QUEUE_DEPTH_MAX:
            raise ValueError(
                f"frame queue depth must be in [1, {constants.FRAME_QUEUE_DEPTH_MAX}], got {depth}"
            )
        self._buffer: deque = deque(maxlen=int(depth))
        self._cond = threading.Condition()
        self.dropped = 0

    @property
    def depth(self) -> int:
        return int(self._buffer.maxlen)

    def __len__(self) -> int:
        with self._cond:
            return len(self._buffer)

    def put(self, frame: Frame) -> bool:
        """Enqueue a frame. Returns True when an older frame was evicted."""
        with self._cond:
            evicted = len(self._buffer) == self._buffer.maxlen
            if evicted:
                self.dropped += 1
            self._buffer.append(frame)
            self._cond.notify()
            return evicted

    def get(self, timeout: Optional[float] = None) -> Optional[Frame]:
        """Pop the oldest pending frame, waiting up to timeout. None if still empty."""
        with self._cond:
            if not self._buffer:
                self._cond.wait(timeout=timeout)
            if not self._buffer:
                return None
            return self._buffer.popleft()


class FrameDispatcher:
    """
    Single consumer thread: FrameQueue -> IngestionController -> sink.

    The sink receives every Dispatched outcome. An exception from the
    controller or the sink stops the worker; stop() re-raises it.
    """

    def __init__(
        self,
        controller: IngestionController,
        sink: Callable[[Dispatched], None],
        queue: Optional[FrameQueue] = None,
        poll_period_sec: float = constants.DISPATCHER_POLL_PERIOD_SEC,
        logger=None,
    ) -> None:
        self.controller = controller
        self.queue = queue if queue is not None else FrameQueue()
        self._sink = sink
        self._poll_period_sec = float(poll_period_sec)
        self._logger = logger or logging.getLogger(__name__)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def submit(self, frame: Frame) -> None:
        """Transport-side entry point; never blocks."""
        if self.queue.put(frame):
            self._logger.warning(
                f"Frame queue full; dropped oldest frame (total dropped: {self.queue.dropped})"
            )

    def start(self) -> None:
        if self.running:
            raise RuntimeError("FrameDispatcher already started")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="ring_registration_dispatch", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        if self._error is not None:
            raise self._error

    def process_pending(self) -> int:
        """Drain queued frames on the calling thread. Returns frames processed."""
        if self.running:
            raise RuntimeError("process_pending is only valid while the worker is stopped")
        n = 0
        while True:
            frame = self.queue.get(timeout=0.0)
            if frame is None:
                return n
            self._process(frame)
            n += 1

    def _process(self, frame: Frame) -> None:
        outcome = self.controller.on_frame(frame)
        if isinstance(outcome, Dispatched):
            self._sink(outcome)

    def _run(self) -> None:
        while not self._stop.is_set():
            frame = self.queue.get(timeout=self._poll_period_sec)
            if frame is None:
                continue
            try:
                self._process(frame)
            except Exception as exc:
                self._logger.error(f"Frame dispatch failed at t={frame.stamp_sec:.6f}: {exc}")
                self._error = exc
                return
