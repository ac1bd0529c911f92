"""Batching producer and the bounded channel feeding the transform stage."""

from __future__ import annotations

import queue
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

from ...utils.logging import get_logger

T = TypeVar("T")

# How long a blocked put waits before re-checking whether the consumer left.
_PUT_POLL_SECONDS = 0.1


@dataclass(frozen=True)
class _EndOfStream:
    error: Optional[BaseException] = None


class ChannelClosed(RuntimeError):
    """Raised by :meth:`BatchChannel.put` once the consumer has gone away."""


class BatchChannel(Generic[T]):
    """Bounded single-producer/single-consumer channel of batches.

    ``put`` blocks while the channel is full, which is what throttles the
    producer. ``close`` is the consumer's way of saying it stopped reading.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._queue: "queue.Queue[List[T] | _EndOfStream]" = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def _put(self, item: "List[T] | _EndOfStream") -> None:
        while True:
            if self._closed.is_set():
                raise ChannelClosed("consumer closed the channel")
            try:
                self._queue.put(item, timeout=_PUT_POLL_SECONDS)
                return
            except queue.Full:
                continue

    def put(self, batch: List[T]) -> None:
        self._put(batch)

    def finish(self, error: BaseException | None = None) -> None:
        """Signal end of stream, optionally carrying the producer's failure."""

        try:
            self._put(_EndOfStream(error))
        except ChannelClosed:
            pass

    def drain(self) -> Iterator[List[T]]:
        """Yield batches until the producer finishes; re-raise its failure."""

        while True:
            item = self._queue.get()
            if isinstance(item, _EndOfStream):
                if item.error is not None:
                    raise item.error
                return
            yield item


class BatchProducer(threading.Thread, Generic[T]):
    """Dedicated thread grouping items into fixed-size batches.

    The producer never inspects the items. It stops reading as soon as the
    channel is closed by the consumer.
    """

    def __init__(self, items: Iterable[T], channel: BatchChannel[T], *, batch_size: int) -> None:
        super().__init__(name="orcid-batch-producer", daemon=True)
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.items = items
        self.channel = channel
        self.batch_size = batch_size
        self.batches_sent = 0
        self._log = get_logger(module=__name__)

    def run(self) -> None:
        error: BaseException | None = None
        try:
            batch: List[T] = []
            for item in self.items:
                batch.append(item)
                if len(batch) >= self.batch_size:
                    self.channel.put(batch)
                    self.batches_sent += 1
                    batch = []
                if self.channel.closed:
                    break
            if batch and not self.channel.closed:
                self.channel.put(batch)
                self.batches_sent += 1
        except ChannelClosed:
            self._log.debug("Consumer went away; producer stopping", batches=self.batches_sent)
        except BaseException as exc:  # handed over to the consumer thread
            error = exc
        finally:
            self.channel.finish(error)


@contextmanager
def produce_batches(
    items: Iterable[T], *, batch_size: int, capacity: int
) -> Iterator[Iterator[List[T]]]:
    """Run a :class:`BatchProducer` for the duration of the block.

    Yields the consumer-side batch iterator. On exit the channel is closed
    and the producer thread joined, whether or not the block completed.
    """

    channel: BatchChannel[T] = BatchChannel(capacity)
    producer = BatchProducer(items, channel, batch_size=batch_size)
    producer.start()
    try:
        yield channel.drain()
    finally:
        channel.close()
        producer.join()


__all__ = ["BatchChannel", "BatchProducer", "ChannelClosed", "produce_batches"]
