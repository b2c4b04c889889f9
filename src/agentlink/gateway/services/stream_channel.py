"""StreamChannel -- 单生产者/单消费者的有界事件通道

基于 asyncio.Queue。与广播式 Hub 不同，这里的事件不可丢弃：
队列满时生产方等待消费方；生产方结束时放入结束标记，
消费方用 ``async for`` 读取直到结束。
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")

# 结束标记
_END = object()


class ChannelClosedError(Exception):
    """向已关闭的通道发送"""


class StreamChannel(Generic[T]):
    """有界 SPSC 通道"""

    def __init__(self, maxsize: int = 64) -> None:
        if maxsize < 1:
            raise ValueError("StreamChannel maxsize must be >= 1")
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    async def send(self, item: T) -> None:
        """发送一个事件，队列满时等待

        Raises:
            ChannelClosedError: 通道已关闭
        """
        if self._closed:
            raise ChannelClosedError("send on closed channel")
        await self._queue.put(item)

    def close(self) -> None:
        """关闭通道，不阻塞；重复调用无效果

        队列未满时放入结束标记；已满时由消费方在取空后识别关闭状态。
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_END)
        except asyncio.QueueFull:
            pass  # 消费方取空后结束

    async def __aiter__(self) -> AsyncIterator[T]:
        while True:
            if self._closed and self._queue.empty():
                return
            item = await self._queue.get()
            if item is _END:
                return
            yield item
