"""
事件转发 - 观察者注册表与运行事件源

职责：
1. 显式的观察者注册/注销（可选弱引用，避免遗留失效观察者）
2. 即发即弃的广播：不排队、不回放，迟到的观察者收不到已发出的事件
3. 单个观察者异常不影响其他观察者

测试要点：
- test_emit_to_all_subscribers: 广播到全部观察者
- test_unsubscribe: 注销后不再收到
- test_weak_subscriber_collected: 弱引用观察者被回收后自动清理
- test_failing_subscriber_isolated: 观察者异常隔离
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from ..models import ProcessingResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """订阅句柄，调用 unsubscribe() 显式注销"""

    def __init__(self, registry: ObserverRegistry, token: int):
        self._registry = registry
        self._token = token
        self._active = True

    @property
    def active(self) -> bool:
        return self._active and self._registry._is_registered(self._token)

    def unsubscribe(self) -> None:
        if self._active:
            self._registry._remove(self._token)
            self._active = False

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class ObserverRegistry(Generic[T]):
    """观察者注册表"""

    def __init__(self, name: str = "observers"):
        self.name = name
        self._observers: dict[int, Callable[[], Callable[[T], None] | None]] = {}
        self._next_token = 0

    def subscribe(self, callback: Callable[[T], None], *, weak: bool = False) -> Subscription:
        """注册观察者，weak=True 时仅持有弱引用"""
        if not callable(callback):
            raise TypeError(f"观察者必须可调用: {callback!r}")

        if weak:
            if hasattr(callback, "__self__") and hasattr(callback, "__func__"):
                ref = weakref.WeakMethod(callback)
            else:
                ref = weakref.ref(callback)
        else:
            ref = _StrongRef(callback)

        token = self._next_token
        self._next_token += 1
        self._observers[token] = ref
        return Subscription(self, token)

    def emit(self, value: T) -> int:
        """广播给当前所有观察者，返回实际送达数量"""
        delivered = 0
        for token, ref in list(self._observers.items()):
            callback = ref()
            if callback is None:
                # 弱引用已被回收
                self._observers.pop(token, None)
                continue
            try:
                callback(value)
                delivered += 1
            except Exception:
                logger.exception(f"[{self.name}] 观察者处理事件失败: {callback!r}")
        return delivered

    def clear(self) -> None:
        self._observers.clear()

    def __len__(self) -> int:
        return sum(1 for ref in self._observers.values() if ref() is not None)

    def _remove(self, token: int) -> None:
        self._observers.pop(token, None)

    def _is_registered(self, token: int) -> bool:
        ref = self._observers.get(token)
        return ref is not None and ref() is not None


class _StrongRef:
    """与 weakref 接口一致的强引用包装"""

    __slots__ = ("_callback",)

    def __init__(self, callback: Callable):
        self._callback = callback

    def __call__(self) -> Callable:
        return self._callback


@dataclass(frozen=True)
class StreamChunk:
    """一段输出（stdout 为进度，stderr 为错误）"""
    run_id: str
    text: str


class RunEvents:
    """单次处理运行的事件源"""

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.progress: ObserverRegistry[StreamChunk] = ObserverRegistry(f"{run_id}:progress")
        self.error: ObserverRegistry[StreamChunk] = ObserverRegistry(f"{run_id}:error")
        self.complete: ObserverRegistry[ProcessingResult] = ObserverRegistry(f"{run_id}:complete")

    def on_progress(self, callback: Callable[[StreamChunk], None], *, weak: bool = False) -> Subscription:
        return self.progress.subscribe(callback, weak=weak)

    def on_error(self, callback: Callable[[StreamChunk], None], *, weak: bool = False) -> Subscription:
        return self.error.subscribe(callback, weak=weak)

    def on_complete(self, callback: Callable[[ProcessingResult], None], *, weak: bool = False) -> Subscription:
        return self.complete.subscribe(callback, weak=weak)

    def close(self) -> None:
        """运行结束后释放全部观察者"""
        self.progress.clear()
        self.error.clear()
        self.complete.clear()
