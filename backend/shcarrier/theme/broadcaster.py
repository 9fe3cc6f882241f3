"""
主题广播 - 三态主题偏好与变更通知

职责：
1. 持有进程内唯一的主题偏好（system/light/dark），初始为 system
2. system 偏好通过系统主题探测解析为实际深浅色
3. 每次设置都向所有当前观察者广播实际深色状态（即发即弃，不回放）

测试要点：
- test_set_preference: 设置偏好并返回实际状态
- test_toggle_twice: 连续切换两次回到原状态
- test_broadcast_once_per_change: 每次变更恰好广播一次
- test_late_subscriber_no_replay: 迟到的观察者不会收到历史事件
"""

from __future__ import annotations

import logging
from typing import Callable

from ..adapters import SystemThemeProbe
from ..interfaces import IOSThemeProbe
from ..models import ThemePreference
from ..pipeline.events import ObserverRegistry, Subscription

logger = logging.getLogger(__name__)


def _mode_name(is_dark: bool) -> str:
    return "Dark" if is_dark else "Light"


class ThemeState:
    """主题状态（单写多读）"""

    def __init__(
        self,
        probe: IOSThemeProbe | None = None,
        initial: ThemePreference = ThemePreference.SYSTEM,
    ):
        self._probe = probe or SystemThemeProbe()
        self._preference = ThemePreference(initial)
        self._observers: ObserverRegistry[bool] = ObserverRegistry("theme")

    @property
    def preference(self) -> ThemePreference:
        return self._preference

    def get_effective(self) -> bool:
        """当前实际是否为深色（无副作用）"""
        if self._preference == ThemePreference.DARK:
            return True
        if self._preference == ThemePreference.LIGHT:
            return False
        return self._probe.is_dark()

    def set_preference(self, preference: ThemePreference | str) -> bool:
        """设置偏好，广播并返回实际深色状态"""
        preference = ThemePreference(preference)
        previous = self._preference
        self._preference = preference

        is_dark = self.get_effective()
        logger.info(
            f"[Theme] {previous.value} -> {preference.value}，当前模式: {_mode_name(is_dark)}"
        )
        self._observers.emit(is_dark)
        return is_dark

    def toggle(self) -> bool:
        """在 light/dark 间切换（以当前实际状态为准，不会回到 system）"""
        target = ThemePreference.LIGHT if self.get_effective() else ThemePreference.DARK
        return self.set_preference(target)

    def reset_to_system(self) -> None:
        """恢复跟随系统（仍然广播）"""
        self.set_preference(ThemePreference.SYSTEM)

    def subscribe(self, callback: Callable[[bool], None], *, weak: bool = False) -> Subscription:
        """订阅主题变更（参数为实际深色状态）"""
        return self._observers.subscribe(callback, weak=weak)
