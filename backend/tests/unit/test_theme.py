"""
主题广播单元测试

每个模块完成后必须运行：pytest tests/unit/test_theme.py -v
"""

import pytest

from shcarrier.adapters import StaticThemeProbe
from shcarrier.models import ThemePreference
from shcarrier.theme import ThemeState


@pytest.fixture
def probe() -> StaticThemeProbe:
    return StaticThemeProbe(dark=False)


@pytest.fixture
def theme(probe: StaticThemeProbe) -> ThemeState:
    return ThemeState(probe)


class TestThemeState:
    """主题状态测试"""

    def test_initial_system(self, theme: ThemeState):
        """测试初始偏好为 system"""
        assert theme.preference == ThemePreference.SYSTEM
        assert theme.get_effective() is False

    def test_system_follows_os(self, theme: ThemeState, probe: StaticThemeProbe):
        """测试 system 偏好跟随系统"""
        probe.dark = True
        assert theme.get_effective() is True
        probe.dark = False
        assert theme.get_effective() is False

    def test_set_preference(self, theme: ThemeState, probe: StaticThemeProbe):
        """测试设置偏好并返回实际状态"""
        probe.dark = True
        assert theme.set_preference(ThemePreference.LIGHT) is False
        assert theme.set_preference("dark") is True
        assert theme.preference == ThemePreference.DARK

    def test_invalid_preference(self, theme: ThemeState):
        with pytest.raises(ValueError):
            theme.set_preference("sepia")

    def test_toggle_never_system(self, theme: ThemeState, probe: StaticThemeProbe):
        """测试切换基于实际状态，且不会回到 system"""
        probe.dark = True
        assert theme.toggle() is False
        assert theme.preference == ThemePreference.LIGHT
        assert theme.toggle() is True
        assert theme.preference == ThemePreference.DARK

    def test_toggle_twice(self, theme: ThemeState):
        """测试连续切换两次回到原状态"""
        original = theme.get_effective()
        theme.toggle()
        assert theme.toggle() == original

    def test_reset_to_system(self, theme: ThemeState, probe: StaticThemeProbe):
        theme.set_preference(ThemePreference.DARK)
        theme.reset_to_system()
        assert theme.preference == ThemePreference.SYSTEM
        assert theme.get_effective() is probe.dark


class TestThemeBroadcast:
    """主题广播测试"""

    def test_broadcast_once_per_change(self, theme: ThemeState):
        """测试每次切换恰好广播一次给全部观察者"""
        first, second = [], []
        theme.subscribe(first.append)
        theme.subscribe(second.append)

        theme.toggle()
        theme.toggle()

        assert first == [True, False]
        assert second == [True, False]

    def test_reset_still_broadcasts(self, theme: ThemeState, probe: StaticThemeProbe):
        """测试恢复系统主题仍然广播"""
        seen = []
        theme.subscribe(seen.append)
        probe.dark = True
        theme.reset_to_system()
        assert seen == [True]

    def test_same_preference_still_broadcasts(self, theme: ThemeState):
        seen = []
        theme.subscribe(seen.append)
        theme.set_preference(ThemePreference.LIGHT)
        theme.set_preference(ThemePreference.LIGHT)
        assert seen == [False, False]

    def test_late_subscriber_no_replay(self, theme: ThemeState):
        """测试迟到的观察者不会收到历史事件"""
        theme.set_preference(ThemePreference.DARK)
        seen = []
        theme.subscribe(seen.append)
        assert seen == []
        assert theme.get_effective() is True

    def test_unsubscribe(self, theme: ThemeState):
        seen = []
        subscription = theme.subscribe(seen.append)
        theme.toggle()
        subscription.unsubscribe()
        theme.toggle()
        assert seen == [True]
        assert subscription.active is False

    def test_failing_observer_isolated(self, theme: ThemeState):
        """测试观察者异常不影响其他观察者"""
        seen = []

        def broken(is_dark: bool) -> None:
            raise RuntimeError("window closed")

        theme.subscribe(broken)
        theme.subscribe(seen.append)
        assert theme.set_preference(ThemePreference.DARK) is True
        assert seen == [True]
