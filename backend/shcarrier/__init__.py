"""
SHCarrier 桌面外壳 - 后端核心模块

模块结构：
- config/     运行期配置加载与日志初始化
- models/     数据模型定义（主题/处理请求/处理结果）
- theme/      主题状态与广播
- pipeline/   参数构建/可执行文件定位/进程编排/结果汇报
- adapters/   平台适配（系统主题探测/默认程序打开/文件对话框）
- app.py      UI 层调用的边界门面
"""

__version__ = "0.1.0"
