# lingua_sync/core/exceptions.py
"""
本模块定义了 lingua-sync 项目中所有自定义的、语义化的异常类型。

同步引擎按“批次”隔离失败：单个批次的传输或解析错误只会让该批次失败，
由上层聚合为运行级计数。只有少数异常（如 NoTargetsError、
MissingCollaboratorError）会在任何网络调用之前直接中止整次运行。
"""

from __future__ import annotations


class LinguaSyncError(Exception):
    """
    所有 lingua-sync 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """


class ConfigurationError(LinguaSyncError):
    """表示在加载、解析或验证配置时发生的错误。"""


class DatabaseError(LinguaSyncError):
    """
    表示在持久化层操作（如数据库连接、查询）中发生的错误。
    通常是底层 SQLAlchemy 异常的包装。
    """


class InvalidLocaleError(LinguaSyncError, ValueError):
    """
    传入键派生函数的语言代码格式不正确。
    只对当前这一次调用是致命的，不影响整次运行。
    继承自 ValueError 以保持与参数校验错误一致的捕获方式。
    """


class TransportError(LinguaSyncError):
    """
    网络层失败：连接错误、超时，或远端返回了非 2xx 状态码。

    push 阶段不会在同一批次内自动重试；pull 阶段只会在下一次轮询中重试。
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(LinguaSyncError):
    """远端返回的负载无法解码为结构化数据（与 HTTP 状态码无关）。"""


class NoTargetsError(LinguaSyncError):
    """无法从配置或参数中解析出任何目标语言。在发起任何网络调用之前中止。"""


class MissingCollaboratorError(LinguaSyncError):
    """
    必需的外部协作者不存在，例如本地字符串存储的表结构或数据库驱动。
    在启动阶段即为致命错误。
    """
