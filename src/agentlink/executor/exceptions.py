"""Executor 异常体系

执行方抛出的任何异常都会在 RequestHandler 边界被转换为 internal error，
已存储的 Task 保持不变。
"""

from agentlink.core.exceptions import UnsupportedOperationError


class ExecutorError(Exception):
    """Executor 包基础异常，消息只写入日志，不返回给调用方"""


class CatalogUnreachableError(ExecutorError):
    """外部商品目录不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, catalog_url: str, original_error: Exception) -> None:
        """
        Args:
            catalog_url: 尝试连接的目录地址
            original_error: 原始异常
        """
        super().__init__(f"Catalog unreachable: {catalog_url} -- {original_error}")
        self.catalog_url = catalog_url
        self.original_error = original_error


class CatalogPayloadError(ExecutorError):
    """目录返回了无法解析的内容"""

    def __init__(self, message: str = "Catalog returned an unexpected payload") -> None:
        super().__init__(message)


__all__ = [
    "ExecutorError",
    "CatalogUnreachableError",
    "CatalogPayloadError",
    "UnsupportedOperationError",
]
