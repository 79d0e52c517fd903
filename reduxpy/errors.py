"""
ReduxPy 錯誤處理模組。

所有錯誤都是同步拋出的描述性異常，核心不會自行捕捉，
而是直接傳遞給違反呼叫約定的呼叫者。
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ReduxPyError(Exception):
    """所有 ReduxPy 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        轉換為可記錄的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        return self.message


class ValidationError(ReduxPyError, TypeError):
    """參數驗證錯誤，例如傳入不可呼叫的 reducer 或 listener。"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        expected_type: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        details = {
            "field": field,
            "value_type": type(value).__name__,
            "expected_type": expected_type,
        }
        details.update(kwargs)
        super().__init__(message, details)
        self.field = field
        self.value = value
        self.expected_type = expected_type


class ActionError(ValidationError):
    """與 Action 格式相關的錯誤。"""

    def __init__(self, message: str, action: Any = None, **kwargs: Any) -> None:
        if isinstance(action, Mapping):
            action_type = action.get("type")
        else:
            action_type = getattr(action, "type", None)
        super().__init__(
            message,
            field="action",
            value=action,
            expected_type="Action | Mapping",
            action_type=action_type,
            **kwargs
        )
        self.action = action


class StoreError(ReduxPyError, RuntimeError):
    """在錯誤的時機呼叫 Store 操作，例如 reducer 執行中讀取狀態。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
        self.operation = operation


class MiddlewareError(StoreError):
    """中介軟體尚在建構時就嘗試 dispatch。"""

    def __init__(self, message: str, middleware_name: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, operation="dispatch", middleware_name=middleware_name, **kwargs)
        self.middleware_name = middleware_name


def _get_file_logger(log_file: str) -> logging.Logger:
    # 同一路徑共用一個 logger，避免重複掛 handler
    file_logger = logging.getLogger(f"{__name__}.file:{log_file}")
    file_logger.propagate = False
    if not file_logger.handlers:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        file_logger.addHandler(file_handler)
    return file_logger


class ErrorHandler:
    """
    集中式錯誤處理器，負責日誌記錄並轉發給已註冊的處理函數。

    ErrorHandler 只負責回報，不會吞掉異常；呼叫端在回報後應自行重新拋出。
    """

    def __init__(
        self,
        log_to_console: bool = True,
        log_to_file: bool = False,
        log_file: Optional[str] = None,
    ) -> None:
        """
        初始化錯誤處理器。

        Args:
            log_to_console: 是否透過 logging 輸出錯誤
            log_to_file: 是否額外寫入日誌檔
            log_file: 日誌檔路徑，log_to_file 為 True 時必填
        """
        if log_to_file and not log_file:
            raise ValidationError(
                "log_file is required when log_to_file is enabled.",
                field="log_file",
                value=log_file,
                expected_type="str",
            )
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[ReduxPyError], None]] = []
        self._file_logger: Optional[logging.Logger] = None
        if log_to_file:
            self._file_logger = _get_file_logger(log_file)

    def register_handler(self, handler: Callable[[ReduxPyError], None]) -> None:
        """
        註冊錯誤回調。

        Args:
            handler: 接收 ReduxPyError 的函數
        """
        if not callable(handler):
            raise ValidationError(
                "Expected the error handler to be a function.",
                field="handler",
                value=handler,
                expected_type="callable",
            )
        self.handlers.append(handler)

    def unregister_handler(self, handler: Callable[[ReduxPyError], None]) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def handle(self, error: Union[ReduxPyError, Exception]) -> ReduxPyError:
        """
        記錄錯誤並通知所有處理函數。

        非 ReduxPyError 的異常會被包裝成 ReduxPyError 後再轉發，
        原始異常保存在 `__cause__`。

        Args:
            error: 要回報的異常

        Returns:
            轉發給處理函數的 ReduxPyError
        """
        if isinstance(error, ReduxPyError):
            wrapped = error
        else:
            wrapped = ReduxPyError(
                str(error), {"original_type": error.__class__.__name__}
            )
            wrapped.__cause__ = error

        if self.log_to_console:
            logger.error("%s: %s", wrapped.__class__.__name__, wrapped.to_dict())
        if self._file_logger is not None:
            self._file_logger.error("%s: %s", wrapped.__class__.__name__, wrapped.to_dict())

        for handler in list(self.handlers):
            handler(wrapped)
        return wrapped

    def close(self) -> None:
        """
        關閉日誌檔的 FileHandler，之後不再寫入檔案。

        同一路徑的 logger 為共用，關閉後其他指向同一檔案的 ErrorHandler 也會停止寫入。
        """
        if self._file_logger is None:
            return
        for file_handler in list(self._file_logger.handlers):
            self._file_logger.removeHandler(file_handler)
            file_handler.close()
        self._file_logger = None


# 單例錯誤處理器
global_error_handler = ErrorHandler()
