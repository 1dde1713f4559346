# src/jsonlingo_core/exceptions.py
"""
本模块定义了 jsonlingo 项目中所有自定义的、语义化的异常类型。

异常分为三类：
- 输入错误（请求结构非法），在创建任务之前即被拒绝；
- 外部依赖错误（翻译引擎、数据库），可以重试；
- 不变量违规（路径无法解析、片段数量不匹配），属于程序缺陷，对当前任务是致命的。
"""


class JsonLingoError(Exception):
    """
    所有 jsonlingo 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """


class ConfigurationError(JsonLingoError):
    """表示在加载、解析或验证配置时发生的错误。"""


class EngineNotFoundError(JsonLingoError, KeyError):
    """
    表示尝试访问一个未注册或不可用的翻译引擎时引发的错误。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """


class DatabaseError(JsonLingoError):
    """表示在持久化层操作中发生的错误，通常是底层驱动异常的包装。"""


class InvalidRequestError(JsonLingoError, ValueError):
    """翻译请求的结构或字段值非法。此类错误不会创建任何任务。"""


class TranslationProviderError(JsonLingoError):
    """
    表示外部翻译服务调用失败。

    Attributes:
        is_retryable: 该失败是否值得在任务级别重试。
    """

    def __init__(self, message: str, *, is_retryable: bool = True):
        super().__init__(message)
        self.is_retryable = is_retryable


class InvariantViolationError(JsonLingoError):
    """程序不变量被破坏。对当前任务而言是致命的，不应重试。"""


class PathResolutionError(InvariantViolationError, LookupError):
    """重建 JSON 时，某个字符串节点的路径已无法解析。"""

    def __init__(self, message: str, *, path: tuple = ()):
        super().__init__(message)
        self.path = path


class FragmentCountMismatchError(InvariantViolationError):
    """模板中的占位符数量与译文片段数量不一致。"""


class UnsupportedJsonTypeError(InvariantViolationError, TypeError):
    """遇到了不属于 JSON 数据模型的值（例如 set、bytes 或任意对象）。"""
