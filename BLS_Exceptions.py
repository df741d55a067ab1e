"""
BLS Signature Exceptions
BN128 BLS簽名系統使用的例外類別
"""


class BLSError(Exception):
    """所有BLS錯誤的基底類別"""


class EngineInitializationError(BLSError):
    """曲線引擎初始化失敗，無法繼續"""


class RandomGenerationError(BLSError):
    """安全隨機來源失敗，或無法產生質數私鑰"""


class InvalidEncodingError(BLSError, ValueError):
    """十六進位字串格式錯誤"""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"invalid `{field}`: {value!r} is not a base-16 string")


class InvalidPointError(BLSError, ValueError):
    """座標不是合法的群元素"""


class AggregationInputError(BLSError, ValueError):
    """聚合輸入的長度不一致"""


class EmptyInputError(BLSError, ValueError):
    """聚合輸入為空"""
