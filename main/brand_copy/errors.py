from __future__ import annotations


class BatchCopyError(ValueError):
    """Fatal validation failure; the whole batch is abandoned."""

    default_message = "복사 요청이 올바르지 않습니다."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnknownBrandCode(BatchCopyError):
    default_message = "유효하지 않은 브랜드 코드입니다."

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"{self.default_message} ({code!r})")


class NoSourceRecords(BatchCopyError):
    default_message = "복사할 원본이 없습니다."


class NoTargetBrands(BatchCopyError):
    default_message = "대상 브랜드를 하나 이상 선택해주세요."


class StaleRevisionError(RuntimeError):
    def __init__(self, key: str, expected: int, actual: int):
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Collection {key!r} changed during write (expected revision {expected}, found {actual})."
        )
