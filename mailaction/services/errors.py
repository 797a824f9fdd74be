from typing import Optional


class PayloadValidationError(Exception):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class MailboxNotFoundError(Exception):
    def __init__(self, detail: str = "Invalid mailbox"):
        self.detail = detail
        super().__init__(detail)


class BackendError(Exception):
    def __init__(
        self, detail: str, code: Optional[str] = None, status_code: int = 500
    ):
        self.detail = detail
        self.code = code
        self.status_code = status_code
        super().__init__(detail)
