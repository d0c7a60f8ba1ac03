# classorder/utils/errors.py

from fastapi import HTTPException, status


class OrderValidationError(HTTPException):
    def __init__(self, detail: str = "Missing required fields"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class CapacityExceededError(HTTPException):
    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"선택하신 일정의 잔여 인원이 부족합니다. (남은 자리: {remaining}명)",
        )


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class OrderNotFoundError(HTTPException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


class StoreError(HTTPException):
    """Ошибка хранилища. Подробности только в логе."""
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class NotificationError(Exception):
    """Сбой канала уведомлений. Клиенту не отдаётся, только в лог."""
    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(f"{channel}: {message}")
