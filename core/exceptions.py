class SwapError(Exception):
    """Базовая ошибка свапа"""


class InvalidTokenSpec(SwapError):
    """Некорректные данные пользовательского токена (не ретраится)"""


class UnknownToken(SwapError):
    """Символ отсутствует в реестре токенов"""


class TokenProbeFailed(SwapError):
    """Контракт не отвечает как ERC20 или decimals не совпадают"""


class QuoteUnavailable(SwapError):
    """Нет пула / getAmountsOut ревертнулся"""


class ApprovalFailed(SwapError):
    """Approve не отправлен или ревертнулся"""


class FeeDataUnavailable(SwapError):
    """В снимке комиссий нет нужных полей"""


class SubmissionFailed(SwapError):
    """Провайдер отклонил транзакцию"""


class TransactionTimeout(SubmissionFailed):
    """Не дождались receipt за отведенное время"""


class TransactionReverted(SwapError):
    """Транзакция попала в блок со status != 1"""

    def __init__(self, message: str, tx_hash: str = None):
        super().__init__(message)
        self.tx_hash = tx_hash
