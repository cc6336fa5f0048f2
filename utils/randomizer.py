import random
from decimal import Decimal, ROUND_CEILING, ROUND_DOWN

from config.constants import AMOUNT_PRECISION


class Randomizer:
    """Утилиты для генерации случайных значений"""

    @staticmethod
    def get_random_interval(min_val: int, max_val: int, rng: random.Random = None) -> int:
        """Случайное целое в [min_val, max_val] включительно"""
        return (rng or random).randint(min_val, max_val)

    @staticmethod
    def has_amount_in_range(min_amount, max_amount, precision: int = AMOUNT_PRECISION) -> bool:
        """В диапазоне есть хотя бы одно положительное число с precision знаками"""
        quantum = Decimal(1).scaleb(-precision)
        lowest = Decimal(str(min_amount)).quantize(quantum, rounding=ROUND_CEILING)
        return quantum <= lowest <= Decimal(str(max_amount))

    @staticmethod
    def get_random_amount(min_amount, max_amount, precision: int = AMOUNT_PRECISION,
                          rng: random.Random = None) -> str:
        """Случайная сумма из диапазона, обрезанная до precision знаков

        Возвращает строку, чтобы дальше переводить в base units без float.
        ValueError, если в диапазоне нет ни одной такой суммы.
        """
        if not Randomizer.has_amount_in_range(min_amount, max_amount, precision):
            raise ValueError(f"Range {min_amount}-{max_amount} has no amount with {precision} decimals")

        low = Decimal(str(min_amount))
        high = Decimal(str(max_amount))
        raw = Decimal(repr((rng or random).uniform(float(low), float(high))))
        quantum = Decimal(1).scaleb(-precision)

        amount = raw.quantize(quantum, rounding=ROUND_DOWN)
        # float-шум не должен выводить за границы диапазона
        if amount < low:
            amount = low.quantize(quantum, rounding=ROUND_CEILING)
        if amount > high:
            amount = high.quantize(quantum, rounding=ROUND_DOWN)

        return format(amount.normalize(), 'f')
