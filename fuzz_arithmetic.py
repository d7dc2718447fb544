import random
import string

from calculator.session import calculate
from calculator.settings import Settings
from calculator.utils import CalculatorError

KEYWORDS = ["sin", "cos", "tg", "ctg", "sqrt", "log", "ln", "pi", "e"]


def eval_my(code: str, settings: Settings) -> str:
    try:
        result = calculate(code, settings)
    except CalculatorError as e:
        return f"error: {e.errmsg}"
    return "" if result is None else result.pretty()


if __name__ == "__main__":
    alphabet = list(string.digits + ".()+-*/^| ") + KEYWORDS

    def generate(length: int) -> str:
        return " ".join(random.choices(alphabet, k=length))

    # any input must either evaluate or fail with CalculatorError, never with something else
    while True:
        code = generate(random.randint(1, 12))
        settings = Settings(precision=random.choice([None, 1, 2, 5]))
        try:
            eval_my(code, settings)
        except Exception as e:
            print(f"{code!r} (precision {settings.precision})\n{type(e).__name__}: {e}\n\n")
