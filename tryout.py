from calculator.parser import parse, pretty_print
from calculator.runtime import evaluate
from calculator.settings import Settings
from calculator.tokenizer import tokenize
from calculator.utils import CalculatorError

for code, settings in [
    ("5", Settings()),
    ("-1", Settings()),
    ("1 + 1", Settings()),
    ("2 * 3 + 4", Settings()),
    ("10 / 2", Settings()),
    ("|1 - 5|", Settings()),
    ("sin pi", Settings()),
    ("ctg 1", Settings()),
    ("log 2 8", Settings()),
    ("sqrt(16) ^ 2", Settings()),
    ("1.005 + 1.005", Settings(precision=2)),
    ("10 / 3", Settings(precision=4)),
    ("10 / 0", Settings()),
    ("(1 + 2", Settings()),
    ("foo 1", Settings()),
]:
    print("=" * 10)
    print(f"code: {code!r}, precision: {settings.precision}")
    try:
        tokens = tokenize(code)
        print(f"tokens: {' '.join(str(t) for t in tokens)}")

        expressions = parse(tokens, settings)
        expressions_str = "\n".join(f" {i + 1:> 2}: {pretty_print(expr)}" for i, expr in enumerate(expressions))
        print(f"ast:\n{expressions_str}")

        results = evaluate(expressions, settings)
    except CalculatorError as e:
        print(e)
        continue
    results_str = "\n".join(f" {i + 1:> 2}: {res!r} -> {res.pretty()}" for i, res in enumerate(results))
    print(f"expression results:\n{results_str}")
