"""
式の評価のテスト（優先順位・結合性・代入・関数呼び出し・エラー）

使用方法:
    python -m pytest arith/test_interpreter.py -v
"""
import math
import unittest

from arith.environment import standard_environment
from arith.errors import (
    ArityMismatchError,
    MatchFailure,
    NotAValueError,
    NotCallableError,
    RecursionLimitError,
    UndefinedNameError,
)
from arith.interpreter import evaluate, interpreter_for, run
from arith.printer import parenthesize


class TestPrecedence(unittest.TestCase):
    """優先順位と結合性"""

    def setUp(self):
        self.env = standard_environment()

    def test_precedence(self):
        self.assertEqual(evaluate("1+2*3", self.env), 7)
        self.assertEqual(evaluate("(1+2)*3", self.env), 9)
        self.assertEqual(evaluate("2*3^2", self.env), 18)

    def test_left_associativity(self):
        self.assertEqual(evaluate("10-3-2", self.env), 5)
        self.assertEqual(evaluate("64/4/2", self.env), 8)

    def test_right_associativity(self):
        self.assertEqual(evaluate("2^3^2", self.env), 512)

    def test_unary(self):
        self.assertEqual(evaluate("-3", self.env), -3)
        self.assertEqual(evaluate("--3", self.env), 3)
        self.assertEqual(evaluate("+-+3", self.env), -3)
        self.assertEqual(evaluate("2^-1", self.env), 0.5)
        # 単項演算子は ^ より強く結合する
        self.assertEqual(evaluate("-2^2", self.env), 4)

    def test_whitespace(self):
        self.assertEqual(evaluate(" ( 1 + 2 ) * 3 ", self.env), evaluate("(1+2)*3", self.env))
        self.assertEqual(evaluate("\t1\n+\n2", self.env), 3)

    def test_numbers(self):
        self.assertEqual(evaluate("1.5 + .5", self.env), 2)
        self.assertIsInstance(evaluate("1", self.env), float)


class TestIEEE(unittest.TestCase):
    """数値の特殊な場合はエラーではなく値になる"""

    def setUp(self):
        self.env = standard_environment()

    def test_division_by_zero(self):
        self.assertEqual(evaluate("1/0", self.env), math.inf)
        self.assertEqual(evaluate("-1/0", self.env), -math.inf)
        self.assertTrue(math.isnan(evaluate("0/0", self.env)))

    def test_overflow(self):
        self.assertEqual(evaluate("10^400", self.env), math.inf)

    def test_domain(self):
        self.assertTrue(math.isnan(evaluate("sqrt(-1)", self.env)))
        self.assertTrue(math.isnan(evaluate("(-8)^(1/3)", self.env)))
        self.assertEqual(evaluate("ln(0)", self.env), -math.inf)


class TestEnvironmentUse(unittest.TestCase):

    def setUp(self):
        self.env = standard_environment()

    def test_assignment_persists(self):
        self.assertEqual(evaluate("x=5", self.env), 5)
        self.assertEqual(evaluate("x+1", self.env), 6)

    def test_assignment_value(self):
        """代入は式で、代入した値が式の値になる"""
        self.assertEqual(evaluate("(y = 2) * 10", self.env), 20)
        self.assertEqual(self.env.value("y"), 2)

    def test_constant(self):
        self.assertAlmostEqual(evaluate("pi", self.env), math.pi)
        self.assertAlmostEqual(evaluate("2 * pi", self.env), evaluate("tau", self.env))

    def test_idempotence(self):
        first = evaluate("sin(pi / 4) ^ 2 + e", self.env)
        second = evaluate("sin(pi / 4) ^ 2 + e", self.env)
        self.assertEqual(first, second)

    def test_calls(self):
        self.assertAlmostEqual(evaluate("sqrt(16) + atan2(0, 1)", self.env), 4)
        self.assertEqual(evaluate("max(1, min(5, 3))", self.env), 3)
        self.assertEqual(evaluate("hypot(3, 4) ^ 2", self.env), 25)

    def test_arguments_left_to_right(self):
        self.assertEqual(evaluate("max(a = 1, a + 1)", self.env), 2)

    def test_arity_mismatch(self):
        with self.assertRaises(ArityMismatchError):
            evaluate("atan2(1)", self.env)
        with self.assertRaises(ArityMismatchError):
            evaluate("sin()", self.env)

    def test_arity_checked_before_arguments(self):
        """引数の数の検査は引数の評価より先に行う"""
        with self.assertRaises(ArityMismatchError):
            evaluate("sin(z = 3, 4)", self.env)
        self.assertNotIn("z", self.env)

    def test_undefined_name(self):
        with self.assertRaises(UndefinedNameError):
            evaluate("foo(1)", self.env)
        with self.assertRaises(UndefinedNameError):
            evaluate("foo + 1", self.env)

    def test_not_callable(self):
        with self.assertRaises(NotCallableError):
            evaluate("pi(2)", self.env)

    def test_function_as_value(self):
        with self.assertRaises(NotAValueError):
            evaluate("sin + 1", self.env)

    def test_syntax_error(self):
        with self.assertRaises(MatchFailure):
            evaluate("1 +", self.env)
        with self.assertRaises(MatchFailure):
            evaluate("1; 2", self.env)

    def test_recursion_limit(self):
        nested = "(" * 100 + "1" + ")" * 100
        with self.assertRaises(RecursionLimitError):
            evaluate(nested, self.env, max_depth=50)
        self.assertEqual(evaluate(nested, self.env), 1)

    def test_pathological_nesting(self):
        """既定の上限を超える入れ子は RecursionLimitError になり、落ちない"""
        nested = "(" * 3000 + "1" + ")" * 3000
        with self.assertRaises(RecursionLimitError):
            evaluate(nested, self.env)
        # 失敗の後も同じ環境で評価を続けられる
        self.assertEqual(evaluate("1 + 1", self.env), 2)

    def test_long_flat_sum(self):
        """入れ子のない長い式は深さの上限に数えない"""
        self.assertEqual(evaluate("+".join(["1"] * 500), self.env), 500)
        self.assertEqual(evaluate("*".join(["1"] * 500), self.env), 1)
        self.assertEqual(run("; ".join(["x = 1"] * 500), self.env), 1)

    def test_interpreter_is_reused(self):
        self.assertIs(interpreter_for(50), interpreter_for(50))
        self.assertIsNot(interpreter_for(50), interpreter_for(60))
        with self.assertRaises(RecursionLimitError):
            evaluate("(" * 100 + "1" + ")" * 100, self.env, max_depth=50)
        # 深さのカウンタは失敗の後も 0 に戻る
        self.assertEqual(interpreter_for(50)._depth, 0)
        self.assertEqual(evaluate("((1))", self.env, max_depth=50), 1)

    def test_shallow_nesting(self):
        self.assertEqual(evaluate("((((1))))", self.env), 1)


class TestRun(unittest.TestCase):
    """; で区切った複数の式"""

    def setUp(self):
        self.env = standard_environment()

    def test_sequence(self):
        self.assertEqual(run("x = 2; y = x * 3; y + 1", self.env), 7)
        self.assertEqual(self.env.variables(), {"x": 2, "y": 6})

    def test_module_examples(self):
        """interpreter モジュールの説明にある例"""
        import arith.interpreter
        self.assertIn("evaluate", arith.interpreter.__doc__)
        self.assertEqual(evaluate("1 + 2 * 3", self.env), 7.0)
        self.assertEqual(run("x = 2; y = x ^ 10", self.env), 1024.0)

    def test_empty(self):
        self.assertIsNone(run("", self.env))
        self.assertIsNone(run("   ", self.env))

    def test_partial_mutation_is_kept(self):
        """途中で失敗しても、それまでの代入は巻き戻さない"""
        with self.assertRaises(UndefinedNameError):
            run("a = 1; b = zz; c = 3", self.env)
        self.assertEqual(self.env.value("a"), 1)
        self.assertNotIn("b", self.env)
        self.assertNotIn("c", self.env)


class TestParenthesize(unittest.TestCase):

    def test_grouping(self):
        self.assertEqual(parenthesize("2^3^2"), "(2 ^ (3 ^ 2))")
        self.assertEqual(parenthesize("10-3-2"), "((10 - 3) - 2)")
        self.assertEqual(parenthesize("1+2*3"), "(1 + (2 * 3))")
        self.assertEqual(parenthesize("(1+2)*3"), "((1 + 2) * 3)")

    def test_other_forms(self):
        self.assertEqual(parenthesize("x = -f(1, 2+3)"), "x = (-f(1, (2 + 3)))")
        self.assertEqual(parenthesize("1;2"), "1; 2")


if __name__ == "__main__":
    unittest.main()
