"""
arith で使う例外の定義

構築時の例外（GrammarSpecError, RegistryError）は設定ミスなので起動前に落とす。
評価時の例外（MatchFailure, EvalError）は呼び出し側に返し、REPLは表示して継続する。
"""
from typing import Optional, Sequence


class ArithError(Exception):
    """arith の例外の基底クラス"""
    pass


# ===== 構築時のエラー =====
class GrammarSpecError(ArithError):
    """文法定義が不正（選択肢のアリティ不一致、規則名の重複など）"""
    pass


class RegistryError(ArithError):
    """意味アクションの登録が文法と一致しない"""
    pass


class UnregisteredRuleError(RegistryError):
    """アクションが登録されていない規則のノードに出会った"""

    def __init__(self, rule_name: str):
        super().__init__(f"No semantic action registered for rule '{rule_name}'")
        self.rule_name = rule_name


# ===== 照合のエラー =====
class MatchFailure(ArithError):
    """入力が開始規則に一致しない"""

    def __init__(
        self,
        position: int,
        expected: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        context: str = ""
    ):
        self.position = position
        self.expected = expected
        self.line = line
        self.column = column
        self.context = context
        super().__init__(self.message)

    @property
    def message(self) -> str:
        where = f"Line {self.line}, col {self.column}" if self.line else f"Position {self.position}"
        text = f"{where}: Expected {self.expected}"
        if self.context:
            text += "\n" + self.context
        return text


# ===== 評価時のエラー =====
class EvalError(ArithError):
    """評価中のエラー。評価はその時点で中断する"""
    pass


class UndefinedNameError(EvalError):
    """名前が環境に束縛されていない"""

    def __init__(self, name: str):
        super().__init__(f"Undefined name '{name}'")
        self.name = name


class NotCallableError(EvalError):
    """関数でない名前を呼び出した"""

    def __init__(self, name: str, kind: str):
        super().__init__(f"'{name}' is a {kind}, not a function")
        self.name = name
        self.kind = kind


class NotAValueError(EvalError):
    """関数の名前を値として参照した"""

    def __init__(self, name: str):
        super().__init__(f"'{name}' is a function; call it with {name}(...)")
        self.name = name


class ArityMismatchError(EvalError):
    """関数呼び出しの引数の数が違う"""

    def __init__(self, name: str, expected: int, actual: int):
        super().__init__(f"{name}() takes {expected} argument(s) but {actual} given")
        self.name = name
        self.expected = expected
        self.actual = actual


class ReadOnlyNameError(EvalError):
    """組み込みの定数・関数への代入（ProtectBuiltins 有効時）"""

    def __init__(self, name: str):
        super().__init__(f"Cannot assign to built-in '{name}'")
        self.name = name


class RecursionLimitError(EvalError):
    """評価の再帰が上限を超えた"""

    def __init__(self, limit: int):
        super().__init__(f"Expression nesting exceeds the evaluation depth limit ({limit})")
        self.limit = limit


def describe_expected(descriptions: Sequence[str]) -> str:
    """期待された構文の説明を "a, b, or c" の形に並べる"""
    items = list(descriptions)
    if not items:
        return "nothing"
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} or {items[1]}"
    return ", ".join(items[:-1]) + ", or " + items[-1]
