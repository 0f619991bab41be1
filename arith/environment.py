"""
環境（シンボル表）

名前から束縛（定数・変数・関数）への対応。評価のたびに明示的に渡す。
スレッド安全ではないので、複数スレッドで共有する場合は呼び出し側で直列化すること。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Dict, Iterator, List, Optional, Sequence, Union

import numpy as np

from arith.errors import (
    ArityMismatchError,
    NotAValueError,
    NotCallableError,
    ReadOnlyNameError,
    UndefinedNameError,
)

import logging
logger = logging.getLogger(__name__)


class BindingKind(Enum):
    CONSTANT = "constant"
    VARIABLE = "variable"
    FUNCTION = "function"


# ===== 束縛 =====
@dataclass(frozen=True)
class Constant:
    name: str
    value: float
    kind: ClassVar[BindingKind] = BindingKind.CONSTANT


@dataclass(frozen=True)
class Variable:
    name: str
    value: float
    kind: ClassVar[BindingKind] = BindingKind.VARIABLE


@dataclass(frozen=True)
class Function:
    """ホスト側で実装された固定アリティの数値関数"""
    name: str
    arity: int
    impl: Callable = field(compare=False)
    doc: str = ""
    kind: ClassVar[BindingKind] = BindingKind.FUNCTION

    def __call__(self, *args: float) -> float:
        return self.impl(*args)


Binding = Union[Constant, Variable, Function]


class Environment:
    """
    評価セッションの環境

    Args:
        bindings: 初期の束縛
        protect_builtins: True なら初期の定数・関数への代入を ReadOnlyNameError にする。
            False（既定）なら代入で変数に置き換わる（警告ログを出す）
    """

    def __init__(self, bindings: Optional[Sequence[Binding]] = None, protect_builtins: bool = False):
        self._bindings: Dict[str, Binding] = {}
        self.protect_builtins = protect_builtins
        for binding in bindings or ():
            self._bindings[binding.name] = binding
        self._builtins = {name for name, b in self._bindings.items() if b.kind is not BindingKind.VARIABLE}

    # --- 定義 ---
    def define_constant(self, name: str, value: float) -> Constant:
        binding = Constant(name, np.float64(value))
        self._bindings[name] = binding
        self._builtins.add(name)
        return binding

    def define_function(self, name: str, arity: int, impl: Callable, doc: str = "") -> Function:
        if arity < 0:
            raise ValueError(f"arity of {name} must be non-negative")
        binding = Function(name, arity, impl, doc)
        self._bindings[name] = binding
        self._builtins.add(name)
        return binding

    # --- 参照 ---
    def lookup(self, name: str) -> Optional[Binding]:
        return self._bindings.get(name)

    def value(self, name: str) -> float:
        """名前の値。未定義なら UndefinedNameError、関数なら NotAValueError"""
        binding = self._bindings.get(name)
        if binding is None:
            raise UndefinedNameError(name)
        if binding.kind is BindingKind.FUNCTION:
            raise NotAValueError(name)
        return binding.value

    def function(self, name: str, argc: int) -> Function:
        """呼び出せる関数を解決する。引数はまだ評価しない"""
        binding = self._bindings.get(name)
        if binding is None:
            raise UndefinedNameError(name)
        if binding.kind is not BindingKind.FUNCTION:
            raise NotCallableError(name, binding.kind.value)
        if argc != binding.arity:
            raise ArityMismatchError(name, binding.arity, argc)
        return binding

    # --- 変更 ---
    def assign(self, name: str, value: float) -> float:
        """変数として束縛する（新規作成または上書き）。代入した値を返す"""
        current = self._bindings.get(name)
        if current is not None and current.kind is not BindingKind.VARIABLE:
            if self.protect_builtins and name in self._builtins:
                raise ReadOnlyNameError(name)
            logger.warning(f"assignment to '{name}' shadows a built-in {current.kind.value}")
        self._bindings[name] = Variable(name, value)
        logger.debug(f"assign {name} = {value}")
        return value

    def call(self, name: str, args: Sequence[float]) -> float:
        return self.function(name, len(args))(*args)

    def unset(self, name: str) -> None:
        if name not in self._bindings:
            raise UndefinedNameError(name)
        del self._bindings[name]

    # --- 一覧 ---
    def variables(self) -> Dict[str, float]:
        return {name: b.value for name, b in self._bindings.items() if b.kind is BindingKind.VARIABLE}

    def bindings(self) -> List[Binding]:
        return list(self._bindings.values())

    def copy(self) -> "Environment":
        env = Environment(protect_builtins=self.protect_builtins)
        env._bindings = dict(self._bindings)
        env._builtins = set(self._builtins)
        return env

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"<Environment {len(self._bindings)} bindings, {len(self.variables())} variables>"


# ===== 組み込み =====
CONSTANTS = {
    "pi": np.pi,
    "e": np.e,
    "tau": 2 * np.pi,
    "inf": np.inf,
    "nan": np.nan,
}

# name: (arity, 実装, 説明)
FUNCTIONS = {
    "sin":   (1, np.sin, "正弦"),
    "cos":   (1, np.cos, "余弦"),
    "tan":   (1, np.tan, "正接"),
    "asin":  (1, np.arcsin, "逆正弦"),
    "acos":  (1, np.arccos, "逆余弦"),
    "atan":  (1, np.arctan, "逆正接"),
    "sinh":  (1, np.sinh, "双曲線正弦"),
    "cosh":  (1, np.cosh, "双曲線余弦"),
    "tanh":  (1, np.tanh, "双曲線正接"),
    "sqrt":  (1, np.sqrt, "平方根"),
    "exp":   (1, np.exp, "指数関数"),
    "ln":    (1, np.log, "自然対数"),
    "log10": (1, np.log10, "常用対数"),
    "log2":  (1, np.log2, "2を底とする対数"),
    "abs":   (1, np.fabs, "絶対値"),
    "floor": (1, np.floor, "床関数"),
    "ceil":  (1, np.ceil, "天井関数"),
    "round": (1, np.rint, "最も近い整数（偶数丸め）"),
    "sign":  (1, np.sign, "符号"),
    "atan2": (2, np.arctan2, "atan2(y, x) 象限を考慮した逆正接"),
    "hypot": (2, np.hypot, "hypot(x, y) 斜辺の長さ"),
    "pow":   (2, np.power, "pow(x, y) べき乗"),
    "min":   (2, np.fmin, "min(x, y) 小さい方"),
    "max":   (2, np.fmax, "max(x, y) 大きい方"),
    "mod":   (2, np.fmod, "mod(x, y) 剰余（符号は x に従う）"),
    "log":   (2, lambda base, x: np.log(x) / np.log(base), "log(base, x) 任意の底の対数"),
}


def standard_environment(protect_builtins: bool = False) -> Environment:
    """組み込みの定数と関数を入れた環境を作る"""
    env = Environment(protect_builtins=protect_builtins)
    for name, value in CONSTANTS.items():
        env.define_constant(name, value)
    for name, (arity, impl, doc) in FUNCTIONS.items():
        env.define_function(name, arity, impl, doc)
    return env
