"""
文法定義（Grammar Specification）

規則・選択肢・各選択肢のアリティ（生成する子ノードの数）を表すデータ構造。
振る舞いは持たず、構築時に構造の検査を行い、照合エンジン（Lark）向けの
EBNFを書き出すだけ。

命名規約は Lark に合わせる:
    小文字の規則 (add_exp) ... 構文規則。項目の間の空白は暗黙にスキップ
    大文字の規則 (NUMBER)  ... 字句規則。1トークンとして照合し、内部の空白は許さない
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from arith.errors import GrammarSpecError

import logging
logger = logging.getLogger(__name__)

SYNTACTIC_NAME = re.compile(r"^[a-z][a-z0-9_]*$")
LEXICAL_NAME = re.compile(r"^[A-Z][A-Z0-9_]*$")


class RuleKind(Enum):
    SYNTACTIC = "syntactic"
    LEXICAL = "lexical"


def rule_kind(name: str) -> RuleKind:
    return RuleKind.LEXICAL if name[:1].isupper() else RuleKind.SYNTACTIC


# ===== 規則本体の項目 =====
@dataclass(frozen=True)
class Ref:
    """他の規則の適用"""
    name: str


@dataclass(frozen=True)
class Lit:
    """リテラル文字列。CSTでは _terminal ノードになる"""
    text: str


@dataclass(frozen=True)
class Pattern:
    """正規表現（字句規則の中だけで使える）"""
    regex: str


@dataclass(frozen=True)
class ListOf:
    """区切り文字で並んだ0個以上の item。CSTでは _iter ノード1つになる"""
    item: str
    separator: str


Item = Union[Ref, Lit, Pattern, ListOf]


class Alt:
    """規則の選択肢。label を付けると独立した規則 <規則名>_<label> に切り出される"""
    __slots__ = ("body", "label")

    def __init__(self, *body: Item, label: Optional[str] = None):
        self.body: Tuple[Item, ...] = tuple(body)
        self.label = label

    @property
    def arity(self) -> int:
        return len(self.body)

    def __repr__(self) -> str:
        suffix = f" -- {self.label}" if self.label else ""
        return f"Alt({', '.join(map(repr, self.body))}){suffix}"


class Rule:
    __slots__ = ("name", "alternatives", "description")

    def __init__(self, name: str, *alternatives: Alt, description: Optional[str] = None):
        self.name = name
        self.alternatives: Tuple[Alt, ...] = tuple(alternatives)
        self.description = description

    @property
    def kind(self) -> RuleKind:
        return rule_kind(self.name)

    @property
    def is_lexical(self) -> bool:
        return self.kind is RuleKind.LEXICAL

    def __repr__(self) -> str:
        return f"Rule({self.name!r}, {len(self.alternatives)} alternatives)"


# ===== 文法 =====
class GrammarSpec:
    """
    検査済みの文法定義

    Args:
        name: 文法名
        version: 文法のバージョン
        rules: 規則の並び（ラベル付き選択肢はここで独立した規則に展開する）
        start: 既定の開始規則（構文規則であること）

    Raises:
        GrammarSpecError: 選択肢のアリティ不一致、規則名の重複、未定義の参照など
    """

    def __init__(self, name: str, version: str, rules: List[Rule], start: str):
        self.name = name
        self.version = version
        self.start = start
        self._rules: Dict[str, Rule] = {}
        self._arity: Dict[str, int] = {}
        self._lists: Dict[Tuple[str, str], str] = {}

        for rule in rules:
            self._add(rule)
        for rule in self._rules.values():
            self._arity[rule.name] = self._check_rule(rule)
        self._collect_lists()

        if start not in self._rules:
            raise GrammarSpecError(f"Start rule '{start}' is not defined")
        if self._rules[start].is_lexical:
            raise GrammarSpecError(f"Start rule '{start}' must be a syntactic rule")
        logger.debug(f"GrammarSpec {name} v{version}: {len(self._rules)} rules")

    # --- 構築 ---
    def _add(self, rule: Rule):
        pattern = LEXICAL_NAME if rule.is_lexical else SYNTACTIC_NAME
        if not pattern.match(rule.name):
            raise GrammarSpecError(f"Invalid {rule.kind.value} rule name '{rule.name}'")
        if rule.name in self._rules:
            raise GrammarSpecError(f"Duplicate declaration for rule '{rule.name}'")
        if not rule.alternatives:
            raise GrammarSpecError(f"Rule '{rule.name}' has no alternatives")

        # インラインの規則宣言: ラベル付きの選択肢を <規則名>_<label> に切り出す
        inlined = []
        alternatives = []
        for alt in rule.alternatives:
            if alt.label is None:
                alternatives.append(alt)
                continue
            if rule.is_lexical:
                raise GrammarSpecError(f"Lexical rule '{rule.name}' cannot have labelled alternatives")
            sub = Rule(f"{rule.name}_{alt.label}", Alt(*alt.body))
            inlined.append(sub)
            alternatives.append(Alt(Ref(sub.name)))

        self._rules[rule.name] = Rule(rule.name, *alternatives, description=rule.description)
        for sub in inlined:
            self._add(sub)

    def _check_rule(self, rule: Rule) -> int:
        if rule.is_lexical:
            for alt in rule.alternatives:
                if not alt.body:
                    raise GrammarSpecError(f"Lexical rule '{rule.name}' has an empty alternative")
                for item in alt.body:
                    if not isinstance(item, (Pattern, Lit)):
                        raise GrammarSpecError(
                            f"Lexical rule '{rule.name}' may only contain patterns and literals, got {item!r}")
            # 字句規則は子を持たず、照合した部分文字列だけを公開する
            return 0

        for alt in rule.alternatives:
            if not alt.body:
                raise GrammarSpecError(
                    f"Rule '{rule.name}' has an empty alternative; use ListOf for optional repetition")
            for item in alt.body:
                if isinstance(item, Pattern):
                    raise GrammarSpecError(
                        f"Syntactic rule '{rule.name}' cannot contain a pattern; declare a lexical rule")
                target = item.name if isinstance(item, Ref) else getattr(item, "item", None)
                if target is not None and target not in self._rules:
                    raise GrammarSpecError(f"Rule '{rule.name}' references undeclared rule '{target}'")
                if isinstance(item, ListOf) and not item.separator:
                    raise GrammarSpecError(f"Rule '{rule.name}' has a ListOf without separator")

        arities = [alt.arity for alt in rule.alternatives]
        if len(set(arities)) != 1:
            raise GrammarSpecError(
                f"Alternatives of rule '{rule.name}' have inconsistent arity: {arities} "
                "(label the alternatives to split them into their own rules)")
        return arities[0]

    def _collect_lists(self):
        for rule in self._rules.values():
            for alt in rule.alternatives:
                for item in alt.body:
                    if isinstance(item, ListOf) and (item.item, item.separator) not in self._lists:
                        name = f"{item.item}_list"
                        n = 2
                        while name in self._rules or name in self._lists.values():
                            name = f"{item.item}_list{n}"
                            n += 1
                        self._lists[(item.item, item.separator)] = name

    # --- 参照 ---
    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __getitem__(self, name: str) -> Rule:
        return self._rules[name]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rule_names(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    @property
    def lexical_names(self) -> Tuple[str, ...]:
        return tuple(name for name, rule in self._rules.items() if rule.is_lexical)

    @property
    def list_rules(self) -> Tuple[str, ...]:
        """ListOf のために生成される補助規則の名前（CSTでは _iter になる）"""
        return tuple(self._lists.values())

    def arity(self, name: str) -> int:
        """規則の生成アリティ"""
        return self._arity[name]

    def description(self, name: str) -> str:
        rule = self._rules.get(name)
        if rule is not None and rule.description:
            return rule.description
        return name

    # --- Lark向けの書き出し ---
    def to_lark(self) -> str:
        """Lark の文法テキストに変換する"""
        lines = [f"// {self.name} grammar v{self.version}"]
        for rule in self._rules.values():
            if rule.is_lexical:
                choices = ["".join(_to_regex(item) for item in alt.body) for alt in rule.alternatives]
                regex = choices[0] if len(choices) == 1 else "(?:" + "|".join(choices) + ")"
                regex = regex.replace("/", "\\/")
                lines.append(f"{rule.name}: /{regex}/")
            else:
                choices = [" ".join(self._to_lark_item(item) for item in alt.body) for alt in rule.alternatives]
                lines.append(f"{rule.name}: " + "\n    | ".join(choices))
        for (item, separator), name in self._lists.items():
            lines.append(f"{name}: ({item} ({_lark_string(separator)} {item})*)?")
        lines.append("%import common.WS")
        lines.append("%ignore WS")
        return "\n".join(lines) + "\n"

    def _to_lark_item(self, item: Item) -> str:
        match item:
            case Ref(name=name):
                return name
            case Lit(text=text):
                return _lark_string(text)
            case ListOf(item=name, separator=separator):
                return self._lists[(name, separator)]
        raise GrammarSpecError(f"Cannot render {item!r}")

    def __repr__(self) -> str:
        return f"<GrammarSpec {self.name} v{self.version} ({len(self._rules)} rules)>"


def _lark_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _to_regex(item: Item) -> str:
    if isinstance(item, Pattern):
        return f"(?:{item.regex})"
    return re.escape(item.text)
