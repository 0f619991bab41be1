from arith.environment import BindingKind, Environment

help_help = [
        "\n" + "="*30,
        "【入力形式のガイド】",
        "  計算 : 1 + 2 * 3",
        "  代入 : x = 5",
        "  呼出 : atan2(1, 2)",
        "  並び : x = 2; y = x ^ 10; y / 3",
        "",
        "演算子の優先順位は ( ) > 単項 + - > ^ > * / > + - です。",
        "^ は右結合、それ以外は左結合です。 例：2^3^2 = 512",
        "parse <式> で括弧の付き方を確認できます。",
        "",
        "vars で変数の一覧、help functions で組み込み関数の一覧を表示します。",
        "名前はTabキーで文字入力補完機能が使えます。",

        "- 終了するには 'exit' または 'quit' と入力してください。",
        "="*30 + "\n",
        "コマンド一覧:",
        " vars  parse  set  reset  help  exit"
]


command_help = {
    "set":      "設定を変更するコマンド\n" \
                "設定例: arith> set Echo off\n" \
                "      : arith> set MaxDepth 100\n" \
                "設定項目: Echo Log MaxDepth ProtectBuiltins Style",
    "constants": "組み込み定数: pi e tau inf nan",
    "errors":   "0での割り算はエラーになりません。 1/0 = inf, 0/0 = nan",
}


def function_help(env: Environment) -> str:
    """環境に登録された関数の一覧"""
    lines = ["組み込み関数:"]
    for binding in env.bindings():
        if binding.kind is BindingKind.FUNCTION:
            params = ", ".join(f"x{i + 1}" for i in range(binding.arity))
            lines.append(f"  {binding.name}({params})\t{binding.doc}")
    return "\n".join(lines)
