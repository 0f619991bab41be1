import logging # ログの設定
logger =  logging.getLogger(__name__)

# 基幹部分のインポート
import cmd
from typing import Optional

# プロジェクト内のクラスのインポート
from arith.config import ArithConfig, console
from arith.completer import arith_completer
from arith.environment import BindingKind
from arith.errors import ArithError, MatchFailure
from arith.helptext import command_help, function_help, help_help
from arith.highlight import ArithLexer
from arith.interpreter import run
from arith.printer import parenthesize

# 以下、見栄えを改善するための外部システムのインポート

# 入力中のコマンドにシンタックスハイライト
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.styles.pygments import style_from_pygments_cls
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


def format_value(value: float) -> str:
    """整数値は小数点なしで表示する"""
    if value == value and abs(value) < 1e16 and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class ArithShell(cmd.Cmd):
    ## ここでHelpの見出しをカスタマイズ
    misc_header = "その他のガイド・解説:"
    doc_header = "実行可能なコマンド一覧:"
    undoc_header = "ヘルプ未作成のコマンド:"

    # prompt_toolkitで使うためのHTMLタグ付きプロンプト
    colored_prompt = HTML('<ansicyan>arith</ansicyan><ansigray>></ansigray> ')

    intro_text = """
[bold magenta]arith 数式インタプリタ[/bold magenta] [dim]Arithmetic grammar v1.0[/dim]

    [cyan]Type 'help' for commands, 'exit' to quit.[/cyan]
    """
    prompt = "arith> "

    def __init__(self, config: Optional[ArithConfig] = None, out: Optional[Console] = None):
        super().__init__()
        self.config = config or ArithConfig.load()
        self.console = out or console
        self.env = self.config.new_environment()
        self.session = None

    def _style(self):
        try:
            return style_from_pygments_cls(get_style_by_name(self.config.env["Style"]))
        except ClassNotFound:
            logger.warning(f"unknown pygments style {self.config.env['Style']}")
            return None

    def cmdloop(self, intro=None):
        # 標準のイントロ表示をスキップし、Richで表示
        self.console.print(Panel(self.intro_text, border_style="blue"))

        # 入力ハイライト用のセッション
        self.session = PromptSession(
                lexer=PygmentsLexer(ArithLexer),                # シンタックスハイライト
                completer=arith_completer(lambda: self.env),    # 補完機能
                style=self._style()                             # 入力のハイライト
        )

        stop = None
        while not stop:
            try:
                text = self.session.prompt(self.colored_prompt, reserve_space_for_menu=0)
            except EOFError:
                break
            except KeyboardInterrupt:
                continue
            if text.strip():
                stop = self.onecmd(text)

    def emptyline(self):
        # 何もしないように上書き（これがないと直前のコマンドが走る）
        logger.debug("emptyline")

    def default(self, line):
        logger.debug(f"default: line={line}")
        if not line.strip():
            return
        self.config.apply_log_mode()
        try:
            result = run(line, self.env, max_depth=self.config.env["MaxDepth"])
            logger.info(result)
            if result is not None and self.config.echo:
                self.console.print(format_value(result))

        except MatchFailure as e:
            self.console.print(f"Syntax Error: {e.message}", markup=False, highlight=False)

        except ArithError as e:
            # 途中までの代入は環境に残っている
            self.console.print(f"Error: {e}", markup=False, highlight=False)

    # --- 環境の操作 ---
    def do_vars(self, arg):
        """vars [all] : 変数の一覧（all で組み込みも表示）"""
        table = Table(title="束縛の一覧")
        table.add_column("名前", style="cyan")
        table.add_column("種類")
        table.add_column("値", justify="right")
        for binding in self.env.bindings():
            if binding.kind is not BindingKind.VARIABLE and arg.strip() != "all":
                continue
            match binding.kind:
                case BindingKind.FUNCTION:
                    value = f"arity {binding.arity}"
                case _:
                    value = format_value(binding.value)
            table.add_row(binding.name, binding.kind.value, value)
        self.console.print(table)

    def do_reset(self, arg):
        """reset : 変数をすべて消して環境を初期化する"""
        self.env = self.config.new_environment()
        self.console.print("環境を初期化しました")

    def do_parse(self, arg):
        """parse <式> : 優先順位と結合性に従って括弧を付けて表示する"""
        try:
            self.console.print(parenthesize(arg), markup=False, highlight=False)
        except MatchFailure as e:
            self.console.print(f"Syntax Error: {e.message}", markup=False, highlight=False)

    def do_set(self, arg):
        """set <設定項目> <値> : 設定を変更する"""
        parts = arg.split()
        if len(parts) != 2:
            self.console.print(command_help["set"])
            return
        try:
            self.console.print(self.config.set(*parts))
        except AttributeError as e:
            self.console.print(f"Error: {e}", markup=False)
            return
        self.env.protect_builtins = self.config.protect_builtins

    # --- シェル制御コマンド ---
    def do_exit(self, arg):
        """exit : 終了する"""
        self.console.print("arithを終了します")
        return True # Trueを返すとループが終了する

    def do_quit(self, arg):
        """quit : 終了する"""
        return True

    # EOF (Ctrl+D) での終了対応
    def do_EOF(self, arg):
        print()
        return True

    def do_help(self, arg):
        """
        help と打つとガイドとコマンド一覧、help [コマンド名] で詳細を表示します。
        help functions で組み込み関数の一覧を表示します。
        """
        if not arg:
            self.console.print("\n".join(help_help), markup=False)
        elif arg == "functions":
            self.console.print(function_help(self.env), markup=False)
            return
        elif arg in command_help:
            self.console.print(command_help[arg], markup=False)
            return

        # 親クラスの help 処理をそのまま呼び出す
        return cmd.Cmd.do_help(self, arg)


def main():
    logging.basicConfig(
        level=logging.WARNING, # 出力レベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        ArithShell().cmdloop()
    except KeyboardInterrupt:
        # Ctrl+C での強制終了をきれいに処理
        print("\nGoodbye.")


if __name__ == "__main__":
    main()
