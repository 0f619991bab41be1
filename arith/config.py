"""
システム設定の管理

config.ini の [ENV] セクションから読み込む。ファイルが無ければ既定値を使う。

    [ENV]
    Echo = "Yes"
    Log = "No"
    MaxDepth = 1000
    ProtectBuiltins = "No"
    Style = "paraiso-dark"
"""
import configparser
import os

from rich.console import Console

from arith.environment import Environment, standard_environment
from arith.semantics import DEFAULT_MAX_DEPTH

import logging
logger = logging.getLogger(__name__)

console = Console()


# ===== 定数定義 =====
class Constants:
    """定数クラス"""
    CONFIG_FILE = "config.ini"
    SECTION = "ENV"

    DEFAULT_ECHO = "Yes"
    DEFAULT_LOG = "No"
    DEFAULT_MAX_DEPTH = DEFAULT_MAX_DEPTH
    DEFAULT_PROTECT = "No"
    DEFAULT_STYLE = "paraiso-dark"

    MAX_DEPTH_LIMIT = 5000      # 深すぎる入れ子は RecursionLimitError になる

    """エラーメッセージ"""
    ERR_MAX_DEPTH = f"MaxDepthは1から{MAX_DEPTH_LIMIT}の整数で指定してください。"
    ERR_BOOLEAN = "Yes/No (on/off, true/false, 1/0) で指定してください。"
    ERR_UNKNOWN = "設定項目がありません: "


def to_yes_no(value) -> str:
    s_val = str(value).strip('"').lower()
    if s_val in ["0", "off", "false", "no"]:
        return "No"
    if s_val in ["1", "on", "true", "yes"]:
        return "Yes"
    raise AttributeError(Constants.ERR_BOOLEAN)


def boolean_setter(key_name: str):
    """
    1/0, on/off, true/false, yes/no を Yes/No に変換するデコレータ
    """
    def decorator(func):
        def wrapper(self, value):
            self.env[key_name] = to_yes_no(value)
            return f"{key_name} mode: {self.env.get(key_name)}"
        wrapper.__doc__ = func.__doc__
        return wrapper
    return decorator


# ===== システム設定管理クラス =====
class ArithConfig:
    """システム設定管理クラス"""

    def __init__(self):
        self.env = {
            "Echo"  : Constants.DEFAULT_ECHO,
            "Log"   : Constants.DEFAULT_LOG,
            "MaxDepth" : Constants.DEFAULT_MAX_DEPTH,
            "ProtectBuiltins" : Constants.DEFAULT_PROTECT,
            "Style" : Constants.DEFAULT_STYLE,
        }

    @classmethod
    def load(cls, path: str = Constants.CONFIG_FILE) -> "ArithConfig":
        """config.ini を読み込む。無い項目は既定値のまま"""
        config = cls()
        if not os.path.exists(path):
            logger.debug(f"{path} not found, using defaults")
            return config

        ini = configparser.ConfigParser()
        ini.optionxform = str   # キーの大文字小文字を保つ
        ini.read(path, encoding="utf-8")
        if not ini.has_section(Constants.SECTION):
            return config

        for key, value in ini[Constants.SECTION].items():
            config.set(key, value.strip('"'))
        logger.debug(f"loaded {path}: {config.env}")
        return config

    def set(self, name: str, value) -> str:
        """set_<name> を呼び出す"""
        setter = getattr(self, f"set_{name}", None)
        if setter is None or name not in self.env:
            raise AttributeError(Constants.ERR_UNKNOWN + name)
        return setter(value)

    @boolean_setter("Echo")
    def set_Echo(self, value):
        """結果の表示を設定"""
        pass

    @boolean_setter("Log")
    def set_Log(self, value):
        """ログモードを設定"""
        pass

    @boolean_setter("ProtectBuiltins")
    def set_ProtectBuiltins(self, value):
        """組み込みの定数・関数への代入を禁止するか"""
        pass

    def set_MaxDepth(self, value) -> str:
        """評価の再帰の深さの上限を設定"""
        try:
            depth = int(value)
        except (TypeError, ValueError):
            raise AttributeError(Constants.ERR_MAX_DEPTH) from None
        if 1 <= depth <= Constants.MAX_DEPTH_LIMIT:
            self.env["MaxDepth"] = depth
            return f"MaxDepth: {depth}"
        raise AttributeError(Constants.ERR_MAX_DEPTH)

    def set_Style(self, value) -> str:
        """入力ハイライトの配色 (pygments のスタイル名)"""
        self.env["Style"] = str(value).strip('"')
        return f"Style: {self.env['Style']}"

    @property
    def echo(self) -> bool:
        return self.env["Echo"] == "Yes"

    @property
    def protect_builtins(self) -> bool:
        return self.env["ProtectBuiltins"] == "Yes"

    def new_environment(self) -> Environment:
        return standard_environment(protect_builtins=self.protect_builtins)

    def apply_log_mode(self):
        """Log の設定をルートロガーに反映する"""
        log_mode = self.env["Log"]
        if log_mode == "Yes":
            logging.getLogger().setLevel(logging.DEBUG)
        else:
            logging.getLogger().setLevel(logging.CRITICAL)
