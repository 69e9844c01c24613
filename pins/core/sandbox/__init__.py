"""Sandbox for the Script directive."""

from pins.core.sandbox.sandbox import SAFE_BUILTINS, ScriptSandbox, parse_script

__all__ = ["SAFE_BUILTINS", "ScriptSandbox", "parse_script"]
