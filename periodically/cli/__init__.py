"""
命令行工具模块
"""

from periodically.cli.main import main

__all__ = ["main"]
