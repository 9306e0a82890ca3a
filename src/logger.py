"""
Console logging wrapper
Prints [info]/[warn] tagged lines; set DISABLE_LOGGING to silence output
"""

import os

from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()


def _enabled():
    return not os.environ.get('DISABLE_LOGGING')


def log(msg):
    """Print an informational message"""
    if _enabled():
        print(f"[{Fore.CYAN}info{Style.RESET_ALL}] {msg}")


def warn(msg):
    """Print a warning message"""
    if _enabled():
        print(f"[{Fore.YELLOW}warn{Style.RESET_ALL}] {msg}")
