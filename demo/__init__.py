"""
Demonstration driver for the xc220b3 secure channel.
"""

from .driver import ChannelDemo, DemoReport, run_demo, tamper_with, flip_byte

__all__ = [
    'ChannelDemo',
    'DemoReport',
    'run_demo',
    'tamper_with',
    'flip_byte'
]
