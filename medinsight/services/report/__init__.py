"""报告合成"""
from .composer import DISCLAIMER, build_summary, compose_report
