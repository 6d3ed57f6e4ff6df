"""Services - 预处理, 分类, 报告合成"""
from .imaging import ImagePreprocessor
from .classification import ClassificationClient
from .report import DISCLAIMER, compose_report
