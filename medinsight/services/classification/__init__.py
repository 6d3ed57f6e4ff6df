"""远程图像分类"""
from .client import ClassificationClient
