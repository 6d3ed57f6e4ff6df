"""MedInsight - 医学影像 AI 解读服务"""

__version__ = "1.0.0"
