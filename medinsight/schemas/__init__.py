"""Pydantic 数据模型"""
from .analysis import (
    Modality,
    UploadedImage,
    PreparedImage,
    Prediction,
    ClassificationResult,
    AnalysisReport,
    AnalyzeResponse,
    ErrorResponse
)
