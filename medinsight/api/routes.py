"""
FastAPI 路由定义
"""
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from medinsight.core.config import settings
from medinsight.core.logging import logger
from medinsight.core.exceptions import (
    AnalysisError,
    ConfigurationError,
    InputValidationError,
    MedInsightException
)
from medinsight.schemas.analysis import AnalyzeResponse, ErrorResponse, Modality, UploadedImage


router = APIRouter()


def _parse_modality(value: str) -> Modality:
    try:
        return Modality(value.strip().lower())
    except ValueError:
        raise InputValidationError(
            f"Invalid image type '{value}'. Expected one of: mri, xray."
        )


def validate_upload(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """校验上传文件的 MIME 类型和大小"""
    if not content_type or not content_type.startswith("image/"):
        raise InputValidationError("Invalid file type. Please upload an image file.")
    
    if size > max_bytes:
        raise InputValidationError(
            f"File size too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )


@router.post(
    "/analyze-image",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}
)
async def analyze_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    image_type: Optional[str] = Form(None, alias="type")
):
    """
    上传医学影像并生成解读
    
    - **image**: 图像文件 (MIME 类型需以 image/ 开头，最大 10MB)
    - **type**: 影像模态 (mri 或 xray)
    """
    if image is None or not image_type:
        raise InputValidationError("Missing image or type")
    
    modality = _parse_modality(image_type)
    
    data = await image.read()
    validate_upload(image.content_type, len(data), settings.MAX_UPLOAD_BYTES)
    
    logger.info(
        f"处理图像: fileName={image.filename}, fileType={image.content_type}, "
        f"fileSize={len(data)}, imageType={modality.value}"
    )
    
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise ConfigurationError("Analysis pipeline is not configured. Please check environment variables.")
    
    upload = UploadedImage(
        data=data,
        content_type=image.content_type,
        modality=modality,
        filename=image.filename
    )
    
    try:
        report = await run_in_threadpool(orchestrator.analyze, upload)
    except MedInsightException:
        raise
    except Exception as e:
        logger.exception(f"analyze-image 未知错误: {e}")
        raise AnalysisError(str(e) or "Failed to analyze image")
    
    return AnalyzeResponse(analysis=report.text)
