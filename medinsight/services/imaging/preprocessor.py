"""
图像预处理服务
将任意上传图像转换为分类模型所需的固定尺寸 JPEG
"""
import io
import warnings
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from medinsight.core.config import settings
from medinsight.core.logging import logger
from medinsight.core.exceptions import ImageDecodeError, InputValidationError
from medinsight.schemas.analysis import PreparedImage
from .normalization import rescale_to_uint8, stretch_contrast

# 高位深模式 (16 位整数、32 位整数、浮点)
HIGH_DEPTH_MODES = ("I", "F")


class ImagePreprocessor:
    """图像预处理器"""
    
    def __init__(
        self,
        size: Optional[int] = None,
        normalize: Optional[bool] = None,
        quality: Optional[int] = None
    ):
        """
        初始化预处理器
        
        Args:
            size: 输出边长 (默认 settings.IMAGE_SIZE)
            normalize: 是否进行对比度拉伸
            quality: JPEG 质量
        """
        self.size = size or settings.IMAGE_SIZE
        self.normalize = settings.IMAGE_NORMALIZE if normalize is None else normalize
        self.quality = quality or settings.JPEG_QUALITY
    
    def prepare(self, data: bytes, content_type: str) -> PreparedImage:
        """
        解码、缩放、归一化并重新编码图像
        
        Args:
            data: 原始图像字节
            content_type: 声明的 MIME 类型
            
        Returns:
            PreparedImage
        """
        if not content_type or not content_type.startswith("image/"):
            raise InputValidationError("Invalid file type. Please upload an image file.")
        
        image = self._decode(data)
        logger.debug(f"原始图像: {image.size[0]}x{image.size[1]}, mode={image.mode}")
        
        image = self._to_8bit(image)
        
        # 不保持宽高比，直接拉伸到目标尺寸
        image = image.convert("RGB").resize((self.size, self.size), Image.Resampling.BILINEAR)
        
        if self.normalize:
            image = Image.fromarray(stretch_contrast(np.asarray(image)))
        
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=self.quality)
        
        logger.info(f"图像预处理完成: {self.size}x{self.size} JPEG, {buffer.tell()} 字节")
        
        return PreparedImage(
            data=buffer.getvalue(),
            width=self.size,
            height=self.size
        )
    
    def _decode(self, data: bytes) -> Image.Image:
        if not data:
            raise ImageDecodeError("Uploaded image is empty")
        try:
            # 超出像素上限的图像一律视为无法解码
            with warnings.catch_warnings():
                warnings.simplefilter("error", Image.DecompressionBombWarning)
                image = Image.open(io.BytesIO(data))
                image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            Image.DecompressionBombWarning,
            OSError,
            ValueError
        ) as e:
            logger.error(f"图像解码失败: {e}")
            raise ImageDecodeError(f"Unable to decode image: {e}") from e
        return image
    
    def _to_8bit(self, image: Image.Image) -> Image.Image:
        """16 位 / 浮点图像先按全位深映射到 8 位灰度，避免 convert 截断"""
        if image.mode not in HIGH_DEPTH_MODES and not image.mode.startswith("I;16"):
            return image
        logger.debug(f"高位深图像 ({image.mode})，按全范围映射到 8 位")
        return Image.fromarray(rescale_to_uint8(np.asarray(image)))
