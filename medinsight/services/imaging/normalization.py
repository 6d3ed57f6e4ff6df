"""
像素强度归一化
"""
import numpy as np
from typing import Tuple


def get_intensity_window(image: np.ndarray, percentile: Tuple[float, float] = (1, 99)) -> Tuple[float, float]:
    """
    根据亮度百分位计算拉伸窗口
    
    Args:
        image: 图像数组 (H, W, C) 或 (H, W)
        percentile: 百分位数范围
        
    Returns:
        (lower, upper)
    """
    luminance = image.mean(axis=-1) if image.ndim == 3 else image
    lower, upper = np.percentile(luminance, percentile)
    return float(lower), float(upper)


def stretch_contrast(
    image: np.ndarray,
    percentile: Tuple[float, float] = (1, 99),
    output_range: Tuple[float, float] = (0, 255)
) -> np.ndarray:
    """
    对比度拉伸: 将低/高百分位亮度映射到输出范围两端
    
    Args:
        image: uint8 图像数组
        percentile: 百分位数范围
        output_range: 输出值范围
        
    Returns:
        拉伸后的 uint8 图像
    """
    lower, upper = get_intensity_window(image, percentile)
    
    # 均匀图像无法拉伸，原样返回
    if upper - lower < 1e-6:
        return image.astype(np.uint8)
    
    stretched = np.clip(image.astype(np.float32), lower, upper)
    stretched = (stretched - lower) / (upper - lower)
    stretched = stretched * (output_range[1] - output_range[0]) + output_range[0]
    
    return np.round(stretched).astype(np.uint8)


def rescale_to_uint8(image: np.ndarray) -> np.ndarray:
    """
    将高位深图像 (16 位整数或浮点) 按最小/最大值线性映射到 0..255
    
    Args:
        image: 任意数值类型的图像数组
        
    Returns:
        uint8 图像
    """
    data = image.astype(np.float32)
    lower, upper = float(np.nanmin(data)), float(np.nanmax(data))
    
    if upper - lower < 1e-6:
        return np.zeros(data.shape, dtype=np.uint8)
    
    scaled = (np.nan_to_num(data, nan=lower) - lower) / (upper - lower) * 255.0
    return np.round(scaled).astype(np.uint8)
